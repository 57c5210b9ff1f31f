"""Ready-made interceptors: logging, timing and an in-memory response cache.

Example::

    setup = create_logging_setup(LoggingOptions(level=logging.DEBUG))
    client.interceptors.add_request_interceptor(setup["request"])
    client.interceptors.add_response_interceptor(setup["response"])
    client.interceptors.add_error_interceptor(setup["error"])
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from dynapi.interceptors.cache import CacheInterceptor, default_cache_key
from dynapi.interceptors.log import (
    LoggingOptions,
    error_logging_interceptor,
    request_logging_interceptor,
    response_logging_interceptor,
)
from dynapi.interceptors.timing import performance_interceptor, timing_interceptor


def create_logging_setup(options: Optional[LoggingOptions] = None) -> dict[str, Callable[..., Any]]:
    """Return ``request``, ``response`` and ``error`` logging interceptors."""
    return {
        "request": request_logging_interceptor(options),
        "response": response_logging_interceptor(options),
        "error": error_logging_interceptor(options),
    }


def create_performance_setup() -> dict[str, Callable[..., Any]]:
    """Return the ``request``, ``response`` and ``error`` interceptors of :func:`performance_interceptor`."""
    request, response, error = performance_interceptor()
    return {"request": request, "response": response, "error": error}


__all__ = [
    "CacheInterceptor",
    "LoggingOptions",
    "create_logging_setup",
    "create_performance_setup",
    "default_cache_key",
    "error_logging_interceptor",
    "performance_interceptor",
    "request_logging_interceptor",
    "response_logging_interceptor",
    "timing_interceptor",
]
