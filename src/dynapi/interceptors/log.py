"""Logging interceptors for the request, response and error stages."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from dynapi.client.request import RequestEnvelope
from dynapi.exceptions import ClientError
from dynapi.models import APIResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoggingOptions:
    """What to log and at which level.

    ``level`` defaults to ``INFO`` for requests and responses and to
    ``ERROR`` for errors when left as ``None``.
    """

    log_requests: bool = True
    log_responses: bool = True
    log_errors: bool = True
    level: Optional[int] = None


def request_logging_interceptor(
    options: Optional[LoggingOptions] = None,
    log: logging.Logger = logger,
) -> Callable[[RequestEnvelope], RequestEnvelope]:
    """Return a request interceptor that logs method, path and payload."""
    options = options or LoggingOptions()
    level = options.level if options.level is not None else logging.INFO

    def _log_request(envelope: RequestEnvelope) -> RequestEnvelope:
        if options.log_requests:
            log.log(
                level,
                "API request: %s %s data=%r params=%r headers=%r",
                envelope.method, envelope.url, envelope.data,
                envelope.params, envelope.headers,
            )
        return envelope

    return _log_request


def response_logging_interceptor(
    options: Optional[LoggingOptions] = None,
    log: logging.Logger = logger,
) -> Callable[[APIResponse, Any], APIResponse]:
    """Return a response interceptor that logs the normalized response."""
    options = options or LoggingOptions()
    level = options.level if options.level is not None else logging.INFO

    def _log_response(response: APIResponse, envelope: Any = None) -> APIResponse:
        if options.log_responses:
            log.log(
                level,
                "API response %s: success=%s data=%r error=%r",
                getattr(envelope, "url", ""), response.success,
                response.data, response.error,
            )
        return response

    return _log_response


def error_logging_interceptor(
    options: Optional[LoggingOptions] = None,
    log: logging.Logger = logger,
) -> Callable[[ClientError, Any], None]:
    """Return an error interceptor that logs the final :class:`ClientError`."""
    options = options or LoggingOptions()
    level = options.level if options.level is not None else logging.ERROR

    def _log_error(error: ClientError, envelope: Any = None) -> None:
        if options.log_errors:
            log.log(
                level,
                "API error on %s: %s (type=%s, original=%r)",
                getattr(envelope, "url", ""), error.message,
                error.type.value, error.original_error,
            )

    return _log_error
