"""Timing interceptors that measure request duration.

Both helpers return a ``(request, response, error)`` triple of interceptors
sharing state; register all three on the same client.  Start times are keyed
by the ``X-Request-ID`` header carried on the envelope, so the response stage
matches exactly the request it answers, and the error stage discards the
start time of a request that failed.
"""

from __future__ import annotations

import dataclasses
import logging
import time
import uuid
from typing import Any, Callable, Optional

from dynapi.client.request import RequestEnvelope
from dynapi.exceptions import ClientError
from dynapi.models import APIResponse

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

SLOW_REQUEST_THRESHOLD = 1.0
MEDIUM_REQUEST_THRESHOLD = 0.5

InterceptorSet = tuple[
    Callable[[RequestEnvelope], RequestEnvelope],
    Callable[[APIResponse, Any], APIResponse],
    Callable[[ClientError, Any], None],
]


def tag_request(envelope: RequestEnvelope) -> tuple[str, RequestEnvelope]:
    """Return the envelope's request id, adding an ``X-Request-ID`` if missing.

    An id set by an earlier interceptor is reused, so several timing
    interceptors on one client agree on it.
    """
    headers = envelope.headers or {}
    request_id = headers.get(REQUEST_ID_HEADER)
    if request_id:
        return request_id, envelope
    request_id = f"{envelope.method}_{envelope.url}_{uuid.uuid4().hex[:12]}"
    return request_id, dataclasses.replace(
        envelope, headers={**headers, REQUEST_ID_HEADER: request_id}
    )


def _request_id(envelope: Optional[RequestEnvelope]) -> Optional[str]:
    if envelope is None:
        return None
    return (envelope.headers or {}).get(REQUEST_ID_HEADER)


def timing_interceptor(
    log_timing: bool = True,
    level: int = logging.INFO,
    slow_request_threshold: float = SLOW_REQUEST_THRESHOLD,
    clock: Callable[[], float] = time.perf_counter,
    log: logging.Logger = logger,
) -> InterceptorSet:
    """Tag each request with an ``X-Request-ID`` header and log its duration.

    Requests slower than *slow_request_threshold* seconds are logged at
    ``WARNING`` regardless of *level*.
    """
    started: dict[str, float] = {}

    def _start(envelope: RequestEnvelope) -> RequestEnvelope:
        request_id, tagged = tag_request(envelope)
        started[request_id] = clock()
        return tagged

    def _finish(response: APIResponse, envelope: Optional[RequestEnvelope] = None) -> APIResponse:
        request_id = _request_id(envelope)
        start = started.pop(request_id, None) if request_id else None
        if start is None or not log_timing:
            return response
        elapsed = clock() - start
        if elapsed > slow_request_threshold:
            log.warning("Slow request %s took %.3fs", request_id, elapsed)
        else:
            log.log(level, "Request %s completed in %.3fs", request_id, elapsed)
        return response

    def _discard(error: ClientError, envelope: Optional[RequestEnvelope] = None) -> None:
        request_id = _request_id(envelope)
        if request_id:
            started.pop(request_id, None)

    return _start, _finish, _discard


def performance_interceptor(
    clock: Callable[[], float] = time.perf_counter,
    log: logging.Logger = logger,
) -> InterceptorSet:
    """Log how long each request took, graded fast, medium or slow."""
    started: dict[str, float] = {}

    def _start(envelope: RequestEnvelope) -> RequestEnvelope:
        request_id, tagged = tag_request(envelope)
        started[request_id] = clock()
        return tagged

    def _finish(response: APIResponse, envelope: Optional[RequestEnvelope] = None) -> APIResponse:
        request_id = _request_id(envelope)
        start = started.pop(request_id, None) if request_id else None
        if start is None:
            return response
        elapsed = clock() - start
        if elapsed > SLOW_REQUEST_THRESHOLD:
            grade = "slow"
        elif elapsed > MEDIUM_REQUEST_THRESHOLD:
            grade = "medium"
        else:
            grade = "fast"
        log.info("Request took %.2fms (%s)", elapsed * 1000, grade)
        return response

    def _discard(error: ClientError, envelope: Optional[RequestEnvelope] = None) -> None:
        request_id = _request_id(envelope)
        if request_id:
            started.pop(request_id, None)

    return _start, _finish, _discard
