"""Retry policy: error classification, retry decision, backoff delay."""

from __future__ import annotations

import asyncio
import random
from typing import Callable, Optional

import httpx

from dynapi.exceptions import ClientError, ErrorType

MAX_RETRY_DELAY = 30.0
JITTER_FACTOR = 0.1

_RETRYABLE = frozenset({ErrorType.NETWORK, ErrorType.TIMEOUT})


def classify_error(error: BaseException) -> ClientError:
    """Wrap *error* in a :class:`ClientError` with the matching type.

    A :class:`ClientError` is returned unchanged.  Unknown exceptions are
    treated as network failures.
    """
    if isinstance(error, ClientError):
        return error
    if isinstance(error, (httpx.TimeoutException, asyncio.TimeoutError, TimeoutError)):
        return ClientError(str(error) or "Request timed out", ErrorType.TIMEOUT, error)
    if isinstance(error, httpx.DecodingError):
        return ClientError(str(error) or "Failed to decode response", ErrorType.PARSE, error)
    if isinstance(error, (httpx.TransportError, OSError)):
        return ClientError(str(error) or "Network error", ErrorType.NETWORK, error)
    return ClientError(str(error) or "Unknown error", ErrorType.NETWORK, error)


def should_retry(error: ClientError) -> bool:
    """Return ``True`` for network and timeout errors; aborts never retry."""
    return error.type in _RETRYABLE


def backoff_delay(
    attempt: int,
    base_delay: float,
    max_delay: float = MAX_RETRY_DELAY,
    jitter: Optional[Callable[[], float]] = None,
) -> float:
    """Exponential backoff with up to 10% jitter, capped at *max_delay*.

    Args:
        attempt: Zero-based index of the attempt that just failed.
        base_delay: Delay in seconds before the first retry.
        max_delay: Upper bound in seconds.
        jitter: Source of uniform values in ``[0, 1)``.  Defaults to
            :func:`random.random`.

    Returns:
        Seconds to sleep before the next attempt.
    """
    exponential = base_delay * (2 ** attempt)
    return min(exponential + exponential * JITTER_FACTOR * (jitter or random.random)(), max_delay)
