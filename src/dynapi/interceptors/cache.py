"""In-memory response caching for GET requests.

:class:`CacheInterceptor` records successful GET responses through its
response interceptor and serves them to callers through :meth:`lookup`.
Entries expire after ``ttl`` seconds; when ``max_size`` is reached the
oldest entry is evicted.  Nothing is written to disk.

Cache keys are SHA-256 hashes of ``METHOD|path|sorted_params`` so that
identical requests resolve to the same entry regardless of parameter
order.
"""

from __future__ import annotations

import hashlib
import json
import logging
import time
from collections import OrderedDict
from typing import Any, Callable, Optional

from dynapi.client.request import RequestEnvelope
from dynapi.models import APIResponse

logger = logging.getLogger(__name__)

DEFAULT_TTL = 300.0
DEFAULT_MAX_SIZE = 100

CacheKeyFn = Callable[[RequestEnvelope], str]


def default_cache_key(envelope: RequestEnvelope) -> str:
    """Generate a cache key from method, path and sorted params."""
    parts = [(envelope.method or "GET").upper(), envelope.url]
    if envelope.params:
        parts.append(json.dumps(envelope.params, sort_keys=True, default=str))
    return hashlib.sha256("|".join(parts).encode()).hexdigest()


class CacheInterceptor:
    """TTL cache of successful GET responses.

    Args:
        ttl: Seconds an entry stays valid.
        max_size: Maximum number of entries kept.
        key_fn: Builds the cache key from a request envelope.
        clock: Time source, in seconds.

    Example::

        cache = CacheInterceptor(ttl=60)
        client.interceptors.add_request_interceptor(cache.request_interceptor)
        client.interceptors.add_response_interceptor(cache.response_interceptor)

        hit = cache.lookup(RequestEnvelope(method="GET", url="/users/list"))
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL,
        max_size: int = DEFAULT_MAX_SIZE,
        key_fn: Optional[CacheKeyFn] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl
        self._max_size = max_size
        self._key_fn = key_fn or default_cache_key
        self._clock = clock
        self._entries: OrderedDict[str, tuple[float, APIResponse]] = OrderedDict()

    # ------------------------------------------------------------------ #
    # Interceptors
    # ------------------------------------------------------------------ #

    def request_interceptor(self, envelope: RequestEnvelope) -> RequestEnvelope:
        """Log cache hits; the request is always sent."""
        if self._is_get(envelope) and self.lookup(envelope) is not None:
            logger.debug("Cache hit for %s", envelope.url)
        return envelope

    def response_interceptor(
        self, response: APIResponse, envelope: Optional[RequestEnvelope] = None
    ) -> APIResponse:
        """Store *response* when it answers a successful GET."""
        if envelope is None or not self._is_get(envelope) or not response.success:
            return response
        key = self._key_fn(envelope)
        self._entries.pop(key, None)
        while len(self._entries) >= self._max_size:
            self._entries.popitem(last=False)
        self._entries[key] = (self._clock(), response)
        logger.debug("Cached response for %s", envelope.url)
        return response

    # ------------------------------------------------------------------ #
    # Cache access
    # ------------------------------------------------------------------ #

    def lookup(self, envelope: RequestEnvelope) -> Optional[APIResponse]:
        """Return the cached response for *envelope*, or ``None``.

        Expired entries are dropped on access.
        """
        key = self._key_fn(envelope)
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, response = entry
        if self._clock() - stored_at >= self._ttl:
            del self._entries[key]
            return None
        return response

    def clear(self) -> None:
        self._entries.clear()

    def get_stats(self) -> dict[str, Any]:
        """Return ``size``, ``max_size`` and ``ttl``."""
        return {"size": len(self._entries), "max_size": self._max_size, "ttl": self._ttl}

    @staticmethod
    def _is_get(envelope: RequestEnvelope) -> bool:
        return (envelope.method or "").upper() == "GET"
