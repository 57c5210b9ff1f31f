"""Request envelope and the merge/header steps of request building.

A :class:`RequestEnvelope` is created for every call and flows through the
request interceptor chain.  :func:`merge_config` fills it from the client's
:class:`~dynapi.models.ClientConfig`; :func:`fill_missing` re-applies the
previous values after each interceptor so an interceptor may return a
partial envelope.
"""

from __future__ import annotations

import asyncio
import dataclasses
import re
from dataclasses import dataclass
from typing import Any, Optional

from dynapi.client.serializer import get_content_type
from dynapi.models import ClientConfig

DEFAULT_METHOD = "GET"

# Header names matching this look like script or event-handler injection.
_SUSPICIOUS_HEADER = re.compile(r"script|eval|^on[a-z]", re.IGNORECASE)
_CONTROL_CHARS = re.compile(r"[\r\n\t]")


@dataclass
class RequestEnvelope:
    """Everything needed to issue one request.

    ``url`` is the endpoint path, not the full URL; the base URL is applied
    by :func:`~dynapi.client.paths.build_url`.  Fields left as ``None`` are
    filled from the client config.

    Attributes:
        method: HTTP method, uppercase.
        url: Endpoint path such as ``/users/123``.
        data: Request payload, serialized as JSON or multipart.
        params: Query parameters.  ``None`` until merged, then a ``dict``.
        headers: Request headers.  Merged over the client's headers.
        timeout: Per-attempt timeout in seconds.
        retries: Retries after the first attempt.
        retry_delay: Base backoff delay in seconds.
        signal: Caller-owned cancellation event.  Setting it aborts the
            current attempt and disables the per-attempt timeout.
    """

    method: Optional[str] = None
    url: str = ""
    data: Any = None
    params: Optional[dict[str, Any]] = None
    headers: Optional[dict[str, str]] = None
    timeout: Optional[float] = None
    retries: Optional[int] = None
    retry_delay: Optional[float] = None
    signal: Optional[asyncio.Event] = None


def merge_config(envelope: RequestEnvelope, config: ClientConfig) -> RequestEnvelope:
    """Return a new envelope with client defaults applied.

    Request headers are merged over the client headers; every other field
    falls back to the config only when unset.
    """
    return dataclasses.replace(
        envelope,
        method=(envelope.method or DEFAULT_METHOD).upper(),
        params=dict(envelope.params or {}),
        headers={**config.headers, **(envelope.headers or {})},
        timeout=envelope.timeout if envelope.timeout is not None else config.timeout,
        retries=envelope.retries if envelope.retries is not None else config.retries,
        retry_delay=(
            envelope.retry_delay if envelope.retry_delay is not None else config.retry_delay
        ),
    )


def fill_missing(envelope: RequestEnvelope, previous: RequestEnvelope) -> RequestEnvelope:
    """Fill unset fields of an interceptor's *envelope* from *previous*.

    Unlike :func:`merge_config`, headers are replaced rather than merged, so
    an interceptor can drop a header by returning a dict without it.
    """
    return dataclasses.replace(
        envelope,
        method=(envelope.method or previous.method or DEFAULT_METHOD).upper(),
        url=envelope.url or previous.url,
        data=envelope.data if envelope.data is not None else previous.data,
        params=envelope.params if envelope.params is not None else previous.params,
        headers=envelope.headers if envelope.headers is not None else previous.headers,
        timeout=envelope.timeout if envelope.timeout is not None else previous.timeout,
        retries=envelope.retries if envelope.retries is not None else previous.retries,
        retry_delay=(
            envelope.retry_delay if envelope.retry_delay is not None else previous.retry_delay
        ),
        signal=envelope.signal if envelope.signal is not None else previous.signal,
    )


def sanitize_headers(headers: Optional[dict[str, str]]) -> dict[str, str]:
    """Drop suspicious or empty headers and strip control characters.

    Example::

        >>> sanitize_headers({"X-Token": "abc\\r\\n", "onload": "x", "X-Empty": ""})
        {'X-Token': 'abc'}
    """
    clean: dict[str, str] = {}
    for name, value in (headers or {}).items():
        if not isinstance(name, str) or _SUSPICIOUS_HEADER.search(name):
            continue
        text = _CONTROL_CHARS.sub("", str(value)).strip()
        if text:
            clean[name] = text
    return clean


def build_headers(headers: Optional[dict[str, str]], data: Any) -> dict[str, str]:
    """Sanitize *headers* and add ``Content-Type`` for JSON payloads.

    Multipart payloads get no content type so httpx can set the boundary;
    a ``Content-Type`` already present (any casing) is kept.
    """
    result = sanitize_headers(headers)
    if data is None:
        return result
    content_type = get_content_type(data)
    if content_type is None:
        return {name: value for name, value in result.items() if name.lower() != "content-type"}
    if not any(name.lower() == "content-type" for name in result):
        result["Content-Type"] = content_type
    return result
