"""Transport contract and the default httpx implementation.

The pipeline talks to the network only through :class:`Transport`.  A
transport raises on network failure; any HTTP status, including 4xx/5xx,
is a valid :class:`TransportResponse`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

import httpx


@dataclass
class TransportRequest:
    """A fully built request ready to send.

    ``timeout`` of ``None`` means no transport-level timeout.
    """

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    content: Optional[str] = None
    data: dict[str, str] = field(default_factory=dict)
    files: list[tuple[str, Any]] = field(default_factory=list)
    timeout: Optional[float] = None


@dataclass
class TransportResponse:
    """Status, headers and raw body of a completed HTTP exchange."""

    status: int
    status_text: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    content: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        """Decode the body as JSON.

        Raises:
            ValueError: If the body is not valid JSON.
        """
        return json.loads(self.content)


class Transport(Protocol):
    """Anything that can send a :class:`TransportRequest`."""

    async def send(self, request: TransportRequest) -> TransportResponse: ...

    async def aclose(self) -> None: ...


class HttpxTransport:
    """:class:`Transport` backed by :class:`httpx.AsyncClient`.

    Args:
        client: An existing client to send through.  When omitted, one is
            created with *verify_ssl* and *follow_redirects*.
        verify_ssl: Verify SSL certificates.
        follow_redirects: Follow HTTP redirects.

    Example::

        transport = HttpxTransport(httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        response = await transport.send(TransportRequest("GET", "https://api.test/users"))
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        verify_ssl: bool = True,
        follow_redirects: bool = True,
    ) -> None:
        self._client = client or httpx.AsyncClient(
            verify=verify_ssl,
            follow_redirects=follow_redirects,
        )

    async def send(self, request: TransportRequest) -> TransportResponse:
        kwargs: dict[str, Any] = {
            "method": request.method,
            "url": request.url,
            "headers": request.headers,
            "timeout": request.timeout,
        }
        if request.files:
            kwargs["data"] = request.data
            kwargs["files"] = request.files
        elif request.content is not None:
            kwargs["content"] = request.content

        response = await self._client.request(**kwargs)
        return TransportResponse(
            status=response.status_code,
            status_text=response.reason_phrase or "",
            headers=dict(response.headers),
            content=response.content,
        )

    async def aclose(self) -> None:
        await self._client.aclose()
