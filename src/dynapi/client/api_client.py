"""Plain asynchronous API client with verb methods.

:class:`APIClient` owns the config, the interceptor registry and the
transport, and sends every request through a
:class:`~dynapi.client.pipeline.RequestPipeline`.
:class:`~dynapi.client.dynamic.DynamicClient` builds attribute routing on top
of it.
"""

from __future__ import annotations

from typing import Any, Optional

from dynapi.client.interceptors import InterceptorManager
from dynapi.client.pipeline import RequestPipeline
from dynapi.client.request import RequestEnvelope
from dynapi.client.transport import HttpxTransport, Transport
from dynapi.models import APIResponse, ClientConfig


class APIClient:
    """Asynchronous HTTP client returning normalized :class:`APIResponse` objects.

    Non-2xx statuses come back with ``success=False``; only transport
    failures raise :class:`~dynapi.exceptions.ClientError`.

    Args:
        config: Client settings.  When omitted, *settings* are passed to
            :class:`~dynapi.models.ClientConfig`.
        transport: Sends built requests.  Defaults to an
            :class:`~dynapi.client.transport.HttpxTransport` owned (and
            closed) by this client.
        **settings: :class:`~dynapi.models.ClientConfig` fields, used when
            *config* is ``None``.

    Example::

        async with APIClient(base_url="https://api.example.com") as client:
            response = await client.get("/users", params={"page": 2})
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        transport: Optional[Transport] = None,
        **settings: Any,
    ) -> None:
        self._config = config if config is not None else ClientConfig(**settings)
        self._interceptors = InterceptorManager()
        self._owns_transport = transport is None
        self._transport: Transport = transport or HttpxTransport(
            verify_ssl=self._config.verify_ssl,
            follow_redirects=self._config.follow_redirects,
        )
        self._pipeline = RequestPipeline(self._config, self._transport, self._interceptors)

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def interceptors(self) -> InterceptorManager:
        """The interceptor registry applied to every request of this client."""
        return self._interceptors

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> APIClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    def destroy(self) -> None:
        """Remove all interceptors.  The transport stays open."""
        self._interceptors.clear_all_interceptors()

    async def aclose(self) -> None:
        """Release interceptors and close the transport if this client created it."""
        self.destroy()
        if self._owns_transport:
            await self._transport.aclose()

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    async def request(self, envelope: RequestEnvelope) -> APIResponse:
        """Execute *envelope* through the pipeline.

        Raises:
            ClientError: On transport failure after the retry policy.
        """
        return await self._pipeline.execute(envelope)

    async def get(self, url: str, **options: Any) -> APIResponse:
        """Send a GET request.

        Args:
            url: Endpoint path appended to ``base_url``.
            **options: :class:`RequestEnvelope` fields such as ``params``,
                ``headers``, ``timeout`` or ``signal``.
        """
        return await self.request(RequestEnvelope(method="GET", url=url, **options))

    async def post(self, url: str, data: Any = None, **options: Any) -> APIResponse:
        return await self.request(RequestEnvelope(method="POST", url=url, data=data, **options))

    async def put(self, url: str, data: Any = None, **options: Any) -> APIResponse:
        return await self.request(RequestEnvelope(method="PUT", url=url, data=data, **options))

    async def patch(self, url: str, data: Any = None, **options: Any) -> APIResponse:
        return await self.request(RequestEnvelope(method="PATCH", url=url, data=data, **options))

    async def delete(self, url: str, **options: Any) -> APIResponse:
        return await self.request(RequestEnvelope(method="DELETE", url=url, **options))
