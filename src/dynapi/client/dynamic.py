"""Dynamic client facade: ``client.users(123).follow()`` instead of URLs.

Attributes that are not part of :class:`~dynapi.client.api_client.APIClient`
resolve to controller routes through a
:class:`~dynapi.routing.engine.RouteEngine`; invoking a route issues the
request through the shared pipeline::

    async with DynamicClient(base_url="https://api.example.com") as client:
        await client.users.getProfile({"userId": 1})          # GET  /users/getProfile
        await client.admin.users.ban({"userId": 456})         # POST /admin/users/ban
        await client.users(123)()                             # GET  /users/123
        await client.invoke("users/123/follow", {"notify": True})
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional, Union

from dynapi.client.api_client import APIClient
from dynapi.client.request import RequestEnvelope
from dynapi.client.transport import Transport
from dynapi.exceptions import InvalidUsageError
from dynapi.models import APIResponse, ClientConfig
from dynapi.routing.cache import RouteCache
from dynapi.routing.engine import (
    ActionHandler,
    ControllerRoute,
    ParameterizedRoute,
    RouteEngine,
    RouteHandle,
    RouteId,
)


class DynamicClient(APIClient):
    """An :class:`APIClient` whose unknown attributes are API controllers.

    Names defined on the class (``get``, ``post``, ``config``, ``cache``,
    ...) keep their meaning; use :meth:`route` or :meth:`invoke` for
    controllers that share one of those names.

    Args:
        config: Client settings, as for :class:`APIClient`.
        transport: Optional transport, as for :class:`APIClient`.
        **settings: :class:`~dynapi.models.ClientConfig` fields.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        *,
        transport: Optional[Transport] = None,
        **settings: Any,
    ) -> None:
        super().__init__(config, transport=transport, **settings)
        self._engine = RouteEngine(self._issue, RouteCache(), self._config.resolver_options)

    def __getattr__(self, name: str) -> ControllerRoute:
        if name.startswith("_"):
            raise AttributeError(name)
        route = self._engine.resolve_controller(name)
        if route is None:
            raise AttributeError(name)
        return route

    async def __aenter__(self) -> DynamicClient:
        return self

    @property
    def cache(self) -> RouteCache:
        """The route cache of this client (``clear_proxy_cache``, ``get_stats``)."""
        return self._engine.cache

    @property
    def engine(self) -> RouteEngine:
        return self._engine

    def route(self, *segments: Union[str, int, float], route_id: Optional[RouteId] = None) -> RouteHandle:
        """Return the handle for an explicit path such as ``"users/123/follow"``.

        See :meth:`~dynapi.routing.engine.RouteEngine.route`.
        """
        return self._engine.route(*segments, route_id=route_id)

    async def invoke(
        self,
        path: str,
        payload: Any = None,
        query: Optional[Mapping[str, Any]] = None,
        *,
        route_id: Optional[RouteId] = None,
        **options: Any,
    ) -> APIResponse:
        """Resolve *path* and issue the request.

        Raises:
            InvalidUsageError: If *path* does not end at an action or a
                resource id.
            ClientError: On transport failure.
        """
        handle = self.route(path, route_id=route_id)
        if not isinstance(handle, (ActionHandler, ParameterizedRoute)):
            raise InvalidUsageError(f"Path {path!r} does not end at an action or resource")
        return await handle(payload, query, **options)

    def destroy(self) -> None:
        """Remove all interceptors and empty the route cache."""
        super().destroy()
        self._engine.cache.clear_proxy_cache()

    async def _issue(
        self,
        endpoint: str,
        payload: Any,
        query: Optional[Mapping[str, Any]],
        method: str,
        **options: Any,
    ) -> APIResponse:
        params = {**(options.pop("params", None) or {}), **dict(query or {})}
        return await self.request(
            RequestEnvelope(
                method=method,
                url=endpoint,
                data=payload,
                params=params,
                **options,
            )
        )
