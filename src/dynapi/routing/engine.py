"""Route resolution engine: attribute chains to endpoint paths.

The engine turns an access chain such as ``client.admin.users.ban`` or
``client.users(123).follow`` into a handle bound to one endpoint path.  It is
an explicit state machine over four transitions:

* :meth:`RouteEngine.enter_namespace` -- ``client.users()``
* :meth:`RouteEngine.bind_action` -- ``<handle>.name``
* :meth:`RouteEngine.bind_parameter` -- ``client.users(123)``
* :meth:`RouteEngine.invoke` -- ``<handle>(payload, query)``

Only :meth:`~RouteEngine.invoke` reaches the request issuer; every other
transition is a pure lookup memoized in a :class:`~dynapi.routing.cache.RouteCache`,
so the same path always yields the same handle object::

    Root -> Controller -> ActionNamespace -> Action -> SubAction -> ...
                       -> Parameterized  -> (self-call)
                                         -> Action -> SubAction -> ...

Handles are small classes sharing :class:`RouteHandle`.  Their own state
lives in underscore attributes (``_endpoint``, ``_segments``) in the manner
of :func:`collections.namedtuple`, so that every public-looking attribute name
is free to be an API action.  Attribute access on a handle refuses
underscore-prefixed names; the explicit :meth:`RouteEngine.route` entry point
accepts any valid segment.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Awaitable, Callable, Optional, Union

from dynapi.exceptions import InvalidUsageError
from dynapi.models import MethodResolverOptions
from dynapi.routing.cache import RouteCache, action_key, parameterized_key
from dynapi.routing.method_resolver import determine_method
from dynapi.routing.validator import (
    PATH_SEPARATOR,
    is_valid_action,
    is_valid_controller,
    is_valid_route_id,
)

logger = logging.getLogger(__name__)

RESERVED_METHOD_KEY = "method"
"""Payload key holding an explicit HTTP method; stripped before sending."""

RESOURCE_READ_ACTION = "get"
RESOURCE_WRITE_ACTION = "update"

RouteId = Union[str, int, float]

RequestIssuer = Callable[..., Awaitable[Any]]
"""``issuer(endpoint, payload, query, method, **options)`` -> awaitable response."""


def split_method(payload: Any) -> tuple[Optional[str], Any]:
    """Separate the reserved ``method`` key from *payload*.

    Returns:
        ``(explicit_method, body)``.  *payload* is returned untouched when it
        is not a mapping or has no ``method`` key; otherwise *body* is a new
        ``dict`` without it.
    """
    if isinstance(payload, Mapping) and RESERVED_METHOD_KEY in payload:
        body = {key: value for key, value in payload.items() if key != RESERVED_METHOD_KEY}
        return payload[RESERVED_METHOD_KEY], body
    return None, payload


def _is_id_segment(segment: Any) -> bool:
    if isinstance(segment, bool):
        return False
    if isinstance(segment, (int, float)):
        return True
    return isinstance(segment, str) and segment.isdigit()


# ---------------------------------------------------------------------- #
# Handle variants
# ---------------------------------------------------------------------- #


class RouteHandle:
    """Base class for every object produced by the engine.

    A handle is bound to one endpoint path and is immutable once built.
    Attribute access on a handle delegates to :meth:`_bind`; names the
    handle cannot bind raise :class:`AttributeError`, Python's form of
    "absent".
    """

    __slots__ = ("_engine", "_segments")

    def __init__(self, engine: RouteEngine, segments: tuple[str, ...]) -> None:
        self._engine = engine
        self._segments = segments

    @property
    def _endpoint(self) -> str:
        """The endpoint path, e.g. ``/users/123/follow``."""
        return PATH_SEPARATOR + PATH_SEPARATOR.join(self._segments)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        handle = self._bind(name)
        if handle is None:
            raise AttributeError(name)
        return handle

    def _bind(self, name: str) -> Optional[RouteHandle]:
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._endpoint!r})"


class ActionNamespace(RouteHandle):
    """The view of a controller produced by ``client.users()``.

    Not callable; attribute access yields action handlers.
    """

    __slots__ = ()

    def _bind(self, name: str) -> Optional[RouteHandle]:
        return self._engine.bind_action(self._segments, name)


class ActionHandler(RouteHandle):
    """A callable handle bound to ``/controller/.../action``.

    Calling it issues a request; attribute access appends a sub-action to the
    path, to any depth.  The HTTP method is inferred from the deepest action
    name, the last path segment.
    """

    __slots__ = ()

    @property
    def _action(self) -> str:
        return self._segments[-1]

    def __call__(
        self,
        payload: Any = None,
        query: Optional[Mapping[str, Any]] = None,
        **options: Any,
    ) -> Awaitable[Any]:
        return self._engine.invoke(self._segments, self._action, payload, query, **options)

    def _bind(self, name: str) -> Optional[RouteHandle]:
        return self._engine.bind_action(self._segments, name)


class ParameterizedRoute(RouteHandle):
    """A handle bound to ``/controller/<id>``.

    Calling it directly reads the resource when the payload is empty and
    updates it otherwise (an explicit ``method`` in the payload wins).
    Attribute access yields ``/controller/<id>/action`` handlers.
    """

    __slots__ = ()

    def __call__(
        self,
        payload: Any = None,
        query: Optional[Mapping[str, Any]] = None,
        **options: Any,
    ) -> Awaitable[Any]:
        action = RESOURCE_WRITE_ACTION if payload else RESOURCE_READ_ACTION
        return self._engine.invoke(self._segments, action, payload, query, **options)

    def _bind(self, name: str) -> Optional[RouteHandle]:
        return self._engine.bind_action(self._segments, name)


class ControllerRoute(RouteHandle):
    """The handle for ``client.<controller>``.

    Traversable (``client.users.list``) and callable: with an id it yields a
    :class:`ParameterizedRoute`, without one an :class:`ActionNamespace`.
    """

    __slots__ = ()

    @property
    def _controller(self) -> str:
        return self._segments[0]

    def __call__(self, route_id: Optional[RouteId] = None) -> RouteHandle:
        if route_id is None:
            return self._engine.enter_namespace(self._controller)
        return self._engine.bind_parameter(self._controller, route_id)

    def _bind(self, name: str) -> Optional[RouteHandle]:
        return self._engine.bind_action(self._segments, name)


# ---------------------------------------------------------------------- #
# Engine
# ---------------------------------------------------------------------- #


class RouteEngine:
    """Builds, memoizes and invokes route handles for one client.

    Args:
        issuer: Called as ``issuer(endpoint, payload, query, method,
            **options)`` when a handle is invoked.  Usually the bound request
            method of a :class:`~dynapi.client.dynamic.DynamicClient`.
        cache: Memo table for handles.  A fresh one is created when omitted.
        options: Method-inference options.

    Example::

        engine = RouteEngine(issuer)
        handle = engine.resolve_action("users", "getProfile")
        handle._endpoint                    # "/users/getProfile"
        await handle({"userId": 1})         # GET /users/getProfile
    """

    def __init__(
        self,
        issuer: RequestIssuer,
        cache: Optional[RouteCache] = None,
        options: Optional[MethodResolverOptions] = None,
    ) -> None:
        self._issuer = issuer
        self._cache = cache if cache is not None else RouteCache()
        self._options = options or MethodResolverOptions()

    @property
    def cache(self) -> RouteCache:
        return self._cache

    @property
    def options(self) -> MethodResolverOptions:
        return self._options

    # ------------------------------------------------------------------ #
    # Transitions
    # ------------------------------------------------------------------ #

    def resolve_controller(self, name: str) -> Optional[ControllerRoute]:
        """Return the cached controller handle for *name*, building it once.

        Reserved names resolve to ``None``.
        """
        if not is_valid_action(name):
            return None
        route = self._cache.get_route(name)
        if route is None:
            route = ControllerRoute(self, (name,))
            self._cache.set_route(name, route)
        return route

    def enter_namespace(self, controller: str) -> ActionNamespace:
        """Return the action namespace for ``client.<controller>()``."""
        key = action_key(controller)
        namespace = self._cache.get_action_route(key)
        if namespace is None:
            namespace = ActionNamespace(self, key)
            self._cache.set_action_route(key, namespace)
        return namespace

    def bind_action(
        self, parent: tuple[str, ...], action: str
    ) -> Optional[ActionHandler]:
        """Return the handler for ``<parent path>/<action>``.

        Reserved names resolve to ``None``.
        """
        if not is_valid_action(action):
            return None
        key = action_key(*parent, action)
        handler = self._cache.get_action_route(key)
        if handler is None:
            handler = ActionHandler(self, key)
            self._cache.set_action_route(key, handler)
        return handler

    def bind_parameter(self, controller: str, route_id: RouteId) -> ParameterizedRoute:
        """Return the handle for ``/<controller>/<route_id>``.

        Ids are compared as strings, so ``123`` and ``"123"`` share a handle.
        """
        key = parameterized_key(controller, route_id)
        route = self._cache.get_parameterized_route(key)
        if route is None:
            route = ParameterizedRoute(self, key)
            self._cache.set_parameterized_route(key, route)
        return route

    def invoke(
        self,
        segments: tuple[str, ...],
        action: str,
        payload: Any = None,
        query: Optional[Mapping[str, Any]] = None,
        **options: Any,
    ) -> Awaitable[Any]:
        """Resolve the method for *action* and hand the request to the issuer.

        The reserved ``method`` key is removed from *payload* before it
        becomes the request body.
        """
        explicit_method, body = split_method(payload)
        method = determine_method(action, self._options, explicit_method)
        endpoint = PATH_SEPARATOR + PATH_SEPARATOR.join(segments)
        logger.debug("Route %s resolved to %s", endpoint, method)
        return self._issuer(endpoint, body, query, method, **options)

    # ------------------------------------------------------------------ #
    # Named entry points
    # ------------------------------------------------------------------ #

    def resolve_action(self, controller: str, action: str) -> Optional[ActionHandler]:
        """Shortcut for the handler of ``/<controller>/<action>``."""
        return self.bind_action((controller,), action)

    def resolve_parameterized(self, controller: str, route_id: RouteId) -> ParameterizedRoute:
        """Shortcut for the handle of ``/<controller>/<route_id>``."""
        return self.bind_parameter(controller, route_id)

    def route(self, *segments: Union[str, int, float], route_id: Optional[RouteId] = None) -> RouteHandle:
        """Walk the state machine along an explicit path.

        Strings containing ``/`` are split, so ``route("users/123/follow")``
        and ``route("users", 123, "follow")`` reach the same handle.  The
        segment after the controller is treated as an id when it is a number
        or a digit-only string; pass *route_id* for any other id, which is
        then inserted after the controller.

        Raises:
            InvalidUsageError: If the path is empty or a segment cannot be
                routed.
        """
        parts: list[Union[str, int, float]] = []
        for segment in segments:
            if isinstance(segment, str):
                parts.extend(piece for piece in segment.split(PATH_SEPARATOR) if piece)
            else:
                parts.append(segment)

        if not parts:
            raise InvalidUsageError("Route path is empty")

        controller = parts[0]
        if not is_valid_controller(controller):
            raise InvalidUsageError(f"Invalid controller name: {controller!r}")
        controller_route = self.resolve_controller(controller)
        if controller_route is None:
            raise InvalidUsageError(f"Reserved controller name: {controller!r}")
        handle: RouteHandle = controller_route

        rest = parts[1:]
        if route_id is None and rest and _is_id_segment(rest[0]):
            route_id, rest = rest[0], rest[1:]
        if route_id is not None:
            if not is_valid_route_id(route_id):
                raise InvalidUsageError(f"Invalid route id: {route_id!r}")
            handle = self.bind_parameter(controller, route_id)

        for segment in rest:
            bound = handle._bind(str(segment))
            if bound is None:
                raise InvalidUsageError(f"Invalid action name: {segment!r}")
            handle = bound
        return handle
