"""Memo tables for generated route handles.

A :class:`RouteCache` belongs to exactly one client.  It keeps three
independent tables so that repeated attribute access returns the *same*
handle object:

* **routes** -- controller handles, keyed by controller name
  (``client.users``);
* **actions** -- action namespaces and action handlers, keyed by the tuple
  of path segments leading to them (``("users",)`` for ``client.users()``,
  ``("users", "getProfile")`` for ``client.users.getProfile``);
* **parameterized** -- id-bound handles, keyed by ``(controller, str(id))``
  (``client.users(123)``).

Tuple keys cannot collide across different controller/id splits, and ids
that stringify the same (``123`` and ``"123"``) share one handle.
"""

from __future__ import annotations

from typing import Any, Optional, Union

RouteKey = tuple[str, ...]
"""Cache key for action and parameterized routes."""


def action_key(*segments: Union[str, int]) -> RouteKey:
    """Build the actions-table key for a path of *segments*."""
    return tuple(str(segment) for segment in segments)


def parameterized_key(controller: str, route_id: Union[str, int, float]) -> RouteKey:
    """Build the parameterized-table key for *controller* and *route_id*."""
    return (controller, str(route_id))


class RouteCache:
    """Three handle tables plus a combined ``clear`` and size snapshot.

    Handles are created at most once per key in practice, but ``set_*``
    overwrites so the engine stays the single decision point.

    Example::

        cache = RouteCache()
        cache.set_route("users", handle)
        assert cache.get_route("users") is handle
        cache.get_stats()   # {"routes": 1, "actions": 0, "parameterized": 0}
    """

    def __init__(self) -> None:
        self._routes: dict[str, Any] = {}
        self._actions: dict[RouteKey, Any] = {}
        self._parameterized: dict[RouteKey, Any] = {}

    # ------------------------------------------------------------------ #
    # Controller routes
    # ------------------------------------------------------------------ #

    def has_route(self, controller: str) -> bool:
        return controller in self._routes

    def get_route(self, controller: str) -> Optional[Any]:
        return self._routes.get(controller)

    def set_route(self, controller: str, route: Any) -> None:
        self._routes[controller] = route

    # ------------------------------------------------------------------ #
    # Action routes
    # ------------------------------------------------------------------ #

    def has_action_route(self, key: RouteKey) -> bool:
        return key in self._actions

    def get_action_route(self, key: RouteKey) -> Optional[Any]:
        return self._actions.get(key)

    def set_action_route(self, key: RouteKey, route: Any) -> None:
        self._actions[key] = route

    # ------------------------------------------------------------------ #
    # Parameterized routes
    # ------------------------------------------------------------------ #

    def has_parameterized_route(self, key: RouteKey) -> bool:
        return key in self._parameterized

    def get_parameterized_route(self, key: RouteKey) -> Optional[Any]:
        return self._parameterized.get(key)

    def set_parameterized_route(self, key: RouteKey, route: Any) -> None:
        self._parameterized[key] = route

    # ------------------------------------------------------------------ #
    # Maintenance
    # ------------------------------------------------------------------ #

    def clear_proxy_cache(self) -> None:
        """Empty all three tables.

        Handles obtained before the call keep working, but the next access
        to the same path builds a fresh handle.
        """
        self._routes.clear()
        self._actions.clear()
        self._parameterized.clear()

    def get_stats(self) -> dict[str, int]:
        """Return the current size of each table.

        Returns:
            A ``dict`` with ``routes``, ``actions`` and ``parameterized``
            counts.
        """
        return {
            "routes": len(self._routes),
            "actions": len(self._actions),
            "parameterized": len(self._parameterized),
        }
