"""Name checks for dynamic route segments.

Attribute access on a route handle is open-ended, so some names must never
become API actions: ``then``/``catch``/``finally`` (checked by code that looks
for promise-like objects) and anything starting with ``__`` (Python's own
protocol lookups such as ``__await__`` or ``__deepcopy__``).
"""

from __future__ import annotations

import math
from typing import Any

RESERVED_PROPS: tuple[str, ...] = ("then", "catch", "finally")
DUNDER_PREFIX = "__"
PATH_SEPARATOR = "/"


def is_valid_action(action: Any) -> bool:
    """Return ``True`` if *action* may be used as an action segment."""
    return (
        isinstance(action, str)
        and action not in RESERVED_PROPS
        and not action.startswith(DUNDER_PREFIX)
    )


def is_reserved_property(prop: str) -> bool:
    """Return ``True`` if *prop* is one of :data:`RESERVED_PROPS`."""
    return prop in RESERVED_PROPS


def is_valid_controller(controller: Any) -> bool:
    """Return ``True`` if *controller* can start a route.

    Controllers must be non-empty strings without a ``__`` prefix or a path
    separator.
    """
    return (
        isinstance(controller, str)
        and len(controller) > 0
        and not controller.startswith(DUNDER_PREFIX)
        and PATH_SEPARATOR not in controller
    )


def is_valid_route_id(route_id: Any) -> bool:
    """Return ``True`` if *route_id* can be embedded in a path.

    Numbers must be finite; strings must be non-empty and free of ``/``.
    Booleans are rejected even though they are ``int`` subclasses.
    """
    if isinstance(route_id, bool):
        return False
    if isinstance(route_id, (int, float)):
        return math.isfinite(route_id)
    if isinstance(route_id, str):
        return len(route_id) > 0 and PATH_SEPARATOR not in route_id
    return False


def get_reserved_properties() -> list[str]:
    """Return a copy of the reserved property names."""
    return list(RESERVED_PROPS)
