"""Dynamic request routing for dynapi.

This package maps attribute chains such as ``client.users(123).follow`` to
endpoint paths and HTTP methods without any up-front endpoint schema.

Modules:
    method_resolver: Verb inference from action names, rules and keywords.
    cache: Per-client memo tables that keep handles referentially stable.
    validator: Reserved-name and path-segment checks.
    engine: The state machine that builds and invokes route handles.
"""

from dynapi.routing.cache import RouteCache
from dynapi.routing.engine import (
    ActionHandler,
    ActionNamespace,
    ControllerRoute,
    ParameterizedRoute,
    RouteEngine,
    RouteHandle,
)
from dynapi.routing.method_resolver import determine_method

__all__ = [
    "ActionHandler",
    "ActionNamespace",
    "ControllerRoute",
    "ParameterizedRoute",
    "RouteCache",
    "RouteEngine",
    "RouteHandle",
    "determine_method",
]
