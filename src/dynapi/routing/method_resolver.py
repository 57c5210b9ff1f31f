"""HTTP method inference for dynamic route actions.

:func:`determine_method` picks the verb for an action name such as
``getProfile`` or ``ban``.  It never fails: every input resolves to some
method.  Signals are consulted in a fixed order and the first match wins:

1. an explicit method supplied by the caller;
2. the action name *is* a method name (``get``, ``Delete``);
3. the client's custom ``method_rules``, in insertion order;
4. semantic keyword prefixes (:data:`SEMANTIC_PATTERNS`, in list order);
5. the configured default method.

Blank action names skip steps 2-4.
"""

from __future__ import annotations

from typing import Optional, Union

from dynapi.models import HTTPMethod, MethodResolverOptions

WILDCARD = "*"

DIRECT_METHODS: tuple[HTTPMethod, ...] = (
    HTTPMethod.GET,
    HTTPMethod.POST,
    HTTPMethod.PUT,
    HTTPMethod.DELETE,
    HTTPMethod.PATCH,
)

SEMANTIC_PATTERNS: tuple[tuple[HTTPMethod, tuple[str, ...]], ...] = (
    (
        HTTPMethod.GET,
        ("get", "fetch", "load", "find", "retrieve", "read", "show", "view"),
    ),
    (
        HTTPMethod.POST,
        ("create", "add", "save", "store", "insert", "new", "register", "submit"),
    ),
    (
        HTTPMethod.PUT,
        ("update", "edit", "modify", "change", "replace", "set", "put"),
    ),
    (
        HTTPMethod.DELETE,
        ("delete", "remove", "destroy", "clear", "drop", "cancel"),
    ),
    (
        HTTPMethod.PATCH,
        ("patch", "partial", "toggle", "enable", "disable", "activate", "deactivate"),
    ),
)
"""Keyword sets checked in order; an action matching two sets takes the first."""

_DEFAULT_OPTIONS = MethodResolverOptions()


def _method_value(method: Union[HTTPMethod, str]) -> str:
    if isinstance(method, HTTPMethod):
        return method.value
    return str(method).strip().upper()


def matches_pattern(action: str, pattern: str) -> bool:
    """Return ``True`` if the lower-cased *action* matches a rule *pattern*.

    A trailing ``*`` matches by prefix, a leading ``*`` by suffix; otherwise
    the two must be equal.  Comparison is case-insensitive.
    """
    action = action.lower()
    pattern = pattern.lower()
    if pattern.endswith(WILDCARD):
        return action.startswith(pattern[:-1])
    if pattern.startswith(WILDCARD):
        return action.endswith(pattern[1:])
    return action == pattern


def semantic_method(action: str) -> Optional[HTTPMethod]:
    """Return the method whose keyword set *action* starts with, if any."""
    action = action.lower()
    for method, keywords in SEMANTIC_PATTERNS:
        if any(action.startswith(keyword) for keyword in keywords):
            return method
    return None


def determine_method(
    action_name: str,
    options: Optional[MethodResolverOptions] = None,
    explicit_method: Union[HTTPMethod, str, None] = None,
) -> str:
    """Resolve the HTTP method for *action_name*.

    Args:
        action_name: The deepest action segment of the route, e.g.
            ``"getProfile"``.
        options: Default method and custom rules.  ``None`` means ``POST``
            default and no rules.
        explicit_method: A method the caller asked for.  Returned
            unconditionally (uppercased) when given.

    Returns:
        The uppercase method string, e.g. ``"GET"``.

    Example::

        >>> determine_method("fetchUsers")
        'GET'
        >>> determine_method("ban", MethodResolverOptions(method_rules={"ban": "PATCH"}))
        'PATCH'
    """
    if explicit_method:
        return _method_value(explicit_method)

    options = options or _DEFAULT_OPTIONS
    action = (action_name or "").strip()

    if action:
        lowered = action.lower()
        for method in DIRECT_METHODS:
            if method.value.lower() == lowered:
                return method.value

        for pattern, method in options.method_rules.items():
            if matches_pattern(lowered, pattern):
                return _method_value(method)

        inferred = semantic_method(lowered)
        if inferred is not None:
            return inferred.value

    return _method_value(options.default_method or HTTPMethod.POST)
