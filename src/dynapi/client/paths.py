"""Path and query-string helpers used when a request envelope becomes a URL.

The pipeline, in order:

1. **Sanitize** -- :func:`sanitize_path` strips markup characters and ``..``
   sequences and collapses repeated slashes.
2. **Case style** -- when ``use_kebab_case`` is on, every path segment and
   query key goes through :func:`camel_to_kebab` (``getProfile`` ->
   ``get-profile``).
3. **Assemble** -- :func:`build_url` joins base and path and appends the
   percent-encoded query string, dropping ``None`` values.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Callable, Optional
from urllib.parse import quote

from dynapi.exceptions import InvalidUsageError

_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")
_KEBAB_BOUNDARY = re.compile(r"-([a-z])")
_MARKUP_CHARS = re.compile(r"[<>'\"]")
_REPEATED_SLASHES = re.compile(r"/+")

# Characters encodeURIComponent leaves alone.
_QUERY_SAFE = "!~*'()"


# --- Case conversion ---


def camel_to_kebab(value: str) -> str:
    """Convert ``camelCase`` to ``kebab-case``.

    Example::

        >>> camel_to_kebab("getUserProfile")
        'get-user-profile'
    """
    return _CAMEL_BOUNDARY.sub(r"\1-\2", value).lower().lstrip("-")


def kebab_to_camel(value: str) -> str:
    """Convert ``kebab-case`` to ``camelCase``."""
    return _KEBAB_BOUNDARY.sub(lambda match: match.group(1).upper(), value)


def convert_object_keys(
    obj: Mapping[str, Any], converter: Callable[[str], str]
) -> dict[str, Any]:
    """Return a new dict with every top-level key passed through *converter*."""
    return {converter(key): value for key, value in obj.items()}


def convert_path(path: str, converter: Callable[[str], str]) -> str:
    """Apply *converter* to each ``/``-separated segment of *path*."""
    return "/".join(converter(segment) for segment in path.split("/"))


# --- Sanitization ---


def sanitize_path(path: str) -> str:
    """Remove markup characters and traversal sequences from *path*.

    Raises:
        InvalidUsageError: If *path* is empty.
    """
    if not path or not isinstance(path, str):
        raise InvalidUsageError("Path must be a non-empty string")
    cleaned = _MARKUP_CHARS.sub("", path)
    cleaned = cleaned.replace("..", "")
    cleaned = _REPEATED_SLASHES.sub("/", cleaned)
    return cleaned.strip()


# --- URL assembly ---


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(_query_value(item) for item in value)
    return str(value)


def build_query_string(params: Optional[Mapping[str, Any]]) -> str:
    """Encode *params* as ``k=v&k2=v2``, skipping ``None`` values."""
    if not params:
        return ""
    return "&".join(
        f"{quote(str(key), safe=_QUERY_SAFE)}={quote(_query_value(value), safe=_QUERY_SAFE)}"
        for key, value in params.items()
        if value is not None
    )


def build_url(
    base_url: str,
    path: str,
    params: Optional[Mapping[str, Any]] = None,
    use_kebab_case: bool = False,
) -> str:
    """Build the full request URL.

    Args:
        base_url: Scheme and host, optionally with a path prefix.  Trailing
            slashes are ignored.
        path: Endpoint path such as ``/users/123/follow``.
        params: Query parameters.  ``None`` values are dropped.
        use_kebab_case: Convert path segments and query keys to kebab-case.

    Returns:
        The assembled URL string.

    Example::

        >>> build_url("https://api.example.com/", "/posts/search", {"page": 1, "q": None})
        'https://api.example.com/posts/search?page=1'
    """
    clean_path = sanitize_path(path)
    if use_kebab_case:
        clean_path = convert_path(clean_path, camel_to_kebab)
        if params:
            params = convert_object_keys(params, camel_to_kebab)

    url = base_url.rstrip("/")
    stripped = clean_path.strip("/")
    if stripped:
        url = f"{url}/{stripped}"

    query = build_query_string(params)
    return f"{url}?{query}" if query else url
