"""Request payload serialization: JSON or multipart.

A payload without binary attachments is sent as a JSON string with
``Content-Type: application/json``.  As soon as any value (at any depth) is
``bytes``, ``bytearray``, ``memoryview`` or an open file object, the payload
is flattened into multipart form fields and files instead, and no content
type is set so httpx can add the boundary itself.
"""

from __future__ import annotations

import io
import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

JSON_CONTENT_TYPE = "application/json"

_BINARY_TYPES = (bytes, bytearray, memoryview, io.IOBase)


@dataclass
class SerializedBody:
    """The encoded form of a request payload.

    Exactly one of ``content`` (JSON text) or ``data``/``files`` (multipart)
    is populated for a non-empty payload.
    """

    content: Optional[str] = None
    data: dict[str, str] = field(default_factory=dict)
    files: list[tuple[str, Any]] = field(default_factory=list)
    content_type: Optional[str] = None

    @property
    def is_multipart(self) -> bool:
        return bool(self.files)


def _is_binary(value: Any) -> bool:
    return isinstance(value, _BINARY_TYPES)


def has_files(data: Any) -> bool:
    """Return ``True`` if *data* contains a binary attachment at any depth."""
    if _is_binary(data):
        return True
    if isinstance(data, Mapping):
        return any(has_files(value) for value in data.values())
    if isinstance(data, (list, tuple)):
        return any(has_files(item) for item in data)
    return False


def get_content_type(data: Any) -> Optional[str]:
    """Return ``application/json``, or ``None`` when *data* needs multipart."""
    if has_files(data):
        return None
    return JSON_CONTENT_TYPE


def _form_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _flatten(data: Any, body: SerializedBody, prefix: str = "") -> None:
    items = data.items() if isinstance(data, Mapping) else enumerate(data)
    for key, value in items:
        name = f"{prefix}.{key}" if prefix else str(key)
        if _is_binary(value):
            body.files.append((name, value))
        elif isinstance(value, Mapping) or isinstance(value, (list, tuple)):
            _flatten(value, body, name)
        elif value is not None:
            body.data[name] = _form_value(value)


def serialize(data: Any) -> SerializedBody:
    """Encode *data* for the transport.

    ``None`` yields an empty body.  Nested multipart keys are joined with
    dots, list items use their index (``tags.0``, ``meta.owner.id``).

    Example::

        >>> serialize({"name": "X"}).content
        '{"name": "X"}'
    """
    if data is None:
        return SerializedBody()
    if isinstance(data, (Mapping, list, tuple)) and has_files(data):
        body = SerializedBody()
        _flatten(data, body)
        return body
    return SerializedBody(content=json.dumps(data, default=str), content_type=JSON_CONTENT_TYPE)
