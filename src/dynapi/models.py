"""Canonical Pydantic models shared across dynapi modules.

This is the single source of truth for data shapes in the project. The models
fall into two groups:

**Configuration models** -- supplied by the caller or loaded by
:func:`~dynapi.config.resolve_config`:
    :class:`HTTPMethod`, :class:`MethodResolverOptions`, and
    :class:`ClientConfig`.

**Response models** -- produced by the execution pipeline:
    :class:`ErrorInfo` and :class:`APIResponse`.

All models use Pydantic v2.  Resolver options are frozen because a client's
method-inference rules never change after construction.
"""

from __future__ import annotations

import enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class HTTPMethod(str, enum.Enum):
    """HTTP methods the method resolver can infer.

    Values are uppercase because they are sent verbatim as the request
    method.
    """

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"


def _upper(value: Any) -> Any:
    if isinstance(value, HTTPMethod):
        return value
    if isinstance(value, str):
        return value.strip().upper()
    return value


# --- Method resolution ---


class MethodResolverOptions(BaseModel):
    """Options consulted by :func:`~dynapi.routing.method_resolver.determine_method`.

    ``method_rules`` is checked in insertion order.  A key ending in ``*``
    matches by prefix, a key starting with ``*`` matches by suffix, anything
    else must match the action name exactly (case-insensitive).

    Example::

        MethodResolverOptions(
            default_method="PUT",
            method_rules={"search*": "GET", "*Batch": "POST", "ban": "PATCH"},
        )
    """

    model_config = ConfigDict(frozen=True)

    default_method: HTTPMethod = Field(
        default=HTTPMethod.POST,
        description="Method used when no other signal matches",
    )
    method_rules: dict[str, HTTPMethod] = Field(
        default_factory=dict,
        description="Action-name patterns mapped to methods, checked in order",
    )

    @field_validator("default_method", mode="before")
    @classmethod
    def _normalize_default(cls, value: Any) -> Any:
        return _upper(value)

    @field_validator("method_rules", mode="before")
    @classmethod
    def _normalize_rules(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {key: _upper(method) for key, method in value.items()}
        return value


# --- Client config ---


class ClientConfig(BaseModel):
    """Per-client settings applied to every request.

    Durations are in seconds.  Request-level values on a
    :class:`~dynapi.client.request.RequestEnvelope` override these when set.

    Example::

        ClientConfig(base_url="https://api.example.com", timeout=10, retries=2)
    """

    base_url: str = Field(description="Base URL every endpoint path is appended to")
    timeout: float = Field(default=5.0, gt=0, description="Per-attempt timeout in seconds")
    headers: dict[str, str] = Field(
        default_factory=dict, description="Headers sent with every request"
    )
    retries: int = Field(default=3, ge=0, description="Retries after the first attempt")
    retry_delay: float = Field(
        default=1.0, ge=0, description="Base backoff delay in seconds"
    )
    max_retry_delay: float = Field(
        default=30.0, ge=0, description="Upper bound for a single backoff delay"
    )
    use_kebab_case: bool = Field(
        default=False,
        description="Convert camelCase path segments and query keys to kebab-case",
    )
    default_method: HTTPMethod = HTTPMethod.POST
    method_rules: dict[str, HTTPMethod] = Field(default_factory=dict)
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    follow_redirects: bool = True

    @field_validator("default_method", mode="before")
    @classmethod
    def _normalize_default(cls, value: Any) -> Any:
        return _upper(value)

    @field_validator("method_rules", mode="before")
    @classmethod
    def _normalize_rules(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {key: _upper(method) for key, method in value.items()}
        return value

    @property
    def resolver_options(self) -> MethodResolverOptions:
        """The method-inference options derived from this config."""
        return MethodResolverOptions(
            default_method=self.default_method,
            method_rules=dict(self.method_rules),
        )


# --- Responses ---


class ErrorInfo(BaseModel):
    """Application-level error details carried by an unsuccessful response."""

    model_config = ConfigDict(extra="allow")

    code: Optional[Union[int, str]] = None
    message: Optional[str] = None


class APIResponse(BaseModel):
    """Normalized response returned by every route invocation.

    ``success`` is ``False`` for non-2xx statuses and unparseable bodies;
    those cases are returned, not raised.  A server body that already carries
    a ``success`` field is passed through as-is, so extra keys are kept and
    reachable via ``model_extra``.
    """

    model_config = ConfigDict(extra="allow")

    success: bool
    data: Any = None
    error: Optional[ErrorInfo] = None
