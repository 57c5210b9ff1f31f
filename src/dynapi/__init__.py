"""dynapi -- call REST-like endpoints through attribute chains.

Instead of hand-written URLs, endpoints are addressed as Python attributes
and calls; the HTTP method is inferred from the action name::

    from dynapi import create_dynamic_client

    async with create_dynamic_client(base_url="https://api.example.com") as api:
        await api.users.getProfile({"userId": 1})     # GET    /users/getProfile
        await api.users(123).follow({"notify": True}) # POST   /users/123/follow
        await api.posts(7)({"method": "DELETE"})      # DELETE /posts/7

Modules:
    routing: Method inference, route cache and the route resolution engine.
    client: Request building, execution pipeline and client facades.
    interceptors: Ready-made logging, timing and caching interceptors.
    models: Pydantic models for configuration and responses.
    config: Precedence resolution of client settings for the CLI.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes for the CLI.
    output: stdout/stderr formatting system with Rich support.
    app: Typer application and CLI entry point.
"""

from __future__ import annotations

from typing import Any, Optional

__version__ = "0.1.0"

from dynapi.client import APIClient, DynamicClient  # noqa: E402
from dynapi.client.transport import Transport  # noqa: E402
from dynapi.exceptions import AbortError, ClientError, ErrorType  # noqa: E402
from dynapi.models import APIResponse, ClientConfig  # noqa: E402


def create_client(
    config: Optional[ClientConfig] = None,
    *,
    transport: Optional[Transport] = None,
    **settings: Any,
) -> APIClient:
    """Create a plain :class:`APIClient`."""
    return APIClient(config, transport=transport, **settings)


def create_dynamic_client(
    config: Optional[ClientConfig] = None,
    *,
    transport: Optional[Transport] = None,
    **settings: Any,
) -> DynamicClient:
    """Create a :class:`DynamicClient` that routes attribute chains to endpoints."""
    return DynamicClient(config, transport=transport, **settings)


__all__ = [
    "APIClient",
    "APIResponse",
    "AbortError",
    "ClientConfig",
    "ClientError",
    "DynamicClient",
    "ErrorType",
    "__version__",
    "create_client",
    "create_dynamic_client",
]
