"""HTTP client layer: request building, execution pipeline and client facades."""

from dynapi.client.api_client import APIClient
from dynapi.client.dynamic import DynamicClient
from dynapi.client.interceptors import InterceptorEntry, InterceptorManager
from dynapi.client.pipeline import RequestPipeline
from dynapi.client.request import RequestEnvelope
from dynapi.client.transport import (
    HttpxTransport,
    Transport,
    TransportRequest,
    TransportResponse,
)

__all__ = [
    "APIClient",
    "DynamicClient",
    "HttpxTransport",
    "InterceptorEntry",
    "InterceptorManager",
    "RequestEnvelope",
    "RequestPipeline",
    "Transport",
    "TransportRequest",
    "TransportResponse",
]
