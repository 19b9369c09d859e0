from chat_endpoints.endpoints.base import Endpoint, TokenStream
from chat_endpoints.endpoints.genta import GentaEndpoint, GentaEndpointParameters, endpoint_genta
from chat_endpoints.endpoints.registry import EndpointRegistry, default_registry

__all__ = [
    "Endpoint",
    "EndpointRegistry",
    "GentaEndpoint",
    "GentaEndpointParameters",
    "TokenStream",
    "default_registry",
    "endpoint_genta",
]
