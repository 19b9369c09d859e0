"""Endpoint Registry: map endpoint type to factory. The application builds endpoints from raw config."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Callable

from chat_endpoints.core.errors import EndpointError
from chat_endpoints.endpoints.base import Endpoint
from chat_endpoints.endpoints.genta import ENDPOINT_TYPE as GENTA_TYPE, endpoint_genta

logger = logging.getLogger(__name__)

EndpointFactory = Callable[..., Endpoint]


class EndpointRegistry:
    """Register endpoint factories by their type discriminator (genta, ...)."""

    def __init__(self) -> None:
        self._factories: dict[str, EndpointFactory] = {}

    def register(self, endpoint_type: str, factory: EndpointFactory) -> None:
        self._factories[endpoint_type] = factory
        logger.debug("registered endpoint: %s", endpoint_type)

    def get(self, endpoint_type: str) -> EndpointFactory | None:
        return self._factories.get(endpoint_type)

    def types(self) -> list[str]:
        return sorted(self._factories)

    def build(self, params: Mapping[str, Any], **kwargs: Any) -> Endpoint:
        """Pick the factory by params["type"]; extra kwargs (e.g. transport) go to the factory."""
        endpoint_type = params.get("type")
        if not endpoint_type:
            raise EndpointError("endpoint parameters have no type")
        factory = self.get(endpoint_type)
        if factory is None:
            raise EndpointError(f"unknown endpoint type: {endpoint_type}")
        return factory(params, **kwargs)


def default_registry() -> EndpointRegistry:
    registry = EndpointRegistry()
    registry.register(GENTA_TYPE, endpoint_genta)
    return registry
