"""Instance provider implementations and registry."""

from __future__ import annotations

from typing import Any

from ..errors import ConfigurationError
from .base import InstanceProvider
from .ovhcloud import OVHCloudProvider

PROVIDER_REGISTRY: dict[str, type[InstanceProvider]] = {
    "ovhcloud": OVHCloudProvider,
}


def get_provider(name: str, config: Any, instance_port: int, **kwargs: Any) -> InstanceProvider:
    """
    Build a provider by name.

    Args:
        name: Registered provider name (e.g. "ovhcloud").
        config: Provider configuration.
        instance_port: Port the pool instances listen on.

    Raises:
        ConfigurationError: If no provider is registered under ``name``.
    """
    provider_cls = PROVIDER_REGISTRY.get(name)
    if provider_cls is None:
        raise ConfigurationError(
            f"No provider registered for '{name}'. "
            f"Available providers: {get_registered_providers()}"
        )
    return provider_cls(config, instance_port, **kwargs)


def get_registered_providers() -> list[str]:
    return list(PROVIDER_REGISTRY.keys())


__all__ = [
    "InstanceProvider",
    "OVHCloudProvider",
    "PROVIDER_REGISTRY",
    "get_provider",
    "get_registered_providers",
]
