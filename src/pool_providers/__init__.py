"""Cloud instance providers for proxy pool autoscaling."""

from .config import ProviderConfig
from .errors import ErrorKind, ProviderError
from .models import Address, InstanceModel, InstanceStatus
from .providers import InstanceProvider, OVHCloudProvider, get_provider

__all__ = [
    "Address",
    "ErrorKind",
    "InstanceModel",
    "InstanceProvider",
    "InstanceStatus",
    "OVHCloudProvider",
    "ProviderConfig",
    "ProviderError",
    "get_provider",
]
