"""Provider configuration."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .credentials import CredentialVault, ProviderType, get_vault
from .errors import ConfigurationError


# Fleet manager config files use camelCase keys
KEY_ALIASES: dict[str, str] = {
    "appKey": "application_key",
    "appSecret": "application_secret",
    "consumerKey": "consumer_key",
    "serviceId": "service_id",
    "flavorName": "flavor_name",
    "snapshotName": "snapshot_name",
    "sshKeyName": "ssh_key_name",
    "maxRunningInstances": "max_running_instances",
}

CREDENTIAL_FIELDS = ("endpoint", "application_key", "application_secret", "consumer_key")

REQUIRED_FIELDS = (
    *CREDENTIAL_FIELDS,
    "service_id",
    "region",
    "name",
    "flavor_name",
    "snapshot_name",
    "ssh_key_name",
)


@dataclass(frozen=True)
class ProviderConfig:
    """
    Settings for one OVHcloud instance pool.

    ``name`` is both the name given to created instances and the prefix
    used to recognize pool members when listing.
    """

    endpoint: str
    application_key: str
    application_secret: str = field(repr=False)
    consumer_key: str = field(repr=False)
    service_id: str
    region: str
    name: str
    flavor_name: str
    snapshot_name: str
    ssh_key_name: str
    max_running_instances: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ProviderConfig:
        """Build a config from a mapping with camelCase or snake_case keys."""
        if not data:
            raise ConfigurationError("Provider configuration is empty")

        values = {KEY_ALIASES.get(key, key): value for key, value in data.items()}

        missing = [key for key in REQUIRED_FIELDS if not values.get(key)]
        if missing:
            raise ConfigurationError(f"Missing configuration keys: {', '.join(missing)}")

        max_running = values.get("max_running_instances")
        if max_running is not None:
            try:
                max_running = int(max_running)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(
                    f"max_running_instances must be an integer, got {max_running!r}"
                ) from e

        return cls(
            **{key: str(values[key]) for key in REQUIRED_FIELDS},
            max_running_instances=max_running,
        )

    @classmethod
    def from_vault(
        cls,
        data: Mapping[str, Any],
        vault: CredentialVault | None = None,
    ) -> ProviderConfig:
        """
        Build a config taking API credentials from the credential vault.

        Args:
            data: Pool settings (service id, region, names...).
            vault: Unlocked vault. Defaults to the global vault.
        """
        vault = vault or get_vault()
        if not vault.is_unlocked:
            raise ConfigurationError("Credential vault is locked")

        cred = vault.get(ProviderType.OVHCLOUD)
        if cred is None:
            raise ConfigurationError("OVHcloud credentials not configured")

        merged = dict(data)
        for key in CREDENTIAL_FIELDS:
            merged[key] = getattr(cred, key)
        return cls.from_dict(merged)
