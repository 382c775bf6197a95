"""Provider-agnostic instance model shared with the fleet manager."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class InstanceStatus(str, Enum):
    """Status of a pool instance as seen by the fleet manager."""

    STARTED = "started"
    STARTING = "starting"
    ERROR = "error"


@dataclass(frozen=True)
class Address:
    """Network endpoint of an instance."""

    hostname: str
    port: int

    def __str__(self) -> str:
        return f"{self.hostname}:{self.port}"


@dataclass
class InstanceModel:
    """
    An instance belonging to a pool.

    provider_opts keeps the raw vendor payload so the provider can find
    its own identifiers again when deleting.
    """

    id: str
    provider_name: str
    status: InstanceStatus
    address: Address | None = None
    provider_opts: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return (
            f"InstanceModel(id={self.id} / provider={self.provider_name} / "
            f"status={self.status.value} / address={self.address})"
        )


@dataclass(frozen=True)
class InstanceSummary:
    """Vendor instance reduced to the fields the listing pipeline needs."""

    id: str
    status: str
    name: str | None
    ip: str | None = None

    def __str__(self) -> str:
        return f"(id={self.id} / status={self.status} / ip={self.ip} / name={self.name})"
