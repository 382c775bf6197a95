"""OVHcloud Public Cloud instance provider."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import ovh
from ovh.exceptions import APIError

from ..config import ProviderConfig
from ..errors import (
    BatchOperationError,
    CapacityExceededError,
    ConfigurationError,
    ResourceNotFoundError,
    UnsupportedOperationError,
    VendorRequestError,
)
from ..models import Address, InstanceModel, InstanceStatus, InstanceSummary
from .base import InstanceProvider

logger = logging.getLogger(__name__)


STATUS_DELETING = "DELETING"

# OVHcloud instance status mapping
OVH_STATUS_MAP: dict[str, InstanceStatus] = {
    "ACTIVE": InstanceStatus.STARTED,
    "BUILD": InstanceStatus.STARTING,
    "ERROR": InstanceStatus.ERROR,
}


@dataclass(frozen=True)
class ResolvedResources:
    """OVHcloud ids behind the flavor, snapshot and ssh key names of a pool."""

    flavor_id: str
    snapshot_id: str
    ssh_key_id: str


def summarize(instance: Mapping[str, Any]) -> InstanceSummary:
    """Reduce a vendor instance to id, status, name and first IP."""
    addresses = instance.get("ipAddresses") or []
    return InstanceSummary(
        id=instance["id"],
        status=instance.get("status", ""),
        name=instance.get("name"),
        ip=addresses[0].get("ip") if addresses else None,
    )


def convert_status(status: str) -> InstanceStatus:
    """Translate an OVHcloud status; unknown values map to ERROR."""
    converted = OVH_STATUS_MAP.get(status)
    if converted is None:
        logger.error("Unknown OVHcloud instance status: %s", status)
        return InstanceStatus.ERROR
    return converted


class OVHCloudProvider(InstanceProvider):
    """
    OVHcloud Public Cloud provider.

    Manages the instances of one pool inside a cloud project and region.
    Pool members are recognized by their name prefix.
    API docs: https://eu.api.ovh.com/console/#/cloud
    """

    def __init__(
        self,
        config: ProviderConfig | Mapping[str, Any] | None,
        instance_port: int | None,
        client: Any = None,
    ):
        """
        Initialize the provider.

        Args:
            config: Pool configuration, or a mapping accepted by
                    ProviderConfig.from_dict.
            instance_port: Port the pool instances listen on.
            client: Object with the get/post/delete methods of ovh.Client.
                    Built from the configured credentials when omitted.
        """
        if not config or not instance_port:
            raise ConfigurationError(
                "OVHCloudProvider should be instanced with config and instance_port",
                "ovhcloud",
            )
        if not isinstance(instance_port, int) or instance_port <= 0:
            raise ConfigurationError(
                f"instance_port must be a positive integer, got {instance_port!r}",
                "ovhcloud",
            )

        if not isinstance(config, ProviderConfig):
            config = ProviderConfig.from_dict(config)

        self.config = config
        self.instance_port = instance_port

        if client is None:
            try:
                client = ovh.Client(
                    endpoint=config.endpoint,
                    application_key=config.application_key,
                    application_secret=config.application_secret,
                    consumer_key=config.consumer_key,
                )
            except APIError as e:
                raise ConfigurationError(
                    f"Cannot build OVHcloud client for endpoint '{config.endpoint}': {e}",
                    "ovhcloud",
                ) from e
        self._client = client

        self._resources: ResolvedResources | None = None
        self._resources_lock = asyncio.Lock()

    @property
    def name(self) -> str:
        return "ovhcloud"

    @property
    def resources(self) -> ResolvedResources | None:
        """Resolved resource ids, or None before the first creation."""
        return self._resources

    def _project_path(self, suffix: str) -> str:
        return f"/cloud/project/{self.config.service_id}/{suffix}"

    async def _request(self, method: str, path: str, **params: Any) -> Any:
        """Run a blocking SDK call in a worker thread."""
        calls = {
            "GET": self._client.get,
            "POST": self._client.post,
            "DELETE": self._client.delete,
        }
        try:
            return await asyncio.to_thread(calls[method], path, **params)
        except APIError as e:
            response = getattr(e, "response", None)
            raise VendorRequestError(
                method,
                path,
                str(e),
                status_code=getattr(response, "status_code", None),
                body=getattr(response, "text", None),
                provider=self.name,
            ) from e

    async def _describe_instances(self) -> list[dict[str, Any]]:
        return await self._request(
            "GET", self._project_path("instance"), region=self.config.region
        ) or []

    async def get_models(self) -> list[InstanceModel]:
        logger.debug("get_models")

        instances = await self._describe_instances()

        models = []
        for instance in instances:
            summary = summarize(instance)
            if summary.status == STATUS_DELETING:
                continue
            if not summary.name or not summary.name.startswith(self.config.name):
                continue

            address = None
            if summary.ip:
                address = Address(hostname=summary.ip, port=self.instance_port)

            models.append(
                InstanceModel(
                    id=summary.id,
                    provider_name=self.name,
                    status=convert_status(summary.status),
                    address=address,
                    provider_opts=instance,
                )
            )

        return models

    async def create_instances(self, count: int) -> None:
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise ValueError(f"count must be a non-negative integer, got {count!r}")

        logger.debug("create_instances: count=%d", count)

        if count == 0:
            return

        instances = await self._describe_instances()
        actual_count = sum(
            1 for instance in instances if instance.get("status") != STATUS_DELETING
        )

        logger.debug("create_instances: actual_count=%d", actual_count)

        # Advisory: other processes may create instances between this check and ours
        limit = self.config.max_running_instances
        if limit and actual_count + count > limit:
            raise CapacityExceededError(actual_count, count, limit, self.name)

        resources = await self._resolve_resources()

        results = await asyncio.gather(
            *(self._create_instance(resources) for _ in range(count)),
            return_exceptions=True,
        )

        # The vendor may answer a successful POST without a body
        created = [
            result["id"] for result in results if isinstance(result, dict) and result.get("id")
        ]
        self._check_batch("create_instances", results, created)

    async def _create_instance(self, resources: ResolvedResources) -> dict[str, Any]:
        result = await self._request(
            "POST",
            self._project_path("instance"),
            flavorId=resources.flavor_id,
            imageId=resources.snapshot_id,
            name=self.config.name,
            region=self.config.region,
            sshKeyId=resources.ssh_key_id,
        )
        return result or {}

    async def _resolve_resources(self) -> ResolvedResources:
        """Resolve flavor, snapshot and ssh key ids once per provider."""
        async with self._resources_lock:
            if self._resources is None:
                flavor, snapshot, ssh_key = await asyncio.gather(
                    self._find_by_name("flavor", "flavor", self.config.flavor_name),
                    self._find_by_name("snapshot", "snapshot", self.config.snapshot_name),
                    self._find_by_name("sshKey", "sshkey", self.config.ssh_key_name),
                )
                self._resources = ResolvedResources(
                    flavor_id=flavor["id"],
                    snapshot_id=snapshot["id"],
                    ssh_key_id=ssh_key["id"],
                )
                logger.debug("Resolved resources: %s", self._resources)
            return self._resources

    async def _find_by_name(self, resource: str, path: str, name: str) -> dict[str, Any]:
        results = await self._request(
            "GET", self._project_path(path), region=self.config.region
        )
        for result in results or []:
            if result.get("name") == name:
                return result
        raise ResourceNotFoundError(resource, name, self.name)

    async def start_instance(self, model: InstanceModel) -> None:
        # Instances are created running; there is no separate start call
        raise UnsupportedOperationError("start_instance", self.name)

    async def delete_instance(self, model: InstanceModel) -> None:
        logger.debug("delete_instance: model=%s", model)

        await self._delete_instance(self._instance_id(model))

    async def delete_instances(self, models: Sequence[InstanceModel]) -> None:
        logger.debug("delete_instances: models=%s", [str(model) for model in models])

        if not models:
            return

        results = await asyncio.gather(
            *(self._delete_model(model) for model in models),
            return_exceptions=True,
        )

        deleted = [result for result in results if isinstance(result, str)]
        self._check_batch("delete_instances", results, deleted)

    async def _delete_model(self, model: InstanceModel) -> str:
        instance_id = self._instance_id(model)
        await self._delete_instance(instance_id)
        return instance_id

    async def _delete_instance(self, instance_id: str) -> None:
        await self._request(
            "DELETE", self._project_path(f"instance/{instance_id}")
        )

    def _instance_id(self, model: InstanceModel) -> str:
        instance_id = model.provider_opts.get("id")
        if not instance_id:
            raise ValueError(f"{model} carries no OVHcloud instance id")
        return instance_id

    def _check_batch(
        self,
        operation: str,
        results: Sequence[Any],
        succeeded: list[Any],
    ) -> None:
        """Raise if any request of a gathered batch failed."""
        errors = []
        for result in results:
            if isinstance(result, Exception):
                errors.append(result)
            elif isinstance(result, BaseException):
                raise result

        if errors:
            logger.error(
                "%s: %d succeeded, %d failed", operation, len(succeeded), len(errors)
            )
            raise BatchOperationError(operation, succeeded, errors, self.name)
