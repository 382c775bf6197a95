"""Base class for instance providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from ..models import InstanceModel


class InstanceProvider(ABC):
    """
    Contract between the fleet manager and one cloud vendor.

    The fleet manager depends only on this interface. It owns scheduling,
    retries and polling; providers make one pass per call.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name recorded on every model it returns."""
        ...

    @abstractmethod
    async def get_models(self) -> list[InstanceModel]:
        """
        List the instances of the configured pool.

        Returns:
            Models of pool instances, excluding instances being deleted.
        """
        ...

    @abstractmethod
    async def create_instances(self, count: int) -> None:
        """
        Create new pool instances.

        Nothing is returned; callers list again to observe the new
        instances.

        Args:
            count: Number of instances to create.
        """
        ...

    @abstractmethod
    async def start_instance(self, model: InstanceModel) -> None:
        """
        Start a stopped instance.

        Args:
            model: The instance to start.
        """
        ...

    @abstractmethod
    async def delete_instance(self, model: InstanceModel) -> None:
        """
        Delete one instance.

        Args:
            model: A model previously returned by get_models.
        """
        ...

    @abstractmethod
    async def delete_instances(self, models: Sequence[InstanceModel]) -> None:
        """
        Delete several instances concurrently.

        Args:
            models: Models previously returned by get_models.
        """
        ...
