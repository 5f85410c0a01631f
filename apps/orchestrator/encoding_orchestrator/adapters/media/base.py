"""Media service client interface."""

from abc import ABC, abstractmethod
from datetime import datetime

from encoding_orchestrator.schemas.media import (
    Asset,
    AssetContainerPermission,
    Job,
    StreamingEndpoint,
    StreamingLocator,
    StreamingPath,
    Transform,
    TransformOutput,
)


class MediaServicesClient(ABC):
    """Provider-neutral resource API bound to one resource group and media account.

    Lookups return ``None`` for absent resources. Deletes return whether a resource was removed.
    """

    @abstractmethod
    def get_asset(self, name: str) -> Asset | None:
        """Fetch an asset by name."""

    @abstractmethod
    def create_or_update_asset(self, name: str) -> Asset:
        """Create an asset, or update it in place when it exists."""

    @abstractmethod
    def delete_asset(self, name: str) -> bool:
        """Delete an asset if present."""

    @abstractmethod
    def list_container_sas(
        self,
        asset_name: str,
        permissions: AssetContainerPermission,
        expiry: datetime,
    ) -> list[str]:
        """Issue signed URLs for the asset's storage container."""

    @abstractmethod
    def get_transform(self, name: str) -> Transform | None:
        """Fetch a transform by name."""

    @abstractmethod
    def create_or_update_transform(self, name: str, outputs: list[TransformOutput]) -> Transform:
        """Create a transform, or update it in place when it exists."""

    @abstractmethod
    def get_job(self, transform_name: str, name: str) -> Job | None:
        """Fetch a job snapshot."""

    @abstractmethod
    def create_job(
        self,
        transform_name: str,
        name: str,
        input_asset_name: str,
        output_asset_names: list[str],
    ) -> Job:
        """Submit a job against a transform."""

    @abstractmethod
    def delete_job(self, transform_name: str, name: str) -> bool:
        """Delete a job if present."""

    @abstractmethod
    def create_streaming_locator(self, name: str, asset_name: str, streaming_policy_name: str) -> StreamingLocator:
        """Publish an asset under a streaming policy."""

    @abstractmethod
    def list_streaming_paths(self, locator_name: str) -> list[StreamingPath]:
        """List playback paths of a locator."""

    @abstractmethod
    def get_streaming_endpoint(self, name: str) -> StreamingEndpoint | None:
        """Fetch a streaming endpoint."""

    @abstractmethod
    def start_streaming_endpoint(self, name: str) -> None:
        """Issue a start command; completion is observed through ``get_streaming_endpoint``."""

    @abstractmethod
    def delete_content_key_policy(self, name: str) -> bool:
        """Delete a content key policy if present."""


__all__ = ["MediaServicesClient"]
