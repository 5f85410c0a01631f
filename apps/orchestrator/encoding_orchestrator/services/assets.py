"""Asset service layer."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
import logging
from pathlib import Path
from typing import Literal

from encoding_orchestrator.adapters.media.base import MediaServicesClient
from encoding_orchestrator.adapters.storage.base import BlobUploadError, BlobUploader
from encoding_orchestrator.core.logging_safety import redact_url
from encoding_orchestrator.domain.naming import with_unique_suffix
from encoding_orchestrator.errors import AssetNameConflictError, MediaServiceError, UploadError
from encoding_orchestrator.schemas.media import Asset, AssetContainerPermission
from encoding_orchestrator.services.retry import RetryPolicy

logger = logging.getLogger(__name__)

CollisionPolicy = Literal["rename", "fail"]


class AssetService:
    def __init__(
        self,
        client: MediaServicesClient,
        uploader: BlobUploader,
        retry: RetryPolicy,
        *,
        sas_expiry_hours: float = 4.0,
        collision_policy: CollisionPolicy = "rename",
    ) -> None:
        self._client = client
        self._uploader = uploader
        self._retry = retry
        self._sas_expiry = timedelta(hours=sas_expiry_hours)
        self._collision_policy = collision_policy

    def create_input_asset(self, name: str, file_to_upload: str | Path) -> Asset:
        """Create-or-update the input asset and upload the source file into its container."""
        source = Path(file_to_upload)
        if not source.is_file():
            raise UploadError("Source file does not exist", details={"path": str(source)})

        asset = self._retry.call("assets.create_or_update", lambda: self._client.create_or_update_asset(name))

        expiry = datetime.now(UTC) + self._sas_expiry
        sas_urls = self._retry.call(
            "assets.list_container_sas",
            lambda: self._client.list_container_sas(name, AssetContainerPermission.READ_WRITE, expiry),
        )
        if not sas_urls:
            raise MediaServiceError("No container URL issued for asset", details={"asset_name": name})

        container_url = sas_urls[0]
        try:
            blob_name = self._uploader.upload_file(container_url, source)
        except BlobUploadError as exc:
            raise UploadError(str(exc), details={"asset_name": name, "path": str(source)}) from exc

        logger.info(
            "asset.uploaded asset=%s blob=%s container=%s",
            asset.name,
            blob_name,
            redact_url(container_url),
        )
        return asset

    def create_output_asset(self, name: str) -> Asset:
        """Create the output asset without overwriting an existing one.

        Under the ``rename`` policy a taken name is replaced by ``<name>-<suffix>``;
        callers must use the returned asset's name downstream.
        """
        existing = self._retry.call("assets.get", lambda: self._client.get_asset(name))
        asset_name = name
        if existing is not None:
            if self._collision_policy == "fail":
                raise AssetNameConflictError("Output asset name is already in use", details={"asset_name": name})
            asset_name = with_unique_suffix(name)
            logger.warning("asset.name_collision requested=%s created=%s", name, asset_name)

        asset = self._retry.call(
            "assets.create_or_update",
            lambda: self._client.create_or_update_asset(asset_name),
        )
        logger.info("asset.created asset=%s role=output", asset.name)
        return asset
