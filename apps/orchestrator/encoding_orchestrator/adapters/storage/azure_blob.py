"""Azure Blob Storage uploader adapter."""

from __future__ import annotations

from pathlib import Path

from encoding_orchestrator.adapters.storage.base import BlobUploadError, BlobUploader


class AzureBlobUploader(BlobUploader):
    """Uploads through a container SAS URL with ``azure-storage-blob``."""

    def __init__(self, *, max_concurrency: int = 4) -> None:
        self._max_concurrency = max_concurrency

    def upload_file(self, container_url: str, local_path: Path) -> str:
        try:
            from azure.core.exceptions import AzureError
            from azure.storage.blob import ContainerClient
        except ImportError as exc:  # pragma: no cover - depends on installed package
            raise BlobUploadError("azure-storage-blob library is not installed") from exc

        blob_name = local_path.name
        container = ContainerClient.from_container_url(container_url)
        blob = container.get_blob_client(blob_name)
        try:
            with open(local_path, "rb") as data:
                blob.upload_blob(data, overwrite=True, max_concurrency=self._max_concurrency)
        except (AzureError, OSError) as exc:
            raise BlobUploadError(f"Upload of {blob_name} failed: {type(exc).__name__}") from exc
        return blob_name


__all__ = ["AzureBlobUploader"]
