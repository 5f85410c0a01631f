"""In-memory uploader for dry runs and tests."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from encoding_orchestrator.adapters.storage.base import BlobUploadError, BlobUploader


@dataclass(slots=True)
class UploadRecord:
    container_url: str
    blob_name: str
    size: int


class InMemoryBlobUploader(BlobUploader):
    """Reads the local file and records the upload instead of sending it."""

    def __init__(self) -> None:
        self.uploads: list[UploadRecord] = []
        self.failure_message: str | None = None

    def upload_file(self, container_url: str, local_path: Path) -> str:
        if self.failure_message is not None:
            raise BlobUploadError(self.failure_message)
        try:
            size = len(local_path.read_bytes())
        except OSError as exc:
            raise BlobUploadError(f"Cannot read {local_path.name}") from exc

        self.uploads.append(UploadRecord(container_url=container_url, blob_name=local_path.name, size=size))
        return local_path.name


__all__ = ["InMemoryBlobUploader", "UploadRecord"]
