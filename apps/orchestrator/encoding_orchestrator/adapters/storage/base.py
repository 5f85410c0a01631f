"""Object storage upload interface."""

from abc import ABC, abstractmethod
from pathlib import Path


class BlobUploadError(Exception):
    """Raised when a file cannot be written to the target container."""


class BlobUploader(ABC):
    """Writes local files into a container reached through a signed URL."""

    @abstractmethod
    def upload_file(self, container_url: str, local_path: Path) -> str:
        """Upload ``local_path`` as a blob named after its base name; return the blob name."""


__all__ = ["BlobUploadError", "BlobUploader"]
