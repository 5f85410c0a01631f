"""Object storage adapters."""

from .azure_blob import AzureBlobUploader
from .base import BlobUploadError, BlobUploader
from .memory import InMemoryBlobUploader

__all__ = [
    "AzureBlobUploader",
    "BlobUploadError",
    "BlobUploader",
    "InMemoryBlobUploader",
]
