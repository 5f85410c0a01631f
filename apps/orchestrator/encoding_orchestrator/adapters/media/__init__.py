"""Media service client adapters."""

from .azure_media import AzureMediaServicesClient, create_azure_media_client
from .base import MediaServicesClient
from .memory import InMemoryMediaServicesClient

__all__ = [
    "AzureMediaServicesClient",
    "InMemoryMediaServicesClient",
    "MediaServicesClient",
    "create_azure_media_client",
]
