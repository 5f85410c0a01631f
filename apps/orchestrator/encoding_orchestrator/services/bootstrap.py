"""Collaborator wiring from configuration."""

from __future__ import annotations

import logging

from encoding_orchestrator.adapters.media import (
    InMemoryMediaServicesClient,
    MediaServicesClient,
    create_azure_media_client,
)
from encoding_orchestrator.adapters.storage import AzureBlobUploader, BlobUploader, InMemoryBlobUploader
from encoding_orchestrator.core.config import Settings
from encoding_orchestrator.errors import ConfigurationError

logger = logging.getLogger(__name__)


def create_media_client(settings: Settings) -> MediaServicesClient:
    """Resolve the media service adapter from configuration.

    The Azure adapter authenticates eagerly; failures are fatal and not retried.
    """
    if settings.media_provider == "memory":
        logger.info("bootstrap.provider provider=memory")
        return InMemoryMediaServicesClient(account_name=settings.account_name or "memoryaccount")

    missing = settings.missing_azure_settings()
    if missing:
        raise ConfigurationError(
            "Missing required settings",
            details={"missing": missing, "env_prefix": "AMS_"},
        )

    return create_azure_media_client(
        subscription_id=settings.subscription_id,
        resource_group=settings.resource_group,
        account_name=settings.account_name,
        tenant_id=settings.aad_tenant_id,
        client_id=settings.aad_client_id,
        client_secret=settings.aad_secret.get_secret_value(),
        aad_endpoint=settings.aad_endpoint,
        arm_endpoint=settings.arm_endpoint,
        arm_aad_audience=settings.arm_aad_audience,
    )


def create_blob_uploader(settings: Settings) -> BlobUploader:
    if settings.media_provider == "memory":
        return InMemoryBlobUploader()
    return AzureBlobUploader()
