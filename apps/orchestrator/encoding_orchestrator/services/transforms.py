"""Transform service layer."""

import logging

from encoding_orchestrator.adapters.media.base import MediaServicesClient
from encoding_orchestrator.schemas.media import EncoderNamedPreset, Transform, TransformOutput
from encoding_orchestrator.services.retry import RetryPolicy

logger = logging.getLogger(__name__)


class TransformService:
    def __init__(self, client: MediaServicesClient, retry: RetryPolicy) -> None:
        self._client = client
        self._retry = retry

    def get_or_create(self, name: str, preset: EncoderNamedPreset = EncoderNamedPreset.ADAPTIVE_STREAMING) -> Transform:
        """Return the named transform, creating it with one built-in preset output when absent.

        An existing transform is returned as-is; its outputs are not compared to ``preset``.
        """
        transform = self._retry.call("transforms.get", lambda: self._client.get_transform(name))
        if transform is not None:
            logger.info("transform.reused transform=%s", name)
            return transform

        outputs = [TransformOutput(preset_name=preset.value)]
        transform = self._retry.call(
            "transforms.create_or_update",
            lambda: self._client.create_or_update_transform(name, outputs),
        )
        logger.info("transform.created transform=%s preset=%s", name, preset.value)
        return transform
