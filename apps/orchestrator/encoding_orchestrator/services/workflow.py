"""End-to-end encoding run: upload, encode, publish."""

from __future__ import annotations

import logging
from pathlib import Path

from encoding_orchestrator.adapters.media.base import MediaServicesClient
from encoding_orchestrator.adapters.storage.base import BlobUploader
from encoding_orchestrator.core.clock import CancellationToken, Clock, SystemClock
from encoding_orchestrator.core.config import Settings
from encoding_orchestrator.domain.naming import derive_run_names
from encoding_orchestrator.errors import ConfigurationError
from encoding_orchestrator.schemas.run import RunNames, RunResult
from encoding_orchestrator.services.assets import AssetService
from encoding_orchestrator.services.bootstrap import create_blob_uploader, create_media_client
from encoding_orchestrator.services.cleanup import CleanupReport, CleanupService
from encoding_orchestrator.services.jobs import JobService, ProgressListener, ensure_job_succeeded
from encoding_orchestrator.services.retry import RetryPolicy
from encoding_orchestrator.services.streaming import StreamingService
from encoding_orchestrator.services.transforms import TransformService

logger = logging.getLogger(__name__)


class EncodingWorkflow:
    """Sequences one run against an explicitly passed media client."""

    def __init__(
        self,
        client: MediaServicesClient,
        uploader: BlobUploader,
        settings: Settings,
        *,
        clock: Clock | None = None,
        cancellation: CancellationToken | None = None,
    ) -> None:
        self._settings = settings
        self._clock = clock or SystemClock()
        self._cancellation = cancellation
        retry = RetryPolicy(
            self._clock,
            attempts=settings.retry_attempts,
            backoff_seconds=settings.retry_backoff_seconds,
        )
        self.assets = AssetService(
            client,
            uploader,
            retry,
            sas_expiry_hours=settings.sas_expiry_hours,
            collision_policy=settings.output_asset_collision_policy,
        )
        self.transforms = TransformService(client, retry)
        self.jobs = JobService(client, retry, self._clock, poll_interval_seconds=settings.poll_interval_seconds)
        self.streaming = StreamingService(
            client,
            retry,
            self._clock,
            endpoint_name=settings.streaming_endpoint_name,
            wait_for_endpoint=settings.wait_for_streaming_endpoint,
            endpoint_poll_interval_seconds=settings.endpoint_poll_interval_seconds,
            endpoint_start_timeout_seconds=settings.endpoint_start_timeout_seconds,
        )
        self.cleanup = CleanupService(client, retry)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        clock: Clock | None = None,
        cancellation: CancellationToken | None = None,
    ) -> EncodingWorkflow:
        client = create_media_client(settings)
        return cls(client, create_blob_uploader(settings), settings, clock=clock, cancellation=cancellation)

    def run(
        self,
        *,
        file_to_upload: str | Path | None = None,
        transform_name: str | None = None,
        names: RunNames | None = None,
        on_progress: ProgressListener | None = None,
    ) -> RunResult:
        settings = self._settings
        source = file_to_upload or settings.file_to_upload
        if not source:
            raise ConfigurationError("No file to upload", details={"missing": ["file_to_upload"]})

        names = names or derive_run_names(input_prefix=settings.asset_name)
        transform_name = transform_name or settings.transform_name
        logger.info("run.started run=%s transform=%s", names.uniqueness, transform_name)

        input_asset = self.assets.create_input_asset(names.input_asset_name, source)
        output_asset = self.assets.create_output_asset(names.output_asset_name)
        self.transforms.get_or_create(transform_name, settings.encoder_preset)

        self.jobs.submit(
            transform_name=transform_name,
            job_name=names.job_name,
            input_asset_name=input_asset.name,
            output_asset_names=[output_asset.name],
        )
        job = self.jobs.wait_for_completion(
            transform_name=transform_name,
            job_name=names.job_name,
            timeout_seconds=settings.poll_timeout,
            cancellation=self._cancellation,
            on_progress=on_progress,
        )
        ensure_job_succeeded(job)
        logger.info("run.job_finished run=%s job=%s", names.uniqueness, job.name)

        locator = self.streaming.publish(
            asset_name=output_asset.name,
            locator_name=names.locator_name,
            streaming_policy_name=settings.streaming_policy_name,
        )
        urls = self.streaming.resolve_playback_urls(locator.name, cancellation=self._cancellation)

        if settings.cleanup_after_run:
            self.teardown(transform_name=transform_name, job_name=job.name, asset_names=[input_asset.name])

        logger.info("run.completed run=%s urls=%s", names.uniqueness, len(urls))
        return RunResult(
            job=job,
            transform_name=transform_name,
            input_asset_name=input_asset.name,
            output_asset_name=output_asset.name,
            locator_name=locator.name,
            playback_urls=urls,
        )

    def teardown(
        self,
        *,
        transform_name: str,
        job_name: str,
        asset_names: list[str],
        content_key_policy_name: str | None = None,
    ) -> CleanupReport:
        return self.cleanup.teardown(
            transform_name=transform_name,
            job_name=job_name,
            asset_names=asset_names,
            content_key_policy_name=content_key_policy_name,
        )
