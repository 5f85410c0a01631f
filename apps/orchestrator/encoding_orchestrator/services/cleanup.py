"""Teardown of resources created by a run."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging

from encoding_orchestrator.adapters.media.base import MediaServicesClient
from encoding_orchestrator.services.retry import RetryPolicy

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CleanupReport:
    job_deleted: bool = False
    assets_deleted: list[str] = field(default_factory=list)
    assets_absent: list[str] = field(default_factory=list)
    content_key_policy_deleted: bool | None = None


class CleanupService:
    """Deletes job, then assets, then an optional content key policy. Absent resources are skipped."""

    def __init__(self, client: MediaServicesClient, retry: RetryPolicy) -> None:
        self._client = client
        self._retry = retry

    def teardown(
        self,
        *,
        transform_name: str,
        job_name: str,
        asset_names: list[str],
        content_key_policy_name: str | None = None,
    ) -> CleanupReport:
        report = CleanupReport()
        report.job_deleted = self._retry.call(
            "jobs.delete",
            lambda: self._client.delete_job(transform_name, job_name),
        )
        logger.info("cleanup.job job=%s deleted=%s", job_name, report.job_deleted)

        for asset_name in asset_names:
            deleted = self._retry.call("assets.delete", lambda: self._client.delete_asset(asset_name))
            (report.assets_deleted if deleted else report.assets_absent).append(asset_name)
            logger.info("cleanup.asset asset=%s deleted=%s", asset_name, deleted)

        if content_key_policy_name is not None:
            report.content_key_policy_deleted = self._retry.call(
                "content_key_policies.delete",
                lambda: self._client.delete_content_key_policy(content_key_policy_name),
            )
            logger.info(
                "cleanup.content_key_policy policy=%s deleted=%s",
                content_key_policy_name,
                report.content_key_policy_deleted,
            )
        return report
