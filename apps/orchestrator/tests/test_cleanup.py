"""Teardown tests."""

from __future__ import annotations

import unittest

from encoding_orchestrator.adapters.media import InMemoryMediaServicesClient
from encoding_orchestrator.core.clock import ManualClock
from encoding_orchestrator.schemas.media import EncoderNamedPreset, TransformOutput
from encoding_orchestrator.services.cleanup import CleanupService
from encoding_orchestrator.services.retry import RetryPolicy


class _OrderRecordingClient(InMemoryMediaServicesClient):
    def __init__(self) -> None:
        super().__init__()
        self.order: list[str] = []

    def delete_job(self, transform_name: str, name: str) -> bool:
        self.order.append(f"job:{name}")
        return super().delete_job(transform_name, name)

    def delete_asset(self, name: str) -> bool:
        self.order.append(f"asset:{name}")
        return super().delete_asset(name)

    def delete_content_key_policy(self, name: str) -> bool:
        self.order.append(f"policy:{name}")
        return super().delete_content_key_policy(name)


class CleanupServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.client = _OrderRecordingClient()
        self.client.create_or_update_transform("abr", [TransformOutput(preset_name=EncoderNamedPreset.ADAPTIVE_STREAMING.value)])
        self.client.create_or_update_asset("input-1")
        self.client.create_or_update_asset("output-1")
        self.client.create_job("abr", "job-1", "input-1", ["output-1"])
        self.client.content_key_policies.add("policy-1")
        self.service = CleanupService(self.client, RetryPolicy(ManualClock()))

    def test_deletes_job_then_assets_then_policy(self) -> None:
        report = self.service.teardown(
            transform_name="abr",
            job_name="job-1",
            asset_names=["input-1", "output-1"],
            content_key_policy_name="policy-1",
        )

        self.assertEqual(self.client.order, ["job:job-1", "asset:input-1", "asset:output-1", "policy:policy-1"])
        self.assertTrue(report.job_deleted)
        self.assertEqual(report.assets_deleted, ["input-1", "output-1"])
        self.assertEqual(report.assets_absent, [])
        self.assertTrue(report.content_key_policy_deleted)
        self.assertEqual(self.client.jobs, {})
        self.assertEqual(self.client.assets, {})

    def test_teardown_is_idempotent(self) -> None:
        kwargs = dict(transform_name="abr", job_name="job-1", asset_names=["input-1"], content_key_policy_name="policy-1")
        self.service.teardown(**kwargs)

        report = self.service.teardown(**kwargs)

        self.assertFalse(report.job_deleted)
        self.assertEqual(report.assets_deleted, [])
        self.assertEqual(report.assets_absent, ["input-1"])
        self.assertFalse(report.content_key_policy_deleted)

    def test_policy_is_skipped_when_not_named(self) -> None:
        report = self.service.teardown(transform_name="abr", job_name="job-1", asset_names=[])

        self.assertIsNone(report.content_key_policy_deleted)
        self.assertNotIn("policy:policy-1", self.client.order)


if __name__ == "__main__":
    unittest.main()
