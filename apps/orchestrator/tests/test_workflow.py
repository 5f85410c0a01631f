"""End-to-end orchestration tests against the in-memory media service."""

from __future__ import annotations

from pathlib import Path
import tempfile
import unittest

from encoding_orchestrator.adapters.media import InMemoryMediaServicesClient
from encoding_orchestrator.adapters.storage import InMemoryBlobUploader
from encoding_orchestrator.core.clock import ManualClock
from encoding_orchestrator.core.config import Settings
from encoding_orchestrator.domain.naming import derive_run_names
from encoding_orchestrator.errors import ConfigurationError, JobFailedError
from encoding_orchestrator.schemas.media import JobState, StreamingPath, StreamingProtocol
from encoding_orchestrator.services.workflow import EncodingWorkflow


class EncodingWorkflowTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.source = Path(self._tmp.name) / "video.mp4"
        self.source.write_bytes(b"\x00\x00\x00\x18ftypmp42 sample")
        self.client = InMemoryMediaServicesClient(
            endpoint_host_name="h.example.com",
            streaming_paths=[StreamingPath(streaming_protocol=StreamingProtocol.HLS, paths=["/a/b.m3u8"])],
        )
        self.uploader = InMemoryBlobUploader()
        self.clock = ManualClock()
        self.names = derive_run_names("run1")

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _workflow(self, **settings) -> EncodingWorkflow:
        settings.setdefault("media_provider", "memory")
        settings.setdefault("transform_name", "abr")
        return EncodingWorkflow(self.client, self.uploader, Settings(**settings), clock=self.clock)

    def test_upload_encode_publish_scenario(self) -> None:
        self.client.script_job(
            "abr",
            self.names.job_name,
            [JobState.QUEUED, (JobState.PROCESSING, 45), JobState.FINISHED],
        )
        progress: list[tuple[JobState, int]] = []

        result = self._workflow().run(
            file_to_upload=self.source,
            names=self.names,
            on_progress=lambda job: progress.append((job.state, job.outputs[0].progress)),
        )

        self.assertEqual([upload.blob_name for upload in self.uploader.uploads], ["video.mp4"])
        self.assertEqual(self.client.calls["create_or_update_transform"], 1)
        self.assertEqual(self.client.calls["create_job"], 1)
        self.assertEqual(progress[1], (JobState.PROCESSING, 45))
        self.assertEqual(self.clock.sleeps, [20.0, 20.0])
        self.assertEqual(result.job.state, JobState.FINISHED)
        self.assertEqual(result.locator_name, "locator-run1")
        self.assertIn("locator-run1", self.client.locators)
        self.assertEqual(result.playback_urls, ["https://h.example.com/a/b.m3u8"])

    def test_downstream_steps_use_renamed_output_asset(self) -> None:
        self.client.create_or_update_asset(self.names.output_asset_name)

        result = self._workflow().run(file_to_upload=self.source, names=self.names)

        self.assertTrue(result.output_asset_name.startswith("output-run1-"))
        job_record = self.client.jobs[("abr", self.names.job_name)]
        self.assertEqual(job_record.job.outputs[0].asset_name, result.output_asset_name)
        self.assertEqual(self.client.locators["locator-run1"].asset_name, result.output_asset_name)

    def test_existing_transform_is_reused(self) -> None:
        self._workflow().run(file_to_upload=self.source, names=derive_run_names("first"))
        self._workflow().run(file_to_upload=self.source, names=derive_run_names("second"))

        self.assertEqual(self.client.calls["create_or_update_transform"], 1)
        self.assertEqual(self.client.calls["create_job"], 2)

    def test_failed_job_surfaces_and_nothing_is_published(self) -> None:
        self.client.script_job("abr", self.names.job_name, [(JobState.PROCESSING, 30), JobState.ERROR])

        with self.assertRaises(JobFailedError) as context:
            self._workflow().run(file_to_upload=self.source, names=self.names)

        self.assertEqual(context.exception.payload.details["job_name"], self.names.job_name)
        self.assertEqual(context.exception.payload.details["state"], "Error")
        self.assertEqual(self.client.locators, {})

    def test_asset_name_setting_prefixes_input_asset(self) -> None:
        result = self._workflow(asset_name="ignite").run(file_to_upload=self.source)
        self.assertTrue(result.input_asset_name.startswith("ignite-"))

    def test_file_from_settings_is_used_when_not_passed(self) -> None:
        result = self._workflow(file_to_upload=str(self.source)).run(names=self.names)
        self.assertEqual(result.input_asset_name, "input-run1")

    def test_missing_file_setting_is_configuration_error(self) -> None:
        with self.assertRaises(ConfigurationError):
            self._workflow().run(names=self.names)

    def test_cleanup_after_run_removes_job_and_input_asset_only(self) -> None:
        result = self._workflow(cleanup_after_run=True).run(file_to_upload=self.source, names=self.names)

        self.assertEqual(self.client.jobs, {})
        self.assertNotIn(result.input_asset_name, self.client.assets)
        self.assertIn(result.output_asset_name, self.client.assets)
        self.assertIn(result.locator_name, self.client.locators)

    def test_from_settings_wires_memory_collaborators(self) -> None:
        workflow = EncodingWorkflow.from_settings(
            Settings(media_provider="memory", poll_interval_seconds=1, transform_name="abr"),
            clock=self.clock,
        )

        result = workflow.run(file_to_upload=self.source, names=self.names)

        self.assertEqual(result.job.state, JobState.FINISHED)
        self.assertEqual(len(result.playback_urls), 3)
        self.assertEqual(self.clock.sleeps, [1.0, 1.0])


if __name__ == "__main__":
    unittest.main()
