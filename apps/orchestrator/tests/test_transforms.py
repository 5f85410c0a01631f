"""Transform get-or-create tests."""

from __future__ import annotations

import unittest

from encoding_orchestrator.adapters.media import InMemoryMediaServicesClient
from encoding_orchestrator.core.clock import ManualClock
from encoding_orchestrator.schemas.media import EncoderNamedPreset, TransformOutput
from encoding_orchestrator.services.retry import RetryPolicy
from encoding_orchestrator.services.transforms import TransformService


class TransformServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.client = InMemoryMediaServicesClient()
        self.service = TransformService(self.client, RetryPolicy(ManualClock()))

    def test_absent_transform_is_created_with_single_preset_output(self) -> None:
        transform = self.service.get_or_create("abr")

        self.assertEqual(transform.name, "abr")
        self.assertEqual(len(transform.outputs), 1)
        self.assertEqual(transform.outputs[0].preset_name, EncoderNamedPreset.ADAPTIVE_STREAMING)
        self.assertEqual(self.client.calls["create_or_update_transform"], 1)

    def test_second_call_returns_same_transform_without_creating_again(self) -> None:
        first = self.service.get_or_create("abr")
        second = self.service.get_or_create("abr")

        self.assertEqual(first, second)
        self.assertEqual(self.client.calls["get_transform"], 2)
        self.assertEqual(self.client.calls["create_or_update_transform"], 1)

    def test_existing_transform_is_not_reconciled_with_requested_preset(self) -> None:
        self.client.create_or_update_transform(
            "abr",
            [TransformOutput(preset_name=EncoderNamedPreset.H264_SINGLE_BITRATE_1080P.value)],
        )
        self.client.calls.clear()

        transform = self.service.get_or_create("abr", EncoderNamedPreset.CONTENT_AWARE_ENCODING)

        self.assertEqual(transform.outputs[0].preset_name, EncoderNamedPreset.H264_SINGLE_BITRATE_1080P)
        self.assertEqual(self.client.calls["create_or_update_transform"], 0)


if __name__ == "__main__":
    unittest.main()
