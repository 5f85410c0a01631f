"""Streaming locator and playback URL tests."""

from __future__ import annotations

import unittest

from encoding_orchestrator.adapters.media import InMemoryMediaServicesClient
from encoding_orchestrator.core.clock import CancellationToken, ManualClock
from encoding_orchestrator.errors import StreamingEndpointNotFoundError, StreamingEndpointNotReadyError
from encoding_orchestrator.schemas.media import (
    StreamingEndpoint,
    StreamingEndpointResourceState,
    StreamingPath,
    StreamingProtocol,
)
from encoding_orchestrator.services.retry import RetryPolicy
from encoding_orchestrator.services.streaming import StreamingService, build_playback_url, playback_urls


class PlaybackUrlTests(unittest.TestCase):
    def test_url_combines_https_scheme_host_and_path(self) -> None:
        self.assertEqual(build_playback_url("h.example.com", "/a/b.m3u8"), "https://h.example.com/a/b.m3u8")

    def test_path_without_leading_slash_is_joined(self) -> None:
        self.assertEqual(build_playback_url("h.example.com", "a/b.m3u8"), "https://h.example.com/a/b.m3u8")

    def test_one_url_per_streaming_path_from_first_segment(self) -> None:
        paths = [
            StreamingPath(streaming_protocol=StreamingProtocol.HLS, paths=["/x/hls.m3u8", "/x/alt.m3u8"]),
            StreamingPath(streaming_protocol=StreamingProtocol.DASH, paths=["/x/dash.mpd"]),
            StreamingPath(streaming_protocol=StreamingProtocol.SMOOTH_STREAMING, paths=[]),
        ]
        self.assertEqual(
            playback_urls("h.example.com", paths),
            ["https://h.example.com/x/hls.m3u8", "https://h.example.com/x/dash.mpd"],
        )


class StreamingServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = ManualClock()

    def _service(self, client: InMemoryMediaServicesClient, **kwargs) -> StreamingService:
        kwargs.setdefault("endpoint_poll_interval_seconds", 5.0)
        return StreamingService(client, RetryPolicy(self.clock), self.clock, **kwargs)

    def test_publish_binds_asset_to_policy(self) -> None:
        client = InMemoryMediaServicesClient()
        client.create_or_update_asset("output-1")

        locator = self._service(client).publish(
            asset_name="output-1",
            locator_name="locator-1",
            streaming_policy_name="Predefined_ClearStreamingOnly",
        )

        self.assertEqual(locator.name, "locator-1")
        self.assertEqual(locator.asset_name, "output-1")
        self.assertEqual(locator.streaming_policy_name, "Predefined_ClearStreamingOnly")

    def test_running_endpoint_resolves_urls_without_start(self) -> None:
        client = InMemoryMediaServicesClient(
            endpoint_host_name="h.example.com",
            streaming_paths=[StreamingPath(streaming_protocol=StreamingProtocol.HLS, paths=["/a/b.m3u8"])],
        )
        client.create_or_update_asset("output-1")
        service = self._service(client)
        service.publish(asset_name="output-1", locator_name="locator-1", streaming_policy_name="p")

        urls = service.resolve_playback_urls("locator-1")

        self.assertEqual(urls, ["https://h.example.com/a/b.m3u8"])
        self.assertEqual(client.calls["start_streaming_endpoint"], 0)
        self.assertEqual(self.clock.sleeps, [])

    def test_default_paths_cover_each_protocol(self) -> None:
        client = InMemoryMediaServicesClient(endpoint_host_name="h.example.com")
        client.create_or_update_asset("output-1")
        service = self._service(client)
        locator = service.publish(asset_name="output-1", locator_name="locator-1", streaming_policy_name="p")

        urls = service.resolve_playback_urls("locator-1")

        self.assertEqual(len(urls), 3)
        for url in urls:
            self.assertTrue(url.startswith(f"https://h.example.com/{locator.locator_id}/output-1.ism/manifest"))

    def test_stopped_endpoint_is_started_and_awaited(self) -> None:
        client = InMemoryMediaServicesClient(
            endpoint_state=StreamingEndpointResourceState.STOPPED,
            endpoint_start_polls=2,
        )

        endpoint = self._service(client).ensure_endpoint_running()

        self.assertEqual(endpoint.resource_state, StreamingEndpointResourceState.RUNNING)
        self.assertEqual(client.calls["start_streaming_endpoint"], 1)
        self.assertEqual(self.clock.sleeps, [5.0, 5.0, 5.0])

    def test_starting_endpoint_is_awaited_without_second_start(self) -> None:
        client = InMemoryMediaServicesClient()
        client.add_streaming_endpoint(
            StreamingEndpoint(
                name="default",
                host_name="h.example.com",
                resource_state=StreamingEndpointResourceState.STARTING,
            )
        )

        endpoint = self._service(client).ensure_endpoint_running()

        self.assertEqual(endpoint.resource_state, StreamingEndpointResourceState.RUNNING)
        self.assertEqual(client.calls["start_streaming_endpoint"], 0)

    def test_endpoint_start_timeout_raises_not_ready(self) -> None:
        client = InMemoryMediaServicesClient(
            endpoint_state=StreamingEndpointResourceState.STOPPED,
            endpoint_start_polls=100,
        )

        with self.assertRaises(StreamingEndpointNotReadyError) as context:
            self._service(client, endpoint_start_timeout_seconds=12.0).ensure_endpoint_running()

        self.assertEqual(context.exception.payload.details["reason"], "start_timeout")
        self.assertEqual(self.clock.sleeps, [5.0, 5.0, 2.0])

    def test_unawaited_start_raises_not_ready(self) -> None:
        client = InMemoryMediaServicesClient(endpoint_state=StreamingEndpointResourceState.STOPPED)

        with self.assertRaises(StreamingEndpointNotReadyError) as context:
            self._service(client, wait_for_endpoint=False).ensure_endpoint_running()

        self.assertEqual(context.exception.payload.details["reason"], "start_not_awaited")
        self.assertEqual(client.calls["start_streaming_endpoint"], 1)

    def test_cancelled_endpoint_wait_raises_not_ready(self) -> None:
        client = InMemoryMediaServicesClient(endpoint_state=StreamingEndpointResourceState.STOPPED)
        token = CancellationToken()
        token.cancel()

        with self.assertRaises(StreamingEndpointNotReadyError) as context:
            self._service(client).ensure_endpoint_running(cancellation=token)

        self.assertEqual(context.exception.payload.details["reason"], "cancelled")

    def test_endpoint_in_transitional_state_is_not_started(self) -> None:
        for state in (
            StreamingEndpointResourceState.STOPPING,
            StreamingEndpointResourceState.DELETING,
            StreamingEndpointResourceState.SCALING,
        ):
            with self.subTest(state=state):
                client = InMemoryMediaServicesClient(endpoint_state=state)

                with self.assertRaises(StreamingEndpointNotReadyError) as context:
                    self._service(client).ensure_endpoint_running()

                details = context.exception.payload.details
                self.assertEqual(details["reason"], "start_rejected_in_state")
                self.assertEqual(details["resource_state"], state.value)
                self.assertEqual(client.calls["start_streaming_endpoint"], 0)
                self.assertEqual(self.clock.sleeps, [])

    def test_missing_endpoint_raises_not_found(self) -> None:
        client = InMemoryMediaServicesClient()

        with self.assertRaises(StreamingEndpointNotFoundError):
            self._service(client, endpoint_name="premium").ensure_endpoint_running()


if __name__ == "__main__":
    unittest.main()
