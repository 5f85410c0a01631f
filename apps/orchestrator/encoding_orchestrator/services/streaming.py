"""Streaming publication service layer."""

from __future__ import annotations

import logging

from encoding_orchestrator.adapters.media.base import MediaServicesClient
from encoding_orchestrator.core.clock import CancellationToken, Clock
from encoding_orchestrator.errors import (
    StreamingEndpointNotFoundError,
    StreamingEndpointNotReadyError,
)
from encoding_orchestrator.schemas.media import (
    StreamingEndpoint,
    StreamingEndpointResourceState,
    StreamingLocator,
    StreamingPath,
)
from encoding_orchestrator.services.retry import RetryPolicy

logger = logging.getLogger(__name__)

# The service refuses a start command while the endpoint is in one of these states.
_START_REJECTED_STATES = frozenset(
    {
        StreamingEndpointResourceState.STOPPING,
        StreamingEndpointResourceState.DELETING,
        StreamingEndpointResourceState.SCALING,
    }
)


def build_playback_url(host_name: str, path: str) -> str:
    if not path.startswith("/"):
        path = f"/{path}"
    return f"https://{host_name}{path}"


def playback_urls(host_name: str, streaming_paths: list[StreamingPath]) -> list[str]:
    """One URL per streaming path, built from the first path segment of each."""
    return [build_playback_url(host_name, path.paths[0]) for path in streaming_paths if path.paths]


class StreamingService:
    def __init__(
        self,
        client: MediaServicesClient,
        retry: RetryPolicy,
        clock: Clock,
        *,
        endpoint_name: str = "default",
        wait_for_endpoint: bool = True,
        endpoint_poll_interval_seconds: float = 10.0,
        endpoint_start_timeout_seconds: float = 600.0,
    ) -> None:
        self._client = client
        self._retry = retry
        self._clock = clock
        self._endpoint_name = endpoint_name
        self._wait_for_endpoint = wait_for_endpoint
        self._endpoint_poll_interval_seconds = endpoint_poll_interval_seconds
        self._endpoint_start_timeout_seconds = endpoint_start_timeout_seconds

    def publish(self, *, asset_name: str, locator_name: str, streaming_policy_name: str) -> StreamingLocator:
        locator = self._client.create_streaming_locator(locator_name, asset_name, streaming_policy_name)
        logger.info(
            "streaming.locator_created locator=%s asset=%s policy=%s",
            locator.name,
            asset_name,
            streaming_policy_name,
        )
        return locator

    def resolve_playback_urls(
        self,
        locator_name: str,
        *,
        cancellation: CancellationToken | None = None,
    ) -> list[str]:
        endpoint = self.ensure_endpoint_running(cancellation=cancellation)
        streaming_paths = self._retry.call(
            "streaming_locators.list_paths",
            lambda: self._client.list_streaming_paths(locator_name),
        )
        urls = playback_urls(endpoint.host_name, streaming_paths)
        logger.info("streaming.urls_resolved locator=%s count=%s", locator_name, len(urls))
        return urls

    def ensure_endpoint_running(self, *, cancellation: CancellationToken | None = None) -> StreamingEndpoint:
        """Start the endpoint when stopped and, when configured, wait for it to report Running."""
        endpoint = self._get_endpoint()
        if endpoint.resource_state is StreamingEndpointResourceState.RUNNING:
            return endpoint

        if endpoint.resource_state in _START_REJECTED_STATES:
            raise self._not_ready(endpoint, reason="start_rejected_in_state")

        if endpoint.resource_state is StreamingEndpointResourceState.STOPPED:
            logger.info(
                "streaming.endpoint_starting endpoint=%s state=%s",
                endpoint.name,
                endpoint.resource_state.value,
            )
            self._client.start_streaming_endpoint(self._endpoint_name)

        if not self._wait_for_endpoint:
            raise self._not_ready(endpoint, reason="start_not_awaited")

        deadline = self._clock.now() + self._endpoint_start_timeout_seconds
        while True:
            remaining = deadline - self._clock.now()
            if remaining <= 0:
                raise self._not_ready(endpoint, reason="start_timeout")
            self._clock.sleep(min(self._endpoint_poll_interval_seconds, remaining), cancellation)
            if cancellation is not None and cancellation.cancelled:
                raise self._not_ready(endpoint, reason="cancelled")

            endpoint = self._get_endpoint()
            if endpoint.resource_state is StreamingEndpointResourceState.RUNNING:
                logger.info("streaming.endpoint_running endpoint=%s", endpoint.name)
                return endpoint

    def _get_endpoint(self) -> StreamingEndpoint:
        endpoint = self._retry.call(
            "streaming_endpoints.get",
            lambda: self._client.get_streaming_endpoint(self._endpoint_name),
        )
        if endpoint is None:
            raise StreamingEndpointNotFoundError(
                "Streaming endpoint not found",
                details={"endpoint_name": self._endpoint_name},
            )
        return endpoint

    @staticmethod
    def _not_ready(endpoint: StreamingEndpoint, *, reason: str) -> StreamingEndpointNotReadyError:
        return StreamingEndpointNotReadyError(
            "Streaming endpoint is not running",
            details={
                "endpoint_name": endpoint.name,
                "resource_state": endpoint.resource_state.value,
                "reason": reason,
            },
        )
