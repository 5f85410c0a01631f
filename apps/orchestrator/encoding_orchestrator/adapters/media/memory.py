"""In-memory media service used for dry runs and tests."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from encoding_orchestrator.adapters.media.base import MediaServicesClient
from encoding_orchestrator.errors import MediaServiceError
from encoding_orchestrator.schemas.media import (
    Asset,
    AssetContainerPermission,
    Job,
    JobError,
    JobOutput,
    JobState,
    StreamingEndpoint,
    StreamingEndpointResourceState,
    StreamingLocator,
    StreamingPath,
    StreamingProtocol,
    Transform,
    TransformOutput,
)

JobStep = JobState | tuple[JobState, int]

DEFAULT_JOB_SCRIPT: tuple[JobStep, ...] = (
    JobState.QUEUED,
    (JobState.PROCESSING, 50),
    JobState.FINISHED,
)

_PATH_FORMATS: dict[StreamingProtocol, str] = {
    StreamingProtocol.HLS: "/{locator_id}/{manifest}/manifest(format=m3u8-cmaf)",
    StreamingProtocol.DASH: "/{locator_id}/{manifest}/manifest(format=mpd-time-cmaf)",
    StreamingProtocol.SMOOTH_STREAMING: "/{locator_id}/{manifest}/manifest",
}


@dataclass(slots=True)
class _JobRecord:
    job: Job
    script: list[JobStep] = field(default_factory=list)


@dataclass(slots=True)
class _EndpointRecord:
    endpoint: StreamingEndpoint
    polls_until_running: int = 0


@dataclass(slots=True)
class SasRequest:
    asset_name: str
    permissions: AssetContainerPermission
    expiry: datetime


class InMemoryMediaServicesClient(MediaServicesClient):
    """Deterministic media account.

    Job snapshots advance one scripted step per ``get_job`` call; streaming endpoints
    report ``Starting`` for ``endpoint_start_polls`` reads after a start command, then ``Running``.
    """

    def __init__(
        self,
        *,
        account_name: str = "memoryaccount",
        endpoint_host_name: str = "memoryaccount-usw22.streaming.media.azure.net",
        endpoint_state: StreamingEndpointResourceState = StreamingEndpointResourceState.RUNNING,
        endpoint_start_polls: int = 1,
        streaming_paths: list[StreamingPath] | None = None,
        default_job_script: tuple[JobStep, ...] = DEFAULT_JOB_SCRIPT,
    ) -> None:
        self.account_name = account_name
        self.assets: dict[str, Asset] = {}
        self.transforms: dict[str, Transform] = {}
        self.jobs: dict[tuple[str, str], _JobRecord] = {}
        self.locators: dict[str, StreamingLocator] = {}
        self.endpoints: dict[str, _EndpointRecord] = {
            "default": _EndpointRecord(
                endpoint=StreamingEndpoint(
                    name="default",
                    host_name=endpoint_host_name,
                    resource_state=endpoint_state,
                )
            )
        }
        self.content_key_policies: set[str] = set()
        self.sas_requests: list[SasRequest] = []
        self.calls: Counter[str] = Counter()
        self.endpoint_start_polls = endpoint_start_polls
        self.streaming_paths = streaming_paths
        self.default_job_script = default_job_script
        self._pending_scripts: dict[tuple[str, str], list[JobStep]] = {}
        self._failures: dict[str, list[Exception]] = {}

    # Test hooks

    def script_job(self, transform_name: str, name: str, steps: list[JobStep]) -> None:
        """Script the states returned by successive ``get_job`` calls for a job."""
        key = (transform_name, name)
        record = self.jobs.get(key)
        if record is None:
            self._pending_scripts[key] = list(steps)
        else:
            record.script = list(steps)

    def fail_next(self, method: str, *errors: Exception) -> None:
        """Raise ``errors`` from the next calls of ``method``, one per call."""
        self._failures.setdefault(method, []).extend(errors)

    def _enter(self, method: str) -> None:
        self.calls[method] += 1
        pending = self._failures.get(method)
        if pending:
            raise pending.pop(0)

    # Assets

    def get_asset(self, name: str) -> Asset | None:
        self._enter("get_asset")
        asset = self.assets.get(name)
        return asset.model_copy(deep=True) if asset is not None else None

    def create_or_update_asset(self, name: str) -> Asset:
        self._enter("create_or_update_asset")
        existing = self.assets.get(name)
        if existing is None:
            asset_id = str(uuid4())
            existing = Asset(
                name=name,
                asset_id=asset_id,
                container=f"asset-{asset_id}",
                created_at=datetime.now(UTC),
            )
            self.assets[name] = existing
        return existing.model_copy(deep=True)

    def delete_asset(self, name: str) -> bool:
        self._enter("delete_asset")
        return self.assets.pop(name, None) is not None

    def list_container_sas(
        self,
        asset_name: str,
        permissions: AssetContainerPermission,
        expiry: datetime,
    ) -> list[str]:
        self._enter("list_container_sas")
        asset = self.assets.get(asset_name)
        if asset is None:
            raise MediaServiceError("Asset not found", details={"asset_name": asset_name})
        self.sas_requests.append(SasRequest(asset_name=asset_name, permissions=permissions, expiry=expiry))
        return [
            f"https://{self.account_name}.blob.core.windows.net/{asset.container}"
            f"?sv=2023-11-03&se={expiry.strftime('%Y-%m-%dT%H:%M:%SZ')}&sp=rw&sig=memory"
        ]

    # Transforms

    def get_transform(self, name: str) -> Transform | None:
        self._enter("get_transform")
        transform = self.transforms.get(name)
        return transform.model_copy(deep=True) if transform is not None else None

    def create_or_update_transform(self, name: str, outputs: list[TransformOutput]) -> Transform:
        self._enter("create_or_update_transform")
        transform = Transform(name=name, outputs=list(outputs), created_at=datetime.now(UTC))
        self.transforms[name] = transform
        return transform.model_copy(deep=True)

    # Jobs

    def get_job(self, transform_name: str, name: str) -> Job | None:
        self._enter("get_job")
        record = self.jobs.get((transform_name, name))
        if record is None:
            return None
        if record.script:
            self._apply_step(record.job, record.script.pop(0))
        return record.job.model_copy(deep=True)

    def create_job(
        self,
        transform_name: str,
        name: str,
        input_asset_name: str,
        output_asset_names: list[str],
    ) -> Job:
        self._enter("create_job")
        key = (transform_name, name)
        if transform_name not in self.transforms:
            raise MediaServiceError("Transform not found", details={"transform_name": transform_name})
        if key in self.jobs:
            raise MediaServiceError("Job already exists", details={"job_name": name})
        for asset_name in [input_asset_name, *output_asset_names]:
            if asset_name not in self.assets:
                raise MediaServiceError("Asset not found", details={"asset_name": asset_name})

        now = datetime.now(UTC)
        job = Job(
            name=name,
            transform_name=transform_name,
            state=JobState.QUEUED,
            input_asset_name=input_asset_name,
            outputs=[JobOutput(asset_name=asset_name) for asset_name in output_asset_names],
            created_at=now,
            last_modified_at=now,
        )
        script = self._pending_scripts.pop(key, list(self.default_job_script))
        self.jobs[key] = _JobRecord(job=job, script=script)
        return job.model_copy(deep=True)

    def delete_job(self, transform_name: str, name: str) -> bool:
        self._enter("delete_job")
        return self.jobs.pop((transform_name, name), None) is not None

    @staticmethod
    def _apply_step(job: Job, step: JobStep) -> None:
        state, progress = step if isinstance(step, tuple) else (step, None)
        job.state = state
        job.last_modified_at = datetime.now(UTC)
        for output in job.outputs:
            output.state = state
            if state is JobState.PROCESSING:
                output.progress = progress if progress is not None else output.progress
            elif state is JobState.FINISHED:
                output.progress = 100
            if state is JobState.ERROR:
                output.error = JobError(
                    code="ServiceError",
                    message="Fatal service error, please contact support.",
                    category="Service",
                    retry="DoNotRetry",
                )

    # Streaming

    def create_streaming_locator(self, name: str, asset_name: str, streaming_policy_name: str) -> StreamingLocator:
        self._enter("create_streaming_locator")
        if name in self.locators:
            raise MediaServiceError("Streaming locator already exists", details={"locator_name": name})
        if asset_name not in self.assets:
            raise MediaServiceError("Asset not found", details={"asset_name": asset_name})
        locator = StreamingLocator(
            name=name,
            asset_name=asset_name,
            streaming_policy_name=streaming_policy_name,
            locator_id=str(uuid4()),
        )
        self.locators[name] = locator
        return locator.model_copy(deep=True)

    def list_streaming_paths(self, locator_name: str) -> list[StreamingPath]:
        self._enter("list_streaming_paths")
        locator = self.locators.get(locator_name)
        if locator is None:
            raise MediaServiceError("Streaming locator not found", details={"locator_name": locator_name})
        if self.streaming_paths is not None:
            return [path.model_copy(deep=True) for path in self.streaming_paths]

        manifest = f"{locator.asset_name}.ism"
        return [
            StreamingPath(
                streaming_protocol=protocol,
                paths=[path_format.format(locator_id=locator.locator_id, manifest=manifest)],
            )
            for protocol, path_format in _PATH_FORMATS.items()
        ]

    def add_streaming_endpoint(self, endpoint: StreamingEndpoint) -> None:
        self.endpoints[endpoint.name] = _EndpointRecord(endpoint=endpoint)

    def get_streaming_endpoint(self, name: str) -> StreamingEndpoint | None:
        self._enter("get_streaming_endpoint")
        record = self.endpoints.get(name)
        if record is None:
            return None
        if record.endpoint.resource_state is StreamingEndpointResourceState.STARTING:
            if record.polls_until_running <= 0:
                record.endpoint.resource_state = StreamingEndpointResourceState.RUNNING
            record.polls_until_running -= 1
        return record.endpoint.model_copy(deep=True)

    def start_streaming_endpoint(self, name: str) -> None:
        self._enter("start_streaming_endpoint")
        record = self.endpoints.get(name)
        if record is None:
            raise MediaServiceError("Streaming endpoint not found", details={"endpoint_name": name})
        if record.endpoint.resource_state is not StreamingEndpointResourceState.RUNNING:
            record.endpoint.resource_state = StreamingEndpointResourceState.STARTING
            record.polls_until_running = self.endpoint_start_polls

    # Content key policies

    def delete_content_key_policy(self, name: str) -> bool:
        self._enter("delete_content_key_policy")
        if name in self.content_key_policies:
            self.content_key_policies.discard(name)
            return True
        return False


__all__ = ["DEFAULT_JOB_SCRIPT", "InMemoryMediaServicesClient", "JobStep", "SasRequest"]
