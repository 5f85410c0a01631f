"""Job submission and completion polling."""

from __future__ import annotations

from collections.abc import Callable
import logging

from encoding_orchestrator.adapters.media.base import MediaServicesClient
from encoding_orchestrator.core.clock import CancellationToken, Clock
from encoding_orchestrator.domain.job_states import (
    expected_next_states,
    is_expected_transition,
    is_failed,
    is_terminal,
)
from encoding_orchestrator.errors import (
    JobFailedError,
    JobWaitCancelledError,
    JobWaitTimeoutError,
    MediaServiceError,
)
from encoding_orchestrator.schemas.error import JobFailureDetails, JobOutputDiagnostics
from encoding_orchestrator.schemas.media import Job, JobState
from encoding_orchestrator.services.retry import RetryPolicy

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 20.0

ProgressListener = Callable[[Job], None]


def job_failure_details(job: Job) -> dict:
    details = JobFailureDetails(
        job_name=job.name,
        transform_name=job.transform_name,
        state=job.state,
        outputs=[
            JobOutputDiagnostics(
                asset_name=output.asset_name,
                state=output.state,
                progress=output.progress,
                error=output.error,
            )
            for output in job.outputs
        ],
    )
    return details.model_dump(mode="json")


def ensure_job_succeeded(job: Job) -> None:
    """Raise ``JobFailedError`` for a job that ended in Error or Canceled."""
    if is_failed(job.state):
        raise JobFailedError(
            f"Job ended in state {job.state.value}",
            details=job_failure_details(job),
        )


class JobService:
    def __init__(
        self,
        client: MediaServicesClient,
        retry: RetryPolicy,
        clock: Clock,
        *,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ) -> None:
        self._client = client
        self._retry = retry
        self._clock = clock
        self._poll_interval_seconds = poll_interval_seconds

    def submit(
        self,
        *,
        transform_name: str,
        job_name: str,
        input_asset_name: str,
        output_asset_names: list[str],
    ) -> Job:
        """Create the job unless one with the same name already exists."""
        existing = self._retry.call("jobs.get", lambda: self._client.get_job(transform_name, job_name))
        if existing is not None:
            logger.info("job.replayed job=%s state=%s", job_name, existing.state.value)
            return existing

        # Creation is not idempotent on the service side, so it is never retried.
        job = self._client.create_job(transform_name, job_name, input_asset_name, output_asset_names)
        logger.info(
            "job.submitted job=%s transform=%s input=%s outputs=%s",
            job_name,
            transform_name,
            input_asset_name,
            ",".join(output_asset_names),
        )
        return job

    def wait_for_completion(
        self,
        *,
        transform_name: str,
        job_name: str,
        timeout_seconds: float | None = None,
        cancellation: CancellationToken | None = None,
        on_progress: ProgressListener | None = None,
    ) -> Job:
        """Poll until the job reaches Finished, Error or Canceled and return that snapshot.

        Sleeps ``poll_interval_seconds`` between fetches, never past the deadline.
        Raises ``JobWaitTimeoutError`` once ``timeout_seconds`` elapse and
        ``JobWaitCancelledError`` when ``cancellation`` fires.
        """
        deadline = self._clock.now() + timeout_seconds if timeout_seconds else None
        previous_state: JobState | None = None

        while True:
            if cancellation is not None and cancellation.cancelled:
                raise JobWaitCancelledError(
                    "Stopped waiting for job",
                    details={
                        "job_name": job_name,
                        "last_state": previous_state.value if previous_state else None,
                    },
                )

            job = self._retry.call("jobs.get", lambda: self._client.get_job(transform_name, job_name))
            if job is None:
                raise MediaServiceError(
                    "Job disappeared while waiting for completion",
                    details={"job_name": job_name, "transform_name": transform_name},
                )

            self._report(job, previous_state)
            if on_progress is not None:
                on_progress(job)
            previous_state = job.state

            if is_terminal(job.state):
                return job

            delay = self._poll_interval_seconds
            if deadline is not None:
                remaining = deadline - self._clock.now()
                if remaining <= 0:
                    raise JobWaitTimeoutError(
                        "Job did not reach a terminal state in time",
                        details={
                            "job_name": job_name,
                            "last_state": job.state.value,
                            "timeout_seconds": timeout_seconds,
                        },
                    )
                delay = min(delay, remaining)

            self._clock.sleep(delay, cancellation)

    @staticmethod
    def _report(job: Job, previous_state: JobState | None) -> None:
        if not is_expected_transition(previous_state, job.state):
            logger.warning(
                "job.unexpected_transition job=%s previous=%s current=%s expected=%s",
                job.name,
                previous_state.value,
                job.state.value,
                ",".join(state.value for state in expected_next_states(previous_state)),
            )

        logger.info("job.polled job=%s state=%s", job.name, job.state.value)
        for index, output in enumerate(job.outputs):
            if output.state is JobState.PROCESSING:
                logger.info(
                    "job.output index=%s asset=%s state=%s progress=%s",
                    index,
                    output.asset_name,
                    output.state.value,
                    output.progress,
                )
            else:
                logger.info(
                    "job.output index=%s asset=%s state=%s",
                    index,
                    output.asset_name,
                    output.state.value,
                )
