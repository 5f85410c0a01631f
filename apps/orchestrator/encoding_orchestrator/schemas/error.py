"""Error payload schemas."""

from typing import Any

from pydantic import BaseModel

from encoding_orchestrator.schemas.media import JobError, JobState


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class JobOutputDiagnostics(BaseModel):
    asset_name: str
    state: JobState
    progress: int
    error: JobError | None = None


class JobFailureDetails(BaseModel):
    job_name: str
    transform_name: str
    state: JobState
    outputs: list[JobOutputDiagnostics]
