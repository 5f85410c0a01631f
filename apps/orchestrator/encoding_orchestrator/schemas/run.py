"""Run-scoped naming and result schemas."""

from pydantic import BaseModel

from encoding_orchestrator.schemas.media import Job


class RunNames(BaseModel):
    """Resource names shared by one orchestration run."""

    uniqueness: str
    job_name: str
    input_asset_name: str
    output_asset_name: str
    locator_name: str


class RunResult(BaseModel):
    job: Job
    transform_name: str
    input_asset_name: str
    output_asset_name: str
    locator_name: str
    playback_urls: list[str]
