"""Media service resource schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class JobState(str, Enum):
    QUEUED = "Queued"
    SCHEDULED = "Scheduled"
    PROCESSING = "Processing"
    CANCELING = "Canceling"
    FINISHED = "Finished"
    ERROR = "Error"
    CANCELED = "Canceled"


class EncoderNamedPreset(str, Enum):
    ADAPTIVE_STREAMING = "AdaptiveStreaming"
    CONTENT_AWARE_ENCODING = "ContentAwareEncoding"
    H264_MULTIPLE_BITRATE_1080P = "H264MultipleBitrate1080p"
    H264_MULTIPLE_BITRATE_720P = "H264MultipleBitrate720p"
    H264_SINGLE_BITRATE_1080P = "H264SingleBitrate1080p"
    AAC_GOOD_QUALITY_AUDIO = "AACGoodQualityAudio"


class PredefinedStreamingPolicy(str, Enum):
    CLEAR_STREAMING_ONLY = "Predefined_ClearStreamingOnly"
    DOWNLOAD_AND_CLEAR_STREAMING = "Predefined_DownloadAndClearStreaming"
    DOWNLOAD_ONLY = "Predefined_DownloadOnly"
    CLEAR_KEY = "Predefined_ClearKey"
    MULTI_DRM_CENC_STREAMING = "Predefined_MultiDrmCencStreaming"
    MULTI_DRM_STREAMING = "Predefined_MultiDrmStreaming"


class AssetContainerPermission(str, Enum):
    READ = "Read"
    READ_WRITE = "ReadWrite"
    READ_WRITE_DELETE = "ReadWriteDelete"


class StreamingEndpointResourceState(str, Enum):
    STOPPED = "Stopped"
    STARTING = "Starting"
    RUNNING = "Running"
    STOPPING = "Stopping"
    DELETING = "Deleting"
    SCALING = "Scaling"


class StreamingProtocol(str, Enum):
    HLS = "Hls"
    DASH = "Dash"
    SMOOTH_STREAMING = "SmoothStreaming"
    DOWNLOAD = "Download"


class Asset(BaseModel):
    name: str
    asset_id: str | None = None
    container: str | None = None
    created_at: datetime | None = None


class TransformOutput(BaseModel):
    # None for custom encoder presets, which carry no built-in name.
    preset_name: str | None = None
    on_error: str = "StopProcessingJob"
    relative_priority: str = "Normal"


class Transform(BaseModel):
    name: str
    outputs: list[TransformOutput]
    created_at: datetime | None = None


class JobError(BaseModel):
    code: str | None = None
    message: str | None = None
    category: str | None = None
    retry: str | None = None


class JobOutput(BaseModel):
    asset_name: str
    state: JobState = JobState.QUEUED
    progress: int = Field(default=0, ge=0, le=100)
    error: JobError | None = None


class Job(BaseModel):
    name: str
    transform_name: str
    state: JobState
    input_asset_name: str
    outputs: list[JobOutput]
    created_at: datetime | None = None
    last_modified_at: datetime | None = None


class StreamingLocator(BaseModel):
    name: str
    asset_name: str
    streaming_policy_name: str
    locator_id: str | None = None


class StreamingEndpoint(BaseModel):
    name: str
    host_name: str
    resource_state: StreamingEndpointResourceState


class StreamingPath(BaseModel):
    streaming_protocol: StreamingProtocol
    encryption_scheme: str = "NoEncryption"
    paths: list[str] = Field(default_factory=list)
