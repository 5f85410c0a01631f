"""Orchestrator exception types."""

from encoding_orchestrator.schemas.error import ErrorResponse


class OrchestratorError(Exception):
    """Structured error that maps directly to the CLI error payload and exit code."""

    code = "ORCHESTRATOR_ERROR"
    exit_code = 4

    def __init__(self, message: str, details: dict | None = None, *, code: str | None = None) -> None:
        self.payload = ErrorResponse(code=code or self.code, message=message, details=details)
        super().__init__(message)


class ConfigurationError(OrchestratorError):
    code = "CONFIGURATION_INVALID"
    exit_code = 1


class AuthenticationError(OrchestratorError):
    code = "AUTHENTICATION_FAILED"
    exit_code = 1


class JobFailedError(OrchestratorError):
    """Job reached Error or Canceled."""

    code = "JOB_FAILED"
    exit_code = 2


class JobWaitTimeoutError(OrchestratorError):
    code = "JOB_WAIT_TIMEOUT"
    exit_code = 3


class JobWaitCancelledError(OrchestratorError):
    code = "JOB_WAIT_CANCELLED"
    exit_code = 3


class AssetNameConflictError(OrchestratorError):
    code = "ASSET_NAME_CONFLICT"


class UploadError(OrchestratorError):
    code = "UPLOAD_FAILED"


class StreamingEndpointNotFoundError(OrchestratorError):
    code = "STREAMING_ENDPOINT_NOT_FOUND"


class StreamingEndpointNotReadyError(OrchestratorError):
    code = "STREAMING_ENDPOINT_NOT_READY"


class MediaServiceError(OrchestratorError):
    code = "MEDIA_SERVICE_ERROR"


class TransientServiceError(MediaServiceError):
    """Failure that an idempotent call may retry."""

    code = "MEDIA_SERVICE_UNAVAILABLE"


__all__ = [
    "AssetNameConflictError",
    "AuthenticationError",
    "ConfigurationError",
    "JobFailedError",
    "JobWaitCancelledError",
    "JobWaitTimeoutError",
    "MediaServiceError",
    "OrchestratorError",
    "StreamingEndpointNotFoundError",
    "StreamingEndpointNotReadyError",
    "TransientServiceError",
    "UploadError",
]
