"""Azure Media Services adapter built on ``azure-mgmt-media`` and ``azure-identity``."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
import logging
from typing import Any

from encoding_orchestrator.adapters.media.base import MediaServicesClient
from encoding_orchestrator.core.logging_safety import safe_log_identifier
from encoding_orchestrator.errors import (
    AuthenticationError,
    ConfigurationError,
    MediaServiceError,
    TransientServiceError,
)
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

logger = logging.getLogger(__name__)

_TRANSIENT_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})


def _value(member: Any) -> Any:
    return getattr(member, "value", member)


def _to_asset(sdk_asset: Any) -> Asset:
    return Asset(
        name=sdk_asset.name,
        asset_id=sdk_asset.asset_id,
        container=sdk_asset.container,
        created_at=sdk_asset.created,
    )


def _to_transform(sdk_transform: Any) -> Transform:
    outputs = []
    for sdk_output in sdk_transform.outputs or []:
        preset_name = getattr(sdk_output.preset, "preset_name", None)
        outputs.append(
            TransformOutput(
                preset_name=_value(preset_name),
                on_error=_value(sdk_output.on_error) or "StopProcessingJob",
                relative_priority=_value(sdk_output.relative_priority) or "Normal",
            )
        )
    return Transform(name=sdk_transform.name, outputs=outputs, created_at=sdk_transform.created)


def _to_job_error(sdk_error: Any) -> JobError | None:
    if sdk_error is None:
        return None
    return JobError(
        code=_value(sdk_error.code),
        message=sdk_error.message,
        category=_value(sdk_error.category),
        retry=_value(sdk_error.retry),
    )


def _to_job(sdk_job: Any, transform_name: str) -> Job:
    outputs = [
        JobOutput(
            asset_name=sdk_output.asset_name,
            state=JobState(_value(sdk_output.state) or JobState.QUEUED.value),
            progress=sdk_output.progress or 0,
            error=_to_job_error(sdk_output.error),
        )
        for sdk_output in sdk_job.outputs or []
    ]
    return Job(
        name=sdk_job.name,
        transform_name=transform_name,
        state=JobState(_value(sdk_job.state)),
        input_asset_name=getattr(sdk_job.input, "asset_name", None) or "",
        outputs=outputs,
        created_at=sdk_job.created,
        last_modified_at=sdk_job.last_modified,
    )


def _to_locator(sdk_locator: Any) -> StreamingLocator:
    locator_id = sdk_locator.streaming_locator_id
    return StreamingLocator(
        name=sdk_locator.name,
        asset_name=sdk_locator.asset_name,
        streaming_policy_name=sdk_locator.streaming_policy_name,
        locator_id=str(locator_id) if locator_id else None,
    )


def _to_endpoint(sdk_endpoint: Any) -> StreamingEndpoint:
    return StreamingEndpoint(
        name=sdk_endpoint.name,
        host_name=sdk_endpoint.host_name,
        resource_state=StreamingEndpointResourceState(_value(sdk_endpoint.resource_state)),
    )


def _to_streaming_path(sdk_path: Any) -> StreamingPath:
    return StreamingPath(
        streaming_protocol=StreamingProtocol(_value(sdk_path.streaming_protocol)),
        encryption_scheme=_value(sdk_path.encryption_scheme) or "NoEncryption",
        paths=list(sdk_path.paths or []),
    )


@contextmanager
def _translate_errors(operation: str) -> Iterator[None]:
    from azure.core.exceptions import (
        ClientAuthenticationError,
        HttpResponseError,
        ServiceRequestError,
        ServiceResponseError,
    )

    try:
        yield
    except ClientAuthenticationError as exc:
        raise AuthenticationError(
            "Media service rejected the credential",
            details={"operation": operation},
        ) from exc
    except (ServiceRequestError, ServiceResponseError) as exc:
        raise TransientServiceError(
            "Media service is unreachable",
            details={"operation": operation, "reason": type(exc).__name__},
        ) from exc
    except HttpResponseError as exc:
        details = {
            "operation": operation,
            "status_code": exc.status_code,
            "error_code": getattr(exc.error, "code", None),
        }
        if exc.status_code in _TRANSIENT_STATUS_CODES:
            raise TransientServiceError("Media service is temporarily unavailable", details=details) from exc
        raise MediaServiceError(exc.message or "Media service request failed", details=details) from exc


@contextmanager
def _absent_on_not_found(found: list[bool]) -> Iterator[None]:
    from azure.core.exceptions import ResourceNotFoundError

    try:
        yield
    except ResourceNotFoundError:
        found.append(False)


class AzureMediaServicesClient(MediaServicesClient):
    """Media service client bound to one subscription, resource group and account."""

    def __init__(self, sdk_client: Any, *, resource_group: str, account_name: str) -> None:
        self._sdk = sdk_client
        self._resource_group = resource_group
        self._account_name = account_name

    def _scope(self) -> tuple[str, str]:
        return self._resource_group, self._account_name

    def _lookup(self, operation: str, call, *args) -> Any | None:
        found: list[bool] = []
        result = None
        with _translate_errors(operation), _absent_on_not_found(found):
            result = call(*self._scope(), *args)
        return None if found else result

    def _delete(self, operation: str, call, *args) -> bool:
        found: list[bool] = []
        with _translate_errors(operation), _absent_on_not_found(found):
            call(*self._scope(), *args)
        return not found

    def get_asset(self, name: str) -> Asset | None:
        sdk_asset = self._lookup("assets.get", self._sdk.assets.get, name)
        return _to_asset(sdk_asset) if sdk_asset is not None else None

    def create_or_update_asset(self, name: str) -> Asset:
        from azure.mgmt.media.models import Asset as SdkAsset

        with _translate_errors("assets.create_or_update"):
            sdk_asset = self._sdk.assets.create_or_update(*self._scope(), name, SdkAsset())
        return _to_asset(sdk_asset)

    def delete_asset(self, name: str) -> bool:
        return self._delete("assets.delete", self._sdk.assets.delete, name)

    def list_container_sas(
        self,
        asset_name: str,
        permissions: AssetContainerPermission,
        expiry: datetime,
    ) -> list[str]:
        from azure.mgmt.media.models import ListContainerSasInput

        parameters = ListContainerSasInput(permissions=permissions.value, expiry_time=expiry)
        with _translate_errors("assets.list_container_sas"):
            response = self._sdk.assets.list_container_sas(*self._scope(), asset_name, parameters)
        return list(response.asset_container_sas_urls or [])

    def get_transform(self, name: str) -> Transform | None:
        sdk_transform = self._lookup("transforms.get", self._sdk.transforms.get, name)
        return _to_transform(sdk_transform) if sdk_transform is not None else None

    def create_or_update_transform(self, name: str, outputs: list[TransformOutput]) -> Transform:
        from azure.mgmt.media.models import (
            BuiltInStandardEncoderPreset,
            Transform as SdkTransform,
            TransformOutput as SdkTransformOutput,
        )

        sdk_outputs = [
            SdkTransformOutput(
                preset=BuiltInStandardEncoderPreset(preset_name=output.preset_name),
                on_error=output.on_error,
                relative_priority=output.relative_priority,
            )
            for output in outputs
        ]
        with _translate_errors("transforms.create_or_update"):
            sdk_transform = self._sdk.transforms.create_or_update(
                *self._scope(), name, SdkTransform(outputs=sdk_outputs)
            )
        return _to_transform(sdk_transform)

    def get_job(self, transform_name: str, name: str) -> Job | None:
        sdk_job = self._lookup("jobs.get", self._sdk.jobs.get, transform_name, name)
        return _to_job(sdk_job, transform_name) if sdk_job is not None else None

    def create_job(
        self,
        transform_name: str,
        name: str,
        input_asset_name: str,
        output_asset_names: list[str],
    ) -> Job:
        from azure.mgmt.media.models import Job as SdkJob, JobInputAsset, JobOutputAsset

        parameters = SdkJob(
            input=JobInputAsset(asset_name=input_asset_name),
            outputs=[JobOutputAsset(asset_name=asset_name) for asset_name in output_asset_names],
        )
        with _translate_errors("jobs.create"):
            sdk_job = self._sdk.jobs.create(*self._scope(), transform_name, name, parameters)
        return _to_job(sdk_job, transform_name)

    def delete_job(self, transform_name: str, name: str) -> bool:
        return self._delete("jobs.delete", self._sdk.jobs.delete, transform_name, name)

    def create_streaming_locator(self, name: str, asset_name: str, streaming_policy_name: str) -> StreamingLocator:
        from azure.mgmt.media.models import StreamingLocator as SdkStreamingLocator

        parameters = SdkStreamingLocator(asset_name=asset_name, streaming_policy_name=streaming_policy_name)
        with _translate_errors("streaming_locators.create"):
            sdk_locator = self._sdk.streaming_locators.create(*self._scope(), name, parameters)
        return _to_locator(sdk_locator)

    def list_streaming_paths(self, locator_name: str) -> list[StreamingPath]:
        with _translate_errors("streaming_locators.list_paths"):
            response = self._sdk.streaming_locators.list_paths(*self._scope(), locator_name)
        return [_to_streaming_path(sdk_path) for sdk_path in response.streaming_paths or []]

    def get_streaming_endpoint(self, name: str) -> StreamingEndpoint | None:
        sdk_endpoint = self._lookup("streaming_endpoints.get", self._sdk.streaming_endpoints.get, name)
        return _to_endpoint(sdk_endpoint) if sdk_endpoint is not None else None

    def start_streaming_endpoint(self, name: str) -> None:
        # The returned poller is not awaited; callers observe readiness via get_streaming_endpoint.
        with _translate_errors("streaming_endpoints.begin_start"):
            self._sdk.streaming_endpoints.begin_start(*self._scope(), name)

    def delete_content_key_policy(self, name: str) -> bool:
        return self._delete("content_key_policies.delete", self._sdk.content_key_policies.delete, name)


def create_azure_media_client(
    *,
    subscription_id: str,
    resource_group: str,
    account_name: str,
    tenant_id: str,
    client_id: str,
    client_secret: str,
    aad_endpoint: str,
    arm_endpoint: str,
    arm_aad_audience: str,
) -> AzureMediaServicesClient:
    """Acquire a service-principal credential and build a client handle.

    A token is requested eagerly so a rejected principal fails here rather than on the first call.
    """
    try:
        from azure.core.exceptions import AzureError
        from azure.identity import ClientSecretCredential
        from azure.mgmt.media import AzureMediaServices
    except ImportError as exc:
        raise ConfigurationError(
            "Azure SDK libraries are not installed",
            details={"provider": "azure", "missing_module": exc.name},
        ) from exc

    scope = f"{arm_aad_audience.rstrip('/')}/.default"
    safe_client_id = safe_log_identifier(client_id, prefix="cid")
    credential = ClientSecretCredential(tenant_id, client_id, client_secret, authority=aad_endpoint)
    try:
        credential.get_token(scope)
    except AzureError as exc:
        logger.warning("bootstrap.auth_rejected client_id=%s reason=%s", safe_client_id, type(exc).__name__)
        raise AuthenticationError(
            "Service principal was rejected",
            details={"tenant_id": tenant_id, "reason": type(exc).__name__},
        ) from exc

    sdk_client = AzureMediaServices(
        credential,
        subscription_id,
        base_url=arm_endpoint,
        credential_scopes=[scope],
    )
    logger.info("bootstrap.connected client_id=%s account=%s", safe_client_id, account_name)
    return AzureMediaServicesClient(sdk_client, resource_group=resource_group, account_name=account_name)


__all__ = ["AzureMediaServicesClient", "create_azure_media_client"]
