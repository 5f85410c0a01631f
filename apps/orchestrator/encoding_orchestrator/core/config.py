"""Application configuration."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, SecretStr
from pydantic.alias_generators import to_snake
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from encoding_orchestrator.schemas.media import EncoderNamedPreset

DEFAULT_CONFIG_FILE = "appsettings.json"

# Required before an Azure-backed client can be constructed.
AZURE_REQUIRED_SETTINGS: tuple[str, ...] = (
    "subscription_id",
    "resource_group",
    "account_name",
    "aad_tenant_id",
    "aad_client_id",
    "aad_secret",
)


class AppSettingsJsonSource(JsonConfigSettingsSource):
    """JSON file layer accepting both ``AccountName`` and ``account_name`` style keys."""

    def _read_file(self, file_path: Path) -> dict[str, Any]:
        data = super()._read_file(file_path)
        return {to_snake(key): value for key, value in data.items()}


class Settings(BaseSettings):
    """Runtime configuration layered from init kwargs, environment, .env and a JSON file."""

    media_provider: Literal["azure", "memory"] = "azure"

    subscription_id: str | None = None
    resource_group: str | None = None
    account_name: str | None = None
    aad_tenant_id: str | None = None
    aad_client_id: str | None = None
    aad_secret: SecretStr | None = None
    arm_aad_audience: str = "https://management.core.windows.net"
    aad_endpoint: str = "https://login.microsoftonline.com"
    arm_endpoint: str = "https://management.azure.com"
    location: str | None = None

    file_to_upload: str | None = None
    asset_name: str | None = None
    transform_name: str = "AdaptiveBitrateStreaming"
    encoder_preset: EncoderNamedPreset = EncoderNamedPreset.ADAPTIVE_STREAMING
    streaming_policy_name: str = "Predefined_ClearStreamingOnly"
    streaming_endpoint_name: str = "default"
    output_asset_collision_policy: Literal["rename", "fail"] = "rename"
    sas_expiry_hours: float = Field(default=4.0, gt=0)

    poll_interval_seconds: float = Field(default=20.0, gt=0)
    poll_timeout_seconds: float = Field(default=7200.0, ge=0)
    wait_for_streaming_endpoint: bool = True
    endpoint_poll_interval_seconds: float = Field(default=10.0, gt=0)
    endpoint_start_timeout_seconds: float = Field(default=600.0, ge=0)

    retry_attempts: int = Field(default=3, ge=1)
    retry_backoff_seconds: float = Field(default=2.0, ge=0)

    cleanup_after_run: bool = False
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="AMS_",
        env_file=".env",
        json_file=DEFAULT_CONFIG_FILE,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            AppSettingsJsonSource(settings_cls),
            file_secret_settings,
        )

    @property
    def poll_timeout(self) -> float | None:
        """Job wait deadline in seconds; ``None`` when disabled."""
        return self.poll_timeout_seconds or None

    def missing_azure_settings(self) -> list[str]:
        missing = []
        for name in AZURE_REQUIRED_SETTINGS:
            value = getattr(self, name)
            if isinstance(value, SecretStr):
                value = value.get_secret_value()
            if value is None or not str(value).strip():
                missing.append(name)
        return missing


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def load_settings(config_file: str | Path | None = None, **overrides) -> Settings:
    """Build settings reading ``config_file`` instead of the default JSON file."""
    if config_file is None:
        return Settings(**overrides) if overrides else get_settings()

    class FileSettings(Settings):
        model_config = SettingsConfigDict(json_file=str(config_file))

    return FileSettings(**overrides)
