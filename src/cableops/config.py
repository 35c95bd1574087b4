"""Pydantic configuration models for CableOps.

Uses pydantic-settings for environment variable loading
with validation and type coercion.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cableops.errors import ConfigLoadError
from cableops.model.capabilities import DEFAULT_TABLE, CapabilityTable


class CableOpsSettings(BaseSettings):
    """Main application settings.

    Settings can be provided via:
    - Environment variables (prefixed with CABLEOPS_)
    - .env file in project root
    - Direct instantiation
    """

    model_config = SettingsConfigDict(
        env_prefix="CABLEOPS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Snapshot settings
    snapshot_file: Path = Field(
        default=Path("examples/office.yaml"),
        description="Path to the workspace snapshot (YAML or JSON)",
    )

    # Capability overrides
    capabilities_file: Path | None = Field(
        default=None,
        description="YAML mapping of device type to capability overrides",
    )

    # Ping simulation
    ping_seed: int | None = Field(
        default=None,
        description="Seed for simulated ping latency (random when unset)",
    )

    # Logging
    log_level: str = Field(
        default="WARNING",
        description="Logging level",
    )

    log_dir: Path | None = Field(
        default=None,
        description="Directory for log files (console only when unset)",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper


def get_settings() -> CableOpsSettings:
    """Get application settings."""
    return CableOpsSettings()


def load_capability_table(settings: CableOpsSettings) -> CapabilityTable:
    """Build the capability table, applying overrides from settings.

    Raises:
        ConfigLoadError: If the overrides file cannot be read
        ConfigValidationError: If an override is invalid
    """
    path = settings.capabilities_file
    if path is None:
        return DEFAULT_TABLE

    try:
        with open(path, encoding="utf-8") as f:
            overrides: Any = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigLoadError(
            f"Cannot read capability overrides: {e}",
            {"path": str(path)},
        ) from e

    if not isinstance(overrides, dict) or not all(isinstance(v, dict) for v in overrides.values()):
        raise ConfigLoadError(
            "Capability overrides must map device types to field mappings",
            {"path": str(path)},
        )

    return DEFAULT_TABLE.with_overrides(overrides)
