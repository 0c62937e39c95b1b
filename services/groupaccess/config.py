"""
Configuration management for groupaccess.

Non-secret configuration loaded from YAML file, overridden by environment
variables (prefix ``GROUPACCESS_``, nested delimiter ``__``).
"""

import os
from enum import StrEnum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_FILE = "/etc/groupaccess/config.yaml"


def yaml_config_settings_source() -> dict[str, Any]:
    """Load configuration from YAML file."""
    config_path = Path(os.environ.get("GROUPACCESS_CONFIG_FILE", DEFAULT_CONFIG_FILE))
    if config_path.exists():
        with open(config_path) as f:
            return yaml.safe_load(f) or {}
    return {}


# --- Access Configuration ---


class AccessConfig(BaseModel):
    """Permission checking behaviour."""

    bypass_permission: str = Field(
        default="bypass group access",
        description="Global account permission that short-circuits every group check to allowed",
    )
    member_inherits_outsider: bool = Field(
        default=False,
        description="Materialize the outsider grants of a group type into every member "
        "entry at calculation time. Off by default: tiers are strictly exclusive.",
    )


# --- Role Configuration ---


class InternalRoleDefaults(BaseModel):
    """Label and weight given to an internal role when a group type is created."""

    label: str
    weight: int


class RolesConfig(BaseModel):
    """Role catalog defaults."""

    default_weight: int = Field(
        default=0,
        description="Weight given to the first role saved into an empty catalog",
    )
    anonymous: InternalRoleDefaults = Field(
        default_factory=lambda: InternalRoleDefaults(label="Anonymous", weight=-102)
    )
    outsider: InternalRoleDefaults = Field(
        default_factory=lambda: InternalRoleDefaults(label="Outsider", weight=-101)
    )
    member: InternalRoleDefaults = Field(
        default_factory=lambda: InternalRoleDefaults(label="Member", weight=-100)
    )


# --- Store Configuration ---


class StoreBackend(StrEnum):
    """Supported role configuration store backends."""

    MEMORY = "memory"
    FILESYSTEM = "filesystem"


class FilesystemStoreConfig(BaseModel):
    """YAML-file role store configuration."""

    root_dir: str = Field(
        default="/var/lib/groupaccess/config",
        description="Directory holding one YAML file per group type and role",
    )


class StoreConfig(BaseModel):
    """Role configuration store."""

    backend: StoreBackend = Field(
        default=StoreBackend.MEMORY,
        description="Store backend: memory or filesystem",
    )
    filesystem: FilesystemStoreConfig = Field(default_factory=FilesystemStoreConfig)


# --- Main Settings ---


class Settings(BaseSettings):
    """Main library settings."""

    model_config = SettingsConfigDict(
        env_prefix="GROUPACCESS_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="groupaccess")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=True, description="JSON logging in production")

    access: AccessConfig = Field(default_factory=AccessConfig)
    roles: RolesConfig = Field(default_factory=RolesConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: Any,
        env_settings: Any,
        dotenv_settings: Any,
        file_secret_settings: Any,
    ) -> tuple[Any, ...]:
        """Customize settings sources: env vars override YAML config."""
        return (
            init_settings,
            env_settings,
            yaml_config_settings_source,
            dotenv_settings,
            file_secret_settings,
        )


# Global settings instance
settings = Settings()
