"""Configuration loading and validation for dashmigrate."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


class DataSourceConfig(BaseModel):
    """A data source known to the installation.

    Used to turn legacy data source names into references during migration.
    """

    name: str
    uid: str
    type: str
    default: bool = False


class MigrationConfig(BaseModel):
    """Migration engine configuration."""

    # Pin migrations to a version below the latest known one
    target_version: int | None = None

    @field_validator("target_version")
    @classmethod
    def validate_target_version(cls, v: int | None) -> int | None:
        """Validate target_version is not below the baseline."""
        from dashmigrate.migrations.runner import MIN_VERSION

        if v is not None and v < MIN_VERSION:
            raise ValueError(f"target_version must be at least {MIN_VERSION}")
        return v


class Config(BaseModel):
    """Root configuration for dashmigrate."""

    log_level: str = "INFO"
    log_json: bool = False

    migration: MigrationConfig = Field(default_factory=MigrationConfig)
    datasources: list[DataSourceConfig] = Field(default_factory=list)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log_level is valid."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR"}
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"log_level must be one of: {allowed}")
        return v_upper

    @model_validator(mode="after")
    def validate_datasources(self) -> "Config":
        """Reject duplicate names or uids and more than one default."""
        names = [ds.name for ds in self.datasources]
        uids = [ds.uid for ds in self.datasources]
        if len(names) != len(set(names)):
            raise ValueError("Data source names must be unique")
        if len(uids) != len(set(uids)):
            raise ValueError("Data source uids must be unique")
        if sum(1 for ds in self.datasources if ds.default) > 1:
            raise ValueError("At most one data source may be marked default")
        return self

    @property
    def default_datasource(self) -> DataSourceConfig | None:
        """The data source marked as default, if any."""
        for ds in self.datasources:
            if ds.default:
                return ds
        return None

    @classmethod
    def load(cls, config_path: Path | str = Path("config.yaml")) -> "Config":
        """Load configuration from YAML file with env var overlay.

        Args:
            config_path: Path to YAML configuration file.

        Returns:
            Validated Config instance.

        Raises:
            FileNotFoundError: If config file doesn't exist.
            ValueError: If config is invalid.
        """
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}

        return cls.model_validate(cls._apply_env(yaml_config))

    @classmethod
    def load_or_default(cls, config_path: Path | str | None = None) -> "Config":
        """Load configuration, falling back to defaults if file not found.

        Args:
            config_path: Optional path to YAML configuration file.

        Returns:
            Config instance (from file or defaults).
        """
        if config_path is None:
            # Try default locations
            for path in [Path("config.yaml"), Path("config.yml")]:
                if path.exists():
                    return cls.load(path)
            # Return defaults
            return cls.model_validate(cls._apply_env({}))

        try:
            return cls.load(config_path)
        except FileNotFoundError:
            return cls.model_validate(cls._apply_env({}))

    @staticmethod
    def _apply_env(raw: dict) -> dict:
        """Overlay DASHMIGRATE_* environment variables onto raw config."""
        if "DASHMIGRATE_LOG_LEVEL" in os.environ:
            raw["log_level"] = os.environ["DASHMIGRATE_LOG_LEVEL"]
        if "DASHMIGRATE_LOG_JSON" in os.environ:
            raw["log_json"] = os.environ["DASHMIGRATE_LOG_JSON"].lower() == "true"
        if "DASHMIGRATE_TARGET_VERSION" in os.environ:
            migration = raw.get("migration")
            if not isinstance(migration, dict):
                migration = {}
            migration["target_version"] = os.environ["DASHMIGRATE_TARGET_VERSION"]
            raw["migration"] = migration
        return raw
