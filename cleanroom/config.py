"""
Configuration loading and validation for showcase runs.

Supports YAML files and plain dictionaries; unspecified keys keep their
defaults.
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from cleanroom.showcase import HEAVY_TEMPLATE
from cleanroom.testing.suites import label_fields


class HarnessConfig(BaseModel):
    """Settings for generating and running showcase suites."""

    model_config = {"extra": "forbid"}

    suite_count: int = Field(default=3000, ge=1, description="Number of suites to generate")
    label: str = Field(
        default="heavyLoad directive #{index}",
        description="Suite label format; {index} and {name} are filled in",
    )
    template: str = Field(default=HEAVY_TEMPLATE, description="Markup each case mounts")
    fail_index: int | None = Field(
        default=None,
        ge=0,
        description="Index of the generated suite whose assertion is flipped",
    )
    log_level: str = Field(default="WARNING", description="Root logging level")

    @field_validator("label")
    @classmethod
    def label_has_index(cls, v: str) -> str:
        """Labels must differ per suite, so {index} is required."""
        if "index" not in label_fields(v):
            raise ValueError("Label must contain '{index}'")
        return v

    @field_validator("log_level")
    @classmethod
    def log_level_known(cls, v: str) -> str:
        """Validate against the logging module's level names."""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @model_validator(mode="after")
    def fail_index_in_range(self) -> "HarnessConfig":
        if self.fail_index is not None and self.fail_index >= self.suite_count:
            msg = f"fail_index {self.fail_index} is outside 0..{self.suite_count - 1}"
            raise ValueError(msg)
        return self


class HarnessConfigLoader:
    """Load and validate harness configurations."""

    @classmethod
    def default(cls) -> HarnessConfig:
        return HarnessConfig()

    @classmethod
    def from_yaml(cls, path: str | Path) -> HarnessConfig:
        """
        Load configuration from a YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            HarnessConfig loaded from file
        """
        path = Path(path)
        if not path.exists():
            msg = f"Configuration file not found: {path}"
            raise FileNotFoundError(msg)

        with path.open() as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            msg = f"Configuration file must contain a mapping: {path}"
            raise ValueError(msg)
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HarnessConfig:
        """Create configuration from a dictionary."""
        # Accept the same keys with dashes, as written on the command line
        normalized = {key.replace("-", "_"): value for key, value in data.items()}
        return HarnessConfig.model_validate(normalized)
