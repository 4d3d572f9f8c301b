"""
Configuration loading and validation for error trapping.

Supports YAML files, plain dictionaries and named profiles. A configuration
decides the reporting mask, whether captured errors are logged, extra noise
patterns, and which environment-conditional severities exist.
"""

import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from errortrap.trapping.noise import NoiseFilter
from errortrap.trapping.reporting import ErrorReporting
from errortrap.trapping.severity import (
    ALL_CAPABILITIES,
    Severity,
    SeverityTable,
    parse_severity_mask,
)


class TrapConfig(BaseModel):
    """Settings for the error-trapping engine."""

    model_config = {"extra": "forbid"}

    reporting_mask: int = Field(
        default=int(Severity.E_ALL),
        description="Severities eligible for capture (int, name or list of names)",
    )
    log_errors: bool = Field(
        default=False,
        description="Log every captured error before it is reconciled",
    )
    noise_patterns: list[str] = Field(
        default_factory=list,
        description="Extra regexes; matching messages are ignored",
    )
    include_default_noise: bool = Field(
        default=True,
        description="Keep the built-in noise rules",
    )
    capabilities: list[str] = Field(
        default_factory=lambda: sorted(ALL_CAPABILITIES),
        description="Enabled environment-conditional severities",
    )

    @field_validator("reporting_mask", mode="before")
    @classmethod
    def parse_mask(cls, v: Any) -> int:
        """Accept severity names and name lists as well as integers."""
        return parse_severity_mask(v)

    @field_validator("noise_patterns")
    @classmethod
    def patterns_compile(cls, v: list[str]) -> list[str]:
        """Validate that every noise pattern is a valid regex."""
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"Invalid noise pattern {pattern!r}: {e}") from e
        return v

    @field_validator("capabilities")
    @classmethod
    def capabilities_known(cls, v: list[str]) -> list[str]:
        """Validate capability names."""
        unknown = sorted(set(v) - ALL_CAPABILITIES)
        if unknown:
            raise ValueError(f"Unknown capabilities: {', '.join(unknown)}")
        return v

    def build_severity_table(self) -> SeverityTable:
        """Severity table for the enabled capabilities."""
        return SeverityTable(self.capabilities)

    def build_noise_filter(self) -> NoiseFilter:
        """Noise filter with the configured patterns."""
        return NoiseFilter.from_patterns(
            self.noise_patterns, include_defaults=self.include_default_noise
        )

    def build_reporting(self) -> ErrorReporting:
        """A fresh error-reporting registry using these settings."""
        return ErrorReporting(
            mask=self.reporting_mask,
            log_errors=self.log_errors,
            table=self.build_severity_table(),
        )

    def apply(self, reporting: ErrorReporting) -> None:
        """Apply mask, logging and severity table to an existing registry."""
        reporting.mask = self.reporting_mask
        reporting.log_errors = self.log_errors
        reporting.table = self.build_severity_table()

    def to_yaml(self) -> str:
        """Serialize to YAML format."""
        result: str = yaml.dump(
            self.model_dump(mode="json"),
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
        return result


class TrapConfigLoader:
    """Load and validate trapping configurations."""

    # Predefined profiles
    PROFILES: dict[str, dict[str, Any]] = {
        "default": {
            "description": "Capture every severity, no logging",
            "reporting_mask": "E_ALL",
            "log_errors": False,
        },
        "strict": {
            "description": "Capture every severity and log each captured error",
            "reporting_mask": "E_ALL",
            "log_errors": True,
        },
        "legacy": {
            "description": "Severity table without recoverable errors or deprecations",
            "reporting_mask": "E_ALL",
            "capabilities": [],
        },
        "quiet": {
            "description": "Ignore notices, strict-mode hints and deprecations",
            "reporting_mask": [
                "~E_NOTICE",
                "~E_USER_NOTICE",
                "~E_STRICT",
                "~E_DEPRECATED",
                "~E_USER_DEPRECATED",
            ],
        },
    }

    @classmethod
    def from_profile(cls, name: str) -> TrapConfig:
        """
        Load a predefined profile by name.

        Args:
            name: Profile name (default, strict, legacy, quiet)

        Returns:
            TrapConfig configured for the profile
        """
        if name not in cls.PROFILES:
            available = ", ".join(cls.PROFILES.keys())
            msg = f"Unknown profile: {name}. Available: {available}"
            raise ValueError(msg)

        profile = {k: v for k, v in cls.PROFILES[name].items() if k != "description"}
        return TrapConfig.model_validate(profile)

    @classmethod
    def from_yaml(cls, path: str | Path, profile: str | None = None) -> TrapConfig:
        """
        Load configuration from a YAML file.

        An optional "profile" key selects the base profile the remaining
        keys override. A profile passed as argument replaces that key.
        """
        path = Path(path)
        if not path.exists():
            msg = f"Configuration file not found: {path}"
            raise FileNotFoundError(msg)

        with path.open() as f:
            data = yaml.safe_load(f) or {}

        if profile is not None:
            data["profile"] = profile
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TrapConfig:
        """Create configuration from a dictionary."""
        data = dict(data)
        profile_name = data.pop("profile", None)
        if profile_name is None:
            return TrapConfig.model_validate(data)

        base = cls.from_profile(profile_name).model_dump()
        base.update(data)
        return TrapConfig.model_validate(base)

    @classmethod
    def list_profiles(cls) -> dict[str, str]:
        """List available profiles with descriptions."""
        return {name: profile["description"] for name, profile in cls.PROFILES.items()}

    @classmethod
    def generate_sample_config(cls) -> str:
        """Generate a sample YAML configuration file."""
        sample = {
            "profile": "default",
            "reporting_mask": ["E_ALL", "~E_STRICT"],
            "log_errors": True,
            "noise_patterns": [
                "Accessing an undefined property of a proxy object",
            ],
            "include_default_noise": True,
            "capabilities": sorted(ALL_CAPABILITIES),
        }
        return yaml.dump(sample, default_flow_style=False, sort_keys=False)
