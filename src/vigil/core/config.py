# src/vigil/core/config.py
"""
Configuration schema and loading for vigil.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.

Example YAML:
    fixtures:
      email:
        value: ""
    validators:
      email:
        defaults:
          fixture: email
        plugins:
          - type: empty
            result: invalid
            message: Missing email
    fail_states: [invalid, error, unknown, aborted]
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from vigil.contracts.enums import ReservedState

DEFAULT_FAIL_STATES: tuple[str, ...] = ("invalid", *(state.value for state in ReservedState))


class ValidatorSettings(BaseModel):
    """One named validator: defaults merged into each plugin config, and the chain."""

    model_config = {"frozen": True, "extra": "forbid"}

    defaults: dict[str, Any] = Field(
        default_factory=dict,
        description="Merged under every plugin config of this validator",
    )
    plugins: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Plugin configs, run in order",
    )

    @field_validator("plugins")
    @classmethod
    def validate_plugins_are_mappings(cls, v: list[dict[str, Any]]) -> list[dict[str, Any]]:
        for index, plugin in enumerate(v):
            if "type" in plugin and not isinstance(plugin["type"], str):
                raise ValueError(f"plugins[{index}].type must be a string")
        return v


class VigilSettings(BaseModel):
    """Top-level settings: fixtures, validators and which states count as failures."""

    model_config = {"frozen": True, "extra": "forbid"}

    fixtures: dict[str, dict[str, Any]] = Field(
        default_factory=dict,
        description="Fixtures keyed by name; a scalar is shorthand for {value: scalar}",
    )
    validators: dict[str, ValidatorSettings] = Field(default_factory=dict)
    fail_states: list[str] = Field(
        default_factory=lambda: list(DEFAULT_FAIL_STATES),
        description="Result states that make `vigil check` exit non-zero",
    )

    @field_validator("fixtures", mode="before")
    @classmethod
    def wrap_scalar_fixtures(cls, v: Any) -> Any:
        """Allow ``email: ""`` as shorthand for ``email: {value: ""}``."""
        if not isinstance(v, dict):
            return v
        return {name: fixture if isinstance(fixture, dict) else {"value": fixture} for name, fixture in v.items()}


def load_settings(config_path: Path) -> VigilSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (VIGIL_*) - highest priority
    2. Config file
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: VIGIL_FIXTURES__email__value for nested keys.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated VigilSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Explicit check for file existence (Dynaconf silently accepts missing files)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="VIGIL",
        settings_files=[str(config_path)],
        environments=False,  # No [default]/[production] sections
        load_dotenv=False,
        merge_enabled=True,  # Deep merge nested dicts
    )

    # Dynaconf returns uppercase keys; convert to lowercase for Pydantic
    # Also filter out internal Dynaconf settings
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}

    return VigilSettings(**raw_config)
