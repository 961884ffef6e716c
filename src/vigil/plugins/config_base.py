# src/vigil/plugins/config_base.py
"""Base class for typed plugin factory configurations.

Plugin factories receive the whole plugin config minus ``type``: the
engine-level fields (fixture, trigger, state, result, message, payload)
plus the factory's own parameters. Factories validate that mapping with a
subclass of PluginConfig to get:
- Strict validation (reject unknown fields)
- A factory method with clear error messages

Example usage:
    class PatternConfig(PluginConfig):
        pattern: str

    cfg = PatternConfig.from_dict(custom_props)
"""

from collections.abc import Mapping
from typing import Any, Self

from pydantic import BaseModel, ValidationError, field_validator

from vigil.contracts.errors import PluginConfigError
from vigil.contracts.keys import is_fixture_key


class PluginConfig(BaseModel):
    """Base class for typed plugin factory configurations.

    Declares the engine-level fields so that subclasses only describe their
    own parameters. The engine validates those fields itself (see
    vigil.plugins.resolution); they are accepted here so that ``extra:
    forbid`` only rejects parameters the factory does not know.
    """

    model_config = {"extra": "forbid", "frozen": True}

    fixture: Any = None
    trigger: str | list[str] | tuple[str, ...] | None = None
    state: str | list[str] | tuple[str, ...] | None = None
    result: str | None = None
    message: str | None = None
    payload: Any = None

    @field_validator("fixture")
    @classmethod
    def validate_fixture_key(cls, v: Any) -> Any:
        if v is not None and not is_fixture_key(v):
            raise ValueError("fixture must be a str, int or FixtureSymbol")
        return v

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> Self:
        """Create config from a mapping with a clear error on validation failure.

        Raises:
            PluginConfigError: If configuration is invalid.
        """
        if not isinstance(config, Mapping):
            raise PluginConfigError(f"Invalid configuration for {cls.__name__}: config must be a mapping, got {type(config).__name__}.")

        try:
            return cls.model_validate(dict(config))
        except ValidationError as e:
            raise PluginConfigError(f"Invalid configuration for {cls.__name__}: {e}") from e


__all__ = ["PluginConfig", "PluginConfigError"]
