# src/vigil/plugins/builtin.py
"""Built-in plugin factories.

Each factory builds a plugin that returns True when it detects the condition
it is named after, so the plugin config's default result (``result``,
``message``, ``payload``) is published in that case:

    validator.add_plugin(
        {"type": "empty", "fixture": "email", "result": "invalid", "message": "Missing email"},
        registry,
    )

These are convenience plugins, not a rule set; applications register their
own factories through the vigil_get_plugin_factories hook.
"""

import re
from collections.abc import Mapping, Sized
from typing import Any, Self

from pydantic import Field, field_validator, model_validator

from vigil.contracts.keys import is_fixture_key
from vigil.contracts.views import FactoryPlugin, PluginFactory, PluginProps
from vigil.plugins.config_base import PluginConfig
from vigil.plugins.hookspecs import hookimpl


class FixtureValueConfig(PluginConfig):
    """Config for plugins that read one attribute of the target fixture."""

    key: str = "value"

    @model_validator(mode="after")
    def validate_fixture_present(self) -> Self:
        if self.fixture is None:
            raise ValueError("fixture is required")
        return self


class EmptyConfig(FixtureValueConfig):
    strip: bool = Field(default=False, description="Treat whitespace-only strings as empty")


class MismatchConfig(FixtureValueConfig):
    other: Any = Field(description="Fixture whose value must equal the target fixture's value")
    other_key: str | None = None

    @field_validator("other")
    @classmethod
    def validate_other_key(cls, v: Any) -> Any:
        if not is_fixture_key(v):
            raise ValueError("other must be a str, int or FixtureSymbol")
        return v


class PatternConfig(FixtureValueConfig):
    pattern: str
    ignore_case: bool = False

    @field_validator("pattern")
    @classmethod
    def validate_pattern(cls, v: str) -> str:
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid regular expression: {e}") from e
        return v


class LengthConfig(FixtureValueConfig):
    min: int | None = Field(default=None, ge=0)
    max: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def validate_bounds(self) -> Self:
        if self.min is None and self.max is None:
            raise ValueError("at least one of min or max must be configured")
        if self.min is not None and self.max is not None and self.min > self.max:
            raise ValueError(f"min ({self.min}) must not exceed max ({self.max})")
        return self


def _is_empty(value: Any, strip: bool) -> bool:
    if value is None:
        return True
    if strip and isinstance(value, str):
        value = value.strip()
    return isinstance(value, Sized) and len(value) == 0


def empty_factory(custom_props: Mapping[str, Any]) -> FactoryPlugin:
    """Fires when the fixture value is None or an empty string/collection."""
    cfg = EmptyConfig.from_dict(custom_props)

    def plugin(props: PluginProps) -> bool:
        value = props.fixtures.get_fixture_value(cfg.fixture, cfg.key)
        return _is_empty(value, cfg.strip)

    return plugin


def mismatch_factory(custom_props: Mapping[str, Any]) -> FactoryPlugin:
    """Fires when the fixture value differs from another fixture's value."""
    cfg = MismatchConfig.from_dict(custom_props)
    other_key = cfg.other_key or cfg.key

    def plugin(props: PluginProps) -> bool:
        value = props.fixtures.get_fixture_value(cfg.fixture, cfg.key)
        other = props.fixtures.get_fixture_value(cfg.other, other_key)
        return bool(value != other)

    return plugin


def pattern_factory(custom_props: Mapping[str, Any]) -> FactoryPlugin:
    """Fires when the fixture value is not a string fully matching ``pattern``."""
    cfg = PatternConfig.from_dict(custom_props)
    regex = re.compile(cfg.pattern, re.IGNORECASE if cfg.ignore_case else 0)

    def plugin(props: PluginProps) -> bool:
        value = props.fixtures.get_fixture_value(cfg.fixture, cfg.key)
        return not isinstance(value, str) or regex.fullmatch(value) is None

    return plugin


def length_factory(custom_props: Mapping[str, Any]) -> FactoryPlugin:
    """Fires when the fixture value's length is outside [min, max]."""
    cfg = LengthConfig.from_dict(custom_props)

    def plugin(props: PluginProps) -> bool:
        value = props.fixtures.get_fixture_value(cfg.fixture, cfg.key)
        if not isinstance(value, Sized):
            raise TypeError(f"Fixture '{cfg.fixture}' {cfg.key} has no length")
        size = len(value)
        if cfg.min is not None and size < cfg.min:
            return True
        return cfg.max is not None and size > cfg.max

    return plugin


BUILTIN_FACTORIES: dict[str, PluginFactory] = {
    "empty": empty_factory,
    "mismatch": mismatch_factory,
    "pattern": pattern_factory,
    "length": length_factory,
}


@hookimpl
def vigil_get_plugin_factories() -> dict[str, PluginFactory]:
    """Contribute the built-in factories to a PluginManager."""
    return dict(BUILTIN_FACTORIES)
