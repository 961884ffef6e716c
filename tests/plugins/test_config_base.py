"""Tests for PluginConfig."""

import pytest

from vigil.contracts import FixtureSymbol, PluginConfigError
from vigil.plugins.config_base import PluginConfig


class ThresholdConfig(PluginConfig):
    threshold: int


class TestPluginConfig:
    def test_accepts_engine_fields(self) -> None:
        cfg = ThresholdConfig.from_dict(
            {"fixture": "age", "trigger": ["blur"], "result": "invalid", "message": "Too young", "threshold": 18}
        )

        assert cfg.threshold == 18
        assert cfg.fixture == "age"
        assert cfg.message == "Too young"

    def test_accepts_symbol_fixture(self) -> None:
        symbol = FixtureSymbol("session")

        assert ThresholdConfig.from_dict({"fixture": symbol, "threshold": 1}).fixture is symbol

    def test_rejects_unknown_fields(self) -> None:
        with pytest.raises(PluginConfigError, match="Invalid configuration for ThresholdConfig"):
            ThresholdConfig.from_dict({"threshold": 1, "treshold": 2})

    def test_rejects_missing_fields(self) -> None:
        with pytest.raises(PluginConfigError, match="threshold"):
            ThresholdConfig.from_dict({})

    def test_rejects_invalid_fixture(self) -> None:
        with pytest.raises(PluginConfigError, match="fixture must be a str, int or FixtureSymbol"):
            ThresholdConfig.from_dict({"fixture": 1.5, "threshold": 1})

    def test_rejects_non_mapping(self) -> None:
        with pytest.raises(PluginConfigError, match="config must be a mapping"):
            ThresholdConfig.from_dict(["threshold"])  # type: ignore[arg-type]

    def test_is_frozen(self) -> None:
        cfg = ThresholdConfig.from_dict({"threshold": 1})

        with pytest.raises(ValueError):
            cfg.threshold = 2  # type: ignore[misc]
