"""Tests for plugin config compilation and precondition gating."""

from collections.abc import Mapping
from typing import Any

import pytest

from vigil.contracts import (
    FactoryPlugin,
    FixtureSymbol,
    InvalidResultError,
    PluginConfigError,
    PluginNotFoundError,
    PluginProps,
    ValidationCancelledError,
    ValidationResult,
    ValidationTarget,
)
from vigil.core.cancellation import CancellationHandle
from vigil.core.fixtures import FixtureStore, ReadOnlyFixtures
from vigil.plugins.registry import PluginRegistry
from vigil.plugins.resolution import (
    CompiledPlugin,
    check_preconditions,
    create_validation_plugin,
    get_default_result,
    get_factory_plugin,
    get_validation_result,
    get_validation_target,
    matches_target,
    resolve_validation_plugin,
)

VALID = ValidationResult(state="valid")


def make_props(
    store: FixtureStore,
    *,
    trigger: str | None = None,
    result: ValidationResult | None = None,
    handle: CancellationHandle | None = None,
) -> PluginProps:
    return PluginProps(
        fixtures=ReadOnlyFixtures(store),
        validator=None,  # type: ignore[arg-type]
        trigger=trigger,
        result=result,
        handle=handle or CancellationHandle(),
    )


class TestGetValidationTarget:
    def test_fixture_only(self) -> None:
        assert get_validation_target({"fixture": "email"}) == ValidationTarget(fixture="email")

    def test_string_and_array_selectors(self) -> None:
        target = get_validation_target({"fixture": 0, "trigger": "blur,!init", "state": ["valid", "!error"]})

        assert target == ValidationTarget(fixture=0, trigger="blur,!init", state=("valid", "!error"))

    def test_symbol_fixture(self) -> None:
        symbol = FixtureSymbol("session")

        assert get_validation_target({"fixture": symbol}).fixture is symbol

    @pytest.mark.parametrize("config", [{}, {"fixture": None}, {"fixture": ""}])
    def test_fixture_required(self, config: dict[str, Any]) -> None:
        with pytest.raises(PluginConfigError, match="Target fixture must be provided"):
            get_validation_target(config)

    @pytest.mark.parametrize("fixture", [True, 1.5, ["email"]])
    def test_fixture_must_be_key(self, fixture: Any) -> None:
        with pytest.raises(PluginConfigError, match="Target fixture must be a str, int or FixtureSymbol"):
            get_validation_target({"fixture": fixture})

    @pytest.mark.parametrize("field", ["trigger", "state"])
    def test_selector_must_be_strings(self, field: str) -> None:
        with pytest.raises(PluginConfigError, match=f"Target {field} must be a string or string array"):
            get_validation_target({"fixture": "email", field: ["ok", 3]})


class TestGetDefaultResult:
    def test_carries_message_and_payload(self) -> None:
        result = get_default_result({"result": "invalid", "message": "Missing email", "payload": {"code": 1}})

        assert result == ValidationResult(state="invalid", message="Missing email", payload={"code": 1})

    @pytest.mark.parametrize("config", [{}, {"result": ""}, {"result": None}])
    def test_state_required(self, config: dict[str, Any]) -> None:
        with pytest.raises(PluginConfigError, match="Default result state must be provided"):
            get_default_result(config)

    def test_malformed_message(self) -> None:
        with pytest.raises(PluginConfigError, match="Invalid default result"):
            get_default_result({"result": "invalid", "message": 3})


class TestGetValidationResult:
    def test_result_passthrough(self) -> None:
        assert get_validation_result(VALID) is VALID

    def test_mapping(self) -> None:
        assert get_validation_result({"state": "valid"}) == VALID

    @pytest.mark.parametrize("value", ["valid", 1, {"message": "x"}])
    def test_invalid(self, value: Any) -> None:
        with pytest.raises(InvalidResultError):
            get_validation_result(value)


class TestGetFactoryPlugin:
    def test_no_type_always_proceeds(self, store: FixtureStore) -> None:
        plugin = get_factory_plugin({"fixture": "email"})

        assert plugin(make_props(store)) is True

    def test_type_requires_registry(self) -> None:
        with pytest.raises(PluginConfigError, match="Plugin registry must be provided"):
            get_factory_plugin({"type": "empty", "fixture": "email"})

    def test_unknown_type(self, registry: PluginRegistry) -> None:
        with pytest.raises(PluginNotFoundError, match="Plugin 'missing' not found"):
            get_factory_plugin({"type": "missing"}, registry)

    def test_factory_receives_config_without_type(self) -> None:
        received: list[Mapping[str, Any]] = []

        def factory(custom_props: Mapping[str, Any]) -> FactoryPlugin:
            received.append(custom_props)
            return lambda props: True

        get_factory_plugin({"type": "spy", "fixture": "email", "result": "x", "limit": 3}, PluginRegistry({"spy": factory}))

        assert received == [{"fixture": "email", "result": "x", "limit": 3}]


class TestMatchesTarget:
    @pytest.mark.parametrize(
        ("value", "selector", "expected"),
        [
            ("blur", "blur", True),
            ("blur", "blur,change", True),
            ("submit", "blur,change", False),
            ("blur", ("blur", "change"), True),
            ("blur", "!init", True),
            ("init", "!init", False),
            ("init", ("!init", "!reset"), False),
            ("blur", ("!init", "!reset"), True),
            ("init", "init,!init", True),
            ("submit", "blur,!init", False),
            (None, "!init", False),
            ("", "!init", False),
        ],
    )
    def test_selector(self, value: str | None, selector: Any, expected: bool) -> None:
        assert matches_target(value, selector) is expected


class TestCheckPreconditions:
    @pytest.fixture
    def email_store(self, store: FixtureStore) -> FixtureStore:
        store.add_fixture({"value": ""}, "email")
        return store

    def test_passes(self, email_store: FixtureStore) -> None:
        assert check_preconditions(make_props(email_store), ValidationTarget(fixture="email"))

    def test_missing_fixture(self, email_store: FixtureStore) -> None:
        assert not check_preconditions(make_props(email_store), ValidationTarget(fixture="password"))

    def test_trigger_selector(self, email_store: FixtureStore) -> None:
        target = ValidationTarget(fixture="email", trigger="blur")

        assert check_preconditions(make_props(email_store, trigger="blur"), target)
        assert not check_preconditions(make_props(email_store, trigger="change"), target)
        assert not check_preconditions(make_props(email_store), target)

    def test_no_trigger_selector_accepts_any_trigger(self, email_store: FixtureStore) -> None:
        assert check_preconditions(make_props(email_store, trigger="anything"), ValidationTarget(fixture="email"))

    def test_no_state_selector_requires_no_result(self, email_store: FixtureStore) -> None:
        assert not check_preconditions(make_props(email_store, result=VALID), ValidationTarget(fixture="email"))

    def test_state_selector(self, email_store: FixtureStore) -> None:
        target = ValidationTarget(fixture="email", state="valid")

        assert check_preconditions(make_props(email_store, result=VALID), target)
        assert not check_preconditions(make_props(email_store), target)
        assert not check_preconditions(
            make_props(email_store, result=ValidationResult(state="invalid")),
            target,
        )

    def test_cancelled_handle(self, email_store: FixtureStore) -> None:
        handle = CancellationHandle()
        handle.cancel("stop")

        assert not check_preconditions(make_props(email_store, handle=handle), ValidationTarget(fixture="email"))


class TestCompiledPlugin:
    @pytest.fixture
    def email_store(self, store: FixtureStore) -> FixtureStore:
        store.add_fixture({"value": ""}, "email")
        return store

    @pytest.mark.asyncio
    async def test_true_publishes_default(self, email_store: FixtureStore) -> None:
        plugin = create_validation_plugin({"fixture": "email", "result": "invalid", "message": "Missing email"})

        assert await plugin(make_props(email_store)) == ValidationResult(state="invalid", message="Missing email")

    @pytest.mark.asyncio
    async def test_precondition_failure_skips_factory_plugin(self, email_store: FixtureStore) -> None:
        calls: list[PluginProps] = []

        def spy(props: PluginProps) -> bool:
            calls.append(props)
            return True

        plugin = CompiledPlugin(ValidationTarget(fixture="missing"), VALID, spy)

        assert await plugin(make_props(email_store)) is None
        assert calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("outcome", [False, None])
    async def test_falsy_outcome_contributes_nothing(self, email_store: FixtureStore, outcome: Any) -> None:
        plugin = CompiledPlugin(ValidationTarget(fixture="email"), VALID, lambda props: outcome)

        assert await plugin(make_props(email_store)) is None

    @pytest.mark.asyncio
    async def test_async_result(self, email_store: FixtureStore) -> None:
        async def check(props: PluginProps) -> dict[str, Any]:
            return {"state": "checked", "payload": [1]}

        plugin = CompiledPlugin(ValidationTarget(fixture="email"), VALID, check)

        assert await plugin(make_props(email_store)) == ValidationResult(state="checked", payload=[1])

    @pytest.mark.asyncio
    async def test_malformed_outcome_raises(self, email_store: FixtureStore) -> None:
        plugin = CompiledPlugin(ValidationTarget(fixture="email"), VALID, lambda props: "valid")

        with pytest.raises(InvalidResultError):
            await plugin(make_props(email_store))

    def test_create_rejects_non_mapping(self) -> None:
        with pytest.raises(PluginConfigError, match="Plugin config must be a mapping"):
            create_validation_plugin(["fixture"])  # type: ignore[arg-type]

    def test_create_records_type(self, registry: PluginRegistry) -> None:
        plugin = create_validation_plugin({"type": "empty", "fixture": "email", "result": "invalid"}, registry)

        assert plugin.plugin_type == "empty"
        assert plugin.default_result == ValidationResult(state="invalid")


class TestResolveValidationPlugin:
    @pytest.mark.asyncio
    async def test_builds_props(self, store: FixtureStore) -> None:
        seen: list[PluginProps] = []

        async def plugin(props: PluginProps) -> ValidationResult | None:
            seen.append(props)
            return VALID

        view = ReadOnlyFixtures(store)
        task = resolve_validation_plugin(plugin, fixtures=view, validator=None, trigger="blur", result=None)  # type: ignore[arg-type]

        assert await task is VALID
        assert seen[0].fixtures is view
        assert seen[0].trigger == "blur"
        assert seen[0].handle is task.handle

    @pytest.mark.asyncio
    async def test_cancel_rejects(self, store: FixtureStore, make_gate: Any) -> None:
        gate = make_gate(VALID)
        task = resolve_validation_plugin(gate, fixtures=ReadOnlyFixtures(store), validator=None, trigger=None, result=None)  # type: ignore[arg-type]

        await gate.started.wait()
        task.cancel("superseded")
        gate.release()

        with pytest.raises(ValidationCancelledError):
            await task
