# src/vigil/engine/validator.py
"""Validator: runs an ordered chain of plugins against a FixtureStore.

States:
    idle      no published result, no run in flight
    resulted  a published result, no run in flight
    running   exactly one plugin step in flight

validate() first cancels whatever plugin step is in flight, then runs every
plugin strictly in registration order. Each plugin receives the result
produced so far in this run (starting from the published result) and may
replace it. Each step runs in its own CancellableTask with a fresh handle,
held in the validator's single in-flight slot until the step settles. The
run itself carries a CancellationHandle too: abort() cancels it, and a run
whose handle is cancelled stops before its next step and never publishes,
even when its current step had already settled.

A run that completes publishes its final result (ResultChanged event). A run
that fails or is cancelled returns a synthesized ``error``/``unknown``/
``aborted`` result to its caller and leaves the published result untouched.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import Any

from vigil.contracts.errors import ValidationCancelledError
from vigil.contracts.events import ResultChanged
from vigil.contracts.keys import FixtureKey, normalize_key
from vigil.contracts.results import ValidationResult
from vigil.contracts.views import TypeExpectation, ValidationPlugin
from vigil.core.cancellation import CancellableTask, CancellationHandle, create_cancellation_error
from vigil.core.events import EventBus
from vigil.core.fixtures import FixtureStore, ReadOnlyFixtures
from vigil.core.logging import get_logger
from vigil.engine.errors import handle_validation_error
from vigil.plugins.registry import PluginRegistry
from vigil.plugins.resolution import CompiledPlugin, create_validation_plugin, resolve_validation_plugin

logger = get_logger(__name__)

ResultHandler = Callable[[ResultChanged], None]


class Validator:
    """Sequential, cancellable plugin chain producing one ValidationResult.

    Example:
        store = FixtureStore({"email": {"value": ""}})
        validator = Validator(store)
        validator.add_plugin({"type": "empty", "fixture": "email", "result": "invalid"}, registry)
        result = await validator.validate("email")
    """

    def __init__(
        self,
        fixtures: FixtureStore,
        default_props: Mapping[str, Any] | None = None,
        *,
        name: FixtureKey | None = None,
    ) -> None:
        """Create a validator bound to a fixture store.

        Args:
            fixtures: Store every plugin validates against
            default_props: Merged under every plugin config added later
            name: Optional name, used in log output
        """
        self._name = name
        self._fixtures = fixtures
        self._default_props: Mapping[str, Any] = MappingProxyType(dict(default_props or {}))
        self._plugins: list[ValidationPlugin] = []
        self._task: CancellableTask[ValidationResult | None] | None = None
        self._run: CancellationHandle | None = None
        self._result: ValidationResult | None = None
        self._events = EventBus()
        self._fixtures_view = ReadOnlyFixtures(fixtures)
        self._view = ReadOnlyValidator(self)
        self._logger = logger.bind(validator=str(name)) if name is not None else logger

    def __repr__(self) -> str:
        return f"<Validator name={self._name!s} plugins={len(self._plugins)} running={self.is_running}>"

    # === Read-only state ===

    @property
    def name(self) -> FixtureKey | None:
        return self._name

    @property
    def result(self) -> ValidationResult | None:
        """Currently published result (None when idle)."""
        return self._result

    @property
    def default_props(self) -> Mapping[str, Any]:
        return self._default_props

    @property
    def plugins(self) -> tuple[ValidationPlugin, ...]:
        return tuple(self._plugins)

    @property
    def fixtures(self) -> ReadOnlyFixtures:
        """Read-only view of the fixture store this validator runs against."""
        return self._fixtures_view

    @property
    def is_running(self) -> bool:
        """Whether a plugin step is currently in flight."""
        return self._task is not None

    # === Fixture lookups ===

    def has_fixture(self, name: FixtureKey) -> bool:
        return self._fixtures.has_fixture(name)

    def find_fixture(self, name: FixtureKey) -> Any:
        return self._fixtures.find_fixture(name)

    def get_fixture(self, name: FixtureKey, expected_type: TypeExpectation | None = None) -> Any:
        return self._fixtures.get_fixture(name, expected_type)

    def get_fixture_value(
        self,
        name: FixtureKey,
        key: str = "value",
        expected_type: TypeExpectation | None = None,
    ) -> Any:
        return self._fixtures.get_fixture_value(name, key, expected_type)

    # === Plugins ===

    def add_plugin(self, config: Mapping[str, Any], registry: PluginRegistry | None = None) -> CompiledPlugin:
        """Compile a plugin config and append it to the chain.

        The config is merged over the validator's default props, and the
        validator is indexed in the store under the plugin's target fixture.

        Returns:
            The compiled plugin (pass it to remove_plugin() to detach it)

        Raises:
            PluginConfigError: If the config is malformed
            PluginNotFoundError: If the config names an unknown plugin type
        """
        merged = {**self._default_props, **config}
        plugin = create_validation_plugin(merged, registry)
        self._fixtures.add_validator(plugin.target.fixture, self)
        self._plugins.append(plugin)
        self._logger.debug(
            "plugin_added",
            plugin_type=plugin.plugin_type,
            fixture=str(plugin.target.fixture),
            position=len(self._plugins) - 1,
        )
        return plugin

    def add_plugins(
        self,
        configs: Iterable[Mapping[str, Any]],
        registry: PluginRegistry | None = None,
        default_props: Mapping[str, Any] | None = None,
    ) -> list[CompiledPlugin]:
        """Add several plugin configs, each merged over default_props."""
        extra = dict(default_props or {})
        return [self.add_plugin({**extra, **config}, registry) for config in configs]

    def remove_plugin(self, plugin: ValidationPlugin) -> bool:
        """Detach a plugin from the chain.

        The store's index entry for the plugin's fixture is dropped once no
        remaining plugin targets that fixture.

        Returns:
            True if the plugin was part of the chain
        """
        for index, candidate in enumerate(self._plugins):
            if candidate is plugin:
                del self._plugins[index]
                break
        else:
            return False

        if isinstance(plugin, CompiledPlugin):
            fixture = normalize_key(plugin.target.fixture)
            still_targeted = any(
                isinstance(other, CompiledPlugin) and normalize_key(other.target.fixture) == fixture
                for other in self._plugins
            )
            if not still_targeted:
                self._fixtures.remove_validator(self, fixture)
        return True

    # === Events ===

    def subscribe(self, handler: ResultHandler) -> None:
        """Call handler with a ResultChanged event on every published result."""
        self._events.subscribe(ResultChanged, handler)

    def unsubscribe(self, handler: ResultHandler) -> bool:
        return self._events.unsubscribe(ResultChanged, handler)

    def dispatch_result(self, result: ValidationResult | None) -> None:
        """Publish a result (or None) and emit ResultChanged."""
        self._result = result
        self._events.emit(ResultChanged(result=result))

    # === Lifecycle ===

    def abort(self, reason: Any = None) -> None:
        """Cancel the run in flight and its current plugin step, if any."""
        if self._run is not None:
            self._run.cancel(reason)
        if self._task is not None:
            self._task.cancel(reason)

    def reset(self) -> None:
        """Abort any run in flight and publish None."""
        self.abort("reset")
        self.dispatch_result(None)

    async def validate(self, trigger: str | None = None) -> ValidationResult | None:
        """Run the plugin chain.

        Args:
            trigger: Why validation was requested, e.g. the fixture that changed

        Returns:
            The published result, or a synthesized failure result when a
            plugin step failed or was cancelled (not published)
        """
        self.abort(f"revalidation triggered by {trigger}" if trigger else "revalidation")
        run = CancellationHandle()
        self._run = run

        log = self._logger.bind(trigger=trigger)
        log.debug("validation_started", plugins=len(self._plugins))

        try:
            result = self._result
            for plugin in list(self._plugins):
                task = resolve_validation_plugin(
                    plugin,
                    fixtures=self._fixtures_view,
                    validator=self._view,
                    trigger=trigger,
                    result=result,
                )
                self._task = task
                try:
                    result = (await task) or result
                except Exception as error:
                    # A run superseded while its step was failing still reports as aborted
                    if run.cancelled:
                        error = create_cancellation_error(run.reason)
                    failure = handle_validation_error(error)
                    if isinstance(error, ValidationCancelledError):
                        log.debug("validation_aborted", reason=failure.message)
                    else:
                        log.warning("validation_failed", state=failure.state, message=failure.message)
                    return failure
                finally:
                    # A newer run may already own the slot
                    if self._task is task:
                        self._task = None

                # The step may have settled before abort() reached it
                if run.cancelled:
                    failure = handle_validation_error(create_cancellation_error(run.reason))
                    log.debug("validation_aborted", reason=failure.message)
                    return failure

            self.dispatch_result(result)
            log.debug("validation_finished", state=result.state if result is not None else None)
            return result
        finally:
            if self._run is run:
                self._run = None


class ReadOnlyValidator:
    """Read-only projection of a Validator handed to plugins.

    Exposes the published result, fixture lookups and dispatch_result() for
    intermediate results; nothing else of the validator is reachable.
    """

    __slots__ = ("_validator",)

    def __init__(self, validator: Validator) -> None:
        self._validator = validator

    @property
    def result(self) -> ValidationResult | None:
        return self._validator.result

    def has_fixture(self, name: FixtureKey) -> bool:
        return self._validator.has_fixture(name)

    def find_fixture(self, name: FixtureKey) -> Any:
        return self._validator.find_fixture(name)

    def get_fixture(self, name: FixtureKey, expected_type: TypeExpectation | None = None) -> Any:
        return self._validator.get_fixture(name, expected_type)

    def get_fixture_value(
        self,
        name: FixtureKey,
        key: str = "value",
        expected_type: TypeExpectation | None = None,
    ) -> Any:
        return self._validator.get_fixture_value(name, key, expected_type)

    def dispatch_result(self, result: ValidationResult | None) -> None:
        self._validator.dispatch_result(result)
