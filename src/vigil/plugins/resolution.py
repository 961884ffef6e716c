# src/vigil/plugins/resolution.py
"""Compile plugin configs into runnable validation plugins.

A plugin config is plain data. It is compiled once, at registration time,
into a CompiledPlugin holding:
- the ValidationTarget extracted from ``fixture``/``trigger``/``state``
- the default ValidationResult extracted from ``result``/``message``/``payload``
- the factory plugin: the registry factory's product when the config has a
  ``type``, otherwise a plugin that always returns True

Malformed configs fail here, with PluginConfigError or PluginNotFoundError,
so that a misconfigured validator never silently does nothing at run time.

On every invocation the compiled plugin re-checks its target against the
current fixtures, trigger, result and cancellation state before calling the
factory plugin.
"""

from __future__ import annotations

import inspect
from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from vigil.contracts.errors import InvalidResultError, PluginConfigError
from vigil.contracts.keys import is_fixture_key
from vigil.contracts.results import Selector, ValidationResult, ValidationTarget
from vigil.contracts.views import (
    CancellationToken,
    FactoryPlugin,
    FixturesView,
    PluginOutcome,
    PluginProps,
    ValidationPlugin,
    ValidatorView,
)
from vigil.core.cancellation import CancellableTask, CancellationHandle, Reject, Resolve
from vigil.plugins.registry import PluginRegistry

EXCLUDE_PREFIX = "!"


class PreconditionContext(Protocol):
    """What check_preconditions() needs to know about a run.

    PluginProps satisfies this protocol.
    """

    @property
    def fixtures(self) -> FixturesView: ...

    @property
    def trigger(self) -> str | None: ...

    @property
    def result(self) -> ValidationResult | None: ...

    @property
    def handle(self) -> CancellationToken | None: ...


def _parse_selector(config: Mapping[str, Any], field: str) -> Selector | None:
    value = config.get(field)
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, Sequence) and all(isinstance(item, str) for item in value):
        return tuple(value)
    raise PluginConfigError(f"Target {field} must be a string or string array")


def get_validation_target(config: Mapping[str, Any]) -> ValidationTarget:
    """Extract the (fixture, trigger, state) target from a plugin config.

    Raises:
        PluginConfigError: If ``fixture`` is missing or not a valid key, or
            trigger/state are not strings or string arrays
    """
    fixture = config.get("fixture")
    if fixture is None or fixture == "":
        raise PluginConfigError("Target fixture must be provided")
    if not is_fixture_key(fixture):
        raise PluginConfigError("Target fixture must be a str, int or FixtureSymbol")

    return ValidationTarget(
        fixture=fixture,
        trigger=_parse_selector(config, "trigger"),
        state=_parse_selector(config, "state"),
    )


def get_default_result(config: Mapping[str, Any]) -> ValidationResult:
    """Extract the default result a plugin publishes when it returns True.

    The config's ``result`` field is the state; ``message`` and ``payload``
    are carried over.

    Raises:
        PluginConfigError: If ``result`` is missing or the fields are malformed
    """
    state = config.get("result")
    if not state:
        raise PluginConfigError("Default result state must be provided")

    try:
        return ValidationResult(state=state, message=config.get("message"), payload=config.get("payload"))
    except InvalidResultError as e:
        raise PluginConfigError(f"Invalid default result: {e}") from e


def get_validation_result(value: Any) -> ValidationResult:
    """Validate a plugin outcome that is neither a bool nor None.

    Raises:
        InvalidResultError: If the value is not result-shaped
    """
    return ValidationResult.from_value(value)


def _always_proceed(props: PluginProps) -> bool:
    return True


def get_factory_plugin(config: Mapping[str, Any], registry: PluginRegistry | None = None) -> FactoryPlugin:
    """Instantiate the factory plugin for a config.

    Configs without a ``type`` get a plugin that always returns True (so
    the default result is published whenever the target matches).

    Raises:
        PluginConfigError: If the config has a ``type`` but no registry is given
        PluginNotFoundError: If the registry has no factory for ``type``
    """
    plugin_type = config.get("type")
    if not plugin_type:
        return _always_proceed

    if registry is None:
        raise PluginConfigError("Plugin registry must be provided if plugin config has a 'type'")

    factory = registry.get_factory(plugin_type)
    custom_props = {key: value for key, value in config.items() if key != "type"}
    return factory(custom_props)


def matches_target(value: str | None, target: Selector) -> bool:
    """Match a trigger or state against an include/exclude selector.

    A string selector is split on commas. Entries prefixed with ``!`` are
    exclusions. A value matches when it is explicitly included, or when
    the selector has no inclusions and the value is not excluded. A missing
    value never matches.
    """
    if not value:
        return False

    entries = target.split(",") if isinstance(target, str) else target

    included: set[str] = set()
    excluded: set[str] = set()
    for entry in entries:
        if entry.startswith(EXCLUDE_PREFIX):
            excluded.add(entry[len(EXCLUDE_PREFIX) :])
        else:
            included.add(entry)

    return value in included or (value not in excluded and not included)


def check_preconditions(context: PreconditionContext, target: ValidationTarget) -> bool:
    """Decide whether a plugin with this target may run now.

    True iff:
    - the target fixture exists
    - target.trigger is unset, or the current trigger matches it
    - target.state matches the current result's state; when target.state
      is unset there must be no current result
    - the run has not been cancelled
    """
    state = context.result.state if context.result is not None else None

    if not context.fixtures.has_fixture(target.fixture):
        return False

    if target.trigger and not matches_target(context.trigger, target.trigger):
        return False

    if target.state:
        if not matches_target(state, target.state):
            return False
    elif state:
        return False

    return not (context.handle is not None and context.handle.cancelled)


class CompiledPlugin:
    """Runnable validation plugin compiled from a config.

    Calling it returns the plugin's contribution to the run: a
    ValidationResult, or None when its preconditions fail or the factory
    plugin returned a falsy outcome.
    """

    def __init__(
        self,
        target: ValidationTarget,
        default_result: ValidationResult,
        plugin: FactoryPlugin,
        plugin_type: str | None = None,
    ) -> None:
        self.target = target
        self.default_result = default_result
        self.plugin = plugin
        self.plugin_type = plugin_type

    def __repr__(self) -> str:
        return f"<CompiledPlugin type={self.plugin_type or 'default'} fixture={self.target.fixture!s}>"

    async def __call__(self, props: PluginProps) -> ValidationResult | None:
        if not check_preconditions(props, self.target):
            return None

        outcome: PluginOutcome = await _invoke(self.plugin, props)
        if not outcome:
            return None
        if isinstance(outcome, bool):
            return self.default_result
        return get_validation_result(outcome)


def create_validation_plugin(config: Mapping[str, Any], registry: PluginRegistry | None = None) -> CompiledPlugin:
    """Compile a plugin config.

    Raises:
        PluginConfigError: Missing fixture/result, malformed fields, or a
            ``type`` without a registry
        PluginNotFoundError: Unknown plugin ``type``
    """
    if not isinstance(config, Mapping):
        raise PluginConfigError(f"Plugin config must be a mapping, got {type(config).__name__}")

    target = get_validation_target(config)
    default_result = get_default_result(config)
    plugin = get_factory_plugin(config, registry)
    return CompiledPlugin(target, default_result, plugin, plugin_type=config.get("type") or None)


async def _invoke(plugin: Any, props: PluginProps) -> Any:
    outcome = plugin(props)
    if inspect.isawaitable(outcome):
        outcome = await outcome
    return outcome


def resolve_validation_plugin(
    plugin: ValidationPlugin,
    *,
    fixtures: FixturesView,
    validator: ValidatorView,
    trigger: str | None,
    result: ValidationResult | None,
) -> CancellableTask[ValidationResult | None]:
    """Run one plugin step inside a CancellableTask with a fresh handle."""

    async def body(resolve: Resolve, reject: Reject, handle: CancellationHandle) -> None:
        props = PluginProps(
            fixtures=fixtures,
            validator=validator,
            trigger=trigger,
            result=result,
            handle=handle,
        )
        resolve(await _invoke(plugin, props))

    return CancellableTask(body)
