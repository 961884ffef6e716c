"""Read-only projections and the plugin calling convention.

Plugins never see a FixtureStore or a Validator directly. They receive the
narrow views defined here, which expose only the sanctioned accessors.

Plugin factory contract:
    factory(custom_props) -> plugin
    plugin(props: PluginProps) -> outcome | Awaitable[outcome]

where outcome is a ValidationResult (or result-shaped mapping), a bool
(True: use the plugin's default result, False: no contribution) or None.
"""

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from vigil.contracts.keys import FixtureKey
from vigil.contracts.results import ValidationResult

# Either a type, a tuple of types, or a predicate over the value.
TypeExpectation = type | tuple[type, ...] | Callable[[Any], bool]


class CancellationToken(Protocol):
    """Cancellation handle handed to each plugin invocation."""

    @property
    def cancelled(self) -> bool: ...

    @property
    def reason(self) -> Any: ...

    def cancel(self, reason: Any = None) -> None: ...


class FixturesView(Protocol):
    """Read-only access to a fixture store."""

    def has_fixture(self, name: FixtureKey) -> bool: ...

    def find_fixture(self, name: FixtureKey) -> Any: ...

    def get_fixture(self, name: FixtureKey, expected_type: TypeExpectation | None = None) -> Any: ...

    def get_fixture_value(
        self,
        name: FixtureKey,
        key: str = "value",
        expected_type: TypeExpectation | None = None,
    ) -> Any: ...


class ValidatorView(FixturesView, Protocol):
    """Read-only access to a validator, plus intermediate result publishing."""

    @property
    def result(self) -> ValidationResult | None: ...

    def dispatch_result(self, result: ValidationResult | None) -> None: ...


@dataclass(frozen=True, slots=True)
class PluginProps:
    """Arguments for a single plugin invocation.

    Attributes:
        fixtures: Read-only fixture accessor
        validator: Read-only view of the running validator
        trigger: Why validation was requested (None if unspecified)
        result: Most recent result in this run (starts at the published result)
        handle: Cancellation handle for this plugin step
    """

    fixtures: FixturesView
    validator: ValidatorView
    trigger: str | None
    result: ValidationResult | None
    handle: CancellationToken


PluginOutcome = ValidationResult | Mapping[str, Any] | bool | None
FactoryPlugin = Callable[[PluginProps], PluginOutcome | Awaitable[PluginOutcome]]
PluginFactory = Callable[[Mapping[str, Any]], FactoryPlugin]
ValidationPlugin = Callable[[PluginProps], Awaitable[ValidationResult | None]]
