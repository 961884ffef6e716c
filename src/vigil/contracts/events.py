"""Events emitted by validators and hubs.

Delivered through vigil.core.events.EventBus; handlers subscribe by event
class.
"""

from dataclasses import dataclass

from vigil.contracts.enums import HubEventType
from vigil.contracts.keys import FixtureKey
from vigil.contracts.results import ValidationResult


@dataclass(frozen=True, slots=True)
class ResultChanged:
    """A validator published a new result (None after a reset)."""

    result: ValidationResult | None


@dataclass(frozen=True, slots=True)
class ValidatorEvent:
    """Hub-level lifecycle or result event for a named validator.

    Attributes:
        name: Name the validator is registered under in the hub
        type: create, remove or result
        result: Published result, only meaningful for result events
    """

    name: FixtureKey
    type: HubEventType
    result: ValidationResult | None = None
