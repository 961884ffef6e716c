"""Validation results and plugin targets.

ValidationResult is the atomic unit of validation outcome. It is frozen; the
engine hands the same instance to every plugin and listener, so nothing may
mutate it after it has been produced.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from vigil.contracts.errors import InvalidResultError
from vigil.contracts.keys import FixtureKey

# A trigger/state selector: a single (optionally comma-separated) string or a
# sequence of strings. Entries prefixed with "!" exclude a value.
Selector = str | tuple[str, ...]


def is_json_value(value: Any) -> bool:
    """Check whether a value is representable as JSON.

    NaN and infinities are rejected because they have no JSON encoding.
    """
    if value is None or isinstance(value, (bool, int, str)):
        return True
    if isinstance(value, float):
        return math.isfinite(value)
    if isinstance(value, (list, tuple)):
        return all(is_json_value(item) for item in value)
    if isinstance(value, Mapping):
        return all(isinstance(k, str) and is_json_value(v) for k, v in value.items())
    return False


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of a validation run or of a single plugin.

    Attributes:
        state: Classification string (domain-defined, or a ReservedState)
        message: Optional human-readable explanation
        payload: Optional JSON-like data for consumers
    """

    state: str
    message: str | None = None
    payload: Any = None

    def __post_init__(self) -> None:
        if not isinstance(self.state, str):
            raise InvalidResultError(f"Result state must be a string, got {type(self.state).__name__}")
        if self.message is not None and not isinstance(self.message, str):
            raise InvalidResultError(f"Result message must be a string, got {type(self.message).__name__}")
        if not is_json_value(self.payload):
            raise InvalidResultError("Result payload must be a JSON value")

    @classmethod
    def from_value(cls, value: Any) -> ValidationResult:
        """Interpret a plugin outcome as a ValidationResult.

        Args:
            value: A ValidationResult (returned as-is) or a mapping with a
                ``state`` key and optional ``message``/``payload`` keys.
                Other keys are ignored.

        Returns:
            The validated result

        Raises:
            InvalidResultError: If the value is not a result-shaped object
        """
        if isinstance(value, ValidationResult):
            return value
        if not isinstance(value, Mapping):
            raise InvalidResultError(f"Result must be a mapping, got {type(value).__name__}")
        if "state" not in value:
            raise InvalidResultError("Result state must be defined")
        return cls(
            state=value["state"],
            message=value.get("message"),
            payload=value.get("payload"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict, omitting absent fields."""
        data: dict[str, Any] = {"state": self.state}
        if self.message is not None:
            data["message"] = self.message
        if self.payload is not None:
            data["payload"] = self.payload
        return data


@dataclass(frozen=True, slots=True)
class ValidationTarget:
    """Precondition under which a plugin is eligible to run.

    Attributes:
        fixture: Fixture that must exist in the store
        trigger: Triggers the run must match (None: any trigger)
        state: Result states the run must match (None: no result yet)
    """

    fixture: FixtureKey
    trigger: Selector | None = None
    state: Selector | None = None
