"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE with no outbound dependencies to core, plugins
or engine. Everything a plugin author needs to type their code lives here.

Import patterns:
    from vigil.contracts import ValidationResult, PluginProps, ReservedState
"""

from vigil.contracts.enums import HubEventType, ReservedState
from vigil.contracts.errors import (
    DuplicateValidatorError,
    FixtureError,
    FixtureNotFoundError,
    FixtureTypeError,
    InvalidResultError,
    PluginConfigError,
    PluginNotFoundError,
    RejectionError,
    ValidationCancelledError,
    ValidatorNotFoundError,
    VigilError,
)
from vigil.contracts.events import ResultChanged, ValidatorEvent
from vigil.contracts.keys import FixtureKey, FixtureSymbol, NormalizedKey, is_fixture_key, normalize_key
from vigil.contracts.results import Selector, ValidationResult, ValidationTarget, is_json_value
from vigil.contracts.views import (
    CancellationToken,
    FactoryPlugin,
    FixturesView,
    PluginFactory,
    PluginOutcome,
    PluginProps,
    TypeExpectation,
    ValidationPlugin,
    ValidatorView,
)

__all__ = [  # Grouped by category for readability
    # Enums
    "HubEventType",
    "ReservedState",
    # Errors
    "DuplicateValidatorError",
    "FixtureError",
    "FixtureNotFoundError",
    "FixtureTypeError",
    "InvalidResultError",
    "PluginConfigError",
    "PluginNotFoundError",
    "RejectionError",
    "ValidationCancelledError",
    "ValidatorNotFoundError",
    "VigilError",
    # Events
    "ResultChanged",
    "ValidatorEvent",
    # Keys
    "FixtureKey",
    "FixtureSymbol",
    "NormalizedKey",
    "is_fixture_key",
    "normalize_key",
    # Results
    "Selector",
    "ValidationResult",
    "ValidationTarget",
    "is_json_value",
    # Views and plugin types
    "CancellationToken",
    "FactoryPlugin",
    "FixturesView",
    "PluginFactory",
    "PluginOutcome",
    "PluginProps",
    "TypeExpectation",
    "ValidationPlugin",
    "ValidatorView",
]
