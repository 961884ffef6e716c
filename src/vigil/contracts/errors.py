"""Exception taxonomy for vigil.

Configuration problems (bad plugin configs, duplicate fixtures, unknown plugin
types) are raised immediately to the caller. Failures that happen while a
plugin runs are never raised out of Validator.validate(); the engine turns
them into terminal ValidationResults instead (see vigil.engine.errors).
"""

import json
from typing import Any


class VigilError(Exception):
    """Base class for every error raised by vigil."""


# =============================================================================
# Configuration errors (raised at registration time)
# =============================================================================


class PluginConfigError(VigilError, ValueError):
    """Raised when a plugin configuration is invalid."""


class PluginNotFoundError(VigilError, LookupError):
    """Raised when a plugin registry has no factory for a type."""


class InvalidResultError(VigilError, ValueError):
    """Raised when a value cannot be interpreted as a ValidationResult."""


# =============================================================================
# Fixture errors
# =============================================================================


class FixtureError(VigilError, ValueError):
    """Raised when a fixture cannot be registered (no name, duplicate name)."""


class FixtureNotFoundError(VigilError, LookupError):
    """Raised when a fixture, a fixture attribute or its validators are missing."""


class FixtureTypeError(VigilError, TypeError):
    """Raised when a fixture (or one of its values) fails a runtime type check."""


# =============================================================================
# Hub errors
# =============================================================================


class ValidatorNotFoundError(VigilError, LookupError):
    """Raised when a hub has no validator registered under a name."""


class DuplicateValidatorError(VigilError, ValueError):
    """Raised when a hub already has a validator registered under a name."""


# =============================================================================
# Run-time control flow
# =============================================================================


class ValidationCancelledError(VigilError):
    """Raised by a CancellableTask whose handle was cancelled.

    Not a subclass of asyncio.CancelledError: awaiting a cancelled
    CancellableTask must leave the awaiting asyncio task running.

    Attributes:
        reason: The value passed to cancel(), or None
    """

    def __init__(self, message: str, reason: Any = None) -> None:
        super().__init__(message)
        self.reason = reason


class RejectionError(VigilError):
    """Carries a rejection reason that is not an exception.

    CancellableTask.reject() wraps non-exception reasons in this error. Plugins
    raise it directly to report a failure the engine should classify as
    ``unknown`` rather than ``error``.

    Attributes:
        value: The original rejection value
    """

    def __init__(self, value: Any) -> None:
        super().__init__(json.dumps(value, default=repr))
        self.value = value
