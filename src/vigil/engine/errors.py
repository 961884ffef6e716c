"""Map run-time plugin failures to terminal ValidationResults.

- ValidationCancelledError -> ``aborted``, message is the cancellation reason
- RejectionError           -> ``unknown``, message is the JSON form of the value
- any other Exception      -> ``error``, message is "<ExceptionType>: <text>"
"""

import json

from vigil.contracts.enums import ReservedState
from vigil.contracts.errors import RejectionError, ValidationCancelledError
from vigil.contracts.results import ValidationResult


def handle_validation_error(error: Exception) -> ValidationResult:
    """Convert an exception raised by a plugin step into a terminal result."""
    if isinstance(error, ValidationCancelledError):
        return ValidationResult(state=ReservedState.ABORTED.value, message=str(error))
    if isinstance(error, RejectionError):
        return ValidationResult(state=ReservedState.UNKNOWN.value, message=json.dumps(error.value, default=repr))
    return ValidationResult(state=ReservedState.ERROR.value, message=f"{type(error).__name__}: {error}")
