"""Status codes and kinds used across subsystem boundaries.

Result states are free-form strings chosen by plugin authors. The values in
ReservedState are the only ones the engine synthesizes itself, and only when
a run ends without a plugin-produced result.
"""

from enum import StrEnum


class ReservedState(StrEnum):
    """Result states produced by the engine when a run fails.

    Values:
        ABORTED: The active plugin step was cancelled (abort or superseded run)
        ERROR: A plugin raised an exception
        UNKNOWN: A plugin rejected with a value that is not an exception
    """

    ABORTED = "aborted"
    ERROR = "error"
    UNKNOWN = "unknown"


class HubEventType(StrEnum):
    """Kind of event re-broadcast by a ValidatorHub."""

    CREATE = "create"
    REMOVE = "remove"
    RESULT = "result"
