"""Core infrastructure: cancellation, fixtures, events, configuration, logging."""

from vigil.core.cancellation import (
    CANCELLED_WITHOUT_REASON,
    CancellableTask,
    CancellationHandle,
    create_cancellation_error,
)
from vigil.core.config import ValidatorSettings, VigilSettings, load_settings
from vigil.core.events import EventBus
from vigil.core.fixtures import FixtureStore, ReadOnlyFixtures
from vigil.core.logging import configure_logging, get_logger

__all__ = [
    "CANCELLED_WITHOUT_REASON",
    "CancellableTask",
    "CancellationHandle",
    "EventBus",
    "FixtureStore",
    "ReadOnlyFixtures",
    "ValidatorSettings",
    "VigilSettings",
    "configure_logging",
    "create_cancellation_error",
    "get_logger",
    "load_settings",
]
