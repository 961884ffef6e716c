# tests/conftest.py
"""Shared test fixtures and helpers.

Fixtures:
- store: empty FixtureStore
- validator: Validator bound to ``store`` with no default props
- registry: PluginRegistry holding the built-in factories
- published: results the ``validator`` fixture publishes
- make_gate: Gate factory for holding a plugin step open until released

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

import asyncio
import logging
import os
from collections.abc import Callable, Iterator
from typing import Any

import pytest
from hypothesis import Phase, Verbosity, settings

from vigil.contracts import PluginProps, ResultChanged, ValidationResult
from vigil.core.fixtures import FixtureStore
from vigil.engine.validator import Validator
from vigil.plugins.builtin import BUILTIN_FACTORIES
from vigil.plugins.registry import PluginRegistry

# =============================================================================
# Hypothesis Configuration
# =============================================================================

# CI profile: Fast tests for continuous integration
settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

# Nightly profile: Thorough testing for scheduled runs
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Debug profile: Minimal examples with verbose output for debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Load profile from environment, default to "ci"
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


# =============================================================================
# Shared fixtures
# =============================================================================


@pytest.fixture
def store() -> FixtureStore:
    return FixtureStore()


@pytest.fixture
def validator(store: FixtureStore) -> Validator:
    return Validator(store)


@pytest.fixture
def registry() -> PluginRegistry:
    return PluginRegistry(BUILTIN_FACTORIES)


@pytest.fixture
def published(validator: Validator) -> list[ValidationResult | None]:
    """Every result the ``validator`` fixture publishes, in order."""
    events: list[ValidationResult | None] = []

    def record(event: ResultChanged) -> None:
        events.append(event.result)

    validator.subscribe(record)
    return events


class Gate:
    """Plugin body that blocks until released, recording every invocation.

    Example:
        gate = Gate(ValidationResult(state="valid"))
        registry = PluginRegistry({"gate": gate.factory})
        ...
        await gate.started.wait()
        gate.release()
    """

    def __init__(self, outcome: Any = True) -> None:
        self.outcome = outcome
        self.calls: list[PluginProps] = []
        self.started = asyncio.Event()
        self._released = asyncio.Event()

    def release(self) -> None:
        self._released.set()

    async def __call__(self, props: PluginProps) -> Any:
        self.calls.append(props)
        self.started.set()
        await self._released.wait()
        return self.outcome

    def factory(self, custom_props: Any) -> Callable[[PluginProps], Any]:
        return self


@pytest.fixture
def make_gate() -> Callable[..., Gate]:
    return Gate


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    """configure_logging() binds handlers to the current stdout; undo that after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)
