# src/vigil/core/fixtures.py
"""Fixture storage shared by validators.

A FixtureStore maps fixture names to arbitrary values and keeps a reverse
index from fixture name to the validators that have plugins targeting it.
The index lets callers re-run exactly the validators that depend on a
fixture when that fixture changes (see vigil.engine.batch).

Plugins never receive the store itself, only a ReadOnlyFixtures view.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from vigil.contracts.errors import FixtureError, FixtureNotFoundError, FixtureTypeError
from vigil.contracts.keys import FixtureKey, NormalizedKey, is_fixture_key, normalize_key
from vigil.contracts.views import TypeExpectation
from vigil.core.logging import get_logger
from vigil.core.type_checks import describe_expectation, matches_expectation

if TYPE_CHECKING:
    from vigil.engine.validator import Validator

logger = get_logger(__name__)


def _infer_name(fixture: Any) -> Any:
    """Read the ``name`` of a fixture given as a mapping or an object."""
    if isinstance(fixture, Mapping):
        return fixture.get("name")
    return getattr(fixture, "name", None)


def _read_attribute(fixture: Any, key: str) -> tuple[bool, Any]:
    if isinstance(fixture, Mapping):
        if key in fixture:
            return True, fixture[key]
        return False, None
    if hasattr(fixture, key):
        return True, getattr(fixture, key)
    return False, None


class FixtureStore:
    """Named fixtures plus the fixture -> validators reverse index.

    Example:
        store = FixtureStore()
        store.add_fixture({"name": "email", "value": ""})
        store.get_fixture_value("email")  # ""
    """

    def __init__(self, fixtures: Mapping[FixtureKey, Any] | None = None) -> None:
        self._fixtures: dict[NormalizedKey, Any] = {}
        self._validators: dict[NormalizedKey, list[Validator]] = {}
        for name, fixture in (fixtures or {}).items():
            self.add_fixture(fixture, name)

    def __contains__(self, name: object) -> bool:
        return is_fixture_key(name) and self.has_fixture(name)

    def __len__(self) -> int:
        return len(self._fixtures)

    # === Fixtures ===

    def add_fixture(self, fixture: Any, name: FixtureKey | None = None) -> None:
        """Register a fixture.

        Args:
            fixture: Arbitrary value
            name: Fixture name; defaults to the fixture's own ``name``

        Raises:
            FixtureError: If no name can be determined, the name is not a
                valid key, or a fixture with that name already exists
        """
        if name is None:
            name = _infer_name(fixture)
        if name is None or name == "":
            raise FixtureError("Fixture must have a name")
        if not is_fixture_key(name):
            raise FixtureError(f"Fixture name must be a str, int or FixtureSymbol, got {type(name).__name__}")
        if self.has_fixture(name):
            raise FixtureError(f"Fixture '{name}' already exists")

        self._fixtures[normalize_key(name)] = fixture
        logger.debug("fixture_added", fixture=str(name))

    def has_fixture(self, name: FixtureKey) -> bool:
        """Whether a fixture is registered under name."""
        return normalize_key(name) in self._fixtures

    def find_fixture(self, name: FixtureKey) -> Any:
        """Return the fixture registered under name, or None."""
        return self._fixtures.get(normalize_key(name))

    def get_fixture(self, name: FixtureKey, expected_type: TypeExpectation | None = None) -> Any:
        """Return the fixture registered under name.

        Args:
            name: Fixture name
            expected_type: Optional class, tuple of classes or predicate the
                fixture must satisfy

        Raises:
            FixtureNotFoundError: If no fixture is registered under name
            FixtureTypeError: If the fixture fails expected_type
        """
        if not self.has_fixture(name):
            raise FixtureNotFoundError(f"Fixture '{name}' not found")

        fixture = self._fixtures[normalize_key(name)]
        if expected_type is not None and not matches_expectation(fixture, expected_type):
            raise FixtureTypeError(f"Fixture '{name}' is not type {describe_expectation(expected_type)}")
        return fixture

    def get_fixture_value(
        self,
        name: FixtureKey,
        key: str = "value",
        expected_type: TypeExpectation | None = None,
    ) -> Any:
        """Return one attribute (mapping key or object attribute) of a fixture.

        Args:
            name: Fixture name
            key: Attribute to read, ``value`` by default
            expected_type: Optional class, tuple of classes or predicate the
                attribute must satisfy

        Raises:
            FixtureNotFoundError: If the fixture or the attribute is missing
            FixtureTypeError: If the attribute fails expected_type
        """
        fixture = self.get_fixture(name)
        found, value = _read_attribute(fixture, key)
        if not found:
            raise FixtureNotFoundError(f"Fixture '{name}' is missing a {key}")
        if expected_type is not None and not matches_expectation(value, expected_type):
            raise FixtureTypeError(f"Fixture '{name}' {key} is not type {describe_expectation(expected_type)}")
        return value

    def remove_fixture(self, name_or_fixture: Any) -> bool:
        """Remove a fixture by name, or by identity when given a non-key value.

        Returns:
            True if a fixture was removed
        """
        if is_fixture_key(name_or_fixture):
            key = normalize_key(name_or_fixture)
            if key not in self._fixtures:
                return False
        else:
            matches = [k for k, fixture in self._fixtures.items() if fixture is name_or_fixture]
            if not matches:
                return False
            key = matches[0]

        del self._fixtures[key]
        logger.debug("fixture_removed", fixture=str(key))
        return True

    # === Validator index ===

    def add_validator(self, name: FixtureKey, validator: Validator) -> None:
        """Index a validator under a fixture name.

        A validator already indexed under the name is moved to the end rather
        than duplicated.
        """
        validators = self._validators.setdefault(normalize_key(name), [])
        validators[:] = [v for v in validators if v is not validator]
        validators.append(validator)

    def has_validator(self, name: FixtureKey, validator: Validator) -> bool:
        """Whether validator is indexed under name."""
        return any(v is validator for v in self._validators.get(normalize_key(name), []))

    def has_validators(self, name: FixtureKey) -> bool:
        """Whether at least one validator is indexed under name."""
        return bool(self._validators.get(normalize_key(name)))

    def get_validators(self, name: FixtureKey) -> list[Validator]:
        """Return the validators indexed under name, in registration order.

        Raises:
            FixtureNotFoundError: If no validator is indexed under name
        """
        if not self.has_validators(name):
            raise FixtureNotFoundError(f"Fixture '{name}' has no validators")
        return list(self._validators[normalize_key(name)])

    def remove_validator(self, validator: Validator, name: FixtureKey | None = None) -> bool:
        """Remove a validator from one fixture's index, or from all of them.

        Returns:
            True if the validator was removed from at least one index
        """
        if name is None:
            keys = list(self._validators)
        elif normalize_key(name) in self._validators:
            keys = [normalize_key(name)]
        else:
            return False

        removed = False
        for key in keys:
            validators = self._validators[key]
            remaining = [v for v in validators if v is not validator]
            if len(remaining) != len(validators):
                validators[:] = remaining
                removed = True
        return removed


class ReadOnlyFixtures:
    """Read-only projection of a FixtureStore handed to plugins.

    Exposes lookups only; there is no way to reach the underlying store
    through this object's public interface.
    """

    __slots__ = ("_store",)

    def __init__(self, store: FixtureStore) -> None:
        self._store = store

    def has_fixture(self, name: FixtureKey) -> bool:
        return self._store.has_fixture(name)

    def find_fixture(self, name: FixtureKey) -> Any:
        return self._store.find_fixture(name)

    def get_fixture(self, name: FixtureKey, expected_type: TypeExpectation | None = None) -> Any:
        return self._store.get_fixture(name, expected_type)

    def get_fixture_value(
        self,
        name: FixtureKey,
        key: str = "value",
        expected_type: TypeExpectation | None = None,
    ) -> Any:
        return self._store.get_fixture_value(name, key, expected_type)
