"""ValidatorHub: named validators sharing one FixtureStore.

The hub only indexes validators and relays their events; it takes no part in
running them. Every ResultChanged of a hub-created validator is re-emitted as
a ValidatorEvent of type ``result`` carrying the validator's name.
"""

from collections.abc import Callable, Mapping
from typing import Any

from vigil.contracts.enums import HubEventType
from vigil.contracts.errors import DuplicateValidatorError, ValidatorNotFoundError
from vigil.contracts.events import ResultChanged, ValidatorEvent
from vigil.contracts.keys import FixtureKey, NormalizedKey, normalize_key
from vigil.core.config import VigilSettings
from vigil.core.events import EventBus
from vigil.core.fixtures import FixtureStore
from vigil.core.logging import get_logger
from vigil.engine.validator import Validator
from vigil.plugins.registry import PluginRegistry

logger = get_logger(__name__)

HubHandler = Callable[[ValidatorEvent], None]


class ValidatorHub:
    """Creates, indexes and removes named validators over one fixture store.

    Example:
        hub = ValidatorHub(store)
        hub.subscribe(lambda event: print(event.name, event.type, event.result))
        email = hub.create_validator("email", {"fixture": "email"})
    """

    def __init__(self, fixtures: FixtureStore) -> None:
        self._fixtures = fixtures
        self._validators: dict[NormalizedKey, Validator] = {}
        self._relays: dict[NormalizedKey, Callable[[ResultChanged], None]] = {}
        self._events = EventBus()

    @property
    def fixtures(self) -> FixtureStore:
        return self._fixtures

    def subscribe(self, handler: HubHandler) -> None:
        """Call handler with every ValidatorEvent emitted by the hub."""
        self._events.subscribe(ValidatorEvent, handler)

    def unsubscribe(self, handler: HubHandler) -> bool:
        return self._events.unsubscribe(ValidatorEvent, handler)

    def create_validator(self, name: FixtureKey, default_props: Mapping[str, Any] | None = None) -> Validator:
        """Create a validator bound to the hub's fixture store.

        Raises:
            DuplicateValidatorError: If a validator with this name exists
        """
        if self.has_validator(name):
            raise DuplicateValidatorError(f"Validator '{name}' already exists")

        validator = Validator(self._fixtures, default_props, name=name)
        key = normalize_key(name)

        def relay(event: ResultChanged) -> None:
            self._events.emit(ValidatorEvent(name=name, type=HubEventType.RESULT, result=event.result))

        self._events.emit(ValidatorEvent(name=name, type=HubEventType.CREATE))
        validator.subscribe(relay)
        self._validators[key] = validator
        self._relays[key] = relay
        logger.info("validator_created", validator=str(name))
        return validator

    def find_validator(self, name: FixtureKey) -> Validator | None:
        return self._validators.get(normalize_key(name))

    def get_validator(self, name: FixtureKey) -> Validator:
        """Return the validator registered under name.

        Raises:
            ValidatorNotFoundError: If there is none
        """
        if not self.has_validator(name):
            raise ValidatorNotFoundError(f"Validator '{name}' does not exist")
        return self._validators[normalize_key(name)]

    def get_all_validators(self) -> list[Validator]:
        """All validators, in creation order."""
        return list(self._validators.values())

    def has_validator(self, name: FixtureKey) -> bool:
        return normalize_key(name) in self._validators

    def remove_validator(self, name: FixtureKey) -> bool:
        """Remove a validator from the hub.

        Its results are no longer relayed and it is dropped from the fixture
        store's validator index. A run in flight is left to finish.

        Returns:
            True if a validator was removed
        """
        if not self.has_validator(name):
            return False

        key = normalize_key(name)
        self._events.emit(ValidatorEvent(name=name, type=HubEventType.REMOVE))
        validator = self._validators.pop(key)
        validator.unsubscribe(self._relays.pop(key))
        self._fixtures.remove_validator(validator)
        logger.info("validator_removed", validator=str(name))
        return True

    @classmethod
    def from_settings(cls, settings: VigilSettings, registry: PluginRegistry | None = None) -> "ValidatorHub":
        """Build a fixture store and hub from loaded settings.

        Raises:
            FixtureError: If a fixture cannot be registered
            PluginConfigError: If a plugin config is malformed
            PluginNotFoundError: If a plugin config names an unknown type
        """
        store = FixtureStore()
        for name, fixture in settings.fixtures.items():
            store.add_fixture(dict(fixture), name)

        hub = cls(store)
        for name, validator_settings in settings.validators.items():
            validator = hub.create_validator(name, validator_settings.defaults)
            validator.add_plugins(validator_settings.plugins, registry)
        return hub
