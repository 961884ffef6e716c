"""Fixture identifiers.

A fixture is addressed by a string, an integer or an opaque FixtureSymbol.
Integers are folded into their decimal string form on entry so that ``1`` and
``"1"`` always name the same fixture; symbols compare by identity only.
"""

from typing import Any, TypeGuard


class FixtureSymbol:
    """Opaque fixture key that only ever equals itself.

    Use when two components need a private fixture slot that no string key
    can collide with.

    Example:
        SESSION = FixtureSymbol("session")
        store.add_fixture(session, SESSION)
    """

    __slots__ = ("description",)

    def __init__(self, description: str = "") -> None:
        self.description = description

    def __repr__(self) -> str:
        return f"FixtureSymbol({self.description!r})"

    def __str__(self) -> str:
        return f"Symbol({self.description})"


FixtureKey = str | int | FixtureSymbol
NormalizedKey = str | FixtureSymbol


def is_fixture_key(value: Any) -> TypeGuard[FixtureKey]:
    """Check whether a value can be used as a fixture key.

    bool is rejected even though it subclasses int.
    """
    if isinstance(value, bool):
        return False
    return isinstance(value, (str, int, FixtureSymbol))


def normalize_key(key: FixtureKey) -> NormalizedKey:
    """Fold a fixture key into its internal representation.

    Raises:
        TypeError: If the value is not a valid fixture key
    """
    if not is_fixture_key(key):
        raise TypeError(f"Fixture key must be a str, int or FixtureSymbol, got {type(key).__name__}")
    if isinstance(key, int):
        return str(key)
    return key
