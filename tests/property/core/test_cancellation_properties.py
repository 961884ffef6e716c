# tests/property/core/test_cancellation_properties.py
"""Property-based tests for cancellation handles and keys.

CANCELLATION INVARIANTS:
1. The first cancel() wins; later reasons are ignored
2. Every registered callback runs exactly once, whenever it was added
3. String reasons always surface in the cancellation message
"""

from typing import Any

from hypothesis import given
from hypothesis import strategies as st

from tests.property.settings import STANDARD_SETTINGS
from vigil.contracts import normalize_key
from vigil.core.cancellation import CancellationHandle, create_cancellation_error

reasons = st.one_of(st.none(), st.text(max_size=20), st.integers(), st.lists(st.integers(), max_size=3))


class TestHandleProperties:
    @given(first=reasons, rest=st.lists(reasons, max_size=5))
    @STANDARD_SETTINGS
    def test_first_cancel_wins(self, first: Any, rest: list[Any]) -> None:
        handle = CancellationHandle()

        handle.cancel(first)
        for reason in rest:
            handle.cancel(reason)

        assert handle.cancelled
        assert handle.reason == first

    @given(before=st.integers(min_value=0, max_value=5), after=st.integers(min_value=0, max_value=5), reason=reasons)
    @STANDARD_SETTINGS
    def test_callbacks_run_exactly_once(self, before: int, after: int, reason: Any) -> None:
        handle = CancellationHandle()
        calls: list[Any] = []

        for _ in range(before):
            handle.add_callback(calls.append)
        handle.cancel(reason)
        for _ in range(after):
            handle.add_callback(calls.append)
        handle.cancel("ignored")

        assert calls == [reason] * (before + after)

    @given(reason=st.text(min_size=1))
    @STANDARD_SETTINGS
    def test_string_reason_in_message(self, reason: str) -> None:
        assert str(create_cancellation_error(reason)) == f"cancelled due to {reason}"


class TestKeyProperties:
    @given(key=st.one_of(st.text(), st.integers()))
    @STANDARD_SETTINGS
    def test_normalize_is_idempotent(self, key: str | int) -> None:
        normalized = normalize_key(key)

        assert normalize_key(normalized) == normalized
        assert normalized == str(key)
