"""Tests for ValidationResult and ValidationTarget."""

import dataclasses
import math

import pytest

from vigil.contracts import InvalidResultError, ValidationResult, ValidationTarget, is_json_value


class TestValidationResult:
    """ValidationResult construction and validation."""

    def test_defaults(self) -> None:
        result = ValidationResult(state="valid")

        assert result.state == "valid"
        assert result.message is None
        assert result.payload is None

    def test_is_frozen(self) -> None:
        result = ValidationResult(state="valid")

        with pytest.raises(dataclasses.FrozenInstanceError):
            result.state = "invalid"  # type: ignore[misc]

    def test_equality_by_value(self) -> None:
        assert ValidationResult(state="OK", message="done") == ValidationResult(state="OK", message="done")

    def test_rejects_non_string_state(self) -> None:
        with pytest.raises(InvalidResultError, match="state must be a string"):
            ValidationResult(state=1)  # type: ignore[arg-type]

    def test_rejects_non_string_message(self) -> None:
        with pytest.raises(InvalidResultError, match="message must be a string"):
            ValidationResult(state="x", message=42)  # type: ignore[arg-type]

    def test_rejects_non_json_payload(self) -> None:
        with pytest.raises(InvalidResultError, match="payload"):
            ValidationResult(state="x", payload={"when": object()})

    def test_invalid_result_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            ValidationResult(state=None)  # type: ignore[arg-type]


class TestFromValue:
    """ValidationResult.from_value() coercion."""

    def test_returns_result_unchanged(self) -> None:
        result = ValidationResult(state="valid")

        assert ValidationResult.from_value(result) is result

    def test_accepts_mapping(self) -> None:
        result = ValidationResult.from_value({"state": "invalid", "message": "Missing email", "payload": [1, 2]})

        assert result == ValidationResult(state="invalid", message="Missing email", payload=[1, 2])

    def test_ignores_extra_keys(self) -> None:
        result = ValidationResult.from_value({"state": "valid", "extra": True})

        assert result == ValidationResult(state="valid")

    def test_requires_state(self) -> None:
        with pytest.raises(InvalidResultError, match="state must be defined"):
            ValidationResult.from_value({"message": "no state"})

    def test_rejects_non_mapping(self) -> None:
        with pytest.raises(InvalidResultError, match="must be a mapping"):
            ValidationResult.from_value("valid")


class TestToDict:
    def test_omits_absent_fields(self) -> None:
        assert ValidationResult(state="valid").to_dict() == {"state": "valid"}

    def test_includes_message_and_payload(self) -> None:
        result = ValidationResult(state="invalid", message="bad", payload={"field": "email"})

        assert result.to_dict() == {"state": "invalid", "message": "bad", "payload": {"field": "email"}}


class TestIsJsonValue:
    @pytest.mark.parametrize(
        "value",
        [None, True, 0, 1.5, "text", [], [1, "a", None], {"a": {"b": [1]}}, (1, 2)],
    )
    def test_json_values(self, value: object) -> None:
        assert is_json_value(value)

    @pytest.mark.parametrize(
        "value",
        [math.nan, math.inf, {1: "int key"}, {"a": object()}, {1, 2}, b"bytes"],
    )
    def test_non_json_values(self, value: object) -> None:
        assert not is_json_value(value)


class TestValidationTarget:
    def test_defaults(self) -> None:
        target = ValidationTarget(fixture="email")

        assert target.trigger is None
        assert target.state is None

    def test_is_hashable(self) -> None:
        target = ValidationTarget(fixture="email", trigger=("blur", "!init"), state="valid")

        assert hash(target) == hash(ValidationTarget(fixture="email", trigger=("blur", "!init"), state="valid"))
