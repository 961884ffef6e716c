"""Validation engine: validators, hubs and batch helpers."""

from vigil.engine.batch import reset_all, validate_all, validate_dependents
from vigil.engine.errors import handle_validation_error
from vigil.engine.hub import ValidatorHub
from vigil.engine.validator import ReadOnlyValidator, Validator

__all__ = [
    "ReadOnlyValidator",
    "Validator",
    "ValidatorHub",
    "handle_validation_error",
    "reset_all",
    "validate_all",
    "validate_dependents",
]
