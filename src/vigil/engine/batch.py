"""Run or reset several validators at once."""

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass

from vigil.contracts.keys import FixtureKey
from vigil.contracts.results import ValidationResult, ValidationTarget
from vigil.contracts.views import CancellationToken, FixturesView
from vigil.core.fixtures import FixtureStore
from vigil.engine.validator import Validator
from vigil.plugins.resolution import check_preconditions


@dataclass(frozen=True, slots=True)
class _ValidatorContext:
    fixtures: FixturesView
    trigger: str | None
    result: ValidationResult | None
    handle: CancellationToken | None = None


async def validate_all(
    validators: Iterable[Validator],
    trigger: str | None = None,
    target: ValidationTarget | None = None,
) -> list[ValidationResult | None]:
    """Run validators concurrently and collect their results.

    Args:
        validators: Validators to run
        trigger: Trigger passed to every validate() call
        target: When given, only validators whose current state satisfies
            the target (see check_preconditions) are run

    Returns:
        Results of the validators that ran, in iteration order
    """
    eligible = []
    for validator in validators:
        if target is not None:
            context = _ValidatorContext(fixtures=validator.fixtures, trigger=trigger, result=validator.result)
            if not check_preconditions(context, target):
                continue
        eligible.append(validator)

    return list(await asyncio.gather(*(validator.validate(trigger) for validator in eligible)))


async def validate_dependents(
    fixtures: FixtureStore,
    fixture: FixtureKey,
    trigger: str | None = None,
) -> list[ValidationResult | None]:
    """Re-run every validator indexed under a fixture.

    The trigger defaults to the fixture name, so plugins can tell which
    fixture changed.
    """
    if not fixtures.has_validators(fixture):
        return []
    return await validate_all(fixtures.get_validators(fixture), trigger if trigger is not None else str(fixture))


def reset_all(validators: Iterable[Validator]) -> None:
    """Reset every validator (abort in-flight runs, publish None)."""
    for validator in validators:
        validator.reset()
