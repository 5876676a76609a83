"""Orchestrate intake validation, parameter resolution and the projection.

The projection service turns a client's wizard intake into the flat structure
rendered by the pension chart: desired, statutory, private and occupational
pension at today, retirement and life expectancy, plus the pension gap and the
capital required to close it. Parameters are resolved once per call from the
injected provider; every calculator below is a pure function of its inputs.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from contextlib import contextmanager
from datetime import date
from time import perf_counter
from typing import Any

from pydantic import ValidationError

from rentencheck.backend.app.models import (
    IntakeRecord,
    InvalidIntakeError,
    PensionSeries,
    ProjectionGeneral,
    ProjectionInput,
    ProjectionMeta,
    ProjectionResult,
    StatutoryPension,
    TaxEstimate,
    format_validation_error,
)
from rentencheck.backend.config.schema import ParameterSet
from rentencheck.backend.config.settings_store import (
    ParameterProvider,
    load_settings_store,
    resolve_parameters,
)

from .calculators import (
    ContractClassifier,
    after_insurance,
    classify_contracts,
    current_gap,
    estimate_taxes,
    inflated_gap,
    keyword_classifier,
    occupational_after_insurance,
    project_forward,
    purchasing_power_at_retirement,
    required_capital,
    round_currency,
    round_rate,
)

_LOGGER = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}
MONTHS_PER_YEAR = 12
MAX_AGE = 150


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in _TRUTHY


def _profiling_enabled() -> bool:
    """Return ``True`` when projection profiling should be captured."""

    return _env_flag("RENTENCHECK_PROFILE_CALCULATIONS")


def fallback_enabled() -> bool:
    """Return ``True`` when missing settings may be filled from the defaults."""

    return _env_flag("RENTENCHECK_FALLBACK_TO_DEFAULTS")


@contextmanager
def _profile_section(name: str, store: dict[str, float] | None):
    """Capture the duration of a named section when profiling is enabled."""

    if store is None:
        yield
        return

    start = perf_counter()
    try:
        yield
    finally:
        store[name] = perf_counter() - start


def _series(today: float, inflation_rate: float, inputs: ProjectionInput) -> PensionSeries:
    return PensionSeries(
        today=round_currency(today),
        retirement=round_currency(
            project_forward(today, inflation_rate, inputs.years_to_retirement)
        ),
        life_expectancy=round_currency(
            project_forward(today, inflation_rate, inputs.years_to_life_expectancy)
        ),
    )


def _validate_intake(intake: IntakeRecord, retirement_age: int) -> None:
    """Reject intakes that cannot produce a meaningful projection."""

    if intake.current_age < 0:
        raise InvalidIntakeError("current_age cannot be negative")
    if retirement_age < 0:
        raise InvalidIntakeError("retirement_age cannot be negative")
    if intake.current_age > MAX_AGE or retirement_age > MAX_AGE:
        raise InvalidIntakeError(f"ages cannot exceed {MAX_AGE} years")
    if retirement_age <= intake.current_age:
        raise InvalidIntakeError("retirement_age must be greater than current_age")
    if intake.provision_duration < 0:
        raise InvalidIntakeError("provision_duration cannot be negative")
    if intake.provision_duration > MAX_AGE:
        raise InvalidIntakeError(f"provision_duration cannot exceed {MAX_AGE} years")

    amounts = {
        "pension_wish_current_value": intake.pension_wish_current_value,
        "statutory_pension_amount": intake.statutory_pension_amount,
    }
    for field_name, value in amounts.items():
        if value < 0:
            raise InvalidIntakeError(f"{field_name} cannot be negative")
    for index, contract in enumerate(intake.contracts):
        if contract.amount < 0:
            raise InvalidIntakeError(f"contracts.{index}.amount cannot be negative")


def _normalise_intake(intake: IntakeRecord, parameters: ParameterSet) -> ProjectionInput:
    retirement_age = (
        intake.retirement_age
        if intake.retirement_age is not None
        else parameters.retirement_age
    )
    _validate_intake(intake, retirement_age)

    return ProjectionInput(
        current_age=intake.current_age,
        retirement_age=retirement_age,
        life_expectancy=parameters.life_expectancy,
        # The intake's own assumed inflation is recorded in the meta block but
        # the admin-managed rate drives the projection.
        inflation_rate=parameters.inflation_rate,
        desired_pension_today=intake.pension_wish_current_value,
        statutory_pension_claims=intake.statutory_pension_claims,
        statutory_pension_amount=intake.statutory_pension_amount,
        professional_provision_works=intake.professional_provision_works,
        church_tax_region=intake.church_tax_region,
        contracts=intake.contracts,
    )


def build_projection(
    intake: IntakeRecord,
    parameters: ParameterSet,
    *,
    as_of: date,
    defaults_applied: bool = False,
    classifier: ContractClassifier = keyword_classifier,
) -> ProjectionResult:
    """Compute the projection for ``intake`` with already resolved ``parameters``.

    The gap compares the desired pension with everything already provided in
    today's money: the statutory pension's purchasing power plus the private
    and occupational pillars.
    """

    timings: dict[str, float] | None = {} if _profiling_enabled() else None

    with _profile_section("normalise_intake", timings):
        inputs = _normalise_intake(intake, parameters)

    inflation_rate = inputs.inflation_rate

    with _profile_section("contracts", timings):
        pillars = classify_contracts(
            inputs.contracts,
            statutory_pension_claims=inputs.statutory_pension_claims,
            professional_provision_works=inputs.professional_provision_works,
            classifier=classifier,
        )

    with _profile_section("statutory", timings):
        statutory_net = after_insurance(inputs.statutory_pension_amount, parameters)
        statutory_real = purchasing_power_at_retirement(
            statutory_net, inflation_rate, inputs.years_to_retirement
        )
        occupational_net = occupational_after_insurance(pillars.occupational, parameters)

    with _profile_section("gap", timings):
        provided_today = statutory_real + pillars.private + pillars.occupational
        gap_today = current_gap(inputs.desired_pension_today, provided_today)
        gap_at_retirement = inflated_gap(
            gap_today, inflation_rate, inputs.years_to_retirement
        )
        gap_at_life_expectancy = inflated_gap(
            gap_today, inflation_rate, inputs.years_to_life_expectancy
        )
        capital = required_capital(
            gap_at_retirement * MONTHS_PER_YEAR,
            inputs.years_in_retirement,
            parameters.investment_return_rate,
        )

    with _profile_section("tax", timings):
        annual_pension_income = (
            inputs.statutory_pension_amount + pillars.private + pillars.occupational
        ) * MONTHS_PER_YEAR
        taxes = estimate_taxes(
            annual_pension_income, parameters, inputs.church_tax_region
        )

    if timings is not None:
        _LOGGER.debug(
            "build_projection timings (ms): %s",
            {name: round(duration * 1000, 3) for name, duration in timings.items()},
        )

    return ProjectionResult(
        general=ProjectionGeneral(
            current_age=inputs.current_age,
            retirement_age=inputs.retirement_age,
            life_expectancy=inputs.life_expectancy,
            years_to_retirement=inputs.years_to_retirement,
            years_to_life_expectancy=inputs.years_to_life_expectancy,
            years_in_retirement=inputs.years_in_retirement,
            inflation_rate=round_rate(inflation_rate),
        ),
        desired_pension=_series(inputs.desired_pension_today, inflation_rate, inputs),
        legal_pension=_series(pillars.legal, inflation_rate, inputs),
        private_pension=_series(pillars.private, inflation_rate, inputs),
        occupational_pension=_series(pillars.occupational, inflation_rate, inputs),
        statutory_pension=StatutoryPension(
            gross=round_currency(inputs.statutory_pension_amount),
            after_insurance=round_currency(statutory_net),
            purchasing_power=round_currency(statutory_real),
        ),
        occupational_after_insurance=round_currency(occupational_net),
        pension_gap=PensionSeries(
            today=round_currency(gap_today),
            retirement=round_currency(gap_at_retirement),
            life_expectancy=round_currency(gap_at_life_expectancy),
        ),
        required_capital_at_retirement=round_currency(capital),
        tax_estimate=TaxEstimate(
            taxable_income=round_currency(taxes.taxable_income),
            income_tax=round_currency(taxes.income_tax),
            solidarity_surcharge=round_currency(taxes.solidarity_surcharge),
            church_tax=round_currency(taxes.church_tax),
            total_tax=round_currency(taxes.total_tax),
        ),
        parameters=parameters,
        meta=ProjectionMeta(
            as_of=as_of,
            defaults_applied=defaults_applied,
            intake_assumed_inflation=intake.assumed_inflation,
        ),
    )


def compute_projection(
    intake: IntakeRecord,
    as_of: date,
    provider: ParameterProvider | None = None,
    *,
    fallback_to_defaults: bool | None = None,
    classifier: ContractClassifier = keyword_classifier,
) -> ProjectionResult:
    """Resolve parameters for ``as_of`` once and project ``intake`` with them.

    ``provider`` defaults to the packaged settings store. A
    :class:`~rentencheck.backend.config.schema.MissingParameterError`
    propagates unless ``fallback_to_defaults`` (or the
    ``RENTENCHECK_FALLBACK_TO_DEFAULTS`` environment flag) allows the German
    2024 defaults to fill the gaps.
    """

    if provider is None:
        provider = load_settings_store()
    if fallback_to_defaults is None:
        fallback_to_defaults = fallback_enabled()

    parameters, defaults_applied = resolve_parameters(
        provider, as_of, fallback_to_defaults=fallback_to_defaults
    )
    return build_projection(
        intake,
        parameters,
        as_of=as_of,
        defaults_applied=defaults_applied,
        classifier=classifier,
    )


def parse_intake(payload: Mapping[str, Any] | IntakeRecord) -> IntakeRecord:
    """Validate a raw wizard payload into an :class:`IntakeRecord`."""

    if isinstance(payload, IntakeRecord):
        return payload
    if not isinstance(payload, Mapping):
        raise InvalidIntakeError("Payload must be a mapping")
    try:
        return IntakeRecord.model_validate(payload)
    except ValidationError as exc:
        raise InvalidIntakeError(format_validation_error(exc)) from exc


def calculate_projection(
    payload: Mapping[str, Any] | IntakeRecord,
    as_of: date | None = None,
    provider: ParameterProvider | None = None,
) -> dict[str, Any]:
    """Compute the JSON-ready projection for a raw intake ``payload``."""

    intake = parse_intake(payload)
    result = compute_projection(intake, as_of or date.today(), provider)
    return result.model_dump(mode="json")


__all__ = [
    "build_projection",
    "calculate_projection",
    "compute_projection",
    "fallback_enabled",
    "parse_intake",
]
