"""Typed request/response models shared across the projection services.

Wizard payloads are validated into :class:`IntakeRecord`, then normalised
against the resolved parameters into a :class:`ProjectionInput` whose derived
horizons drive every calculator. Keeping both here lets the routes, the
projection service and the tests agree on one schema.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from .api import (
    CONTRACT_SECTIONS,
    ContractInput,
    IntakeRecord,
    InvalidIntakeError,
    PensionSeries,
    ProjectionGeneral,
    ProjectionMeta,
    ProjectionResult,
    StatutoryPension,
    TaxEstimate,
    format_validation_error,
)

__all__ = [
    "CONTRACT_SECTIONS",
    "ContractInput",
    "IntakeRecord",
    "InvalidIntakeError",
    "PensionSeries",
    "ProjectionGeneral",
    "ProjectionInput",
    "ProjectionMeta",
    "ProjectionResult",
    "StatutoryPension",
    "TaxEstimate",
    "format_validation_error",
]


class ProjectionInput(BaseModel):
    """Validated intake with ages and horizons resolved for one projection."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    current_age: int
    retirement_age: int
    life_expectancy: int
    inflation_rate: float
    desired_pension_today: float
    statutory_pension_claims: bool
    statutory_pension_amount: float
    professional_provision_works: bool
    church_tax_region: str | None = None
    contracts: tuple[ContractInput, ...] = ()

    @property
    def years_to_retirement(self) -> int:
        return self.retirement_age - self.current_age

    @property
    def years_to_life_expectancy(self) -> int:
        return self.life_expectancy - self.current_age

    @property
    def years_in_retirement(self) -> int:
        years = self.life_expectancy - self.retirement_age
        return years if years > 0 else 0
