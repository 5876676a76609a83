"""Pydantic models describing the public API surface."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from rentencheck.backend.config.schema import ParameterSet

__all__ = [
    "ContractInput",
    "IntakeRecord",
    "InvalidIntakeError",
    "PensionSeries",
    "StatutoryPension",
    "ProjectionGeneral",
    "TaxEstimate",
    "ProjectionMeta",
    "ProjectionResult",
    "format_validation_error",
    "CONTRACT_SECTIONS",
]


class InvalidIntakeError(ValueError):
    """Raised when intake data cannot be used for a projection."""


ContractCategory = Literal["payout", "pension", "additional_income"]

# Wizard step-3 lists and the contract category each one carries.
CONTRACT_SECTIONS: Mapping[str, ContractCategory] = {
    "payoutContracts": "payout",
    "pensionContracts": "pension",
    "additionalIncome": "additional_income",
}

_STEP_KEYS = ("step_2_data", "step_3_data")


def _zero_if_none(value: Any) -> Any:
    return 0 if value is None else value


class ContractInput(BaseModel):
    """Existing contract or income source captured in the wizard."""

    model_config = ConfigDict(extra="ignore", frozen=True, allow_inf_nan=False)

    category: ContractCategory = "pension"
    type: str = ""
    amount: float = 0.0
    description: str | None = None

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> Any:
        return _zero_if_none(value)


class IntakeRecord(BaseModel):
    """Client figures collected by the Rentencheck wizard (steps 2 and 3).

    Accepts either snake_case fields or the wizard's camelCase keys, and the
    nested ``step_2_data``/``step_3_data`` shape of a stored assessment.
    """

    model_config = ConfigDict(
        extra="ignore", frozen=True, populate_by_name=True, allow_inf_nan=False
    )

    current_age: int = Field(default=0, alias="currentAge")
    retirement_age: int | None = Field(default=None, alias="retirementAge")
    assumed_inflation: float | None = Field(default=None, alias="assumedInflation")
    pension_wish_current_value: float = Field(default=0.0, alias="pensionWishCurrentValue")
    provision_duration: int = Field(default=0, alias="provisionDuration")
    statutory_pension_claims: bool = Field(default=False, alias="statutoryPensionClaims")
    statutory_pension_amount: float = Field(default=0.0, alias="statutoryPensionAmount")
    professional_provision_works: bool = Field(
        default=False, alias="professionalProvisionWorks"
    )
    church_tax_region: Literal["bavaria_bw", "other_states"] | None = Field(
        default=None, alias="churchTaxRegion"
    )
    contracts: tuple[ContractInput, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _flatten_wizard_payload(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data

        prepared: dict[str, Any] = {}
        for step_key in _STEP_KEYS:
            step = data.get(step_key)
            if isinstance(step, Mapping):
                prepared.update(step)
        prepared.update(
            {key: value for key, value in data.items() if key not in _STEP_KEYS}
        )

        contracts = list(prepared.pop("contracts", None) or [])
        for section, category in CONTRACT_SECTIONS.items():
            entries = prepared.pop(section, None) or []
            for entry in entries:
                if isinstance(entry, Mapping):
                    contracts.append({**entry, "category": category})
                else:
                    contracts.append(entry)
        prepared["contracts"] = contracts
        return prepared

    @field_validator(
        "current_age",
        "pension_wish_current_value",
        "provision_duration",
        "statutory_pension_amount",
        mode="before",
    )
    @classmethod
    def _coerce_numbers(cls, value: Any) -> Any:
        return _zero_if_none(value)

    @field_validator(
        "statutory_pension_claims", "professional_provision_works", mode="before"
    )
    @classmethod
    def _coerce_flags(cls, value: Any) -> bool:
        if value is None:
            return False
        return value

    @field_validator("church_tax_region", mode="before")
    @classmethod
    def _blank_region_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class PensionSeries(BaseModel):
    """Monthly amounts at the three projection time points."""

    model_config = ConfigDict(frozen=True)

    today: float
    retirement: float
    life_expectancy: float


class StatutoryPension(BaseModel):
    """Statutory pension before and after insurance, plus its real value."""

    model_config = ConfigDict(frozen=True)

    gross: float
    after_insurance: float
    purchasing_power: float


class ProjectionGeneral(BaseModel):
    """Ages, horizons and the inflation rate the projection used."""

    model_config = ConfigDict(frozen=True)

    current_age: int
    retirement_age: int
    life_expectancy: int
    years_to_retirement: int
    years_to_life_expectancy: int
    years_in_retirement: int
    inflation_rate: float


class TaxEstimate(BaseModel):
    """Annual taxes on the pension income at today's values."""

    model_config = ConfigDict(frozen=True)

    taxable_income: float
    income_tax: float
    solidarity_surcharge: float
    church_tax: float
    total_tax: float


class ProjectionMeta(BaseModel):
    """Context needed to audit how a projection was produced."""

    model_config = ConfigDict(frozen=True)

    as_of: date
    defaults_applied: bool = False
    intake_assumed_inflation: float | None = None


class ProjectionResult(BaseModel):
    """Chart-ready pension projection for one intake."""

    model_config = ConfigDict(frozen=True)

    general: ProjectionGeneral
    desired_pension: PensionSeries
    legal_pension: PensionSeries
    private_pension: PensionSeries
    occupational_pension: PensionSeries
    statutory_pension: StatutoryPension
    occupational_after_insurance: float
    pension_gap: PensionSeries
    required_capital_at_retirement: float
    tax_estimate: TaxEstimate
    parameters: ParameterSet
    meta: ProjectionMeta


def format_validation_error(error: ValidationError) -> str:
    """Return a concise human-readable description of validation issues."""

    messages: list[str] = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue.get("loc", ()))
        message = issue.get("msg", "Invalid value")
        if location:
            messages.append(f"{location}: {message}")
        else:
            messages.append(message)

    details = "; ".join(messages) if messages else str(error)
    return f"Invalid intake payload: {details}"
