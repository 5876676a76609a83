"""Pydantic models describing the pension settings schema."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from datetime import date, datetime
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    computed_field,
    field_validator,
    model_validator,
)
from typing_extensions import Self


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class MissingParameterError(LookupError):
    """Raised when required settings have no active value for a date."""

    def __init__(self, keys: Iterable[str], as_of: date | None = None) -> None:
        self.keys = tuple(sorted(keys))
        self.as_of = as_of
        scope = f" on {as_of.isoformat()}" if as_of is not None else ""
        super().__init__(
            f"No active pension setting{scope} for: {', '.join(self.keys)}"
        )


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(
        frozen=True, extra="forbid", populate_by_name=True, allow_inf_nan=False
    )


SETTING_CATEGORIES: Mapping[str, str] = {
    "health_insurance_rate": "social_insurance",
    "additional_health_insurance_rate": "social_insurance",
    "care_insurance_rate": "social_insurance",
    "health_insurance_exemption_bav": "social_insurance",
    "inflation_rate": "economic_assumptions",
    "pension_increase_rate": "economic_assumptions",
    "investment_return_rate": "economic_assumptions",
    "tax_rate_stufe_1": "tax_brackets",
    "tax_rate_stufe_2": "tax_brackets",
    "tax_rate_stufe_3": "tax_brackets",
    "tax_rate_stufe_4": "tax_brackets",
    "tax_rate_stufe_5": "tax_brackets",
    "tax_threshold_1": "tax_thresholds",
    "tax_threshold_2": "tax_thresholds",
    "tax_threshold_3": "tax_thresholds",
    "tax_threshold_4": "tax_thresholds",
    "church_tax_bavaria_bw": "regional_taxes",
    "church_tax_other_states": "regional_taxes",
    "solidarity_surcharge_rate": "regional_taxes",
    "solidarity_surcharge_threshold": "regional_taxes",
    "retirement_age": "demographics",
    "life_expectancy": "demographics",
}

TAX_RATE_KEYS: tuple[str, ...] = tuple(f"tax_rate_stufe_{index}" for index in range(1, 6))
TAX_THRESHOLD_KEYS: tuple[str, ...] = tuple(f"tax_threshold_{index}" for index in range(1, 5))

# Keys the settings store may omit; the engine then uses the statutory defaults.
OPTIONAL_SETTING_DEFAULTS: Mapping[str, float] = {
    "retirement_age": 67,
    "life_expectancy": 85,
}

REQUIRED_SETTING_KEYS: frozenset[str] = frozenset(SETTING_CATEGORIES) - frozenset(
    OPTIONAL_SETTING_DEFAULTS
)


def _coerce_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value in {0, "0", "false", "False", None}:
        return False
    if value in {1, "1", "true", "True"}:
        return True
    raise ConfigurationError("Boolean flags must be explicit true/false values")


class PensionSetting(ImmutableModel):
    """A single admin-managed setting row with its validity window."""

    key: str
    category: str
    value: float
    unit: str = "%"
    description: str = ""
    description_de: str = ""
    is_active: bool = True
    valid_from: date
    valid_until: date | None = None
    updated_at: datetime | None = None

    @field_validator("is_active", mode="before")
    @classmethod
    def _coerce_flag(cls, value: Any) -> bool:
        return _coerce_boolean(value)

    @model_validator(mode="after")
    def _validate_window(self) -> Self:
        if not self.key.strip():
            raise ConfigurationError("Setting keys must be non-empty")
        if self.valid_until is not None and self.valid_until < self.valid_from:
            raise ConfigurationError(
                f"Setting '{self.key}' ends before it becomes valid"
            )
        return self

    def is_effective_on(self, as_of: date) -> bool:
        """Return ``True`` when the row is active and valid on ``as_of``."""

        if not self.is_active or self.valid_from > as_of:
            return False
        return self.valid_until is None or as_of <= self.valid_until


class SettingsDocument(ImmutableModel):
    """Top-level document holding the settings store rows."""

    settings: Sequence[PensionSetting]

    @field_validator("settings", mode="before")
    @classmethod
    def _coerce_settings(cls, value: Any) -> Sequence[Any]:
        if value is None:
            return ()
        if isinstance(value, Iterable) and not isinstance(value, (str, bytes, Mapping)):
            return tuple(value)
        raise ConfigurationError("'settings' must be a list of setting rows")


class ParameterSet(ImmutableModel):
    """Economic, tax and insurance parameters resolved for one calculation."""

    inflation_rate: float
    pension_increase_rate: float
    investment_return_rate: float
    health_insurance_rate: float
    additional_health_insurance_rate: float
    care_insurance_rate: float
    health_insurance_exemption_bav: float
    tax_bracket_rates: tuple[float, float, float, float, float]
    tax_bracket_thresholds: tuple[float, float, float, float]
    solidarity_surcharge_rate: float
    solidarity_surcharge_threshold: float
    church_tax_bavaria_bw: float
    church_tax_other_states: float
    retirement_age: int = Field(default=67, ge=0, le=150)
    life_expectancy: int = Field(default=85, ge=0, le=150)

    @model_validator(mode="after")
    def _validate_values(self) -> Self:
        rates = {
            "inflation_rate": self.inflation_rate,
            "pension_increase_rate": self.pension_increase_rate,
            "investment_return_rate": self.investment_return_rate,
            "health_insurance_rate": self.health_insurance_rate,
            "additional_health_insurance_rate": self.additional_health_insurance_rate,
            "care_insurance_rate": self.care_insurance_rate,
            "solidarity_surcharge_rate": self.solidarity_surcharge_rate,
            "church_tax_bavaria_bw": self.church_tax_bavaria_bw,
            "church_tax_other_states": self.church_tax_other_states,
        }
        for name, rate in rates.items():
            if rate < 0:
                raise ConfigurationError(f"'{name}' must be non-negative")

        if any(rate < 0 for rate in self.tax_bracket_rates):
            raise ConfigurationError("Tax rates must be non-negative")
        for lower, upper in zip(self.tax_bracket_rates, self.tax_bracket_rates[1:]):
            if upper < lower:
                raise ConfigurationError("Tax rates must be non-decreasing")

        if self.tax_bracket_thresholds[0] < 0:
            raise ConfigurationError("Tax thresholds must be non-negative")
        for lower, upper in zip(self.tax_bracket_thresholds, self.tax_bracket_thresholds[1:]):
            if upper <= lower:
                raise ConfigurationError("Tax thresholds must be strictly increasing")

        if self.health_insurance_exemption_bav < 0:
            raise ConfigurationError("'health_insurance_exemption_bav' must be non-negative")
        if self.solidarity_surcharge_threshold < 0:
            raise ConfigurationError("'solidarity_surcharge_threshold' must be non-negative")
        return self

    @computed_field
    @property
    def total_insurance_rate(self) -> float:
        return (
            self.health_insurance_rate
            + self.additional_health_insurance_rate
            + self.care_insurance_rate
        ) / 100

    @classmethod
    def from_settings(cls, values: Mapping[str, float]) -> ParameterSet:
        """Build a parameter set from a flat ``key -> value`` mapping."""

        missing = REQUIRED_SETTING_KEYS - set(values)
        if missing:
            raise MissingParameterError(missing)

        merged = {**OPTIONAL_SETTING_DEFAULTS, **values}
        payload = {
            "inflation_rate": merged["inflation_rate"],
            "pension_increase_rate": merged["pension_increase_rate"],
            "investment_return_rate": merged["investment_return_rate"],
            "health_insurance_rate": merged["health_insurance_rate"],
            "additional_health_insurance_rate": merged["additional_health_insurance_rate"],
            "care_insurance_rate": merged["care_insurance_rate"],
            "health_insurance_exemption_bav": merged["health_insurance_exemption_bav"],
            "tax_bracket_rates": tuple(merged[key] for key in TAX_RATE_KEYS),
            "tax_bracket_thresholds": tuple(merged[key] for key in TAX_THRESHOLD_KEYS),
            "solidarity_surcharge_rate": merged["solidarity_surcharge_rate"],
            "solidarity_surcharge_threshold": merged["solidarity_surcharge_threshold"],
            "church_tax_bavaria_bw": merged["church_tax_bavaria_bw"],
            "church_tax_other_states": merged["church_tax_other_states"],
            "retirement_age": int(merged["retirement_age"]),
            "life_expectancy": int(merged["life_expectancy"]),
        }
        try:
            return cls.model_validate(payload)
        except ValidationError as error:
            raise ConfigurationError(f"Parameter validation failed: {error}") from error


__all__ = [
    "ConfigurationError",
    "ImmutableModel",
    "MissingParameterError",
    "OPTIONAL_SETTING_DEFAULTS",
    "ParameterSet",
    "PensionSetting",
    "REQUIRED_SETTING_KEYS",
    "SETTING_CATEGORIES",
    "SettingsDocument",
    "TAX_RATE_KEYS",
    "TAX_THRESHOLD_KEYS",
    "ValidationError",
]
