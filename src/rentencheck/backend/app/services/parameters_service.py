"""Expose the resolved pension parameters and settings rows to clients."""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Any

from rentencheck.backend.config.schema import ParameterSet
from rentencheck.backend.config.settings_store import SettingsStore

from .calculators import format_percentage, round_rate


def build_parameters_payload(parameters: ParameterSet) -> dict[str, Any]:
    """Group ``parameters`` the way the settings screen and chart consume them."""

    rates = parameters.tax_bracket_rates
    thresholds = parameters.tax_bracket_thresholds
    return {
        "economic_assumptions": {
            "inflation_rate": parameters.inflation_rate,
            "pension_increase_rate": parameters.pension_increase_rate,
            "investment_return_rate": parameters.investment_return_rate,
        },
        "social_insurance": {
            "health_insurance_rate": parameters.health_insurance_rate,
            "additional_health_insurance_rate": parameters.additional_health_insurance_rate,
            "care_insurance_rate": parameters.care_insurance_rate,
            "total_insurance_rate": round_rate(parameters.total_insurance_rate),
            "health_insurance_exemption_bav": parameters.health_insurance_exemption_bav,
        },
        "tax_system": {
            "rates": {f"stufe_{index}": rate for index, rate in enumerate(rates, start=1)},
            "thresholds": {
                f"threshold_{index}": threshold
                for index, threshold in enumerate(thresholds, start=1)
            },
            "solidarity_surcharge_rate": parameters.solidarity_surcharge_rate,
            "solidarity_surcharge_threshold": parameters.solidarity_surcharge_threshold,
        },
        "regional_taxes": {
            "church_tax_bavaria_bw": parameters.church_tax_bavaria_bw,
            "church_tax_other_states": parameters.church_tax_other_states,
        },
        "demographics": {
            "retirement_age": parameters.retirement_age,
            "life_expectancy": parameters.life_expectancy,
        },
    }


def _format_value(value: float, unit: str) -> str:
    if unit == "%":
        return format_percentage(value)
    return f"{value:g} {unit}"


def build_settings_overview(store: SettingsStore, as_of: date) -> dict[str, list[dict[str, Any]]]:
    """Return the effective setting rows on ``as_of`` grouped by category."""

    grouped: dict[str, list[dict[str, Any]]] = defaultdict(list)
    effective = store.effective_settings(as_of)
    for key in sorted(effective):
        setting = effective[key]
        grouped[setting.category].append(
            {
                "key": setting.key,
                "value": setting.value,
                "unit": setting.unit,
                "description": setting.description,
                "description_de": setting.description_de,
                "valid_from": setting.valid_from.isoformat(),
                "valid_until": (
                    setting.valid_until.isoformat() if setting.valid_until else None
                ),
                "formatted_value": _format_value(setting.value, setting.unit),
            }
        )
    return dict(grouped)


__all__ = ["build_parameters_payload", "build_settings_overview"]
