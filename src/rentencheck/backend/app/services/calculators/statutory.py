"""Statutory pension net of health and care insurance."""

from __future__ import annotations

from rentencheck.backend.config.schema import ParameterSet

from .inflation import discount


def after_insurance(gross_pension: float, parameters: ParameterSet) -> float:
    """Return the statutory pension left after health and care insurance."""

    return gross_pension * (1 - parameters.total_insurance_rate)


def purchasing_power_at_retirement(
    net_pension: float, inflation_rate: float, years_to_retirement: int
) -> float:
    """Express the net pension paid at retirement in today's purchasing power."""

    return discount(net_pension, inflation_rate, years_to_retirement)


def occupational_after_insurance(amount: float, parameters: ParameterSet) -> float:
    """Return an occupational pension net of insurance above the BAV allowance.

    Health and care contributions are only levied on the monthly amount that
    exceeds ``health_insurance_exemption_bav``.
    """

    if amount <= 0:
        return amount
    liable = max(amount - parameters.health_insurance_exemption_bav, 0.0)
    return amount - liable * parameters.total_insurance_rate


__all__ = [
    "after_insurance",
    "occupational_after_insurance",
    "purchasing_power_at_retirement",
]
