"""Pension gap and capital requirement estimates."""

from __future__ import annotations

from .inflation import project_forward
from .utils import percent_factor


def current_gap(desired_pension: float, provided_pension: float) -> float:
    """Return the monthly shortfall in today's money, never below zero."""

    return max(0.0, desired_pension - provided_pension)


def inflated_gap(gap: float, inflation_rate: float, years_from_today: int) -> float:
    """Project a present-day gap to a future year in nominal terms."""

    return project_forward(gap, inflation_rate, years_from_today)


def required_capital(
    annual_gap: float, years_in_retirement: int, investment_return_rate: float
) -> float:
    """Estimate the lump sum needed at retirement to cover ``annual_gap``.

    The total shortfall over the retirement horizon is discounted once over
    the full horizon: ``(gap * years) / (1 + r) ** years``. This is a
    simplified lump-sum equivalent, not an annuity present value.
    """

    if years_in_retirement <= 0 or annual_gap <= 0:
        return 0.0
    total_shortfall = annual_gap * years_in_retirement
    return total_shortfall / percent_factor(investment_return_rate) ** years_in_retirement


__all__ = ["current_gap", "inflated_gap", "required_capital"]
