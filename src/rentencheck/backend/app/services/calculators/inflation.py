"""Compound monetary values across a span of years."""

from __future__ import annotations

from .utils import percent_factor


def project_forward(value: float, annual_rate: float, years: int) -> float:
    """Grow ``value`` by ``annual_rate`` percent per year for ``years`` years.

    A non-positive span is a no-op and returns ``value`` unchanged.
    """

    if years <= 0:
        return value
    return value * percent_factor(annual_rate) ** years


def discount(value: float, annual_rate: float, years: int) -> float:
    """Express a future ``value`` in today's money (inverse of ``project_forward``)."""

    if years <= 0:
        return value
    return value / percent_factor(annual_rate) ** years


__all__ = ["discount", "project_forward"]
