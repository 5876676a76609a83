"""Progressive income tax, solidarity surcharge and church tax."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from rentencheck.backend.config.schema import ParameterSet

CHURCH_TAX_REGIONS = ("bavaria_bw", "other_states")


@dataclass(frozen=True, slots=True)
class BracketSlice:
    """Portion of income falling into one taxed bracket."""

    lower_bound: float
    upper_bound: float | None
    rate: float
    taxable_amount: float

    @property
    def tax(self) -> float:
        return self.taxable_amount * self.rate / 100


@dataclass(frozen=True, slots=True)
class TaxBreakdown:
    """Annual taxes owed on a taxable income."""

    taxable_income: float
    income_tax: float
    solidarity_surcharge: float
    church_tax: float

    @property
    def total_tax(self) -> float:
        return self.income_tax + self.solidarity_surcharge + self.church_tax


def bracket_slices(
    annual_income: float,
    rates: Sequence[float],
    thresholds: Sequence[float],
) -> list[BracketSlice]:
    """Split ``annual_income`` into the slices taxed above the basic allowance.

    ``rates`` holds the five bracket rates and ``thresholds`` the four
    ascending bracket limits. Income up to the first threshold is tax free,
    so the first rate never applies; each later rate taxes only the slice
    between its lower and upper threshold, and the last rate taxes everything
    above the final threshold.
    """

    if len(rates) != len(thresholds) + 1:
        raise ValueError("Tax tables require exactly one more rate than thresholds")

    slices: list[BracketSlice] = []
    for index, lower in enumerate(thresholds):
        upper = thresholds[index + 1] if index + 1 < len(thresholds) else None
        ceiling = math.inf if upper is None else upper
        taxable = min(annual_income, ceiling) - lower
        if taxable <= 0:
            break
        slices.append(
            BracketSlice(
                lower_bound=lower,
                upper_bound=upper,
                rate=rates[index + 1],
                taxable_amount=taxable,
            )
        )
    return slices


def income_tax(
    annual_income: float,
    rates: Sequence[float],
    thresholds: Sequence[float],
) -> float:
    """Calculate progressive income tax by summing the per-slice taxes."""

    total = 0.0
    for bracket in bracket_slices(annual_income, rates, thresholds):
        total += bracket.tax
    return total


def solidarity_surcharge(income_tax_amount: float, threshold: float, rate: float) -> float:
    """Return the solidarity surcharge owed on ``income_tax_amount``.

    The threshold is compared against the income tax amount itself.
    """

    if income_tax_amount >= threshold:
        return income_tax_amount * rate / 100
    return 0.0


def church_tax(income_tax_amount: float, rate: float) -> float:
    """Return church tax levied as ``rate`` percent of the income tax."""

    if income_tax_amount <= 0:
        return 0.0
    return income_tax_amount * rate / 100


def church_tax_rate(parameters: ParameterSet, region: str | None) -> float:
    """Resolve the church tax rate for ``region`` (``None`` means not liable)."""

    if region is None:
        return 0.0
    if region == "bavaria_bw":
        return parameters.church_tax_bavaria_bw
    if region == "other_states":
        return parameters.church_tax_other_states
    raise ValueError(f"Unknown church tax region '{region}'")


def estimate_taxes(
    annual_income: float,
    parameters: ParameterSet,
    church_tax_region: str | None = None,
) -> TaxBreakdown:
    """Compute the annual tax burden on ``annual_income`` with ``parameters``."""

    tax = income_tax(
        annual_income,
        parameters.tax_bracket_rates,
        parameters.tax_bracket_thresholds,
    )
    surcharge = solidarity_surcharge(
        tax,
        parameters.solidarity_surcharge_threshold,
        parameters.solidarity_surcharge_rate,
    )
    church = church_tax(tax, church_tax_rate(parameters, church_tax_region))
    return TaxBreakdown(
        taxable_income=max(annual_income, 0.0),
        income_tax=tax,
        solidarity_surcharge=surcharge,
        church_tax=church,
    )


__all__ = [
    "BracketSlice",
    "CHURCH_TAX_REGIONS",
    "TaxBreakdown",
    "bracket_slices",
    "church_tax",
    "church_tax_rate",
    "estimate_taxes",
    "income_tax",
    "solidarity_surcharge",
]
