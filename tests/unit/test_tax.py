"""Unit coverage for the progressive income tax calculator."""

from __future__ import annotations

import pytest

from rentencheck.backend.app.services.calculators import (
    bracket_slices,
    church_tax,
    estimate_taxes,
    income_tax,
    solidarity_surcharge,
)
from rentencheck.backend.app.services.calculators.tax import church_tax_rate
from rentencheck.backend.config.schema import ParameterSet

RATES = (0.0, 14.0, 24.0, 42.0, 45.0)
THRESHOLDS = (12_097.0, 17_444.0, 68_481.0, 277_826.0)


def test_income_at_basic_allowance_is_tax_free() -> None:
    assert income_tax(12_097.0, RATES, THRESHOLDS) == 0.0
    assert income_tax(0.0, RATES, THRESHOLDS) == 0.0
    assert income_tax(-500.0, RATES, THRESHOLDS) == 0.0


def test_income_at_second_threshold_taxes_first_slice_only() -> None:
    tax = income_tax(17_444.0, RATES, THRESHOLDS)

    assert tax == pytest.approx((17_444 - 12_097) * 0.14)
    assert tax == pytest.approx(748.58)


def test_income_tax_accumulates_each_slice() -> None:
    expected = (
        (17_444 - 12_097) * 0.14
        + (68_481 - 17_444) * 0.24
        + (100_000 - 68_481) * 0.42
    )

    assert income_tax(100_000.0, RATES, THRESHOLDS) == pytest.approx(expected)


def test_top_bracket_taxes_only_the_excess() -> None:
    income = 400_000.0
    expected = (
        (17_444 - 12_097) * 0.14
        + (68_481 - 17_444) * 0.24
        + (277_826 - 68_481) * 0.42
        + (income - 277_826) * 0.45
    )

    tax = income_tax(income, RATES, THRESHOLDS)

    assert tax == pytest.approx(expected)
    assert tax < income * 0.45


@pytest.mark.parametrize(
    "income",
    [0.0, 5_000.0, 12_097.0, 15_000.0, 17_444.0, 50_000.0, 68_481.0, 277_826.0, 400_000.0],
)
def test_income_tax_equals_sum_of_slice_taxes(income: float) -> None:
    slices = bracket_slices(income, RATES, THRESHOLDS)

    assert income_tax(income, RATES, THRESHOLDS) == pytest.approx(
        sum(bracket.tax for bracket in slices)
    )
    assert len(slices) <= 4


def test_bracket_slices_expose_bounds_and_rates() -> None:
    slices = bracket_slices(300_000.0, RATES, THRESHOLDS)

    assert [bracket.rate for bracket in slices] == [14.0, 24.0, 42.0, 45.0]
    assert slices[0].lower_bound == 12_097.0
    assert slices[0].upper_bound == 17_444.0
    assert slices[-1].upper_bound is None
    assert slices[-1].taxable_amount == pytest.approx(300_000 - 277_826)


def test_bracket_slices_reject_mismatched_tables() -> None:
    with pytest.raises(ValueError):
        bracket_slices(50_000.0, RATES[:4], THRESHOLDS)


def test_solidarity_surcharge_compares_against_tax_amount() -> None:
    assert solidarity_surcharge(19_449.99, 19_450.0, 5.5) == 0.0
    assert solidarity_surcharge(19_450.0, 19_450.0, 5.5) == pytest.approx(19_450 * 0.055)
    assert solidarity_surcharge(30_000.0, 19_450.0, 5.5) == pytest.approx(1_650.0)


def test_church_tax_is_a_share_of_income_tax() -> None:
    assert church_tax(1_000.0, 8.0) == pytest.approx(80.0)
    assert church_tax(0.0, 9.0) == 0.0


def test_church_tax_rate_by_region(parameters: ParameterSet) -> None:
    assert church_tax_rate(parameters, None) == 0.0
    assert church_tax_rate(parameters, "bavaria_bw") == 8.0
    assert church_tax_rate(parameters, "other_states") == 9.0
    with pytest.raises(ValueError):
        church_tax_rate(parameters, "saxony")


def test_estimate_taxes_combines_all_components(parameters: ParameterSet) -> None:
    income = 120_000.0
    expected_tax = income_tax(income, RATES, THRESHOLDS)

    breakdown = estimate_taxes(income, parameters, "other_states")

    assert breakdown.income_tax == pytest.approx(expected_tax)
    assert breakdown.solidarity_surcharge == pytest.approx(expected_tax * 0.055)
    assert breakdown.church_tax == pytest.approx(expected_tax * 0.09)
    assert breakdown.total_tax == pytest.approx(
        breakdown.income_tax + breakdown.solidarity_surcharge + breakdown.church_tax
    )
