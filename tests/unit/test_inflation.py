"""Unit coverage for inflation projection helpers."""

from __future__ import annotations

import pytest

from rentencheck.backend.app.services.calculators import discount, project_forward


def test_project_forward_compounds_annually() -> None:
    result = project_forward(1_000.0, 2.0, 10)

    assert result == pytest.approx(1_000.0 * 1.02**10)
    assert round(result, 2) == pytest.approx(1_218.99)


@pytest.mark.parametrize("years", [0, -3])
def test_project_forward_is_noop_for_non_positive_years(years: int) -> None:
    assert project_forward(750.0, 2.0, years) == 750.0


def test_project_forward_is_monotonic_in_years() -> None:
    values = [project_forward(1_500.0, 2.5, years) for years in range(0, 41)]

    assert values == sorted(values)
    assert values[0] == 1_500.0


def test_project_forward_with_zero_rate_keeps_value() -> None:
    assert project_forward(420.0, 0.0, 25) == pytest.approx(420.0)


def test_discount_inverts_projection() -> None:
    future = project_forward(500.0, 3.0, 7)

    assert discount(future, 3.0, 7) == pytest.approx(500.0)
    assert discount(500.0, 3.0, 0) == 500.0
