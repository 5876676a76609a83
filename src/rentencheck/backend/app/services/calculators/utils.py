"""Utility helpers for calculator modules."""

from __future__ import annotations


def percent_factor(rate: float) -> float:
    """Return the growth factor ``1 + rate/100`` for a percentage ``rate``."""

    return 1 + rate / 100


def format_percentage(value: float) -> str:
    """Return a human-readable label for a percentage ``value`` (2.0 -> ``2%``)."""

    if float(int(value)) == value:
        return f"{int(value)}%"
    return f"{value:.2f}%"


def round_currency(value: float) -> float:
    """Round monetary amounts to two decimals."""

    return round(value, 2)


def round_rate(value: float) -> float:
    """Round rate values to four decimals."""

    return round(value, 4)
