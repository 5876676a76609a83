"""Domain-specific calculation helpers."""

from .classification import (
    ContractClassifier,
    PillarTotals,
    classify_contracts,
    keyword_classifier,
)
from .gap import current_gap, inflated_gap, required_capital
from .inflation import discount, project_forward
from .statutory import (
    after_insurance,
    occupational_after_insurance,
    purchasing_power_at_retirement,
)
from .tax import (
    BracketSlice,
    TaxBreakdown,
    bracket_slices,
    church_tax,
    estimate_taxes,
    income_tax,
    solidarity_surcharge,
)
from .utils import format_percentage, round_currency, round_rate

__all__ = [
    "BracketSlice",
    "ContractClassifier",
    "PillarTotals",
    "TaxBreakdown",
    "after_insurance",
    "bracket_slices",
    "church_tax",
    "classify_contracts",
    "current_gap",
    "discount",
    "estimate_taxes",
    "format_percentage",
    "income_tax",
    "inflated_gap",
    "keyword_classifier",
    "occupational_after_insurance",
    "project_forward",
    "purchasing_power_at_retirement",
    "required_capital",
    "round_currency",
    "round_rate",
    "solidarity_surcharge",
]
