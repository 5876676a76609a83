"""Assign intake contracts to the pension pillars shown on the chart."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from rentencheck.backend.app.models import ContractInput

LEGAL = "legal"
PRIVATE = "private"
OCCUPATIONAL = "occupational"

LEGAL_KEYWORDS = ("gesetzlich", "rente")
OCCUPATIONAL_KEYWORDS = ("riester", "bav", "betrieblich")
NON_PRIVATE_KEYWORDS = ("gesetzlich", *OCCUPATIONAL_KEYWORDS)

# Maps a free-text contract type to the pillars it counts towards.
ContractClassifier = Callable[[str], frozenset[str]]


def keyword_classifier(contract_type: str) -> frozenset[str]:
    """Classify ``contract_type`` by case-insensitive keyword substrings.

    A single type may count towards several pillars: "Private Rente" matches
    the legal keyword "rente" and is also private.
    """

    text = (contract_type or "").lower()
    pillars: set[str] = set()
    if any(keyword in text for keyword in LEGAL_KEYWORDS):
        pillars.add(LEGAL)
    if not any(keyword in text for keyword in NON_PRIVATE_KEYWORDS):
        pillars.add(PRIVATE)
    if any(keyword in text for keyword in OCCUPATIONAL_KEYWORDS):
        pillars.add(OCCUPATIONAL)
    return frozenset(pillars)


@dataclass(slots=True)
class PillarTotals:
    """Monthly contract amounts per pension pillar."""

    legal: float = 0.0
    private: float = 0.0
    occupational: float = 0.0

    def add(self, pillars: Iterable[str], amount: float) -> None:
        for pillar in pillars:
            if pillar == LEGAL:
                self.legal += amount
            elif pillar == PRIVATE:
                self.private += amount
            elif pillar == OCCUPATIONAL:
                self.occupational += amount
            else:
                raise ValueError(f"Unknown pension pillar '{pillar}'")


def classify_contracts(
    contracts: Iterable[ContractInput],
    *,
    statutory_pension_claims: bool,
    professional_provision_works: bool,
    classifier: ContractClassifier = keyword_classifier,
) -> PillarTotals:
    """Sum pension contract amounts per pillar.

    Only contracts of category ``pension`` contribute. The legal pillar is
    zeroed unless the client has statutory claims and the occupational pillar
    unless professional provision applies; the private pillar is never gated.
    """

    totals = PillarTotals()
    for contract in contracts:
        if contract.category != "pension":
            continue
        totals.add(classifier(contract.type), contract.amount)

    if not statutory_pension_claims:
        totals.legal = 0.0
    if not professional_provision_works:
        totals.occupational = 0.0
    return totals


__all__ = [
    "ContractClassifier",
    "LEGAL",
    "OCCUPATIONAL",
    "PRIVATE",
    "PillarTotals",
    "classify_contracts",
    "keyword_classifier",
]
