"""Fraud findings and the ordered sink the rule engine appends to."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Literal

type RuleName = Literal["amount", "geographic"]


@dataclass(frozen=True, slots=True)
class AmountFinding:
    """Rule 1: a charge far above the merchant's moving average."""

    name: str
    account_number: str
    transaction_number: str
    merchant_name: str | None
    amount: Decimal

    @property
    def rule(self) -> RuleName:
        return "amount"


@dataclass(frozen=True, slots=True)
class GeographicFinding:
    """Rule 2: the transaction region differs from the account's home region."""

    name: str
    account_number: str
    transaction_number: str
    expected_location: str | None
    actual_location: str | None

    @property
    def rule(self) -> RuleName:
        return "geographic"


type Finding = AmountFinding | GeographicFinding


@dataclass(slots=True)
class FindingSink:
    """Findings per rule, each list in row-processing order."""

    amount: list[AmountFinding] = field(default_factory=list)
    geographic: list[GeographicFinding] = field(default_factory=list)

    def add(self, finding: Finding) -> None:
        if isinstance(finding, AmountFinding):
            self.amount.append(finding)
        else:
            self.geographic.append(finding)

    def __len__(self) -> int:
        return len(self.amount) + len(self.geographic)


__all__ = [
    "AmountFinding",
    "Finding",
    "FindingSink",
    "GeographicFinding",
    "RuleName",
]
