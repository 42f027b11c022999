"""Wallet balance parsers."""

import re

from scholarpay.core.models import WalletBalance
from scholarpay.core.utils import parse_amount
from scholarpay.parsers.base import BaseParser
from scholarpay.parsers.registry import ParserRegistry

NUMBER = r"([\d,]*\d(?:\.\d+)?)"
BALANCE_LABELS = {
    "total_balance": "total",
    "spendable_balance": "spendable",
    "pending_balance": "pending",
}
LABELED_BALANCE = re.compile(r"\b(total|spendable|pending)\s+(?:wallet\s+)?balance\b", re.IGNORECASE)
LOOSE_PATTERNS = [
    re.compile(rf"balance[:\s*]*TSD\s*{NUMBER}", re.IGNORECASE),
    re.compile(rf"TSD\s*{NUMBER}", re.IGNORECASE),
    re.compile(rf"\$\s*{NUMBER}"),
    re.compile(rf"balance[:\s*]*\$?\s*{NUMBER}", re.IGNORECASE),
    re.compile(rf"{NUMBER}\s*TSD\b", re.IGNORECASE),
]


def labeled_amount(content: str, label: str) -> float | None:
    """Return the first amount that follows '<label> [Wallet] Balance:' in the content."""
    pattern = re.compile(
        rf"\b{label}\s+(?:wallet\s+)?balance[*\s:]*(?:TSD|\$)?\s*{NUMBER}",
        re.IGNORECASE,
    )
    match = pattern.search(content)
    return parse_amount(match.group(1)) if match else None


@ParserRegistry.register
class LabeledBalanceParser(BaseParser):
    """Parse `Total/Spendable/Pending Balance: 1,234.56 TSD` lines."""

    category = "balance"
    shape = "labeled"

    def parse(self, content: str) -> list[WalletBalance]:
        """Return one balance record if at least one label carried a number."""
        found = {}
        for field, label in BALANCE_LABELS.items():
            amount = labeled_amount(content, label)
            if amount is not None:
                found[field] = amount
        if not found:
            return []
        return [WalletBalance(**found)]


@ParserRegistry.register
class LooseBalanceParser(BaseParser):
    """Parse the short 'your balance is TSD 1,000.00' answer.

    Only one figure is available, so it is reported as both the total and the spendable balance.
    """

    category = "balance"
    shape = "loose"

    def parse(self, content: str) -> list[WalletBalance]:
        """Return a balance built from the first currency figure found."""
        for pattern in LOOSE_PATTERNS:
            match = pattern.search(content)
            if not match:
                continue
            amount = parse_amount(match.group(1))
            if amount is not None:
                return [WalletBalance(total_balance=amount, spendable_balance=amount)]
        return []
