"""Transaction parsers for the three answer shapes the provider has been seen to return.

- narrative: numbered prose lines, e.g. ``1. Payment to john: -TSD 1.00`` or
  ``12. CREDIT: TSD 1,000.00 - Initial deposit from PAYMAN TEST BANK (Reference: abc)``
- table: a markdown table with a header row and a ``|---|`` separator
- structured: a JSON array of transaction objects
"""

import json
import math
import re
from typing import Any

from pydantic import ValidationError

from scholarpay.core.models import Transaction
from scholarpay.core.utils import as_text, get_logger, parse_amount, today_iso
from scholarpay.parsers.base import BaseParser
from scholarpay.parsers.registry import ParserRegistry

logger = get_logger("scholarpay.parsers")

NUMBER = r"([\d,]*\d(?:\.\d+)?)"
TYPED_LINE = re.compile(
    rf"^(\d+)\.\s*\**(DEBIT|CREDIT)\**:\s*(?:TSD\s*)?{NUMBER}\s*(?:TSD\s*)?-\s*(.+?)(?:\s*\(Reference:\s*([^)]+)\))?$",
    re.IGNORECASE,
)
LABELED_LINE = re.compile(
    rf"^(\d+)\.\s*(.+?):\s*([+-])?\s*(?:TSD\s*)?{NUMBER}(?:\s*TSD)?(?:\s*\(([^)]+)\))?$",
    re.IGNORECASE,
)
RECIPIENT_PREFIX = re.compile(r"^(?:payment|transfer)\s+to\s+", re.IGNORECASE)
DEPOSIT_SOURCE = re.compile(r"deposit\s+from\s+(.+)$", re.IGNORECASE)
ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}")
TABLE_MARKER = re.compile(r"\|\s*:?-{2,}")
SEPARATOR_CELL = re.compile(r":?-{2,}:?")
HEADER_HINTS = ("transaction", "date", "amount", "recipient", "payee")
POSITIONAL_COLUMNS = ["date", "recipient", "amount", "type", "status", "reference"]
MIN_TABLE_COLUMNS = 3


def recipient_from(description: str) -> str:
    """Strip 'Payment to'/'Transfer to' prefixes and 'deposit from' wording from a description."""
    deposit = DEPOSIT_SOURCE.search(description)
    if deposit:
        return deposit.group(1).strip()
    return RECIPIENT_PREFIX.sub("", description).strip()


def normalize_type(value: str | None, sign: str | None = None, description: str = "") -> str:
    """Map a provider type cell, an amount sign or the wording of a description to DEBIT/CREDIT."""
    if value:
        upper = value.upper()
        if any(word in upper for word in ("CREDIT", "DEPOSIT", "INCOMING")):
            return "CREDIT"
        return "DEBIT"
    if sign == "+":
        return "CREDIT"
    if sign == "-":
        return "DEBIT"
    return "CREDIT" if "deposit" in description.lower() else "DEBIT"


def normalize_status(value: str | None) -> str:
    """Map a provider status cell to completed/pending/failed."""
    lower = (value or "").lower()
    if any(word in lower for word in ("fail", "reject", "cancel", "declin")):
        return "failed"
    if any(word in lower for word in ("pend", "process", "queue")):
        return "pending"
    return "completed"


def split_row(line: str) -> list[str]:
    """Split a markdown table row into stripped cells, keeping empty inner cells."""
    return [cell.strip() for cell in line.strip().strip("|").split("|")]


def is_separator(cells: list[str]) -> bool:
    """Tell whether a split row is the ``|---|:---:|`` line under a table header."""
    filled = [cell for cell in cells if cell]
    return bool(filled) and all(SEPARATOR_CELL.fullmatch(cell) for cell in filled)


def column_role(header: str) -> str | None:
    """Name the transaction field a table header holds."""
    header = header.lower().strip()
    if header in ("no", "no.", "#") or re.search(r"\bid\b", header):
        return "id"
    if "created by" in header or "reference" in header:
        return "reference"
    if any(word in header for word in ("recipient", "description", "payee")):
        return "recipient"
    if "amount" in header:
        return "amount"
    if "date" in header or "time" in header:
        return "date"
    if "type" in header:
        return "type"
    if "status" in header:
        return "status"
    return None


@ParserRegistry.register
class NarrativeTransactionParser(BaseParser):
    """Parse numbered prose transaction lines."""

    category = "transactions"
    shape = "narrative"

    def parse(self, content: str) -> list[Transaction]:
        """Extract one transaction per matching numbered line."""
        transactions: list[Transaction] = []
        for line in self.lines(content):
            txn = self._parse_typed(line) or self._parse_labeled(line)
            if txn is not None:
                transactions.append(txn)
        return transactions

    def _parse_typed(self, line: str) -> Transaction | None:
        match = TYPED_LINE.match(line)
        if not match:
            return None
        number, txn_type, amount_str, description, reference = match.groups()
        amount = parse_amount(amount_str)
        if not amount:
            return None
        description = description.strip()
        return Transaction(
            id=f"tx-{number}",
            type=txn_type.upper(),
            amount=amount,
            description=description,
            date=today_iso(),
            status="completed",
            recipient=recipient_from(description),
            reference=reference.strip() if reference else None,
        )

    def _parse_labeled(self, line: str) -> Transaction | None:
        match = LABELED_LINE.match(line)
        if not match:
            return None
        number, description, sign, amount_str, trailer = match.groups()
        amount = parse_amount(amount_str)
        if not amount:
            return None
        description = description.strip().strip("*").strip()
        txn_date, reference = today_iso(), None
        if trailer:
            trailer = trailer.strip()
            if ISO_DATE.match(trailer):
                txn_date = trailer[:10]
            else:
                reference = trailer
        return Transaction(
            id=f"tx-{number}",
            type=normalize_type(None, sign, description),
            amount=amount,
            description=description,
            date=txn_date,
            status="completed",
            recipient=recipient_from(description),
            reference=reference,
        )


@ParserRegistry.register
class MarkdownTableTransactionParser(BaseParser):
    """Parse a pipe-delimited markdown table of transactions.

    Columns are identified by their header names; when no header row was seen the columns are read positionally as ``date | recipient | amount | type | status | created by``.
    """

    category = "transactions"
    shape = "table"

    def parse(self, content: str) -> list[Transaction]:
        """Extract one transaction per table row that carries an amount."""
        transactions: list[Transaction] = []
        roles: list[str | None] = []
        in_table = False
        for line in self.lines(content):
            if not line.startswith("|"):
                continue
            cells = split_row(line)
            if is_separator(cells):
                in_table = True
                continue
            if not in_table:
                if any(hint in line.lower() for hint in HEADER_HINTS):
                    roles = [column_role(cell) for cell in cells]
                continue
            if len([cell for cell in cells if cell]) < MIN_TABLE_COLUMNS:
                continue
            txn = self._row_to_transaction(cells, roles, len(transactions) + 1)
            if txn is not None:
                transactions.append(txn)
        return transactions

    def _row_to_transaction(self, cells: list[str], roles: list[str | None], position: int) -> Transaction | None:
        fields: dict[str, str] = {}
        layout = roles or POSITIONAL_COLUMNS
        for role, value in zip(layout, cells, strict=False):
            if role and value and role not in fields:
                fields[role] = value
        amount_cell = fields.get("amount", "")
        amount_match = re.search(NUMBER, amount_cell)
        amount = parse_amount(amount_match.group(1)) if amount_match else None
        if amount is None:
            return None
        sign = "-" if amount_cell.strip().startswith(("-", "−")) else None
        raw_recipient = fields.get("recipient", "")
        description = raw_recipient or "Unknown transaction"
        return Transaction(
            id=fields.get("id") or f"tx-{position}",
            type=normalize_type(fields.get("type"), sign, description),
            amount=amount,
            description=description,
            date=fields.get("date") or today_iso(),
            status=normalize_status(fields.get("status")),
            recipient=recipient_from(raw_recipient),
            reference=fields.get("reference"),
        )


def _pick(item: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        value = item.get(key)
        if value not in (None, ""):
            return value
    return None


@ParserRegistry.register
class StructuredTransactionParser(BaseParser):
    """Parse transactions delivered as JSON objects instead of text."""

    category = "transactions"
    shape = "structured"

    def parse(self, content: Any) -> list[Transaction]:
        """Accept a list of objects, an object with a 'transactions' list, or their JSON text.

        Items that cannot be turned into a transaction are skipped; they never discard the others.
        """
        transactions: list[Transaction] = []
        for position, item in enumerate(self._items(content), start=1):
            if not isinstance(item, dict):
                continue
            try:
                txn = self._item_to_transaction(item, position)
            except (ValidationError, AttributeError, TypeError, ValueError) as exc:
                logger.warning(f"Skipping structured transaction {position}: {exc}")
                continue
            if txn is not None:
                transactions.append(txn)
        return transactions

    @staticmethod
    def _item_to_transaction(item: dict[str, Any], position: int) -> Transaction | None:
        raw_amount = as_text(_pick(item, "amount", "value"))
        amount = parse_amount(raw_amount)
        if amount is None or not math.isfinite(amount):
            return None
        sign = "-" if amount < 0 else None
        recipient = as_text(_pick(item, "recipient", "payee", "payeeName", "payee_name", "to")) or ""
        description = as_text(_pick(item, "description", "memo", "note")) or recipient or "Unknown transaction"
        txn_date = as_text(_pick(item, "date", "createdAt", "created_at", "timestamp")) or today_iso()
        txn_type = as_text(_pick(item, "type", "transactionType", "transaction_type"))
        return Transaction(
            id=as_text(_pick(item, "id", "transactionId", "transaction_id")) or f"tx-{position}",
            type=normalize_type(txn_type, sign, description),
            amount=abs(amount),
            description=description,
            date=txn_date[:10],
            status=normalize_status(as_text(_pick(item, "status"))),
            recipient=recipient or recipient_from(description),
            reference=as_text(_pick(item, "reference", "createdBy", "created_by")),
        )

    @staticmethod
    def _items(content: Any) -> list[Any]:
        if isinstance(content, str):
            try:
                content = json.loads(content)
            except json.JSONDecodeError:
                return []
        if isinstance(content, dict):
            content = content.get("transactions", [])
        return content if isinstance(content, list) else []
