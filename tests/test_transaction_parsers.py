"""Tests for the narrative, table and structured transaction parsers and the history parser."""

import pytest
from conftest import HISTORY_TEXT

from scholarpay.core.utils import today_iso
from scholarpay.parsers.history import TransactionHistoryParser
from scholarpay.parsers.transactions import (
    MarkdownTableTransactionParser,
    NarrativeTransactionParser,
    StructuredTransactionParser,
)

NARRATIVE = """Here is your recent activity:
1. DEBIT: TSD 10.00 - Payment to sahaj jain
2. Payment to john: -TSD 1.00 (2024-01-15)
12. CREDIT: TSD 1,000.00 - Initial deposit from PAYMAN TEST BANK ****3144 (Reference: dep-77)
That's all for now.
"""


def test_narrative_lines() -> None:
    """Both numbered prose formats are read; surrounding prose is skipped."""
    txns = NarrativeTransactionParser().parse(NARRATIVE)
    if [txn.id for txn in txns] != ["tx-1", "tx-2", "tx-12"]:
        msg = f"Unexpected ids: {[txn.id for txn in txns]}"
        raise AssertionError(msg)
    first, second, third = txns
    if (first.type, first.amount, first.recipient) != ("DEBIT", 10.0, "sahaj jain"):
        msg = f"Unexpected first transaction: {first}"
        raise AssertionError(msg)
    if first.date != today_iso():
        msg = f"Expected today's date for an undated line, got {first.date}"
        raise AssertionError(msg)
    if (second.type, second.amount, second.recipient, second.date) != ("DEBIT", 1.0, "john", "2024-01-15"):
        msg = f"Unexpected second transaction: {second}"
        raise AssertionError(msg)
    if (third.type, third.amount, third.reference) != ("CREDIT", 1000.0, "dep-77"):
        msg = f"Unexpected third transaction: {third}"
        raise AssertionError(msg)
    if third.recipient != "PAYMAN TEST BANK ****3144":
        msg = f"Expected the deposit source as recipient, got {third.recipient}"
        raise AssertionError(msg)


def test_table_with_headers() -> None:
    """Columns are mapped by header name, whatever their order."""
    content = """| Status | Amount | Recipient | Date | Type | Transaction ID |
|:---|---:|---|---|---|---|
| Pending | 1,250.00 TSD | Payment to Ada Lovelace | 2024-02-01 | DEBIT | tx-9 |
| Failed | 3 TSD | Refund | 2024-02-02 | CREDIT | tx-10 |
"""
    txns = MarkdownTableTransactionParser().parse(content)
    if len(txns) != 2:
        msg = f"Expected two transactions, got {txns}"
        raise AssertionError(msg)
    ada, refund = txns
    if (ada.id, ada.amount, ada.status, ada.recipient, ada.date) != (
        "tx-9",
        1250.0,
        "pending",
        "Ada Lovelace",
        "2024-02-01",
    ):
        msg = f"Unexpected row: {ada}"
        raise AssertionError(msg)
    if ada.description != "Payment to Ada Lovelace":
        msg = f"Description should keep the original wording, got {ada.description}"
        raise AssertionError(msg)
    if (refund.type, refund.status) != ("CREDIT", "failed"):
        msg = f"Unexpected row: {refund}"
        raise AssertionError(msg)


def test_table_without_header_is_positional() -> None:
    """Without a header row the columns are date, recipient, amount, type, status, created by."""
    content = "|---|---|---|\n| 2024-03-03 | ritik jain | 7.00 TSD | DEBIT | completed | expenzse |\n"
    txn = MarkdownTableTransactionParser().parse(content)[0]
    if (txn.date, txn.recipient, txn.amount, txn.reference, txn.id) != (
        "2024-03-03",
        "ritik jain",
        7.0,
        "expenzse",
        "tx-1",
    ):
        msg = f"Unexpected row: {txn}"
        raise AssertionError(msg)


def test_table_rows_without_amount_are_skipped() -> None:
    """Rows whose amount cell holds no number are dropped."""
    content = "| Date | Recipient | Amount |\n|---|---|---|\n| 2024-01-01 | john | n/a |\n| 2024-01-02 | km | 23 |\n"
    txns = MarkdownTableTransactionParser().parse(content)
    if [txn.recipient for txn in txns] != ["km"]:
        msg = f"Unexpected rows: {txns}"
        raise AssertionError(msg)


def test_structured_transactions() -> None:
    """JSON transactions are mapped field by field; a negative amount means a debit."""
    payload = {
        "transactions": [
            {"id": "a1", "amount": -25.5, "payee": "Ada", "createdAt": "2024-04-01T10:00:00Z", "status": "SUCCESS"},
            {"transactionId": "a2", "amount": "100", "type": "CREDIT", "description": "Top up"},
            {"id": "bad", "amount": None},
        ]
    }
    txns = StructuredTransactionParser().parse(payload)
    if len(txns) != 2:
        msg = f"Expected two transactions, got {txns}"
        raise AssertionError(msg)
    debit, credit = txns
    if (debit.id, debit.type, debit.amount, debit.recipient, debit.date) != (
        "a1",
        "DEBIT",
        25.5,
        "Ada",
        "2024-04-01",
    ):
        msg = f"Unexpected debit: {debit}"
        raise AssertionError(msg)
    if (credit.id, credit.type, credit.amount) != ("a2", "CREDIT", 100.0):
        msg = f"Unexpected credit: {credit}"
        raise AssertionError(msg)


def test_structured_transactions_coerce_scalars_and_skip_bad_items() -> None:
    """Numeric type, status or reference values are read as text; an unreadable item is skipped, not the list."""
    payload = [
        {"id": "a", "amount": 5, "recipient": "km", "reference": "gov"},
        {"id": "b", "amount": 3, "recipient": "ram", "reference": 12345, "status": 1},
        {"id": "c", "amount": 2, "recipient": "x", "type": 1},
        {"id": "d", "amount": {"value": 1}},
    ]
    txns = StructuredTransactionParser().parse(payload)
    if [txn.id for txn in txns] != ["a", "b", "c"]:
        msg = f"Expected the three readable items, got {txns}"
        raise AssertionError(msg)
    if txns[1].reference != "12345":
        msg = f"Expected the numeric reference as text, got {txns[1].reference!r}"
        raise AssertionError(msg)


def test_structured_parser_accepts_json_text() -> None:
    """A JSON array sent as text is decoded first; other text yields nothing."""
    parser = StructuredTransactionParser()
    if len(parser.parse('[{"amount": 5, "recipient": "km"}]')) != 1:
        msg = "Expected one transaction from JSON text"
        raise AssertionError(msg)
    if parser.parse("not json") != []:
        msg = "Expected no transactions from prose"
        raise AssertionError(msg)


def test_history_sections() -> None:
    """The combined answer yields balance, summary, wallet details and the table rows."""
    history = TransactionHistoryParser().parse(HISTORY_TEXT)
    if [txn.id for txn in history.transactions] != ["tx-100", "tx-101"]:
        msg = f"Unexpected transactions: {history.transactions}"
        raise AssertionError(msg)
    if history.balance.total_balance != pytest.approx(845.84):
        msg = f"Unexpected balance: {history.balance}"
        raise AssertionError(msg)
    if (history.summary.total_transactions, history.summary.total_debit_amount) != (2, 11.0):
        msg = f"Unexpected summary: {history.summary}"
        raise AssertionError(msg)
    if history.summary.total_debit_transactions != len(history.transactions):
        msg = f"Expected two debits, got {history.summary.total_debit_transactions}"
        raise AssertionError(msg)
    if (history.details.wallet_id, history.details.paytag, history.details.currency) != (
        "wlt-1f00a621-49fb",
        "idol.recline.slack/88",
        "TSD",
    ):
        msg = f"Unexpected wallet details: {history.details}"
        raise AssertionError(msg)
    if history.transactions[1].reference != "government":
        msg = f"Expected the creator as reference, got {history.transactions[1].reference}"
        raise AssertionError(msg)


def test_history_stops_at_payee_list_and_computes_summary() -> None:
    """A payee list ends parsing; summary figures the provider left out are computed."""
    content = (
        "## Detailed Transaction Log\n"
        "| Date | Recipient | Amount | Type |\n|---|---|---|---|\n"
        "| 2024-01-01 | john | 4.00 | DEBIT |\n| 2024-01-02 | bank | 9.00 | CREDIT |\n"
        "## Payee List\n"
        "| Date | Recipient | Amount | Type |\n|---|---|---|---|\n| 2024-01-03 | ghost | 1.00 | DEBIT |\n"
    )
    history = TransactionHistoryParser().parse(content)
    if [txn.recipient for txn in history.transactions] != ["john", "bank"]:
        msg = f"Unexpected transactions: {history.transactions}"
        raise AssertionError(msg)
    summary = history.summary
    if (summary.total_transactions, summary.total_debit_transactions, summary.total_debit_amount) != (2, 1, 4.0):
        msg = f"Unexpected summary: {summary}"
        raise AssertionError(msg)
