"""Parser for the combined wallet summary and transaction log answer.

The transaction history prompt asks the provider for three sections::

    ## Wallet Financial Summary
    - Wallet ID: wlt-1f00a621
    - Paytag: idol.recline.slack/88
    - Total Balance: 845.84 TSD
    ...
    ## Transaction Overview
    - Total Transactions: 20
    - Total Debit Amount: 89.15 TSD
    ## Detailed Transaction Log
    | Transaction ID | Date | Recipient | Amount | Type | Status | Created By |
    |---|---|---|---|---|---|---|
    ...

A "Payee List" section, when the provider adds one, ends the answer as far as this parser is concerned.
"""

import re

from scholarpay.core.models import (
    Transaction,
    TransactionHistory,
    TransactionSummary,
    WalletBalance,
    WalletDetails,
)
from scholarpay.core.utils import parse_amount
from scholarpay.parsers.balance import LabeledBalanceParser
from scholarpay.parsers.base import BaseParser
from scholarpay.parsers.transactions import MarkdownTableTransactionParser, NarrativeTransactionParser

SECTION_PATTERNS = {
    "wallet": re.compile(r"wallet financial summary", re.IGNORECASE),
    "summary": re.compile(r"transaction (?:overview|details)", re.IGNORECASE),
    "transactions": re.compile(r"detailed transaction log", re.IGNORECASE),
}
PAYEE_SECTION = re.compile(r"payee list", re.IGNORECASE)
WALLET_ID = re.compile(r"wallet id[*\s:]*([\w-]+)", re.IGNORECASE)
PAYTAG = re.compile(r"paytag[*\s:]*([\w./]+)", re.IGNORECASE)
CURRENCY = re.compile(r"currency[*\s:]*([A-Za-z]{2,5})\b", re.IGNORECASE)
BALANCE_CURRENCY = re.compile(r"balance[*\s:]*[\d,.]+\s*([A-Z]{2,5})\b", re.IGNORECASE)
TOTAL_TRANSACTIONS = re.compile(r"total transactions[*\s:]*(\d+)", re.IGNORECASE)
TOTAL_DEBIT = re.compile(r"total debit(?:s| amount)[*\s:]*(?:TSD\s*)?([\d,]*\d(?:\.\d+)?)", re.IGNORECASE)


def summarize(transactions: list[Transaction], summary: TransactionSummary | None = None) -> TransactionSummary:
    """Fill the figures the provider did not report from the parsed transactions."""
    summary = summary or TransactionSummary()
    debits = [txn for txn in transactions if txn.type == "DEBIT"]
    if not summary.total_transactions:
        summary.total_transactions = len(transactions)
    summary.total_debit_transactions = len(debits)
    if not summary.total_debit_amount:
        summary.total_debit_amount = round(sum(txn.amount for txn in debits), 2)
    return summary


class TransactionHistoryParser:
    """Split a history answer into its sections and parse each one."""

    def parse(self, content: str) -> TransactionHistory:
        """Return balance, summary, wallet details and transactions; missing figures are computed."""
        sections = self._sections(content)
        wallet_text = "\n".join(sections["wallet"])
        summary_text = "\n".join(sections["summary"])
        log_text = "\n".join(sections["transactions"])

        balances = LabeledBalanceParser().parse(wallet_text)
        balance = balances[0] if balances else WalletBalance()
        transactions = MarkdownTableTransactionParser().parse(log_text) or NarrativeTransactionParser().parse(log_text)

        summary = TransactionSummary()
        total = TOTAL_TRANSACTIONS.search(summary_text)
        if total:
            summary.total_transactions = int(total.group(1))
        debit = TOTAL_DEBIT.search(summary_text)
        if debit:
            summary.total_debit_amount = parse_amount(debit.group(1)) or 0.0

        return TransactionHistory(
            transactions=transactions,
            balance=balance,
            summary=summarize(transactions, summary),
            details=self._details(wallet_text + "\n" + summary_text),
        )

    @staticmethod
    def _sections(content: str) -> dict[str, list[str]]:
        sections: dict[str, list[str]] = {"wallet": [], "summary": [], "transactions": []}
        current = None
        seen_heading = False
        for line in BaseParser.lines(content):
            if PAYEE_SECTION.search(line):
                break
            heading = next((name for name, pattern in SECTION_PATTERNS.items() if pattern.search(line)), None)
            if heading:
                current = heading
                seen_heading = True
                continue
            if current:
                sections[current].append(line)
        if not seen_heading:
            lines = BaseParser.lines(content)
            return {"wallet": lines, "summary": lines, "transactions": lines}
        return sections

    @staticmethod
    def _details(text: str) -> WalletDetails:
        details = WalletDetails()
        wallet_id = WALLET_ID.search(text)
        if wallet_id:
            details.wallet_id = wallet_id.group(1)
        paytag = PAYTAG.search(text)
        if paytag:
            details.paytag = paytag.group(1)
        currency = CURRENCY.search(text) or BALANCE_CURRENCY.search(text)
        if currency:
            details.currency = currency.group(1).upper()
        return details
