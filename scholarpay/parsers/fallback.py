"""Demo datasets returned when a provider answer yields no records."""

from datetime import date, timedelta

from scholarpay.core.models import (
    Payee,
    Transaction,
    TransactionHistory,
    TransactionSummary,
    WalletBalance,
    WalletDetails,
)

FALLBACK_NOTICE = "Demo data: no records could be read from the payment provider's answer."

_DEMO_PAYMENTS = [
    # (id, amount, recipient, description, days ago, created by)
    ("tx-001", 1.00, "john", "Payment to john", 1, "expenzse"),
    ("tx-002", 10.00, "sahaj jain", "Payment to sahaj jain", 2, "expenzse"),
    ("tx-003", 11.00, "kartik design", "Payment to kartik design", 3, "expenzse"),
    ("tx-004", 7.00, "ritik jain", "Payment to ritik jain", 3, "expenzse"),
    ("tx-005", 2.00, "TSD Wallet 1", "Transfer to TSD Wallet 1", 3, "expenzse"),
    ("tx-006", 0.01, "Fees and taxes", "Fees and taxes", 4, "government"),
    ("tx-007", 5.00, "ram", "Payment to ram", 5, "government"),
    ("tx-008", 11.00, "mahaveer", "Payment to mahaveer", 6, "government"),
    ("tx-009", 10.00, "Rathore", "Payment to Rathore", 7, "government"),
    ("tx-010", 1.00, "Jain", "Payment to Jain", 8, "government"),
]


def demo_payees() -> list[Payee]:
    """Payees shown when the payee list cannot be read."""
    return [
        Payee(name="sahaj jain", email="sahaj.jain@example.com", status="active"),
        Payee(name="kartik design", email="kartik.design@example.com", status="active"),
        Payee(name="ritik jain", email="ritik.jain@example.com", status="active"),
    ]


def demo_balance() -> list[WalletBalance]:
    """Balance shown when the wallet balance cannot be read."""
    return [WalletBalance(total_balance=843.84, spendable_balance=843.84, pending_balance=0.0)]


def demo_transactions(today: date | None = None) -> list[Transaction]:
    """Transactions shown when the transaction log cannot be read; dates count back from today."""
    today = today or date.today()
    return [
        Transaction(
            id=txn_id,
            type="DEBIT",
            amount=amount,
            description=description,
            date=(today - timedelta(days=days_ago)).isoformat(),
            status="completed",
            recipient=recipient,
            reference=created_by,
        )
        for txn_id, amount, recipient, description, days_ago, created_by in _DEMO_PAYMENTS
    ]


def demo_history(notice: str = FALLBACK_NOTICE) -> TransactionHistory:
    """Full transaction history built from the demo transactions."""
    transactions = demo_transactions()
    return TransactionHistory(
        transactions=transactions,
        balance=demo_balance()[0],
        summary=TransactionSummary(
            total_transactions=len(transactions),
            total_debit_transactions=len(transactions),
            total_debit_amount=round(sum(txn.amount for txn in transactions), 2),
        ),
        details=WalletDetails(),
        fallback=True,
        notice=notice,
    )


DEMO_DATASETS = {
    "payees": demo_payees,
    "balance": demo_balance,
    "transactions": demo_transactions,
}
