"""Shared fixtures: in-memory database, fake payment provider, and an API client wired to both."""

from collections.abc import Iterator
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from scholarpay.api.dependencies import get_payman_client
from scholarpay.core.db import get_session_factory, init_db
from scholarpay.core.errors import ProviderError

STUDENT_HEADERS = {"X-User-Role": "student", "X-User-Email": "ada@uni.edu"}
GOVERNMENT_HEADERS = {"X-User-Role": "government", "X-User-Email": "review@gov.example"}

PAYEE_LIST = """Here are all your payees:
1. Ada Lovelace (ada@uni.edu)
2. grace.hopper@navy.mil (Test Rails)
3. Kartik Design
"""

BALANCE_TEXT = """Your TSD Wallet 3:
- Total Balance: 1,845.84 TSD
- Spendable Balance: 1,234.56 TSD
- Pending Balance: 0.00 TSD
"""

HISTORY_TEXT = """## Wallet Financial Summary
- Wallet ID: wlt-1f00a621-49fb
- Paytag: idol.recline.slack/88
- Total Balance: 845.84 TSD
- Spendable Balance: 845.84 TSD
- Pending Balance: 0.00 TSD

## Transaction Overview
- Total Transactions: 2
- Total Debit Amount: 11.00 TSD

## Detailed Transaction Log
| Transaction ID | Date | Recipient | Amount | Type | Status | Created By |
|---|---|---|---|---|---|---|
| tx-100 | 2024-01-15 | Payment to john | 1.00 TSD | DEBIT | Completed | expenzse |
| tx-101 | 2024-01-14 | Payment to sahaj jain | 10.00 TSD | DEBIT | Completed | government |
"""


def envelope(content: Any, status: str = "COMPLETED") -> dict[str, Any]:
    """Wrap content the way the provider does."""
    return {"status": status, "artifacts": [{"content": content}]}


class FakePaymanClient:
    """Stands in for PaymanClient; records every command it receives."""

    def __init__(self) -> None:
        """Start with canned answers and no failures."""
        self.calls: list[tuple[str, tuple]] = []
        self.fail = False
        self.fail_add_payee = False
        self.answers: dict[str, Any] = {
            "payees": envelope(PAYEE_LIST),
            "balance": envelope(BALANCE_TEXT),
            "history": envelope(HISTORY_TEXT),
            "payment": envelope("Payment sent successfully."),
            "add_payee": envelope("Payee added."),
        }

    def _answer(self, name: str, *args: Any) -> dict[str, Any]:
        self.calls.append((name, args))
        if self.fail:
            msg = "provider unreachable"
            raise ProviderError(msg)
        return self.answers[name]

    async def list_payees(self) -> dict[str, Any]:
        """Return the payee list answer."""
        return self._answer("payees")

    async def get_wallet_balance(self) -> dict[str, Any]:
        """Return the balance answer."""
        return self._answer("balance")

    async def get_transaction_history(self) -> dict[str, Any]:
        """Return the history answer."""
        return self._answer("history")

    async def send_payment(self, amount: float, recipient: str, description: str) -> dict[str, Any]:
        """Return the payment answer."""
        return self._answer("payment", amount, recipient, description)

    async def add_payee(self, email: str, name: str) -> dict[str, Any]:
        """Return the add-payee answer, or fail when asked to."""
        if self.fail_add_payee:
            self.calls.append(("add_payee", (email, name)))
            msg = "payee registration rejected"
            raise ProviderError(msg)
        return self._answer("add_payee", email, name)

    def authorize_url(self) -> str:
        """Return a fixed authorization URL."""
        return "https://provider.example/oauth/authorize?client_id=test"

    async def exchange_code(self, code: str) -> tuple[str, int]:
        """Return a token derived from the code."""
        self.calls.append(("exchange_code", (code,)))
        if self.fail:
            msg = "token exchange failed"
            raise ProviderError(msg)
        return f"token-{code}", 3600

    def commands(self, name: str) -> list[tuple]:
        """Arguments of every call to one command."""
        return [args for call, args in self.calls if call == name]


@pytest.fixture
def session_factory() -> sessionmaker:
    """A session factory bound to a fresh in-memory SQLite database."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def session(session_factory: sessionmaker) -> Iterator[Session]:
    """A session on the in-memory database."""
    db = session_factory()
    yield db
    db.close()


@pytest.fixture
def provider() -> FakePaymanClient:
    """A fake payment provider client."""
    return FakePaymanClient()


@pytest.fixture
def client(session_factory: sessionmaker, provider: FakePaymanClient) -> Iterator[TestClient]:
    """An API client using the in-memory database and the fake provider."""
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_payman_client] = lambda: provider
    yield TestClient(app)
    app.dependency_overrides.clear()
