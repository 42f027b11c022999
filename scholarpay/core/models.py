"""Pydantic models for ScholarPay.

This module defines the records the response normalizer extracts from payment provider answers (payees, balances, transactions), the scholarship application models used by the registry, and the request/response bodies of the API.
"""

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

ApplicationStatus = Literal["pending", "approved", "rejected", "paid"]
TaskStatus = Literal["pending", "succeeded", "failed"]
Category = Literal["payees", "balance", "transactions"]


class Payee(BaseModel):
    """A recipient registered with the payment provider."""

    name: str
    email: str
    status: Literal["active", "inactive"] = "active"
    type: str | None = None


class WalletBalance(BaseModel):
    """Balances of the provider wallet, in TSD."""

    total_balance: float = 0.0
    spendable_balance: float = 0.0
    pending_balance: float = 0.0


class Transaction(BaseModel):
    """A single wallet transaction as reported by the payment provider."""

    id: str
    type: Literal["DEBIT", "CREDIT"] = "DEBIT"
    amount: float
    description: str
    date: str
    status: Literal["completed", "pending", "failed"] = "completed"
    recipient: str
    reference: str | None = None


class TransactionSummary(BaseModel):
    """Aggregate figures for a transaction history."""

    total_transactions: int = 0
    total_debit_transactions: int = 0
    total_debit_amount: float = 0.0


class WalletDetails(BaseModel):
    """Identifying details of the wallet a history was read from."""

    wallet_id: str | None = None
    paytag: str | None = None
    currency: str = "TSD"


class TransactionHistory(BaseModel):
    """Combined result of the wallet summary and transaction log prompt."""

    transactions: list[Transaction]
    balance: WalletBalance
    summary: TransactionSummary
    details: WalletDetails = Field(default_factory=WalletDetails)
    fallback: bool = False
    notice: str | None = None


class NormalizedResult(BaseModel):
    """Records extracted from one provider answer."""

    category: Category
    shape: str
    records: list[Payee | WalletBalance | Transaction]
    fallback: bool = False
    notice: str | None = None


class NormalizeRequest(BaseModel):
    """Raw provider content to run through the normalizer."""

    category: Category
    content: str | list[Any] | dict[str, Any]


class ApplicationCreate(BaseModel):
    """Fields a student supplies when applying for a scholarship."""

    student_name: str
    student_email: str
    student_id: str = "N/A"
    scholarship_name: str
    amount: float = Field(gt=0, allow_inf_nan=False)
    description: str
    category: str
    requirements: str = ""

    @field_validator("student_name", "student_email", "scholarship_name", "description", "category")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            msg = "must not be empty"
            raise ValueError(msg)
        return value


class ApplicationSubmission(BaseModel):
    """Body of POST /applications; student identity comes from the request headers."""

    student_name: str
    student_id: str = "N/A"
    scholarship_name: str
    amount: float
    description: str
    category: str
    requirements: str = ""


class Application(BaseModel):
    """A stored scholarship application."""

    id: str
    student_name: str
    student_email: str
    student_id: str
    scholarship_name: str
    amount: float
    status: ApplicationStatus
    applied_date: str
    description: str
    category: str
    requirements: str | None = ""

    model_config = {"from_attributes": True}


class StatusUpdate(BaseModel):
    """Body of PATCH /applications/{id}/status."""

    status: ApplicationStatus


class PayeeTask(BaseModel):
    """Observable state of one best-effort payee registration."""

    id: str
    application_id: str | None = None
    email: str
    name: str
    status: TaskStatus
    created_at: str
    completed_at: str | None = None
    error: str | None = None

    model_config = {"from_attributes": True}


class StatusChange(BaseModel):
    """Outcome of a status transition request."""

    success: bool
    application: Application
    payee_task: PayeeTask | None = None
    warning: str | None = None


class PayeeCreate(BaseModel):
    """Body of POST /payees."""

    email: str
    name: str

    @field_validator("email", "name")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            msg = "must not be empty"
            raise ValueError(msg)
        return value


class PaymentRequest(BaseModel):
    """Body of POST /payments."""

    amount: float = Field(gt=0, allow_inf_nan=False)
    recipient_name: str
    description: str


class ProviderReply(BaseModel):
    """Text of a provider answer to a command (add payee, send payment)."""

    status: str | None = None
    content: str


class OAuthRedirect(BaseModel):
    """Result of the OAuth authorization callback."""

    type: Literal["payman-oauth-redirect"] = "payman-oauth-redirect"
    redirect_uri: str
    code: str | None = None
    error: str | None = None
    connected: bool = False
