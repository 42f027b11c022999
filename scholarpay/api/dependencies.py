"""FastAPI dependencies for DI (settings, DB session, provider client, registry, current user).

This module provides dependency injection helpers so that every request gets its own database session and its own payment provider client, and so tests can swap both through ``app.dependency_overrides``.
"""

from collections.abc import Iterator
from typing import Literal

from fastapi import Depends, Header, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session, sessionmaker

from scholarpay.core.db import get_session_factory, session_scope
from scholarpay.core.settings import Settings, get_settings
from scholarpay.parsers.normalizer import ResponseNormalizer
from scholarpay.services.application_service import ApplicationRegistry
from scholarpay.services.payman_client import PaymanClient
from scholarpay.services.payment_service import PaymentService
from scholarpay.services.token_store import latest_token
from scholarpay.workers.payee_tasks import PayeeRegistrationQueue


class CurrentUser(BaseModel):
    """Identity forwarded by the authentication provider."""

    role: Literal["student", "government"]
    email: str


def get_session(factory: sessionmaker = Depends(get_session_factory)) -> Iterator[Session]:
    """Provide a request-scoped database session."""
    yield from session_scope(factory)


def get_payee_queue(factory: sessionmaker = Depends(get_session_factory)) -> PayeeRegistrationQueue:
    """Provide the payee registration queue."""
    return PayeeRegistrationQueue(factory)


def get_registry(
    session: Session = Depends(get_session),
    queue: PayeeRegistrationQueue = Depends(get_payee_queue),
) -> ApplicationRegistry:
    """Provide an ApplicationRegistry bound to the request session."""
    return ApplicationRegistry(session, queue)


def get_payman_client(
    settings: Settings = Depends(get_settings),
    session: Session = Depends(get_session),
) -> PaymanClient:
    """Provide a provider client carrying the stored OAuth token, if any."""
    return PaymanClient(settings, access_token=latest_token(session))


def get_payment_service(
    client: PaymanClient = Depends(get_payman_client),
    registry: ApplicationRegistry = Depends(get_registry),
) -> PaymentService:
    """Provide a PaymentService for the request."""
    return PaymentService(client, registry)


def get_normalizer() -> ResponseNormalizer:
    """Provide the response normalizer."""
    return ResponseNormalizer()


def get_current_user(
    x_user_role: str | None = Header(default=None),
    x_user_email: str | None = Header(default=None),
) -> CurrentUser:
    """Read the caller's role and email from the headers set by the auth provider."""
    if not x_user_role or not x_user_email:
        raise HTTPException(401, "Missing user identity headers")
    if x_user_role not in ("student", "government"):
        raise HTTPException(403, f"Unknown role: {x_user_role}")
    return CurrentUser(role=x_user_role, email=x_user_email.strip().lower())


def require_government(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Allow only government users."""
    if user.role != "government":
        raise HTTPException(403, "Government role required")
    return user


def require_student(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Allow only students."""
    if user.role != "student":
        raise HTTPException(403, "Student role required")
    return user
