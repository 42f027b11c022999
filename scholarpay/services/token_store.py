"""Storage for payment provider OAuth tokens."""

import uuid
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from scholarpay.core.db import ProviderTokenRecord
from scholarpay.core.errors import PersistenceError
from scholarpay.core.utils import utcnow, utcnow_iso


def save_token(session: Session, access_token: str, expires_in: int) -> None:
    """Store a newly exchanged access token."""
    record = ProviderTokenRecord(
        id=str(uuid.uuid4()),
        access_token=access_token,
        expires_at=(utcnow() + timedelta(seconds=expires_in)).isoformat(),
        created_at=utcnow_iso(),
    )
    try:
        session.add(record)
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        msg = f"Could not store provider token: {exc}"
        raise PersistenceError(msg) from exc


def latest_token(session: Session) -> str | None:
    """Return the most recent access token that has not expired."""
    stmt = select(ProviderTokenRecord).order_by(ProviderTokenRecord.created_at.desc()).limit(1)
    record = session.execute(stmt).scalars().first()
    if record is None:
        return None
    if datetime.fromisoformat(record.expires_at) <= utcnow():
        return None
    return record.access_token


def clear_tokens(session: Session) -> int:
    """Delete all stored tokens; returns how many were removed."""
    removed = session.query(ProviderTokenRecord).delete()
    session.commit()
    return removed
