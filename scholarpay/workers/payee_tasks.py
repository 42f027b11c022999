"""Background payee registration with observable status.

Approving an application registers the student as a payee with the payment provider. The registration is best-effort: it is recorded as a ``pending`` task, run after the HTTP response has been sent, and ends ``succeeded`` or ``failed``. A failure is logged and stored on the task; it never reaches the operation that enqueued it.
"""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from scholarpay.core.db import PayeeTaskRecord
from scholarpay.core.errors import PersistenceError
from scholarpay.core.models import PayeeTask
from scholarpay.core.utils import get_logger, utcnow_iso

if TYPE_CHECKING:
    from scholarpay.services.payman_client import PaymanClient

logger = get_logger("scholarpay.worker")


class PayeeRegistrationQueue:
    """Creates payee registration tasks and runs them."""

    def __init__(self, session_factory: sessionmaker) -> None:
        """Initialize the queue with the session factory used by background runs."""
        self.session_factory = session_factory

    def enqueue(self, session: Session, email: str, name: str, application_id: str | None = None) -> PayeeTask:
        """Record a pending registration task for the payee."""
        record = PayeeTaskRecord(
            id=str(uuid.uuid4()),
            application_id=application_id,
            email=email,
            name=name,
            status="pending",
            created_at=utcnow_iso(),
        )
        try:
            session.add(record)
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            msg = f"Could not record payee task for {email}: {exc}"
            logger.exception(msg)
            raise PersistenceError(msg) from exc
        logger.info(f"Queued payee registration: task_id={record.id}, email={email}, application_id={application_id}")
        return PayeeTask.model_validate(record)

    def get(self, session: Session, task_id: str) -> PayeeTask | None:
        """Return a task by id, or None."""
        record = session.get(PayeeTaskRecord, task_id)
        return PayeeTask.model_validate(record) if record else None

    async def run(self, task_id: str, client: "PaymanClient") -> PayeeTask | None:
        """Register the task's payee with the provider and store the outcome; never raises."""
        session = self.session_factory()
        try:
            record = session.get(PayeeTaskRecord, task_id)
            if record is None:
                logger.warning(f"Payee task not found: {task_id}")
                return None
            logger.info(f"Starting payee registration: task_id={task_id}, email={record.email}")
            try:
                await client.add_payee(record.email, record.name)
            except Exception as exc:
                logger.warning(f"Payee registration failed: task_id={task_id}, error={exc}")
                record.status = "failed"
                record.error = str(exc)
            else:
                logger.info(f"Payee registered: task_id={task_id}, email={record.email}")
                record.status = "succeeded"
            record.completed_at = utcnow_iso()
            session.commit()
            return PayeeTask.model_validate(record)
        except SQLAlchemyError:
            session.rollback()
            logger.exception(f"Could not store outcome of payee task {task_id}")
            return None
        finally:
            session.close()
