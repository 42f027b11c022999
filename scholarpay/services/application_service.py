"""ApplicationRegistry: storage and status lifecycle of scholarship applications.

Applications are created ``pending`` by a student submission and move one way only::

    pending --approve--> approved --mark paid--> paid
    pending --reject---> rejected

Any other requested transition is a no-op reported as a failed ``StatusChange``. Approving an application enqueues a best-effort payee registration for the student; if that cannot be scheduled the approval still stands and the change carries a warning.
"""

import uuid
from collections.abc import Callable

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from scholarpay.core.db import ApplicationRecord
from scholarpay.core.errors import ApplicationNotFoundError, ApplicationValidationError, PersistenceError
from scholarpay.core.models import Application, ApplicationCreate, PayeeTask, StatusChange
from scholarpay.core.utils import get_logger, today_iso, utcnow_iso
from scholarpay.workers.payee_tasks import PayeeRegistrationQueue

ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    "pending": {"approved", "rejected"},
    "approved": {"paid"},
}

Scheduler = Callable[[PayeeTask], object]

logger = get_logger("scholarpay.registry")


class ApplicationRegistry:
    """CRUD and status transitions for scholarship applications."""

    def __init__(self, session: Session, payee_queue: PayeeRegistrationQueue | None = None) -> None:
        """Initialize the registry with a database session and the payee registration queue."""
        self.session = session
        self.payee_queue = payee_queue

    def _commit(self, action: str) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            msg = f"Could not {action}: {exc}"
            logger.exception(msg)
            raise PersistenceError(msg) from exc

    def _record(self, application_id: str) -> ApplicationRecord:
        try:
            record = self.session.get(ApplicationRecord, application_id)
        except SQLAlchemyError as exc:
            msg = f"Could not read application {application_id}: {exc}"
            raise PersistenceError(msg) from exc
        if record is None:
            raise ApplicationNotFoundError(application_id)
        return record

    def _query(self, stmt: object) -> list[Application]:
        try:
            records = self.session.execute(stmt).scalars().all()
        except SQLAlchemyError as exc:
            msg = f"Could not list applications: {exc}"
            raise PersistenceError(msg) from exc
        return [Application.model_validate(record) for record in records]

    def submit(self, data: ApplicationCreate | dict, schedule: Scheduler | None = None) -> Application:
        """Validate and store a new application with status pending and today's date."""
        if not isinstance(data, ApplicationCreate):
            try:
                data = ApplicationCreate.model_validate(data)
            except ValidationError as exc:
                raise ApplicationValidationError(str(exc)) from exc
        now = utcnow_iso()
        record = ApplicationRecord(
            id=str(uuid.uuid4()),
            status="pending",
            applied_date=today_iso(),
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        self.session.add(record)
        self._commit("store application")
        application = Application.model_validate(record)
        logger.info(
            f"Application submitted: id={application.id}, student={application.student_email}, "
            f"amount={application.amount}"
        )
        if schedule is not None:
            self._register_payee(application, schedule)
        return application

    def get(self, application_id: str) -> Application:
        """Return one application."""
        return Application.model_validate(self._record(application_id))

    def list_all(self) -> list[Application]:
        """Return every application, newest first."""
        stmt = select(ApplicationRecord).order_by(ApplicationRecord.created_at.desc())
        return self._query(stmt)

    def list_for_student(self, email: str) -> list[Application]:
        """Return the applications owned by a student, newest first."""
        stmt = (
            select(ApplicationRecord)
            .where(ApplicationRecord.student_email == email)
            .order_by(ApplicationRecord.created_at.desc())
        )
        return self._query(stmt)

    def set_status(self, application_id: str, new_status: str, schedule: Scheduler | None = None) -> StatusChange:
        """Apply a status transition if the lifecycle allows it."""
        record = self._record(application_id)
        current = record.status
        if new_status not in ALLOWED_TRANSITIONS.get(current, set()):
            warning = f"Cannot change status from {current} to {new_status}"
            logger.warning(f"Rejected transition for application {application_id}: {warning}")
            return StatusChange(success=False, application=Application.model_validate(record), warning=warning)
        record.status = new_status
        record.updated_at = utcnow_iso()
        self._commit(f"update application {application_id}")
        application = Application.model_validate(record)
        logger.info(f"Application {application_id}: {current} -> {new_status}")
        change = StatusChange(success=True, application=application)
        if new_status == "approved":
            change.payee_task, change.warning = self._register_payee(application, schedule)
        return change

    def _register_payee(
        self, application: Application, schedule: Scheduler | None
    ) -> tuple[PayeeTask | None, str | None]:
        """Enqueue the student's payee registration; problems become a warning, never an error."""
        if self.payee_queue is None or schedule is None:
            warning = "Payee registration is not configured; register the student manually"
            logger.warning(f"Application {application.id}: {warning}")
            return None, warning
        try:
            task = self.payee_queue.enqueue(
                self.session, application.student_email, application.student_name, application.id
            )
            schedule(task)
        except Exception as exc:
            warning = f"Payee registration could not be scheduled: {exc}"
            logger.warning(f"Application {application.id}: {warning}")
            return None, warning
        return task, None
