"""Workers package: background tasks run after the HTTP response."""

from .payee_tasks import PayeeRegistrationQueue  # noqa: F401
