"""Services package: application registry, payment provider client, payments, and token storage."""

from .application_service import ApplicationRegistry  # noqa: F401
from .payman_client import PaymanClient  # noqa: F401
from .payment_service import PaymentService  # noqa: F401
