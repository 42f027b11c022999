"""Payments and payee management against the payment provider."""

from scholarpay.core.errors import ProviderError
from scholarpay.core.models import PaymentRequest, ProviderReply, StatusChange
from scholarpay.core.utils import get_logger
from scholarpay.parsers.normalizer import extract_content
from scholarpay.services.application_service import ApplicationRegistry
from scholarpay.services.payman_client import PaymanClient

FAILED_STATUSES = {"FAILED", "ERROR", "REJECTED", "CANCELED", "CANCELLED"}

logger = get_logger("scholarpay.payments")


def reply_from(response: dict) -> ProviderReply:
    """Reduce a provider envelope to its status and text."""
    content = extract_content(response)
    status = response.get("status")
    return ProviderReply(status=str(status) if status is not None else None, content=str(content))


class PaymentService:
    """Sends scholarship payments and registers payees."""

    def __init__(self, client: PaymanClient, registry: ApplicationRegistry | None = None) -> None:
        """Initialize the service with a provider client and, for application payments, the registry."""
        self.client = client
        self.registry = registry

    async def send_payment(self, request: PaymentRequest) -> ProviderReply:
        """Pay a registered payee; provider failures propagate as ProviderError."""
        logger.info(f"Sending payment: {request.amount} TSD to {request.recipient_name}")
        response = await self.client.send_payment(request.amount, request.recipient_name, request.description)
        return reply_from(response)

    async def add_payee(self, email: str, name: str) -> ProviderReply:
        """Register a payee with the provider."""
        logger.info(f"Adding payee: {name} <{email}>")
        return reply_from(await self.client.add_payee(email, name))

    async def pay_application(self, application_id: str) -> StatusChange:
        """Pay out an approved application and mark it paid.

        The status only changes after the provider accepted the payment; a provider failure leaves the application approved.
        """
        if self.registry is None:
            msg = "PaymentService needs an ApplicationRegistry to pay applications"
            raise RuntimeError(msg)
        application = self.registry.get(application_id)
        if application.status != "approved":
            warning = f"Only approved applications can be paid (status is {application.status})"
            logger.warning(f"Refused payment for application {application_id}: {warning}")
            return StatusChange(success=False, application=application, warning=warning)
        response = await self.client.send_payment(
            application.amount,
            application.student_name,
            f"{application.scholarship_name} scholarship for {application.student_name}",
        )
        reply = reply_from(response)
        if (reply.status or "").upper() in FAILED_STATUSES:
            msg = f"Payment for application {application_id} was not completed ({reply.status}): {reply.content}"
            logger.warning(msg)
            raise ProviderError(msg)
        return self.registry.set_status(application_id, "paid")
