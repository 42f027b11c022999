"""PaymanClient: HTTP client for the payment provider's natural-language ask API.

Every provider operation is a single command string sent to the ask endpoint. The provider answers with an envelope whose first artifact carries prose or a markdown table; turning that text into records is the job of ``scholarpay.parsers``. A client is built per request from settings and the stored OAuth token, never shared as a module-level instance.
"""

from typing import Any
from urllib.parse import urlencode

import httpx

from scholarpay.core.errors import ProviderError
from scholarpay.core.settings import Settings
from scholarpay.core.utils import get_logger, truncate
from scholarpay.services.prompts import (
    ADD_PAYEE_TEMPLATE,
    LIST_PAYEES_PROMPT,
    PAYMENT_METADATA_SOURCE,
    PAYMENT_METADATA_TYPE,
    SEND_PAYMENT_TEMPLATE,
    TRANSACTION_HISTORY_PROMPT,
    WALLET_BALANCE_TEMPLATE,
)

logger = get_logger("scholarpay.payman")


def format_amount(amount: float) -> str:
    """Render an amount the way a person would type it: 500 rather than 500.0."""
    return f"{amount:g}" if float(amount).is_integer() else f"{amount:.2f}"


class PaymanClient:
    """Async client for the payment provider."""

    def __init__(
        self,
        settings: Settings,
        access_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client with settings, an optional OAuth token and an optional transport for tests."""
        self.settings = settings
        self.access_token = access_token
        self.transport = transport

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.settings.payman_base_url,
            timeout=self.settings.payman_timeout_seconds,
            transport=self.transport,
        )

    @property
    def is_authenticated(self) -> bool:
        """Tell whether the client holds an access token."""
        return self.access_token is not None

    def authorize_url(self) -> str:
        """Build the provider URL that starts the OAuth authorization-code flow."""
        query = urlencode(
            {
                "client_id": self.settings.payman_client_id,
                "redirect_uri": self.settings.payman_redirect_uri,
                "scope": self.settings.payman_scopes,
                "response_type": "code",
            }
        )
        return f"{self.settings.payman_authorize_url}?{query}"

    async def _token_request(self, data: dict[str, str]) -> dict[str, Any]:
        if not self.settings.payman_client_id or not self.settings.payman_client_secret:
            msg = "Payment provider client credentials are not configured"
            raise ProviderError(msg)
        payload = {
            "client_id": self.settings.payman_client_id,
            "client_secret": self.settings.payman_client_secret,
            **data,
        }
        try:
            async with self._http() as http:
                response = await http.post(self.settings.payman_token_path, data=payload)
                response.raise_for_status()
                body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            msg = f"Token request failed ({data.get('grant_type')}): {exc}"
            logger.exception(msg)
            raise ProviderError(msg) from exc
        if "access_token" not in body:
            msg = f"Token response without access_token: {truncate(body)}"
            raise ProviderError(msg)
        return body

    async def authenticate(self) -> str:
        """Obtain an app-level token with the client-credentials grant."""
        body = await self._token_request({"grant_type": "client_credentials"})
        self.access_token = body["access_token"]
        return self.access_token

    async def exchange_code(self, code: str) -> tuple[str, int]:
        """Exchange an OAuth authorization code for an access token; returns (token, expires_in seconds)."""
        body = await self._token_request(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.settings.payman_redirect_uri,
            }
        )
        self.access_token = body["access_token"]
        return self.access_token, int(body.get("expires_in", 3600))

    async def ask(self, message: str, metadata: dict[str, Any] | None = None) -> dict[str, Any]:
        """Send one natural-language command and return the provider's answer envelope."""
        if not self.is_authenticated:
            await self.authenticate()
        logger.info(f"ASK: {truncate(message, 80)}")
        payload: dict[str, Any] = {"message": message}
        if metadata:
            payload["metadata"] = metadata
        try:
            async with self._http() as http:
                response = await http.post(
                    self.settings.payman_ask_path,
                    json=payload,
                    headers={"Authorization": f"Bearer {self.access_token}"},
                )
                response.raise_for_status()
                body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            msg = f"Payment provider ask failed: {exc}"
            logger.exception(msg)
            raise ProviderError(msg) from exc
        if not isinstance(body, dict):
            msg = f"Unexpected payment provider answer: {truncate(body)}"
            raise ProviderError(msg)
        logger.info(f"ANSWER: {truncate(body)}")
        return body

    async def list_payees(self) -> dict[str, Any]:
        """Ask for the payee list."""
        return await self.ask(LIST_PAYEES_PROMPT)

    async def add_payee(self, email: str, name: str) -> dict[str, Any]:
        """Register a payee with the provider."""
        return await self.ask(ADD_PAYEE_TEMPLATE.format(email=email, name=name))

    async def send_payment(self, amount: float, recipient: str, description: str) -> dict[str, Any]:
        """Pay a registered payee in TSD."""
        message = SEND_PAYMENT_TEMPLATE.format(amount=format_amount(amount), recipient=recipient)
        metadata = {
            "source": PAYMENT_METADATA_SOURCE,
            "type": PAYMENT_METADATA_TYPE,
            "recipient": recipient,
            "amount": amount,
            "currency": "TSD",
            "description": description,
        }
        return await self.ask(message, metadata)

    async def get_wallet_balance(self) -> dict[str, Any]:
        """Ask for the balance of the configured wallet."""
        return await self.ask(WALLET_BALANCE_TEMPLATE.format(wallet=self.settings.payman_wallet_number))

    async def get_transaction_history(self) -> dict[str, Any]:
        """Ask for the wallet summary and transaction table of the configured wallet."""
        return await self.ask(TRANSACTION_HISTORY_PROMPT.format(wallet=self.settings.payman_wallet_number))
