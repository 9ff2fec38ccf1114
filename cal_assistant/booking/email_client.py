"""SendGrid delivery for booking confirmations."""

import logging
from typing import Any, Dict, Optional

import httpx

from ..errors import ProviderExecutionError

logger = logging.getLogger(__name__)

SENDGRID_ENDPOINT = "https://api.sendgrid.com/v3/mail/send"


class SendGridEmailClient:
    """Sends plain-text mail from the assistant's address."""

    def __init__(
        self,
        api_key: str,
        sender_email: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.sender_email = sender_email
        self.timeout = timeout
        self.transport = transport

    async def send(self, recipient: str, subject: str, body: str) -> Dict[str, Any]:
        """
        Send one message.

        Raises:
            ProviderExecutionError: If the client is unconfigured or delivery fails
        """
        if not self.api_key:
            raise ProviderExecutionError("sendBookingEmail", "email client configured without API key")
        if not self.sender_email:
            raise ProviderExecutionError("sendBookingEmail", "email client configured without sender email")

        payload = {
            "personalizations": [{"to": [{"email": recipient}]}],
            "from": {"email": self.sender_email},
            "subject": subject,
            "content": [{"type": "text/plain", "value": body}],
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                resp = await client.post(SENDGRID_ENDPOINT, headers=headers, json=payload)
        except httpx.RequestError as exc:
            raise ProviderExecutionError("sendBookingEmail", f"network error: {exc}") from exc

        if resp.status_code not in (200, 202):
            logger.warning(f"SendGrid returned {resp.status_code}: {resp.text[:500]}")
            raise ProviderExecutionError(
                "sendBookingEmail",
                f"SendGrid returned {resp.status_code}",
                status_code=resp.status_code,
            )

        logger.info(f"Sent confirmation email to {recipient}")
        return {"status": resp.status_code, "recipient": recipient, "subject": subject}
