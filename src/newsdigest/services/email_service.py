"""Email delivery of the digest text through the Resend HTTP API."""

from typing import List, Optional

import httpx

from newsdigest.services.notification import NotificationResult
from newsdigest.utils.logging import get_logger

logger = get_logger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"


class EmailService:
    """Send plain-text emails via Resend."""

    def __init__(
        self,
        api_key: Optional[str],
        sender: Optional[str],
        recipients: List[str],
        enabled: bool = True,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 15.0,
    ):
        """Initialize the service.

        Args:
            api_key: Resend API key.
            sender: From address.
            recipients: To addresses.
            enabled: Master switch; disabled services skip silently.
            client: Shared HTTP client (a private one is opened per send otherwise).
            timeout: HTTP timeout in seconds.
        """
        self.api_key = api_key
        self.sender = sender
        self.recipients = list(recipients)
        self.enabled = enabled
        self._client = client
        self.timeout = timeout

    def is_configured(self) -> bool:
        return bool(self.api_key and self.sender and self.recipients)

    async def send_email(self, subject: str, text: str) -> NotificationResult:
        """Send one email to all recipients.

        Never raises; failures are logged and reported in the result.

        Args:
            subject: Subject line.
            text: Plain-text body.

        Returns:
            Delivery result with the Resend message id on success.
        """
        if not self.enabled:
            return NotificationResult(False, "Email delivery disabled", skipped=True)

        if not self.is_configured():
            logger.warning("email_not_configured_skipping")
            return NotificationResult(
                False,
                "RESEND_API_KEY / EMAIL_FROM / EMAIL_TO not fully configured",
                skipped=True,
            )

        payload = {
            "from": self.sender,
            "to": self.recipients,
            "subject": subject,
            "text": text,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}

        try:
            if self._client is not None:
                response = await self._client.post(RESEND_API_URL, json=payload, headers=headers)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(RESEND_API_URL, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error("email_send_failed", error=str(e))
            return NotificationResult(False, f"Email delivery failed: {e}")

        if response.status_code >= 400:
            logger.error("email_send_failed", status=response.status_code, body=response.text[:300])
            return NotificationResult(False, f"Resend API {response.status_code}: {response.text[:300]}")

        try:
            data = response.json()
        except ValueError:
            data = None
        message_id = data.get("id") if isinstance(data, dict) else None

        logger.info("email_sent", recipients=len(self.recipients), message_id=message_id)
        return NotificationResult(True, f"Email sent to {len(self.recipients)} recipient(s)", message_id)
