"""
Notification Service

Sends account lifecycle emails (welcome, goodbye) through the SendGrid
HTTP API. Sends are scheduled as background tasks, so a slow or failing
mail gateway never affects the request that triggered them.
"""

from typing import Optional

import httpx

from taskmanager.utils.logger import get_logger

logger = get_logger(__name__)

SENDGRID_SEND_URL = "https://api.sendgrid.com/v3/mail/send"


class Mailer:
    """Fire-and-forget mail dispatch."""

    def __init__(
        self,
        api_key: Optional[str],
        mail_from: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.mail_from = mail_from
        self.timeout = timeout
        self.transport = transport

        if not self.api_key:
            logger.warning("SENDGRID_API_KEY not configured. Emails will only be logged.")

    async def send(self, to: str, subject: str, text: str) -> bool:
        """Send one plain text email. Failures are logged and reported as False, never raised."""
        if not self.api_key:
            logger.info("Email not sent (no API key)", to=to, subject=subject)
            return False

        payload = {
            "personalizations": [{"to": [{"email": to}]}],
            "from": {"email": self.mail_from},
            "subject": subject,
            "content": [{"type": "text/plain", "value": text}],
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    SENDGRID_SEND_URL,
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("Failed to send email", to=to, subject=subject, error=str(e))
            return False

        logger.info("Email sent", to=to, subject=subject)
        return True

    async def send_welcome_email(self, email: str, name: str) -> bool:
        return await self.send(
            email,
            "Thanks for joining in!",
            f"Welcome to the app, {name}. Let me know how you get along with the app.",
        )

    async def send_goodbye_email(self, email: str, name: str) -> bool:
        return await self.send(
            email,
            "Sorry to see you go!",
            f"Goodbye, {name}. I hope to see you back sometime soon.",
        )
