"""
SMTP email delivery.

smtplib is blocking, so sends run in a worker thread to keep the event loop
(and the scheduler sharing it) responsive.
"""

import asyncio
import smtplib
from email.mime.text import MIMEText
from typing import List

import structlog

from app.shared.core.exceptions import DeliveryError

logger = structlog.get_logger()


class EmailService:
    def __init__(
        self,
        smtp_host: str,
        smtp_port: int,
        smtp_user: str,
        smtp_password: str,
        from_email: str,
    ) -> None:
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_password = smtp_password
        self.from_email = from_email

    async def send_text(self, recipients: List[str], subject: str, body: str) -> None:
        """Send one plain-text message. Raises DeliveryError on any SMTP failure."""
        if not recipients:
            raise DeliveryError("No recipients for notification email")

        msg = MIMEText(body, "plain", "utf-8")
        msg["Subject"] = subject
        msg["From"] = self.from_email
        msg["To"] = ", ".join(recipients)

        try:
            await asyncio.to_thread(self._send, recipients, msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error("email_send_failed", host=self.smtp_host, error=str(e))
            raise DeliveryError(f"Failed to send email: {e}") from e

        logger.info("email_sent", recipients=len(recipients), subject=subject)

    def _send(self, recipients: List[str], message: str) -> None:
        with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
            server.starttls()
            server.login(self.smtp_user, self.smtp_password)
            server.sendmail(self.from_email, recipients, message)
