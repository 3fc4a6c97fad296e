"""Best-effort operator alerts sent by e-mail."""

from __future__ import annotations

import asyncio
import logging
import smtplib
from email.mime.text import MIMEText

from articlerelay.config import Settings

__all__ = ["OperatorNotifier", "DEFAULT_SUBJECT"]

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT = "Error in Article Generation"


class OperatorNotifier:
    """Send pipeline failure alerts to the operator.

    Sending never raises: SMTP failures are logged and swallowed so that an
    alerting problem cannot take the pipeline down with it. When no SMTP
    credentials are configured the notifier only logs.
    """

    def __init__(
        self,
        *,
        smtp_host: str = "smtp.gmail.com",
        smtp_port: int = 587,
        username: str | None = None,
        password: str | None = None,
        recipient: str | None = None,
        subject: str = DEFAULT_SUBJECT,
        timeout: float = 30.0,
    ) -> None:
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.username = username
        self.password = password
        self.recipient = recipient
        self.subject = subject
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "OperatorNotifier":
        return cls(
            smtp_host=settings.smtp_host,
            smtp_port=settings.smtp_port,
            username=settings.email_user,
            password=settings.email_pass,
            recipient=settings.alert_email_to,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.username and self.password and self.recipient)

    def send(self, message: str) -> bool:
        """Send ``message`` synchronously; return ``True`` when it was delivered."""

        if not self.enabled:
            logger.debug("E-mail alerts disabled, not sending: %s", message)
            return False

        msg = MIMEText(f"An error occurred: {message}", "plain", "utf-8")
        msg["Subject"] = self.subject
        msg["From"] = self.username
        msg["To"] = self.recipient

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as server:
                server.starttls()
                server.login(self.username, self.password)
                server.sendmail(self.username, [self.recipient], msg.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send error email: %s", exc)
            return False

        logger.info("Error email sent successfully")
        return True

    async def notify(self, message: str) -> bool:
        """Send ``message`` from a worker thread."""

        return await asyncio.to_thread(self.send, message)
