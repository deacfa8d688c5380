import asyncio
import logging
import smtplib
import ssl
from email.mime.text import MIMEText
from typing import Optional

from src.app.services.notification import INotificationSink, Notification

logger = logging.getLogger(__name__)


def redact_email(email: str) -> str:
    """Redact an email address for logging"""
    if "@" not in email:
        return "redacted"
    local, domain = email.split("@", 1)
    return f"{local[:2]}***@{domain}"


class EmailNotificationSink(INotificationSink):
    """
    SMTP delivery of notifications.

    Falls back to logging the message when SMTP is not configured (dev mode).
    smtplib is blocking, so sends run in a worker thread.
    """

    def __init__(
        self,
        smtp_host: Optional[str] = None,
        smtp_port: int = 587,
        smtp_user: Optional[str] = None,
        smtp_password: Optional[str] = None,
        smtp_use_tls: bool = True,
        from_email: Optional[str] = None,
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_password = smtp_password
        self.smtp_use_tls = smtp_use_tls
        self.from_email = from_email or smtp_user

    @property
    def is_configured(self) -> bool:
        return bool(self.smtp_host and self.from_email)

    async def send(self, notification: Notification) -> None:
        if not self.is_configured:
            logger.info(
                "Email (dev mode) to %s: %s\n%s",
                redact_email(notification.to),
                notification.subject,
                notification.body[:200],
            )
            return
        await asyncio.to_thread(self._send_smtp, notification)
        logger.info("Email sent to %s: %s", redact_email(notification.to), notification.subject)

    def _send_smtp(self, notification: Notification) -> None:
        msg = MIMEText(notification.body, "plain")
        msg["Subject"] = notification.subject
        msg["From"] = self.from_email
        msg["To"] = notification.to

        context = ssl.create_default_context()
        if self.smtp_use_tls:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=30) as server:
                server.starttls(context=context)
                if self.smtp_user and self.smtp_password:
                    server.login(self.smtp_user, self.smtp_password)
                server.sendmail(self.from_email, [notification.to], msg.as_string())
        else:
            with smtplib.SMTP_SSL(
                self.smtp_host, self.smtp_port, context=context, timeout=30
            ) as server:
                if self.smtp_user and self.smtp_password:
                    server.login(self.smtp_user, self.smtp_password)
                server.sendmail(self.from_email, [notification.to], msg.as_string())
