"""
Outbound notifications.

Delivery is best-effort: notify_safely() logs and swallows sink failures so
the triggering operation (registration, approval, rejection...) still
succeeds.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    to: str
    subject: str
    body: str


class INotificationSink(ABC):
    @abstractmethod
    async def send(self, notification: Notification) -> None:
        """Deliver a notification. May raise on transport failure."""
        pass


async def notify_safely(sink: INotificationSink, notification: Notification) -> bool:
    try:
        await sink.send(notification)
        return True
    except Exception:
        logger.exception("Failed to deliver notification %r", notification.subject)
        return False


def verification_notification(email: str, token: str, frontend_url: str) -> Notification:
    link = f"{frontend_url.rstrip('/')}/verify-email?token={token}"
    return Notification(
        to=email,
        subject="Confirm your email address",
        body=(
            "Thank you for registering.\n\n"
            f"Confirm your email address by opening the link below:\n{link}\n\n"
            "The link is valid for 24 hours."
        ),
    )


def approval_notification(email: str, first_name: str) -> Notification:
    return Notification(
        to=email,
        subject="Your account has been approved",
        body=f"Hello {first_name},\n\nYour account is now active and you can sign in.",
    )


def rejection_notification(email: str, first_name: str, reason: Optional[str]) -> Notification:
    body = f"Hello {first_name},\n\nUnfortunately your registration has been rejected."
    if reason:
        body += f"\n\nReason: {reason}"
    return Notification(to=email, subject="Your registration was rejected", body=body)


def block_notification(email: str, first_name: str, reason: Optional[str]) -> Notification:
    body = f"Hello {first_name},\n\nYour account has been blocked."
    if reason:
        body += f"\n\nReason: {reason}"
    return Notification(to=email, subject="Your account has been blocked", body=body)


def role_change_notification(
    email: str, first_name: str, new_role: str, reason: Optional[str]
) -> Notification:
    body = f"Hello {first_name},\n\nYour account role is now: {new_role}."
    if reason:
        body += f"\n\nReason: {reason}"
    return Notification(to=email, subject="Your account role has changed", body=body)


def password_reset_notification(email: str, token: str, frontend_url: str) -> Notification:
    link = f"{frontend_url.rstrip('/')}/reset-password?token={token}"
    return Notification(
        to=email,
        subject="Reset your password",
        body=(
            f"Use the link below to choose a new password:\n{link}\n\n"
            "The link is valid for 1 hour. If you did not request a reset, ignore this message."
        ),
    )
