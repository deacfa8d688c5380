"""
PasswordResetToken Entity

One-time credential mailed to a user who forgot their password.
"""

import hashlib
import secrets
from datetime import datetime, timedelta
from typing import Optional, Tuple
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import utc_now


class PasswordResetToken(SQLModel, table=True):
    """
    Business Rules:
    - Only the SHA-256 digest of the mailed secret is stored
    - Usable once, until expires_at; consumption stamps used_at
    - Requesting a new reset consumes every earlier open token of the user
    - user_id is not a foreign key so a hard-deleted user leaves no dangling constraint
    """

    __tablename__ = "password_reset_tokens"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(index=True)
    token_hash: str = Field(max_length=64)

    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    used_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_password_reset_token_hash", "token_hash", unique=True),
        Index("idx_password_reset_expires_at", "expires_at"),
    )

    @staticmethod
    def hash_secret(secret: str) -> str:
        return hashlib.sha256(secret.encode("utf-8")).hexdigest()

    @classmethod
    def issue(cls, user_id: UUID, ttl: timedelta, now: datetime) -> Tuple["PasswordResetToken", str]:
        """Create a token row and return it with the plain secret to mail."""
        secret = secrets.token_urlsafe(32)
        token = cls(user_id=user_id, token_hash=cls.hash_secret(secret), expires_at=now + ttl)
        return token, secret

    @property
    def used(self) -> bool:
        return self.used_at is not None

    def is_usable(self, now: datetime) -> bool:
        return self.used_at is None and self.expires_at > now

    def consume(self, now: datetime) -> None:
        self.used_at = now
