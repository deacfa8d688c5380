"""
AdminSession Entity

Server-held, revocable capability bound to one administrator login.
"""

from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import generate_token, utc_now


class AdminSession(SQLModel, table=True):
    """
    AdminSession entity - referenced from admin bearer tokens by id.

    Business Rules:
    - A token carrying a session id is only honoured while the session is
      active and unexpired; signature validity alone is insufficient
    - last_activity is touched on each authorized admin request
    - Revocation keeps the row (revoked_at/revoked_by); the expiry sweep
      hard-deletes rows past expires_at
    - user_id is not a foreign key so rows survive a hard-deleted user
    """

    __tablename__ = "admin_sessions"

    id: str = Field(default_factory=lambda: generate_token(32), primary_key=True, max_length=64)

    user_id: UUID = Field(nullable=False, index=True)
    ip_address: Optional[str] = Field(default=None, max_length=45)
    user_agent: Optional[str] = Field(default=None)

    is_active: bool = Field(default=True)
    revoked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    revoked_by: Optional[UUID] = Field(default=None)

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))
    expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    last_activity: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_admin_session_expires_at", "expires_at"),
        Index("idx_admin_session_user_active", "user_id", "is_active"),
    )

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now

    def is_usable(self, now: datetime) -> bool:
        return self.is_active and not self.is_expired(now)

    @classmethod
    def open(
        cls,
        user_id: UUID,
        ip_address: Optional[str],
        user_agent: Optional[str],
        ttl: timedelta,
        now: datetime,
    ) -> "AdminSession":
        return cls(
            user_id=user_id,
            ip_address=ip_address,
            user_agent=user_agent,
            created_at=now,
            last_activity=now,
            expires_at=now + ttl,
        )
