"""
SecurityLogEntry Entity

Append-only record of security-relevant events.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlmodel import Column, DateTime, Field, Index, JSON, SQLModel

from src.domain.base import utc_now


class SecurityLogEntry(SQLModel, table=True):
    """
    SecurityLogEntry entity - immutable audit fact.

    Business Rules:
    - Never updated or deleted by normal operation
    - user_id is null for unauthenticated failures and survives user deletion
    - Sole input to the suspicious activity monitor (counted per IP and window)
    """

    __tablename__ = "security_logs"

    id: Optional[int] = Field(default=None, primary_key=True)

    user_id: Optional[UUID] = Field(default=None, index=True)
    event_type: str = Field(max_length=100, index=True)
    outcome: str = Field(max_length=50)
    ip_address: Optional[str] = Field(default=None, max_length=45, index=True)
    user_agent: Optional[str] = Field(default=None)
    details: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_security_log_created_at", "created_at"),
        Index("idx_security_log_ip_event_created", "ip_address", "event_type", "created_at"),
    )
