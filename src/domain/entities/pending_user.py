"""
PendingUser Entity

Staged registration awaiting email verification and administrator acceptance.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, SQLModel

from src.domain.base import utc_now

from .enums import PendingUserStatus


class PendingUser(SQLModel, table=True):
    """
    PendingUser entity - alternate registration path.

    Business Rules:
    - Password is stored already hashed; acceptance copies the hash as-is
    - Accepted rows are converted into a User and deleted
    - Rejected rows are kept with status=rejected
    """

    __tablename__ = "pending_users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str = Field(max_length=60)

    first_name: str = Field(max_length=50)
    last_name: str = Field(max_length=50)
    company_name: Optional[str] = Field(default=None, max_length=100)
    tax_id: Optional[str] = Field(default=None, max_length=20)
    phone: Optional[str] = Field(default=None, max_length=20)
    company_country: Optional[str] = Field(default=None, max_length=2)
    street: Optional[str] = Field(default=None, max_length=100)
    postal_code: Optional[str] = Field(default=None, max_length=10)
    city: Optional[str] = Field(default=None, max_length=50)

    email_verification_token: Optional[str] = Field(default=None, index=True, max_length=64)
    email_verification_expires_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )

    status: PendingUserStatus = Field(default=PendingUserStatus.pending_email_verification)

    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))
