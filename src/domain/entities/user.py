"""
User Entity

Identity record for storefront customers and administrators.
"""

import secrets
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID, uuid4

import bcrypt
from sqlmodel import Column, DateTime, Field, Index, SQLModel

from src.domain.base import generate_token, utc_now

from .enums import UserRole, UserStatus

BCRYPT_ROUNDS = 12


def hash_password(plain_password: str) -> str:
    hashed = bcrypt.hashpw(plain_password.encode("utf-8"), bcrypt.gensalt(BCRYPT_ROUNDS))
    return hashed.decode("utf-8")


def check_password(plain_password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


class User(SQLModel, table=True):
    """
    User entity - root of the identity aggregate.

    Business Rules:
    - Email is unique and stored lower-cased
    - Status gates login, role gates authorization; the two axes are independent
    - Password is only ever set through set_password() (bcrypt cost factor 12)
    - A lock expiry in the future makes the account authenticationally inert
    - The verification token is single-use and cleared on consumption
    - Two-factor secret is promoted from the pending slot only after confirmation
    """

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(unique=True, index=True, max_length=255)
    password_hash: str = Field(max_length=60)

    first_name: str = Field(max_length=50)
    last_name: str = Field(max_length=50)
    company_name: Optional[str] = Field(default=None, max_length=100)
    tax_id: Optional[str] = Field(default=None, index=True, max_length=20)
    phone: Optional[str] = Field(default=None, max_length=20)
    company_country: Optional[str] = Field(default=None, max_length=2)
    street: Optional[str] = Field(default=None, max_length=100)
    postal_code: Optional[str] = Field(default=None, max_length=10)
    city: Optional[str] = Field(default=None, max_length=50)

    role: UserRole = Field(default=UserRole.user)
    status: UserStatus = Field(default=UserStatus.pending_email_verification)

    # Email verification
    email_verified: bool = Field(default=False)
    email_verification_token: Optional[str] = Field(
        default=None, index=True, max_length=64
    )
    email_verification_expires_at: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )

    # Brute-force lockout
    failed_login_attempts: int = Field(default=0)
    account_locked_until: Optional[datetime] = Field(
        default=None, sa_column=Column(DateTime)
    )

    # Second factor
    two_factor_secret: Optional[str] = Field(default=None, max_length=64)
    pending_two_factor_secret: Optional[str] = Field(default=None, max_length=64)

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))
    updated_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))
    last_login_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))

    __table_args__ = (
        Index("idx_user_status_role", "status", "role"),
        Index("idx_user_email_verified_status", "email_verified", "status"),
        Index("idx_user_account_locked_until", "account_locked_until"),
    )

    def set_password(self, plain_password: str) -> None:
        self.password_hash = hash_password(plain_password)

    def verify_password(self, plain_password: str) -> bool:
        return check_password(plain_password, self.password_hash)

    def is_locked(self, now: datetime) -> bool:
        return self.account_locked_until is not None and self.account_locked_until > now

    def has_expired_lock(self, now: datetime) -> bool:
        return self.account_locked_until is not None and self.account_locked_until <= now

    def reset_failed_logins(self) -> None:
        self.failed_login_attempts = 0
        self.account_locked_until = None

    def issue_verification_token(self, now: datetime, ttl: timedelta) -> str:
        token = generate_token(32)
        self.email_verification_token = token
        self.email_verification_expires_at = now + ttl
        return token

    def mark_email_verified(self) -> None:
        self.email_verified = True
        if self.status == UserStatus.pending_email_verification:
            self.status = UserStatus.pending_admin_approval
        self.email_verification_token = None
        self.email_verification_expires_at = None

    @property
    def has_two_factor(self) -> bool:
        return bool(self.two_factor_secret)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def anonymize(self) -> None:
        """Scrub personal data and deactivate; the row is kept for referential history."""
        self.email = f"deleted-{self.id}@anonymized.invalid"
        self.first_name = "Deleted"
        self.last_name = "User"
        self.company_name = None
        self.tax_id = None
        self.phone = None
        self.street = None
        self.postal_code = None
        self.city = None
        self.email_verification_token = None
        self.email_verification_expires_at = None
        self.two_factor_secret = None
        self.pending_two_factor_secret = None
        self.status = UserStatus.inactive
        # Unusable credential: nobody knows the plaintext
        self.set_password(secrets.token_urlsafe(32))
