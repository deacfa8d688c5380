"""
User Use Case DTOs

Profile projections never carry the password hash, tokens or TOTP secrets.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from src.domain.entities import User


class UserProfile(BaseModel):
    """Non-sensitive view of a user"""

    id: str
    email: str
    first_name: str
    last_name: str
    company_name: Optional[str] = None
    tax_id: Optional[str] = None
    phone: Optional[str] = None
    company_country: Optional[str] = None
    street: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    role: str
    status: str
    email_verified: bool
    two_factor_enabled: bool
    created_at: datetime
    last_login_at: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: User) -> "UserProfile":
        return cls(
            id=str(user.id),
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            company_name=user.company_name,
            tax_id=user.tax_id,
            phone=user.phone,
            company_country=user.company_country,
            street=user.street,
            postal_code=user.postal_code,
            city=user.city,
            role=user.role.value,
            status=user.status.value,
            email_verified=user.email_verified,
            two_factor_enabled=user.has_two_factor,
            created_at=user.created_at,
            last_login_at=user.last_login_at,
        )


class UserListResponse(BaseModel):
    items: List[UserProfile]
    total: int
    limit: int
    offset: int


class UserActionResponse(BaseModel):
    """Response for admin lifecycle actions"""

    status: str
    message: str
    user: Optional[UserProfile] = None
