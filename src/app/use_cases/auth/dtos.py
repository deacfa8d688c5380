"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for auth domain.
Provides type safety and clear contracts between layers.
"""

from typing import Optional

from pydantic import BaseModel, EmailStr

from src.app.use_cases.users.dtos import UserProfile


# ============================================================================
# Command DTOs
# ============================================================================


class RegisterCommand(BaseModel):
    """Registration input; shape only, business rules are checked in the use case"""

    email: EmailStr
    password: str
    first_name: str
    last_name: str
    company_name: Optional[str] = None
    tax_id: Optional[str] = None
    phone: Optional[str] = None
    company_country: Optional[str] = None
    street: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None

    def profile_fields(self) -> dict:
        return self.model_dump(exclude={"email", "password"})


# ============================================================================
# Response DTOs
# ============================================================================


class MessageResponse(BaseModel):
    """Generic status/message response"""

    status: str
    message: str


class RegisterResponse(BaseModel):
    """Response for registration use case"""

    user: UserProfile
    message: str


class LoginResponse(BaseModel):
    """
    Response for login and second-factor verification.

    When requires_2fa is true only temp_token is set.
    """

    requires_2fa: bool = False
    temp_token: Optional[str] = None
    token: Optional[str] = None
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    session_id: Optional[str] = None
    user: Optional[UserProfile] = None


class TwoFactorSetupResponse(BaseModel):
    secret: str
    provisioning_uri: str


class TwoFactorStatusResponse(BaseModel):
    enabled: bool
    pending_setup: bool
