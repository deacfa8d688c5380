"""
Authentication Use Cases

All authentication-related business logic.
"""

from .register_use_case import RegisterUseCase
from .verify_email_use_case import VerifyEmailUseCase
from .resend_verification_use_case import ResendVerificationUseCase
from .login_use_case import LoginUseCase
from .verify_two_factor_use_case import VerifyTwoFactorUseCase
from .two_factor_use_case import TwoFactorEnrollmentUseCase
from .logout_use_case import LogoutUseCase
from .request_password_reset_use_case import RequestPasswordResetUseCase
from .confirm_password_reset_use_case import ConfirmPasswordResetUseCase
from .dtos import (
    RegisterCommand,
    RegisterResponse,
    MessageResponse,
    LoginResponse,
    TwoFactorSetupResponse,
    TwoFactorStatusResponse,
)

__all__ = [
    # Use Cases
    "RegisterUseCase",
    "VerifyEmailUseCase",
    "ResendVerificationUseCase",
    "LoginUseCase",
    "VerifyTwoFactorUseCase",
    "TwoFactorEnrollmentUseCase",
    "LogoutUseCase",
    "RequestPasswordResetUseCase",
    "ConfirmPasswordResetUseCase",
    # DTOs - Commands
    "RegisterCommand",
    # DTOs - Responses
    "RegisterResponse",
    "MessageResponse",
    "LoginResponse",
    "TwoFactorSetupResponse",
    "TwoFactorStatusResponse",
]
