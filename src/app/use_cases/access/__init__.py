"""
Access Control Use Cases

Request-time authentication and the admin authorization gate.
"""

from .authenticate_use_case import AuthenticateUserUseCase, AuthorizeAdminUseCase
from .dtos import CurrentUser
from .record_rate_limit_use_case import RecordRateLimitUseCase

__all__ = [
    "AuthenticateUserUseCase",
    "AuthorizeAdminUseCase",
    "RecordRateLimitUseCase",
    "CurrentUser",
]
