"""
Staged Registration Use Cases

Alternate registration path: a PendingUser is verified by email and then
accepted (converted into an active User) or rejected by an administrator.
"""

from .dtos import PendingUserInfo, PendingUserListResponse
from .pending_user_use_cases import (
    AcceptPendingUserUseCase,
    ListPendingUsersUseCase,
    RejectPendingUserUseCase,
    SubmitStagedRegistrationUseCase,
)

__all__ = [
    "SubmitStagedRegistrationUseCase",
    "AcceptPendingUserUseCase",
    "RejectPendingUserUseCase",
    "ListPendingUsersUseCase",
    "PendingUserInfo",
    "PendingUserListResponse",
]
