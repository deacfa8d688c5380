"""
User Management Use Cases

Profile access and administrative lifecycle transitions.
"""

from .approve_user_use_case import ApproveUserUseCase
from .block_user_use_case import BlockUserUseCase, UnblockUserUseCase
from .change_role_use_case import ChangeRoleUseCase
from .delete_account_use_case import DeleteAccountUseCase
from .delete_user_use_case import DeleteUserUseCase
from .dtos import UserActionResponse, UserListResponse, UserProfile
from .get_profile_use_case import GetProfileUseCase
from .list_users_use_case import ListUsersUseCase
from .reject_user_use_case import RejectUserUseCase

__all__ = [
    # Use Cases
    "ApproveUserUseCase",
    "BlockUserUseCase",
    "UnblockUserUseCase",
    "ChangeRoleUseCase",
    "DeleteAccountUseCase",
    "DeleteUserUseCase",
    "GetProfileUseCase",
    "ListUsersUseCase",
    "RejectUserUseCase",
    # DTOs
    "UserActionResponse",
    "UserListResponse",
    "UserProfile",
]
