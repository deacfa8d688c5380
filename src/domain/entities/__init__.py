"""
Identity Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    UserRole,
    UserStatus,
    PendingUserStatus,
    SecurityEventType,
    SecurityOutcome,
)

# Export all entities
from .user import User
from .session import AdminSession
from .security_log import SecurityLogEntry
from .pending_user import PendingUser
from .password_reset_token import PasswordResetToken

__all__ = [
    # Enums
    "UserRole",
    "UserStatus",
    "PendingUserStatus",
    "SecurityEventType",
    "SecurityOutcome",
    # Entities
    "User",
    "AdminSession",
    "SecurityLogEntry",
    "PendingUser",
    "PasswordResetToken",
]
