"""
Identity Domain Enums

All enumeration types used across domain entities.
"""

from enum import Enum


class UserRole(str, Enum):
    """Authorization axis: ordinary customer or administrator"""

    user = "user"
    admin = "admin"


class UserStatus(str, Enum):
    """Lifecycle axis: gates login independently of role"""

    pending_email_verification = "pending_email_verification"
    pending_admin_approval = "pending_admin_approval"
    active = "active"
    inactive = "inactive"


class PendingUserStatus(str, Enum):
    """Staged registration status"""

    pending_email_verification = "pending_email_verification"
    pending_admin_approval = "pending_admin_approval"
    rejected = "rejected"


class SecurityEventType(str, Enum):
    """Event types written to the security audit log"""

    registration = "registration"
    email_verified = "email_verified"
    login_success = "login_success"
    login_failure = "login_failure"
    account_locked = "account_locked"
    two_factor_success = "two_factor_success"
    two_factor_failure = "two_factor_failure"
    two_factor_setup = "two_factor_setup"
    two_factor_enabled = "two_factor_enabled"
    two_factor_disabled = "two_factor_disabled"
    logout = "logout"
    access_denied = "access_denied"
    admin_action = "admin_action"
    user_approved = "user_approved"
    user_rejected = "user_rejected"
    user_blocked = "user_blocked"
    user_unblocked = "user_unblocked"
    user_deleted = "user_deleted"
    account_deleted = "account_deleted"
    role_change = "role_change"
    session_revoked = "session_revoked"
    password_reset_requested = "password_reset_requested"
    password_reset = "password_reset"
    rate_limit_exceeded = "rate_limit_exceeded"
    suspicious_activity = "suspicious_activity"


class SecurityOutcome(str, Enum):
    """Outcome recorded alongside each security event"""

    success = "success"
    failure = "failure"
    pending_2fa = "pending_2fa"
    locked = "locked"
    denied = "denied"
    alert = "alert"
