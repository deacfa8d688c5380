from dataclasses import dataclass


@dataclass(frozen=True)
class AuthPolicy:
    """Lifetimes and lockout thresholds used by the authentication use cases"""

    lockout_threshold: int = 5
    lockout_minutes: int = 30
    user_token_ttl_hours: int = 24
    admin_session_ttl_hours: int = 8
    admin_remember_me_ttl_hours: int = 7 * 24
    two_factor_token_ttl_minutes: int = 10
    email_verification_ttl_hours: int = 24
    password_reset_ttl_minutes: int = 60
    totp_issuer: str = "Storefront"
    frontend_url: str = "http://localhost:8000"

    @classmethod
    def from_config(cls, config) -> "AuthPolicy":
        return cls(
            lockout_threshold=config.LOCKOUT_THRESHOLD,
            lockout_minutes=config.LOCKOUT_MINUTES,
            user_token_ttl_hours=config.USER_TOKEN_TTL_HOURS,
            admin_session_ttl_hours=config.ADMIN_SESSION_TTL_HOURS,
            admin_remember_me_ttl_hours=config.ADMIN_REMEMBER_ME_TTL_HOURS,
            two_factor_token_ttl_minutes=config.TWO_FACTOR_TOKEN_TTL_MINUTES,
            email_verification_ttl_hours=config.EMAIL_VERIFICATION_TTL_HOURS,
            password_reset_ttl_minutes=config.PASSWORD_RESET_TTL_MINUTES,
            totp_issuer=config.TOTP_ISSUER,
            frontend_url=config.FRONTEND_URL,
        )
