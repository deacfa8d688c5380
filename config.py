import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.environ.get("APP_CONFIG_FILE", os.path.join(ROOT_PATH, "env.yaml"))

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


def _setting(key, default=None):
    # Environment variables win over env.yaml so secrets stay out of files
    if key in os.environ:
        return os.environ[key]
    return data.get(key, default)


DEFAULT_RATE_LIMITS = {
    "login": {"max": 5, "window_seconds": 15 * 60},
    "register": {"max": 3, "window_seconds": 60 * 60},
    "password_reset": {"max": 3, "window_seconds": 60 * 60},
    "api": {"max": 100, "window_seconds": 60},
    "admin_action": {"max": 60, "window_seconds": 60},
}

DEFAULT_SUSPICIOUS_PATTERNS = [
    {
        "name": "failed_login_burst",
        "event_types": ["login_failure", "two_factor_failure", "rate_limit_exceeded"],
        "max_events": 10,
        "window_seconds": 60 * 60,
    },
    {
        "name": "admin_action_burst",
        "event_types": ["admin_action"],
        "max_events": 100,
        "window_seconds": 5 * 60,
    },
]


class ApplicationConfig:
    APP_ENV = _setting("APP_ENV", "development")
    DB_URI = _setting("DB_URI", "sqlite+aiosqlite:///./identity.db")
    REDIS_URL = _setting("REDIS_URL", "redis://localhost:6379/0")
    CACHE_BACKEND = _setting("CACHE_BACKEND", "memory")
    API_PREFIX = data.get("API_PREFIX", "")
    API_PORT = int(_setting("API_PORT", 8000))
    API_HOST = _setting("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = _setting("LOG_LEVEL", "INFO")

    JWT_SECRET = _setting("JWT_SECRET", "")
    USER_TOKEN_TTL_HOURS = int(data.get("USER_TOKEN_TTL_HOURS", 24))
    ADMIN_SESSION_TTL_HOURS = int(data.get("ADMIN_SESSION_TTL_HOURS", 8))
    ADMIN_REMEMBER_ME_TTL_HOURS = int(data.get("ADMIN_REMEMBER_ME_TTL_HOURS", 7 * 24))
    TWO_FACTOR_TOKEN_TTL_MINUTES = int(data.get("TWO_FACTOR_TOKEN_TTL_MINUTES", 10))
    TOTP_ISSUER = data.get("TOTP_ISSUER", "Storefront")

    LOCKOUT_THRESHOLD = int(data.get("LOCKOUT_THRESHOLD", 5))
    LOCKOUT_MINUTES = int(data.get("LOCKOUT_MINUTES", 30))
    EMAIL_VERIFICATION_TTL_HOURS = int(data.get("EMAIL_VERIFICATION_TTL_HOURS", 24))
    PASSWORD_RESET_TTL_MINUTES = int(data.get("PASSWORD_RESET_TTL_MINUTES", 60))

    SESSION_SWEEP_INTERVAL_SECONDS = int(data.get("SESSION_SWEEP_INTERVAL_SECONDS", 3600))

    RATE_LIMIT_ENABLED = bool(data.get("RATE_LIMIT_ENABLED", True))
    RATE_LIMITS = {**DEFAULT_RATE_LIMITS, **data.get("RATE_LIMITS", {})}
    SUSPICIOUS_PATTERNS = data.get("SUSPICIOUS_PATTERNS", DEFAULT_SUSPICIOUS_PATTERNS)

    SMTP_HOST = _setting("SMTP_HOST")
    SMTP_PORT = int(_setting("SMTP_PORT", 587))
    SMTP_USER = _setting("SMTP_USER")
    SMTP_PASSWORD = _setting("SMTP_PASSWORD")
    SMTP_USE_TLS = bool(data.get("SMTP_USE_TLS", True))
    MAIL_FROM = _setting("MAIL_FROM")
    FRONTEND_URL = _setting("FRONTEND_URL", "http://localhost:8000")

    @classmethod
    def validate(cls):
        """Fail fast on settings the service cannot run without."""
        if not cls.JWT_SECRET:
            raise RuntimeError("JWT_SECRET must be configured before the API starts")
        if cls.CACHE_BACKEND not in ("memory", "redis"):
            raise RuntimeError(f"Unsupported CACHE_BACKEND: {cls.CACHE_BACKEND}")

    @classmethod
    def is_test(cls) -> bool:
        return cls.APP_ENV == "test"
