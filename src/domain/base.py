import secrets
from datetime import UTC, datetime


def utc_now() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns are stored."""
    return datetime.now(UTC).replace(tzinfo=None)


def generate_token(nbytes: int = 32) -> str:
    """Cryptographically random hex token (2 * nbytes characters)."""
    return secrets.token_hex(nbytes)
