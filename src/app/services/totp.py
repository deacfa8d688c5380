import pyotp

# Accepted clock skew, in 30-second steps on either side
TOTP_VALID_WINDOW = 2


def new_secret() -> str:
    return pyotp.random_base32()


def provisioning_uri(secret: str, account_name: str, issuer: str) -> str:
    """otpauth:// URI rendered as a QR code by authenticator apps"""
    return pyotp.TOTP(secret).provisioning_uri(name=account_name, issuer_name=issuer)


def verify_code(secret: str, code: str) -> bool:
    if not secret or not code:
        return False
    return pyotp.TOTP(secret).verify(code.strip(), valid_window=TOTP_VALID_WINDOW)
