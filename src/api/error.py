from typing import Dict, Optional

from fastapi import status
from libs.result import Error


class ClientError(Exception):
    def __init__(
        self,
        base_error: Error,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.base_error = base_error
        self.status_code = status_code
        self.headers = headers
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)


# Use-case error code -> HTTP status
ERROR_STATUS_CODES = {
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "WEAK_PASSWORD": status.HTTP_400_BAD_REQUEST,
    "EMAIL_ALREADY_EXISTS": status.HTTP_400_BAD_REQUEST,
    "TAX_ID_ALREADY_EXISTS": status.HTTP_400_BAD_REQUEST,
    "INVALID_TOKEN": status.HTTP_400_BAD_REQUEST,
    "INVALID_ROLE": status.HTTP_400_BAD_REQUEST,
    "CANNOT_TARGET_SELF": status.HTTP_400_BAD_REQUEST,
    "EMAIL_NOT_VERIFIED": status.HTTP_400_BAD_REQUEST,
    "INVALID_STATE": status.HTTP_400_BAD_REQUEST,
    "TWO_FACTOR_ALREADY_ENABLED": status.HTTP_400_BAD_REQUEST,
    "TWO_FACTOR_NOT_PENDING": status.HTTP_400_BAD_REQUEST,
    "TWO_FACTOR_NOT_ENABLED": status.HTTP_400_BAD_REQUEST,
    "INVALID_CREDENTIALS": status.HTTP_401_UNAUTHORIZED,
    "INVALID_TWO_FACTOR": status.HTTP_401_UNAUTHORIZED,
    "UNAUTHORIZED": status.HTTP_401_UNAUTHORIZED,
    "ACCOUNT_NOT_ACTIVATED": status.HTTP_403_FORBIDDEN,
    "ACCOUNT_PENDING_APPROVAL": status.HTTP_403_FORBIDDEN,
    "ACCOUNT_BLOCKED": status.HTTP_403_FORBIDDEN,
    "FORBIDDEN": status.HTTP_403_FORBIDDEN,
    "USER_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "SESSION_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "PENDING_USER_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "ACCOUNT_LOCKED": status.HTTP_423_LOCKED,
    "RATE_LIMITED": status.HTTP_429_TOO_MANY_REQUESTS,
}


def to_http_error(error: Error) -> Exception:
    """Map a use-case Error to ClientError (known codes) or ServerError."""
    status_code = ERROR_STATUS_CODES.get(error.code)
    if status_code is None:
        return ServerError(error)

    headers = None
    if status_code == status.HTTP_429_TOO_MANY_REQUESTS and error.details:
        headers = {"Retry-After": str(error.details.get("retry_after", 1))}
    return ClientError(error, status_code=status_code, headers=headers)
