from .dtos import AdminSessionInfo, SessionListResponse
from .revoke_sessions_use_case import RevokeSessionsUseCase

__all__ = ["RevokeSessionsUseCase", "AdminSessionInfo", "SessionListResponse"]
