from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from src.domain.entities import AdminSession


class AdminSessionInfo(BaseModel):
    id: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime
    expires_at: datetime
    last_activity: datetime
    current: bool = False

    @classmethod
    def from_session(cls, session: AdminSession, current_session_id: Optional[str]) -> "AdminSessionInfo":
        return cls(
            id=session.id,
            ip_address=session.ip_address,
            user_agent=session.user_agent,
            created_at=session.created_at,
            expires_at=session.expires_at,
            last_activity=session.last_activity,
            current=session.id == current_session_id,
        )


class SessionListResponse(BaseModel):
    sessions: List[AdminSessionInfo]
