from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class CurrentUser(BaseModel):
    """Identity attached to an authenticated request"""

    id: UUID
    email: str
    role: str
    session_id: Optional[str] = None
    token: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
