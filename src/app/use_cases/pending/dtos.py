from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from src.domain.entities import PendingUser


class PendingUserInfo(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    company_name: Optional[str] = None
    tax_id: Optional[str] = None
    company_country: Optional[str] = None
    status: str
    created_at: datetime

    @classmethod
    def from_pending(cls, pending: PendingUser) -> "PendingUserInfo":
        return cls(
            id=str(pending.id),
            email=pending.email,
            first_name=pending.first_name,
            last_name=pending.last_name,
            company_name=pending.company_name,
            tax_id=pending.tax_id,
            company_country=pending.company_country,
            status=pending.status.value,
            created_at=pending.created_at,
        )


class PendingUserListResponse(BaseModel):
    items: List[PendingUserInfo]
