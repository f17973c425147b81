from datetime import datetime
from typing import Optional

from uuid import UUID

from pydantic import BaseModel


class WalletOut(BaseModel):
    user_id: str
    points_balance: int


class PointMovementOut(BaseModel):
    id: UUID
    user_id: str

    points: int
    type: str
    description: Optional[str] = None

    source_redemption_id: Optional[UUID] = None

    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
