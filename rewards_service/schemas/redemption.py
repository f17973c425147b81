from datetime import datetime
from enum import Enum
from typing import Optional

from uuid import UUID

from pydantic import BaseModel

from rewards_service.schemas.reward import RewardOut


class RedemptionStatus(str, Enum):
    ACTIVE = "active"
    USED = "used"
    EXPIRED = "expired"


class RedemptionOut(BaseModel):
    id: UUID
    user_id: str
    reward_id: UUID

    points_spent: int
    redemption_code: str

    redeemed_at: datetime
    expires_at: datetime

    is_used: bool
    used_at: Optional[datetime] = None

    status: RedemptionStatus

    reward: Optional[RewardOut] = None

    class Config:
        from_attributes = True


class RedemptionDetailOut(RedemptionOut):
    used_by: Optional[str] = None
    created_at: Optional[datetime] = None


class RedemptionIssuedOut(BaseModel):
    redemption_id: UUID
    redemption_code: str
    expires_at: datetime
    points_spent: int
    points_balance: int
    reward: RewardOut
