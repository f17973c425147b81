import uuid
from datetime import datetime

from sqlalchemy import Column, String, Integer, Boolean, TIMESTAMP, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from rewards_service.db import Base
from rewards_service.utils.time_utils import utcnow


class Redemption(Base):
    __tablename__ = "redemptions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    user_id = Column(String(100), nullable=False, index=True)
    reward_id = Column(Uuid(as_uuid=True), ForeignKey("rewards.id"), nullable=False)

    # cost at redemption time; later price changes do not touch it
    points_spent = Column(Integer, nullable=False)

    redemption_code = Column(String(32), nullable=False, unique=True)

    redeemed_at = Column(TIMESTAMP, nullable=False, default=utcnow)
    expires_at = Column(TIMESTAMP, nullable=False)

    is_used = Column(Boolean, nullable=False, default=False)
    used_at = Column(TIMESTAMP, nullable=True)
    used_by = Column(String(100), nullable=True)

    created_at = Column(TIMESTAMP, server_default=func.now())

    reward = relationship("Reward", lazy="joined")

    def status_at(self, now: datetime) -> str:
        # EXPIRED is derived from the clock and never stored.
        if self.is_used:
            return "used"
        if self.expires_at is not None and now > self.expires_at:
            return "expired"
        return "active"

    @property
    def status(self) -> str:
        return self.status_at(utcnow())
