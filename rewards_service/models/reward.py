import uuid
from datetime import datetime

from sqlalchemy import Column, String, Integer, Boolean, TIMESTAMP, CheckConstraint, Uuid
from sqlalchemy.sql import func

from rewards_service.db import Base
from rewards_service.utils.time_utils import utcnow


UNLIMITED_QUANTITY = -1

CATEGORIES = ("discount", "content", "certificate", "merchandise", "other")

# Ordered by precedence: the first matching state wins.
AVAILABILITY_STATES = ("inactive", "scheduled", "expired", "out_of_stock", "available")


class Reward(Base):
    __tablename__ = "rewards"
    __table_args__ = (
        CheckConstraint("points_cost > 0", name="ck_rewards_points_cost_positive"),
        CheckConstraint("quantity >= -1", name="ck_rewards_quantity_min"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    name = Column(String(100), nullable=False, unique=True)
    description = Column(String(1000), nullable=False)

    # discount | content | certificate | merchandise | other
    category = Column(String(20), nullable=False, default="other")

    points_cost = Column(Integer, nullable=False)

    image_url = Column(String(500), nullable=True)

    # static code handed to the redeemer (partner coupon etc.)
    code = Column(String(100), nullable=True)

    # NULL bounds are open-ended
    valid_from = Column(TIMESTAMP, nullable=True)
    valid_until = Column(TIMESTAMP, nullable=True)

    # lifetime of issued codes, in days; NULL = service default
    validity_days = Column(Integer, nullable=True)

    # -1 = unlimited
    quantity = Column(Integer, nullable=False, default=UNLIMITED_QUANTITY)

    is_active = Column(Boolean, nullable=False, default=True)

    created_by = Column(String(100), nullable=True)

    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    @property
    def is_unlimited(self) -> bool:
        return self.quantity == UNLIMITED_QUANTITY

    def availability_at(self, now: datetime) -> str:
        if not self.is_active:
            return "inactive"
        if self.valid_from is not None and now < self.valid_from:
            return "scheduled"
        if self.valid_until is not None and now > self.valid_until:
            return "expired"
        if not self.is_unlimited and (self.quantity or 0) <= 0:
            return "out_of_stock"
        return "available"

    @property
    def availability(self) -> str:
        return self.availability_at(utcnow())
