import uuid

from sqlalchemy import Column, Integer, String, TIMESTAMP, ForeignKey, Uuid
from sqlalchemy.sql import func

from rewards_service.db import Base
from rewards_service.utils.time_utils import utcnow


class PointMovement(Base):
    __tablename__ = "point_movements"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    user_id = Column(String(100), nullable=False, index=True)

    points = Column(Integer, nullable=False)
    type = Column(String(20), nullable=False)  # SPEND / EARN / ADJUST

    description = Column(String(255))

    source_redemption_id = Column(Uuid(as_uuid=True), ForeignKey("redemptions.id"), nullable=True)

    created_at = Column(TIMESTAMP, nullable=False, default=utcnow, server_default=func.now())
