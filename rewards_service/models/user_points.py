import uuid

from sqlalchemy import Column, String, Integer, TIMESTAMP, CheckConstraint, Uuid
from sqlalchemy.sql import func

from rewards_service.db import Base


class UserPoints(Base):
    __tablename__ = "user_points"
    __table_args__ = (
        CheckConstraint("total_points >= 0", name="ck_user_points_total_non_negative"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    user_id = Column(String(100), nullable=False, unique=True)

    total_points = Column(Integer, nullable=False, default=0)

    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())
