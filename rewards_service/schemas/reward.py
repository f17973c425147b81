from datetime import datetime
from enum import Enum
from typing import Optional

from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from rewards_service.utils.time_utils import to_naive_utc


class RewardCategory(str, Enum):
    DISCOUNT = "discount"
    CONTENT = "content"
    CERTIFICATE = "certificate"
    MERCHANDISE = "merchandise"
    OTHER = "other"


class RewardAvailability(str, Enum):
    AVAILABLE = "available"
    SCHEDULED = "scheduled"
    EXPIRED = "expired"
    OUT_OF_STOCK = "out_of_stock"
    INACTIVE = "inactive"


class RewardCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=1000)
    points_cost: int = Field(gt=0)
    category: RewardCategory = RewardCategory.OTHER
    image_url: Optional[str] = None
    code: Optional[str] = None
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    validity_days: Optional[int] = Field(default=None, gt=0)
    quantity: int = Field(default=-1, ge=-1)
    is_active: bool = True

    @field_validator("valid_from", "valid_until")
    @classmethod
    def _naive_utc(cls, v):
        return to_naive_utc(v)

    @model_validator(mode="after")
    def _window_order(self):
        if self.valid_from and self.valid_until and self.valid_from > self.valid_until:
            raise ValueError("valid_from must not be after valid_until")
        return self


class RewardUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, min_length=1, max_length=1000)
    points_cost: Optional[int] = Field(default=None, gt=0)
    category: Optional[RewardCategory] = None
    image_url: Optional[str] = None
    code: Optional[str] = None
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    validity_days: Optional[int] = Field(default=None, gt=0)
    quantity: Optional[int] = Field(default=None, ge=-1)
    is_active: Optional[bool] = None

    @field_validator("valid_from", "valid_until")
    @classmethod
    def _naive_utc(cls, v):
        return to_naive_utc(v)


class RewardOut(BaseModel):
    id: UUID
    name: str
    description: str
    category: str
    points_cost: int
    image_url: Optional[str] = None
    code: Optional[str] = None
    valid_from: Optional[datetime] = None
    valid_until: Optional[datetime] = None
    validity_days: Optional[int] = None
    quantity: int
    is_active: bool
    availability: str
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
