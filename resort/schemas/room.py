from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from resort.models import Room, RoomCategory
from resort.domain.pricing import effective_price, has_active_discount
from resort.schemas.common import Money
from resort.utils.dates import to_naive_utc


class SeasonalDiscount(BaseModel):
    is_active: bool = False
    percentage: Money = Field(default=Decimal("0"), ge=0, le=100)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v: Optional[datetime]):
        return to_naive_utc(v) if v else v


class RoomBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(min_length=1, max_length=2000)
    price: Money = Field(ge=0)
    total_rooms: int = Field(ge=1)
    max_guests: int = Field(ge=1)
    category: RoomCategory = RoomCategory.VILLA
    amenities: list[str] = []
    images: list[str] = Field(min_length=1)
    is_active: bool = True


class RoomCreate(RoomBase):
    seasonal_discount: Optional[SeasonalDiscount] = None


class RoomUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, min_length=1, max_length=2000)
    price: Optional[Decimal] = Field(default=None, ge=0)
    total_rooms: Optional[int] = Field(default=None, ge=1)
    max_guests: Optional[int] = Field(default=None, ge=1)
    category: Optional[RoomCategory] = None
    amenities: Optional[list[str]] = None
    images: Optional[list[str]] = Field(default=None, min_length=1)
    is_active: Optional[bool] = None
    seasonal_discount: Optional[SeasonalDiscount] = None


class RoomSummary(BaseModel):
    id: int
    name: str
    price: Money
    category: RoomCategory
    images: list[str] = []
    amenities: list[str] = []

    model_config = ConfigDict(from_attributes=True)


class RoomOut(RoomBase):
    id: int
    images: list[str] = []
    seasonal_discount: SeasonalDiscount
    effective_price: Money
    has_active_discount: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_room(cls, room: Room, now: datetime) -> "RoomOut":
        """Evaluates the discount-dependent fields at `now`"""
        return cls(
            id=room.id,
            name=room.name,
            description=room.description,
            price=room.price,
            total_rooms=room.total_rooms,
            max_guests=room.max_guests,
            category=room.category,
            amenities=room.amenities or [],
            images=room.images or [],
            is_active=room.is_active,
            seasonal_discount=SeasonalDiscount(
                is_active=room.discount_active,
                percentage=room.discount_percentage or Decimal("0"),
                start_date=room.discount_start,
                end_date=room.discount_end,
            ),
            effective_price=effective_price(room, now),
            has_active_discount=has_active_discount(room, now),
            created_at=room.created_at,
            updated_at=room.updated_at,
        )
