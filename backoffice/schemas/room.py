from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from backoffice.models import RoomStatus


def _normalize_status(value):
    if isinstance(value, str):
        return value.strip().lower()
    return value


class RoomTypeOut(BaseModel):
    id: int
    name: str
    price_per_night: float
    capacity_adults: int
    capacity_children: int

    model_config = ConfigDict(from_attributes=True)


class RoomOut(BaseModel):
    room_id: int
    room_number: str
    status: RoomStatus
    room_type_id: int
    type_name: str
    capacity_adults: int
    capacity_children: int
    price_per_night: float


class RoomCreate(BaseModel):
    room_number: str = Field(min_length=1, max_length=20)
    room_type: Optional[str] = Field(default=None, max_length=100)
    room_type_id: Optional[int] = None
    price_per_night: Optional[Decimal] = Field(default=None, ge=0)
    capacity_adults: Optional[int] = Field(default=None, ge=0)
    capacity_children: Optional[int] = Field(default=None, ge=0)
    status: Optional[RoomStatus] = None

    _status = field_validator("status", mode="before")(_normalize_status)

    @field_validator("room_number")
    @classmethod
    def strip_room_number(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Room number is required")
        return v


class RoomUpdate(BaseModel):
    room_id: int
    room_number: Optional[str] = Field(default=None, min_length=1, max_length=20)
    room_type_id: Optional[int] = None
    type_name: Optional[str] = Field(default=None, max_length=100)
    price_per_night: Optional[Decimal] = Field(default=None, ge=0)
    capacity_adults: Optional[int] = Field(default=None, ge=0)
    capacity_children: Optional[int] = Field(default=None, ge=0)
    status: Optional[RoomStatus] = None

    _status = field_validator("status", mode="before")(_normalize_status)


class RoomDelete(BaseModel):
    # The console sends any one of these shapes
    room_id: Optional[int] = None
    room_ids: Optional[list[int]] = None
    ids: Optional[list[int]] = None

    def resolved_ids(self) -> list[int]:
        if self.room_id:
            return [self.room_id]
        return list(self.room_ids or self.ids or [])
