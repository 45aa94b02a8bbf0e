from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from backoffice.models import BookingStatus


class Guests(BaseModel):
    adults: int = Field(default=1, ge=0)
    children: int = Field(default=0, ge=0)


class BookingCreate(BaseModel):
    user_id: Optional[int] = None
    room_number: str = Field(min_length=1, max_length=20)
    check_in: date
    check_out: date
    guests: Guests = Guests()
    total_price: Optional[Decimal] = Field(default=None, ge=0)
    is_paid: bool = False
    notes: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("check_out")
    @classmethod
    def validate_dates(cls, v: date, info):
        ci = info.data.get("check_in")
        if ci and v <= ci:
            raise ValueError("check_out must be after check_in")
        return v


class AvailabilityCheck(BaseModel):
    room_number: Optional[str] = None
    room_type_id: Optional[int] = None
    check_in: date
    check_out: date

    @model_validator(mode="after")
    def validate_request(self):
        if self.check_out <= self.check_in:
            raise ValueError("check_out must be after check_in")
        if not self.room_number and not self.room_type_id:
            raise ValueError("room_number or room_type_id is required")
        return self


class StatusUpdate(BaseModel):
    # Optional here so a missing field yields the endpoint's own 400 message
    booking_id: Optional[int] = None
    action: Optional[str] = None
    when: Optional[datetime] = Field(default=None, alias="datetime")


class BookingOut(BaseModel):
    booking_id: int
    user_id: Optional[int] = None
    room_type_id: int
    room_number: str
    check_in: date
    check_out: date
    adults: int
    children: int
    total_price: float
    payment_status: str
    status: BookingStatus


class AdminBookingOut(BaseModel):
    booking_id: int
    guest_name: str
    email: str
    room_type: str
    room_number: str
    check_in: date
    check_out: date
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    guests: str
    total_price: float
    payment_status: str
    booking_status: BookingStatus
    created_at: datetime


class CalendarBookingOut(BaseModel):
    id: int
    room_number: str
    checkIn: date
    checkOut: date
    guest: str
    source: str
    status: BookingStatus


class BookingLogOut(BaseModel):
    log_id: int = Field(validation_alias="id")
    booking_id: int
    guest_name: str
    email: str
    payment_status: str
    status: str
    room: str
    room_number: str
    room_type: str
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    last_action: str
    action_timestamp: datetime
    performed_by: str

    model_config = ConfigDict(from_attributes=True)
