"""Booking domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class GeoPoint(BaseModel):
    """GeoJSON point, coordinates are [longitude, latitude]"""

    type: str = "Point"
    coordinates: list[float] = Field(min_length=2, max_length=2)

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        if v != "Point":
            raise ValueError("only Point locations are supported")
        return v

    @property
    def longitude(self) -> float:
        return self.coordinates[0]

    @property
    def latitude(self) -> float:
        return self.coordinates[1]


class BookingCreate(BaseModel):
    """Schema for requesting a booking. booking_time may carry a UTC offset; naive times are UTC."""

    carwash_id: str
    car_id: str
    service_ids: list[str] = Field(default_factory=list)
    booking_time: Optional[datetime] = None
    booking_type: str = "slot_booking"  # slot_booking, home_service
    user_location: Optional[GeoPoint] = None
    address_note: Optional[str] = None
    notes: Optional[str] = None


class BookingUpdate(BaseModel):
    """Fields a customer may change on their own booking"""

    car_id: Optional[str] = None
    service_ids: Optional[list[str]] = None
    notes: Optional[str] = None
    address_note: Optional[str] = None


class BookingStatusUpdate(BaseModel):
    status: str


class BookingResponse(BaseModel):
    id: str
    user_id: str
    car_id: str
    carwash_id: str
    service_ids: list[str] = []
    booking_time: datetime
    booking_type: str
    user_location: Optional[dict] = None
    address_note: Optional[str] = None
    notes: Optional[str] = None
    status: str
    queue_number: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
