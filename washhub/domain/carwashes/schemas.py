"""Carwash domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import WEEKDAYS, parse_time_of_day


class TimeRange(BaseModel):
    """Opening window for one weekday, "HH:MM" strings"""

    start: str
    end: str

    @field_validator("end")
    @classmethod
    def validate_end_after_start(cls, v, info):
        start = info.data.get("start")
        if start is None:
            return v
        try:
            if parse_time_of_day(v) <= parse_time_of_day(start):
                raise ValueError("end time must be after start time")
        except Exception as e:
            raise ValueError(str(e)) from e
        return v


def _validate_open_hours(v):
    if v is None:
        return v
    for day in v:
        if day not in WEEKDAYS:
            raise ValueError(f"invalid weekday {day!r}, expected one of {', '.join(WEEKDAYS)}")
    return v


class CarwashCreate(BaseModel):
    """Schema for registering a carwash. Coordinates are supplied by the caller."""

    name: str = Field(min_length=2, max_length=100)
    address: str = Field(min_length=5, max_length=200)
    description: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    service_range_minutes: int = 30
    open_hours: dict[str, TimeRange] = Field(default_factory=dict)
    home_service: bool = False
    delivery_radius_km: Optional[int] = None
    max_cars_per_slot: int = Field(default=1, ge=1)
    state: Optional[str] = None
    country: Optional[str] = None
    lga: Optional[str] = None

    @field_validator("open_hours")
    @classmethod
    def validate_open_hours(cls, v):
        return _validate_open_hours(v)


class CarwashUpdate(BaseModel):
    """Fields a business may change on its carwash. Location has its own endpoint."""

    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    address: Optional[str] = Field(default=None, min_length=5, max_length=200)
    description: Optional[str] = None
    open_hours: Optional[dict[str, TimeRange]] = None
    home_service: Optional[bool] = None
    delivery_radius_km: Optional[int] = None
    max_cars_per_slot: Optional[int] = Field(default=None, ge=1)
    state: Optional[str] = None
    country: Optional[str] = None
    lga: Optional[str] = None

    @field_validator("open_hours")
    @classmethod
    def validate_open_hours(cls, v):
        return _validate_open_hours(v)


class LocationUpdate(BaseModel):
    # Ranges are checked by the service so violations surface as ValidationError
    latitude: float
    longitude: float
    service_range_minutes: int
    address: Optional[str] = None


class StatusUpdate(BaseModel):
    is_active: bool


class QueueCountUpdate(BaseModel):
    count: int


class ServiceCreate(BaseModel):
    # Required-field and range checks live in the service layer
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    duration: Optional[int] = None  # minutes
    is_addon: bool = False
    active: bool = True


class ServiceUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = None
    duration: Optional[int] = None
    is_addon: Optional[bool] = None
    active: Optional[bool] = None


class ServiceResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    price: float
    duration: int
    is_addon: bool = False
    active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class CarwashResponse(BaseModel):
    """Schema for carwash response"""

    id: str
    owner_id: str
    name: str
    description: Optional[str] = None
    address: str
    location: Optional[dict] = None
    has_location: bool
    service_range_minutes: int
    is_active: bool
    has_onboarded: bool
    home_service: bool
    delivery_radius_km: Optional[int] = None
    max_cars_per_slot: int
    queue_count: int
    rating: float
    services: list[ServiceResponse] = []
    open_hours: dict = {}
    photo_gallery: list[str] = []
    state: Optional[str] = None
    country: Optional[str] = None
    lga: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class NearbyCarwash(BaseModel):
    id: str
    name: str
    address: str
    location: Optional[dict] = None
    rating: float
    queue_count: int
    is_active: bool
    home_service: bool
    photo: str = ""
    state: Optional[str] = None
    lga: Optional[str] = None
    country: Optional[str] = None
    service_range_minutes: int
    distance_km: float
    distance_text: str
    estimated_travel_time_minutes: int
    is_within_service_range: bool


class NearbySearchResponse(BaseModel):
    carwashes: list[NearbyCarwash]
    search_type: str  # nearby, extended, all
    user_lat: float
    user_lng: float
    count: int
    message: str


class SlotResponse(BaseModel):
    start_time: datetime
    end_time: datetime
    available: bool
    current_cars: int
    max_cars: int
