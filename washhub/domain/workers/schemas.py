"""Worker domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_email


class WorkerCreate(BaseModel):
    """Schema for a business adding a worker"""

    name: str = Field(min_length=2, max_length=100)
    email: str
    phone: Optional[str] = None
    job_role: Optional[str] = None
    carwash_id: Optional[str] = None  # defaults to the business owner's carwash

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v):
        return validate_email(v)


class WorkerUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    phone: Optional[str] = None
    job_role: Optional[str] = None


class AccountStatusUpdate(BaseModel):
    status: str  # active, inactive, suspended


class WorkStatusUpdate(BaseModel):
    work_status: str  # online, offline, busy, on_break


class WorkerResponse(BaseModel):
    id: str
    name: Optional[str] = None
    email: str
    phone: Optional[str] = None
    role: str
    status: str
    carwash_id: Optional[str] = None
    job_role: Optional[str] = None
    work_status: Optional[str] = None
    active_orders: list[str] = []
    profile_photo: Optional[str] = None
    last_seen: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True
