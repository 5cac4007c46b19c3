"""Car domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class CarCreate(BaseModel):
    model: str
    plate: str
    color: Optional[str] = None
    is_default: bool = False


class CarUpdate(BaseModel):
    """Fields an owner may change on their car"""

    model: Optional[str] = None
    plate: Optional[str] = None
    color: Optional[str] = None
    is_default: Optional[bool] = None


class CarResponse(BaseModel):
    id: str
    owner_id: str
    model: str
    plate: str
    color: Optional[str] = None
    is_default: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
