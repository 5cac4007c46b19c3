"""Order domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class OrderStatusUpdate(BaseModel):
    status: str  # active, in_progress, completed, cancelled


class OrderResponse(BaseModel):
    """Schema for order response"""

    id: str
    booking_id: Optional[str] = None
    user_id: str
    car_id: str
    carwash_id: str
    service_ids: list[str] = []
    worker_id: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    queue_number: int
    status: str
    total_amount: float
    payment_status: str
    booking_type: Optional[str] = None
    user_location: Optional[dict] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
