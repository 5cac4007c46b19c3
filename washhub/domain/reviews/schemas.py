"""Review domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ReviewCreate(BaseModel):
    # Score ranges are checked by the service
    carwash_id: Optional[str] = None  # taken from the order when order_id is given
    order_id: Optional[str] = None
    rating: int
    accuracy: Optional[int] = None
    cleanliness: Optional[int] = None
    worker_rating: Optional[int] = None
    comment: Optional[str] = None
    photos: list[str] = Field(default_factory=list)


class ReviewResponse(BaseModel):
    id: str
    user_id: str
    carwash_id: str
    order_id: Optional[str] = None
    rating: int
    accuracy: Optional[int] = None
    cleanliness: Optional[int] = None
    worker_rating: Optional[int] = None
    comment: Optional[str] = None
    photos: list[str] = []
    created_at: datetime

    class Config:
        from_attributes = True


class AverageRatingResponse(BaseModel):
    carwash_id: str
    average_rating: float
    review_count: int
