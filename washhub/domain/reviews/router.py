"""Review router - FastAPI endpoints for reviews"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import AverageRatingResponse, ReviewCreate, ReviewResponse
from .service import ReviewService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reviews", tags=["Reviews"])


def get_review_service(db: Session = Depends(get_db)) -> ReviewService:
    """Dependency injection for ReviewService"""
    return ReviewService(db)


@router.post("", response_model=ReviewResponse, status_code=201)
async def create_review(
    data: ReviewCreate,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    return service.create_review(current_user, data)


@router.get("/mine", response_model=list[ReviewResponse])
async def list_my_reviews(
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    return service.list_by_user(current_user.id)


@router.get("/carwash/{carwash_id}", response_model=list[ReviewResponse])
async def list_carwash_reviews(carwash_id: str, service: ReviewService = Depends(get_review_service)):
    return service.list_by_carwash(carwash_id)


@router.get("/carwash/{carwash_id}/average", response_model=AverageRatingResponse)
async def get_average_rating(carwash_id: str, service: ReviewService = Depends(get_review_service)):
    count, average = service.review_stats(carwash_id)
    return {"carwash_id": carwash_id, "average_rating": average, "review_count": count}


@router.get("/order/{order_id}", response_model=ReviewResponse)
async def get_order_review(
    order_id: str,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service),
):
    return service.get_by_order(order_id)
