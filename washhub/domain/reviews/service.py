"""Review service - Customer reviews and carwash ratings"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...errors import ConflictError, DependencyError, NotFoundError, PermissionDeniedError, ValidationError
from ...models import Review, User, generate_id, utcnow
from ...shared.validators import clean_text, require_id
from ..carwashes.service import CarwashService
from ..orders.repository import OrderRepository
from .repository import ReviewRepository
from .schemas import ReviewCreate

logger = logging.getLogger(__name__)

ALREADY_REVIEWED = "you've already submitted a review for this order"


def _check_score(value: Optional[int], label: str, required: bool = False) -> None:
    if value is None:
        if required:
            raise ValidationError(f"{label} is required")
        return
    if not 1 <= value <= 5:
        raise ValidationError(f"{label} must be between 1 and 5")


class ReviewService:
    """Service layer for review business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ReviewRepository()
        self.orders = OrderRepository()
        self.carwashes = CarwashService(db)

    def create_review(self, user: User, data: ReviewCreate) -> Review:
        """
        Review a carwash, optionally for a specific order.

        One review per (user, order): checked before the insert and enforced
        by a unique constraint for concurrent submissions.
        """
        _check_score(data.rating, "rating", required=True)
        _check_score(data.accuracy, "accuracy")
        _check_score(data.cleanliness, "cleanliness")
        _check_score(data.worker_rating, "worker rating")
        comment = clean_text(data.comment, max_length=500)

        order_id = None
        carwash_id = data.carwash_id
        if data.order_id:
            order_id = require_id(data.order_id, "order")
            order = self.orders.get_order_by_id(self.db, order_id)
            if not order:
                raise NotFoundError("order")
            if order.user_id != user.id:
                raise PermissionDeniedError("you can only review your own orders")
            if carwash_id and require_id(carwash_id, "carwash") != order.carwash_id:
                raise ValidationError("order does not belong to this carwash")
            carwash_id = order.carwash_id

            if self.repo.has_user_reviewed_order(self.db, user.id, order_id):
                raise ConflictError(ALREADY_REVIEWED)

        if not carwash_id:
            raise ValidationError("carwash ID is required")
        carwash = self.carwashes.get_carwash(carwash_id)

        now = utcnow()
        review_data = {
            "id": generate_id(),
            "user_id": user.id,
            "carwash_id": carwash.id,
            "order_id": order_id,
            "rating": data.rating,
            "accuracy": data.accuracy,
            "cleanliness": data.cleanliness,
            "worker_rating": data.worker_rating,
            "comment": comment,
            "photos": list(data.photos),
            "created_at": now,
            "updated_at": now,
        }
        try:
            review = self.repo.create_review(self.db, **review_data)
        except IntegrityError as e:
            raise ConflictError(ALREADY_REVIEWED) from e

        logger.info(f"⭐ Review {review.id} ({review.rating}/5) for carwash {carwash.id}")
        self._refresh_carwash_rating(carwash.id)
        return review

    def _refresh_carwash_rating(self, carwash_id: str) -> None:
        try:
            self.carwashes.refresh_rating(carwash_id, self.average_rating(carwash_id))
        except DependencyError as e:
            logger.warning(f"⚠️ Could not refresh rating for carwash {carwash_id}: {e}")

    def average_rating(self, carwash_id: str) -> float:
        """Mean rating over every review of the carwash. There is no average without reviews."""
        _, average = self.review_stats(carwash_id)
        return average

    def review_stats(self, carwash_id: str) -> tuple[int, float]:
        carwash = self.carwashes.get_carwash(carwash_id)
        count, average = self.repo.rating_stats(self.db, carwash.id)
        if count == 0 or average is None:
            raise NotFoundError("review", "no reviews found for this carwash")
        return count, average

    def list_by_user(self, user_id: str) -> list[Review]:
        user_id = require_id(user_id, "user")
        return self.repo.get_reviews_by_user(self.db, user_id)

    def list_by_carwash(self, carwash_id: str) -> list[Review]:
        carwash_id = require_id(carwash_id, "carwash")
        return self.repo.get_reviews_by_carwash(self.db, carwash_id)

    def get_by_order(self, order_id: str) -> Review:
        order_id = require_id(order_id, "order")
        review = self.repo.get_review_by_order(self.db, order_id)
        if not review:
            raise NotFoundError("review")
        return review
