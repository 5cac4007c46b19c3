"""Review repository - Database operations for reviews"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...errors import store_operation
from ...models import Review


class ReviewRepository:
    """Repository for review database operations"""

    @staticmethod
    @store_operation
    def create_review(db: Session, **review_data) -> Review:
        """Insert a review. A second review for the same (user, order) raises IntegrityError."""
        review = Review(**review_data)
        db.add(review)
        db.commit()
        db.refresh(review)
        return review

    @staticmethod
    @store_operation
    def has_user_reviewed_order(db: Session, user_id: str, order_id: str) -> bool:
        return (
            db.query(Review.id).filter(Review.user_id == user_id, Review.order_id == order_id).first()
            is not None
        )

    @staticmethod
    @store_operation
    def get_reviews_by_user(db: Session, user_id: str) -> list[Review]:
        return db.query(Review).filter(Review.user_id == user_id).order_by(Review.created_at.desc()).all()

    @staticmethod
    @store_operation
    def get_reviews_by_carwash(db: Session, carwash_id: str) -> list[Review]:
        return (
            db.query(Review)
            .filter(Review.carwash_id == carwash_id)
            .order_by(Review.created_at.desc())
            .all()
        )

    @staticmethod
    @store_operation
    def get_review_by_order(db: Session, order_id: str) -> Optional[Review]:
        return db.query(Review).filter(Review.order_id == order_id).first()

    @staticmethod
    @store_operation
    def rating_stats(db: Session, carwash_id: str) -> tuple[int, Optional[float]]:
        """(number of reviews, mean rating) for a carwash; the mean is None without reviews"""
        count, average = (
            db.query(func.count(Review.id), func.avg(Review.rating))
            .filter(Review.carwash_id == carwash_id)
            .one()
        )
        return count, (float(average) if average is not None else None)
