"""Payment repository - Database operations for payment records"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...errors import store_operation
from ...models import Payment


class PaymentRepository:
    """Repository for payment database operations"""

    @staticmethod
    @store_operation
    def create_payment(db: Session, **payment_data) -> Payment:
        payment = Payment(**payment_data)
        db.add(payment)
        db.commit()
        db.refresh(payment)
        return payment

    @staticmethod
    @store_operation
    def get_payments_by_user(db: Session, user_id: str) -> list[Payment]:
        return db.query(Payment).filter(Payment.user_id == user_id).order_by(Payment.created_at.desc()).all()

    @staticmethod
    @store_operation
    def get_payments_by_carwash(db: Session, carwash_id: str) -> list[Payment]:
        return (
            db.query(Payment)
            .filter(Payment.carwash_id == carwash_id)
            .order_by(Payment.created_at.desc())
            .all()
        )

    @staticmethod
    @store_operation
    def get_latest_payment_for_order(db: Session, order_id: str) -> Optional[Payment]:
        return (
            db.query(Payment)
            .filter(Payment.order_id == order_id)
            .order_by(Payment.created_at.desc())
            .first()
        )

    @staticmethod
    @store_operation
    def get_payment_by_reference(db: Session, transaction_ref: str) -> Optional[Payment]:
        return db.query(Payment).filter(Payment.transaction_ref == transaction_ref).first()

    @staticmethod
    @store_operation
    def total_paid_for_carwash(db: Session, carwash_id: str) -> float:
        total = (
            db.query(func.coalesce(func.sum(Payment.amount), 0.0))
            .filter(Payment.carwash_id == carwash_id, Payment.status == "paid")
            .scalar()
        )
        return float(total or 0.0)
