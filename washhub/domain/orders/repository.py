"""Order repository - Database operations for orders"""

from typing import Optional

from sqlalchemy.orm import Session

from ...errors import store_operation
from ...models import Order


class OrderRepository:
    """Repository for order database operations"""

    @staticmethod
    @store_operation
    def create_order(db: Session, **order_data) -> Order:
        """Insert an order. A second order for the same booking raises IntegrityError."""
        order = Order(**order_data)
        db.add(order)
        db.commit()
        db.refresh(order)
        return order

    @staticmethod
    @store_operation
    def get_order_by_id(db: Session, order_id: str) -> Optional[Order]:
        return db.query(Order).filter(Order.id == order_id).first()

    @staticmethod
    @store_operation
    def get_order_by_booking(db: Session, booking_id: str) -> Optional[Order]:
        return db.query(Order).filter(Order.booking_id == booking_id).first()

    @staticmethod
    @store_operation
    def get_orders_by_user(db: Session, user_id: str) -> list[Order]:
        return db.query(Order).filter(Order.user_id == user_id).order_by(Order.created_at.desc()).all()

    @staticmethod
    @store_operation
    def get_orders_by_carwash(db: Session, carwash_id: str) -> list[Order]:
        return (
            db.query(Order)
            .filter(Order.carwash_id == carwash_id)
            .order_by(Order.created_at.desc())
            .all()
        )

    @staticmethod
    @store_operation
    def get_orders_by_worker(db: Session, worker_id: str) -> list[Order]:
        return (
            db.query(Order)
            .filter(Order.worker_id == worker_id)
            .order_by(Order.created_at.desc())
            .all()
        )

    @staticmethod
    @store_operation
    def update_order(db: Session, order: Order, **updates) -> Order:
        for key, value in updates.items():
            setattr(order, key, value)

        db.commit()
        db.refresh(order)
        return order

    @staticmethod
    @store_operation
    def set_worker(
        db: Session, order_id: str, worker_id: Optional[str], expected_worker_id: Optional[str], updated_at
    ) -> int:
        """
        Set (or clear, with None) an order's worker, only while the order's
        current worker is still ``expected_worker_id``. Returns the number of
        rows changed: 0 means another write got there first.
        """
        if expected_worker_id is None:
            current = Order.worker_id.is_(None)
        else:
            current = Order.worker_id == expected_worker_id
        updated = (
            db.query(Order)
            .filter(Order.id == order_id, current)
            .update({Order.worker_id: worker_id, Order.updated_at: updated_at}, synchronize_session=False)
        )
        db.commit()
        return updated

    @staticmethod
    @store_operation
    def service_in_use(db: Session, carwash_id: str, service_id: str) -> bool:
        """Whether any order at the carwash references the service"""
        rows = db.query(Order.service_ids).filter(Order.carwash_id == carwash_id).all()
        return any(service_id in (ids or []) for (ids,) in rows)
