"""Worker repository - Database operations for worker accounts"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import store_operation
from ...models import User


class WorkerRepository:
    """Repository for worker (users with role "worker") database operations"""

    @staticmethod
    @store_operation
    def create_worker(db: Session, **worker_data) -> User:
        worker = User(**worker_data)
        db.add(worker)
        db.commit()
        db.refresh(worker)
        return worker

    @staticmethod
    @store_operation
    def get_worker_by_id(db: Session, worker_id: str) -> Optional[User]:
        return db.query(User).filter(User.id == worker_id, User.role == "worker").first()

    @staticmethod
    @store_operation
    def get_workers_by_carwash(db: Session, carwash_id: str) -> list[User]:
        return (
            db.query(User)
            .filter(User.role == "worker", User.carwash_id == carwash_id)
            .order_by(User.created_at.asc())
            .all()
        )

    @staticmethod
    @store_operation
    def get_available_workers(db: Session, carwash_id: str) -> list[User]:
        """Active, online workers with no active orders"""
        online = (
            db.query(User)
            .filter(
                User.role == "worker",
                User.carwash_id == carwash_id,
                User.status == "active",
                User.work_status == "online",
            )
            .order_by(User.created_at.asc())
            .all()
        )
        # JSON length is not portable across backends, so the last check runs here
        return [worker for worker in online if not worker.active_orders]

    @staticmethod
    @store_operation
    def update_worker(db: Session, worker: User, **updates) -> User:
        for key, value in updates.items():
            setattr(worker, key, value)

        db.commit()
        db.refresh(worker)
        return worker

    @staticmethod
    @store_operation
    def claim_for_order(db: Session, worker_id: str, order_id: str, now: datetime) -> bool:
        """
        Mark an online worker busy with one order.

        Conditional on work_status still being "online", so two concurrent
        claims cannot both succeed. Returns False when the condition no
        longer holds.
        """
        updated = (
            db.query(User)
            .filter(User.id == worker_id, User.work_status == "online")
            .update(
                {
                    User.work_status: "busy",
                    User.active_orders: [order_id],
                    User.last_seen: now,
                    User.updated_at: now,
                },
                synchronize_session=False,
            )
        )
        db.commit()
        return updated == 1

    @staticmethod
    @store_operation
    def release_order(db: Session, worker: User, order_id: str, now: datetime) -> User:
        """Drop an order from the worker's active orders and put them back online"""
        worker.active_orders = [oid for oid in (worker.active_orders or []) if oid != order_id]
        worker.work_status = "online"
        worker.last_seen = now
        db.commit()
        db.refresh(worker)
        return worker
