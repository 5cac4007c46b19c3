"""Worker service - Worker accounts, availability and order assignment"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...errors import ConflictError, DependencyError, NotFoundError, PermissionDeniedError, ValidationError
from ...models import Order, User, generate_id, utcnow
from ...shared.validators import clean_text, require_id
from ..carwashes.service import CarwashService
from ..notifications.service import NotificationService
from ..orders.repository import OrderRepository
from .repository import WorkerRepository
from .schemas import WorkerCreate, WorkerUpdate

logger = logging.getLogger(__name__)

WORK_STATUSES = ("online", "offline", "busy", "on_break")
ACCOUNT_STATUSES = ("active", "inactive", "suspended")

ORDER_TAKEN = "order already has a worker assigned"
NOT_ASSIGNED = "worker is not assigned to this order"


class WorkerService:
    """Service layer for worker business logic"""

    def __init__(self, db: Session, notifications: NotificationService):
        self.db = db
        self.repo = WorkerRepository()
        self.orders = OrderRepository()
        self.carwashes = CarwashService(db)
        self.notifications = notifications

    # ========================================================================
    # WORKER ACCOUNTS
    # ========================================================================

    def create_worker(self, requester: User, data: WorkerCreate) -> User:
        """A business owner adds a worker to one of their carwashes"""
        logger.info(f"🔍 Creating worker {data.email} requested by {requester.id} (role={requester.role})")
        if requester.role != "business":
            raise PermissionDeniedError("only business owners can create workers")

        carwash_id = data.carwash_id or requester.carwash_id
        if carwash_id:
            carwash = self.carwashes.get_owned_carwash(carwash_id, requester)
        else:
            owned = self.carwashes.list_by_owner(requester.id)
            if not owned:
                raise ValidationError("no carwash associated with this business owner")
            carwash = owned[0]

        now = utcnow()
        worker_data = {
            "id": generate_id(),
            "name": clean_text(data.name, max_length=100),
            "email": data.email,
            "phone": data.phone,
            "role": "worker",
            "account_type": "car_wash",
            "status": "active",
            "carwash_id": carwash.id,
            "job_role": clean_text(data.job_role, max_length=100),
            "work_status": "online",
            "active_orders": [],
            "created_at": now,
            "updated_at": now,
        }
        try:
            worker = self.repo.create_worker(self.db, **worker_data)
        except IntegrityError as e:
            raise ConflictError("email is already registered") from e

        logger.info(f"✅ Worker {worker.id} created for carwash {carwash.id}")
        return worker

    def get_worker(self, worker_id: str) -> User:
        worker_id = require_id(worker_id, "worker")
        worker = self.repo.get_worker_by_id(self.db, worker_id)
        if not worker:
            raise NotFoundError("worker")
        return worker

    def get_managed_worker(self, worker_id: str, user: User) -> User:
        """Worker, provided the user is that worker or owns their carwash"""
        worker = self.get_worker(worker_id)
        if worker.id != user.id:
            self.carwashes.get_owned_carwash(worker.carwash_id, user)
        return worker

    def update_worker(self, worker_id: str, data: WorkerUpdate) -> User:
        worker = self.get_worker(worker_id)

        updates = {}
        if data.name is not None:
            updates["name"] = clean_text(data.name, max_length=100)
        if data.phone is not None:
            updates["phone"] = data.phone
        if data.job_role is not None:
            updates["job_role"] = clean_text(data.job_role, max_length=100)
        if not updates:
            raise ValidationError("no valid fields to update")

        updates["updated_at"] = utcnow()
        return self.repo.update_worker(self.db, worker, **updates)

    def list_by_business(self, carwash_id: str) -> list[User]:
        carwash_id = require_id(carwash_id, "carwash")
        return self.repo.get_workers_by_carwash(self.db, carwash_id)

    def list_available_by_business(self, carwash_id: str) -> list[User]:
        """Workers that can take an order right now: active, online and idle"""
        carwash_id = require_id(carwash_id, "carwash")
        return self.repo.get_available_workers(self.db, carwash_id)

    def set_account_status(self, worker_id: str, status: str) -> User:
        if status not in ACCOUNT_STATUSES:
            raise ValidationError(f"invalid account status. Must be: {', '.join(ACCOUNT_STATUSES)}")
        worker = self.get_worker(worker_id)
        return self.repo.update_worker(self.db, worker, status=status, updated_at=utcnow())

    def set_work_status(self, worker_id: str, work_status: str) -> User:
        if work_status not in WORK_STATUSES:
            raise ValidationError("invalid work status. Must be: online, offline, busy, or on_break")
        worker = self.get_worker(worker_id)
        now = utcnow()
        return self.repo.update_worker(self.db, worker, work_status=work_status, last_seen=now, updated_at=now)

    # ========================================================================
    # ORDER ASSIGNMENT
    # ========================================================================

    def assign_to_order(self, worker_id: str, order_id: str) -> Order:
        """
        Assign an available worker to an order.

        Only orders without a worker can be assigned. Two writes: the
        order's worker_id (conditional on it still being empty), then the
        worker's busy state. If the worker write fails, the order is cleared
        again and the error is raised.
        """
        worker = self.get_worker(worker_id)
        if worker.work_status != "online":
            raise ConflictError("worker is not available for assignment")
        if worker.active_orders:
            raise ConflictError("worker is already busy with another order")

        order_id = require_id(order_id, "order")
        order = self.orders.get_order_by_id(self.db, order_id)
        if not order:
            raise NotFoundError("order")
        if order.carwash_id != worker.carwash_id:
            raise ConflictError("worker does not work at this order's carwash")
        if order.worker_id is not None:
            raise ConflictError(ORDER_TAKEN)

        if not self.orders.set_worker(self.db, order.id, worker.id, None, utcnow()):
            # Another assignment landed between the check and the write
            raise ConflictError(ORDER_TAKEN)

        try:
            claimed = self.repo.claim_for_order(self.db, worker.id, order.id, utcnow())
        except DependencyError:
            logger.error(f"❌ Worker {worker.id} update failed, rolling back order {order.id}")
            self._release_order_claim(order.id, worker.id)
            raise

        if not claimed:
            # Another request took the worker between the check and the write
            self._release_order_claim(order.id, worker.id)
            raise ConflictError("worker is not available for assignment")

        logger.info(f"✅ Worker {worker.id} assigned to order {order.id}")
        order = self.orders.get_order_by_id(self.db, order.id)
        self.notifications.send_worker_assigned(order, worker.name)
        return order

    def list_assigned_orders(self, worker_id: str) -> list[Order]:
        """Orders currently pointing at the worker, newest first"""
        worker = self.get_worker(worker_id)
        return self.orders.get_orders_by_worker(self.db, worker.id)

    def _release_order_claim(self, order_id: str, worker_id: str) -> None:
        try:
            self.orders.set_worker(self.db, order_id, None, worker_id, utcnow())
        except DependencyError as e:
            logger.error(f"❌ Rollback of order {order_id} worker failed: {e}")

    def remove_from_order(self, worker_id: str, order_id: str) -> User:
        """
        Unassign a worker and put them back online.

        The order is cleared first. If the worker update then fails the
        error is raised as is and the order stays unassigned.
        """
        worker = self.get_worker(worker_id)
        order_id = require_id(order_id, "order")
        order = self.orders.get_order_by_id(self.db, order_id)
        if not order:
            raise NotFoundError("order")
        if order.worker_id != worker.id:
            raise ConflictError(NOT_ASSIGNED)

        if not self.orders.set_worker(self.db, order.id, None, worker.id, utcnow()):
            raise ConflictError(NOT_ASSIGNED)
        worker = self.repo.release_order(self.db, worker, order.id, utcnow())

        logger.info(f"🔓 Worker {worker.id} removed from order {order_id}")
        return worker
