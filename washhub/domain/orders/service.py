"""Order service - Booking to order conversion and order status"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...errors import ConflictError, DependencyError, NotFoundError, PermissionDeniedError, ValidationError
from ...models import Order, User, generate_id, utcnow
from ...shared.validators import require_id
from ..bookings.repository import BookingRepository
from ..carwashes.service import CarwashService
from ..notifications.service import NotificationService
from .repository import OrderRepository

logger = logging.getLogger(__name__)

ORDER_STATUSES = ("active", "in_progress", "completed", "cancelled")
PAYMENT_STATUSES = ("unpaid", "paid")

ALREADY_PROCESSED = "booking already approved or processed"


class OrderService:
    """Service layer for order business logic"""

    def __init__(self, db: Session, notifications: NotificationService):
        self.db = db
        self.repo = OrderRepository()
        self.bookings = BookingRepository()
        self.carwashes = CarwashService(db)
        self.notifications = notifications

    def create_order_from_booking(self, booking_id: str) -> Order:
        """
        Turn a pending booking into an active, unpaid order.

        The order is the durable result. Marking the booking "approved"
        afterwards is best effort: if it fails the order stays and the
        failure is only logged.
        """
        booking = self.get_source_booking(booking_id)

        if booking.status in ("approved", "completed"):
            raise ConflictError(ALREADY_PROCESSED)
        if booking.status == "cancelled":
            raise ConflictError("cancelled bookings cannot be converted to orders")
        if self.repo.get_order_by_booking(self.db, booking.id):
            raise ConflictError(ALREADY_PROCESSED)

        now = utcnow()
        order_data = {
            "id": generate_id(),
            "booking_id": booking.id,
            "user_id": booking.user_id,
            "car_id": booking.car_id,
            "carwash_id": booking.carwash_id,
            "service_ids": list(booking.service_ids or []),
            "queue_number": booking.queue_number,
            "booking_type": booking.booking_type,
            "user_latitude": booking.user_latitude,
            "user_longitude": booking.user_longitude,
            "status": "active",
            # Pricing from the selected services is not computed yet
            "total_amount": 0.0,
            "payment_status": "unpaid",
            "created_at": now,
            "updated_at": now,
        }

        try:
            order = self.repo.create_order(self.db, **order_data)
        except IntegrityError as e:
            raise ConflictError(ALREADY_PROCESSED) from e

        logger.info(f"✅ Order {order.id} created from booking {booking.id}")

        try:
            self.bookings.update_booking(self.db, booking, status="approved", updated_at=utcnow())
        except DependencyError as e:
            logger.warning(f"⚠️ Order {order.id} created, but failed to update booking {booking.id} status: {e}")
        else:
            self._notify_booking_accepted(booking)

        self.notifications.send_order_created(order)
        return order

    def _notify_booking_accepted(self, booking) -> None:
        """The order is already committed, so a failed carwash lookup only skips this notification"""
        try:
            carwash = self.carwashes.get_carwash(booking.carwash_id)
        except (DependencyError, NotFoundError) as e:
            logger.warning(f"⚠️ Skipping booking accepted notification for {booking.id}: {e}")
            return
        self.notifications.send_booking_accepted(booking, carwash.name)

    # ========================================================================
    # READS
    # ========================================================================

    def get_source_booking(self, booking_id: str):
        booking_id = require_id(booking_id, "booking")
        booking = self.bookings.get_booking_by_id(self.db, booking_id)
        if not booking:
            raise NotFoundError("booking")
        return booking

    def get_order(self, order_id: str) -> Order:
        order_id = require_id(order_id, "order")
        order = self.repo.get_order_by_id(self.db, order_id)
        if not order:
            raise NotFoundError("order")
        return order

    def get_order_for_user(self, order_id: str, user: User) -> Order:
        """The order, provided the user is its customer, its carwash's owner or one of its workers"""
        order = self.get_order(order_id)
        if order.user_id == user.id or order.worker_id == user.id:
            return order
        if user.role == "worker" and user.carwash_id == order.carwash_id:
            return order
        carwash = self.carwashes.get_carwash(order.carwash_id)
        if carwash.owner_id != user.id:
            raise PermissionDeniedError("you do not have access to this order")
        return order

    def list_by_user(self, user_id: str) -> list[Order]:
        user_id = require_id(user_id, "user")
        return self.repo.get_orders_by_user(self.db, user_id)

    def list_by_carwash(self, carwash_id: str) -> list[Order]:
        carwash_id = require_id(carwash_id, "carwash")
        return self.repo.get_orders_by_carwash(self.db, carwash_id)

    # ========================================================================
    # UPDATES
    # ========================================================================

    def update_status(self, order_id: str, new_status: str, details: Optional[str] = None) -> Order:
        """
        Overwrite the order status from any state.

        Moving to in_progress stamps start_time, moving to completed stamps
        end_time.
        """
        if new_status not in ORDER_STATUSES:
            raise ValidationError(f"invalid order status: {new_status}")
        order = self.get_order(order_id)

        now = utcnow()
        updates = {"status": new_status, "updated_at": now}
        if new_status == "in_progress":
            updates["start_time"] = now
        elif new_status == "completed":
            updates["end_time"] = now

        logger.info(f"🔄 Order {order.id}: {order.status} -> {new_status}")
        order = self.repo.update_order(self.db, order, **updates)

        self.notifications.send_order_status_update(order, new_status, details or "")
        return order

    def set_payment_status(self, order_id: str, payment_status: str) -> Order:
        if payment_status not in PAYMENT_STATUSES:
            raise ValidationError(f"invalid payment status: {payment_status}")
        order = self.get_order(order_id)
        return self.repo.update_order(self.db, order, payment_status=payment_status, updated_at=utcnow())

    def assign_worker(self, order_id: str, worker_id: str) -> Order:
        """
        Set order.worker_id directly.

        No availability or exclusivity checks and no change to the worker
        record. Assignment that keeps the worker side consistent goes
        through WorkerService.assign_to_order.
        """
        worker_id = require_id(worker_id, "worker")
        order = self.get_order(order_id)
        return self.repo.update_order(self.db, order, worker_id=worker_id, updated_at=utcnow())
