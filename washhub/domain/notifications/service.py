"""Notification service - In-app notifications with background email copies"""

import logging
from datetime import datetime

from sqlalchemy.orm import Session

from ...errors import NotFoundError, ValidationError
from ...models import Booking, Notification, Order, Payment, generate_id, utcnow
from ...shared.validators import require_id
from .repository import NotificationRepository

logger = logging.getLogger(__name__)

NOTIFICATION_TYPES = ("booking", "order", "payment", "worker", "general")

EMAIL_TASK = "send_notification_email_task"


def _format_when(moment: datetime) -> str:
    """e.g. "Mar 4, 2026 at 9:30 AM UTC" """
    return f"{moment:%b} {moment.day}, {moment.year} at {moment:%I:%M %p}".replace(" at 0", " at ") + " UTC"


class NotificationService:
    """
    Stores notifications and hands email delivery to the job queue.

    The queue is passed in by whoever builds the service (a request
    dependency in the web app, a recording fake in tests). Any object with
    ``submit(function_name, *args)`` works.
    """

    def __init__(self, db: Session, job_queue):
        self.db = db
        self.job_queue = job_queue
        self.repo = NotificationRepository()

    def create(
        self, user_id: str, title: str, message: str, notification_type: str, send_email: bool = True
    ) -> Notification:
        user_id = require_id(user_id, "user")
        title = (title or "").strip()
        message = (message or "").strip()
        if not title:
            raise ValidationError("title is required")
        if len(title) > 255:
            raise ValidationError("title exceeds maximum length of 255 characters")
        if not message:
            raise ValidationError("message is required")
        if notification_type not in NOTIFICATION_TYPES:
            raise ValidationError(f"invalid notification type: {notification_type}")

        notification = self.repo.create_notification(
            self.db,
            id=generate_id(),
            user_id=user_id,
            title=title,
            message=message,
            type=notification_type,
            is_read=False,
            email_sent=False,
            created_at=utcnow(),
        )

        if send_email:
            self._submit_email(notification.id)

        return notification

    def _submit_email(self, notification_id: str) -> None:
        try:
            if not self.job_queue.submit(EMAIL_TASK, notification_id):
                logger.warning(f"⚠️ Email for notification {notification_id} was not queued")
        except Exception as e:
            logger.error(f"❌ Failed to queue email for notification {notification_id}: {e}")

    # ========================================================================
    # READS
    # ========================================================================

    def list_for_user(self, user_id: str, limit: int = 50) -> list[Notification]:
        user_id = require_id(user_id, "user")
        if limit <= 0:
            limit = 50
        return self.repo.get_notifications_by_user(self.db, user_id, limit)

    def unread_count(self, user_id: str) -> int:
        user_id = require_id(user_id, "user")
        return self.repo.count_unread(self.db, user_id)

    def mark_read(self, notification_id: str, user_id: str) -> Notification:
        notification_id = require_id(notification_id, "notification")
        notification = self.repo.get_notification_by_id(self.db, notification_id)
        # Other users' notifications are reported as missing
        if not notification or notification.user_id != user_id:
            raise NotFoundError("notification")
        return self.repo.mark_read(self.db, notification)

    def mark_all_read(self, user_id: str) -> int:
        user_id = require_id(user_id, "user")
        return self.repo.mark_all_read(self.db, user_id)

    # ========================================================================
    # EVENT HELPERS
    # Failures are logged; the operation that triggered them is unaffected.
    # ========================================================================

    def _notify(self, user_id: str, title: str, message: str, notification_type: str) -> None:
        try:
            self.create(user_id, title, message, notification_type, send_email=True)
        except Exception as e:
            logger.error(f"❌ Failed to send '{title}' notification to {user_id}: {e}")

    def send_booking_confirmation(self, booking: Booking) -> None:
        self._notify(
            booking.user_id,
            "Booking Confirmation",
            f"Your carwash booking has been confirmed for {_format_when(booking.booking_time)}",
            "booking",
        )

    def send_new_booking_to_business(self, owner_id: str, customer_name: str, when: datetime) -> None:
        self._notify(
            owner_id,
            "New Booking Received",
            f"You have a new booking from {customer_name or 'a customer'} for "
            f"{_format_when(when)}. Please review and accept/reject.",
            "booking",
        )

    def send_booking_accepted(self, booking: Booking, carwash_name: str) -> None:
        self._notify(
            booking.user_id,
            "Booking Accepted!",
            f"Great news! {carwash_name} has accepted your booking for {_format_when(booking.booking_time)}",
            "booking",
        )

    def send_order_created(self, order: Order) -> None:
        self._notify(
            order.user_id,
            "Order Created",
            "Your booking has been converted to an active order. We'll notify you when a worker is assigned.",
            "order",
        )

    def send_order_status_update(self, order: Order, new_status: str, details: str = "") -> None:
        self._notify(
            order.user_id,
            f"Order {new_status}",
            details or f"Your order status has been updated to: {new_status}",
            "order",
        )

    def send_worker_assigned(self, order: Order, worker_name: str) -> None:
        self._notify(
            order.user_id,
            "Worker Assigned",
            f"Good news! {worker_name or 'A worker'} has been assigned to your order and will be with you soon.",
            "worker",
        )

    def send_payment_received(self, payment: Payment, owner_id: str) -> None:
        self._notify(
            owner_id,
            "Payment Received",
            f"A {payment.method} payment of {payment.amount:.2f} was recorded for order {payment.order_id}.",
            "payment",
        )
