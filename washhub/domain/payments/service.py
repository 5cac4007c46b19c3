"""Payment service - Bookkeeping for settled payments"""

import logging
from datetime import timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...errors import ConflictError, DependencyError, NotFoundError, PermissionDeniedError, ValidationError
from ...models import Payment, User, generate_id, utcnow
from ...shared.validators import require_id
from ..carwashes.service import CarwashService
from ..notifications.service import NotificationService
from ..orders.service import OrderService
from .repository import PaymentRepository
from .schemas import PaymentCreate

logger = logging.getLogger(__name__)

PAYMENT_METHODS = ("cash", "card", "wallet", "transfer")
PAYMENT_STATUSES = ("paid", "failed", "pending", "refunded")


class PaymentService:
    """Records payments; no gateway or settlement logic lives here"""

    def __init__(self, db: Session, notifications: NotificationService):
        self.db = db
        self.repo = PaymentRepository()
        self.orders = OrderService(db, notifications)
        self.carwashes = CarwashService(db)
        self.notifications = notifications

    def create_payment(self, requester: User, data: PaymentCreate) -> Payment:
        if data.amount is None or data.amount <= 0:
            raise ValidationError("amount must be greater than 0")
        if data.method not in PAYMENT_METHODS:
            raise ValidationError(f"invalid payment method. Must be: {', '.join(PAYMENT_METHODS)}")
        if data.status not in PAYMENT_STATUSES:
            raise ValidationError(f"invalid payment status. Must be: {', '.join(PAYMENT_STATUSES)}")

        order = self.orders.get_order(data.order_id)
        carwash = self.carwashes.get_carwash(order.carwash_id)
        if requester.id not in (order.user_id, carwash.owner_id):
            raise PermissionDeniedError("you cannot record payments for this order")

        paid_at = data.paid_at
        if paid_at is not None and paid_at.tzinfo is not None:
            paid_at = paid_at.astimezone(timezone.utc).replace(tzinfo=None)
        now = utcnow()
        if paid_at is None and data.status == "paid":
            paid_at = now

        payment_data = {
            "id": generate_id(),
            "user_id": order.user_id,
            "carwash_id": order.carwash_id,
            "order_id": order.id,
            "amount": float(data.amount),
            "method": data.method,
            "status": data.status,
            "transaction_ref": (data.transaction_ref or "").strip() or None,
            "paid_at": paid_at,
            "created_at": now,
            "updated_at": now,
        }
        try:
            payment = self.repo.create_payment(self.db, **payment_data)
        except IntegrityError as e:
            raise ConflictError("a payment with this transaction reference already exists") from e

        logger.info(f"💰 Payment {payment.id}: {payment.amount:.2f} ({payment.method}, {payment.status}) for order {order.id}")

        if payment.status == "paid":
            try:
                self.orders.set_payment_status(order.id, "paid")
            except DependencyError as e:
                logger.warning(f"⚠️ Payment {payment.id} recorded, but order {order.id} was not marked paid: {e}")
            self.notifications.send_payment_received(payment, carwash.owner_id)

        return payment

    def list_by_user(self, user_id: str) -> list[Payment]:
        user_id = require_id(user_id, "user")
        return self.repo.get_payments_by_user(self.db, user_id)

    def list_by_carwash(self, carwash_id: str) -> list[Payment]:
        carwash_id = require_id(carwash_id, "carwash")
        return self.repo.get_payments_by_carwash(self.db, carwash_id)

    def get_by_order(self, order_id: str) -> Payment:
        """Most recent payment recorded for the order"""
        order_id = require_id(order_id, "order")
        payment = self.repo.get_latest_payment_for_order(self.db, order_id)
        if not payment:
            raise NotFoundError("payment")
        return payment

    def get_by_reference(self, transaction_ref: str) -> Payment:
        if not transaction_ref or not transaction_ref.strip():
            raise ValidationError("transaction reference is required")
        payment = self.repo.get_payment_by_reference(self.db, transaction_ref.strip())
        if not payment:
            raise NotFoundError("payment")
        return payment

    def earnings_by_carwash(self, carwash_id: str) -> float:
        """Sum of paid payments; 0.0 when there are none"""
        carwash = self.carwashes.get_carwash(carwash_id)
        return self.repo.total_paid_for_carwash(self.db, carwash.id)
