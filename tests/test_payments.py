from datetime import datetime, timedelta, timezone

import pytest

from washhub.domain.orders.service import OrderService
from washhub.domain.payments.schemas import PaymentCreate
from washhub.domain.payments.service import PaymentService
from washhub.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError


@pytest.fixture
def payments(db, notifications):
    return PaymentService(db, notifications)


def test_paid_payment_marks_the_order_paid(db, payments, notifications, customer, owner, order):
    payment = payments.create_payment(
        customer, PaymentCreate(order_id=order.id, amount=4500, method="card", transaction_ref="PSK-1001")
    )

    assert payment.status == "paid"
    assert payment.paid_at is not None
    assert payment.carwash_id == order.carwash_id
    assert OrderService(db, notifications).get_order(order.id).payment_status == "paid"
    assert [n.title for n in notifications.list_for_user(owner.id)][0] == "Payment Received"


def test_pending_payment_leaves_the_order_unpaid(db, payments, notifications, customer, order):
    payment = payments.create_payment(
        customer, PaymentCreate(order_id=order.id, amount=4500, method="transfer", status="pending")
    )

    assert payment.paid_at is None
    assert OrderService(db, notifications).get_order(order.id).payment_status == "unpaid"


def test_paid_at_is_stored_as_utc(payments, owner, order):
    lagos = timezone(timedelta(hours=1))
    payment = payments.create_payment(
        owner,
        PaymentCreate(order_id=order.id, amount=3000, method="cash", paid_at=datetime(2026, 3, 2, 10, 0, tzinfo=lagos)),
    )
    assert payment.paid_at == datetime(2026, 3, 2, 9, 0)


def test_only_the_customer_or_owner_records_payments(payments, make_user, order):
    stranger = make_user(name="Stranger")
    with pytest.raises(PermissionDeniedError):
        payments.create_payment(stranger, PaymentCreate(order_id=order.id, amount=1000, method="cash"))


@pytest.mark.parametrize(
    "fields",
    [
        {"amount": 0, "method": "cash"},
        {"amount": -10, "method": "cash"},
        {"amount": 1000, "method": "cheque"},
        {"amount": 1000, "method": "cash", "status": "maybe"},
    ],
)
def test_invalid_payments(payments, customer, order, fields):
    with pytest.raises(ValidationError):
        payments.create_payment(customer, PaymentCreate(order_id=order.id, **fields))


def test_duplicate_transaction_reference(payments, customer, make_order):
    payments.create_payment(
        customer, PaymentCreate(order_id=make_order().id, amount=2000, method="card", transaction_ref="PSK-2002")
    )
    with pytest.raises(ConflictError):
        payments.create_payment(
            customer, PaymentCreate(order_id=make_order().id, amount=2000, method="card", transaction_ref="PSK-2002")
        )


def test_earnings_count_paid_payments_only(payments, customer, make_order, carwash):
    assert payments.earnings_by_carwash(carwash.id) == 0.0

    payments.create_payment(customer, PaymentCreate(order_id=make_order().id, amount=2500, method="cash"))
    payments.create_payment(customer, PaymentCreate(order_id=make_order().id, amount=4000, method="card"))
    payments.create_payment(
        customer, PaymentCreate(order_id=make_order().id, amount=9999, method="card", status="failed")
    )

    assert payments.earnings_by_carwash(carwash.id) == pytest.approx(6500.0)
    assert len(payments.list_by_carwash(carwash.id)) == 3
    assert len(payments.list_by_user(customer.id)) == 3


def test_lookups(payments, customer, order):
    payment = payments.create_payment(
        customer, PaymentCreate(order_id=order.id, amount=1500, method="wallet", transaction_ref="WAL-77")
    )

    assert payments.get_by_reference(" WAL-77 ").id == payment.id
    assert payments.get_by_order(order.id).id == payment.id
    with pytest.raises(NotFoundError):
        payments.get_by_reference("WAL-78")
    with pytest.raises(ValidationError):
        payments.get_by_reference("  ")
