from types import SimpleNamespace

import pytest

from washhub.domain.orders.repository import OrderRepository
from washhub.domain.orders.service import OrderService
from washhub.domain.workers.repository import WorkerRepository
from washhub.domain.workers.schemas import WorkerCreate, WorkerUpdate
from washhub.domain.workers.service import WorkerService
from washhub.errors import ConflictError, DependencyError, NotFoundError, PermissionDeniedError, ValidationError

from conftest import ABUJA


@pytest.fixture
def workers(db, notifications):
    return WorkerService(db, notifications)


def test_create_worker(worker, carwash):
    assert worker.role == "worker"
    assert worker.carwash_id == carwash.id
    assert worker.work_status == "online"
    assert worker.active_orders == []


def test_only_business_owners_create_workers(workers, customer, carwash):
    data = WorkerCreate(name="Emeka Obi", email="emeka@example.com", carwash_id=carwash.id)
    with pytest.raises(PermissionDeniedError):
        workers.create_worker(customer, data)


def test_worker_defaults_to_the_owners_carwash(workers, owner, carwash):
    worker = workers.create_worker(owner, WorkerCreate(name="Emeka Obi", email="emeka@example.com"))
    assert worker.carwash_id == carwash.id


def test_duplicate_worker_email(workers, owner, carwash):
    data = WorkerCreate(name="Emeka Obi", email="emeka@example.com", carwash_id=carwash.id)
    workers.create_worker(owner, data)
    with pytest.raises(ConflictError):
        workers.create_worker(owner, data)


def test_update_worker(workers, worker):
    updated = workers.update_worker(worker.id, WorkerUpdate(job_role="Detailer"))
    assert updated.job_role == "Detailer"

    with pytest.raises(ValidationError, match="no valid fields"):
        workers.update_worker(worker.id, WorkerUpdate())


def test_get_worker_ignores_other_roles(workers, customer):
    with pytest.raises(NotFoundError):
        workers.get_worker(customer.id)


# ============================================================================
# ASSIGNMENT
# ============================================================================


def test_assign_marks_worker_busy(db, workers, worker, order):
    assigned = workers.assign_to_order(worker.id, order.id)

    db.refresh(worker)
    assert assigned.worker_id == worker.id
    assert worker.work_status == "busy"
    assert worker.active_orders == [order.id]


def test_busy_worker_cannot_take_a_second_order(db, workers, worker, make_order):
    first = make_order()
    second = make_order()
    workers.assign_to_order(worker.id, first.id)

    with pytest.raises(ConflictError):
        workers.assign_to_order(worker.id, second.id)

    db.refresh(worker)
    orders = OrderService(db, workers.notifications)
    assert orders.get_order(second.id).worker_id is None
    assert orders.get_order(first.id).worker_id == worker.id
    assert worker.active_orders == [first.id]


def test_offline_worker_cannot_be_assigned(workers, worker, order):
    workers.set_work_status(worker.id, "offline")

    with pytest.raises(ConflictError, match="not available"):
        workers.assign_to_order(worker.id, order.id)


def test_worker_from_another_carwash(db, workers, owner, make_carwash, order):
    other = make_carwash(name="Capital Wash", location=ABUJA)
    outsider = workers.create_worker(
        owner, WorkerCreate(name="Musa Bello", email="musa@example.com", carwash_id=other.id)
    )

    with pytest.raises(ConflictError):
        workers.assign_to_order(outsider.id, order.id)


def test_failed_worker_write_rolls_back_the_order(monkeypatch, db, workers, worker, order):
    def failing_claim(*args, **kwargs):
        raise DependencyError("store temporarily unavailable", retriable=True)

    monkeypatch.setattr(WorkerRepository, "claim_for_order", staticmethod(failing_claim))

    with pytest.raises(DependencyError):
        workers.assign_to_order(worker.id, order.id)

    db.refresh(order)
    db.refresh(worker)
    assert order.worker_id is None
    assert worker.work_status == "online"


def test_lost_worker_claim_clears_the_order(monkeypatch, db, workers, worker, order):
    monkeypatch.setattr(WorkerRepository, "claim_for_order", staticmethod(lambda *args: False))

    with pytest.raises(ConflictError, match="not available"):
        workers.assign_to_order(worker.id, order.id)

    db.refresh(order)
    assert order.worker_id is None


def test_order_with_a_worker_cannot_be_reassigned(db, workers, make_worker, order):
    first = make_worker(name="Tunde Bakare")
    second = make_worker(name="Ngozi Eze")
    workers.assign_to_order(first.id, order.id)

    with pytest.raises(ConflictError, match="already has a worker"):
        workers.assign_to_order(second.id, order.id)

    db.refresh(order)
    db.refresh(first)
    db.refresh(second)
    assert order.worker_id == first.id
    assert first.work_status == "busy"
    assert first.active_orders == [order.id]
    assert second.work_status == "online"
    assert second.active_orders == []

    # The first worker can still be released from the order
    released = workers.remove_from_order(first.id, order.id)
    assert released.work_status == "online"
    assert released.active_orders == []


def test_assignment_racing_another_write_is_rejected(monkeypatch, db, workers, make_worker, order):
    first = make_worker(name="Tunde Bakare")
    second = make_worker(name="Ngozi Eze")
    # This request read the order while it was still unassigned
    stale = SimpleNamespace(id=order.id, carwash_id=order.carwash_id, worker_id=None)
    # Another one assigned the first worker before this one wrote
    OrderService(db, workers.notifications).assign_worker(order.id, first.id)
    monkeypatch.setattr(OrderRepository, "get_order_by_id", staticmethod(lambda *args: stale))

    with pytest.raises(ConflictError, match="already has a worker"):
        workers.assign_to_order(second.id, order.id)

    monkeypatch.undo()
    db.expire_all()
    assert OrderRepository.get_order_by_id(db, order.id).worker_id == first.id
    assert WorkerRepository.get_worker_by_id(db, second.id).work_status == "online"


def test_remove_from_order(db, workers, worker, order):
    workers.assign_to_order(worker.id, order.id)

    released = workers.remove_from_order(worker.id, order.id)

    db.refresh(order)
    assert order.worker_id is None
    assert released.work_status == "online"
    assert released.active_orders == []


def test_list_assigned_orders(workers, make_worker, make_order):
    busy = make_worker(name="Tunde Bakare")
    idle = make_worker(name="Ngozi Eze")
    first = make_order()
    make_order()
    workers.assign_to_order(busy.id, first.id)

    assert [o.id for o in workers.list_assigned_orders(busy.id)] == [first.id]
    assert workers.list_assigned_orders(idle.id) == []

    workers.remove_from_order(busy.id, first.id)
    assert workers.list_assigned_orders(busy.id) == []


def test_remove_requires_the_assigned_worker(workers, make_worker, order):
    assigned = make_worker(name="Tunde Bakare")
    other = make_worker(name="Ngozi Eze")
    workers.assign_to_order(assigned.id, order.id)

    with pytest.raises(ConflictError):
        workers.remove_from_order(other.id, order.id)


def test_failed_release_leaves_the_order_unassigned(monkeypatch, db, workers, worker, order):
    workers.assign_to_order(worker.id, order.id)

    def failing_release(*args, **kwargs):
        raise DependencyError("store operation failed")

    monkeypatch.setattr(WorkerRepository, "release_order", staticmethod(failing_release))

    with pytest.raises(DependencyError):
        workers.remove_from_order(worker.id, order.id)

    db.refresh(order)
    db.refresh(worker)
    assert order.worker_id is None
    assert worker.work_status == "busy"


# ============================================================================
# AVAILABILITY
# ============================================================================


def test_list_available_workers(workers, make_worker, order, carwash):
    busy = make_worker(name="Tunde Bakare")
    idle = make_worker(name="Ngozi Eze")
    away = make_worker(name="Musa Bello")
    workers.assign_to_order(busy.id, order.id)
    workers.set_work_status(away.id, "on_break")

    available = workers.list_available_by_business(carwash.id)

    assert [w.id for w in available] == [idle.id]
    assert len(workers.list_by_business(carwash.id)) == 3


def test_suspended_workers_are_not_available(workers, worker, carwash):
    workers.set_account_status(worker.id, "suspended")

    assert workers.list_available_by_business(carwash.id) == []
    with pytest.raises(ValidationError):
        workers.set_account_status(worker.id, "fired")


def test_set_work_status_stamps_last_seen(workers, worker):
    updated = workers.set_work_status(worker.id, "busy")

    assert updated.work_status == "busy"
    assert updated.last_seen is not None
    with pytest.raises(ValidationError):
        workers.set_work_status(worker.id, "sleeping")
