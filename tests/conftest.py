import os
from datetime import datetime, timedelta

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DB_LOG_SLOW_QUERIES", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from washhub.database import Base, get_db
from washhub.domain.bookings.schemas import BookingCreate
from washhub.domain.bookings.service import BookingService
from washhub.domain.cars.schemas import CarCreate
from washhub.domain.cars.service import CarService
from washhub.domain.carwashes.schemas import CarwashCreate, ServiceCreate
from washhub.domain.carwashes.service import CarwashService
from washhub.domain.notifications.service import NotificationService
from washhub.domain.orders.service import OrderService
from washhub.domain.workers.schemas import WorkerCreate
from washhub.domain.workers.service import WorkerService
from washhub.jobs import get_job_queue
from washhub.main import app
from washhub.models import User, generate_id

# Lagos reference points
USER_LAT, USER_LNG = 6.5244, 3.3792
YABA = (6.5095, 3.3711)  # ~2 km from the user
SURULERE = (6.5000, 3.3500)  # ~4 km
ABEOKUTA = (7.1475, 3.3619)  # ~70 km
ABUJA = (9.0765, 7.3986)  # ~530 km


class RecordingQueue:
    """Job queue that keeps submitted jobs in memory"""

    def __init__(self):
        self.jobs = []

    def submit(self, function, *args):
        self.jobs.append((function, args))
        return True

    async def close(self):
        return None


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def job_queue():
    return RecordingQueue()


@pytest.fixture
def notifications(db, job_queue):
    return NotificationService(db, job_queue)


@pytest.fixture
def client(db, job_queue):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_job_queue] = lambda: job_queue
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make_user(role="car_owner", name="Chidi Okafor", email=None, **fields):
        user = User(
            id=generate_id(),
            name=name,
            email=email or f"{generate_id()[:8]}@example.com",
            role=role,
            status="active",
            active_orders=[],
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def customer(make_user):
    return make_user(role="car_owner", name="Chidi Okafor")


@pytest.fixture
def owner(make_user):
    return make_user(role="business", name="Bola Adeyemi")


@pytest.fixture
def make_carwash(db, owner):
    def _make_carwash(name="Sparkle Wash", location=YABA, **fields):
        data = {"name": name, "address": "12 Herbert Macaulay Way, Yaba"}
        if location is not None:
            data["latitude"], data["longitude"] = location
        data.update(fields)
        return CarwashService(db).create_carwash(CarwashCreate(**data), owner)

    return _make_carwash


@pytest.fixture
def carwash(make_carwash):
    return make_carwash()


@pytest.fixture
def wash_service(db, carwash):
    return CarwashService(db).create_service(
        carwash.id, ServiceCreate(name="Exterior Wash", price=2500, duration=30)
    )


@pytest.fixture
def make_car(db, customer):
    def _make_car(user=None, model="Toyota Corolla", plate="LND-123-AB", **fields):
        return CarService(db).create_car(user or customer, CarCreate(model=model, plate=plate, **fields))

    return _make_car


@pytest.fixture
def car(make_car):
    return make_car()


@pytest.fixture
def make_booking(db, notifications, customer, carwash, make_car):
    slots = iter(datetime(2026, 3, 2, 8, 0) + timedelta(minutes=30 * i) for i in range(48))

    def _make_booking(user=None, at=None, **fields):
        user = user or customer
        data = BookingCreate(
            carwash_id=fields.pop("carwash_id", carwash.id),
            car_id=fields.pop("car_id", None) or make_car(user).id,
            booking_time=at or next(slots),
            **fields,
        )
        return BookingService(db, notifications).create_booking(user, data)

    return _make_booking


@pytest.fixture
def make_order(db, notifications, make_booking):
    def _make_order(**booking_fields):
        booking = make_booking(**booking_fields)
        return OrderService(db, notifications).create_order_from_booking(booking.id)

    return _make_order


@pytest.fixture
def order(make_order):
    return make_order()


@pytest.fixture
def make_worker(db, notifications, owner, carwash):
    def _make_worker(name="Tunde Bakare", **fields):
        data = WorkerCreate(name=name, email=f"{generate_id()[:8]}@sparklewash.ng", carwash_id=carwash.id, **fields)
        return WorkerService(db, notifications).create_worker(owner, data)

    return _make_worker


@pytest.fixture
def worker(make_worker):
    return make_worker()


def auth(user):
    return {"X-User-Id": user.id}
