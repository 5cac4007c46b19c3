import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

from .database import Base


def generate_id():
    """Generate a unique identifier for a new record"""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (all stored timestamps are UTC)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def geo_point(longitude, latitude):
    """GeoJSON point, coordinates in [longitude, latitude] order"""
    if longitude is None or latitude is None:
        return None
    return {"type": "Point", "coordinates": [longitude, latitude]}


class User(Base):
    """Any account: car owner, business owner or worker"""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(100), nullable=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(50), nullable=True)
    role = Column(String(20), nullable=False, default="car_owner")  # car_owner, business, worker, admin
    status = Column(String(20), nullable=False, default="active")  # active, pending, suspended
    account_type = Column(String(20), nullable=True)  # car_owner, car_wash
    profile_photo = Column(String(500), nullable=True)
    # Workers: the carwash (business) they work for
    carwash_id = Column(String(36), nullable=True, index=True)
    job_role = Column(String(100), nullable=True)
    work_status = Column(String(20), nullable=True)  # online, offline, busy, on_break
    active_orders = Column(JSON, default=list, nullable=False)  # order ids, 0 or 1 entries
    last_seen = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class Carwash(Base):
    __tablename__ = "carwashes"

    id = Column(String(36), primary_key=True, default=generate_id)
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    address = Column(String(200), nullable=False)
    state = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)
    lga = Column(String(100), nullable=True)

    # Location (queried by the nearby search only when has_location is set)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    has_location = Column(Boolean, default=False, nullable=False, index=True)
    service_range_minutes = Column(Integer, default=30, nullable=False)

    is_active = Column(Boolean, default=True, nullable=False, index=True)
    has_onboarded = Column(Boolean, default=False, nullable=False)
    home_service = Column(Boolean, default=False, nullable=False)
    delivery_radius_km = Column(Integer, nullable=True)
    max_cars_per_slot = Column(Integer, default=1, nullable=False)
    queue_count = Column(Integer, default=0, nullable=False)
    rating = Column(Float, default=0.0, nullable=False)

    # Embedded services: [{"id", "name", "description", "price", "duration",
    #                      "is_addon", "active", "created_at", "updated_at"}]
    services = Column(JSON, default=list, nullable=False)
    # e.g. {"mon": {"start": "08:00", "end": "18:00"}, ...}
    open_hours = Column(JSON, default=dict, nullable=False)
    photo_gallery = Column(JSON, default=list, nullable=False)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    @property
    def location(self):
        return geo_point(self.longitude, self.latitude)


class Car(Base):
    """A car owner's vehicle, referenced by bookings and orders"""

    __tablename__ = "cars"

    id = Column(String(36), primary_key=True, default=generate_id)
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    model = Column(String(100), nullable=False)
    plate = Column(String(20), nullable=False)
    color = Column(String(50), nullable=True)
    is_default = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)


class Booking(Base):
    __tablename__ = "bookings"
    # One booking per carwash per exact instant
    __table_args__ = (UniqueConstraint("carwash_id", "booking_time", name="uq_booking_slot"),)

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    car_id = Column(String(36), nullable=False)
    carwash_id = Column(String(36), ForeignKey("carwashes.id"), nullable=False, index=True)
    service_ids = Column(JSON, default=list, nullable=False)
    booking_time = Column(DateTime, nullable=False, index=True)  # UTC
    booking_type = Column(String(20), nullable=False)  # slot_booking, home_service
    user_latitude = Column(Float, nullable=True)
    user_longitude = Column(Float, nullable=True)
    address_note = Column(String(500), nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(String(20), default="pending", nullable=False)  # pending, approved, cancelled, completed
    # Position among the carwash's bookings for that day, fixed at creation
    queue_number = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    @property
    def user_location(self):
        return geo_point(self.user_longitude, self.user_latitude)


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=generate_id)
    # At most one order per booking
    booking_id = Column(String(36), ForeignKey("bookings.id"), nullable=True, unique=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    car_id = Column(String(36), nullable=False)
    carwash_id = Column(String(36), ForeignKey("carwashes.id"), nullable=False, index=True)
    service_ids = Column(JSON, default=list, nullable=False)
    worker_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    start_time = Column(DateTime, nullable=True)
    end_time = Column(DateTime, nullable=True)
    queue_number = Column(Integer, nullable=False, default=0)
    status = Column(String(20), default="active", nullable=False)  # active, in_progress, completed, cancelled
    total_amount = Column(Float, default=0.0, nullable=False)
    payment_status = Column(String(20), default="unpaid", nullable=False)  # unpaid, paid
    booking_type = Column(String(20), nullable=True)
    user_latitude = Column(Float, nullable=True)
    user_longitude = Column(Float, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    @property
    def user_location(self):
        return geo_point(self.user_longitude, self.user_latitude)


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (UniqueConstraint("user_id", "order_id", name="uq_review_user_order"),)

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    carwash_id = Column(String(36), ForeignKey("carwashes.id"), nullable=False, index=True)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=True, index=True)
    rating = Column(Integer, nullable=False)
    accuracy = Column(Integer, nullable=True)
    cleanliness = Column(Integer, nullable=True)
    worker_rating = Column(Integer, nullable=True)
    comment = Column(String(500), nullable=True)
    photos = Column(JSON, default=list, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)


class Payment(Base):
    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    carwash_id = Column(String(36), ForeignKey("carwashes.id"), nullable=False, index=True)
    order_id = Column(String(36), ForeignKey("orders.id"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    method = Column(String(20), nullable=False)  # cash, card, wallet, transfer
    status = Column(String(20), default="paid", nullable=False)  # paid, failed, pending, refunded
    transaction_ref = Column(String(255), unique=True, nullable=True)
    paid_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=generate_id)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(20), nullable=False)  # booking, order, payment, worker, general
    is_read = Column(Boolean, default=False, nullable=False)
    email_sent = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
