"""Booking service - Business logic for slot bookings"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from ...models import Booking, Carwash, User, generate_id, utcnow
from ...shared.validators import clean_text, parse_time_of_day, require_id, weekday_key
from ...utils.geo import is_within_service_range
from ..cars.service import CarService
from ..carwashes.service import CarwashService
from ..notifications.service import NotificationService
from .repository import BookingRepository
from .schemas import BookingCreate, BookingUpdate

logger = logging.getLogger(__name__)

BOOKING_STATUSES = ("pending", "approved", "cancelled", "completed")
BOOKING_TYPES = ("slot_booking", "home_service")

SLOT_TAKEN = "selected time slot is already taken"


def to_utc(moment: datetime) -> datetime:
    """Naive UTC for storage. Naive input is taken to be UTC already."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def local_day_window(moment: datetime) -> tuple[datetime, datetime]:
    """
    [midnight, midnight + 24h) of the calendar day containing ``moment``,
    measured in moment's own timezone, returned as naive UTC bounds.
    """
    midnight = moment.replace(hour=0, minute=0, second=0, microsecond=0)
    start = to_utc(midnight)
    return start, start + timedelta(hours=24)


class BookingService:
    """Service layer for booking business logic"""

    def __init__(self, db: Session, notifications: NotificationService):
        self.db = db
        self.repo = BookingRepository()
        self.cars = CarService(db)
        self.carwashes = CarwashService(db)
        self.notifications = notifications

    def create_booking(self, user: User, data: BookingCreate) -> Booking:
        """
        Book a slot at a carwash.

        Two bookings at the same carwash may not share the exact same
        booking_time. The queue number is the booking's position among that
        carwash's bookings for the same local day and is never recomputed.
        """
        user_id = require_id(user.id, "user")
        if data.booking_time is None:
            raise ValidationError("booking time is required")
        car = self.cars.get_owned_car(data.car_id, user)
        if data.booking_type not in BOOKING_TYPES:
            raise ValidationError(f"invalid booking type: {data.booking_type}")

        carwash = self.carwashes.get_carwash(data.carwash_id)
        if not carwash.is_active:
            raise ConflictError("carwash is not accepting bookings")

        local_time = data.booking_time
        self._check_open_hours(carwash, local_time)
        service_ids = self._check_service_ids(carwash, data.service_ids)

        user_lat = user_lng = None
        if data.booking_type == "home_service":
            user_lat, user_lng = self._check_home_service(carwash, data)
        elif data.user_location is not None:
            user_lat, user_lng = data.user_location.latitude, data.user_location.longitude

        booking_time = to_utc(local_time)
        day_start, day_end = local_day_window(local_time)
        same_day = self.repo.get_bookings_between(self.db, carwash.id, day_start, day_end)

        for existing in same_day:
            if existing.booking_time == booking_time:
                logger.warning(f"⚠️ Slot {booking_time} at carwash {carwash.id} already taken")
                raise ConflictError(SLOT_TAKEN)

        now = utcnow()
        booking_data = {
            "id": generate_id(),
            "user_id": user_id,
            "car_id": car.id,
            "carwash_id": carwash.id,
            "service_ids": service_ids,
            "booking_time": booking_time,
            "booking_type": data.booking_type,
            "user_latitude": user_lat,
            "user_longitude": user_lng,
            "address_note": clean_text(data.address_note),
            "notes": clean_text(data.notes, max_length=1000),
            "status": "pending",
            "queue_number": len(same_day) + 1,
            "created_at": now,
            "updated_at": now,
        }

        try:
            booking = self.repo.create_booking(self.db, **booking_data)
        except IntegrityError as e:
            # A concurrent request took the slot between the check and the insert
            raise ConflictError(SLOT_TAKEN) from e

        logger.info(
            f"✅ Booking {booking.id} created at carwash {carwash.id} "
            f"for {booking.booking_time} (queue #{booking.queue_number})"
        )

        self.notifications.send_booking_confirmation(booking)
        self.notifications.send_new_booking_to_business(
            carwash.owner_id, user.name or user.email, booking.booking_time
        )
        return booking

    @staticmethod
    def _check_open_hours(carwash: Carwash, local_time: datetime) -> None:
        """Carwashes without configured hours accept any time"""
        open_hours = carwash.open_hours or {}
        if not open_hours:
            return

        hours = open_hours.get(weekday_key(local_time))
        if not hours:
            raise ValidationError("carwash is not open on this day")

        opening = parse_time_of_day(hours["start"])
        closing = parse_time_of_day(hours["end"])
        requested = (local_time.hour, local_time.minute)
        if requested < opening or requested > closing:
            raise ValidationError("booking time is outside of open hours")

    @staticmethod
    def _check_service_ids(carwash: Carwash, service_ids: list[str]) -> list[str]:
        offered = {s["id"] for s in carwash.services or [] if s.get("active", True)}
        checked = []
        for service_id in service_ids:
            service_id = require_id(service_id, "service")
            if service_id not in offered:
                raise ValidationError(f"service {service_id} is not offered by this carwash")
            checked.append(service_id)
        return checked

    @staticmethod
    def _check_home_service(carwash: Carwash, data: BookingCreate) -> tuple[float, float]:
        if not carwash.home_service:
            raise ValidationError("carwash does not offer home service")
        if data.user_location is None:
            raise ValidationError("user location is required for home service")

        lat, lng = data.user_location.latitude, data.user_location.longitude
        if not -90 <= lat <= 90 or not -180 <= lng <= 180:
            raise ValidationError("user location coordinates are out of range")

        if carwash.has_location and not is_within_service_range(
            lat, lng, carwash.latitude, carwash.longitude, carwash.service_range_minutes
        ):
            raise ValidationError("user is outside the service range for this carwash")
        return lat, lng

    # ========================================================================
    # READS
    # ========================================================================

    def get_booking(self, booking_id: str) -> Booking:
        booking_id = require_id(booking_id, "booking")
        booking = self.repo.get_booking_by_id(self.db, booking_id)
        if not booking:
            raise NotFoundError("booking")
        return booking

    def get_booking_for_user(self, booking_id: str, user: User) -> Booking:
        """The booking, provided the user is its customer, the carwash owner or one of its workers"""
        booking = self.get_booking(booking_id)
        if booking.user_id == user.id:
            return booking
        if user.role == "worker" and user.carwash_id == booking.carwash_id:
            return booking
        carwash = self.carwashes.get_carwash(booking.carwash_id)
        if carwash.owner_id != user.id:
            raise PermissionDeniedError("you do not have access to this booking")
        return booking

    def list_by_user(self, user_id: str) -> list[Booking]:
        user_id = require_id(user_id, "user")
        return self.repo.get_bookings_by_user(self.db, user_id)

    def list_by_carwash(self, carwash_id: str) -> list[Booking]:
        carwash_id = require_id(carwash_id, "carwash")
        return self.repo.get_bookings_by_carwash(self.db, carwash_id)

    def list_by_carwash_and_date(self, carwash_id: str, day: date) -> list[Booking]:
        """Bookings on a UTC calendar day"""
        carwash_id = require_id(carwash_id, "carwash")
        start = datetime(day.year, day.month, day.day)
        return self.repo.get_bookings_between(self.db, carwash_id, start, start + timedelta(hours=24))

    def list_by_carwash_filtered(
        self,
        carwash_id: str,
        status: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Booking]:
        carwash_id = require_id(carwash_id, "carwash")
        if status == "all":
            status = None
        if status and status not in BOOKING_STATUSES:
            raise ValidationError(f"invalid booking status: {status}")
        return self.repo.get_bookings_filtered(
            self.db,
            carwash_id,
            status=status,
            start=to_utc(start) if start else None,
            end=to_utc(end) if end else None,
        )

    # ========================================================================
    # UPDATES
    # ========================================================================

    def update_booking(self, user: User, booking_id: str, data: BookingUpdate) -> Booking:
        """Customer edits to their own booking. Time and carwash cannot change here."""
        booking = self.get_booking(booking_id)
        if booking.user_id != user.id:
            raise PermissionDeniedError("only the customer who made the booking can update it")

        updates = {}
        if data.car_id is not None:
            updates["car_id"] = self.cars.get_owned_car(data.car_id, user).id
        if data.service_ids is not None:
            carwash = self.carwashes.get_carwash(booking.carwash_id)
            updates["service_ids"] = self._check_service_ids(carwash, data.service_ids)
        if data.notes is not None:
            updates["notes"] = clean_text(data.notes, max_length=1000)
        if data.address_note is not None:
            updates["address_note"] = clean_text(data.address_note)

        updates["updated_at"] = utcnow()
        return self.repo.update_booking(self.db, booking, **updates)

    def update_status(self, booking_id: str, new_status: str) -> Booking:
        """Overwrite the status. Any value in BOOKING_STATUSES is accepted from any state."""
        if new_status not in BOOKING_STATUSES:
            raise ValidationError(f"invalid booking status: {new_status}")
        booking = self.get_booking(booking_id)
        logger.info(f"🔄 Booking {booking.id}: {booking.status} -> {new_status}")
        return self.repo.update_booking(self.db, booking, status=new_status, updated_at=utcnow())

    def cancel(self, booking_id: str) -> Booking:
        """Cancel a booking. Other bookings keep their queue numbers."""
        return self.update_status(booking_id, "cancelled")
