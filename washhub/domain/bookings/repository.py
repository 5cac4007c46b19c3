"""Booking repository - Database operations for bookings"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import store_operation
from ...models import Booking


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    @store_operation
    def create_booking(db: Session, **booking_data) -> Booking:
        """Insert a booking. A duplicate (carwash_id, booking_time) raises IntegrityError."""
        booking = Booking(**booking_data)
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    @staticmethod
    @store_operation
    def get_booking_by_id(db: Session, booking_id: str) -> Optional[Booking]:
        return db.query(Booking).filter(Booking.id == booking_id).first()

    @staticmethod
    @store_operation
    def get_bookings_by_user(db: Session, user_id: str) -> list[Booking]:
        return (
            db.query(Booking)
            .filter(Booking.user_id == user_id)
            .order_by(Booking.booking_time.desc())
            .all()
        )

    @staticmethod
    @store_operation
    def get_bookings_by_carwash(db: Session, carwash_id: str) -> list[Booking]:
        return (
            db.query(Booking)
            .filter(Booking.carwash_id == carwash_id)
            .order_by(Booking.booking_time.asc())
            .all()
        )

    @staticmethod
    @store_operation
    def get_bookings_between(db: Session, carwash_id: str, start: datetime, end: datetime) -> list[Booking]:
        """All of a carwash's bookings with start <= booking_time < end, any status"""
        return (
            db.query(Booking)
            .filter(
                Booking.carwash_id == carwash_id,
                Booking.booking_time >= start,
                Booking.booking_time < end,
            )
            .order_by(Booking.booking_time.asc())
            .all()
        )

    @staticmethod
    @store_operation
    def get_bookings_filtered(
        db: Session,
        carwash_id: str,
        status: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Booking]:
        query = db.query(Booking).filter(Booking.carwash_id == carwash_id)

        if status:
            query = query.filter(Booking.status == status)
        if start:
            query = query.filter(Booking.booking_time >= start)
        if end:
            query = query.filter(Booking.booking_time <= end)

        return query.order_by(Booking.booking_time.asc()).all()

    @staticmethod
    @store_operation
    def update_booking(db: Session, booking: Booking, **updates) -> Booking:
        for key, value in updates.items():
            setattr(booking, key, value)

        db.commit()
        db.refresh(booking)
        return booking

    @staticmethod
    @store_operation
    def service_in_use(db: Session, carwash_id: str, service_id: str) -> bool:
        """Whether any booking at the carwash references the service"""
        rows = db.query(Booking.service_ids).filter(Booking.carwash_id == carwash_id).all()
        return any(service_id in (ids or []) for (ids,) in rows)
