"""Booking router - FastAPI endpoints for booking operations"""

import logging
from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_business_user, get_current_user
from ...database import get_db
from ...jobs import get_job_queue
from ...models import User
from ..notifications.service import NotificationService
from .schemas import BookingCreate, BookingResponse, BookingStatusUpdate, BookingUpdate
from .service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])


def get_booking_service(db: Session = Depends(get_db), job_queue=Depends(get_job_queue)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db, NotificationService(db, job_queue))


@router.post("", response_model=BookingResponse, status_code=201)
async def create_booking(
    data: BookingCreate,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return service.create_booking(current_user, data)


@router.get("/mine", response_model=list[BookingResponse])
async def list_my_bookings(
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return service.list_by_user(current_user.id)


@router.get("/carwash/{carwash_id}", response_model=list[BookingResponse])
async def list_carwash_bookings(
    carwash_id: str,
    day: Optional[date] = Query(None, alias="date"),
    status: Optional[str] = Query(None),
    start: Optional[datetime] = Query(None, alias="from"),
    end: Optional[datetime] = Query(None, alias="to"),
    current_user: User = Depends(get_business_user),
    service: BookingService = Depends(get_booking_service),
):
    """A carwash's bookings: for one day with ?date=, otherwise filtered by status and time range"""
    service.carwashes.get_owned_carwash(carwash_id, current_user)
    if day is not None:
        return service.list_by_carwash_and_date(carwash_id, day)
    if status is None and start is None and end is None:
        return service.list_by_carwash(carwash_id)
    return service.list_by_carwash_filtered(carwash_id, status=status, start=start, end=end)


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: str,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return service.get_booking_for_user(booking_id, current_user)


@router.patch("/{booking_id}", response_model=BookingResponse)
async def update_booking(
    booking_id: str,
    data: BookingUpdate,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    return service.update_booking(current_user, booking_id, data)


@router.patch("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: str,
    data: BookingStatusUpdate,
    current_user: User = Depends(get_business_user),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.get_booking(booking_id)
    service.carwashes.get_owned_carwash(booking.carwash_id, current_user)
    return service.update_status(booking_id, data.status)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: str,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    service.get_booking_for_user(booking_id, current_user)
    return service.cancel(booking_id)
