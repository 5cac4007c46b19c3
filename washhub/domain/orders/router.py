"""Order router - FastAPI endpoints for order operations"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_business_user, get_current_user
from ...database import get_db
from ...jobs import get_job_queue
from ...models import User
from ..notifications.service import NotificationService
from .schemas import OrderResponse, OrderStatusUpdate
from .service import OrderService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["Orders"])


def get_order_service(db: Session = Depends(get_db), job_queue=Depends(get_job_queue)) -> OrderService:
    """Dependency injection for OrderService"""
    return OrderService(db, NotificationService(db, job_queue))


@router.post("/from-booking/{booking_id}", response_model=OrderResponse, status_code=201)
async def create_order_from_booking(
    booking_id: str,
    current_user: User = Depends(get_business_user),
    service: OrderService = Depends(get_order_service),
):
    """Approve a booking at one of the caller's carwashes by converting it to an order"""
    booking = service.get_source_booking(booking_id)
    service.carwashes.get_owned_carwash(booking.carwash_id, current_user)
    return service.create_order_from_booking(booking_id)


@router.get("/mine", response_model=list[OrderResponse])
async def list_my_orders(
    current_user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    return service.list_by_user(current_user.id)


@router.get("/carwash/{carwash_id}", response_model=list[OrderResponse])
async def list_carwash_orders(
    carwash_id: str,
    current_user: User = Depends(get_business_user),
    service: OrderService = Depends(get_order_service),
):
    service.carwashes.get_owned_carwash(carwash_id, current_user)
    return service.list_by_carwash(carwash_id)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    current_user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    return service.get_order_for_user(order_id, current_user)


@router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str,
    data: OrderStatusUpdate,
    current_user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    """Carwash owners and the assigned worker move orders along"""
    order = service.get_order(order_id)
    if order.worker_id != current_user.id:
        service.carwashes.get_owned_carwash(order.carwash_id, current_user)
    return service.update_status(order_id, data.status)
