"""Payment router - FastAPI endpoints for payment records"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_business_user, get_current_user
from ...database import get_db
from ...jobs import get_job_queue
from ...models import User
from ..notifications.service import NotificationService
from .schemas import EarningsResponse, PaymentCreate, PaymentResponse
from .service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/payments", tags=["Payments"])


def get_payment_service(db: Session = Depends(get_db), job_queue=Depends(get_job_queue)) -> PaymentService:
    """Dependency injection for PaymentService"""
    return PaymentService(db, NotificationService(db, job_queue))


def _ensure_can_view(service: PaymentService, payment, user: User):
    if payment.user_id == user.id:
        return payment
    service.carwashes.get_owned_carwash(payment.carwash_id, user)
    return payment


@router.post("", response_model=PaymentResponse, status_code=201)
async def create_payment(
    data: PaymentCreate,
    current_user: User = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service),
):
    return service.create_payment(current_user, data)


@router.get("/mine", response_model=list[PaymentResponse])
async def list_my_payments(
    current_user: User = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service),
):
    return service.list_by_user(current_user.id)


@router.get("/carwash/{carwash_id}", response_model=list[PaymentResponse])
async def list_carwash_payments(
    carwash_id: str,
    current_user: User = Depends(get_business_user),
    service: PaymentService = Depends(get_payment_service),
):
    service.carwashes.get_owned_carwash(carwash_id, current_user)
    return service.list_by_carwash(carwash_id)


@router.get("/carwash/{carwash_id}/earnings", response_model=EarningsResponse)
async def get_carwash_earnings(
    carwash_id: str,
    current_user: User = Depends(get_business_user),
    service: PaymentService = Depends(get_payment_service),
):
    carwash = service.carwashes.get_owned_carwash(carwash_id, current_user)
    return {"carwash_id": carwash.id, "total_earnings": service.earnings_by_carwash(carwash.id)}


@router.get("/order/{order_id}", response_model=PaymentResponse)
async def get_order_payment(
    order_id: str,
    current_user: User = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service),
):
    return _ensure_can_view(service, service.get_by_order(order_id), current_user)


@router.get("/reference/{transaction_ref}", response_model=PaymentResponse)
async def get_payment_by_reference(
    transaction_ref: str,
    current_user: User = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service),
):
    return _ensure_can_view(service, service.get_by_reference(transaction_ref), current_user)
