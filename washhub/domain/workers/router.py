"""Worker router - FastAPI endpoints for worker management"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_business_user, get_current_user
from ...database import get_db
from ...jobs import get_job_queue
from ...models import User
from ..notifications.service import NotificationService
from ..orders.schemas import OrderResponse
from .schemas import AccountStatusUpdate, WorkerCreate, WorkerResponse, WorkerUpdate, WorkStatusUpdate
from .service import WorkerService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workers", tags=["Workers"])


def get_worker_service(db: Session = Depends(get_db), job_queue=Depends(get_job_queue)) -> WorkerService:
    """Dependency injection for WorkerService"""
    return WorkerService(db, NotificationService(db, job_queue))


# ============================================================================
# WORKER ACCOUNTS
# ============================================================================


@router.post("", response_model=WorkerResponse, status_code=201)
async def create_worker(
    data: WorkerCreate,
    current_user: User = Depends(get_business_user),
    service: WorkerService = Depends(get_worker_service),
):
    return service.create_worker(current_user, data)


@router.get("/business/{carwash_id}", response_model=list[WorkerResponse])
async def list_workers(
    carwash_id: str,
    current_user: User = Depends(get_business_user),
    service: WorkerService = Depends(get_worker_service),
):
    service.carwashes.get_owned_carwash(carwash_id, current_user)
    return service.list_by_business(carwash_id)


@router.get("/business/{carwash_id}/available", response_model=list[WorkerResponse])
async def list_available_workers(
    carwash_id: str,
    current_user: User = Depends(get_business_user),
    service: WorkerService = Depends(get_worker_service),
):
    service.carwashes.get_owned_carwash(carwash_id, current_user)
    return service.list_available_by_business(carwash_id)


@router.get("/{worker_id}", response_model=WorkerResponse)
async def get_worker(
    worker_id: str,
    current_user: User = Depends(get_current_user),
    service: WorkerService = Depends(get_worker_service),
):
    return service.get_managed_worker(worker_id, current_user)


@router.patch("/{worker_id}", response_model=WorkerResponse)
async def update_worker(
    worker_id: str,
    data: WorkerUpdate,
    current_user: User = Depends(get_business_user),
    service: WorkerService = Depends(get_worker_service),
):
    service.get_managed_worker(worker_id, current_user)
    return service.update_worker(worker_id, data)


@router.patch("/{worker_id}/status", response_model=WorkerResponse)
async def set_account_status(
    worker_id: str,
    data: AccountStatusUpdate,
    current_user: User = Depends(get_business_user),
    service: WorkerService = Depends(get_worker_service),
):
    service.get_managed_worker(worker_id, current_user)
    return service.set_account_status(worker_id, data.status)


@router.patch("/{worker_id}/work-status", response_model=WorkerResponse)
async def set_work_status(
    worker_id: str,
    data: WorkStatusUpdate,
    current_user: User = Depends(get_current_user),
    service: WorkerService = Depends(get_worker_service),
):
    """Workers set their own work status; owners can set it for them"""
    service.get_managed_worker(worker_id, current_user)
    return service.set_work_status(worker_id, data.work_status)


# ============================================================================
# ORDER ASSIGNMENT
# ============================================================================


@router.get("/{worker_id}/orders", response_model=list[OrderResponse])
async def list_assigned_orders(
    worker_id: str,
    current_user: User = Depends(get_current_user),
    service: WorkerService = Depends(get_worker_service),
):
    """A worker's own orders, or any of their workers' orders for an owner"""
    service.get_managed_worker(worker_id, current_user)
    return service.list_assigned_orders(worker_id)


@router.post("/{worker_id}/assign/{order_id}", response_model=OrderResponse)
async def assign_worker_to_order(
    worker_id: str,
    order_id: str,
    current_user: User = Depends(get_business_user),
    service: WorkerService = Depends(get_worker_service),
):
    service.get_managed_worker(worker_id, current_user)
    return service.assign_to_order(worker_id, order_id)


@router.post("/{worker_id}/unassign/{order_id}", response_model=WorkerResponse)
async def remove_worker_from_order(
    worker_id: str,
    order_id: str,
    current_user: User = Depends(get_business_user),
    service: WorkerService = Depends(get_worker_service),
):
    service.get_managed_worker(worker_id, current_user)
    return service.remove_from_order(worker_id, order_id)
