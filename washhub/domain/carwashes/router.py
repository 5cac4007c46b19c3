"""Carwash router - FastAPI endpoints for carwashes and their services"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_business_user
from ...database import get_db
from ...models import User
from .schemas import (
    CarwashCreate,
    CarwashResponse,
    CarwashUpdate,
    LocationUpdate,
    NearbySearchResponse,
    QueueCountUpdate,
    ServiceCreate,
    ServiceResponse,
    ServiceUpdate,
    SlotResponse,
    StatusUpdate,
)
from .service import CarwashService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/carwashes", tags=["Carwashes"])


def get_carwash_service(db: Session = Depends(get_db)) -> CarwashService:
    """Dependency injection for CarwashService"""
    return CarwashService(db)


# ============================================================================
# DISCOVERY
# ============================================================================


@router.get("", response_model=list[CarwashResponse])
async def list_carwashes(service: CarwashService = Depends(get_carwash_service)):
    """All carwashes currently accepting bookings"""
    return service.list_active()


@router.get("/mine", response_model=list[CarwashResponse])
async def list_my_carwashes(
    current_user: User = Depends(get_business_user),
    service: CarwashService = Depends(get_carwash_service),
):
    return service.list_by_owner(current_user.id)


@router.get("/search", response_model=list[CarwashResponse])
async def search_carwashes(
    state: Optional[str] = Query(None),
    lga: Optional[str] = Query(None),
    country: Optional[str] = Query(None),
    home_service: Optional[bool] = Query(None),
    name: Optional[str] = Query(None),
    service: CarwashService = Depends(get_carwash_service),
):
    return service.search(state=state, lga=lga, country=country, home_service=home_service, name=name)


@router.get("/nearby", response_model=NearbySearchResponse)
async def find_nearby(
    lat: float = Query(...),
    lng: float = Query(...),
    service: CarwashService = Depends(get_carwash_service),
):
    """Nearest carwashes, widening the radius until something is found"""
    return service.find_nearby_for_user(lat, lng)


# ============================================================================
# CARWASH RECORDS
# ============================================================================


@router.post("", response_model=CarwashResponse, status_code=201)
async def create_carwash(
    data: CarwashCreate,
    current_user: User = Depends(get_business_user),
    service: CarwashService = Depends(get_carwash_service),
):
    return service.create_carwash(data, current_user)


@router.get("/{carwash_id}", response_model=CarwashResponse)
async def get_carwash(carwash_id: str, service: CarwashService = Depends(get_carwash_service)):
    return service.get_carwash(carwash_id)


@router.patch("/{carwash_id}", response_model=CarwashResponse)
async def update_carwash(
    carwash_id: str,
    data: CarwashUpdate,
    current_user: User = Depends(get_business_user),
    service: CarwashService = Depends(get_carwash_service),
):
    service.get_owned_carwash(carwash_id, current_user)
    return service.update_carwash(carwash_id, data)


@router.patch("/{carwash_id}/status", response_model=CarwashResponse)
async def set_carwash_status(
    carwash_id: str,
    data: StatusUpdate,
    current_user: User = Depends(get_business_user),
    service: CarwashService = Depends(get_carwash_service),
):
    service.get_owned_carwash(carwash_id, current_user)
    return service.set_active(carwash_id, data.is_active)


@router.put("/{carwash_id}/location", response_model=CarwashResponse)
async def update_location(
    carwash_id: str,
    data: LocationUpdate,
    current_user: User = Depends(get_business_user),
    service: CarwashService = Depends(get_carwash_service),
):
    service.get_owned_carwash(carwash_id, current_user)
    return service.update_location(carwash_id, data)


@router.patch("/{carwash_id}/queue", response_model=CarwashResponse)
async def update_queue_count(
    carwash_id: str,
    data: QueueCountUpdate,
    current_user: User = Depends(get_business_user),
    service: CarwashService = Depends(get_carwash_service),
):
    service.get_owned_carwash(carwash_id, current_user)
    return service.update_queue_count(carwash_id, data.count)


@router.post("/{carwash_id}/onboarding", response_model=CarwashResponse)
async def complete_onboarding(
    carwash_id: str,
    current_user: User = Depends(get_business_user),
    service: CarwashService = Depends(get_carwash_service),
):
    service.get_owned_carwash(carwash_id, current_user)
    return service.complete_onboarding(carwash_id)


@router.get("/{carwash_id}/slots", response_model=list[SlotResponse])
async def get_available_slots(
    carwash_id: str,
    day: date = Query(..., alias="date"),
    service: CarwashService = Depends(get_carwash_service),
):
    return service.get_available_slots(carwash_id, day)


# ============================================================================
# SERVICES
# ============================================================================


@router.post("/{carwash_id}/services", response_model=ServiceResponse, status_code=201)
async def create_service(
    carwash_id: str,
    data: ServiceCreate,
    current_user: User = Depends(get_business_user),
    service: CarwashService = Depends(get_carwash_service),
):
    service.get_owned_carwash(carwash_id, current_user)
    return service.create_service(carwash_id, data)


@router.get("/{carwash_id}/services", response_model=list[ServiceResponse])
async def list_services(carwash_id: str, service: CarwashService = Depends(get_carwash_service)):
    return service.list_services(carwash_id)


@router.get("/{carwash_id}/services/{service_id}", response_model=ServiceResponse)
async def get_service(
    carwash_id: str, service_id: str, service: CarwashService = Depends(get_carwash_service)
):
    return service.get_service(carwash_id, service_id)


@router.patch("/{carwash_id}/services/{service_id}", response_model=ServiceResponse)
async def update_service(
    carwash_id: str,
    service_id: str,
    data: ServiceUpdate,
    current_user: User = Depends(get_business_user),
    service: CarwashService = Depends(get_carwash_service),
):
    service.get_owned_carwash(carwash_id, current_user)
    return service.update_service(carwash_id, service_id, data)


@router.delete("/{carwash_id}/services/{service_id}")
async def delete_service(
    carwash_id: str,
    service_id: str,
    current_user: User = Depends(get_business_user),
    service: CarwashService = Depends(get_carwash_service),
):
    service.get_owned_carwash(carwash_id, current_user)
    return service.delete_service(carwash_id, service_id)
