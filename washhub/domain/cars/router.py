"""Car router - FastAPI endpoints for customer cars"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import CarCreate, CarResponse, CarUpdate
from .service import CarService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cars", tags=["Cars"])


def get_car_service(db: Session = Depends(get_db)) -> CarService:
    """Dependency injection for CarService"""
    return CarService(db)


@router.post("", response_model=CarResponse, status_code=201)
async def create_car(
    data: CarCreate,
    current_user: User = Depends(get_current_user),
    service: CarService = Depends(get_car_service),
):
    return service.create_car(current_user, data)


@router.get("/mine", response_model=list[CarResponse])
async def list_my_cars(
    current_user: User = Depends(get_current_user),
    service: CarService = Depends(get_car_service),
):
    return service.list_by_user(current_user.id)


@router.get("/{car_id}", response_model=CarResponse)
async def get_car(
    car_id: str,
    current_user: User = Depends(get_current_user),
    service: CarService = Depends(get_car_service),
):
    return service.get_owned_car(car_id, current_user)


@router.patch("/{car_id}", response_model=CarResponse)
async def update_car(
    car_id: str,
    data: CarUpdate,
    current_user: User = Depends(get_current_user),
    service: CarService = Depends(get_car_service),
):
    return service.update_car(current_user, car_id, data)


@router.patch("/{car_id}/default", response_model=CarResponse)
async def set_default_car(
    car_id: str,
    current_user: User = Depends(get_current_user),
    service: CarService = Depends(get_car_service),
):
    return service.set_default(current_user, car_id)


@router.delete("/{car_id}")
async def delete_car(
    car_id: str,
    current_user: User = Depends(get_current_user),
    service: CarService = Depends(get_car_service),
):
    service.delete_car(current_user, car_id)
    return {"message": "Car deleted successfully"}
