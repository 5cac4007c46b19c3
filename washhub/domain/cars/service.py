"""Car service - Customer cars and the default car"""

import logging

from sqlalchemy.orm import Session

from ...errors import NotFoundError, PermissionDeniedError, ValidationError
from ...models import Car, User, generate_id, utcnow
from ...shared.validators import clean_text, require_id
from .repository import CarRepository
from .schemas import CarCreate, CarUpdate

logger = logging.getLogger(__name__)


def _required_text(value, label: str, max_length: int) -> str:
    value = clean_text(value, max_length=max_length)
    if not value:
        raise ValidationError(f"{label} is required")
    return value


class CarService:
    """Service layer for car business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CarRepository()

    def create_car(self, user: User, data: CarCreate) -> Car:
        if user.role != "car_owner":
            raise PermissionDeniedError("only car owners can add cars")

        now = utcnow()
        car_data = {
            "id": generate_id(),
            "owner_id": user.id,
            "model": _required_text(data.model, "model", 100),
            "plate": _required_text(data.plate, "plate", 20),
            "color": clean_text(data.color, max_length=50),
            "is_default": data.is_default,
            "created_at": now,
            "updated_at": now,
        }
        car = self.repo.create_car(self.db, unset_other_defaults=data.is_default, **car_data)

        logger.info(f"✅ Car {car.id} added for user {user.id}")
        return car

    def get_car(self, car_id: str) -> Car:
        car_id = require_id(car_id, "car")
        car = self.repo.get_car_by_id(self.db, car_id)
        if not car:
            raise NotFoundError("car")
        return car

    def get_owned_car(self, car_id: str, user: User) -> Car:
        """Fetch a car and make sure it belongs to the user"""
        car = self.get_car(car_id)
        if car.owner_id != user.id:
            logger.warning(f"⚠️ User {user.id} tried to use car {car.id}")
            raise PermissionDeniedError("this car does not belong to you")
        return car

    def list_by_user(self, user_id: str) -> list[Car]:
        """The user's cars, default first"""
        user_id = require_id(user_id, "user")
        return self.repo.get_cars_by_owner(self.db, user_id)

    def update_car(self, user: User, car_id: str, data: CarUpdate) -> Car:
        car = self.get_owned_car(car_id, user)

        updates = {}
        if data.model is not None:
            updates["model"] = _required_text(data.model, "model", 100)
        if data.plate is not None:
            updates["plate"] = _required_text(data.plate, "plate", 20)
        if data.color is not None:
            updates["color"] = clean_text(data.color, max_length=50)
        if not updates and data.is_default is None:
            raise ValidationError("no valid fields to update")

        now = utcnow()
        if updates:
            updates["updated_at"] = now
            car = self.repo.update_car(self.db, car, **updates)
        if data.is_default:
            car = self.repo.set_default(self.db, car, now)
        elif data.is_default is False and car.is_default:
            car = self.repo.update_car(self.db, car, is_default=False, updated_at=now)
        return car

    def set_default(self, user: User, car_id: str) -> Car:
        car = self.get_owned_car(car_id, user)
        logger.info(f"⭐ Car {car.id} is now the default for user {user.id}")
        return self.repo.set_default(self.db, car, utcnow())

    def delete_car(self, user: User, car_id: str) -> None:
        """Hard delete. Bookings and orders keep the car's id."""
        car = self.get_owned_car(car_id, user)
        self.repo.delete_car(self.db, car)
        logger.info(f"🗑️ Car {car_id} deleted by user {user.id}")
