"""Car repository - Database operations for customer cars"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...errors import store_operation
from ...models import Car


class CarRepository:
    """Repository for car database operations"""

    @staticmethod
    @store_operation
    def create_car(db: Session, unset_other_defaults: bool = False, **car_data) -> Car:
        """Insert a car, clearing the owner's other defaults in the same commit when asked"""
        if unset_other_defaults:
            db.query(Car).filter(Car.owner_id == car_data["owner_id"], Car.is_default.is_(True)).update(
                {Car.is_default: False}, synchronize_session=False
            )
        car = Car(**car_data)
        db.add(car)
        db.commit()
        db.refresh(car)
        return car

    @staticmethod
    @store_operation
    def get_car_by_id(db: Session, car_id: str) -> Optional[Car]:
        return db.query(Car).filter(Car.id == car_id).first()

    @staticmethod
    @store_operation
    def get_cars_by_owner(db: Session, owner_id: str) -> list[Car]:
        return (
            db.query(Car)
            .filter(Car.owner_id == owner_id)
            .order_by(Car.is_default.desc(), Car.created_at.asc())
            .all()
        )

    @staticmethod
    @store_operation
    def update_car(db: Session, car: Car, **updates) -> Car:
        for key, value in updates.items():
            setattr(car, key, value)

        db.commit()
        db.refresh(car)
        return car

    @staticmethod
    @store_operation
    def set_default(db: Session, car: Car, updated_at: datetime) -> Car:
        """Make ``car`` its owner's only default car"""
        db.query(Car).filter(Car.owner_id == car.owner_id, Car.id != car.id, Car.is_default.is_(True)).update(
            {Car.is_default: False, Car.updated_at: updated_at}, synchronize_session=False
        )
        car.is_default = True
        car.updated_at = updated_at
        db.commit()
        db.refresh(car)
        return car

    @staticmethod
    @store_operation
    def delete_car(db: Session, car: Car) -> None:
        db.delete(car)
        db.commit()
