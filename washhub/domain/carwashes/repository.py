"""Carwash repository - Database operations for carwashes"""

from typing import Optional

from sqlalchemy.orm import Session

from ...errors import store_operation
from ...models import Carwash
from ...utils.geo import bounding_box, distance_km


class CarwashRepository:
    """Repository for carwash database operations"""

    @staticmethod
    @store_operation
    def create_carwash(db: Session, **carwash_data) -> Carwash:
        """Create a new carwash"""
        carwash = Carwash(**carwash_data)
        db.add(carwash)
        db.commit()
        db.refresh(carwash)
        return carwash

    @staticmethod
    @store_operation
    def get_carwash_by_id(db: Session, carwash_id: str) -> Optional[Carwash]:
        return db.query(Carwash).filter(Carwash.id == carwash_id).first()

    @staticmethod
    @store_operation
    def get_active_carwashes(db: Session) -> list[Carwash]:
        return (
            db.query(Carwash)
            .filter(Carwash.is_active.is_(True))
            .order_by(Carwash.created_at.asc())
            .all()
        )

    @staticmethod
    @store_operation
    def get_carwashes_by_owner(db: Session, owner_id: str) -> list[Carwash]:
        return (
            db.query(Carwash)
            .filter(Carwash.owner_id == owner_id)
            .order_by(Carwash.created_at.asc())
            .all()
        )

    @staticmethod
    @store_operation
    def search_carwashes(
        db: Session,
        state: Optional[str] = None,
        lga: Optional[str] = None,
        country: Optional[str] = None,
        home_service: Optional[bool] = None,
        name: Optional[str] = None,
    ) -> list[Carwash]:
        """Search active carwashes by region, home service and name"""
        query = db.query(Carwash).filter(Carwash.is_active.is_(True))

        if state:
            query = query.filter(Carwash.state.ilike(state))
        if lga:
            query = query.filter(Carwash.lga.ilike(lga))
        if country:
            query = query.filter(Carwash.country.ilike(country))
        if home_service is not None:
            query = query.filter(Carwash.home_service.is_(home_service))
        if name:
            query = query.filter(Carwash.name.ilike(f"%{name}%"))

        return query.order_by(Carwash.created_at.asc()).all()

    @staticmethod
    @store_operation
    def update_carwash(db: Session, carwash: Carwash, **updates) -> Carwash:
        """Update a carwash with provided fields"""
        for key, value in updates.items():
            setattr(carwash, key, value)

        db.commit()
        db.refresh(carwash)
        return carwash

    @staticmethod
    @store_operation
    def get_located_active_carwashes(db: Session) -> list[Carwash]:
        """Every active carwash that has coordinates, regardless of distance"""
        return (
            db.query(Carwash)
            .filter(Carwash.is_active.is_(True), Carwash.has_location.is_(True))
            .order_by(Carwash.created_at.asc())
            .all()
        )

    @staticmethod
    @store_operation
    def find_within_radius(
        db: Session, lat: float, lon: float, radius_km: float
    ) -> list[tuple[Carwash, float]]:
        """
        Active, located carwashes within radius_km of a point, nearest first.

        A bounding box narrows the rows in SQL; the exact great-circle
        distance decides membership.
        """
        min_lat, max_lat, min_lon, max_lon = bounding_box(lat, lon, radius_km)
        candidates = (
            db.query(Carwash)
            .filter(
                Carwash.is_active.is_(True),
                Carwash.has_location.is_(True),
                Carwash.latitude.between(min_lat, max_lat),
                Carwash.longitude.between(min_lon, max_lon),
            )
            .order_by(Carwash.created_at.asc())
            .all()
        )

        matches = []
        for carwash in candidates:
            distance = distance_km(lat, lon, carwash.latitude, carwash.longitude)
            if distance <= radius_km:
                matches.append((carwash, distance))

        matches.sort(key=lambda match: match[1])
        return matches
