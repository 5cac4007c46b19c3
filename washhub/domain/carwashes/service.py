"""Carwash service - Business logic for carwashes, their services and proximity search"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ...config import EXTENDED_RADIUS_KM, NEARBY_RADIUS_KM
from ...errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from ...models import Carwash, User, generate_id, utcnow
from ...shared.validators import clean_text, parse_time_of_day, require_id, weekday_key
from ...utils.geo import distance_km, distance_text, estimated_travel_minutes, is_within_service_range
from ..bookings.repository import BookingRepository
from ..orders.repository import OrderRepository
from .repository import CarwashRepository
from .schemas import CarwashCreate, CarwashUpdate, LocationUpdate, ServiceCreate, ServiceUpdate

logger = logging.getLogger(__name__)

SLOT_DURATION = timedelta(minutes=30)


class CarwashService:
    """Service layer for carwash business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CarwashRepository()

    # ========================================================================
    # CARWASH RECORDS
    # ========================================================================

    def create_carwash(self, data: CarwashCreate, owner: User) -> Carwash:
        """Register a carwash for a business owner. No geocoding: coordinates come from the caller."""
        logger.info(f"📥 Creating carwash '{data.name}' for owner {owner.id}")

        has_location = data.latitude is not None and data.longitude is not None
        if has_location:
            self._validate_coordinates(data.latitude, data.longitude)
        self._validate_service_range(data.service_range_minutes)

        now = utcnow()
        carwash_data = {
            "id": generate_id(),
            "owner_id": owner.id,
            "name": clean_text(data.name, max_length=100),
            "description": clean_text(data.description, max_length=1000),
            "address": clean_text(data.address, max_length=200),
            "latitude": data.latitude if has_location else None,
            "longitude": data.longitude if has_location else None,
            "has_location": has_location,
            "service_range_minutes": data.service_range_minutes,
            "open_hours": {day: hours.model_dump() for day, hours in data.open_hours.items()},
            "home_service": data.home_service,
            "delivery_radius_km": data.delivery_radius_km,
            "max_cars_per_slot": data.max_cars_per_slot,
            "state": data.state,
            "country": data.country,
            "lga": data.lga,
            "is_active": True,
            "queue_count": 0,
            "services": [],
            "photo_gallery": [],
            "created_at": now,
            "updated_at": now,
        }
        carwash = self.repo.create_carwash(self.db, **carwash_data)
        logger.info(f"✅ Carwash created: {carwash.id}")
        return carwash

    def get_carwash(self, carwash_id: str) -> Carwash:
        carwash_id = require_id(carwash_id, "carwash")
        carwash = self.repo.get_carwash_by_id(self.db, carwash_id)
        if not carwash:
            raise NotFoundError("carwash")
        return carwash

    def get_owned_carwash(self, carwash_id: str, user: User) -> Carwash:
        """Fetch a carwash and make sure the user owns it"""
        carwash = self.get_carwash(carwash_id)
        if carwash.owner_id != user.id:
            logger.warning(f"⚠️ User {user.id} tried to manage carwash {carwash.id}")
            raise PermissionDeniedError("you do not manage this carwash")
        return carwash

    def list_active(self) -> list[Carwash]:
        return self.repo.get_active_carwashes(self.db)

    def list_by_owner(self, owner_id: str) -> list[Carwash]:
        owner_id = require_id(owner_id, "owner")
        return self.repo.get_carwashes_by_owner(self.db, owner_id)

    def search(
        self,
        state: Optional[str] = None,
        lga: Optional[str] = None,
        country: Optional[str] = None,
        home_service: Optional[bool] = None,
        name: Optional[str] = None,
    ) -> list[Carwash]:
        return self.repo.search_carwashes(self.db, state, lga, country, home_service, name)

    def update_carwash(self, carwash_id: str, data: CarwashUpdate) -> Carwash:
        """Merge the provided fields and stamp updated_at"""
        carwash = self.get_carwash(carwash_id)

        updates = {}
        if data.name is not None:
            updates["name"] = clean_text(data.name, max_length=100)
        if data.address is not None:
            updates["address"] = clean_text(data.address, max_length=200)
        if data.description is not None:
            updates["description"] = clean_text(data.description, max_length=1000)
        if data.open_hours is not None:
            updates["open_hours"] = {day: hours.model_dump() for day, hours in data.open_hours.items()}
        if data.home_service is not None:
            updates["home_service"] = data.home_service
        if data.delivery_radius_km is not None:
            updates["delivery_radius_km"] = data.delivery_radius_km
        if data.max_cars_per_slot is not None:
            updates["max_cars_per_slot"] = data.max_cars_per_slot
        if data.state is not None:
            updates["state"] = data.state
        if data.country is not None:
            updates["country"] = data.country
        if data.lga is not None:
            updates["lga"] = data.lga

        updates["updated_at"] = utcnow()
        return self.repo.update_carwash(self.db, carwash, **updates)

    def set_active(self, carwash_id: str, is_active: bool) -> Carwash:
        """Toggle whether the carwash accepts new bookings; the record is kept"""
        carwash = self.get_carwash(carwash_id)
        logger.info(f"🔄 Setting carwash {carwash.id} is_active={is_active}")
        return self.repo.update_carwash(self.db, carwash, is_active=is_active, updated_at=utcnow())

    def update_location(self, carwash_id: str, data: LocationUpdate) -> Carwash:
        """Set coordinates and service range; marks the carwash as searchable by proximity"""
        self._validate_coordinates(data.latitude, data.longitude)
        self._validate_service_range(data.service_range_minutes)
        carwash = self.get_carwash(carwash_id)

        updates = {
            "latitude": data.latitude,
            "longitude": data.longitude,
            "service_range_minutes": data.service_range_minutes,
            "has_location": True,
            "updated_at": utcnow(),
        }
        if data.address:
            updates["address"] = clean_text(data.address, max_length=200)

        logger.info(
            f"📍 Carwash {carwash.id} located at [{data.longitude}, {data.latitude}], "
            f"range {data.service_range_minutes} min"
        )
        return self.repo.update_carwash(self.db, carwash, **updates)

    def update_queue_count(self, carwash_id: str, count: int) -> Carwash:
        if count < 0:
            raise ValidationError("queue count cannot be negative")
        carwash = self.get_carwash(carwash_id)
        return self.repo.update_carwash(self.db, carwash, queue_count=count, updated_at=utcnow())

    def complete_onboarding(self, carwash_id: str) -> Carwash:
        carwash = self.get_carwash(carwash_id)
        if carwash.has_onboarded:
            raise ConflictError("carwash already completed onboarding")
        return self.repo.update_carwash(self.db, carwash, has_onboarded=True, updated_at=utcnow())

    def refresh_rating(self, carwash_id: str, rating: float) -> Carwash:
        carwash = self.get_carwash(carwash_id)
        return self.repo.update_carwash(self.db, carwash, rating=round(rating, 2))

    @staticmethod
    def _validate_coordinates(lat: float, lon: float) -> None:
        if lat is None or not -90 <= lat <= 90:
            raise ValidationError("latitude must be between -90 and 90")
        if lon is None or not -180 <= lon <= 180:
            raise ValidationError("longitude must be between -180 and 180")

    @staticmethod
    def _validate_service_range(minutes: int) -> None:
        if minutes is None or not 1 <= minutes <= 180:
            raise ValidationError("service range must be between 1 and 180 minutes")

    # ========================================================================
    # PROXIMITY SEARCH
    # ========================================================================

    def find_nearby_for_user(self, user_lat: float, user_lng: float) -> dict:
        """
        Find carwashes for a user with a widening search.

        Tiers, first non-empty one wins:
          nearby   - within NEARBY_RADIUS_KM
          extended - within EXTENDED_RADIUS_KM
          all      - every active, located carwash

        Each result is annotated with distance, travel time and whether the
        user is inside that carwash's service range, then sorted nearest
        first. An empty "all" tier is a valid empty result.
        """
        self._validate_coordinates(user_lat, user_lng)

        search_type = "nearby"
        matches = self.repo.find_within_radius(self.db, user_lat, user_lng, NEARBY_RADIUS_KM)
        carwashes = [carwash for carwash, _ in matches]

        if not carwashes:
            search_type = "extended"
            matches = self.repo.find_within_radius(self.db, user_lat, user_lng, EXTENDED_RADIUS_KM)
            carwashes = [carwash for carwash, _ in matches]

        if not carwashes:
            search_type = "all"
            carwashes = self.repo.get_located_active_carwashes(self.db)

        results = [self._with_distance(carwash, user_lat, user_lng) for carwash in carwashes]
        # list.sort is stable: ties keep the order the query returned
        results.sort(key=lambda item: item["distance_km"])

        message = self._search_message(search_type, len(results))
        logger.info(f"🔍 Nearby search ({user_lat}, {user_lng}): {search_type}, {len(results)} result(s)")

        return {
            "carwashes": results,
            "search_type": search_type,
            "user_lat": user_lat,
            "user_lng": user_lng,
            "count": len(results),
            "message": message,
        }

    @staticmethod
    def _with_distance(carwash: Carwash, user_lat: float, user_lng: float) -> dict:
        distance = distance_km(user_lat, user_lng, carwash.latitude, carwash.longitude)
        return {
            "id": carwash.id,
            "name": carwash.name,
            "address": carwash.address,
            "location": carwash.location,
            "rating": carwash.rating,
            "queue_count": carwash.queue_count,
            "is_active": carwash.is_active,
            "home_service": carwash.home_service,
            "photo": carwash.photo_gallery[0] if carwash.photo_gallery else "",
            "state": carwash.state,
            "lga": carwash.lga,
            "country": carwash.country,
            "service_range_minutes": carwash.service_range_minutes,
            "distance_km": distance,
            "distance_text": distance_text(distance),
            "estimated_travel_time_minutes": estimated_travel_minutes(distance),
            "is_within_service_range": is_within_service_range(
                user_lat, user_lng, carwash.latitude, carwash.longitude, carwash.service_range_minutes
            ),
        }

    @staticmethod
    def _search_message(search_type: str, count: int) -> str:
        if search_type == "nearby":
            if count == 0:
                return "No car washes found nearby. Expanding search radius..."
            return f"Found {count} car washes within {NEARBY_RADIUS_KM:g}km"
        if search_type == "extended":
            if count == 0:
                return "No car washes found in the extended area. Showing all available locations..."
            return f"Found {count} car washes within {EXTENDED_RADIUS_KM:g}km"
        if search_type == "all":
            if count == 0:
                return "No car washes available at this time."
            return f"Showing all {count} available car washes"
        return f"Found {count} car washes"

    # ========================================================================
    # SLOTS
    # ========================================================================

    def get_available_slots(self, carwash_id: str, day: date) -> list[dict]:
        """30-minute slots within the day's open hours with their current load (UTC)"""
        carwash = self.get_carwash(carwash_id)

        day_key = weekday_key(datetime(day.year, day.month, day.day))
        hours = (carwash.open_hours or {}).get(day_key)
        if not hours:
            raise ValidationError("no open hours defined for the specified day")

        start_h, start_m = parse_time_of_day(hours["start"])
        end_h, end_m = parse_time_of_day(hours["end"])
        opening = datetime(day.year, day.month, day.day, start_h, start_m)
        closing = datetime(day.year, day.month, day.day, end_h, end_m)

        bookings = BookingRepository.get_bookings_between(self.db, carwash.id, opening, closing)
        booking_times = [b.booking_time for b in bookings if b.status != "cancelled"]

        slots = []
        current = opening
        while current + SLOT_DURATION <= closing:
            slot_end = current + SLOT_DURATION
            current_cars = sum(1 for t in booking_times if current <= t < slot_end)
            slots.append(
                {
                    "start_time": current,
                    "end_time": slot_end,
                    "available": current_cars < carwash.max_cars_per_slot,
                    "current_cars": current_cars,
                    "max_cars": carwash.max_cars_per_slot,
                }
            )
            current = slot_end

        return slots

    # ========================================================================
    # SERVICES (embedded in the carwash)
    # ========================================================================

    def create_service(self, carwash_id: str, data: ServiceCreate) -> dict:
        carwash = self.get_carwash(carwash_id)
        self._validate_service(data.name, data.price, data.duration)

        now = utcnow().isoformat()
        service = {
            "id": generate_id(),
            "name": clean_text(data.name, max_length=50),
            "description": clean_text(data.description, max_length=500),
            "price": float(data.price),
            "duration": int(data.duration),
            "is_addon": data.is_addon,
            "active": data.active,
            "created_at": now,
            "updated_at": now,
        }
        services = list(carwash.services or []) + [service]
        self.repo.update_carwash(self.db, carwash, services=services, updated_at=utcnow())

        logger.info(f"✅ Service '{service['name']}' added to carwash {carwash.id}")
        return service

    def list_services(self, carwash_id: str) -> list[dict]:
        carwash = self.get_carwash(carwash_id)
        return list(carwash.services or [])

    def get_service(self, carwash_id: str, service_id: str) -> dict:
        carwash = self.get_carwash(carwash_id)
        _, service = self._find_service(carwash, service_id)
        return service

    def update_service(self, carwash_id: str, service_id: str, data: ServiceUpdate) -> dict:
        carwash = self.get_carwash(carwash_id)
        index, current = self._find_service(carwash, service_id)

        updated = dict(current)
        if data.name is not None:
            updated["name"] = clean_text(data.name, max_length=50)
        if data.description is not None:
            updated["description"] = clean_text(data.description, max_length=500)
        if data.price is not None:
            updated["price"] = float(data.price)
        if data.duration is not None:
            updated["duration"] = int(data.duration)
        if data.is_addon is not None:
            updated["is_addon"] = data.is_addon
        if data.active is not None:
            updated["active"] = data.active
        self._validate_service(updated["name"], updated["price"], updated["duration"])
        updated["updated_at"] = utcnow().isoformat()

        services = list(carwash.services)
        services[index] = updated
        self.repo.update_carwash(self.db, carwash, services=services, updated_at=utcnow())
        return updated

    def delete_service(self, carwash_id: str, service_id: str) -> dict:
        """
        Remove a service from the carwash.

        Services never referenced by a booking or order are removed from the
        list. Referenced ones are kept and marked inactive so history still
        resolves.
        """
        carwash = self.get_carwash(carwash_id)
        index, current = self._find_service(carwash, service_id)
        services = list(carwash.services)

        referenced = BookingRepository.service_in_use(
            self.db, carwash.id, current["id"]
        ) or OrderRepository.service_in_use(self.db, carwash.id, current["id"])

        if referenced:
            services[index] = {**current, "active": False, "updated_at": utcnow().isoformat()}
            self.repo.update_carwash(self.db, carwash, services=services, updated_at=utcnow())
            logger.info(f"🗃️ Service {current['id']} is referenced; deactivated instead of removed")
            return {"message": "Service deactivated", "deleted": False}

        del services[index]
        self.repo.update_carwash(self.db, carwash, services=services, updated_at=utcnow())
        logger.info(f"🗑️ Service {current['id']} removed from carwash {carwash.id}")
        return {"message": "Service deleted", "deleted": True}

    @staticmethod
    def _find_service(carwash: Carwash, service_id: str) -> tuple[int, dict]:
        service_id = require_id(service_id, "service")
        for index, service in enumerate(carwash.services or []):
            if service.get("id") == service_id:
                return index, service
        raise NotFoundError("service")

    @staticmethod
    def _validate_service(name: Optional[str], price: Optional[float], duration: Optional[int]) -> None:
        if not name or len(name.strip()) < 2 or len(name.strip()) > 50:
            raise ValidationError("service name is required (2-50 characters)")
        if price is None or price <= 0:
            raise ValidationError("service price must be greater than 0")
        if duration is None or duration <= 0:
            raise ValidationError("service duration must be greater than 0 minutes")
