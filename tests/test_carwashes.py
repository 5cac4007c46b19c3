from datetime import date, datetime

import pytest

from washhub.domain.bookings.schemas import BookingCreate
from washhub.domain.bookings.service import BookingService
from washhub.domain.carwashes.schemas import CarwashUpdate, LocationUpdate, ServiceCreate, ServiceUpdate
from washhub.domain.carwashes.service import CarwashService
from washhub.errors import ConflictError, NotFoundError, ValidationError
from washhub.models import generate_id

from conftest import ABEOKUTA, ABUJA, SURULERE, USER_LAT, USER_LNG, YABA


# ============================================================================
# NEARBY SEARCH
# ============================================================================


def test_nearby_tier_returns_only_close_carwashes(db, make_carwash):
    make_carwash(name="Yaba Wash", location=YABA)
    make_carwash(name="Abeokuta Wash", location=ABEOKUTA)

    result = CarwashService(db).find_nearby_for_user(USER_LAT, USER_LNG)

    assert result["search_type"] == "nearby"
    assert [c["name"] for c in result["carwashes"]] == ["Yaba Wash"]
    assert result["count"] == 1
    assert result["message"] == "Found 1 car washes within 10km"


def test_falls_back_to_extended_tier(db, make_carwash):
    make_carwash(name="Abeokuta Wash", location=ABEOKUTA)
    make_carwash(name="Abuja Wash", location=ABUJA)

    result = CarwashService(db).find_nearby_for_user(USER_LAT, USER_LNG)

    assert result["search_type"] == "extended"
    assert [c["name"] for c in result["carwashes"]] == ["Abeokuta Wash"]
    assert result["message"] == "Found 1 car washes within 100km"


def test_falls_back_to_all_located_carwashes(db, make_carwash):
    make_carwash(name="Abuja Wash", location=ABUJA)
    make_carwash(name="No Pin Wash", location=None)

    result = CarwashService(db).find_nearby_for_user(USER_LAT, USER_LNG)

    assert result["search_type"] == "all"
    assert [c["name"] for c in result["carwashes"]] == ["Abuja Wash"]
    assert result["message"] == "Showing all 1 available car washes"
    assert result["carwashes"][0]["is_within_service_range"] is False


def test_empty_directory_is_a_valid_empty_result(db):
    result = CarwashService(db).find_nearby_for_user(USER_LAT, USER_LNG)

    assert result["search_type"] == "all"
    assert result["carwashes"] == []
    assert result["count"] == 0
    assert result["message"] == "No car washes available at this time."


def test_results_are_sorted_by_distance_and_annotated(db, make_carwash):
    make_carwash(name="Surulere Wash", location=SURULERE)
    make_carwash(name="Yaba Wash", location=YABA)

    result = CarwashService(db).find_nearby_for_user(USER_LAT, USER_LNG)
    names = [c["name"] for c in result["carwashes"]]
    distances = [c["distance_km"] for c in result["carwashes"]]

    assert names == ["Yaba Wash", "Surulere Wash"]
    assert distances == sorted(distances)
    first = result["carwashes"][0]
    assert first["distance_text"].endswith("km away")
    assert first["estimated_travel_time_minutes"] >= 1
    assert first["is_within_service_range"] is True
    assert first["location"] == {"type": "Point", "coordinates": [YABA[1], YABA[0]]}


def test_inactive_carwashes_are_not_found(db, make_carwash):
    closed = make_carwash(name="Closed Wash", location=YABA)
    CarwashService(db).set_active(closed.id, False)

    result = CarwashService(db).find_nearby_for_user(USER_LAT, USER_LNG)

    assert result["count"] == 0


def test_nearby_rejects_bad_coordinates(db):
    with pytest.raises(ValidationError):
        CarwashService(db).find_nearby_for_user(95, USER_LNG)


# ============================================================================
# CARWASH RECORDS
# ============================================================================


def test_get_unknown_carwash(db):
    with pytest.raises(NotFoundError) as exc:
        CarwashService(db).get_carwash(generate_id())
    assert exc.value.entity == "carwash"


def test_malformed_id_is_a_validation_error(db):
    with pytest.raises(ValidationError):
        CarwashService(db).get_carwash("not-an-id")


def test_update_carwash_stamps_updated_at(db, carwash):
    before = carwash.updated_at
    updated = CarwashService(db).update_carwash(carwash.id, CarwashUpdate(name="Sparkle Wash Yaba"))

    assert updated.name == "Sparkle Wash Yaba"
    assert updated.updated_at >= before


def test_update_location_validates_ranges(db, make_carwash):
    service = CarwashService(db)
    carwash = make_carwash(location=None)

    with pytest.raises(ValidationError):
        service.update_location(carwash.id, LocationUpdate(latitude=91, longitude=3.3, service_range_minutes=30))
    with pytest.raises(ValidationError):
        service.update_location(carwash.id, LocationUpdate(latitude=6.5, longitude=-181, service_range_minutes=30))
    with pytest.raises(ValidationError):
        service.update_location(carwash.id, LocationUpdate(latitude=6.5, longitude=3.3, service_range_minutes=0))
    with pytest.raises(ValidationError):
        service.update_location(carwash.id, LocationUpdate(latitude=6.5, longitude=3.3, service_range_minutes=181))

    located = service.update_location(
        carwash.id, LocationUpdate(latitude=YABA[0], longitude=YABA[1], service_range_minutes=45)
    )
    assert located.has_location is True
    assert located.service_range_minutes == 45
    assert service.find_nearby_for_user(USER_LAT, USER_LNG)["count"] == 1


def test_list_by_owner_and_search(db, owner, make_carwash):
    make_carwash(name="Lekki Shine", state="Lagos", home_service=True)
    make_carwash(name="Capital Wash", state="FCT")
    service = CarwashService(db)

    assert len(service.list_by_owner(owner.id)) == 2
    assert [c.name for c in service.search(state="lagos")] == ["Lekki Shine"]
    assert [c.name for c in service.search(home_service=True)] == ["Lekki Shine"]
    assert [c.name for c in service.search(name="capital")] == ["Capital Wash"]


def test_queue_count_and_onboarding(db, carwash):
    service = CarwashService(db)

    assert service.update_queue_count(carwash.id, 4).queue_count == 4
    with pytest.raises(ValidationError):
        service.update_queue_count(carwash.id, -1)

    assert service.complete_onboarding(carwash.id).has_onboarded is True
    with pytest.raises(ConflictError):
        service.complete_onboarding(carwash.id)


def test_available_slots(db, customer, car, make_carwash, notifications):
    carwash = make_carwash(open_hours={"mon": {"start": "08:00", "end": "10:00"}})
    BookingService(db, notifications).create_booking(
        customer,
        BookingCreate(carwash_id=carwash.id, car_id=car.id, booking_time=datetime(2026, 3, 2, 8, 0)),
    )

    slots = CarwashService(db).get_available_slots(carwash.id, date(2026, 3, 2))

    assert [s["start_time"].strftime("%H:%M") for s in slots] == ["08:00", "08:30", "09:00", "09:30"]
    assert slots[0]["current_cars"] == 1 and slots[0]["available"] is False
    assert all(s["available"] for s in slots[1:])

    with pytest.raises(ValidationError):
        CarwashService(db).get_available_slots(carwash.id, date(2026, 3, 3))  # Tuesday, closed


# ============================================================================
# SERVICES
# ============================================================================


def test_create_and_list_services(db, carwash, wash_service):
    services = CarwashService(db).list_services(carwash.id)

    assert len(services) == 1
    assert services[0]["name"] == "Exterior Wash"
    assert services[0]["price"] == 2500.0
    assert services[0]["active"] is True


@pytest.mark.parametrize(
    "payload",
    [
        {"price": 1000, "duration": 20},
        {"name": "X", "price": 1000, "duration": 20},
        {"name": "Interior", "price": 0, "duration": 20},
        {"name": "Interior", "price": 1000, "duration": -5},
    ],
)
def test_create_service_validation(db, carwash, payload):
    with pytest.raises(ValidationError):
        CarwashService(db).create_service(carwash.id, ServiceCreate(**payload))


def test_service_not_found_is_distinct_from_carwash_not_found(db, carwash):
    service = CarwashService(db)

    with pytest.raises(NotFoundError) as missing_carwash:
        service.update_service(generate_id(), generate_id(), ServiceUpdate(price=100))
    with pytest.raises(NotFoundError) as missing_service:
        service.update_service(carwash.id, generate_id(), ServiceUpdate(price=100))

    assert missing_carwash.value.entity == "carwash"
    assert missing_carwash.value.message == "carwash not found"
    assert missing_service.value.entity == "service"
    assert missing_service.value.message == "service not found"


def test_update_service(db, carwash, wash_service):
    updated = CarwashService(db).update_service(carwash.id, wash_service["id"], ServiceUpdate(price=3000))

    assert updated["price"] == 3000.0
    assert updated["name"] == "Exterior Wash"
    assert CarwashService(db).get_service(carwash.id, wash_service["id"])["price"] == 3000.0


def test_delete_unreferenced_service_removes_it(db, carwash, wash_service):
    result = CarwashService(db).delete_service(carwash.id, wash_service["id"])

    assert result["deleted"] is True
    assert CarwashService(db).list_services(carwash.id) == []


def test_delete_referenced_service_deactivates_it(db, customer, car, carwash, wash_service, notifications):
    BookingService(db, notifications).create_booking(
        customer,
        BookingCreate(
            carwash_id=carwash.id,
            car_id=car.id,
            service_ids=[wash_service["id"]],
            booking_time=datetime(2026, 3, 2, 9, 0),
        ),
    )

    result = CarwashService(db).delete_service(carwash.id, wash_service["id"])
    services = CarwashService(db).list_services(carwash.id)

    assert result["deleted"] is False
    assert len(services) == 1
    assert services[0]["active"] is False
