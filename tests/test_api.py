from washhub.domain.carwashes.service import CarwashService
from washhub.errors import DependencyError
from washhub.models import generate_id

from conftest import USER_LAT, USER_LNG, YABA, auth


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
    assert client.get("/").status_code == 200


def test_missing_or_unknown_user_is_unauthenticated(client):
    assert client.get("/bookings/mine").status_code == 401
    assert client.get("/bookings/mine", headers={"X-User-Id": "nobody"}).status_code == 401
    assert client.get("/bookings/mine", headers={"X-User-Id": generate_id()}).status_code == 401


def test_suspended_user_is_forbidden(client, db, customer):
    customer.status = "suspended"
    db.commit()

    response = client.get("/bookings/mine", headers=auth(customer))
    assert response.status_code == 403


def test_only_business_users_create_carwashes(client, customer, owner):
    payload = {"name": "Shine Spot", "address": "4 Allen Avenue, Ikeja", "latitude": YABA[0], "longitude": YABA[1]}

    denied = client.post("/carwashes", json=payload, headers=auth(customer))
    created = client.post("/carwashes", json=payload, headers=auth(owner))

    assert denied.status_code == 403
    assert created.status_code == 201
    assert created.json()["owner_id"] == owner.id
    assert created.json()["location"] == {"type": "Point", "coordinates": [YABA[1], YABA[0]]}


def test_nearby_endpoint(client, carwash):
    response = client.get("/carwashes/nearby", params={"lat": USER_LAT, "lng": USER_LNG})

    assert response.status_code == 200
    body = response.json()
    assert body["search_type"] == "nearby"
    assert body["carwashes"][0]["id"] == carwash.id


def test_error_mapping(client, carwash):
    malformed = client.get("/carwashes/not-an-id")
    missing = client.get(f"/carwashes/{generate_id()}")

    assert malformed.status_code == 400
    assert missing.status_code == 404
    assert missing.json() == {"detail": "carwash not found", "entity": "carwash"}


def test_retriable_store_failure_is_503(monkeypatch, client, carwash):
    def unavailable(self, carwash_id):
        raise DependencyError("store temporarily unavailable", retriable=True)

    monkeypatch.setattr(CarwashService, "get_carwash", unavailable)
    response = client.get(f"/carwashes/{carwash.id}")

    assert response.status_code == 503
    assert response.headers["Retry-After"] == "1"


def test_permanent_store_failure_is_502(monkeypatch, client, carwash):
    def broken(self, carwash_id):
        raise DependencyError("store operation failed")

    monkeypatch.setattr(CarwashService, "get_carwash", broken)
    assert client.get(f"/carwashes/{carwash.id}").status_code == 502


def test_booking_flow(client, customer, owner, carwash, make_worker, job_queue):
    car = client.post("/cars", json={"model": "Toyota Camry", "plate": "LND-482-AA"}, headers=auth(customer))
    assert car.status_code == 201

    payload = {"carwash_id": carwash.id, "car_id": car.json()["id"], "booking_time": "2026-03-02T09:00:00Z"}

    booked = client.post("/bookings", json=payload, headers=auth(customer))
    taken = client.post("/bookings", json=payload, headers=auth(customer))

    assert booked.status_code == 201
    assert booked.json()["queue_number"] == 1
    assert taken.status_code == 409
    assert taken.json()["detail"] == "selected time slot is already taken"

    booking_id = booked.json()["id"]
    not_owner = client.post(f"/orders/from-booking/{booking_id}", headers=auth(customer))
    converted = client.post(f"/orders/from-booking/{booking_id}", headers=auth(owner))
    again = client.post(f"/orders/from-booking/{booking_id}", headers=auth(owner))

    assert not_owner.status_code == 403
    assert converted.status_code == 201
    assert converted.json()["status"] == "active"
    assert again.status_code == 409

    worker = make_worker()
    order_id = converted.json()["id"]
    assigned = client.post(f"/workers/{worker.id}/assign/{order_id}", headers=auth(owner))
    busy = client.post(f"/workers/{worker.id}/assign/{order_id}", headers=auth(owner))

    assert assigned.status_code == 200
    assert assigned.json()["worker_id"] == worker.id
    assert busy.status_code == 409

    assigned_orders = client.get(f"/workers/{worker.id}/orders", headers=auth(worker))
    assert [o["id"] for o in assigned_orders.json()] == [order_id]
    assert client.get(f"/workers/{worker.id}/orders", headers=auth(customer)).status_code == 403

    mine = client.get("/orders/mine", headers=auth(customer))
    assert [o["id"] for o in mine.json()] == [order_id]
    assert len(job_queue.jobs) >= 5


def test_notifications_endpoints(client, customer, notifications):
    notification = notifications.create(customer.id, "Order Created", "On its way", "order")

    listed = client.get("/notifications", headers=auth(customer))
    unread = client.get("/notifications/unread-count", headers=auth(customer))
    marked = client.post(f"/notifications/{notification.id}/read", headers=auth(customer))

    assert [n["id"] for n in listed.json()] == [notification.id]
    assert unread.json()["unread_count"] == 1
    assert marked.json()["is_read"] is True


def test_invalid_body_is_422(client, customer):
    response = client.post("/bookings", json={"car_id": generate_id()}, headers=auth(customer))
    assert response.status_code == 422


def test_car_endpoints(client, customer, owner, make_user):
    first = client.post("/cars", json={"model": "Toyota Camry", "plate": "LND-482-AA"}, headers=auth(customer))
    second = client.post(
        "/cars", json={"model": "Kia Rio", "plate": "EKY-310-BC", "is_default": True}, headers=auth(customer)
    )
    denied = client.post("/cars", json={"model": "Lexus RX", "plate": "ABJ-001-ZZ"}, headers=auth(owner))

    assert first.status_code == 201
    assert denied.status_code == 403

    car_id = first.json()["id"]
    made_default = client.patch(f"/cars/{car_id}/default", headers=auth(customer))
    mine = client.get("/cars/mine", headers=auth(customer))

    assert made_default.json()["is_default"] is True
    assert [c["id"] for c in mine.json()] == [car_id, second.json()["id"]]
    assert [c["is_default"] for c in mine.json()] == [True, False]

    stranger = make_user(name="Stranger")
    assert client.get(f"/cars/{car_id}", headers=auth(stranger)).status_code == 403
    assert client.delete(f"/cars/{car_id}", headers=auth(stranger)).status_code == 403

    renamed = client.patch(f"/cars/{car_id}", json={"color": "Silver"}, headers=auth(customer))
    deleted = client.delete(f"/cars/{car_id}", headers=auth(customer))

    assert renamed.json()["color"] == "Silver"
    assert deleted.status_code == 200
    assert client.get(f"/cars/{car_id}", headers=auth(customer)).status_code == 404
