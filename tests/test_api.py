"""
HTTP-level tests: envelopes, status codes and admin access control
"""
import asyncio

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from resort.api.deps import get_booking_service
from resort.database import Base, get_db
from resort.main import app
from resort.services.auth_service import AuthService
from resort.services.booking_service import BookingService

from conftest import FakeNotifier, make_room

ADMIN_EMAIL = "owner@amanpulo.com"
ADMIN_PASSWORD = "s3cret-pass"


@pytest.fixture
def api(tmp_path):
    """
    TestClient wired to a throwaway database.
    NullPool: every request runs on its own event loop, so connections
    must not be shared between requests.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'api.db'}", poolclass=NullPool
    )
    Session = async_sessionmaker(engine, expire_on_commit=False)

    async def setup():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        async with Session() as session:
            session.add_all(
                [
                    make_room(discount_active=False),
                    make_room(name="Closed Suite", is_active=False),
                ]
            )
            await session.commit()
            admin = await AuthService.create_admin(session, ADMIN_EMAIL, ADMIN_PASSWORD)
            return AuthService.issue_token(admin)

    token = asyncio.run(setup())

    async def override_get_db():
        async with Session() as session:
            yield session

    notifier = FakeNotifier()
    service = BookingService(notifier=notifier)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_booking_service] = lambda: service

    client = TestClient(app)
    client.admin_headers = {"Authorization": f"Bearer {token}"}
    client.notifier = notifier
    yield client

    app.dependency_overrides.clear()


def create(api, booking_payload, **overrides):
    body = dict(
        booking_payload,
        check_in="2030-03-10T14:00:00Z",
        check_out="2030-03-12T12:00:00Z",
    )
    body.update(overrides)
    return api.post("/api/bookings", json=body)


def test_health(api):
    response = api.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "OK"


def test_request_id_is_echoed(api):
    response = api.get("/api/health", headers={"X-Request-ID": "abc-123"})
    assert response.headers["X-Request-ID"] == "abc-123"


class TestRooms:

    def test_catalog_hides_inactive(self, api):
        body = api.get("/api/rooms").json()

        assert body["success"] is True
        assert body["count"] == 1
        room = body["data"][0]
        assert room["name"] == "Hillside Casita"
        assert room["effective_price"] == 1200
        assert room["price"] == 1200
        assert room["has_active_discount"] is False

    def test_unknown_room(self, api):
        response = api.get("/api/rooms/999")

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "error": "not_found",
            "message": "Room not found",
        }


class TestBookingFlow:

    def test_create_and_confirm(self, api, booking_payload):
        response = create(api, booking_payload)
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["payment_status"] == "awaiting_payment"
        assert data["nights"] == 2
        assert data["total_amount"] == 2400
        assert isinstance(data["total_amount"], int)
        assert "verification_code" not in data

        reference = data["booking_reference"]

        public = api.get(f"/api/bookings/{reference}").json()["data"]
        assert public["email"] == "maria@example.com"
        assert "verification_code" not in public

        listing = api.get("/api/admin/bookings", headers=api.admin_headers).json()
        code = listing["data"][0]["verification_code"]
        assert code

        confirmed = api.post(
            "/api/bookings/confirm",
            json={"booking_reference": reference, "verification_code": code},
        )
        assert confirmed.status_code == 200
        assert confirmed.json()["data"]["payment_status"] == "confirmed"
        assert confirmed.json()["data"]["email_sent"] is True

        again = api.post(
            "/api/bookings/confirm",
            json={"booking_reference": reference, "verification_code": code},
        )
        assert again.status_code == 400
        assert again.json()["error"] == "conflict"

    def test_wrong_code(self, api, booking_payload):
        reference = create(api, booking_payload).json()["data"]["booking_reference"]

        response = api.post(
            "/api/bookings/confirm",
            json={"booking_reference": reference, "verification_code": "00000000"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "validation"
        assert response.json()["message"] == "Invalid verification code"

    def test_invalid_body_uses_validation_envelope(self, api, booking_payload):
        response = create(api, booking_payload, email="not-an-email")

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "validation"
        assert body["message"] == "Validation failed"
        assert any(err["field"] == "email" for err in body["errors"])

    def test_checkout_before_checkin(self, api, booking_payload):
        response = create(
            api,
            booking_payload,
            check_in="2030-03-12T00:00:00Z",
            check_out="2030-03-10T00:00:00Z",
        )
        assert response.status_code == 400
        assert response.json()["error"] == "validation"

    def test_availability(self, api, booking_payload):
        create(api, booking_payload)

        response = api.get(
            "/api/bookings/availability/1",
            params={"check_in": "2030-03-11T00:00:00Z", "check_out": "2030-03-13T00:00:00Z"},
        )
        assert response.json()["data"] == {
            "is_available": True,
            "booked_count": 1,
            "total_rooms": 8,
        }

    def test_unknown_reference(self, api):
        response = api.get("/api/bookings/AMAN-2030-00404")
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_receipt_requires_pdf(self, api):
        response = api.post(
            "/api/bookings/send-receipt", json={"booking_reference": "AMAN-2030-00001"}
        )
        assert response.status_code == 400
        assert response.json()["message"] == "PDF data is required"


class TestAdminAccess:

    @pytest.mark.parametrize(
        "method, path",
        [
            ("get", "/api/admin/bookings"),
            ("get", "/api/admin/bookings/stats"),
            ("get", "/api/admin/stats"),
            ("get", "/api/admin/rooms"),
            ("get", "/api/auth/me"),
        ],
    )
    def test_requires_token(self, api, method, path):
        response = getattr(api, method)(path)

        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"

    def test_rejects_garbage_token(self, api):
        response = api.get(
            "/api/admin/bookings", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 401

    def test_login(self, api):
        response = api.post(
            "/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
        )
        assert response.status_code == 200
        token = response.json()["data"]["token"]

        me = api.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.json()["data"]["email"] == ADMIN_EMAIL

    def test_login_wrong_password(self, api):
        response = api.post(
            "/api/auth/login", json={"email": ADMIN_EMAIL, "password": "wrong"}
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid email or password"

    def test_status_override(self, api, booking_payload):
        create(api, booking_payload)
        booking_id = api.get("/api/admin/bookings", headers=api.admin_headers).json()[
            "data"
        ][0]["id"]

        response = api.patch(
            f"/api/admin/bookings/{booking_id}/status",
            json={"status": "confirmed", "admin_notes": "Paid at front desk"},
            headers=api.admin_headers,
        )

        body = response.json()
        assert response.status_code == 200
        assert body["data"]["payment_status"] == "confirmed"
        assert body["data"]["verification_code"] is None
        assert body["email_sent"] is True

    def test_room_management(self, api):
        created = api.post(
            "/api/admin/rooms",
            json={
                "name": "Beach Casita",
                "description": "Steps from the beach",
                "price": 1500,
                "total_rooms": 12,
                "max_guests": 3,
                "category": "casita",
                "images": ["/images/beach.jpg"],
            },
            headers=api.admin_headers,
        )
        assert created.status_code == 201
        room_id = created.json()["data"]["id"]

        discounted = api.patch(
            f"/api/admin/rooms/{room_id}/discount",
            json={
                "is_active": True,
                "percentage": 10,
                "start_date": "2020-01-01T00:00:00Z",
                "end_date": "2099-12-31T00:00:00Z",
            },
            headers=api.admin_headers,
        )
        assert discounted.json()["data"]["effective_price"] == 1350
        assert discounted.json()["data"]["seasonal_discount"]["percentage"] == 10

        deleted = api.delete(f"/api/admin/rooms/{room_id}", headers=api.admin_headers)
        assert deleted.status_code == 200
        assert api.get("/api/rooms").json()["count"] == 1

    def test_dashboard(self, api):
        body = api.get("/api/admin/stats", headers=api.admin_headers).json()
        assert body["data"]["total_rooms"] == 2
        assert body["data"]["active_rooms"] == 1
