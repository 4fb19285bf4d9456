"""API tests for the public booking endpoints."""

from datetime import timedelta

import pytest

from booking_app.models import Appointment
from booking_app.services.schedule import local_today

ALL_MORNING = ["09:00", "09:30", "10:00", "10:30", "11:00", "11:30", "12:00", "12:30"]


@pytest.fixture
def booking_payload(haircut, upcoming_date):
    return {
        "service_id": haircut.id,
        "appointment_date": upcoming_date.isoformat(),
        "appointment_time": "10:00",
        "client_name": "Lucia",
        "client_phone": "+54 9 11 5555-0101",
    }


class TestCatalog:
    def test_health(self, client):
        assert client.get("/health").json()["status"] == "ok"

    def test_services(self, client, haircut, cut_and_beard):
        response = client.get("/api/services")
        assert response.status_code == 200
        data = response.json()
        assert [s["name"] for s in data] == ["Corte de pelo", "Corte + Barba"]
        assert data[0]["duration_minutes"] == 30

    def test_calendar(self, client, monday_only):
        data = client.get("/api/calendar").json()
        today = local_today()
        assert data["active_weekdays"] == [1]
        assert data["min_date"] == (today + timedelta(days=1)).isoformat()
        assert data["max_date"] == (today + timedelta(days=14)).isoformat()


class TestSlots:
    def test_free_day(self, client, open_every_day, haircut, upcoming_date):
        response = client.get(f"/api/services/{haircut.id}/slots", params={"date": upcoming_date.isoformat()})
        assert response.status_code == 200
        assert response.json() == {
            "date": upcoming_date.isoformat(),
            "service_id": haircut.id,
            "slots": ALL_MORNING,
        }

    def test_unknown_service_is_empty(self, client, open_every_day, upcoming_date):
        response = client.get("/api/services/9999/slots", params={"date": upcoming_date.isoformat()})
        assert response.status_code == 200
        assert response.json()["slots"] == []

    def test_bad_date(self, client, haircut):
        response = client.get(f"/api/services/{haircut.id}/slots", params={"date": "02/06/2025"})
        assert response.status_code == 400
        assert response.json()["code"] == "invalid_date"

    def test_missing_date(self, client, haircut):
        response = client.get(f"/api/services/{haircut.id}/slots")
        assert response.status_code == 400
        assert response.json()["field"] == "date"


class TestCreateAppointment:
    def test_pending_booking(self, client, open_every_day, booking_payload, upcoming_date):
        response = client.post("/api/appointments", json=booking_payload)
        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert data["status"] == "PENDING"
        assert data["appointment"]["display_date"] == upcoming_date.strftime("%d/%m/%Y")
        assert data["appointment"]["appointment_time"] == "10:00"

    def test_trusted_client_confirmed(self, client, open_every_day, booking_payload, trusted_phone):
        booking_payload["client_phone"] = trusted_phone
        data = client.post("/api/appointments", json=booking_payload).json()
        assert data["status"] == "CONFIRMED"
        assert data["appointment"]["is_auto_confirmed"] is True

    def test_slot_disappears_after_booking(self, client, open_every_day, booking_payload, haircut, upcoming_date):
        client.post("/api/appointments", json=booking_payload)
        slots = client.get(
            f"/api/services/{haircut.id}/slots", params={"date": upcoming_date.isoformat()}
        ).json()["slots"]
        assert "10:00" not in slots

    def test_taken_slot(self, client, open_every_day, booking_payload):
        assert client.post("/api/appointments", json=booking_payload).status_code == 201
        booking_payload["client_phone"] = "1155550202"
        response = client.post("/api/appointments", json=booking_payload)
        assert response.status_code == 409
        assert response.json()["code"] == "slot_unavailable"

    def test_today_is_out_of_range(self, client, open_every_day, booking_payload):
        booking_payload["appointment_date"] = local_today().isoformat()
        response = client.post("/api/appointments", json=booking_payload)
        assert response.status_code == 400
        assert response.json()["code"] == "date_out_of_range"
        assert response.json()["field"] == "appointment_date"

    def test_off_grid_time(self, client, open_every_day, booking_payload):
        booking_payload["appointment_time"] = "10:15"
        response = client.post("/api/appointments", json=booking_payload)
        assert response.status_code == 400
        assert response.json()["code"] == "invalid_time"

    @pytest.mark.parametrize("field, value", [
        ("client_name", "A"),
        ("client_phone", "123"),
        ("appointment_time", "10h"),
        ("appointment_date", "tomorrow"),
    ])
    def test_schema_errors(self, client, booking_payload, field, value):
        booking_payload[field] = value
        response = client.post("/api/appointments", json=booking_payload)
        assert response.status_code == 400
        assert response.json()["code"] == "invalid_input"
        assert response.json()["field"] == field

    def test_missing_field(self, client, booking_payload):
        del booking_payload["client_name"]
        response = client.post("/api/appointments", json=booking_payload)
        assert response.status_code == 400
        assert response.json()["field"] == "client_name"

    def test_unknown_service(self, client, open_every_day, booking_payload):
        booking_payload["service_id"] = 9999
        response = client.post("/api/appointments", json=booking_payload)
        assert response.status_code == 404
        assert response.json()["code"] == "service_not_found"


class TestLookupAndCancel:
    def test_lookup(self, client, open_every_day, booking_payload):
        created = client.post("/api/appointments", json=booking_payload).json()["appointment"]

        found = client.get("/api/appointments/lookup", params={"phone": "+5491155550101"}).json()
        assert found["id"] == created["appointment_id"]
        assert found["status"] == "PENDING"
        assert "client_phone" not in found

    def test_lookup_nothing(self, client):
        response = client.get("/api/appointments/lookup", params={"phone": "1155550000"})
        assert response.status_code == 200
        assert response.json() is None

    def test_cancel_with_own_phone(self, client, open_every_day, booking_payload, haircut, upcoming_date):
        appointment_id = client.post("/api/appointments", json=booking_payload).json()["appointment"]["appointment_id"]

        response = client.post(f"/api/appointments/{appointment_id}/cancel", json={"phone": "+5491155550101"})
        assert response.status_code == 200
        assert response.json()["status"] == "CANCELLED"

        slots = client.get(
            f"/api/services/{haircut.id}/slots", params={"date": upcoming_date.isoformat()}
        ).json()["slots"]
        assert "10:00" in slots

    def test_cancel_with_foreign_phone(self, client, open_every_day, booking_payload):
        appointment_id = client.post("/api/appointments", json=booking_payload).json()["appointment"]["appointment_id"]

        response = client.post(f"/api/appointments/{appointment_id}/cancel", json={"phone": "1199990000"})
        assert response.status_code == 403
        assert response.json()["code"] == "phone_mismatch"

    def test_cancel_twice(self, client, open_every_day, booking_payload):
        appointment_id = client.post("/api/appointments", json=booking_payload).json()["appointment"]["appointment_id"]
        cancel = {"phone": booking_payload["client_phone"]}

        client.post(f"/api/appointments/{appointment_id}/cancel", json=cancel)
        response = client.post(f"/api/appointments/{appointment_id}/cancel", json=cancel)
        assert response.status_code == 409
        assert response.json()["code"] == "invalid_transition"

    def test_cancel_unknown(self, client):
        response = client.post("/api/appointments/424242/cancel", json={"phone": "1155550000"})
        assert response.status_code == 404


class TestStorageFailure:
    def test_slots_return_503(self, client, engine, open_every_day, haircut, upcoming_date):
        Appointment.__table__.drop(engine)

        response = client.get(f"/api/services/{haircut.id}/slots", params={"date": upcoming_date.isoformat()})
        assert response.status_code == 503
        assert response.json()["code"] == "storage_unavailable"

    def test_booking_returns_503(self, client, engine, open_every_day, booking_payload):
        Appointment.__table__.drop(engine)

        response = client.post("/api/appointments", json=booking_payload)
        assert response.status_code == 503
        assert response.json()["code"] == "storage_unavailable"
