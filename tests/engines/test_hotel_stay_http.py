"""
Hotel stay: JSON endpoints through the Django test client.
"""

import json

import pytest

from engines.hotel_stay.models import Booking

pytestmark = pytest.mark.django_db(transaction=True)


@pytest.fixture
def api(client, service, monkeypatch):
    monkeypatch.setattr("adapters.django_api.views.build_service", lambda: service)

    class Api:
        def get(self, path, **params):
            return client.get(f"/v1/hotel/{path}", params)

        def post(self, path, body=None, raw=None):
            return client.post(
                f"/v1/hotel/{path}",
                data=raw if raw is not None else json.dumps(body or {}),
                content_type="application/json",
            )

    return Api()


def _booking_body(*room_ids, **extra):
    body = {
        "guest": {"name": "Asha Rao", "phone": "+919800000001", "email": "asha@example.test"},
        "rooms": [{"room_id": room_id, "room_rate": "2500"} for room_id in room_ids],
        "check_in_date": "2025-01-10",
        "check_out_date": "2025-01-12",
        "advances": [{"amount": "2000", "method": "upi"}],
        "staff_id": "frontdesk-1",
    }
    body.update(extra)
    return body


class TestBookingEndpoints:
    def test_create_and_read(self, api, make_room):
        room = make_room("101")

        response = api.post("bookings", _booking_body(room.pk))

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["status"] == "confirmed"
        assert data["assignments"][0]["room_total"] == "5000.00"

        payments = api.get(f"bookings/{data['booking_id']}/payments").json()["data"]
        assert payments["breakdown"]["grand_total"] == "5600.00"
        assert payments["breakdown"]["advance_upi"] == "2000.00"
        assert payments["breakdown"]["outstanding"] == "3600.00"

    def test_overlap_is_409(self, api, make_room):
        room = make_room("101")
        api.post("bookings", _booking_body(room.pk))

        response = api.post(
            "bookings", _booking_body(room.pk, check_in_date="2025-01-11", check_out_date="2025-01-13")
        )

        assert response.status_code == 409
        error = response.json()["error"]
        assert error["code"] == "CONFLICT"
        assert "already booked" in error["message"]
        assert error["retryable"] is False
        assert Booking.objects.count() == 1

    def test_invalid_json(self, api):
        response = api.post("bookings", raw="{not json")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"

    def test_validation_error_is_400(self, api, make_room):
        room = make_room("101")
        response = api.post(
            "bookings", _booking_body(room.pk, check_in_date="2025-01-12", check_out_date="2025-01-10")
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_FAILED"

    def test_missing_booking_is_404(self, api):
        response = api.get("bookings/4242")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_method_not_allowed(self, api):
        response = api.get("bookings")
        assert response.status_code == 405

    def test_full_stay(self, api, make_room):
        rooms = [make_room("101"), make_room("102")]
        booking_id = api.post("bookings", _booking_body(rooms[0].pk)).json()["data"]["booking_id"]

        assert api.post(f"bookings/{booking_id}/check-in").status_code == 200

        transfer = api.post(
            f"bookings/{booking_id}/transfers",
            {"from_room_id": rooms[0].pk, "to_room_id": rooms[1].pk, "reason": "Plumbing issue"},
        )
        assert transfer.status_code == 201
        assert transfer.json()["data"]["to_room"] == "102"

        checkout = api.post(
            f"bookings/{booking_id}/checkout",
            {"actual_time": "2025-01-12T10:00:00+05:30", "remaining_balance": "3600"},
        )
        assert checkout.status_code == 200
        data = checkout.json()["data"]
        assert data["late_fee"] == "0.00"
        assert data["outstanding"] == "0.00"
        assert data["booking"]["status"] == "checked_out"

    def test_naive_checkout_time_rejected(self, api, make_room):
        room = make_room("101")
        booking_id = api.post("bookings", _booking_body(room.pk)).json()["data"]["booking_id"]
        response = api.post(
            f"bookings/{booking_id}/checkout", {"actual_time": "2025-01-12T10:00:00"}
        )
        assert response.status_code == 400


class TestRoomEndpoints:
    def test_availability(self, api, make_room):
        room = make_room("101")
        api.post("bookings", _booking_body(room.pk))

        busy = api.get("availability", room_id=room.pk, **{"from": "2025-01-11", "to": "2025-01-13"})
        assert busy.json()["data"]["available"] is False

        free = api.get("availability", room_id=room.pk, **{"from": "2025-01-12", "to": "2025-01-13"})
        assert free.json()["data"]["available"] is True

    def test_status_transition_error_is_409(self, api, make_room):
        room = make_room("101", status="cleaning")
        response = api.post(f"rooms/{room.pk}/status", {"status": "occupied"})
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "INVALID_TRANSITION"

    def test_bulk_partial_failure_is_207(self, api, make_room):
        room = make_room("101")
        response = api.post(
            "rooms/status/bulk", {"room_ids": [room.pk, 999], "status": "blocked"}
        )
        assert response.status_code == 207
        results = response.json()["error"]["details"]["results"]
        assert [r["ok"] for r in results] == [True, False]
