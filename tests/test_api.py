"""
HTTP tests for the admin endpoints using TestClient.
"""
import csv
import io

import pytest

pytestmark = pytest.mark.integration


class TestUpdateStatus:
    def test_checkin(self, api):
        client, hotel = api

        response = client.post(
            "/bookings/admin/update-status",
            json={"booking_id": hotel.booking_id, "action": "checkin",
                  "datetime": "2025-11-10T14:30:00"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["status"] == "Checked-in"
        assert body["payment_status"] == "Partial Payment"

        logs = client.get("/bookings/admin/logs").json()["data"]
        assert len(logs) == 1
        assert logs[0]["booking_id"] == hotel.booking_id
        assert logs[0]["last_action"] == "Check-in"
        assert logs[0]["room"] == "Room 101"
        assert logs[0]["action_timestamp"] == "2025-11-10T14:30:00"
        assert "log_id" in logs[0]

    def test_aware_datetime_converted_to_hotel_time(self, api):
        client, hotel = api

        client.post(
            "/bookings/admin/update-status",
            json={"booking_id": hotel.booking_id, "action": "checkin",
                  "datetime": "2025-11-10T06:30:00Z"},
        )

        logs = client.get("/bookings/admin/logs").json()["data"]
        assert logs[0]["action_timestamp"] == "2025-11-10T14:30:00"

    def test_missing_fields(self, api):
        client, _ = api

        response = client.post("/bookings/admin/update-status", json={"action": "paid"})

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Missing booking_id or action"}

    def test_unknown_booking(self, api):
        client, _ = api

        response = client.post(
            "/bookings/admin/update-status", json={"booking_id": 9999, "action": "paid"}
        )

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Booking not found"}
        assert client.get("/bookings/admin/logs").json()["data"] == []

    def test_invalid_action(self, api):
        client, hotel = api

        response = client.post(
            "/bookings/admin/update-status",
            json={"booking_id": hotel.booking_id, "action": "teleport"},
        )

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_finalized_booking(self, api):
        client, hotel = api
        payload = {"booking_id": hotel.booking_id, "action": "cancel"}

        assert client.post("/bookings/admin/update-status", json=payload).status_code == 200
        response = client.post("/bookings/admin/update-status", json=payload)

        assert response.status_code == 409
        assert len(client.get("/bookings/admin/logs").json()["data"]) == 1


class TestLogs:
    def test_export_csv(self, api):
        client, hotel = api
        client.post(
            "/bookings/admin/update-status",
            json={"booking_id": hotel.booking_id, "action": "cancel"},
        )

        response = client.get("/bookings/admin/logs/export", params={"status": "Cancelled"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        disposition = response.headers["content-disposition"]
        assert disposition.startswith('attachment; filename="booking_logs_')
        assert disposition.endswith('.csv"')
        assert ":" not in disposition.split("filename=")[1]

        rows = list(csv.reader(io.StringIO(response.text)))
        assert rows[0][0] == "Log ID"
        assert len(rows) == 2
        assert rows[1][2] == "Maria Santos"
        assert rows[1][4] == "Cancelled"

    def test_blank_filters_ignored(self, api):
        client, hotel = api
        client.post(
            "/bookings/admin/update-status",
            json={"booking_id": hotel.booking_id, "action": "paid"},
        )

        response = client.get(
            "/bookings/admin/logs",
            params={"search": "", "status": "All", "room_type": "", "date_from": "", "date_to": ""},
        )

        assert response.status_code == 200
        assert len(response.json()["data"]) == 1

    def test_bad_date_filter(self, api):
        client, _ = api

        response = client.get("/bookings/admin/logs", params={"date_from": "yesterday"})

        assert response.status_code == 400
        assert response.json()["success"] is False


class TestBookings:
    def test_book_and_conflict(self, api):
        client, hotel = api
        payload = {
            "room_number": "102",
            "check_in": "2025-11-10",
            "check_out": "2025-11-12",
            "user_id": hotel.guest_id,
            "guests": {"adults": 2, "children": 0},
        }

        created = client.post("/bookings/book", json=payload)
        assert created.status_code == 201
        booking = created.json()["booking"]
        assert booking["status"] == "Confirmed"
        assert booking["total_price"] == 3000.0

        conflict = client.post("/bookings/book", json={**payload, "check_in": "2025-11-11",
                                                       "check_out": "2025-11-14"})
        assert conflict.status_code == 409
        assert conflict.json()["success"] is False

    def test_invalid_dates(self, api):
        client, _ = api

        response = client.post(
            "/bookings/book",
            json={"room_number": "102", "check_in": "2025-11-12", "check_out": "2025-11-10"},
        )

        assert response.status_code == 400

    def test_check_availability(self, api):
        client, hotel = api

        busy = client.post(
            "/bookings/check-availability",
            json={"room_number": "101", "check_in": "2025-11-11", "check_out": "2025-11-12"},
        )
        free_type = client.post(
            "/bookings/check-availability",
            json={"room_type_id": hotel.standard_type_id,
                  "check_in": "2025-11-11", "check_out": "2025-11-12"},
        )

        assert busy.json() == {"success": True, "isAvailable": False}
        assert free_type.json() == {"success": True, "isAvailable": True}

    def test_calendar(self, api):
        client, hotel = api

        calendar = client.get("/bookings/admin/calendar").json()

        assert calendar == [
            {
                "id": hotel.booking_id,
                "room_number": "101",
                "checkIn": "2025-11-10",
                "checkOut": "2025-11-13",
                "guest": "Maria  Santos",
                "source": "Direct",
                "status": "Confirmed",
            }
        ]

    def test_admin_listing_and_user_bookings(self, api):
        client, hotel = api

        rows = client.get("/bookings/admin/all").json()["data"]
        assert rows[0]["guests"] == "Adult 2 | Child 0"

        mine = client.get(f"/bookings/user/{hotel.guest_id}").json()["bookings"]
        assert [b["booking_id"] for b in mine] == [hotel.booking_id]

    def test_availability_matrix(self, api):
        client, _ = api

        data = client.get("/bookings/admin/availability", params={"year": 2025, "month": 11}).json()["data"]

        assert data["Standard"]["2025-11-10"] == 2
        assert data["Deluxe"]["2025-11-10"] == 1


class TestRooms:
    def test_grouped(self, api):
        client, _ = api

        assert client.get("/rooms/admin/grouped").json() == {
            "Deluxe": ["201"],
            "Standard": ["101", "102", "103"],
        }

    def test_add_duplicate_room(self, api):
        client, _ = api

        response = client.post("/rooms/admin/addRoom", json={"room_number": "101", "room_type": "Standard"})

        assert response.status_code == 409
        assert response.json() == {"success": False, "message": "Room number already exists."}

    def test_add_update_delete(self, api):
        client, _ = api

        added = client.post(
            "/rooms/admin/addRoom",
            json={"room_number": "301", "room_type": "Villa", "price_per_night": 9000},
        ).json()
        assert added["success"] is True

        updated = client.post(
            "/rooms/admin/updateRoom", json={"room_id": added["room_id"], "status": "Maintenance"}
        )
        assert updated.status_code == 200

        rooms = client.get("/rooms/admin/getRooms", params={"status": "maintenance"}).json()["data"]
        assert [r["room_number"] for r in rooms] == ["301"]

        deleted = client.post("/rooms/admin/deleteRoom", json={"ids": [added["room_id"]]}).json()
        assert deleted["deleted"] == 1
        assert deleted["skipped"] == []

    def test_rename_booked_room(self, api):
        client, _ = api
        room = client.get("/rooms/admin/getRooms", params={"search": "101"}).json()["data"][0]

        response = client.post(
            "/rooms/admin/updateRoom", json={"room_id": room["room_id"], "room_number": "105"}
        )

        assert response.status_code == 409
        assert response.json() == {"success": False, "message": "Room has active bookings"}

    def test_delete_without_ids(self, api):
        client, _ = api

        response = client.post("/rooms/admin/deleteRoom", json={})

        assert response.status_code == 400
        assert response.json()["message"] == "No room IDs provided"

    def test_room_types(self, api):
        client, _ = api

        types = client.get("/rooms/admin/getRoomTypes").json()["data"]

        assert [t["name"] for t in types] == ["Deluxe", "Standard"]
        assert types[1]["price_per_night"] == 1500.0

    def test_check_room(self, api):
        client, _ = api

        assert client.get("/rooms/check/101").json()["success"] is True
        assert client.get("/rooms/check/999").status_code == 404


def test_dashboard_stats(api):
    client, _ = api

    data = client.get("/dashboard/stats").json()["data"]

    assert data["total_bookings"] == 1
    assert data["pending_payments"] == 1
    assert data["by_status"]["Confirmed"] == 1
    assert data["by_status"]["Cancelled"] == 0


def test_health(api):
    client, _ = api

    response = client.get("/health")

    assert response.json() == {"status": "ok", "database": "ok"}
    assert "x-request-id" in response.headers
