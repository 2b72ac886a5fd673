from datetime import date, timedelta

from models.audit_log import AuditLog
from utils.clock import venue_now

FUTURE = (date.today() + timedelta(days=30)).isoformat()


def booking_body(court_id, **overrides):
    body = {
        "court_id": court_id,
        "date": FUTURE,
        "start_time": "14:00",
        "end_time": "15:00",
        "duration": 1,
        "number_of_players": 6,
    }
    body.update(overrides)
    return body


class TestAuth:
    def test_register_login_me_logout(self, client, login):
        resp = client.post("/auth/register", json={
            "email": "New.Player@example.com",
            "password": "long-enough-pw",
            "full_name": "New Player",
        })
        assert resp.status_code == 201

        headers = login("new.player@example.com", "long-enough-pw")
        me = client.get("/auth/me")
        assert me.status_code == 200
        assert me.get_json()["roles"] == ["PLAYER"]
        assert me.get_json()["full_name"] == "New Player"

        assert client.post("/auth/logout", headers=headers).status_code == 200
        assert client.get("/auth/me").status_code == 401

    def test_duplicate_email(self, client, player):
        resp = client.post("/auth/register", json={"email": "player@example.com", "password": "long-enough-pw"})
        assert resp.status_code == 409

    def test_short_password(self, client, app_ctx):
        resp = client.post("/auth/register", json={"email": "a@example.com", "password": "short"})
        assert resp.status_code == 400

    def test_bad_credentials(self, client, player):
        resp = client.post("/auth/login", json={"email": "player@example.com", "password": "wrong-password"})
        assert resp.status_code == 401
        assert AuditLog.query.filter_by(action="LOGIN_FAIL").count() == 1

    def test_non_string_password(self, client, player):
        resp = client.post("/auth/login", json={"email": "player@example.com", "password": 12345678})
        assert resp.status_code == 401
        assert resp.get_json() == {"error": "Invalid credentials"}

    def test_non_numeric_duration_is_a_validation_error(self, client, login, player, court):
        headers = login("player@example.com")
        resp = client.post("/bookings", json=booking_body(court.id, duration="²"), headers=headers)
        assert resp.status_code == 400
        assert resp.get_json()["kind"] == "validation_error"

    def test_security_headers(self, client, app_ctx):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.headers["X-Content-Type-Options"] == "nosniff"
        assert resp.headers["X-Frame-Options"] == "DENY"


class TestBookingEndpoints:
    def test_requires_login(self, client, court):
        assert client.post("/bookings", json=booking_body(court.id)).status_code == 401

    def test_requires_csrf_header(self, client, login, player, court):
        login("player@example.com")
        resp = client.post("/bookings", json=booking_body(court.id))
        assert resp.status_code == 403
        assert resp.get_json()["error"] == "CSRF validation failed"

    def test_create_and_conflict(self, client, login, player, court):
        headers = login("player@example.com")

        resp = client.post("/bookings", json=booking_body(court.id), headers=headers)
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["status"] == "pending"
        assert body["price"] == 800
        assert body["court_name"] == "Court C"

        resp = client.post("/bookings", json=booking_body(court.id, start_time="14:30", end_time="15:30"), headers=headers)
        assert resp.status_code == 409
        assert resp.get_json() == {"error": "This time slot is already booked", "kind": "slot_conflict"}
        assert AuditLog.query.filter_by(action="BOOKING_FAIL_ALREADY_BOOKED").count() == 1

    def test_validation_error_shape(self, client, login, player, court):
        headers = login("player@example.com")
        resp = client.post("/bookings", json=booking_body(court.id, duration=9), headers=headers)
        assert resp.status_code == 400
        body = resp.get_json()
        assert body["kind"] == "validation_error"
        assert body["details"] == ["Duration must be between 1 and 4 hours"]

    def test_capacity_error(self, client, login, player, court):
        headers = login("player@example.com")
        resp = client.post("/bookings", json=booking_body(court.id, number_of_players=9), headers=headers)
        assert resp.status_code == 400
        assert resp.get_json()["kind"] == "capacity_exceeded"

    def test_list_get_and_cancel(self, client, login, player, court):
        headers = login("player@example.com")
        booking_id = client.post("/bookings", json=booking_body(court.id), headers=headers).get_json()["id"]

        listing = client.get("/bookings").get_json()
        assert listing["count"] == 1
        assert client.get(f"/bookings/{booking_id}").status_code == 200

        resp = client.post(f"/bookings/{booking_id}/cancel", json={"reason": "weather"}, headers=headers)
        assert resp.status_code == 200
        assert resp.get_json()["status"] == "cancelled"
        assert resp.get_json()["cancellation_reason"] == "weather"

        resp = client.post(f"/bookings/{booking_id}/cancel", json={}, headers=headers)
        assert resp.status_code == 400
        assert resp.get_json()["kind"] == "invalid_state"

    def test_too_late_to_cancel(self, client, login, player, court):
        headers = login("player@example.com")
        today = venue_now().date().isoformat()
        # 22:00 today is always less than a day away
        booking_id = client.post(
            "/bookings",
            json=booking_body(court.id, date=today, start_time="22:00", end_time="23:00"),
            headers=headers,
        ).get_json()["id"]

        resp = client.post(f"/bookings/{booking_id}/cancel", json={}, headers=headers)
        assert resp.status_code == 403
        assert resp.get_json()["kind"] == "too_late"

    def test_other_players_booking_is_forbidden(self, client, login, player, other_player, court):
        headers = login("player@example.com")
        booking_id = client.post("/bookings", json=booking_body(court.id), headers=headers).get_json()["id"]

        login("other@example.com")
        resp = client.get(f"/bookings/{booking_id}")
        assert resp.status_code == 403
        assert resp.get_json()["kind"] == "forbidden"

    def test_unknown_booking(self, client, login, player):
        login("player@example.com")
        resp = client.get("/bookings/12345")
        assert resp.status_code == 404
        assert resp.get_json()["kind"] == "not_found"

    def test_admin_status_and_payment(self, client, login, player, admin, court):
        headers = login("player@example.com")
        booking_id = client.post("/bookings", json=booking_body(court.id), headers=headers).get_json()["id"]

        resp = client.put(f"/bookings/{booking_id}/payment", json={"payment_status": "paid"}, headers=headers)
        assert resp.status_code == 403

        headers = login("admin@example.com")
        resp = client.put(f"/bookings/{booking_id}/status", json={"status": "confirmed"}, headers=headers)
        assert resp.status_code == 200
        assert resp.get_json()["status"] == "confirmed"

        resp = client.put(f"/bookings/{booking_id}/payment", json={"payment_status": "paid", "payment_method": "cash"}, headers=headers)
        assert resp.get_json()["payment_status"] == "paid"

        assert client.delete(f"/bookings/{booking_id}", headers=headers).status_code == 200
        assert client.get(f"/bookings/{booking_id}").status_code == 404


class TestCourtEndpoints:
    def test_public_listing_and_availability(self, client, player, court):
        assert [c["name"] for c in client.get("/courts").get_json()] == ["Court C"]

        resp = client.get(f"/courts/{court.id}/availability?date={FUTURE}")
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["bookable"] is True
        assert len(body["available_times"]) == 16

    def test_availability_needs_a_date(self, client, court):
        resp = client.get(f"/courts/{court.id}/availability")
        assert resp.status_code == 400
        assert resp.get_json()["kind"] == "validation_error"

    def test_availability_reflects_bookings(self, client, login, player, court):
        headers = login("player@example.com")
        client.post("/bookings", json=booking_body(court.id, start_time="14:00", end_time="16:00", duration=2), headers=headers)

        times = client.get(f"/courts/{court.id}/availability?date={FUTURE}").get_json()["available_times"]
        assert "14:00" not in times
        assert "15:00" not in times
        assert len(times) == 14

    def test_court_admin_is_admin_only(self, client, login, player, admin):
        body = {"name": "Court Z", "capacity": 10, "price_per_hour": 1000, "features": ["lights"]}

        headers = login("player@example.com")
        assert client.post("/courts", json=body, headers=headers).status_code == 403

        headers = login("admin@example.com")
        resp = client.post("/courts", json=body, headers=headers)
        assert resp.status_code == 201
        court_id = resp.get_json()["id"]

        resp = client.post("/courts", json=body, headers=headers)
        assert resp.status_code == 409
        assert resp.get_json()["kind"] == "already_exists"

        resp = client.put(f"/courts/{court_id}", json={"price_per_hour": 1100}, headers=headers)
        assert resp.get_json()["price_per_hour"] == 1100

    def test_maintenance_endpoints(self, client, login, admin, court):
        headers = login("admin@example.com")
        resp = client.post(
            f"/courts/{court.id}/maintenance",
            json={"start_date": "2031-07-01", "end_date": "2031-07-03", "reason": "resurfacing"},
            headers=headers,
        )
        assert resp.status_code == 201
        window_id = resp.get_json()["id"]

        body = client.get(f"/courts/{court.id}/availability?date=2031-07-02").get_json()
        assert body["bookable"] is False
        assert body["available_times"] == []

        resp = client.delete(f"/courts/{court.id}/maintenance/{window_id}", headers=headers)
        assert resp.status_code == 200
        assert client.get(f"/courts/{court.id}/availability?date=2031-07-02").get_json()["bookable"] is True


class TestAdminEndpoints:
    def test_stats(self, client, login, player, admin, court):
        headers = login("player@example.com")
        client.post("/bookings", json=booking_body(court.id), headers=headers)

        login("admin@example.com")
        body = client.get("/admin/bookings/stats").get_json()
        assert body["total_bookings"] == 1
        assert body["total_revenue"] == 800
        assert body["total_users"] == 2
        assert len(body["recent_bookings"]) == 1

    def test_players_cannot_read_stats(self, client, login, player):
        login("player@example.com")
        assert client.get("/admin/bookings/stats").status_code == 403

    def test_last_admin_cannot_be_demoted(self, client, login, admin):
        headers = login("admin@example.com")
        resp = client.post(f"/admin/users/{admin.id}/roles", json={"roles": ["PLAYER"]}, headers=headers)
        assert resp.status_code == 403

    def test_audit_log_listing(self, client, login, admin):
        login("admin@example.com")
        rows = client.get("/admin/audit-logs?action=LOGIN_SUCCESS").get_json()
        assert len(rows) == 1
        assert rows[0]["user_id"] == admin.id
