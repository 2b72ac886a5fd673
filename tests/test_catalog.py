from datetime import date

import pytest

from models import db
from models.court import Court
from models.timeslot import TimeSlot
from services import courts, timeslots
from services.errors import AlreadyExists, NotFound, ValidationError
from utils.seed import seed_default_time_slots, seed_sample_courts


class TestTimeSlots:
    def slot(self, **overrides):
        data = {"day": "Monday", "start_time": "18:00", "end_time": "19:00", "price": 1200}
        data.update(overrides)
        return timeslots.create_time_slot(data)

    def test_create_defaults(self, app_ctx):
        slot = self.slot(start_time="8:00", end_time="9:00")
        assert slot.start_time == "08:00"
        assert slot.is_available is True
        assert slot.is_special_price is False

    def test_duplicate_range_on_same_day(self, app_ctx):
        self.slot()
        with pytest.raises(AlreadyExists) as exc:
            self.slot(price=900)
        assert exc.value.status_code == 409
        # another day is fine
        assert self.slot(day="Tuesday").day == "Tuesday"

    def test_invalid_payload(self, app_ctx):
        with pytest.raises(ValidationError) as exc:
            timeslots.create_time_slot({"day": "Funday", "start_time": "19:00", "end_time": "18:00"})
        assert "Invalid day value" in exc.value.details
        assert "End time must be after start time" in exc.value.details
        assert "Price is required" in exc.value.details

    def test_listing_is_ordered_monday_first(self, app_ctx):
        self.slot(day="Sunday")
        self.slot(day="Monday", start_time="19:00", end_time="20:00")
        self.slot(day="Monday")
        self.slot(day="Wednesday", is_available=False)

        rows = timeslots.list_time_slots()
        assert [(r.day, r.start_time) for r in rows] == [
            ("Monday", "18:00"), ("Monday", "19:00"), ("Wednesday", "18:00"), ("Sunday", "18:00"),
        ]
        assert len(timeslots.list_time_slots(day="Monday")) == 2
        assert len(timeslots.list_time_slots(is_available=False)) == 1

    def test_list_rejects_unknown_day(self, app_ctx):
        with pytest.raises(ValidationError):
            timeslots.list_time_slots(day="Someday")

    def test_update_and_delete(self, app_ctx):
        slot = self.slot()
        updated = timeslots.update_time_slot(slot.id, {"price": 1500, "is_special_price": True})
        assert updated.price == 1500
        assert updated.is_special_price is True

        timeslots.delete_time_slot(slot.id)
        with pytest.raises(NotFound):
            timeslots.get_time_slot(slot.id)

    def test_update_rejects_bad_price(self, app_ctx):
        slot = self.slot()
        with pytest.raises(ValidationError):
            timeslots.update_time_slot(slot.id, {"price": -5})


class TestCourts:
    def test_create_and_update(self, app_ctx):
        court = courts.create_court({"name": " Court X ", "capacity": 10, "price_per_hour": 1000, "features": ["parking", "lights"]})
        assert court.name == "Court X"
        assert court.features == ["lights", "parking"]
        assert court.is_available is True

        updated = courts.update_court(court.id, {"is_available": False})
        assert updated.is_available is False
        assert updated.capacity == 10

    def test_duplicate_name(self, app_ctx):
        courts.create_court({"name": "Court X", "capacity": 10, "price_per_hour": 1000})
        with pytest.raises(AlreadyExists):
            courts.create_court({"name": "Court X", "capacity": 8, "price_per_hour": 800})

    def test_rename_onto_existing_name(self, app_ctx):
        courts.create_court({"name": "Court X", "capacity": 10, "price_per_hour": 1000})
        other = courts.create_court({"name": "Court Y", "capacity": 10, "price_per_hour": 1000})
        with pytest.raises(AlreadyExists):
            courts.update_court(other.id, {"name": "Court X"})

    def test_invalid_court(self, app_ctx):
        with pytest.raises(ValidationError) as exc:
            courts.create_court({"name": "", "capacity": 20, "price_per_hour": -1, "features": ["pool"]})
        assert len(exc.value.details) == 4

    def test_available_only_listing(self, app_ctx):
        courts.create_court({"name": "Open", "capacity": 10, "price_per_hour": 1000})
        courts.create_court({"name": "Shut", "capacity": 10, "price_per_hour": 1000, "is_available": False})
        assert [c.name for c in courts.list_courts()] == ["Open", "Shut"]
        assert [c.name for c in courts.list_courts(available_only=True)] == ["Open"]

    def test_maintenance_windows(self, court):
        window = courts.add_maintenance_window(court.id, {"start_date": "2025-07-01", "end_date": "2025-07-03"})
        assert window.covers(date(2025, 7, 3))
        assert len(court.maintenance_windows) == 1

        with pytest.raises(NotFound):
            courts.remove_maintenance_window(court.id + 1, window.id)
        courts.remove_maintenance_window(court.id, window.id)
        assert court.maintenance_windows == []

    def test_maintenance_end_before_start(self, court):
        with pytest.raises(ValidationError):
            courts.add_maintenance_window(court.id, {"start_date": "2025-07-03", "end_date": "2025-07-01"})


class TestSeeding:
    def test_default_time_slots(self, app_ctx):
        assert seed_default_time_slots(6, 22) == 7 * 16
        assert seed_default_time_slots(6, 22) == 0

        monday_morning = TimeSlot.query.filter_by(day="Monday", start_time="06:00").one()
        assert monday_morning.end_time == "07:00"
        assert monday_morning.price == 1000
        assert monday_morning.is_special_price is False

        assert TimeSlot.query.filter_by(day="Monday", start_time="17:00").one().price == 1200
        assert TimeSlot.query.filter_by(day="Saturday", start_time="06:00").one().price == 1500

    def test_sample_courts(self, app_ctx):
        assert seed_sample_courts() == 3
        assert seed_sample_courts() == 0
        assert Court.query.count() == 3


class TestCli:
    def test_seed_commands(self, app):
        runner = app.test_cli_runner()
        result = runner.invoke(args=["seed-timeslots"])
        assert "Created 112 default time slots" in result.output
        result = runner.invoke(args=["seed-timeslots"])
        assert "Skipping creation" in result.output

        result = runner.invoke(args=["seed-courts"])
        assert "Added 3 courts" in result.output

    def test_make_admin(self, app, player):
        result = app.test_cli_runner().invoke(args=["make-admin", "player@example.com"])
        assert "promoted to ADMIN" in result.output
        db.session.refresh(player)
        assert "ADMIN" in player.role_names

    def test_make_admin_unknown_user(self, app):
        result = app.test_cli_runner().invoke(args=["make-admin", "nobody@example.com"])
        assert "User not found" in result.output
