from datetime import date

import pytest

from models.court import Court, MaintenanceWindow
from services.availability import (
    format_hhmm,
    free_times,
    hourly_grid,
    is_court_bookable,
    is_valid_hhmm,
    normalize_hhmm,
    overlaps,
    parse_hhmm,
    ranges_overlap,
    weekday_name,
)
from services.errors import ValidationError


class TestTimes:
    @pytest.mark.parametrize("value,minutes", [
        ("00:00", 0),
        ("9:05", 545),
        ("14:30", 870),
        ("23:59", 1439),
    ])
    def test_parse_hhmm(self, value, minutes):
        assert parse_hhmm(value) == minutes

    @pytest.mark.parametrize("value", ["24:00", "12:60", "1230", "", None, "ab:cd", " 12:00"])
    def test_rejects_malformed(self, value):
        assert not is_valid_hhmm(value)
        with pytest.raises(ValidationError):
            parse_hhmm(value)

    def test_format_and_normalize(self):
        assert format_hhmm(6 * 60) == "06:00"
        assert format_hhmm(21 * 60 + 5) == "21:05"
        assert normalize_hhmm("7:30") == "07:30"

    def test_weekday_name(self):
        assert weekday_name(date(2025, 6, 1)) == "Sunday"
        assert weekday_name(date(2025, 6, 2)) == "Monday"


class TestOverlap:
    def test_partial_overlap(self):
        assert ranges_overlap("14:00", "15:00", "14:30", "15:30")
        assert ranges_overlap("14:30", "15:30", "14:00", "15:00")

    def test_containment(self):
        assert ranges_overlap("14:00", "18:00", "15:00", "16:00")
        assert ranges_overlap("15:00", "16:00", "14:00", "18:00")

    def test_identical(self):
        assert ranges_overlap("10:00", "11:00", "10:00", "11:00")

    def test_adjacent_ranges_do_not_overlap(self):
        assert not ranges_overlap("14:00", "15:00", "15:00", "16:00")
        assert not ranges_overlap("15:00", "16:00", "14:00", "15:00")

    def test_disjoint(self):
        assert not overlaps(60, 120, 180, 240)


class TestCourtBookable:
    def _court(self, is_available=True):
        return Court(name="Court C", capacity=8, price_per_hour=800, is_available=is_available)

    def test_available_court_without_maintenance(self):
        assert is_court_bookable(self._court(), date(2025, 7, 2))

    def test_closed_court(self):
        assert not is_court_bookable(self._court(is_available=False), date(2025, 7, 2))

    def test_maintenance_window_is_inclusive(self):
        court = self._court()
        court.maintenance_windows.append(
            MaintenanceWindow(start_date=date(2025, 7, 1), end_date=date(2025, 7, 3))
        )
        assert not is_court_bookable(court, date(2025, 7, 1))
        assert not is_court_bookable(court, date(2025, 7, 2))
        assert not is_court_bookable(court, date(2025, 7, 3))
        assert is_court_bookable(court, date(2025, 6, 30))
        assert is_court_bookable(court, date(2025, 7, 4))


class TestFreeTimes:
    def test_hourly_grid(self):
        grid = hourly_grid(6, 22)
        assert len(grid) == 16
        assert grid[0] == (360, 420)
        assert grid[-1] == (1260, 1320)

    def test_empty_day_returns_whole_grid(self):
        times = free_times(hourly_grid(6, 22), [])
        assert times[0] == "06:00"
        assert times[-1] == "21:00"
        assert len(times) == 16

    def test_busy_ranges_remove_overlapping_windows(self):
        busy = [(14 * 60, 16 * 60), (18 * 60 + 30, 19 * 60 + 30)]
        times = free_times(hourly_grid(6, 22), busy)
        assert "14:00" not in times
        assert "15:00" not in times
        assert "18:00" not in times
        assert "19:00" not in times
        assert "13:00" in times
        assert "16:00" in times
        assert len(times) == 12

    def test_result_is_sorted(self):
        grid = [(600, 660), (360, 420), (480, 540)]
        assert free_times(grid, []) == ["06:00", "08:00", "10:00"]
