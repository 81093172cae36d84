"""Tests für Raumauslastung und Auslastungsanalyse."""

from datetime import date

import pytest

from analysis.occupancy import (
    RoomOccupancy,
    classify_utilization,
    compute_occupancy,
    iter_dates,
    occupancy_rate,
)
from config.defaults import day_code_for_date, day_name
from models.session import SessionRecord
from models.timeslot import TimeRange


def _rec(room="B203", day="L", start="10:00", end="12:00", course="MATH02") -> SessionRecord:
    return SessionRecord(course=course, id="1", type="C1", capacity=30, day=day,
                         start_time=start, end_time=end, index="F1", room=room)


# 2024-01-08 ist ein Montag
MONDAY = date(2024, 1, 8)
SUNDAY = date(2024, 1, 14)


class TestDayCodes:
    def test_monday_to_sunday(self):
        codes = [day_code_for_date(d) for d in iter_dates(MONDAY, SUNDAY)]
        assert codes == ["L", "MA", "ME", "J", "V", "S", "D"]

    def test_day_name(self):
        assert day_name("ME") == "Mercredi"
        assert day_name("??") == "??"

    def test_iter_dates_inclusive(self):
        assert list(iter_dates(MONDAY, MONDAY)) == [MONDAY]
        assert list(iter_dates(SUNDAY, MONDAY)) == []


class TestComputeOccupancy:
    def test_single_monday(self):
        """Fenster 08:00–20:00 = 24 Slots; 10:00–12:00 = 4 Slots."""
        [occ] = compute_occupancy([_rec()], MONDAY, MONDAY)
        assert occ.room == "B203"
        assert occ.available_slots == 24
        assert occ.occupied_slots == 4
        assert occ.remaining_slots == 20
        assert occ.rate == pytest.approx(4 / 24 * 100)

    def test_full_week(self):
        """Nur der Montag trägt Belegung bei, alle 7 Tage Verfügbarkeit."""
        [occ] = compute_occupancy([_rec()], MONDAY, SUNDAY)
        assert occ.available_slots == 7 * 24
        assert occ.occupied_slots == 4

    def test_partial_slot_rounds_up(self):
        [occ] = compute_occupancy([_rec(start="10:00", end="10:10")], MONDAY, MONDAY)
        assert occ.occupied_slots == 1

    def test_clamp(self):
        """Überlappende Termine ergeben nie mehr als 100 %."""
        records = [_rec(start="08:00", end="20:00", course=c) for c in ("A", "B", "C")]
        [occ] = compute_occupancy(records, MONDAY, MONDAY)
        assert occ.occupied_slots <= occ.available_slots
        assert occ.occupied_slots == 24
        assert occ.rate == pytest.approx(100.0)

    def test_room_filter_and_sorting(self):
        records = [_rec(room="C1"), _rec(room="A1"), _rec(room="B1")]
        result = compute_occupancy(records, MONDAY, MONDAY)
        assert [o.room for o in result] == ["A1", "B1", "C1"]
        result = compute_occupancy(records, MONDAY, MONDAY, rooms=["C1", "B1"])
        assert [o.room for o in result] == ["B1", "C1"]
        assert all(o.found for o in result)

    def test_room_filter_ignores_case(self):
        """'b203' findet B203 mit seiner echten Belegung."""
        [occ] = compute_occupancy([_rec()], MONDAY, MONDAY, rooms=["b203"])
        assert occ.room == "B203"
        assert occ.found
        assert occ.occupied_slots == 4
        assert occ.rate == pytest.approx(4 / 24 * 100)

    def test_unknown_room_is_not_found(self):
        """Unbekannte Räume erhalten keine erfundene Quote."""
        result = compute_occupancy([_rec()], MONDAY, MONDAY, rooms=["b203", "ZZZ9"])
        assert [(o.room, o.found) for o in result] == [("B203", True), ("ZZZ9", False)]
        unknown = result[1]
        assert unknown.occupied_slots == 0
        assert unknown.available_slots == 0
        assert unknown.rate is None

    def test_unknown_room_not_classified(self):
        result = compute_occupancy([_rec()], MONDAY, MONDAY, rooms=["ZZZ9"])
        report = classify_utilization(result)
        assert report.under_utilized == []
        assert report.undefined == []

    def test_custom_window_and_slot(self):
        window = TimeRange.from_times("08:00", "12:00")
        [occ] = compute_occupancy([_rec()], MONDAY, MONDAY, window=window, slot_minutes=60)
        assert occ.available_slots == 4
        assert occ.occupied_slots == 2
        assert occ.rate == pytest.approx(50.0)

    def test_custom_day_mapping(self):
        [occ] = compute_occupancy([_rec(day="V")], MONDAY, MONDAY, day_code_for=lambda d: "V")
        assert occ.occupied_slots == 4

    def test_invalid_parameters(self):
        with pytest.raises(ValueError):
            compute_occupancy([_rec()], SUNDAY, MONDAY)
        with pytest.raises(ValueError):
            compute_occupancy([_rec()], MONDAY, MONDAY, slot_minutes=0)

    def test_no_records(self):
        assert compute_occupancy([], MONDAY, SUNDAY) == []


class TestOccupancyRate:
    def test_rate(self):
        assert occupancy_rate(6, 18) == pytest.approx(25.0)

    def test_undefined_rate(self):
        assert occupancy_rate(0, 0) is None
        occ = RoomOccupancy(room="X", occupied_slots=0, available_slots=0, rate=None)
        assert not occ.rate_defined


class TestClassifyUtilization:
    def _occ(self, room, rate):
        return RoomOccupancy(room=room, occupied_slots=0, available_slots=10, rate=rate)

    def test_under_and_over(self):
        occupancies = [
            self._occ("A", 10.0), self._occ("B", 50.0), self._occ("C", 90.0),
            self._occ("D", 5.0), self._occ("E", None), self._occ("F", 85.0),
        ]
        report = classify_utilization(occupancies)
        assert [o.room for o in report.under_utilized] == ["D", "A"]
        assert [o.room for o in report.over_utilized] == ["F", "C"]
        assert report.undefined == ["E"]

    def test_thresholds_are_exclusive(self):
        report = classify_utilization([self._occ("A", 20.0), self._occ("B", 80.0)])
        assert report.under_utilized == []
        assert report.over_utilized == []

    def test_custom_thresholds(self):
        report = classify_utilization([self._occ("A", 40.0)], under=50, over=60)
        assert [o.room for o in report.under_utilized] == ["A"]
        assert report.under_threshold == 50

    def test_invalid_thresholds(self):
        with pytest.raises(ValueError):
            classify_utilization([], under=90, over=10)
