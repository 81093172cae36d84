"""Tests für die Prüfung auf Raumkonflikte."""

from analysis.conflicts import conflict_key, is_conflict, verify_conflicts
from models.session import SessionRecord
from models.timeslot import TimeRange


def _rec(course="MATH02", room="B203", day="L", start="10:00", end="12:00",
         type_="C1") -> SessionRecord:
    return SessionRecord(course=course, id="1", type=type_, capacity=30, day=day,
                         start_time=start, end_time=end, index="F1", room=room)


class TestIsConflict:
    def test_overlap_different_courses(self):
        assert is_conflict(_rec(), _rec(course="INFO01", start="11:00", end="13:00"))

    def test_touching_is_no_conflict(self):
        assert not is_conflict(_rec(), _rec(course="INFO01", start="12:00", end="14:00"))

    def test_same_course_is_no_conflict(self):
        """Zwei Gruppen desselben Kurses dürfen sich einen Raum teilen."""
        assert not is_conflict(_rec(type_="D1"), _rec(course="math02", type_="D2"))

    def test_other_room_or_day(self):
        assert not is_conflict(_rec(), _rec(course="X", room="B204"))
        assert not is_conflict(_rec(), _rec(course="X", day="MA"))

    def test_window_must_intersect_both(self):
        window = TimeRange.from_times("08:00", "10:30")
        a = _rec(start="10:00", end="12:00")
        b = _rec(course="X", start="11:00", end="13:00")
        assert not is_conflict(a, b, window)
        assert is_conflict(a, _rec(course="X", start="9:00", end="11:00"), window)


class TestVerifyConflicts:
    def test_exactly_one_regardless_of_order(self):
        a = _rec()
        b = _rec(course="INFO01", start="11:00", end="13:00")
        first = verify_conflicts([a, b])
        second = verify_conflicts([b, a])
        assert len(first) == 1
        assert len(second) == 1
        assert conflict_key(first[0].first, first[0].second) == \
            conflict_key(second[0].first, second[0].second)
        assert first[0].first.course == "MATH02"
        assert first[0].overlap == TimeRange.from_times("11:00", "12:00")

    def test_duplicate_records_reported_once(self):
        a = _rec()
        b = _rec(course="INFO01", start="11:00", end="13:00")
        assert len(verify_conflicts([a, a, b, b])) == 1

    def test_conflict_key_is_symmetric(self):
        a = _rec()
        b = _rec(course="INFO01", start="11:00", end="13:00")
        assert conflict_key(a, b) == conflict_key(b, a)

    def test_no_conflicts(self):
        records = [_rec(), _rec(course="X", start="12:00", end="14:00"),
                   _rec(course="Y", room="A1")]
        assert verify_conflicts(records) == []

    def test_day_filter(self):
        records = [
            _rec(day="L"), _rec(course="X", day="L", start="11:00"),
            _rec(day="MA"), _rec(course="X", day="MA", start="11:00"),
        ]
        assert [c.day for c in verify_conflicts(records)] == ["L", "MA"]
        assert [c.day for c in verify_conflicts(records, days=["MA"])] == ["MA"]

    def test_sorted_by_day_room_start(self):
        records = [
            _rec(day="V", room="A1"), _rec(course="X", day="V", room="A1", start="11:00"),
            _rec(day="L", room="C1", start="14:00", end="15:00"),
            _rec(course="X", day="L", room="C1", start="14:30", end="16:00"),
            _rec(day="L", room="B1"), _rec(course="X", day="L", room="B1", start="11:00"),
        ]
        result = verify_conflicts(records)
        assert [(c.day, c.room) for c in result] == [("L", "B1"), ("L", "C1"), ("V", "A1")]

    def test_three_way_overlap(self):
        records = [_rec(course="A"), _rec(course="B"), _rec(course="C")]
        assert len(verify_conflicts(records)) == 3
