"""Tests für den Verzeichnis-Loader und seinen Cache."""

import os
from collections import Counter
from pathlib import Path

import pytest

from data.errors import DiagnosticKind, UnreadableSource
from data.loader import CorpusLoader, load_all, load_corpus, load_file


AB_CONTENT = """\
+MATH02
1,C1,P=30,H=L 10:00-12:00,F1,S=B203//
2,D1,P=24,H=MA 08:00-10:00,F1,S=B103/ME 14:00-16:00,F2,S=B104//
Page générée en : 0.1 s
"""

CD_CONTENT = """\
+INFO01
1,C1,P=45,H=L 11:00-13:00,F1,S=B203//
1,T1,P=abc,H=V 08:00-10:00,F1,S=EXT1//
"""


def _make_corpus(root: Path) -> Path:
    """Legt zwei Unterordner mit edt.cru und einen leeren Unterordner an."""
    (root / "AB").mkdir()
    (root / "AB" / "edt.cru").write_text(AB_CONTENT, encoding="utf-8")
    (root / "CD").mkdir()
    (root / "CD" / "edt.cru").write_text(CD_CONTENT, encoding="utf-8")
    (root / "EF").mkdir()  # ohne Datei
    (root / "notes.txt").write_text("keine Daten", encoding="utf-8")
    return root


def _multiset(records) -> Counter:
    return Counter(r.model_dump_json() for r in records)


class TestLoadFile:
    def test_parses_file(self, tmp_path: Path):
        p = tmp_path / "edt.cru"
        p.write_text(AB_CONTENT, encoding="utf-8")
        result = load_file(p)
        assert len(result.records) == 3
        assert result.diagnostics == []

    def test_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(UnreadableSource):
            load_file(tmp_path / "fehlt.cru")

    def test_invalid_utf8_raises(self, tmp_path: Path):
        p = tmp_path / "edt.cru"
        p.write_bytes(b"+X\n\xff\xfe S=A1\n")
        with pytest.raises(UnreadableSource):
            load_file(p)


class TestLoadCorpus:
    def test_loads_all_subdirectories(self, tmp_path: Path):
        result = load_corpus(_make_corpus(tmp_path))
        # AB: 3 Termine, CD: 1 gültiger + 1 verworfener
        assert len(result.records) == 4
        assert [r.course for r in result.records] == ["MATH02"] * 3 + ["INFO01"]
        assert len(result.diagnostics) == 1
        d = result.diagnostics[0]
        assert d.kind == DiagnosticKind.MALFORMED_RECORD
        assert d.room == "EXT1"
        assert d.source.endswith("edt.cru")

    def test_subdirectory_without_file_is_skipped(self, tmp_path: Path):
        (tmp_path / "EF").mkdir()
        result = load_corpus(tmp_path)
        assert result.records == []
        assert result.diagnostics == []

    def test_missing_root_gives_diagnostic(self, tmp_path: Path):
        result = load_corpus(tmp_path / "gibt-es-nicht")
        assert result.records == []
        assert [d.kind for d in result.diagnostics] == [DiagnosticKind.UNREADABLE_SOURCE]

    def test_unreadable_file_gives_diagnostic(self, tmp_path: Path):
        _make_corpus(tmp_path)
        (tmp_path / "GH").mkdir()
        (tmp_path / "GH" / "edt.cru").write_bytes(b"\xff\xfe\xfa")
        result = load_corpus(tmp_path)
        assert len(result.records) == 4
        kinds = [d.kind for d in result.diagnostics]
        assert DiagnosticKind.UNREADABLE_SOURCE in kinds

    def test_custom_file_name(self, tmp_path: Path):
        (tmp_path / "AB").mkdir()
        (tmp_path / "AB" / "plan.cru").write_text(AB_CONTENT, encoding="utf-8")
        assert len(load_corpus(tmp_path, file_name="plan.cru").records) == 3
        assert load_corpus(tmp_path).records == []

    def test_load_all_is_idempotent(self, tmp_path: Path):
        """Zweimal laden ergibt dieselbe Multimenge von Terminen."""
        root = _make_corpus(tmp_path)
        first = load_all(root)
        second = load_all(root)
        assert _multiset(first) == _multiset(second)

    def test_duplicates_are_kept(self, tmp_path: Path):
        """Identische Zeilen ergeben zwei Termine."""
        (tmp_path / "AB").mkdir()
        line = "1,C1,P=30,H=L 10:00-12:00,F1,S=B203//\n"
        (tmp_path / "AB" / "edt.cru").write_text("+MATH02\n" + line + line, encoding="utf-8")
        assert len(load_all(tmp_path)) == 2


class TestCorpusLoader:
    def test_cache_returns_equal_result(self, tmp_path: Path):
        root = _make_corpus(tmp_path)
        loader = CorpusLoader()
        first = loader.load(root)
        second = loader.load(root)
        assert _multiset(first.records) == _multiset(second.records)
        assert first.diagnostics == second.diagnostics

    def test_cache_is_not_shared_mutably(self, tmp_path: Path):
        """Änderungen am Ergebnis wirken sich nicht auf den Cache aus."""
        root = _make_corpus(tmp_path)
        loader = CorpusLoader()
        loader.load(root).records.clear()
        assert len(loader.load(root).records) == 4

    def test_cache_invalidated_on_change(self, tmp_path: Path):
        root = _make_corpus(tmp_path)
        loader = CorpusLoader()
        assert len(loader.load_all(root)) == 4

        target = root / "AB" / "edt.cru"
        target.write_text(
            AB_CONTENT + "+NEU\n9,C1,P=10,H=J 08:00-09:00,F1,S=A001//\n", encoding="utf-8")
        st = target.stat()
        os.utime(target, ns=(st.st_atime_ns, st.st_mtime_ns + 5_000_000_000))

        assert len(loader.load_all(root)) == 5

    def test_without_cache(self, tmp_path: Path):
        root = _make_corpus(tmp_path)
        loader = CorpusLoader(use_cache=False)
        assert len(loader.load_all(root)) == 4
        assert "0 Verzeichnisse" in repr(loader)

    def test_clear(self, tmp_path: Path):
        loader = CorpusLoader()
        loader.load(_make_corpus(tmp_path))
        assert "1 Verzeichnisse" in repr(loader)
        loader.clear()
        assert "0 Verzeichnisse" in repr(loader)


class TestMath02Scenario:
    def test_directory_to_queries(self, tmp_path: Path):
        """Ein Verzeichnis mit einer Datei → Kapazität 30, ein Raum B203 an L 10:00–12:00."""
        from analysis.queries import find_room_capacity, find_rooms_for_course
        from models.timeslot import TimeRange

        (tmp_path / "AB").mkdir()
        (tmp_path / "AB" / "edt.cru").write_text(
            "+MATH02\n1,C1,P=30,H=L 10:00-12:00,F1,S=B203", encoding="utf-8")
        records = load_all(tmp_path)

        capacity = find_room_capacity(records, "B203")
        assert (capacity.room_name, capacity.capacity) == ("B203", 30)

        rooms = find_rooms_for_course(records, "MATH02")
        assert rooms.room_names == ["B203"]
        assert rooms.rooms["B203"] == {"L": [TimeRange.from_times("10:00", "12:00")]}
        assert find_rooms_for_course(records, "math02").rooms == rooms.rooms
