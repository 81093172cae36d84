"""Tests für das Konfigurationssystem."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from config.defaults import (
    DAY_CODES,
    DAY_NAMES,
    EXCEPTIONAL_PREFIXES,
    default_app_config,
)
from config.manager import ConfigManager
from config.schema import AppConfig, OpeningWindow, UtilizationThresholds
from models.timeslot import TimeRange


# ─── DEFAULT-KONFIGURATION ────────────────────────────────────────────────────

class TestDefaultConfig:
    def test_default_app_config_valid(self):
        """Vollständige Default-Config ist valide."""
        config = default_app_config()
        assert config.data_dir == "data"
        assert config.timetable_file == "edt.cru"
        assert config.footer_prefix == "Page générée en"
        assert config.slot_minutes == 30
        assert config.exceptional_prefixes == ["EXT", "IUT", "SPOR"]
        assert config.utilization.under == 20.0
        assert config.utilization.over == 80.0

    def test_default_window(self):
        window = default_app_config().opening_window.as_range()
        assert window == TimeRange(480, 1200)

    def test_matches_model_defaults(self):
        assert default_app_config().model_dump() == AppConfig().model_dump()

    def test_day_tables_consistent(self):
        assert list(DAY_NAMES) == list(DAY_CODES)
        assert EXCEPTIONAL_PREFIXES == ("EXT", "IUT", "SPOR")


# ─── VALIDIERUNG ──────────────────────────────────────────────────────────────

class TestSchemaValidation:
    def test_window_order(self):
        with pytest.raises(ValidationError):
            OpeningWindow(start="20:00", end="08:00")

    def test_window_time_format(self):
        with pytest.raises(ValidationError):
            OpeningWindow(start="8h", end="20:00")

    def test_window_until_midnight(self):
        assert OpeningWindow(start="00:00", end="24:00").as_range().duration == 1440

    def test_thresholds_order(self):
        with pytest.raises(ValidationError):
            UtilizationThresholds(under=90, over=10)

    def test_thresholds_range(self):
        with pytest.raises(ValidationError):
            UtilizationThresholds(under=-1, over=50)

    def test_slot_bounds(self):
        with pytest.raises(ValidationError):
            AppConfig(slot_minutes=0)

    def test_window_shorter_than_slot(self):
        with pytest.raises(ValidationError):
            AppConfig(opening_window=OpeningWindow(start="08:00", end="08:20"),
                      slot_minutes=30)


# ─── MANAGER ──────────────────────────────────────────────────────────────────

class TestConfigManager:
    def test_save_and_load_roundtrip(self, tmp_path: Path):
        """Gespeicherte Config lässt sich identisch wieder laden."""
        mgr = ConfigManager(tmp_path / "raumplan.yaml")
        config = default_app_config().model_copy(update={"data_dir": "daten", "slot_minutes": 15})
        mgr.save(config)
        assert mgr.exists()
        loaded = mgr.load()
        assert loaded.model_dump() == config.model_dump()

    def test_saved_file_has_comments(self, tmp_path: Path):
        path = tmp_path / "raumplan.yaml"
        ConfigManager(path).save(default_app_config())
        text = path.read_text(encoding="utf-8")
        assert text.startswith("# ====")
        assert "Öffnungsfenster" in text
        assert "opening_window:" in text

    def test_load_missing_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            ConfigManager(tmp_path / "fehlt.yaml").load()

    def test_load_invalid_raises_value_error(self, tmp_path: Path):
        path = tmp_path / "raumplan.yaml"
        path.write_text("slot_minutes: 0\n", encoding="utf-8")
        with pytest.raises(ValueError):
            ConfigManager(path).load()

    def test_partial_file_uses_defaults(self, tmp_path: Path):
        path = tmp_path / "raumplan.yaml"
        path.write_text("data_dir: /srv/edt\n", encoding="utf-8")
        config = ConfigManager(path).load()
        assert config.data_dir == "/srv/edt"
        assert config.slot_minutes == 30

    def test_empty_file_uses_defaults(self, tmp_path: Path):
        path = tmp_path / "raumplan.yaml"
        path.write_text("", encoding="utf-8")
        assert ConfigManager(path).load().model_dump() == default_app_config().model_dump()

    def test_load_or_default(self, tmp_path: Path):
        config = ConfigManager(tmp_path / "fehlt.yaml").load_or_default()
        assert config.model_dump() == default_app_config().model_dump()
