"""Konfigurationsmanager: Laden und Speichern der App-Konfiguration.

Nutzt ruamel.yaml für YAML-Serialisierung mit Kommentaren.
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Optional

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.defaults import default_app_config
from config.schema import AppConfig

logger = logging.getLogger(__name__)

yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


# ─── YAML-KOMMENTAR-AUFBAU ───

def _yaml_header() -> str:
    return (
        "# ============================================\n"
        "# Raumplan: Konfiguration\n"
        f"# Erstellt: {date.today().isoformat()}\n"
        "# ============================================\n"
    )


_SECTION_COMMENTS = {
    "data_dir": (
        "Daten",
        "Ein Unterordner pro Gruppe, darin je eine Stundenplandatei.",
    ),
    "opening_window": (
        "Öffnungsfenster",
        "Grundlage für freie Zeiträume und Auslastung (HH:MM).",
    ),
    "exceptional_prefixes": (
        "Sonderräume",
        "Räume mit diesen Präfixen haben kein Gebäude und stehen am Ende.",
    ),
    "utilization": (
        "Auslastung",
        "Schwellen in Prozent: unter = unterausgelastet, über = überausgelastet.",
    ),
}


class ConfigManager:
    DEFAULT_CONFIG = Path("raumplan.yaml")

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path is not None else self.DEFAULT_CONFIG

    def exists(self) -> bool:
        return self.path.exists()

    # ─── Laden ───

    def load(self, path: Optional[Path] = None) -> AppConfig:
        """Lade Config aus YAML. Validiert automatisch via Pydantic."""
        target = Path(path) if path is not None else self.path
        if not target.exists():
            raise FileNotFoundError(
                f"Konfigurationsdatei nicht gefunden: {target}\n"
                f"Führen Sie 'python main.py config init' aus, um sie anzulegen."
            )
        with open(target, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        if raw is None:
            raw = {}
        try:
            return AppConfig.model_validate(dict(raw))
        except Exception as e:
            raise ValueError(
                f"Konfigurationsdatei ungültig: {target}\n"
                f"Pydantic-Fehler: {e}"
            ) from e

    def load_or_default(self) -> AppConfig:
        """Wie load(), liefert aber die Standardwerte wenn keine Datei existiert."""
        if not self.path.exists():
            logger.debug(f"Keine Konfiguration unter {self.path}, nutze Standardwerte")
            return default_app_config()
        return self.load()

    # ─── Speichern ───

    def save(self, config: AppConfig, path: Optional[Path] = None) -> Path:
        """Speichere Config als YAML mit deutschen Kommentaren."""
        target = Path(path) if path is not None else self.path
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(config)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_yaml_header() + "\n")
            yaml.dump(data, f)

        logger.info(f"Konfiguration gespeichert: {target}")
        return target

    def _build_commented_yaml(self, config: AppConfig) -> CommentedMap:
        """Baut die YAML-Struktur mit Kommentaren auf."""
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            if field in cm:
                cm.yaml_set_comment_before_after_key(
                    field,
                    before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
                )

        if "slot_minutes" in cm:
            cm.yaml_add_eol_comment("Minuten pro Slot", "slot_minutes")

        return cm
