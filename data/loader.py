"""Lädt alle edt.cru-Dateien aus den Unterordnern eines Datenverzeichnisses.

Jeder direkte Unterordner (z.B. "AB", "CD", ...) enthält höchstens eine Datei
mit festem Namen. Fehlende oder unlesbare Dateien werden übersprungen und als
Diagnose gemeldet; sie brechen das Laden nie ab.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from data.cru_parser import DEFAULT_FOOTER_PREFIX, ParseResult, parse_content
from data.errors import Diagnostic, UnreadableSource
from models.session import SessionRecord

logger = logging.getLogger(__name__)

DEFAULT_TIMETABLE_FILE = "edt.cru"

PathLike = Union[str, Path]


def load_file(
    path: PathLike,
    footer_prefix: str = DEFAULT_FOOTER_PREFIX,
) -> ParseResult:
    """Liest und parst eine einzelne edt.cru-Datei.

    Raises:
        UnreadableSource: wenn die Datei nicht gelesen oder dekodiert werden kann.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise UnreadableSource(f"Datei nicht lesbar: {path} ({e})") from e
    return parse_content(text, source=str(path), footer_prefix=footer_prefix)


def _list_subdirs(root: Path) -> list[Path]:
    try:
        entries = sorted(root.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise UnreadableSource(f"Verzeichnis nicht lesbar: {root} ({e})") from e
    subdirs = []
    for entry in entries:
        try:
            if entry.is_dir():
                subdirs.append(entry)
        except OSError as e:
            logger.warning(f"Eintrag übersprungen: {entry} ({e})")
    return subdirs


def load_corpus(
    root_dir: PathLike,
    file_name: str = DEFAULT_TIMETABLE_FILE,
    footer_prefix: str = DEFAULT_FOOTER_PREFIX,
) -> ParseResult:
    """Lädt alle Termine aus root_dir/<unterordner>/<file_name>.

    Returns:
        ParseResult mit allen Terminen (in Reihenfolge der Unterordner) und
        allen Diagnosen. Ein unlesbares Wurzelverzeichnis liefert ein leeres
        Ergebnis mit einer UNREADABLE_SOURCE-Diagnose.
    """
    root = Path(root_dir)
    result = ParseResult()

    try:
        subdirs = _list_subdirs(root)
    except UnreadableSource as e:
        logger.warning(str(e))
        result.diagnostics.append(Diagnostic.from_error(e, source=str(root)))
        return result

    for subdir in subdirs:
        timetable = subdir / file_name
        try:
            if not timetable.is_file():
                logger.warning(f"Keine {file_name} in {subdir} – übersprungen")
                continue
            result.extend(load_file(timetable, footer_prefix=footer_prefix))
        except UnreadableSource as e:
            logger.warning(str(e))
            result.diagnostics.append(Diagnostic.from_error(e, source=str(timetable)))
        except OSError as e:
            err = UnreadableSource(f"Unterordner nicht lesbar: {subdir} ({e})")
            logger.warning(str(err))
            result.diagnostics.append(Diagnostic.from_error(err, source=str(subdir)))

    logger.info(
        f"{len(result.records)} Termine aus {root} geladen "
        f"({len(result.diagnostics)} Diagnosen)"
    )
    return result


def load_all(
    root_dir: PathLike,
    file_name: str = DEFAULT_TIMETABLE_FILE,
    footer_prefix: str = DEFAULT_FOOTER_PREFIX,
) -> list[SessionRecord]:
    """Wie load_corpus, gibt aber nur die Termine zurück."""
    return load_corpus(root_dir, file_name, footer_prefix).records


# ─── Cache ────────────────────────────────────────────────────────────────────

class CorpusLoader:
    """Lädt ein Datenverzeichnis und merkt sich das Ergebnis.

    Der Cache ist an die Signatur (Pfad, mtime, Größe) aller Stundenplandateien
    gebunden. Die Signatur wird bei jedem Aufruf neu berechnet, daher spiegelt
    das Ergebnis immer den aktuellen Dateistand wider.
    """

    def __init__(
        self,
        file_name: str = DEFAULT_TIMETABLE_FILE,
        footer_prefix: str = DEFAULT_FOOTER_PREFIX,
        use_cache: bool = True,
    ) -> None:
        self.file_name = file_name
        self.footer_prefix = footer_prefix
        self.use_cache = use_cache
        self._cache: dict[Path, tuple[tuple, ParseResult]] = {}

    def _signature(self, root: Path) -> Optional[tuple]:
        """Signatur aller Stundenplandateien; None wenn nicht ermittelbar."""
        try:
            parts = []
            for subdir in _list_subdirs(root):
                timetable = subdir / self.file_name
                if timetable.is_file():
                    st = timetable.stat()
                    parts.append((subdir.name, st.st_mtime_ns, st.st_size))
            return tuple(parts)
        except (OSError, UnreadableSource):
            return None

    def load(self, root_dir: PathLike) -> ParseResult:
        root = Path(root_dir).resolve()
        if not self.use_cache:
            return load_corpus(root, self.file_name, self.footer_prefix)

        signature = self._signature(root)
        cached = self._cache.get(root)
        if signature is not None and cached is not None and cached[0] == signature:
            logger.debug(f"Cache-Treffer für {root}")
            return cached[1].model_copy(deep=True)

        result = load_corpus(root, self.file_name, self.footer_prefix)
        if signature is not None:
            self._cache[root] = (signature, result.model_copy(deep=True))
        return result

    def load_all(self, root_dir: PathLike) -> list[SessionRecord]:
        return self.load(root_dir).records

    def clear(self) -> None:
        self._cache.clear()

    def __repr__(self) -> str:
        return f"CorpusLoader({len(self._cache)} Verzeichnisse im Cache)"
