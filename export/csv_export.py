"""CSV-Export eines Laufs (eine Zeile pro Eintrag)."""

import csv
import io
import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Iterable, Optional

from exceptions import PartialDataError
from models.reference_data import ReferenceData
from models.schedule import ScheduleEntry, ScheduleRun
from models.timeslot import TimeGrid

from export.helpers import PLACEHOLDER, EntryLabels, today_iso

logger = logging.getLogger(__name__)

COLUMNS = ["Day", "Time", "Subject Code", "Subject Name", "Teacher", "Room", "Type"]


@dataclass
class CsvExport:
    """Fertiger CSV-Inhalt samt Dateiname und gesammelten Datenlücken."""

    filename: str
    content: str
    row_count: int
    issues: list[PartialDataError] = field(default_factory=list)
    mime_type: str = "text/csv"

    def write(self, directory: Path) -> Path:
        """Schreibt die Datei nach directory/filename und gibt den Pfad zurück."""
        path = Path(directory) / self.filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(self.content)
        return path


class CsvExporter:
    """Serialisiert Einträge als CSV.

    Zeilen sind immer nach (Tag, Slot, ID) sortiert, unabhängig von der
    Reihenfolge der Eingabe. Fehlende Referenzen werden zum Platzhalter,
    der Export bricht deshalb nie ab.
    """

    def __init__(
        self,
        reference: Optional[ReferenceData] = None,
        time_grid: Optional[TimeGrid] = None,
        placeholder: str = PLACEHOLDER,
    ):
        self.reference = reference if reference is not None else ReferenceData()
        self.time_grid = time_grid or TimeGrid()
        self.placeholder = placeholder

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def export(
        self,
        entries: Iterable[ScheduleEntry],
        scope_label: str,
        export_date: Optional[date] = None,
    ) -> CsvExport:
        """Erstellt den CSV-Inhalt für die Einträge.

        export_date: Datum für den Dateinamen (Standard: heute).
        """
        labels = EntryLabels(self.reference, self.time_grid, self.placeholder)
        rows = sorted(entries, key=lambda e: e.sort_key)

        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(COLUMNS)
        for entry in rows:
            writer.writerow(self._row(entry, labels))

        if labels.issues:
            logger.warning(
                f"CSV-Export '{scope_label}': {len(labels.issues)} nicht auflösbare "
                f"Referenzen durch '{self.placeholder}' ersetzt"
            )
        iso_date = export_date.isoformat() if export_date else today_iso()
        filename = f"{scope_label}_{iso_date}.csv"
        logger.info(f"CSV-Export erstellt: {filename} ({len(rows)} Zeilen)")
        return CsvExport(
            filename=filename,
            content=buffer.getvalue(),
            row_count=len(rows),
            issues=list(labels.issues),
        )

    def export_run(self, run: ScheduleRun, export_date: Optional[date] = None) -> CsvExport:
        """Exportiert einen Lauf; der Dateiname folgt dem Semesterangebot."""
        return self.export(run.schedule_entries, self.scope_label_for(run), export_date)

    def scope_label_for(self, run: ScheduleRun) -> str:
        offering = self.reference.semester_offering(run.semester_offering_id)
        if offering is None:
            return f"offering_{run.semester_offering_id}"
        return offering.scope_label

    # ─── Zeilen ───────────────────────────────────────────────────────────────

    def _row(self, entry: ScheduleEntry, labels: EntryLabels) -> list[str]:
        return [
            labels.day(entry),
            labels.time(entry),
            labels.subject_code(entry),
            labels.subject_name(entry),
            labels.teacher(entry),
            labels.room(entry),
            labels.session_type(entry),
        ]
