"""Gemeinsame Hilfsfunktionen für CSV-Export und Terminal-Ansichten."""

import logging
from datetime import date
from typing import Optional

from exceptions import OutOfRangeError, PartialDataError
from models.course_offering import CourseOffering
from models.reference_data import ReferenceData
from models.schedule import ScheduleEntry
from models.subject import Subject
from models.timeslot import TimeGrid

logger = logging.getLogger(__name__)

PLACEHOLDER = "N/A"


def today_iso() -> str:
    """Gibt das heutige Datum als YYYY-MM-DD zurück."""
    return date.today().isoformat()


# ─── Auflösung von Referenzen ─────────────────────────────────────────────────

class EntryLabels:
    """Liefert Anzeigetexte für Einträge; Unauflösbares wird zum Platzhalter.

    Jede nicht auflösbare Referenz wird einmal pro Eintrag als
    PartialDataError in `issues` gesammelt und als Warnung geloggt.
    """

    def __init__(
        self,
        reference: Optional[ReferenceData] = None,
        time_grid: Optional[TimeGrid] = None,
        placeholder: str = PLACEHOLDER,
    ) -> None:
        self.reference = reference if reference is not None else ReferenceData()
        self.time_grid = time_grid or TimeGrid()
        self.placeholder = placeholder
        self.issues: list[PartialDataError] = []
        self._seen: set[tuple] = set()

    def _missing(self, entity: str, entity_id: Optional[int], entry: ScheduleEntry) -> str:
        key = (entity, entity_id, entry.id)
        if key not in self._seen:
            self._seen.add(key)
            issue = PartialDataError(entity, entity_id, entry.id)
            self.issues.append(issue)
            logger.warning(str(issue))
        return self.placeholder

    # ── Zeit ─────────────────────────────────────────────────────────────────

    def day(self, entry: ScheduleEntry) -> str:
        try:
            return self.time_grid.day_name(entry.day_of_week)
        except OutOfRangeError:
            return self._missing("day_of_week", entry.day_of_week, entry)

    def time(self, entry: ScheduleEntry) -> str:
        try:
            return self.time_grid.time_range(entry.slot_number)
        except OutOfRangeError:
            return self._missing("slot_number", entry.slot_number, entry)

    # ── Kurs / Fach ──────────────────────────────────────────────────────────

    def course_offering(self, entry: ScheduleEntry) -> Optional[CourseOffering]:
        co = self.reference.resolve_course_offering(entry)
        if co is None:
            self._missing("course_offering", entry.course_offering_id, entry)
        return co

    def subject(self, entry: ScheduleEntry) -> Optional[Subject]:
        co = self.course_offering(entry)
        if co is None:
            return None
        subject = self.reference.resolve_subject(entry)
        if subject is None:
            self._missing("subject", co.subject_id, entry)
        return subject

    def subject_code(self, entry: ScheduleEntry) -> str:
        subject = self.subject(entry)
        return subject.code if subject else self.placeholder

    def subject_name(self, entry: ScheduleEntry) -> str:
        subject = self.subject(entry)
        return subject.name if subject else self.placeholder

    def session_type(self, entry: ScheduleEntry) -> str:
        """'Lab' oder 'Theory' anhand des Kurses."""
        co = self.course_offering(entry)
        return co.session_type if co else self.placeholder

    # ── Lehrkraft / Raum ─────────────────────────────────────────────────────

    def teacher(self, entry: ScheduleEntry) -> str:
        teacher = self.reference.resolve_teacher(entry)
        if teacher is None:
            return self._missing("teacher", entry.teacher_id, entry)
        return teacher.name

    def teacher_short(self, entry: ScheduleEntry) -> str:
        teacher = self.reference.resolve_teacher(entry)
        if teacher is None:
            return self._missing("teacher", entry.teacher_id, entry)
        return teacher.short_label

    def room(self, entry: ScheduleEntry) -> str:
        room = self.reference.resolve_room(entry)
        if room is None:
            return self._missing("room", entry.room_id, entry)
        return room.name


# ─── Zelleninhalt-Formatierung ────────────────────────────────────────────────

def format_entry(entry: ScheduleEntry, labels: EntryLabels, mode: str = "day") -> str:
    """Formatiert einen einzelnen Eintrag als Zelleninhalt.

    mode='day':     "Code (Gruppe)\nLehrkraft\nRaum"
    mode='room':    "Code (Gruppe)\nLehrkraft"
    mode='teacher': "Code (Gruppe)\nRaum"
    """
    code = labels.subject_code(entry)
    if entry.lab_group:
        code = f"{code} ({entry.lab_group})"

    if mode == "day":
        return f"{code}\n{labels.teacher_short(entry)}\n{labels.room(entry)}"
    elif mode == "room":
        return f"{code}\n{labels.teacher_short(entry)}"
    elif mode == "teacher":
        return f"{code}\n{labels.room(entry)}"
    return code


def format_entries(
    entries: list[ScheduleEntry], labels: EntryLabels, mode: str = "day"
) -> str:
    """Formatiert mehrere Einträge für eine Zelle (getrennt durch ──).

    Parallele Laborgruppen teilen sich einen Slot und werden gestapelt.
    """
    if not entries:
        return ""
    if len(entries) == 1:
        return format_entry(entries[0], labels, mode)
    return "\n──\n".join(format_entry(e, labels, mode) for e in entries)
