"""Gruppierungen der Stundenplan-Einträge für die Ansichten.

Alle Funktionen sind rein: sie verändern die Eingabe nicht, verlieren
keine Einträge und liefern bei gleicher Eingabe die gleiche Struktur.
Schlüssel ohne Einträge fehlen im Ergebnis; Schlüssel sind aufsteigend
sortiert, gleichrangige Einträge behalten ihre Eingabereihenfolge.
"""

from dataclasses import dataclass, field
from typing import Callable, Iterable, Union

from config.schema import LessonSlot, PauseSlot
from models.schedule import ScheduleEntry
from models.timeslot import TimeGrid


def _group(
    entries: Iterable[ScheduleEntry],
    key: Callable[[ScheduleEntry], int],
    order: Callable[[ScheduleEntry], tuple],
) -> dict[int, list[ScheduleEntry]]:
    groups: dict[int, list[ScheduleEntry]] = {}
    for entry in entries:
        groups.setdefault(key(entry), []).append(entry)
    return {k: sorted(groups[k], key=order) for k in sorted(groups)}


def group_by_day(entries: Iterable[ScheduleEntry]) -> dict[int, list[ScheduleEntry]]:
    """Wochentag → Einträge, aufsteigend nach Slot."""
    return _group(entries, lambda e: e.day_of_week, lambda e: (e.slot_number,))


def group_by_room(entries: Iterable[ScheduleEntry]) -> dict[int, list[ScheduleEntry]]:
    """Raum → Einträge, aufsteigend nach (Tag, Slot)."""
    return _group(entries, lambda e: e.room_id, lambda e: (e.day_of_week, e.slot_number))


def group_by_teacher(entries: Iterable[ScheduleEntry]) -> dict[int, list[ScheduleEntry]]:
    """Lehrkraft → Einträge, aufsteigend nach (Tag, Slot)."""
    return _group(entries, lambda e: e.teacher_id, lambda e: (e.day_of_week, e.slot_number))


# ─── Wochenraster ─────────────────────────────────────────────────────────────

@dataclass
class GridRow:
    """Eine Zeile des Wochenrasters: ein Unterrichtsslot oder die Pause."""

    slot: Union[LessonSlot, PauseSlot]
    # Wochentag → Einträge dieses Slots (bei Pausen leer)
    cells: dict[int, list[ScheduleEntry]] = field(default_factory=dict)

    @property
    def is_pause(self) -> bool:
        return isinstance(self.slot, PauseSlot)


def build_day_grid(
    entries: Iterable[ScheduleEntry], time_grid: TimeGrid
) -> list[GridRow]:
    """Baut das Wochenraster (Slots × Tage) inkl. Pausenzeile.

    Parallele Einträge (z.B. Laborgruppen) teilen sich eine Zelle.
    Einträge außerhalb des Rasters erscheinen nicht; dafür gibt es
    den RunValidator.
    """
    by_slot: dict[tuple[int, int], list[ScheduleEntry]] = {}
    for entry in entries:
        by_slot.setdefault((entry.day_of_week, entry.slot_number), []).append(entry)

    rows: list[GridRow] = []
    for slot in time_grid.rows():
        if isinstance(slot, PauseSlot):
            rows.append(GridRow(slot=slot))
            continue
        cells = {
            day: sorted(by_slot.get((day, slot.slot_number), []), key=lambda e: e.id)
            for day in time_grid.days
        }
        rows.append(GridRow(slot=slot, cells=cells))
    return rows
