"""Gemeinsamer Renderer für die Terminal-Anzeige eines Laufs.

Wird von cmd_show (Rich) und cmd_browse (Textual) verwendet.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from models.schedule import ScheduleEntry
    from export.helpers import EntryLabels

PAUSE_CELL = "─" * 8


def render_grid_rows(
    entries: list["ScheduleEntry"],
    labels: "EntryLabels",
    mode: str = "day",
) -> list[list[str]]:
    """Gibt Tabellenzeilen für das Wochenraster zurück.

    Jede Zeile: [slot, time_range, Tag 1, ..., Tag n]
    Die Mittagspause wird als eigene Zeile eingefügt, nie als Slot.
    """
    from analysis.aggregation import build_day_grid
    from export.helpers import format_entries

    rows: list[list[str]] = []
    for row in build_day_grid(entries, labels.time_grid):
        if row.is_pause:
            rows.append(["—", row.slot.label] + [PAUSE_CELL] * len(labels.time_grid.days))
            continue
        cells = [str(row.slot.slot_number), row.slot.time_range]
        for day in labels.time_grid.days:
            cell = row.cells.get(day, [])
            cells.append(format_entries(cell, labels, mode) if cell else "—")
        rows.append(cells)
    return rows


def render_room_rows(
    room_id: int, entries: list["ScheduleEntry"], labels: "EntryLabels"
) -> list[list[str]]:
    """Wochenraster eines Raums."""
    from analysis.aggregation import group_by_room

    return render_grid_rows(group_by_room(entries).get(room_id, []), labels, mode="room")


def render_teacher_rows(
    teacher_id: int, entries: list["ScheduleEntry"], labels: "EntryLabels"
) -> list[list[str]]:
    """Wochenraster einer Lehrkraft."""
    from analysis.aggregation import group_by_teacher

    return render_grid_rows(
        group_by_teacher(entries).get(teacher_id, []), labels, mode="teacher"
    )


def render_day_rows(
    day_entries: list["ScheduleEntry"], labels: "EntryLabels"
) -> list[list[str]]:
    """Listenzeilen eines Tages: [Zeit, Code, Fach, Lehrkraft, Raum, Typ]."""
    rows: list[list[str]] = []
    for e in day_entries:
        kind = labels.session_type(e)
        if e.lab_group:
            kind = f"{kind} ({e.lab_group})"
        rows.append([
            labels.time(e),
            labels.subject_code(e),
            labels.subject_name(e),
            labels.teacher(e),
            labels.room(e),
            kind,
        ])
    return rows
