"""Vergleich zweier Generierungsläufe (Diff / Changelog).

Gibt strukturierte Unterschiede zurück, die als Rich-Tabelle oder JSON
ausgegeben werden können. Einträge werden über ihre Platzierung
verglichen, nicht über die ID (jeder Lauf vergibt eigene IDs).
"""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from models.schedule import ScheduleEntry, ScheduleRun


@dataclass(frozen=True)
class Placement:
    """Platzierung eines Eintrags unabhängig vom Lauf."""

    day_of_week: int
    slot_number: int
    course_offering_id: int
    teacher_id: int
    room_id: int
    lab_group: Optional[str] = None

    @classmethod
    def of(cls, entry: "ScheduleEntry") -> "Placement":
        return cls(
            day_of_week=entry.day_of_week,
            slot_number=entry.slot_number,
            course_offering_id=entry.course_offering_id,
            teacher_id=entry.teacher_id,
            room_id=entry.room_id,
            lab_group=entry.lab_group,
        )

    @property
    def sort_key(self) -> tuple:
        return (self.day_of_week, self.slot_number, self.course_offering_id,
                self.lab_group or "", self.teacher_id, self.room_id)

    def to_dict(self) -> dict:
        return {
            "day_of_week": self.day_of_week,
            "slot_number": self.slot_number,
            "course_offering_id": self.course_offering_id,
            "teacher_id": self.teacher_id,
            "room_id": self.room_id,
            "lab_group": self.lab_group,
        }


@dataclass
class RunDiff:
    """Vollständiger Diff zwischen zwei Läufen."""

    run_a: int
    run_b: int
    added: list[Placement] = field(default_factory=list)
    removed: list[Placement] = field(default_factory=list)
    status_change: Optional[str] = None
    report_changes: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        """Gibt True zurück wenn kein Unterschied gefunden wurde."""
        return (
            not self.added
            and not self.removed
            and self.status_change is None
            and not self.report_changes
        )

    def to_dict(self) -> dict:
        """Serialisiert den Diff als Dictionary (für JSON-Ausgabe)."""
        return {
            "run_a": self.run_a,
            "run_b": self.run_b,
            "added": [p.to_dict() for p in self.added],
            "removed": [p.to_dict() for p in self.removed],
            "status_change": self.status_change,
            "report_changes": self.report_changes,
        }

    def to_json(self, indent: int = 2) -> str:
        """Gibt den Diff als JSON-String zurück."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


def diff_runs(a: "ScheduleRun", b: "ScheduleRun") -> RunDiff:
    """Vergleicht zwei Läufe und gibt einen strukturierten Diff zurück.

    Vergleicht:
    - Platzierungen (hinzugefügt / entfernt, als Multimenge)
    - Status
    - Kennzahlen des Generierungsberichts

    Args:
        a: Erster Lauf (Basis / alt).
        b: Zweiter Lauf (neu).

    Returns:
        RunDiff mit allen gefundenen Unterschieden.
    """
    diff = RunDiff(run_a=a.id, run_b=b.id)

    # ── Platzierungen ────────────────────────────────────────────────────────
    count_a = Counter(Placement.of(e) for e in a.schedule_entries)
    count_b = Counter(Placement.of(e) for e in b.schedule_entries)
    diff.added = sorted((count_b - count_a).elements(), key=lambda p: p.sort_key)
    diff.removed = sorted((count_a - count_b).elements(), key=lambda p: p.sort_key)

    # ── Status ───────────────────────────────────────────────────────────────
    if a.status != b.status:
        diff.status_change = f"{a.status.value} → {b.status.value}"

    # ── Bericht ──────────────────────────────────────────────────────────────
    for key in ("total_blocks", "placed_blocks", "unplaced_blocks"):
        val_a = getattr(a.report, key)
        val_b = getattr(b.report, key)
        if val_a != val_b:
            diff.report_changes.append(f"{key}: {val_a} → {val_b}")

    return diff
