"""Prüfung der Platzierungen eines Laufs.

Sicherheitsnetz unabhängig vom Solver: Doppelbelegungen von Räumen und
Lehrkräften, Slots außerhalb des Rasters und vermischte Läufe.
"""

from collections import defaultdict
from typing import Iterable, Literal, Optional

from pydantic import BaseModel

from models.reference_data import ReferenceData
from models.schedule import ScheduleEntry
from models.timeslot import TimeGrid


class ValidationViolation(BaseModel):
    """Eine einzelne Verletzung."""

    severity: Literal["error", "warning"]
    constraint: str      # z.B. "teacher_double_booking"
    description: str
    entity: str          # teacher_id / room_id / course_offering_id / run_id


class ValidationReport(BaseModel):
    """Ergebnis der Platzierungs-Prüfung."""

    violations: list[ValidationViolation]
    is_valid: bool       # True wenn keine Errors (Warnings ok)

    @property
    def errors(self) -> list[ValidationViolation]:
        return [v for v in self.violations if v.severity == "error"]

    @property
    def warnings(self) -> list[ValidationViolation]:
        return [v for v in self.violations if v.severity == "warning"]

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        status = (
            "[bold green]✓ VALIDE[/bold green]"
            if self.is_valid
            else "[bold red]✗ VERLETZUNGEN GEFUNDEN[/bold red]"
        )
        lines = [status, f"Fehler: {len(self.errors)} | Warnungen: {len(self.warnings)}"]
        console.print(Panel("\n".join(lines), title="Platzierungs-Prüfung", border_style="cyan"))

        if not self.violations:
            return

        table = Table(box=box.ROUNDED, show_lines=True)
        table.add_column("Typ", width=8)
        table.add_column("Constraint", width=24)
        table.add_column("Entität", width=10)
        table.add_column("Beschreibung")
        for v in self.violations:
            color = "red" if v.severity == "error" else "yellow"
            table.add_row(
                f"[{color}]{v.severity.upper()}[/{color}]",
                v.constraint,
                v.entity,
                v.description,
            )
        console.print(table)


class RunValidator:
    """Prüft die Einträge eines Laufs auf Verletzungen der Platzierungsregeln."""

    def __init__(self, time_grid: Optional[TimeGrid] = None) -> None:
        self.time_grid = time_grid or TimeGrid()

    def validate(
        self,
        entries: Iterable[ScheduleEntry],
        reference: Optional[ReferenceData] = None,
    ) -> ValidationReport:
        """Führt alle Prüfungen durch und gibt einen ValidationReport zurück."""
        entries = list(entries)
        violations: list[ValidationViolation] = []

        violations.extend(self._check_single_run(entries))
        violations.extend(self._check_slot_range(entries))
        violations.extend(self._check_teacher_double_booking(entries))
        violations.extend(self._check_room_double_booking(entries))
        violations.extend(self._check_lab_groups(entries))
        if reference is not None:
            violations.extend(self._check_weekly_load(entries, reference))

        has_errors = any(v.severity == "error" for v in violations)
        return ValidationReport(violations=violations, is_valid=not has_errors)

    # ── Einzelne Prüfungen ────────────────────────────────────────────────────

    def _check_single_run(self, entries: list[ScheduleEntry]) -> list[ValidationViolation]:
        run_ids = sorted({e.schedule_run_id for e in entries})
        if len(run_ids) <= 1:
            return []
        return [ValidationViolation(
            severity="error",
            constraint="mixed_runs",
            entity=",".join(str(r) for r in run_ids),
            description=f"Einträge aus {len(run_ids)} Läufen vermischt.",
        )]

    def _check_slot_range(self, entries: list[ScheduleEntry]) -> list[ValidationViolation]:
        violations: list[ValidationViolation] = []
        for e in entries:
            if not self.time_grid.is_valid(e.day_of_week, e.slot_number):
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="slot_out_of_range",
                    entity=str(e.id),
                    description=(
                        f"Tag {e.day_of_week}, Slot {e.slot_number} liegt "
                        f"außerhalb des Zeitrasters."
                    ),
                ))
        return violations

    def _check_teacher_double_booking(
        self, entries: list[ScheduleEntry]
    ) -> list[ValidationViolation]:
        """Keine Lehrkraft darf zur selben Zeit zwei Einträge haben."""
        violations: list[ValidationViolation] = []
        seen: dict[tuple, list[ScheduleEntry]] = defaultdict(list)
        for e in entries:
            seen[(e.teacher_id, e.day_of_week, e.slot_number)].append(e)

        for (teacher_id, day, slot), booked in seen.items():
            if len(booked) > 1:
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="teacher_double_booking",
                    entity=str(teacher_id),
                    description=(
                        f"Tag {day}, Slot {slot}: gleichzeitig in Einträgen "
                        f"{', '.join(str(e.id) for e in booked)} eingeplant."
                    ),
                ))
        return violations

    def _check_room_double_booking(
        self, entries: list[ScheduleEntry]
    ) -> list[ValidationViolation]:
        """Ein Raum darf pro Slot nur einmal belegt sein, außer alle Einträge sind co_located."""
        violations: list[ValidationViolation] = []
        seen: dict[tuple, list[ScheduleEntry]] = defaultdict(list)
        for e in entries:
            seen[(e.room_id, e.day_of_week, e.slot_number)].append(e)

        for (room_id, day, slot), booked in seen.items():
            if len(booked) > 1 and not all(e.co_located for e in booked):
                violations.append(ValidationViolation(
                    severity="error",
                    constraint="room_double_booking",
                    entity=str(room_id),
                    description=(
                        f"Tag {day}, Slot {slot}: gleichzeitig von Einträgen "
                        f"{', '.join(str(e.id) for e in booked)} belegt."
                    ),
                ))
        return violations

    def _check_lab_groups(self, entries: list[ScheduleEntry]) -> list[ValidationViolation]:
        """Parallele Einträge desselben Kurses brauchen unterschiedliche Laborgruppen."""
        violations: list[ValidationViolation] = []
        parallel: dict[tuple, list[ScheduleEntry]] = defaultdict(list)
        for e in entries:
            parallel[(e.course_offering_id, e.day_of_week, e.slot_number)].append(e)

        for (course_id, day, slot), group in parallel.items():
            if len(group) <= 1:
                continue
            labels = [e.lab_group for e in group]
            if None in labels or len(set(labels)) != len(labels):
                violations.append(ValidationViolation(
                    severity="warning",
                    constraint="lab_group_collision",
                    entity=str(course_id),
                    description=(
                        f"Tag {day}, Slot {slot}: {len(group)} parallele Einträge "
                        f"ohne eindeutige Laborgruppe ({labels})."
                    ),
                ))
        return violations

    def _check_weekly_load(
        self, entries: list[ScheduleEntry], reference: ReferenceData
    ) -> list[ValidationViolation]:
        """Prüft die Soll-Slots pro Kurs (und Laborgruppe) gegen die Platzierungen."""
        violations: list[ValidationViolation] = []
        actual: dict[tuple, int] = defaultdict(int)
        for e in entries:
            actual[(e.course_offering_id, e.lab_group)] += 1

        for (course_id, lab_group), got in sorted(actual.items(), key=lambda kv: (kv[0][0], kv[0][1] or "")):
            co = reference.course_offering(course_id)
            if co is None or not co.weekly_required_slots:
                continue
            if got != co.weekly_required_slots:
                group = f" Gruppe {lab_group}" if lab_group else ""
                violations.append(ValidationViolation(
                    severity="warning",
                    constraint="weekly_load_mismatch",
                    entity=str(course_id),
                    description=(
                        f"Kurs {course_id}{group}: Soll {co.weekly_required_slots} Slots, "
                        f"Ist {got} (Differenz {got - co.weekly_required_slots:+d})."
                    ),
                ))
        return violations
