"""Tests für CSV-Export, Anzeigetexte und Terminal-Renderer."""

import csv
import io
from datetime import date

import pytest

from export.csv_export import COLUMNS, CsvExporter
from export.helpers import EntryLabels, format_entries, format_entry
from export.tui_browser import RoutineBrowserApp
from export.tui_renderer import (
    PAUSE_CELL,
    render_day_rows,
    render_grid_rows,
    render_room_rows,
    render_teacher_rows,
)
from models.course_offering import CourseOffering
from models.reference_data import ReferenceData
from models.room import Room
from models.schedule import ScheduleEntry, ScheduleRun
from models.semester_offering import Department, Programme, SemesterOffering, Session
from models.subject import Subject
from models.teacher import Teacher
from models.timeslot import TimeGrid


# ─── Testdaten-Hilfsfunktionen ────────────────────────────────────────────────

def _reference() -> ReferenceData:
    return ReferenceData(
        semester_offerings=[SemesterOffering(
            id=3, programme_id=1, department_id=2, session_id=4, semester_number=3,
            programme=Programme(id=1, name="B.Tech"),
            department=Department(id=2, name="CSE"),
            session=Session(id=4, name="FALL", academic_year="2024-25"),
            course_offerings=[
                CourseOffering(id=100, semester_offering_id=3, subject_id=7,
                               weekly_required_slots=3),
                CourseOffering(id=101, semester_offering_id=3, subject_id=8,
                               weekly_required_slots=2, is_lab=True),
            ],
        )],
        teachers=[
            Teacher(id=5, name="Dr. A. Sharma", initials="AS"),
            Teacher(id=6, name="Prof. B. Rao"),
        ],
        rooms=[Room(id=10, name="LH-101"), Room(id=11, name="CS Lab 1", type="LAB")],
        subjects=[
            Subject(id=7, code="CS301", name="Operating Systems"),
            Subject(id=8, code="CS302L", name="Networks, \"Lab\""),
        ],
    )


def _entry(id: int, day: int = 1, slot: int = 1, course: int = 100, teacher: int = 5,
           room: int = 10, lab_group=None) -> ScheduleEntry:
    return ScheduleEntry(
        id=id, schedule_run_id=1, course_offering_id=course, teacher_id=teacher,
        room_id=room, day_of_week=day, slot_number=slot, lab_group=lab_group,
    )


def _entries() -> list[ScheduleEntry]:
    return [
        _entry(1, day=1, slot=1),
        _entry(2, day=2, slot=5, course=101, teacher=6, room=11, lab_group="A"),
        _entry(3, day=1, slot=3, course=101, teacher=6, room=11, lab_group="B"),
    ]


def _rows(content: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(content)))


# ─── Tests: CSV-Export ────────────────────────────────────────────────────────

class TestCsvExport:

    def test_header_and_row_count(self):
        result = CsvExporter(_reference()).export(_entries(), "scope", date(2024, 9, 1))
        rows = _rows(result.content)
        assert rows[0] == COLUMNS
        assert len(rows) == 4
        assert result.row_count == 3

    def test_rows_sorted_regardless_of_input_order(self):
        exporter = CsvExporter(_reference())
        forward = exporter.export(_entries(), "s", date(2024, 9, 1)).content
        backward = exporter.export(_entries()[::-1], "s", date(2024, 9, 1)).content
        assert forward == backward
        rows = _rows(forward)[1:]
        assert [(r[0], r[1]) for r in rows] == [
            ("Monday", "09:00-09:55"),
            ("Monday", rows[1][1]),
            ("Tuesday", rows[2][1]),
        ]
        assert rows[1][2] == "CS302L"

    def test_resolved_columns(self):
        result = CsvExporter(_reference()).export([_entry(1)], "s", date(2024, 9, 1))
        assert _rows(result.content)[1] == [
            "Monday", "09:00-09:55", "CS301", "Operating Systems",
            "Dr. A. Sharma", "LH-101", "Theory",
        ]
        assert result.issues == []

    def test_lab_type(self):
        result = CsvExporter(_reference()).export(
            [_entry(2, course=101, teacher=6, room=11)], "s", date(2024, 9, 1))
        assert _rows(result.content)[1][-1] == "Lab"

    def test_quoting_of_commas_and_quotes(self):
        result = CsvExporter(_reference()).export(
            [_entry(2, course=101, teacher=6, room=11)], "s", date(2024, 9, 1))
        assert '"Networks, ""Lab"""' in result.content
        assert _rows(result.content)[1][3] == 'Networks, "Lab"'

    def test_missing_references_become_placeholder(self):
        """Nicht auflösbare Referenzen → N/A, der Export läuft durch."""
        entry = _entry(9, course=999, teacher=77, room=88)
        result = CsvExporter(_reference()).export([entry], "s", date(2024, 9, 1))
        row = _rows(result.content)[1]
        assert row[2:] == ["N/A", "N/A", "N/A", "N/A", "N/A"]
        assert result.row_count == 1
        assert sorted(i.entity for i in result.issues) == ["course_offering", "room", "teacher"]
        assert all(i.entry_id == 9 for i in result.issues)

    def test_missing_subject_reported_once(self):
        reference = _reference()
        reference = reference.model_copy(update={"subjects": []})
        result = CsvExporter(reference).export([_entry(1)], "s", date(2024, 9, 1))
        assert [i.entity for i in result.issues] == ["subject"]

    def test_out_of_grid_slot_becomes_placeholder(self):
        result = CsvExporter(_reference()).export([_entry(1, day=9, slot=12)], "s",
                                                  date(2024, 9, 1))
        assert _rows(result.content)[1][:2] == ["N/A", "N/A"]
        assert {i.entity for i in result.issues} == {"day_of_week", "slot_number"}

    def test_custom_placeholder(self):
        result = CsvExporter(ReferenceData(), placeholder="?").export(
            [_entry(1)], "s", date(2024, 9, 1))
        assert _rows(result.content)[1][2:] == ["?"] * 5

    def test_empty_export_has_header_only(self):
        result = CsvExporter(_reference()).export([], "leer", date(2024, 9, 1))
        assert _rows(result.content) == [COLUMNS]
        assert result.row_count == 0

    def test_filename_and_mime(self):
        result = CsvExporter(_reference()).export([], "CSE_Sem3", date(2024, 9, 1))
        assert result.filename == "CSE_Sem3_2024-09-01.csv"
        assert result.mime_type == "text/csv"

    def test_export_run_uses_scope_label(self):
        run = ScheduleRun(id=1, semester_offering_id=3, status="DRAFT",
                          schedule_entries=_entries())
        result = CsvExporter(_reference()).export_run(run, date(2024, 9, 1))
        assert result.filename == "B.Tech_CSE_Sem3_FALL_2024-25_2024-09-01.csv"
        assert result.row_count == 3

    def test_unknown_offering_scope_label(self):
        run = ScheduleRun(id=1, semester_offering_id=42, status="DRAFT")
        assert CsvExporter(_reference()).scope_label_for(run) == "offering_42"

    def test_write(self, tmp_path):
        result = CsvExporter(_reference()).export(_entries(), "scope", date(2024, 9, 1))
        path = result.write(tmp_path / "out")
        assert path == tmp_path / "out" / "scope_2024-09-01.csv"
        assert path.read_bytes() == result.content.encode("utf-8")


# ─── Tests: Anzeigetexte ──────────────────────────────────────────────────────

class TestEntryLabels:

    def test_preloaded_relation_wins(self):
        entry = _entry(1).model_copy(update={"teacher": Teacher(id=5, name="Dr. X", initials="X")})
        labels = EntryLabels(_reference())
        assert labels.teacher(entry) == "Dr. X"
        assert labels.teacher_short(entry) == "X"

    def test_short_label_falls_back_to_name(self):
        labels = EntryLabels(_reference())
        assert labels.teacher_short(_entry(1, teacher=6)) == "Prof. B. Rao"

    def test_issue_deduplicated_per_entry(self):
        labels = EntryLabels(_reference())
        entry = _entry(1, room=88)
        labels.room(entry)
        labels.room(entry)
        assert len(labels.issues) == 1

    def test_format_entry_modes(self):
        labels = EntryLabels(_reference())
        entry = _entry(3, course=101, teacher=6, room=11, lab_group="B")
        assert format_entry(entry, labels, "day") == "CS302L (B)\nProf. B. Rao\nCS Lab 1"
        assert format_entry(entry, labels, "room") == "CS302L (B)\nProf. B. Rao"
        assert format_entry(entry, labels, "teacher") == "CS302L (B)\nCS Lab 1"

    def test_format_entries_stacks_parallel_groups(self):
        labels = EntryLabels(_reference())
        entries = [
            _entry(2, course=101, teacher=6, room=11, lab_group="A"),
            _entry(3, course=101, teacher=5, room=10, lab_group="B"),
        ]
        text = format_entries(entries, labels, "teacher")
        assert text == "CS302L (A)\nCS Lab 1\n──\nCS302L (B)\nLH-101"
        assert format_entries([], labels) == ""


# ─── Tests: Terminal-Renderer ─────────────────────────────────────────────────

class TestRenderer:

    def test_grid_rows_with_pause(self):
        labels = EntryLabels(_reference(), TimeGrid())
        rows = render_grid_rows(_entries(), labels)
        assert len(rows) == 8
        assert rows[4][1] == "Lunch Break"
        assert rows[4][2:] == [PAUSE_CELL] * 6
        assert rows[0][0] == "1"
        assert rows[0][2] == "CS301\nAS\nLH-101"
        assert rows[0][3] == "—"

    def test_room_rows_only_room_entries(self):
        labels = EntryLabels(_reference())
        rows = render_room_rows(11, _entries(), labels)
        filled = [cell for row in rows for cell in row[2:] if cell not in ("—", PAUSE_CELL)]
        assert sorted(filled) == ["CS302L (A)\nProf. B. Rao", "CS302L (B)\nProf. B. Rao"]

    def test_teacher_rows(self):
        labels = EntryLabels(_reference())
        rows = render_teacher_rows(5, _entries(), labels)
        filled = [cell for row in rows for cell in row[2:] if cell not in ("—", PAUSE_CELL)]
        assert filled == ["CS301\nLH-101"]

    def test_day_rows(self):
        labels = EntryLabels(_reference())
        rows = render_day_rows([_entry(3, slot=3, course=101, teacher=6, room=11,
                                       lab_group="B")], labels)
        assert rows[0][1:] == ["CS302L", 'Networks, "Lab"', "Prof. B. Rao", "CS Lab 1",
                               "Lab (B)"]


class TestBrowserItems:

    def test_entity_items(self):
        run = ScheduleRun(id=1, semester_offering_id=3, status="DRAFT",
                          schedule_entries=_entries())
        items = RoutineBrowserApp(run, _reference()).entity_items()
        assert items[0] == ("week", None, "Wochenplan")
        kinds = [(kind, eid) for kind, eid, _ in items[1:]]
        assert ("room", 10) in kinds
        assert ("teacher", 6) in kinds

    @pytest.mark.parametrize("room_id", [10, 11])
    def test_room_labels_resolved(self, room_id):
        run = ScheduleRun(id=1, semester_offering_id=3, status="DRAFT",
                          schedule_entries=_entries())
        items = RoutineBrowserApp(run, _reference()).entity_items()
        labels = [label for kind, eid, label in items if kind == "room" and eid == room_id]
        assert len(labels) == 1
