"""Tests für Konfiguration, Zeitraster und Datenmodelle."""

from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError

from config.schema import (
    ApiConfig,
    ExportConfig,
    GenerationOptions,
    LessonSlot,
    PauseSlot,
    TimeGridConfig,
)
from config.defaults import default_client_config, default_time_grid
from config.manager import ConfigManager
from exceptions import OutOfRangeError, ValidationError
from models.timeslot import TimeGrid, TimeSlot


# ─── DEFAULT-KONFIGURATION ────────────────────────────────────────────────────

class TestDefaultConfig:
    def test_default_time_grid_valid(self):
        """Default-Zeitraster: Montag bis Samstag, 7 Slots, eine Mittagspause."""
        tg = default_time_grid()
        assert tg.days_per_week == 6
        assert tg.max_slot == 7
        assert len(tg.pauses) == 1
        assert tg.pauses[0].after_slot == 4

    def test_default_client_config_valid(self):
        """Vollständige Default-Config ist valide."""
        config = default_client_config()
        assert config.api.base_url == "http://localhost:8080/api"
        assert config.api.request_timeout_seconds == 30.0
        assert config.api.generation_timeout_seconds == 300.0
        assert config.export.placeholder == "N/A"

    def test_generation_timeout_must_exceed_request_timeout(self):
        """Generierungs-Zeitlimit kleiner als normales Zeitlimit → Fehler."""
        with pytest.raises(PydanticValidationError):
            ApiConfig(request_timeout_seconds=60, generation_timeout_seconds=10)

    def test_generation_options_bounds(self):
        """max_iterations und temperature haben feste Grenzen."""
        with pytest.raises(PydanticValidationError):
            GenerationOptions(max_iterations=50)
        with pytest.raises(PydanticValidationError):
            GenerationOptions(temperature=3.0)
        assert GenerationOptions().model_dump() == {
            "respect_teacher_preferences": True,
            "respect_room_preferences": True,
            "max_iterations": 1000,
            "temperature": 0.8,
        }


class TestTimeGridConfigValidation:
    def test_slots_must_be_contiguous(self):
        """Lücke in den Slot-Nummern → Fehler."""
        with pytest.raises(PydanticValidationError):
            TimeGridConfig(lesson_slots=(
                LessonSlot(slot_number=1, start_time="09:00", end_time="09:55"),
                LessonSlot(slot_number=3, start_time="10:50", end_time="11:45"),
            ))

    def test_pause_after_last_slot_rejected(self):
        """Pause nach dem letzten Slot liegt nicht zwischen zwei Slots."""
        with pytest.raises(PydanticValidationError):
            TimeGridConfig(
                lesson_slots=(
                    LessonSlot(slot_number=1, start_time="09:00", end_time="09:55"),
                ),
                pauses=(PauseSlot(after_slot=1, start_time="09:55", end_time="10:30"),),
            )

    def test_time_grid_is_frozen(self):
        """Das Raster ist während der Laufzeit unveränderlich."""
        tg = default_time_grid()
        with pytest.raises(PydanticValidationError):
            tg.day_names = ("Mo",)


# ─── ZEITRASTER ───────────────────────────────────────────────────────────────

class TestTimeGrid:
    def test_label_monday_first_slot(self):
        grid = TimeGrid()
        assert grid.label(1, 1) == "Monday 09:00-09:55"

    def test_label_saturday_last_slot(self):
        grid = TimeGrid()
        assert grid.label(6, 7) == "Saturday 15:40-16:35"

    def test_label_defined_and_stable_for_all_slots(self):
        """Für alle gültigen Paare ist das Label definiert und stabil."""
        grid = TimeGrid()
        for ts in grid.slots():
            first = grid.label(ts.day_of_week, ts.slot_number)
            assert first
            assert first == grid.label(ts.day_of_week, ts.slot_number)

    def test_slots_count(self):
        grid = TimeGrid()
        assert len(list(grid.slots())) == 6 * 7

    @pytest.mark.parametrize("day,slot", [(0, 1), (7, 1), (1, 0), (1, 8), (-1, -1)])
    def test_out_of_range_raises(self, day, slot):
        """Ungültiger Tag oder Slot → OutOfRangeError (kein leeres Label)."""
        grid = TimeGrid()
        with pytest.raises(OutOfRangeError):
            grid.label(day, slot)

    def test_out_of_range_is_validation_error(self):
        grid = TimeGrid()
        with pytest.raises(ValidationError) as exc:
            grid.time_range(9)
        assert exc.value.slot_number == 9

    def test_is_valid(self):
        grid = TimeGrid()
        assert grid.is_valid(3, 5)
        assert not grid.is_valid(3, 8)
        assert not grid.is_valid(7, 1)

    def test_rows_contain_lunch_break_between_slot_4_and_5(self):
        """Die Mittagspause ist eine eigene Zeile, nie ein buchbarer Slot."""
        rows = TimeGrid().rows()
        assert len(rows) == 8
        assert isinstance(rows[4], PauseSlot)
        assert rows[4].label == "Lunch Break"
        assert rows[4].time_range == "12:40-13:50"
        assert [r.slot_number for r in rows if isinstance(r, LessonSlot)] == list(range(1, 8))

    def test_afternoon_slot_times(self):
        grid = TimeGrid()
        assert grid.time_range(4) == "11:45-12:40"
        assert grid.time_range(5) == "13:50-14:45"

    def test_custom_grid(self):
        config = TimeGridConfig(
            day_names=("Mo", "Di"),
            lesson_slots=(
                LessonSlot(slot_number=1, start_time="08:00", end_time="08:45"),
                LessonSlot(slot_number=2, start_time="08:45", end_time="09:30"),
            ),
        )
        grid = TimeGrid(config)
        assert grid.label(2, 2) == "Di 08:45-09:30"
        with pytest.raises(OutOfRangeError):
            grid.day_name(3)

    def test_time_slot_hashable(self):
        slots = {TimeSlot(1, 2), TimeSlot(1, 2), TimeSlot(2, 1)}
        assert len(slots) == 2
        assert TimeSlot(1, 3).slot_id == "1_3"


# ─── YAML SPEICHERN / LADEN ───────────────────────────────────────────────────

class TestConfigManager:
    def _manager(self, tmp_path: Path) -> ConfigManager:
        mgr = ConfigManager()
        mgr.CONFIG_DIR = tmp_path
        mgr.DEFAULT_CONFIG = tmp_path / "client_config.yaml"
        return mgr

    def test_save_and_load_roundtrip(self, tmp_path: Path):
        """Config speichern, laden und validieren: vollständiger Roundtrip."""
        config = default_client_config().model_copy(update={"institution_name": "Test-Uni"})
        mgr = self._manager(tmp_path)

        mgr.save(config)
        assert mgr.DEFAULT_CONFIG.exists()

        loaded = mgr.load()
        assert loaded.institution_name == "Test-Uni"
        assert loaded.time_grid == config.time_grid
        assert loaded.api == config.api
        assert loaded.generation == config.generation

    def test_saved_yaml_has_section_comments(self, tmp_path: Path):
        mgr = self._manager(tmp_path)
        mgr.save(default_client_config())
        text = mgr.DEFAULT_CONFIG.read_text(encoding="utf-8")
        assert "Client-Konfiguration" in text
        assert "─── Zeitraster ───" in text
        assert "─── Server ───" in text

    def test_first_run_check_no_file(self, tmp_path: Path):
        """first_run_check gibt True zurück wenn keine Config existiert."""
        mgr = ConfigManager()
        mgr.DEFAULT_CONFIG = tmp_path / "nonexistent.yaml"
        assert mgr.first_run_check() is True

    def test_first_run_check_with_file(self, tmp_path: Path):
        """first_run_check gibt False zurück wenn Config existiert."""
        mgr = self._manager(tmp_path)
        mgr.save(default_client_config())
        assert mgr.first_run_check() is False

    def test_load_nonexistent_raises(self, tmp_path: Path):
        """Laden einer nicht-existenten Datei → FileNotFoundError."""
        mgr = ConfigManager()
        with pytest.raises(FileNotFoundError):
            mgr.load(tmp_path / "not_there.yaml")

    def test_load_invalid_raises_value_error(self, tmp_path: Path):
        """Ungültige Werte in der YAML-Datei → ValueError mit Pydantic-Details."""
        path = tmp_path / "broken.yaml"
        path.write_text(
            "time_grid:\n"
            "  lesson_slots:\n"
            "    - {slot_number: 2, start_time: '09:00', end_time: '09:55'}\n",
            encoding="utf-8",
        )
        with pytest.raises(ValueError, match="ungültig"):
            ConfigManager().load(path)

    def test_edit_interactive_export_step(self, tmp_path: Path, monkeypatch):
        """Menüpunkt 4 ändert das Export-Verzeichnis, 0 speichert."""
        import config.manager as manager_module
        import config.wizard as wizard_module

        answers = iter(["4", "0"])
        monkeypatch.setattr(manager_module.Prompt, "ask", lambda *a, **kw: next(answers))
        monkeypatch.setattr(
            wizard_module, "_wizard_export",
            lambda: ExportConfig(output_dir="exports"),
        )
        mgr = self._manager(tmp_path)

        edited = mgr.edit_interactive(default_client_config())

        assert edited.export.output_dir == "exports"
        assert mgr.load().export.output_dir == "exports"


# ─── MODELLE (Pydantic v2) ────────────────────────────────────────────────────

class TestModels:
    def test_semester_offering_display_name(self):
        from models.semester_offering import Department, Programme, SemesterOffering, Session
        o = SemesterOffering(
            id=3, programme_id=1, department_id=2, session_id=4, semester_number=3,
            programme=Programme(id=1, name="B.Tech"),
            department=Department(id=2, name="CSE"),
            session=Session(id=4, name="FALL", academic_year="2024-25"),
        )
        assert o.display_name == "B.Tech - CSE - Semester 3 (FALL 2024-25)"
        assert o.scope_label == "B.Tech_CSE_Sem3_FALL_2024-25"

    def test_scope_label_without_relations(self):
        from models.semester_offering import SemesterOffering
        o = SemesterOffering(id=9, programme_id=1, department_id=2, session_id=3,
                             semester_number=5)
        assert o.scope_label == "P1_D2_Sem5"

    def test_entry_drops_empty_relations(self):
        """Nicht geladene Relationen (id=0) und leere Laborgruppe werden zu None."""
        from models.schedule import ScheduleEntry
        e = ScheduleEntry.model_validate({
            "id": 1, "schedule_run_id": 2, "course_offering_id": 3,
            "teacher_id": 4, "room_id": 5, "day_of_week": 1, "slot_number": 1,
            "lab_group": "", "room": {"id": 0, "name": ""},
        })
        assert e.lab_group is None
        assert e.room is None

    def test_generation_report_from_json_string(self):
        """meta kommt als JSON-String; unplaced_blocks als Liste wird gezählt."""
        from models.schedule import GenerationReport
        report = GenerationReport.model_validate(
            '{"total_blocks": 10, "placed_blocks": 8, '
            '"unplaced_blocks": [{"course": 1}, {"course": 2}], '
            '"conflicts": ["Kein Raum frei"]}'
        )
        assert report.kind == "generation_report"
        assert report.unplaced_blocks == 2
        assert report.unplaced == [{"course": 1}, {"course": 2}]
        assert report.conflicts == ["Kein Raum frei"]
        assert not report.is_complete

    def test_generation_report_empty(self):
        from models.schedule import GenerationReport
        for raw in (None, "", "{}", {}):
            report = GenerationReport.model_validate(raw)
            assert report.total_blocks == 0
            assert report.conflicts == []
            assert report.is_complete

    def test_committed_run_requires_committed_at(self):
        from models.schedule import ScheduleRun
        with pytest.raises(PydanticValidationError):
            ScheduleRun(id=1, semester_offering_id=1, status="COMMITTED")
        with pytest.raises(PydanticValidationError):
            ScheduleRun(id=1, semester_offering_id=1, status="DRAFT",
                        committed_at="2024-09-01T10:00:00")

    def test_run_accepts_null_meta_and_entries(self):
        from models.schedule import RunStatus, ScheduleRun
        run = ScheduleRun.model_validate({
            "id": 7, "semester_offering_id": 1, "status": "FAILED",
            "meta": None, "schedule_entries": None,
        })
        assert run.status is RunStatus.FAILED
        assert run.schedule_entries == []
        assert run.report.total_blocks == 0

    def test_from_generation_payload_solver_shape(self):
        """Solver-Form {run_id, status, entries, report} wird normalisiert."""
        from models.schedule import RunStatus, ScheduleRun
        run = ScheduleRun.from_generation_payload({
            "run_id": 11,
            "status": "DRAFT",
            "entries": [{
                "id": 1, "schedule_run_id": 11, "course_offering_id": 3,
                "teacher_id": 4, "room_id": 5, "day_of_week": 2, "slot_number": 3,
            }],
            "report": {"total_blocks": 1, "placed_blocks": 1, "unplaced_blocks": 0},
        }, semester_offering_id=42)
        assert run.id == 11
        assert run.semester_offering_id == 42
        assert run.status is RunStatus.DRAFT
        assert len(run.schedule_entries) == 1
        assert run.report.placed_blocks == 1

    def test_run_status_flags(self):
        from models.schedule import RunStatus
        assert not RunStatus.DRAFT.is_terminal
        assert all(s.is_terminal for s in (RunStatus.COMMITTED, RunStatus.CANCELLED,
                                            RunStatus.FAILED))
        assert RunStatus.COMMITTED.holds_entries
        assert not RunStatus.CANCELLED.holds_entries
