"""Datenmodelle für Generierungsläufe und ihre Stundenplan-Einträge (Pydantic v2)."""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from models.course_offering import CourseOffering
from models.room import Room
from models.teacher import Teacher


class RunStatus(str, Enum):
    DRAFT = "DRAFT"
    COMMITTED = "COMMITTED"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        """COMMITTED, CANCELLED und FAILED akzeptieren keinen Statuswechsel mehr."""
        return self is not RunStatus.DRAFT

    @property
    def holds_entries(self) -> bool:
        """Nur DRAFT- und COMMITTED-Läufe besitzen lebende Einträge."""
        return self in (RunStatus.DRAFT, RunStatus.COMMITTED)


# ─── Einträge ─────────────────────────────────────────────────────────────────

class ScheduleEntry(BaseModel):
    """Eine platzierte Veranstaltung (Kurs, Lehrkraft, Raum, Tag, Slot)."""

    model_config = ConfigDict(frozen=True)

    id: int
    schedule_run_id: int
    course_offering_id: int
    teacher_id: int
    room_id: int
    day_of_week: int      # 1-basiert (1=Monday, 6=Saturday)
    slot_number: int      # 1-basiert (wie Zeitraster)
    lab_group: Optional[str] = None
    semester_offering_id: Optional[int] = None
    session_id: Optional[int] = None
    block_id: Optional[int] = None
    # Administrativ gewollte Raum-Doppelbelegung (nie Standard)
    co_located: bool = False

    # Vom Server vorgeladene Relationen (optional)
    course_offering: Optional[CourseOffering] = None
    teacher: Optional[Teacher] = None
    room: Optional[Room] = None

    @field_validator("lab_group", mode="before")
    @classmethod
    def _empty_lab_group(cls, v):
        return v or None

    @field_validator("course_offering", "teacher", "room", mode="before")
    @classmethod
    def _drop_zero_relation(cls, v):
        # Der Server serialisiert nicht geladene Relationen als Nullobjekt (id=0)
        if isinstance(v, dict) and not v.get("id"):
            return None
        return v

    @property
    def sort_key(self) -> tuple[int, int, int]:
        return (self.day_of_week, self.slot_number, self.id)


# ─── Generierungsbericht ──────────────────────────────────────────────────────

class PlacementSuggestion(BaseModel):
    """Alternative Slots für einen nicht platzierten Block (nur Anzeige)."""

    block: dict[str, Any] = {}
    suggested_slots: list[dict[str, Any]] = []
    conflict_reasons: list[str] = []


class GenerationReport(BaseModel):
    """Bericht des Solvers zu einem Lauf.

    Wird unverändert zur Anzeige durchgereicht und nie als Eingabe für
    Logik verwendet. Der Server liefert ihn als JSON-String oder Objekt;
    unplaced_blocks kommt entweder als Anzahl oder als Liste der Blöcke.
    """

    kind: Literal["generation_report"] = "generation_report"
    total_blocks: int = 0
    placed_blocks: int = 0
    unplaced_blocks: int = 0
    # Rohdaten der nicht platzierten Blöcke, falls als Liste geliefert
    unplaced: list[dict[str, Any]] = []
    conflicts: list[str] = []
    suggestions: list[PlacementSuggestion] = []

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data):
        if data is None:
            return {}
        if isinstance(data, str):
            data = json.loads(data) if data.strip() else {}
        if not isinstance(data, dict):
            return data
        data = dict(data)
        unplaced = data.get("unplaced_blocks")
        if isinstance(unplaced, list):
            data["unplaced"] = unplaced
            data["unplaced_blocks"] = len(unplaced)
        elif unplaced is None:
            data.pop("unplaced_blocks", None)
        for key in ("conflicts", "suggestions"):
            if data.get(key) is None:
                data.pop(key, None)
        return data

    @property
    def is_complete(self) -> bool:
        return self.unplaced_blocks == 0 and self.placed_blocks == self.total_blocks


# ─── Lauf ─────────────────────────────────────────────────────────────────────

class ScheduleRun(BaseModel):
    """Ein Generierungsversuch für ein Semesterangebot."""

    model_config = ConfigDict(frozen=True)

    id: int
    semester_offering_id: int
    status: RunStatus
    algorithm_version: Optional[str] = None
    generated_at: Optional[datetime] = None
    committed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    meta: GenerationReport = Field(default_factory=GenerationReport)
    schedule_entries: list[ScheduleEntry] = []

    @field_validator("schedule_entries", mode="before")
    @classmethod
    def _none_to_list(cls, v):
        return [] if v is None else v

    @field_validator("meta", mode="before")
    @classmethod
    def _none_to_report(cls, v):
        return {} if v is None else v

    @model_validator(mode="after")
    def _check_committed_at(self):
        if self.status is RunStatus.COMMITTED and self.committed_at is None:
            raise ValueError(f"Lauf {self.id}: COMMITTED ohne committed_at")
        if self.status is not RunStatus.COMMITTED and self.committed_at is not None:
            raise ValueError(f"Lauf {self.id}: committed_at gesetzt, Status {self.status.value}")
        return self

    @property
    def report(self) -> GenerationReport:
        return self.meta

    @property
    def sort_time(self) -> datetime:
        """Zeitpunkt für die Historien-Sortierung (neueste zuerst)."""
        ts = self.generated_at or self.created_at
        if ts is None:
            return datetime.min.replace(tzinfo=timezone.utc)
        if ts.tzinfo is None:
            return ts.replace(tzinfo=timezone.utc)
        return ts

    def without_entries(self) -> "ScheduleRun":
        """Kopie ohne Einträge (für die Lauf-Historie)."""
        return self.model_copy(update={"schedule_entries": []})

    @classmethod
    def from_generation_payload(cls, payload: dict, semester_offering_id: int) -> "ScheduleRun":
        """Normalisiert die Antwort des Generierungsdienstes.

        Akzeptiert:
        - die Lauf-Form (ScheduleRun mit schedule_entries und meta)
        - die Solver-Form {run_id | schedule_run_id, status,
          entries | schedule_entries, report}
        """
        if "id" in payload:
            return cls.model_validate(payload)
        run_id = payload.get("run_id", payload.get("schedule_run_id"))
        entries = payload.get("entries", payload.get("schedule_entries")) or []
        return cls.model_validate({
            "id": run_id,
            "semester_offering_id": payload.get("semester_offering_id", semester_offering_id),
            "status": payload.get("status"),
            "generated_at": payload.get("generated_at"),
            "committed_at": payload.get("committed_at"),
            "algorithm_version": payload.get("algorithm_version"),
            "meta": payload.get("report", payload.get("meta")),
            "schedule_entries": entries,
        })
