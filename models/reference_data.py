"""ReferenceData: lokaler Katalog der Stammdaten (Pydantic v2).

Die Stammdaten gehören dem externen Verwaltungsdienst; hier liegen nur
die zuletzt geladenen Stände für Nachschlagen und Vorab-Prüfungen.
"""

from typing import Optional

from pydantic import BaseModel

from models.course_offering import CourseOffering
from models.room import Room
from models.schedule import ScheduleEntry
from models.semester_offering import SemesterOffering
from models.subject import Subject
from models.teacher import Teacher


class ReferenceData(BaseModel):
    """Nachschlagekatalog: Semesterangebote, Kurse, Lehrkräfte, Räume, Fächer."""

    semester_offerings: list[SemesterOffering] = []
    teachers: list[Teacher] = []
    rooms: list[Room] = []
    subjects: list[Subject] = []

    # ─── Lookups (None wenn unbekannt) ────────────────────────────────────────

    def semester_offering(self, offering_id: int) -> Optional[SemesterOffering]:
        return next((o for o in self.semester_offerings if o.id == offering_id), None)

    def teacher(self, teacher_id: int) -> Optional[Teacher]:
        return next((t for t in self.teachers if t.id == teacher_id), None)

    def room(self, room_id: int) -> Optional[Room]:
        return next((r for r in self.rooms if r.id == room_id), None)

    def subject(self, subject_id: int) -> Optional[Subject]:
        return next((s for s in self.subjects if s.id == subject_id), None)

    def course_offering(self, course_offering_id: int) -> Optional[CourseOffering]:
        for offering in self.semester_offerings:
            for co in offering.course_offerings:
                if co.id == course_offering_id:
                    return co
        return None

    # ─── Auflösung über Eintrag + Katalog ─────────────────────────────────────

    def resolve_teacher(self, entry: ScheduleEntry) -> Optional[Teacher]:
        """Vorgeladene Relation am Eintrag, sonst Katalog."""
        return entry.teacher or self.teacher(entry.teacher_id)

    def resolve_room(self, entry: ScheduleEntry) -> Optional[Room]:
        return entry.room or self.room(entry.room_id)

    def resolve_course_offering(self, entry: ScheduleEntry) -> Optional[CourseOffering]:
        return entry.course_offering or self.course_offering(entry.course_offering_id)

    def resolve_subject(self, entry: ScheduleEntry) -> Optional[Subject]:
        co = self.resolve_course_offering(entry)
        if co is None:
            return None
        return co.subject or self.subject(co.subject_id)

    # ─── Aktualisierung ───────────────────────────────────────────────────────

    def with_semester_offering(self, offering: SemesterOffering) -> "ReferenceData":
        """Kopie mit ersetztem (oder ergänztem) Semesterangebot."""
        others = [o for o in self.semester_offerings if o.id != offering.id]
        return self.model_copy(update={
            "semester_offerings": sorted(others + [offering], key=lambda o: o.id),
        })

    def summary(self) -> str:
        """Kurze Übersicht über den Katalog."""
        courses = sum(len(o.course_offerings) for o in self.semester_offerings)
        return (
            f"Semesterangebote: {len(self.semester_offerings)} | "
            f"Kurse: {courses} | "
            f"Lehrkräfte: {len(self.teachers)} | "
            f"Räume: {len(self.rooms)} | "
            f"Fächer: {len(self.subjects)}"
        )
