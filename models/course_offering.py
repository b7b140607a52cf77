"""Datenmodell für ein Kursangebot innerhalb eines Semesterangebots."""

from typing import Optional

from pydantic import BaseModel

from models.subject import Subject


class CourseOffering(BaseModel):
    """Ein Fach, das in einem Semesterangebot mit Wochen-Slots geplant wird."""

    id: int
    semester_offering_id: int
    subject_id: int
    weekly_required_slots: int = 0
    is_lab: bool = False
    lab_group: Optional[str] = None
    requires_room: bool = True
    subject: Optional[Subject] = None

    @property
    def session_type(self) -> str:
        """Art der Veranstaltung für Export und Anzeige."""
        return "Lab" if self.is_lab else "Theory"
