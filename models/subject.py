"""Datenmodell für ein Fach (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel


class SubjectType(BaseModel):
    """Fachtyp (Theorie, Labor, ...)."""

    id: int
    name: str
    is_lab: bool = False
    requires_room: bool = True


class Subject(BaseModel):
    """Repräsentiert ein Fach mit Kürzel und Wochenlast."""

    id: int
    code: str                  # "CS301"
    name: str                  # "Operating Systems"
    credit: int = 0
    class_load_per_week: int = 0
    subject_type_id: Optional[int] = None
    subject_type: Optional[SubjectType] = None

    @property
    def is_lab(self) -> bool:
        return self.subject_type is not None and self.subject_type.is_lab
