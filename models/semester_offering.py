"""Datenmodell für ein Semesterangebot (Planungsumfang einer Generierung)."""

import re
from typing import Literal, Optional

from pydantic import BaseModel

from models.course_offering import CourseOffering


class Programme(BaseModel):
    id: int
    name: str


class Department(BaseModel):
    id: int
    name: str


class Session(BaseModel):
    id: int
    name: str              # "SPRING" / "FALL"
    academic_year: str     # "2024-25"


class SemesterOffering(BaseModel):
    """Studiengang + Fachbereich + Session + Semesternummer.

    Für diesen Umfang wird ein Stundenplan generiert.
    """

    id: int
    programme_id: int
    department_id: int
    session_id: int
    semester_number: int
    total_students: int = 0
    status: Literal["DRAFT", "ACTIVE", "ARCHIVED"] = "ACTIVE"
    programme: Optional[Programme] = None
    department: Optional[Department] = None
    session: Optional[Session] = None
    course_offerings: list[CourseOffering] = []

    @property
    def display_name(self) -> str:
        """z.B. "B.Tech - CSE - Semester 3 (FALL 2024-25)"."""
        programme = self.programme.name if self.programme else f"Programme {self.programme_id}"
        department = self.department.name if self.department else f"Department {self.department_id}"
        text = f"{programme} - {department} - Semester {self.semester_number}"
        if self.session:
            text += f" ({self.session.name} {self.session.academic_year})"
        return text

    @property
    def scope_label(self) -> str:
        """Dateinamen-tauglicher Bezeichner, z.B. "B.Tech_CSE_Sem3_FALL_2024-25"."""
        parts = [
            self.programme.name if self.programme else f"P{self.programme_id}",
            self.department.name if self.department else f"D{self.department_id}",
            f"Sem{self.semester_number}",
        ]
        if self.session:
            parts += [self.session.name, self.session.academic_year]
        label = "_".join(parts)
        # Alles außer Buchstaben, Ziffern, Punkt und Bindestrich → "_"
        label = re.sub(r"[^\w.\-]+", "_", label)
        return label.strip("_") or f"offering_{self.id}"
