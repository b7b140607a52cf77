"""Datenmodell für eine Lehrkraft (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel


class Teacher(BaseModel):
    """Lehrkraft, wie sie der Stammdaten-Dienst liefert."""

    id: int
    name: str                       # "Dr. A. Sharma"
    initials: Optional[str] = None  # "AS"
    email: Optional[str] = None
    department_id: Optional[int] = None
    is_active: bool = True

    @property
    def short_label(self) -> str:
        """Kürzel falls vorhanden, sonst der Name."""
        return self.initials or self.name
