"""Datenmodell für einen Raum (Pydantic v2)."""

from typing import Literal, Optional

from pydantic import BaseModel


class Room(BaseModel):
    """Repräsentiert einen Hörsaal oder ein Labor."""

    id: int
    name: str                 # "CS Lab 1"
    room_number: Optional[str] = None
    capacity: int = 0
    type: Literal["THEORY", "LAB", "OTHER"] = "THEORY"
    department_id: Optional[int] = None
    is_active: bool = True
