"""Zeitraster: Abbildung (Wochentag, Slot) → lesbare Zeitangabe."""

from dataclasses import dataclass
from typing import Iterator, Optional, Union

from config.schema import LessonSlot, PauseSlot, TimeGridConfig
from exceptions import OutOfRangeError


@dataclass(frozen=True)
class TimeSlot:
    """Repräsentiert einen einzelnen buchbaren Slot im Wochenraster.

    Kombination aus Wochentag und Slot-Nummer.
    Immutable (frozen=True) damit es als Dict-Key / Set-Element nutzbar ist.
    """

    # Wochentag (1=Monday, ..., 6=Saturday)
    day_of_week: int
    # Slot-Nummer (1-basiert, 1-4 vormittags, 5-7 nachmittags)
    slot_number: int

    @property
    def slot_id(self) -> str:
        """Eindeutiger String-Bezeichner (z.B. "1_3" für Montag 3. Slot)."""
        return f"{self.day_of_week}_{self.slot_number}"

    def __str__(self) -> str:
        return f"Tag {self.day_of_week}, Slot {self.slot_number}"


class TimeGrid:
    """Seiteneffektfreie Sicht auf ein TimeGridConfig.

    Jede Abfrage außerhalb des Rasters wirft OutOfRangeError, statt
    stillschweigend ein leeres Label zu liefern.
    """

    def __init__(self, config: Optional[TimeGridConfig] = None) -> None:
        if config is None:
            from config.defaults import default_time_grid
            config = default_time_grid()
        self.config = config
        self._slots = {s.slot_number: s for s in config.lesson_slots}

    @property
    def days(self) -> range:
        return range(1, self.config.days_per_week + 1)

    @property
    def slot_numbers(self) -> range:
        return range(1, self.config.max_slot + 1)

    def is_valid(self, day_of_week: int, slot_number: int) -> bool:
        return day_of_week in self.days and slot_number in self._slots

    def day_name(self, day_of_week: int) -> str:
        if day_of_week not in self.days:
            raise OutOfRangeError(
                f"Wochentag {day_of_week} außerhalb 1..{self.config.days_per_week}",
                day_of_week=day_of_week,
            )
        return self.config.day_names[day_of_week - 1]

    def lesson_slot(self, slot_number: int) -> LessonSlot:
        slot = self._slots.get(slot_number)
        if slot is None:
            raise OutOfRangeError(
                f"Slot {slot_number} außerhalb 1..{self.config.max_slot}",
                slot_number=slot_number,
            )
        return slot

    def time_range(self, slot_number: int) -> str:
        """Uhrzeit des Slots, z.B. "09:00-09:55"."""
        return self.lesson_slot(slot_number).time_range

    def label(self, day_of_week: int, slot_number: int) -> str:
        """Anzeige-Label, z.B. "Monday 09:00-09:55"."""
        return f"{self.day_name(day_of_week)} {self.time_range(slot_number)}"

    def slots(self) -> Iterator[TimeSlot]:
        """Alle buchbaren Slots der Woche (tageweise, aufsteigend)."""
        for day in self.days:
            for number in self.slot_numbers:
                yield TimeSlot(day, number)

    def rows(self) -> list[Union[LessonSlot, PauseSlot]]:
        """Gibt geordnete Rasterzeilen zurück: LessonSlot- und PauseSlot-Objekte.

        PauseSlot folgt jeweils nach dem angegebenen after_slot und ist
        eine eigene Zeile, nie ein buchbarer Slot.
        """
        pause_map = {p.after_slot: p for p in self.config.pauses}
        rows: list[Union[LessonSlot, PauseSlot]] = []
        for slot in self.config.lesson_slots:
            rows.append(slot)
            if slot.slot_number in pause_map:
                rows.append(pause_map[slot.slot_number])
        return rows
