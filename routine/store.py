"""Halter der Einträge genau eines aktuell betrachteten Laufs."""

import logging
from typing import Iterable, Optional

from exceptions import ValidationError
from models.schedule import ScheduleEntry

logger = logging.getLogger(__name__)


class ScheduleEntryStore:
    """Hält die Einträge des aktuell angezeigten Laufs.

    Der Inhalt wird immer komplett ersetzt (load) oder geleert (clear);
    Teil-Updates gibt es nicht.
    """

    def __init__(self) -> None:
        self._entries: tuple[ScheduleEntry, ...] = ()
        self._run_id: Optional[int] = None

    @property
    def run_id(self) -> Optional[int]:
        """Lauf, dessen Einträge gerade gehalten werden (None wenn leer geladen)."""
        return self._run_id

    def holds(self, run_id: int) -> bool:
        return self._run_id is not None and self._run_id == run_id

    def load(self, entries: Iterable[ScheduleEntry], run_id: Optional[int] = None) -> None:
        """Ersetzt den gehaltenen Satz atomar.

        Ohne run_id wird der Lauf aus den Einträgen abgeleitet. Einträge
        verschiedener Läufe werden abgelehnt; der alte Inhalt bleibt dann erhalten.
        """
        snapshot = tuple(entries)
        run_ids = {e.schedule_run_id for e in snapshot}
        if run_id is not None:
            run_ids.add(run_id)
        if len(run_ids) > 1:
            raise ValidationError(
                f"Einträge gehören zu mehreren Läufen: {sorted(run_ids)}"
            )
        self._entries = snapshot
        self._run_id = next(iter(run_ids), None)
        logger.debug(f"Store: {len(snapshot)} Einträge von Lauf {self._run_id} geladen")

    def current(self) -> tuple[ScheduleEntry, ...]:
        """Unveränderlicher Schnappschuss der gehaltenen Einträge."""
        return self._entries

    def clear(self) -> None:
        self._entries = ()
        self._run_id = None

    def __len__(self) -> int:
        return len(self._entries)
