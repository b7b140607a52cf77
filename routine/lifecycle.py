"""Lebenszyklus der Generierungsläufe (Generieren, Festschreiben, Verwerfen).

Zustandsautomat:
    (kein Lauf) --generate--> DRAFT | FAILED
    DRAFT       --commit----> COMMITTED
    DRAFT       --cancel----> CANCELLED
    COMMITTED, CANCELLED, FAILED sind Endzustände.

Jeder Statuswechsel wird erst nach Bestätigung durch den Server lokal
übernommen. Unzulässige Wechsel werden vor jedem Netzwerkzugriff abgelehnt.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from analysis.run_validator import RunValidator, ValidationReport
from config.schema import GenerationOptions
from exceptions import (
    InvalidStateTransition,
    RemoteFailure,
    SupersessionRequired,
    ValidationError,
)
from models.reference_data import ReferenceData
from models.schedule import RunStatus, ScheduleRun
from models.semester_offering import SemesterOffering
from models.timeslot import TimeGrid
from routine.client import RoutineClient
from routine.store import ScheduleEntryStore

logger = logging.getLogger(__name__)


def _utc(ts: Optional[datetime]) -> datetime:
    if ts is None:
        return datetime.min.replace(tzinfo=timezone.utc)
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


class ScheduleRunController:
    """Steuert die Läufe einer Client-Sitzung.

    Verwendung:
        controller = ScheduleRunController(client, reference=client.load_reference_data())
        run = controller.generate(semester_offering_id=3)
        controller.commit(run.id, message="Endgültig")
    """

    def __init__(
        self,
        client: RoutineClient,
        store: Optional[ScheduleEntryStore] = None,
        reference: Optional[ReferenceData] = None,
        time_grid: Optional[TimeGrid] = None,
    ) -> None:
        self.client = client
        self.store = store if store is not None else ScheduleEntryStore()
        self.reference = reference if reference is not None else ReferenceData()
        self.time_grid = time_grid or TimeGrid()
        # Zuletzt bestätigter Stand je Lauf-ID
        self._runs: dict[int, ScheduleRun] = {}

    # ─── Übergänge ────────────────────────────────────────────────────────────

    def generate(
        self, semester_offering_id: int, options: Optional[GenerationOptions] = None
    ) -> ScheduleRun:
        """Fordert einen neuen Lauf an.

        Fehlt das Angebot im Katalog, wird es lesend nachgeladen. Angebote
        ohne Kurse werden abgelehnt (ValidationError), ohne den Solver zu
        bemühen. Bei DRAFT werden die Einträge in den Store geladen, bei
        FAILED bleibt der Store unverändert.
        """
        offering = self._resolve_offering(semester_offering_id)
        if not offering.course_offerings:
            raise ValidationError(
                f"Semesterangebot '{offering.display_name}' hat keine Kurse; "
                f"nichts zu generieren"
            )

        run = self.client.generate(semester_offering_id, options)

        if run.status is RunStatus.DRAFT and not run.schedule_entries:
            raise RemoteFailure(
                f"Lauf #{run.id}: Solver meldet DRAFT ohne Einträge"
            )
        if run.status not in (RunStatus.DRAFT, RunStatus.FAILED):
            raise RemoteFailure(
                f"Lauf #{run.id}: unerwarteter Status {run.status.value} nach Generierung"
            )
        foreign = sorted({e.schedule_run_id for e in run.schedule_entries} - {run.id})
        if foreign:
            raise RemoteFailure(
                f"Lauf #{run.id}: Solver liefert Einträge fremder Läufe {foreign}"
            )

        self._runs[run.id] = run
        report = run.report
        if run.status is RunStatus.FAILED:
            logger.warning(
                f"Lauf #{run.id} fehlgeschlagen: {report.placed_blocks}/"
                f"{report.total_blocks} Blöcke platziert, "
                f"{report.unplaced_blocks} offen"
            )
            return run

        self.store.load(run.schedule_entries, run_id=run.id)
        logger.info(
            f"Lauf #{run.id} erzeugt (DRAFT): {len(run.schedule_entries)} Einträge, "
            f"{report.placed_blocks}/{report.total_blocks} Blöcke"
        )
        return run

    def commit(
        self, run_id: int, message: Optional[str] = None, supersede: bool = False
    ) -> ScheduleRun:
        """Schreibt einen DRAFT-Lauf fest.

        Die Lauf-Historie des Angebots wird vorher neu geladen. Existiert
        bereits ein festgeschriebener Lauf, muss die Ablösung mit
        supersede=True bestätigt werden.
        """
        run = self._known_run(run_id)
        self._require_draft(run, "commit")

        # Aktuelle Historie des Angebots vom Server
        history = self.list_runs_for_offering(run.semester_offering_id)
        refreshed = next((r for r in history if r.id == run_id), None)
        if refreshed is not None:
            self._require_draft(refreshed, "commit")
        self._runs[run_id] = run

        previous = self.committed_run_for(run.semester_offering_id)
        if previous is not None and previous.id != run.id:
            if not supersede:
                raise SupersessionRequired(run.id, run.status.value, previous.id)
            logger.info(f"Lauf #{run.id} löst festgeschriebenen Lauf #{previous.id} ab")

        confirmed = self.client.commit(run_id, message)
        if confirmed is None:
            confirmed = self.client.get_run(run_id)
        if confirmed.status is not RunStatus.COMMITTED:
            raise RemoteFailure(
                f"Lauf #{run_id}: Server meldet nach Commit Status {confirmed.status.value}"
            )
        if not confirmed.schedule_entries:
            entries = run.schedule_entries or (
                list(self.store.current()) if self.store.holds(run_id) else []
            )
            confirmed = confirmed.model_copy(update={"schedule_entries": entries})

        self._runs[run_id] = confirmed
        if self.store.holds(run_id):
            self.store.load(confirmed.schedule_entries, run_id=run_id)
        logger.info(f"Lauf #{run_id} festgeschrieben ({confirmed.committed_at})")
        return confirmed

    def cancel(self, run_id: int) -> ScheduleRun:
        """Verwirft einen DRAFT-Lauf und leert den Store, falls er ihn hält."""
        run = self._known_run(run_id)
        self._require_draft(run, "cancel")

        self.client.cancel(run_id)

        cancelled = run.model_copy(
            update={"status": RunStatus.CANCELLED, "schedule_entries": []}
        )
        self._runs[run_id] = cancelled
        if self.store.holds(run_id):
            self.store.clear()
        logger.info(f"Lauf #{run_id} verworfen")
        return cancelled

    def delete(self, run_id: int) -> None:
        """Löscht einen nicht festgeschriebenen Lauf auf dem Server."""
        run = self._known_run(run_id)
        if run.status is RunStatus.COMMITTED:
            raise InvalidStateTransition(run_id, run.status.value, "delete")

        self.client.delete(run_id)

        self._runs.pop(run_id, None)
        if self.store.holds(run_id):
            self.store.clear()
        logger.info(f"Lauf #{run_id} gelöscht")

    # ─── Lesen ────────────────────────────────────────────────────────────────

    def list_runs_for_offering(self, semester_offering_id: int) -> list[ScheduleRun]:
        """Lauf-Historie eines Angebots, neueste zuerst (generated_at, dann ID)."""
        runs = self.client.list_runs(semester_offering_id)
        for run in runs:
            self._runs[run.id] = run
        return sorted(runs, key=lambda r: (r.sort_time, r.id), reverse=True)

    def view(self, run_id: int) -> ScheduleRun:
        """Lädt die Einträge eines Laufs in den Store, unabhängig vom Status."""
        run = self.client.get_run(run_id)
        self._runs[run.id] = run
        self.store.load(run.schedule_entries, run_id=run.id)
        logger.debug(f"Lauf #{run.id} ({run.status.value}) angezeigt")
        return run

    @property
    def current_run(self) -> Optional[ScheduleRun]:
        """Lauf, dessen Einträge der Store gerade hält."""
        if self.store.run_id is None:
            return None
        return self._runs.get(self.store.run_id)

    def committed_run_for(self, semester_offering_id: int) -> Optional[ScheduleRun]:
        """Zuletzt festgeschriebener bekannter Lauf eines Angebots."""
        committed = [
            r for r in self._runs.values()
            if r.semester_offering_id == semester_offering_id
            and r.status is RunStatus.COMMITTED
        ]
        if not committed:
            return None
        return max(committed, key=lambda r: (_utc(r.committed_at), r.id))

    def validate_current(self) -> ValidationReport:
        """Prüft die Einträge im Store auf Doppelbelegungen und Rasterfehler."""
        report = RunValidator(self.time_grid).validate(self.store.current(), self.reference)
        for v in report.violations:
            logger.warning(f"Lauf #{self.store.run_id}: {v.constraint}: {v.description}")
        return report

    # ─── Hilfsfunktionen ──────────────────────────────────────────────────────

    def _resolve_offering(self, semester_offering_id: int) -> SemesterOffering:
        """Angebot aus dem Katalog, sonst (nur lesend) vom Server nachgeladen."""
        offering = self.reference.semester_offering(semester_offering_id)
        if offering is not None:
            return offering
        try:
            offering = self.client.get_semester_offering(semester_offering_id)
            courses = self.client.list_course_offerings(semester_offering_id)
        except RemoteFailure as e:
            if e.status_code == 404:
                raise ValidationError(
                    f"Semesterangebot {semester_offering_id} ist nicht bekannt"
                ) from e
            raise
        offering = offering.model_copy(update={"course_offerings": courses})
        self.reference = self.reference.with_semester_offering(offering)
        logger.debug(
            f"Semesterangebot {semester_offering_id} nachgeladen: {len(courses)} Kurse"
        )
        return offering

    def _known_run(self, run_id: int) -> ScheduleRun:
        run = self._runs.get(run_id)
        if run is None:
            run = self.client.get_run(run_id)
            self._runs[run_id] = run
        return run

    @staticmethod
    def _require_draft(run: ScheduleRun, action: str) -> None:
        if run.status is not RunStatus.DRAFT:
            raise InvalidStateTransition(run.id, run.status.value, action)
