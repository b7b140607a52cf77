"""HTTP-Client für Generierungs-, Lauf- und Stammdaten-Dienst (httpx).

Alle Antworten kommen im Umschlag {success, message?, data?, error?, code?}.
Fehler des Servers, des Transports und unerwartete Antwortformen werden
einheitlich als RemoteFailure mit der Originalmeldung gemeldet.
"""

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from config.schema import ApiConfig, GenerationOptions
from exceptions import GenerationPending, RemoteFailure
from models.course_offering import CourseOffering
from models.reference_data import ReferenceData
from models.room import Room
from models.schedule import ScheduleRun
from models.semester_offering import SemesterOffering
from models.subject import Subject
from models.teacher import Teacher

logger = logging.getLogger(__name__)


class RoutineClient:
    """Synchroner Client für die REST-API des Routine-Servers.

    Verwendung:
        with RoutineClient(config.api) as client:
            runs = client.list_runs(semester_offering_id=3)
    """

    def __init__(self, api: ApiConfig, transport: Optional[httpx.BaseTransport] = None) -> None:
        self.api = api
        self._client = httpx.Client(
            base_url=api.base_url,
            timeout=httpx.Timeout(api.request_timeout_seconds),
            headers={"Content-Type": "application/json"},
            follow_redirects=True,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "RoutineClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ─── Generierung / Läufe ──────────────────────────────────────────────────

    def generate(
        self, semester_offering_id: int, options: Optional[GenerationOptions] = None
    ) -> ScheduleRun:
        """Fordert einen neuen Lauf beim Solver an (langes Zeitlimit).

        Bei Zeitüberschreitung wird GenerationPending geworfen: der Solver
        kann serverseitig weiterrechnen.
        """
        body: dict[str, Any] = {"semester_offering_id": semester_offering_id}
        if options is not None:
            body["config"] = options.model_dump()
        timeout = self.api.generation_timeout_seconds
        logger.info(
            f"Generierung angefordert: Semesterangebot {semester_offering_id} "
            f"(Zeitlimit {timeout:.0f}s)"
        )
        try:
            data = self._request("POST", "/routines/generate", json=body, timeout=timeout)
        except httpx.TimeoutException as e:
            logger.warning(f"Generierung für {semester_offering_id}: keine Antwort nach {timeout:.0f}s")
            raise GenerationPending(semester_offering_id, timeout) from e
        if not isinstance(data, dict):
            raise RemoteFailure("Unerwartetes Antwortformat der Generierung")
        return self._parse(
            lambda: ScheduleRun.from_generation_payload(data, semester_offering_id),
            "Generierung",
        )

    def get_run(self, run_id: int) -> ScheduleRun:
        data = self._call("GET", f"/routines/{run_id}")
        return self._parse(lambda: ScheduleRun.model_validate(data), f"Lauf {run_id}")

    def list_runs(self, semester_offering_id: int) -> list[ScheduleRun]:
        data = self._call("GET", f"/routines/semester-offering/{semester_offering_id}")
        return self._parse(
            lambda: [ScheduleRun.model_validate(r) for r in (data or [])],
            f"Lauf-Historie {semester_offering_id}",
        )

    def commit(self, run_id: int, message: Optional[str] = None) -> Optional[ScheduleRun]:
        """Schreibt einen Lauf fest. Liefert den Lauf, falls der Server ihn mitsendet."""
        body = {"message": message} if message else {}
        data = self._call("POST", f"/routines/{run_id}/commit", json=body, expect_data=False)
        if not data:
            return None
        return self._parse(lambda: ScheduleRun.model_validate(data), f"Commit {run_id}")

    def cancel(self, run_id: int) -> None:
        self._call("POST", f"/routines/{run_id}/cancel", json={}, expect_data=False)

    def delete(self, run_id: int) -> None:
        self._call("DELETE", f"/routines/{run_id}", expect_data=False)

    # ─── Stammdaten (nur lesend) ──────────────────────────────────────────────

    def list_semester_offerings(self) -> list[SemesterOffering]:
        data = self._call("GET", "/semester-offerings")
        return self._parse(
            lambda: [SemesterOffering.model_validate(o) for o in (data or [])],
            "Semesterangebote",
        )

    def get_semester_offering(self, offering_id: int) -> SemesterOffering:
        data = self._call("GET", f"/semester-offerings/{offering_id}")
        return self._parse(
            lambda: SemesterOffering.model_validate(data), f"Semesterangebot {offering_id}"
        )

    def list_course_offerings(self, semester_offering_id: int) -> list[CourseOffering]:
        data = self._call("GET", f"/semester-offerings/{semester_offering_id}/course-offerings")
        return self._parse(
            lambda: [CourseOffering.model_validate(c) for c in (data or [])],
            f"Kurse von {semester_offering_id}",
        )

    def load_reference_data(self, only_active: bool = True) -> ReferenceData:
        """Lädt den Stammdaten-Katalog inkl. Kursen jedes Semesterangebots."""
        offerings = self.list_semester_offerings()
        if only_active:
            offerings = [o for o in offerings if o.status == "ACTIVE"]
        offerings = [
            o.model_copy(update={"course_offerings": self.list_course_offerings(o.id)})
            for o in offerings
        ]
        teachers = self._parse(
            lambda: [Teacher.model_validate(t) for t in (self._call("GET", "/teachers") or [])],
            "Lehrkräfte",
        )
        rooms = self._parse(
            lambda: [Room.model_validate(r) for r in (self._call("GET", "/rooms") or [])],
            "Räume",
        )
        subjects = self._parse(
            lambda: [Subject.model_validate(s) for s in (self._call("GET", "/subjects") or [])],
            "Fächer",
        )
        return ReferenceData(
            semester_offerings=offerings, teachers=teachers, rooms=rooms, subjects=subjects,
        )

    def health(self) -> bool:
        try:
            response = self._client.get("/health")
        except httpx.HTTPError:
            return False
        return response.status_code == 200

    # ─── Transport ────────────────────────────────────────────────────────────

    def _call(self, method: str, path: str, *, json: Any = None,
              expect_data: bool = True) -> Any:
        """Gewöhnliche Anfrage: Zeitüberschreitung ist ein RemoteFailure."""
        try:
            return self._request(method, path, json=json, expect_data=expect_data)
        except httpx.TimeoutException as e:
            raise RemoteFailure(
                f"{method} {path}: Zeitüberschreitung nach {self.api.request_timeout_seconds:.0f}s"
            ) from e

    def _request(self, method: str, path: str, *, json: Any = None,
                 timeout: Optional[float] = None, expect_data: bool = True) -> Any:
        """Sendet die Anfrage und entpackt den Antwort-Umschlag.

        httpx.TimeoutException wird unverändert an den Aufrufer durchgereicht.
        """
        kwargs: dict[str, Any] = {}
        if json is not None:
            kwargs["json"] = json
        if timeout is not None:
            kwargs["timeout"] = httpx.Timeout(timeout)
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.TimeoutException:
            raise
        except httpx.HTTPError as e:
            logger.error(f"{method} {path}: Transportfehler: {e}")
            raise RemoteFailure(f"Server nicht erreichbar: {e}") from e

        try:
            body = response.json()
        except ValueError as e:
            if response.is_success and not expect_data and not response.content:
                return None
            logger.error(f"{method} {path}: keine JSON-Antwort (HTTP {response.status_code})")
            raise RemoteFailure(
                f"Ungültige Antwort (HTTP {response.status_code})", response.status_code
            ) from e

        envelope = body if isinstance(body, dict) else {}
        if not response.is_success or envelope.get("success") is False:
            message = (
                envelope.get("error")
                or envelope.get("message")
                or f"HTTP {response.status_code}"
            )
            logger.error(f"{method} {path}: {message}")
            raise RemoteFailure(message, response.status_code)

        data = envelope.get("data")
        if data is None and expect_data:
            raise RemoteFailure(
                envelope.get("message") or f"{method} {path}: Antwort ohne Daten",
                response.status_code,
            )
        return data

    @staticmethod
    def _parse(build, what: str):
        try:
            return build()
        except (PydanticValidationError, ValueError, TypeError) as e:
            raise RemoteFailure(f"{what}: unerwartetes Antwortformat: {e}") from e
