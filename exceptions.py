"""Fehlerklassen des Routine-Clients.

Fehlerklassen:
    - ValidationError / OutOfRangeError: lokale Eingabefehler, nie remote gesendet
    - InvalidStateTransition: unzulässiger Statuswechsel eines Laufs (lokal geprüft)
    - RemoteFailure: Solver-, Netzwerk- oder Serverfehler (Meldung unverändert)
    - GenerationPending: Generierung läuft serverseitig evtl. noch weiter
    - PartialDataError: nicht auflösbare Referenz (nur gesammelt, nie geworfen)

Verwendung:
    >>> try:
    ...     controller.commit(run_id)
    ... except InvalidStateTransition as e:
    ...     console.print(f"[yellow]{e}[/yellow]")
"""

from typing import Optional


class RoutineError(Exception):
    """Basisklasse aller Fehler des Routine-Clients."""


class ValidationError(RoutineError):
    """Lokaler Validierungsfehler.

    Wird immer ohne Kontakt zum Server erkannt und ist durch Korrektur der
    Eingabe behebbar (z.B. Generierung für ein Angebot ohne Kurse).
    """


class OutOfRangeError(ValidationError):
    """Tag oder Slot liegt außerhalb des Zeitrasters.

    Attribute:
        day_of_week: angefragter Wochentag
        slot_number: angefragter Slot (None wenn nur der Tag geprüft wurde)
    """

    def __init__(self, message: str, day_of_week: Optional[int] = None,
                 slot_number: Optional[int] = None):
        super().__init__(message)
        self.day_of_week = day_of_week
        self.slot_number = slot_number


class InvalidStateTransition(RoutineError):
    """Statuswechsel ist für den aktuellen Status des Laufs nicht erlaubt.

    Attribute:
        run_id: betroffener Lauf
        status: aktueller Status (bleibt unverändert)
        action: versuchte Aktion ('commit', 'cancel', 'delete')
    """

    def __init__(self, run_id: int, status: str, action: str,
                 message: Optional[str] = None):
        super().__init__(
            message
            or f"Lauf #{run_id}: '{action}' ist im Status {status} nicht erlaubt"
        )
        self.run_id = run_id
        self.status = status
        self.action = action


class SupersessionRequired(InvalidStateTransition):
    """Für das Semesterangebot existiert bereits ein festgeschriebener Lauf.

    Der Aufrufer muss die Ablösung explizit bestätigen (supersede=True).

    Attribute:
        committed_run_id: bisher festgeschriebener Lauf
    """

    def __init__(self, run_id: int, status: str, committed_run_id: int):
        super().__init__(
            run_id, status, "commit",
            f"Lauf #{run_id}: Semesterangebot hat bereits den festgeschriebenen "
            f"Lauf #{committed_run_id}; Ablösung muss explizit bestätigt werden",
        )
        self.committed_run_id = committed_run_id


class RemoteFailure(RoutineError):
    """Fehler des Solvers, Servers oder Netzwerks.

    Die Meldung des Servers wird unverändert weitergegeben.

    Attribute:
        status_code: HTTP-Status (None bei Transportfehlern)
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class GenerationPending(RoutineError):
    """Die Generierung hat das Zeitlimit des Clients überschritten.

    Der Solver rechnet serverseitig möglicherweise weiter. Ob ein Lauf
    entstanden ist, zeigt erst die Lauf-Historie des Semesterangebots.

    Attribute:
        semester_offering_id: Angebot, für das generiert wurde
        timeout_seconds: verwendetes Zeitlimit
    """

    def __init__(self, semester_offering_id: int, timeout_seconds: float):
        super().__init__(
            f"Generierung für Semesterangebot {semester_offering_id} läuft noch "
            f"(keine Antwort nach {timeout_seconds:.0f}s). "
            f"Lauf-Historie später erneut abrufen."
        )
        self.semester_offering_id = semester_offering_id
        self.timeout_seconds = timeout_seconds


class PartialDataError(RoutineError):
    """Eine referenzierte Entität konnte nicht aufgelöst werden.

    Wird beim Export/Rendern gesammelt statt geworfen; die betroffene
    Zelle erhält einen Platzhalter.

    Attribute:
        entity: Art der Referenz ('room', 'teacher', 'course_offering', 'subject')
        entity_id: nicht auflösbare ID
        entry_id: Eintrag, der die Referenz enthält
    """

    def __init__(self, entity: str, entity_id: Optional[int],
                 entry_id: Optional[int] = None):
        super().__init__(
            f"Eintrag {entry_id}: {entity} {entity_id} nicht auflösbar"
        )
        self.entity = entity
        self.entity_id = entity_id
        self.entry_id = entry_id
