from pydantic import BaseModel, Field, model_validator


# ─── ZEITRASTER (statisch) ───

class LessonSlot(BaseModel, frozen=True):
    """Ein buchbarer Slot im Tagesraster."""
    # Laufende Nummer des Slots, 1-basiert
    slot_number: int
    # Beginn im Format "HH:MM"
    start_time: str
    # Ende im Format "HH:MM"
    end_time: str

    @property
    def time_range(self) -> str:
        return f"{self.start_time}-{self.end_time}"


class PauseSlot(BaseModel, frozen=True):
    """Eine nicht buchbare Pause zwischen zwei Slots."""
    # Nach welchem Slot die Pause folgt (z.B. 4 = nach dem 4. Slot)
    after_slot: int
    # Beginn und Ende der Pause
    start_time: str
    end_time: str
    # Bezeichnung für Rasterzeilen
    label: str = "Lunch Break"

    @property
    def time_range(self) -> str:
        return f"{self.start_time}-{self.end_time}"


class TimeGridConfig(BaseModel, frozen=True):
    """Wochenraster: Tage, Slots mit Uhrzeiten und Pausen.

    Das Raster ist während der Laufzeit unveränderlich (frozen).
    Slots sind lückenlos ab 1 nummeriert; Pausen liegen immer zwischen
    zwei existierenden Slots und sind nie buchbar.
    """
    # Namen der Wochentage, Index 0 = Tag 1 (Montag)
    day_names: tuple[str, ...] = Field(
        default=("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"),
        description="Namen der Unterrichtstage")
    # Alle buchbaren Slots des Tages
    lesson_slots: tuple[LessonSlot, ...] = Field(
        description="Alle Slots des Tages mit Uhrzeiten")
    # Pausen zwischen den Slots
    pauses: tuple[PauseSlot, ...] = Field(
        default=(), description="Nicht buchbare Pausen")

    @property
    def days_per_week(self) -> int:
        return len(self.day_names)

    @property
    def max_slot(self) -> int:
        return len(self.lesson_slots)

    @model_validator(mode='after')
    def validate_slots(self):
        """Slots lückenlos ab 1, Pausen nur zwischen zwei Slots."""
        if not self.day_names:
            raise ValueError("Zeitraster braucht mindestens einen Tag")
        numbers = [s.slot_number for s in self.lesson_slots]
        if numbers != list(range(1, len(numbers) + 1)):
            raise ValueError(
                f"Slot-Nummern müssen lückenlos ab 1 laufen, erhalten: {numbers}")
        for p in self.pauses:
            if not 1 <= p.after_slot < len(numbers):
                raise ValueError(
                    f"Pause nach Slot {p.after_slot} liegt nicht zwischen zwei Slots")
        return self


# ─── SERVER ───

class ApiConfig(BaseModel):
    """Verbindung zum Routine-Server."""
    # Basis-URL der REST-API
    base_url: str = Field("http://localhost:8080/api",
        description="Basis-URL der REST-API")
    # Zeitlimit für gewöhnliche Anfragen (Sekunden)
    request_timeout_seconds: float = Field(30.0, gt=0,
        description="Zeitlimit normale Anfragen (Sekunden)")
    # Zeitlimit für die Generierung; Solver-Arbeit ist kombinatorisch
    generation_timeout_seconds: float = Field(300.0, gt=0,
        description="Zeitlimit Generierung (Sekunden)")

    @model_validator(mode='after')
    def check_timeouts(self):
        if self.generation_timeout_seconds < self.request_timeout_seconds:
            raise ValueError(
                "generation_timeout_seconds muss >= request_timeout_seconds sein")
        return self


# ─── GENERIERUNG ───

class GenerationOptions(BaseModel):
    """Einstellungen, die unverändert an den Solver gehen."""
    respect_teacher_preferences: bool = True
    respect_room_preferences: bool = True
    # Suchbudget des Solvers
    max_iterations: int = Field(1000, ge=100, le=5000)
    # Temperatur der Suche (0.1 – 2.0)
    temperature: float = Field(0.8, ge=0.1, le=2.0)


# ─── EXPORT ───

class ExportConfig(BaseModel):
    """CSV-Export."""
    # Zielverzeichnis für exportierte Dateien
    output_dir: str = Field("output", description="Zielverzeichnis")
    # Platzhalter für nicht auflösbare Referenzen
    placeholder: str = Field("N/A", description="Platzhalter fehlender Daten")


# ─── GESAMT-CONFIG ───

class ClientConfig(BaseModel):
    """Gesamtkonfiguration der Oberfläche."""
    # Name der Einrichtung (nur Anzeige)
    institution_name: str = Field("University", description="Name der Einrichtung")
    # Statisches Wochenraster
    time_grid: TimeGridConfig
    # Server-Verbindung
    api: ApiConfig = Field(default_factory=ApiConfig)
    # Standard-Einstellungen für neue Generierungen
    generation: GenerationOptions = Field(default_factory=GenerationOptions)
    # Export-Einstellungen
    export: ExportConfig = Field(default_factory=ExportConfig)
