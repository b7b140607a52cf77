"""Interaktiver Setup-Wizard für die Ersteinrichtung des Routine-Clients.

Führt den Nutzer Schritt für Schritt durch Zeitraster, Server-Verbindung,
Generierungs-Einstellungen und Export. Nutzt rich für die Konsolenausgabe.
"""

from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, FloatPrompt, IntPrompt, Prompt
from rich.table import Table
from rich import box

from config.schema import (
    ApiConfig,
    ClientConfig,
    ExportConfig,
    GenerationOptions,
    LessonSlot,
    PauseSlot,
    TimeGridConfig,
)
from config.defaults import default_time_grid

console = Console()


def _header(title: str) -> None:
    console.print()
    console.print(Panel(f"[bold cyan]{title}[/bold cyan]", expand=False))


def _info(text: str) -> None:
    console.print(f"[dim]{text}[/dim]")


def _success(text: str) -> None:
    console.print(f"[green]✓[/green] {text}")


def _warn(text: str) -> None:
    console.print(f"[yellow]⚠[/yellow]  {text}")


def show_time_grid_table(tg: TimeGridConfig) -> None:
    """Zeigt das Zeitraster als rich-Tabelle an."""
    table = Table(title="Zeitraster", box=box.ROUNDED)
    table.add_column("Slot", style="bold", width=5)
    table.add_column("Beginn", width=8)
    table.add_column("Ende", width=8)
    table.add_column("Info", width=20)

    pause_afters = {p.after_slot: p for p in tg.pauses}
    for slot in tg.lesson_slots:
        table.add_row(str(slot.slot_number), slot.start_time, slot.end_time, "")
        if slot.slot_number in pause_afters:
            p = pause_afters[slot.slot_number]
            table.add_row(
                "",
                f"[yellow]{p.start_time}[/yellow]",
                f"[yellow]{p.end_time}[/yellow]",
                f"[yellow]{p.label}[/yellow]",
            )
    console.print(table)
    console.print(f"[dim]Tage: {', '.join(tg.day_names)}[/dim]")


# ─── SCHRITT 1: Einrichtung ───

def _wizard_institution() -> str:
    _header("Schritt 1: Einrichtung")
    return Prompt.ask("Name der Einrichtung", default="University")


# ─── SCHRITT 2: Zeitraster ───

def _wizard_time_grid() -> TimeGridConfig:
    _header("Schritt 2: Zeitraster")
    default_tg = default_time_grid()
    show_time_grid_table(default_tg)

    if Confirm.ask("Standard-Zeitraster übernehmen?", default=True):
        _success("Standard-Zeitraster übernommen.")
        return default_tg

    console.print("\n[bold]Eigenes Zeitraster eingeben[/bold]")
    days = Prompt.ask(
        "Unterrichtstage (kommagetrennt)", default=",".join(default_tg.day_names)
    )
    num_slots = IntPrompt.ask("Anzahl Slots pro Tag", default=default_tg.max_slot)

    lesson_slots: list[LessonSlot] = []
    for i in range(1, num_slots + 1):
        console.print(f"\n[cyan]{i}. Slot:[/cyan]")
        start = Prompt.ask("  Beginn (HH:MM)")
        end = Prompt.ask("  Ende   (HH:MM)")
        lesson_slots.append(LessonSlot(slot_number=i, start_time=start, end_time=end))

    console.print("\n[bold]Mittagspause[/bold]")
    pauses: list[PauseSlot] = []
    if Confirm.ask("Mittagspause einplanen?", default=True):
        after = IntPrompt.ask("  Pause nach Slot Nr.", default=4)
        start = Prompt.ask("  Beginn (HH:MM)", default="12:40")
        end = Prompt.ask("  Ende   (HH:MM)", default="13:50")
        pauses.append(PauseSlot(after_slot=after, start_time=start, end_time=end))

    try:
        tg = TimeGridConfig(
            day_names=tuple(d.strip() for d in days.split(",") if d.strip()),
            lesson_slots=tuple(lesson_slots),
            pauses=tuple(pauses),
        )
        _success("Zeitraster konfiguriert und validiert.")
        return tg
    except ValidationError as e:
        _warn(f"Validierungsfehler: {e}")
        _warn("Standard-Zeitraster wird verwendet.")
        return default_tg


# ─── SCHRITT 3: Server ───

def _wizard_api() -> ApiConfig:
    _header("Schritt 3: Server-Verbindung")
    _info("Die Generierung darf deutlich länger dauern als normale Anfragen.")
    defaults = ApiConfig()
    base_url = Prompt.ask("Basis-URL der API", default=defaults.base_url)
    request_timeout = FloatPrompt.ask(
        "Zeitlimit normale Anfragen (Sekunden)", default=defaults.request_timeout_seconds
    )
    generation_timeout = FloatPrompt.ask(
        "Zeitlimit Generierung (Sekunden)", default=defaults.generation_timeout_seconds
    )
    try:
        return ApiConfig(
            base_url=base_url,
            request_timeout_seconds=request_timeout,
            generation_timeout_seconds=generation_timeout,
        )
    except ValidationError as e:
        _warn(f"Validierungsfehler: {e}")
        _warn(f"Standard-Zeitlimits werden verwendet ({base_url}).")
        return ApiConfig(base_url=base_url)


# ─── SCHRITT 4: Generierung ───

def _wizard_generation() -> GenerationOptions:
    _header("Schritt 4: Generierung")
    defaults = GenerationOptions()
    if Confirm.ask("Standard-Einstellungen des Solvers übernehmen?", default=True):
        return defaults
    try:
        return GenerationOptions(
            respect_teacher_preferences=Confirm.ask(
                "Wünsche der Lehrkräfte berücksichtigen?", default=True),
            respect_room_preferences=Confirm.ask(
                "Raumwünsche berücksichtigen?", default=True),
            max_iterations=IntPrompt.ask(
                "Max. Iterationen (100-5000)", default=defaults.max_iterations),
            temperature=FloatPrompt.ask(
                "Temperatur (0.1-2.0)", default=defaults.temperature),
        )
    except ValidationError as e:
        _warn(f"Validierungsfehler: {e}")
        _warn("Standard-Einstellungen werden verwendet.")
        return defaults


# ─── SCHRITT 5: Export ───

def _wizard_export() -> ExportConfig:
    _header("Schritt 5: Export")
    output_dir = Prompt.ask("Zielverzeichnis für CSV-Dateien", default="output")
    return ExportConfig(output_dir=output_dir)


def _show_summary(config: ClientConfig) -> None:
    _header("Zusammenfassung")
    table = Table(box=box.SIMPLE)
    table.add_column("Bereich", style="bold")
    table.add_column("Wert")

    table.add_row("Einrichtung", config.institution_name)
    table.add_row(
        "Zeitraster",
        f"{config.time_grid.max_slot} Slots/Tag, {config.time_grid.days_per_week} Tage/Woche"
    )
    table.add_row("Server", config.api.base_url)
    table.add_row(
        "Zeitlimits",
        f"{config.api.request_timeout_seconds:.0f}s / "
        f"Generierung {config.api.generation_timeout_seconds:.0f}s"
    )
    table.add_row("Iterationen", str(config.generation.max_iterations))
    table.add_row("Export", config.export.output_dir)
    console.print(table)


# ─── HAUPT-WIZARD ───

def run_wizard() -> Optional[ClientConfig]:
    """Führt den vollständigen interaktiven Setup-Wizard aus.

    Returns:
        Fertige ClientConfig oder None, wenn der Nutzer abbricht.
    """
    console.print()
    console.print(Panel(
        "[bold]Willkommen beim Routine-Client![/bold]\n\n"
        "Der Wizard richtet Zeitraster und Server-Verbindung ein.\n"
        "[dim]Standard-Werte können mit Enter übernommen werden.[/dim]",
        title="[bold cyan]Routine-Client[/bold cyan]",
        border_style="cyan",
    ))

    if not Confirm.ask("\nMöchten Sie jetzt einrichten?", default=True):
        console.print("[yellow]Einrichtung abgebrochen.[/yellow]")
        return None

    try:
        config = ClientConfig(
            institution_name=_wizard_institution(),
            time_grid=_wizard_time_grid(),
            api=_wizard_api(),
            generation=_wizard_generation(),
            export=_wizard_export(),
        )

        _show_summary(config)

        if not Confirm.ask("\nKonfiguration speichern?", default=True):
            console.print("[yellow]Konfiguration wird nicht gespeichert.[/yellow]")
            return None

        _success("Konfiguration wird gespeichert...")
        return config

    except KeyboardInterrupt:
        console.print("\n[yellow]Wizard abgebrochen.[/yellow]")
        return None
