"""Routine-Client: Haupt-CLI.

Verwendung:
  python main.py setup                        Ersteinrichtung (Wizard)
  python main.py config show                  Konfiguration anzeigen
  python main.py offerings                    Semesterangebote auflisten
  python main.py runs <angebot>               Lauf-Historie eines Angebots
  python main.py generate <angebot>           Neuen Lauf generieren
  python main.py show <lauf> --by day         Lauf anzeigen (day|room|teacher)
  python main.py validate <lauf>              Lauf auf Doppelbelegungen prüfen
  python main.py commit <lauf> [-m TEXT]      Lauf festschreiben
  python main.py cancel <lauf>                Lauf verwerfen
  python main.py delete <lauf>                Lauf löschen
  python main.py export <lauf>                Lauf als CSV exportieren
  python main.py browse <lauf>                Lauf im Terminal-Browser
  python main.py diff <lauf_a> <lauf_b>       Zwei Läufe vergleichen
"""

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich import box

from exceptions import GenerationPending, RoutineError, SupersessionRequired

console = Console()


def _load_config_or_abort():
    """Lädt die Konfiguration oder bricht mit Fehlermeldung ab."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    if mgr.first_run_check():
        console.print(
            "[red]Keine Konfiguration gefunden.[/red]\n"
            "Führen Sie zunächst [bold]python main.py setup[/bold] aus."
        )
        sys.exit(1)
    try:
        return mgr, mgr.load()
    except ValueError as e:
        console.print(f"[red bold]Konfiguration ungültig:[/red bold]\n{e}")
        sys.exit(1)


@contextmanager
def _session(load_reference: bool = True, only_active: bool = False):
    """Öffnet Client und Controller; Fehler werden ausgegeben (Exit-Code 1)."""
    from models.timeslot import TimeGrid
    from routine import RoutineClient, ScheduleRunController

    mgr, config = _load_config_or_abort()
    try:
        with RoutineClient(config.api) as client:
            reference = (
                client.load_reference_data(only_active=only_active)
                if load_reference else None
            )
            yield config, ScheduleRunController(
                client, reference=reference, time_grid=TimeGrid(config.time_grid),
            )
    except GenerationPending as e:
        console.print(f"[yellow]{e}[/yellow]")
        sys.exit(1)
    except RoutineError as e:
        console.print(f"[red bold]Fehler:[/red bold] {e}")
        sys.exit(1)


def _print_run_header(run, reference) -> None:
    offering = reference.semester_offering(run.semester_offering_id)
    scope = offering.display_name if offering else f"Semesterangebot {run.semester_offering_id}"
    report = run.report
    lines = [
        f"[bold]{scope}[/bold]",
        f"Status: [cyan]{run.status.value}[/cyan] | Einträge: {len(run.schedule_entries)}",
        f"Blöcke: {report.placed_blocks}/{report.total_blocks} platziert, "
        f"{report.unplaced_blocks} offen",
    ]
    if run.committed_at:
        lines.append(f"Festgeschrieben: {run.committed_at:%Y-%m-%d %H:%M}")
    console.print(Panel("\n".join(lines), title=f"Lauf #{run.id}", border_style="cyan"))
    for conflict in report.conflicts:
        console.print(f"  [yellow]⚠[/yellow] {conflict}")


# ─── SETUP ────────────────────────────────────────────────────────────────────

@click.command("setup")
def cmd_setup():
    """Ersteinrichtung: Client-Konfiguration mit dem Setup-Wizard anlegen."""
    from config.wizard import run_wizard
    from config.manager import ConfigManager

    mgr = ConfigManager()
    if not mgr.first_run_check():
        console.print("[yellow]Eine Konfiguration existiert bereits.[/yellow]")
        if not click.confirm("Trotzdem neu einrichten?", default=False):
            return

    config = run_wizard()
    if config is not None:
        mgr.save(config)
        console.print("[bold green]Einrichtung abgeschlossen![/bold green]")
        console.print("Führen Sie jetzt [bold]python main.py offerings[/bold] aus.")


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anzeigen und bearbeiten."""


@cmd_config.command("show")
def config_show():
    """Zeigt die aktuelle Konfiguration an."""
    from config.wizard import show_time_grid_table

    mgr, config = _load_config_or_abort()

    console.print(Panel(
        f"[bold]{config.institution_name}[/bold]  |  {config.api.base_url}",
        title="Client-Konfiguration",
        border_style="cyan",
    ))
    show_time_grid_table(config.time_grid)

    api = config.api
    console.print(
        f"\n[bold]Zeitlimits:[/bold] Anfragen {api.request_timeout_seconds:.0f}s | "
        f"Generierung {api.generation_timeout_seconds:.0f}s"
    )
    gen = config.generation
    console.print(
        f"[bold]Generierung:[/bold] Iterationen {gen.max_iterations} | "
        f"Temperatur {gen.temperature} | "
        f"Lehrkraft-Wünsche {'✓' if gen.respect_teacher_preferences else '✗'} | "
        f"Raum-Wünsche {'✓' if gen.respect_room_preferences else '✗'}"
    )
    console.print(f"[bold]Export:[/bold] {config.export.output_dir}")


@cmd_config.command("edit")
def config_edit():
    """Bearbeitet die Konfiguration interaktiv."""
    mgr, config = _load_config_or_abort()
    mgr.edit_interactive(config)


# ─── OFFERINGS / RUNS ─────────────────────────────────────────────────────────

@click.command("offerings")
@click.option("--all", "show_all", is_flag=True, default=False,
              help="Auch Entwürfe und archivierte Angebote anzeigen.")
def cmd_offerings(show_all: bool):
    """Listet die Semesterangebote mit ihren Kursen."""
    with _session(only_active=not show_all) as (config, controller):
        reference = controller.reference
        table = Table(title="Semesterangebote", box=box.ROUNDED)
        table.add_column("ID", style="bold")
        table.add_column("Angebot")
        table.add_column("Status")
        table.add_column("Kurse")
        table.add_column("Studierende")
        for o in reference.semester_offerings:
            table.add_row(
                str(o.id), o.display_name, o.status,
                str(len(o.course_offerings)), str(o.total_students),
            )
        console.print(table)
        console.print(f"[dim]{reference.summary()}[/dim]")


@click.command("runs")
@click.argument("offering_id", type=int)
def cmd_runs(offering_id: int):
    """Zeigt die Lauf-Historie eines Semesterangebots (neueste zuerst)."""
    with _session(load_reference=False) as (config, controller):
        runs = controller.list_runs_for_offering(offering_id)
        if not runs:
            console.print(f"[dim]Keine Läufe für Semesterangebot {offering_id}.[/dim]")
            return
        table = Table(title=f"Läufe für Semesterangebot {offering_id}", box=box.ROUNDED)
        table.add_column("Lauf", style="bold")
        table.add_column("Status")
        table.add_column("Generiert")
        table.add_column("Festgeschrieben")
        table.add_column("Blöcke")
        for r in runs:
            color = {"DRAFT": "cyan", "COMMITTED": "green", "FAILED": "red"}.get(
                r.status.value, "dim")
            table.add_row(
                str(r.id),
                f"[{color}]{r.status.value}[/{color}]",
                f"{r.generated_at:%Y-%m-%d %H:%M}" if r.generated_at else "—",
                f"{r.committed_at:%Y-%m-%d %H:%M}" if r.committed_at else "—",
                f"{r.report.placed_blocks}/{r.report.total_blocks}",
            )
        console.print(table)


# ─── GENERATE ─────────────────────────────────────────────────────────────────

@click.command("generate")
@click.argument("offering_id", type=int)
@click.option("--max-iterations", type=int, default=None,
              help="Suchbudget des Solvers (100-5000).")
@click.option("--temperature", type=float, default=None,
              help="Temperatur der Suche (0.1-2.0).")
@click.option("--ignore-teacher-preferences", is_flag=True, default=False)
@click.option("--ignore-room-preferences", is_flag=True, default=False)
def cmd_generate(offering_id: int, max_iterations: Optional[int],
                 temperature: Optional[float], ignore_teacher_preferences: bool,
                 ignore_room_preferences: bool):
    """Fordert einen neuen Lauf für ein Semesterangebot an."""
    from pydantic import ValidationError
    from config.schema import GenerationOptions

    with _session(only_active=True) as (config, controller):
        update: dict = {}
        if max_iterations is not None:
            update["max_iterations"] = max_iterations
        if temperature is not None:
            update["temperature"] = temperature
        if ignore_teacher_preferences:
            update["respect_teacher_preferences"] = False
        if ignore_room_preferences:
            update["respect_room_preferences"] = False
        try:
            options = GenerationOptions.model_validate(
                {**config.generation.model_dump(), **update}
            )
        except ValidationError as e:
            console.print(f"[red bold]Ungültige Einstellungen:[/red bold]\n{e}")
            sys.exit(1)

        console.print(
            f"[bold]Generierung läuft...[/bold] "
            f"[dim](bis zu {config.api.generation_timeout_seconds:.0f}s)[/dim]"
        )
        run = controller.generate(offering_id, options)
        _print_run_header(run, controller.reference)
        if run.status.value == "FAILED":
            sys.exit(1)
        controller.validate_current().print_rich()
        console.print(
            f"Festschreiben mit [bold]python main.py commit {run.id}[/bold]"
        )


# ─── SHOW / VALIDATE ──────────────────────────────────────────────────────────

@click.command("show")
@click.argument("run_id", type=int)
@click.option("--by", "by", type=click.Choice(["day", "room", "teacher"]),
              default="day", help="Gruppierung der Anzeige.")
def cmd_show(run_id: int, by: str):
    """Zeigt einen Lauf gruppiert nach Tag, Raum oder Lehrkraft."""
    from analysis.aggregation import group_by_day, group_by_room, group_by_teacher
    from export.helpers import EntryLabels
    from export.tui_renderer import render_day_rows, render_grid_rows

    with _session() as (config, controller):
        run = controller.view(run_id)
        _print_run_header(run, controller.reference)
        labels = EntryLabels(
            controller.reference, controller.time_grid, config.export.placeholder
        )
        entries = list(controller.store.current())
        tg = controller.time_grid

        if by == "day":
            for day, day_entries in group_by_day(entries).items():
                table = Table(title=tg.day_name(day), box=box.ROUNDED)
                for col in ("Zeit", "Code", "Fach", "Lehrkraft", "Raum", "Typ"):
                    table.add_column(col)
                for row in render_day_rows(day_entries, labels):
                    table.add_row(*row)
                console.print(table)
        else:
            groups = group_by_room(entries) if by == "room" else group_by_teacher(entries)
            for key, group in groups.items():
                if by == "room":
                    room = controller.reference.resolve_room(group[0])
                    title = f"Raum {room.name if room else key}"
                else:
                    teacher = controller.reference.resolve_teacher(group[0])
                    title = teacher.name if teacher else f"Lehrkraft {key}"
                table = Table(title=title, box=box.ROUNDED, show_lines=True)
                table.add_column("Slot", style="bold")
                table.add_column("Zeit")
                for day in tg.days:
                    table.add_column(tg.day_name(day))
                for row in render_grid_rows(group, labels, mode=by):
                    table.add_row(*row)
                console.print(table)

        for issue in labels.issues:
            console.print(f"[yellow]⚠[/yellow] {issue}")


@click.command("validate")
@click.argument("run_id", type=int)
def cmd_validate(run_id: int):
    """Prüft einen Lauf auf Doppelbelegungen und Rasterfehler."""
    with _session() as (config, controller):
        controller.view(run_id)
        report = controller.validate_current()
        report.print_rich()
    sys.exit(0 if report.is_valid else 1)


# ─── COMMIT / CANCEL / DELETE ─────────────────────────────────────────────────

@click.command("commit")
@click.argument("run_id", type=int)
@click.option("--message", "-m", default=None, help="Kommentar zum Festschreiben.")
@click.option("--supersede", is_flag=True, default=False,
              help="Bestehenden festgeschriebenen Lauf ablösen.")
@click.option("--yes", "-y", is_flag=True, default=False, help="Ohne Rückfrage.")
def cmd_commit(run_id: int, message: Optional[str], supersede: bool, yes: bool):
    """Schreibt einen DRAFT-Lauf fest."""
    with _session(load_reference=False) as (config, controller):
        controller.view(run_id)
        if not yes and not click.confirm(f"Lauf #{run_id} festschreiben?", default=True):
            return
        try:
            run = controller.commit(run_id, message, supersede=supersede)
        except SupersessionRequired as e:
            console.print(f"[yellow]{e}[/yellow]")
            if not click.confirm(
                f"Lauf #{e.committed_run_id} durch Lauf #{run_id} ablösen?", default=False
            ):
                sys.exit(1)
            run = controller.commit(run_id, message, supersede=True)
        console.print(f"[green]✓[/green] Lauf #{run.id} festgeschrieben.")


@click.command("cancel")
@click.argument("run_id", type=int)
@click.option("--yes", "-y", is_flag=True, default=False, help="Ohne Rückfrage.")
def cmd_cancel(run_id: int, yes: bool):
    """Verwirft einen DRAFT-Lauf."""
    with _session(load_reference=False) as (config, controller):
        if not yes and not click.confirm(f"Lauf #{run_id} verwerfen?", default=False):
            return
        controller.cancel(run_id)
        console.print(f"[green]✓[/green] Lauf #{run_id} verworfen.")


@click.command("delete")
@click.argument("run_id", type=int)
@click.option("--yes", "-y", is_flag=True, default=False, help="Ohne Rückfrage.")
def cmd_delete(run_id: int, yes: bool):
    """Löscht einen nicht festgeschriebenen Lauf."""
    with _session(load_reference=False) as (config, controller):
        if not yes and not click.confirm(f"Lauf #{run_id} löschen?", default=False):
            return
        controller.delete(run_id)
        console.print(f"[green]✓[/green] Lauf #{run_id} gelöscht.")


# ─── EXPORT / BROWSE / DIFF ───────────────────────────────────────────────────

@click.command("export")
@click.argument("run_id", type=int)
@click.option("--output", "-o", default=None, help="Zielverzeichnis (Standard aus Config).")
def cmd_export(run_id: int, output: Optional[str]):
    """Exportiert einen Lauf als CSV-Datei."""
    from export.csv_export import CsvExporter

    with _session() as (config, controller):
        run = controller.view(run_id)
        exporter = CsvExporter(
            controller.reference, controller.time_grid, config.export.placeholder
        )
        result = exporter.export_run(run)
        path = result.write(Path(output or config.export.output_dir))
        console.print(
            f"[green]✓[/green] {result.row_count} Zeilen exportiert: {path}"
        )
        for issue in result.issues:
            console.print(f"[yellow]⚠[/yellow] {issue}")


@click.command("browse")
@click.argument("run_id", type=int)
def cmd_browse(run_id: int):
    """Öffnet einen Lauf im interaktiven Terminal-Browser (textual)."""
    from export.tui_browser import RoutineBrowserApp

    with _session() as (config, controller):
        run = controller.view(run_id)
        reference = controller.reference
        time_grid = controller.time_grid
    RoutineBrowserApp(run, reference, time_grid).run()


@click.command("diff")
@click.argument("run_a", type=int)
@click.argument("run_b", type=int)
@click.option("--json", "as_json", is_flag=True, default=False, help="Ausgabe als JSON.")
def cmd_diff(run_a: int, run_b: int, as_json: bool):
    """Vergleicht die Platzierungen zweier Läufe."""
    from analysis.diff import diff_runs

    with _session(load_reference=False) as (config, controller):
        diff = diff_runs(controller.view(run_a), controller.view(run_b))

    if as_json:
        click.echo(diff.to_json())
        return
    if diff.is_empty():
        console.print("[green]Keine Unterschiede.[/green]")
        return

    if diff.status_change:
        console.print(f"[bold]Status:[/bold] {diff.status_change}")
    for change in diff.report_changes:
        console.print(f"[bold]Bericht:[/bold] {change}")
    table = Table(title=f"Lauf #{run_a} → Lauf #{run_b}", box=box.ROUNDED)
    for col in ("", "Tag", "Slot", "Kurs", "Gruppe", "Lehrkraft", "Raum"):
        table.add_column(col)
    for sign, placements in (("[red]-[/red]", diff.removed), ("[green]+[/green]", diff.added)):
        for p in placements:
            table.add_row(
                sign, str(p.day_of_week), str(p.slot_number), str(p.course_offering_id),
                p.lab_group or "", str(p.teacher_id), str(p.room_id),
            )
    console.print(table)


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Ausführliche Log-Ausgabe.")
def cli(verbose: bool):
    """Routine-Client: Stundenpläne generieren, prüfen, festschreiben, exportieren.

    Starten Sie mit: python main.py setup
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def main():
    """Einstiegspunkt. Startet automatisch den Wizard beim ersten Aufruf."""
    from config.manager import ConfigManager
    mgr = ConfigManager()

    if len(sys.argv) == 1 and mgr.first_run_check():
        console.print(Panel(
            "[bold]Willkommen beim Routine-Client![/bold]\n\n"
            "Keine Konfiguration gefunden.\n"
            "Der Setup-Wizard wird jetzt gestartet...",
            border_style="cyan",
        ))
        sys.argv.append("setup")

    cli()


# Befehle registrieren
cli.add_command(cmd_setup)
cli.add_command(cmd_config)
cli.add_command(cmd_offerings)
cli.add_command(cmd_runs)
cli.add_command(cmd_generate)
cli.add_command(cmd_show)
cli.add_command(cmd_validate)
cli.add_command(cmd_commit)
cli.add_command(cmd_cancel)
cli.add_command(cmd_delete)
cli.add_command(cmd_export)
cli.add_command(cmd_browse)
cli.add_command(cmd_diff)


if __name__ == "__main__":
    main()
