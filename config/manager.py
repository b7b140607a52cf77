"""Konfigurationsmanager: Laden, Speichern und Validieren der Client-Konfiguration.

Nutzt ruamel.yaml für YAML-Serialisierung mit Kommentaren.
"""

import json
from datetime import date
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.schema import ClientConfig

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


# ─── YAML-KOMMENTAR-AUFBAU ───

_YAML_HEADER = f"""\
# ============================================
# Routine-Generator: Client-Konfiguration
# Version: 1.0
# Erstellt: {date.today().isoformat()}
# ============================================
"""

_SECTION_COMMENTS = {
    "time_grid": (
        "Zeitraster",
        "Slots mit Uhrzeiten und Pausen. Pausen sind nie buchbar.",
    ),
    "api": (
        "Server",
        "Die Generierung braucht ein deutlich höheres Zeitlimit als normale Anfragen.",
    ),
    "generation": (
        "Generierung",
        "Standardwerte, die unverändert an den Solver gehen.",
    ),
    "export": (
        "Export",
        None,
    ),
}


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "client_config.yaml"

    def first_run_check(self) -> bool:
        """Gibt True zurück wenn noch keine Config existiert (Erstaufruf)."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Laden ───

    def load(self, path: Optional[Path] = None) -> ClientConfig:
        """Lade Config aus YAML. Validiert automatisch via Pydantic."""
        target = path or self.DEFAULT_CONFIG
        if not target.exists():
            raise FileNotFoundError(
                f"Konfigurationsdatei nicht gefunden: {target}\n"
                f"Führen Sie 'python main.py setup' aus."
            )
        with open(target, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        try:
            return ClientConfig.model_validate(dict(raw or {}))
        except Exception as e:
            raise ValueError(
                f"Konfigurationsdatei ungültig: {target}\n"
                f"Pydantic-Fehler: {e}"
            ) from e

    # ─── Speichern ───

    def save(self, config: ClientConfig, path: Optional[Path] = None) -> None:
        """Speichere Config als YAML mit Abschnitts-Kommentaren."""
        target = path or self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(config)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(data, f)

        console.print(f"[green]✓[/green] Konfiguration gespeichert: {target}")

    def _build_commented_yaml(self, config: ClientConfig) -> CommentedMap:
        """Baut die YAML-Struktur mit Kommentaren auf."""
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            if field not in cm:
                continue
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )

        return cm

    # ─── Interaktives Bearbeiten ───

    def edit_interactive(self, config: ClientConfig) -> ClientConfig:
        """Interaktives Bearbeitungsmenü; jeder Punkt startet den Wizard-Schritt neu."""
        from config import wizard

        while True:
            console.print()
            console.print(Panel(
                "[bold]Konfiguration bearbeiten[/bold]",
                border_style="cyan",
            ))
            console.print("  [bold]1.[/bold] Zeitraster (Slots, Pausen, Tage)")
            console.print("  [bold]2.[/bold] Server-Verbindung und Zeitlimits")
            console.print("  [bold]3.[/bold] Generierungs-Einstellungen")
            console.print("  [bold]4.[/bold] Export")
            console.print("  [bold]0.[/bold] Speichern & Zurück")

            choice = Prompt.ask("\nAuswahl", default="0")

            if choice == "1":
                console.print("\n[bold]Aktuelles Zeitraster:[/bold]")
                wizard.show_time_grid_table(config.time_grid)
                config = config.model_copy(update={"time_grid": wizard._wizard_time_grid()})
            elif choice == "2":
                config = config.model_copy(update={"api": wizard._wizard_api()})
            elif choice == "3":
                config = config.model_copy(update={"generation": wizard._wizard_generation()})
            elif choice == "4":
                config = config.model_copy(update={"export": wizard._wizard_export()})
            elif choice == "0":
                self.save(config)
                break
            else:
                console.print("[yellow]Ungültige Auswahl.[/yellow]")

        return config
