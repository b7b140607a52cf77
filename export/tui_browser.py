"""Textual TUI Browser für einen Lauf.

Startet mit: python main.py browse <run_id>
Navigation: j/k oder ↑↓, Enter=Auswahl, /=Suche, q=Beenden, ?=Hilfe
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from models.reference_data import ReferenceData
    from models.schedule import ScheduleRun
    from models.timeslot import TimeGrid


class RoutineBrowserApp:
    """Textual TUI App für Wochen-, Raum- und Lehrkraft-Ansichten eines Laufs.

    Lazy-importiert textual um Startzeit zu minimieren.
    """

    def __init__(
        self,
        run: "ScheduleRun",
        reference: "ReferenceData",
        time_grid: Optional["TimeGrid"] = None,
    ) -> None:
        self.run_data = run
        self.reference = reference
        self.time_grid = time_grid

    def entity_items(self) -> list[tuple[str, Optional[int], str]]:
        """Auswählbare Ansichten: (Art, ID, Beschriftung)."""
        from analysis.aggregation import group_by_room, group_by_teacher

        entries = self.run_data.schedule_entries
        items: list[tuple[str, Optional[int], str]] = [("week", None, "Wochenplan")]
        for room_id, room_entries in group_by_room(entries).items():
            room = self.reference.resolve_room(room_entries[0])
            items.append(("room", room_id, f"Raum {room.name if room else room_id}"))
        for teacher_id, teacher_entries in group_by_teacher(entries).items():
            teacher = self.reference.resolve_teacher(teacher_entries[0])
            items.append(("teacher", teacher_id, teacher.name if teacher else f"Lehrkraft {teacher_id}"))
        return items

    def run(self) -> None:
        """Startet die TUI Anwendung."""
        from textual.app import App, ComposeResult
        from textual.widgets import (
            Header, Footer, ListView, ListItem, DataTable, Input, Label,
        )
        from textual.containers import Horizontal
        from textual.binding import Binding

        from export.helpers import EntryLabels
        from export.tui_renderer import (
            render_grid_rows, render_room_rows, render_teacher_rows,
        )

        routine_run = self.run_data
        labels = EntryLabels(self.reference, self.time_grid)
        all_items = self.entity_items()

        class _App(App):
            CSS = """
            ListView { width: 32; border: solid $primary; }
            DataTable { border: solid $secondary; }
            Input { dock: bottom; }
            """
            BINDINGS = [
                Binding("q", "quit", "Beenden"),
                Binding("escape", "quit", "Beenden"),
                Binding("/", "focus_search", "Suche"),
                Binding("?", "show_help", "Hilfe"),
            ]
            TITLE = f"Lauf #{routine_run.id} ({routine_run.status.value})"

            def compose(self) -> ComposeResult:
                yield Header()
                with Horizontal():
                    yield ListView(id="entity_list")
                    yield DataTable(id="schedule_table")
                yield Input(placeholder="Suche (Raum oder Lehrkraft)...", id="search")
                yield Footer()

            def on_mount(self) -> None:
                self._fill_list("")
                self._show_entity("week", None)

            def _fill_list(self, query: str) -> None:
                lv = self.query_one("#entity_list", ListView)
                lv.clear()
                self._items = [
                    item for item in all_items
                    if not query or query in item[2].lower()
                ]
                for _, _, text in self._items:
                    lv.append(ListItem(Label(text)))

            def on_list_view_selected(self, event: ListView.Selected) -> None:
                idx = event.list_view.index
                if idx is not None and 0 <= idx < len(self._items):
                    kind, eid, _ = self._items[idx]
                    self._show_entity(kind, eid)

            def on_input_changed(self, event: Input.Changed) -> None:
                self._fill_list(event.value.lower())

            def _show_entity(self, kind: str, eid: Optional[int]) -> None:
                table = self.query_one("#schedule_table", DataTable)
                table.clear(columns=True)
                day_names = [labels.time_grid.day_name(d) for d in labels.time_grid.days]
                table.add_columns("Slot", "Zeit", *day_names)

                entries = routine_run.schedule_entries
                if kind == "room":
                    rows = render_room_rows(eid, entries, labels)
                elif kind == "teacher":
                    rows = render_teacher_rows(eid, entries, labels)
                else:
                    rows = render_grid_rows(entries, labels, mode="day")
                for row in rows:
                    table.add_row(*row)

            def action_focus_search(self) -> None:
                self.query_one("#search", Input).focus()

            def action_show_help(self) -> None:
                self.notify(
                    "j/k: Navigation | Enter: Auswählen | /: Suche | q: Beenden",
                    title="Hilfe",
                )

        _App().run()
