from __future__ import annotations

from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Input, RichLog, Static

from noirnote import config
from noirnote.deduction.grid import GRID_SIZE
from noirnote.domain.enums import Axis, DisplayMark, GridPair, SessionStatus
from noirnote.persistence.keys import GLOBAL_SCOPE
from noirnote.runtime import GameRuntime
from noirnote.session.controller import SessionController
from noirnote.util.time import format_duration

_MARK_GLYPHS = {
    DisplayMark.EMPTY: ".",
    DisplayMark.CROSSED: "X",
    DisplayMark.SUSPECTED: "?",
    DisplayMark.CONFIRMED: "V",
    DisplayMark.DERIVED_CROSSED: "x",
}

_PAIR_TITLES = {
    GridPair.SUSPECT_LOCATION: "Suspect x Location",
    GridPair.SUSPECT_WEAPON: "Suspect x Weapon",
    GridPair.LOCATION_WEAPON: "Location x Weapon",
}

_AXIS_ALIASES = {
    "s": Axis.SUSPECT,
    "suspect": Axis.SUSPECT,
    "l": Axis.LOCATION,
    "location": Axis.LOCATION,
    "w": Axis.WEAPON,
    "weapon": Axis.WEAPON,
}


class CaseApp(App):
    TITLE = "NoirNote"
    BINDINGS = [
        ("f6", "focus_log", "Focus log"),
        ("f8", "focus_input", "Focus input"),
    ]
    CSS = """
    Screen {
        layout: vertical;
    }
    #header {
        height: auto;
        padding: 1 1;
    }
    #grids {
        height: auto;
    }
    .grid {
        width: 1fr;
        border: solid $secondary;
        padding: 0 1;
    }
    #log {
        height: 1fr;
        border: solid $secondary;
        padding: 0 1;
    }
    #command {
        height: 3;
        padding: 0 1;
    }
    """

    def __init__(self, runtime: GameRuntime, case_id: str) -> None:
        super().__init__()
        self.runtime = runtime
        self.case_id = case_id
        self.controller: SessionController = runtime.start_session(case_id)

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static("", id="header")
            with Horizontal(id="grids"):
                for pair in GridPair:
                    yield Static("", id=f"grid_{pair.value}", classes="grid")
            yield RichLog(id="log", wrap=True)
            yield Input(placeholder="c SL 0 1 | pick s <id> | submit | rank [case] | history | stats | q", id="command")

    def on_mount(self) -> None:
        self._refresh()
        self._write(f"Case {self.case_id} ({self.controller.case.difficulty.value}).")
        for axis in Axis:
            ids = ", ".join(self.controller.case.entity_ids(axis))
            self._write(f"{axis.value}s: {ids}")
        self.set_interval(0.25, self._tick)
        self.set_interval(5.0, self._retry_sync)
        self.query_one("#command", Input).focus()

    def on_unmount(self) -> None:
        self.controller.autosave.flush()
        self.runtime.tasks.run_pending()
        self.runtime.gateway.flush()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        value = event.value.strip()
        event.input.value = ""
        if not value:
            return
        if value.lower() == "q":
            self.exit()
            return
        self._handle_command(value)
        self._refresh()

    def action_focus_log(self) -> None:
        self.query_one("#log", RichLog).focus()

    def action_focus_input(self) -> None:
        self.query_one("#command", Input).focus()

    def _write(self, message: str) -> None:
        self.query_one("#log", RichLog).write(message)

    def _tick(self) -> None:
        self.controller.poll()
        self.runtime.tasks.run_pending()
        self._refresh_header()

    def _retry_sync(self) -> None:
        if self.runtime.gateway.pending:
            self.runtime.gateway.flush()

    def _handle_command(self, value: str) -> None:
        parts = value.split()
        command = parts[0].lower()
        args = parts[1:]
        if command in ("c", "cycle"):
            self._cycle(args)
        elif command == "pick" and len(args) == 2 and args[0].lower() in _AXIS_ALIASES:
            axis = _AXIS_ALIASES[args[0].lower()]
            if args[1] not in self.controller.case.entity_ids(axis):
                self._write(f"Unknown {axis.value}: {args[1]}")
                return
            self.controller.board.select(axis, args[1])
            self._write(f"Final {axis.value}: {args[1]}")
        elif command == "submit":
            self._submit()
        elif command == "rank":
            self._show_ranking(args[0] if args else GLOBAL_SCOPE)
        elif command == "stats":
            self._show_stats()
        elif command == "history":
            self._show_history()
        else:
            self._write(f"Unknown command: {value}")

    def _cycle(self, args: list[str]) -> None:
        if len(args) == 3 and args[0].upper() in {pair.value for pair in GridPair}:
            if not (args[1].isdigit() and args[2].isdigit()):
                self._write("Row and column must be numbers.")
                return
            row, col = int(args[1]), int(args[2])
            if not (row < GRID_SIZE and col < GRID_SIZE):
                self._write("Row and column must be 0-2.")
                return
            changed = self.controller.cycle(GridPair(args[0].upper()), row, col)
        elif len(args) == 2:
            known = {entity_id for axis in Axis for entity_id in self.controller.case.entity_ids(axis)}
            if not set(args) <= known:
                self._write("Unknown entity id.")
                return
            try:
                changed = self.controller.cycle_entities(args[0], args[1])
            except AssertionError:
                self._write("Those two entities share an axis.")
                return
        else:
            self._write("Usage: c <SL|SW|LW> <row> <col>  or  c <id> <id>")
            return
        if not changed:
            self._write("That cell is ruled out by a confirmation.")

    def _submit(self) -> None:
        if self.controller.status == SessionStatus.FINISHED:
            self._write("This case is already closed.")
            return
        outcome = self.controller.submit()
        if outcome is None:
            self._write("Pick a suspect, location, and weapon first.")
            return
        duration = format_duration(outcome.duration_ms)
        if outcome.is_win:
            self._write(f"Case closed in {duration} after {outcome.attempts} attempt(s). Score {outcome.score}.")
        else:
            penalty = outcome.penalty_ms // 60000
            self._write(f"Wrong report. Penalty now +{penalty}m, clock at {duration}.")

    def _show_ranking(self, scope: str) -> None:
        entries = self.runtime.reconciler.ranking(scope)
        if not entries:
            self._write(f"No entries for {scope}.")
            return
        self._write(f"Leaderboard: {scope}")
        for entry in entries[:10]:
            self._write(f"{entry.rank:>3}. {entry.display_name:<20} {entry.score}")

    def _show_stats(self) -> None:
        stats = self.runtime.aggregator.ensure_fresh(self.controller.player.id)
        if stats is None:
            self._write("No solved cases yet.")
            return
        self._write(
            f"Score {stats.total_score} | solved {stats.solved_cases} | "
            f"avg {format_duration(stats.average_time_ms)} | attempts {stats.total_attempts}"
        )

    def _show_history(self) -> None:
        records = self.runtime.ledger.history(
            self.controller.player.id,
            limit=config.HISTORY_LIMIT,
            descending=True,
        )
        if not records:
            self._write("No reports filed yet.")
            return
        self._write(f"Last {len(records)} report(s), newest first:")
        for record in records:
            result = "closed" if record.is_win else "wrong "
            points = record.score if record.score is not None else "-"
            self._write(
                f"{record.case_id:<12} {result} {format_duration(record.duration_ms)} "
                f"attempt {record.attempts} score {points}"
            )

    def _refresh(self) -> None:
        self._refresh_header()
        display = self.controller.board.display()
        for pair in GridPair:
            self.query_one(f"#grid_{pair.value}", Static).update(self._grid_text(pair, display[pair]))

    def _refresh_header(self) -> None:
        header = self.query_one("#header", Static)
        selections = self.controller.board.selections
        picks = " / ".join(selections.get(axis, "-") for axis in Axis)
        lines = [
            f"Case: {self.case_id}  Time {format_duration(self.controller.elapsed_ms())}  "
            f"Attempts {self.controller.attempts}  Status {self.controller.status.value}",
            f"Report: {picks}",
        ]
        if self.runtime.gateway.pending:
            lines.append(f"Offline: {self.runtime.gateway.pending} change(s) waiting to sync")
        header.update("\n".join(lines))

    def _grid_text(self, pair: GridPair, rows: list[list[DisplayMark]]) -> str:
        row_axis, col_axis = pair.axes
        row_ids = self.controller.case.entity_ids(row_axis)
        col_ids = self.controller.case.entity_ids(col_axis)
        lines = [_PAIR_TITLES[pair], "      " + " ".join(f"{i}" for i in range(len(col_ids)))]
        for index, line in enumerate(rows):
            glyphs = " ".join(_MARK_GLYPHS[mark] for mark in line)
            lines.append(f"{index} {row_ids[index][-3:]:>3} {glyphs}")
        return "\n".join(lines)
