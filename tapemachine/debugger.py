"""
Textual TUI debugger for the subsequence machines.

Single-steps M1, M2 or M3 and shows both tapes, the current state and the
step counter after every transition. M3 runs a whole child machine per step.

Usage:
    tapemachine debug aba#aba#aba
    tapemachine debug abab --machine m1 --word aa
    tapemachine debug abba --machine m2 --seed 3 --run
"""

from __future__ import annotations

from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import ScrollableContainer
from textual.widgets import Footer, RichLog, Static

from .generator import Generator
from .machine import (
    InvariantError, MachineStateError, PreconditionError, TuringMachine, seeded_choice,
)
from .notation import generator_tapes, orchestrator_tapes, render, verifier_tapes
from .orchestrator import Orchestrator
from .tape import StepCounter
from .verifier import Verifier


def _esc(text: str) -> str:
    """Escape Rich markup characters in text."""
    return text.replace("[", "\\[")


def build_machine(kind: str, text: str, word: str | None = None,
                  seed: int | None = None) -> tuple[TuringMachine, StepCounter]:
    """Lay out the tapes for ``kind`` (m1, m2 or m3) and construct the machine.

    Returns ``(machine, counter)``. For m1 ``text`` is the block and ``word``
    the aux word; for m2 ``text`` is the block; for m3 the full input.
    """
    counter = StepCounter()
    if kind == "m1":
        if not word:
            raise PreconditionError("M1 needs an aux word")
        main, aux = verifier_tapes(text, word)
        return Verifier(main, aux, counter=counter), counter
    if kind == "m2":
        main, aux = generator_tapes(text)
        return Generator(main, aux, counter=counter, choose=seeded_choice(seed)), counter
    if kind == "m3":
        main, aux = orchestrator_tapes(text)
        return Orchestrator(main, aux, counter=counter, choose=seeded_choice(seed)), counter
    raise PreconditionError(f"Unknown machine {kind!r}")


def describe(machine: TuringMachine, counter: StepCounter) -> str:
    """One-line summary used by the log panel."""
    return (f"{machine.name} {machine.state_name:<20s} ticks={machine.ticks} "
            f"steps={counter.value}  main={render(machine.main_tape)}  "
            f"aux={render(machine.aux_tape)}")


# ---------------------------------------------------------------------------
# CSS
# ---------------------------------------------------------------------------

DEBUGGER_CSS = """
Screen {
    layout: grid;
    grid-size: 2 4;
    grid-columns: 1fr 1fr;
    grid-rows: auto auto 1fr auto;
}

.panel {
    border: solid $accent;
    border-title-align: left;
    overflow-y: auto;
    height: 100%;
}

#main-panel  { column-span: 2; }
#aux-panel   { column-span: 2; }
#state-panel { column-span: 1; }
#log-panel   { column-span: 1; }

Footer {
    column-span: 2;
}
"""


# ---------------------------------------------------------------------------
# Panel widgets
# ---------------------------------------------------------------------------

class MainTapePanel(ScrollableContainer):
    BORDER_TITLE = "Main tape"

    def compose(self) -> ComposeResult:
        yield Static("", id="main-content")


class AuxTapePanel(ScrollableContainer):
    BORDER_TITLE = "Aux tape"

    def compose(self) -> ComposeResult:
        yield Static("", id="aux-content")


class StatePanel(ScrollableContainer):
    """Machine state and counters."""
    BORDER_TITLE = "Machine State"

    def compose(self) -> ComposeResult:
        yield Static("", id="state-content")


class LogPanel(ScrollableContainer):
    """One line per transition."""
    BORDER_TITLE = "Transitions"

    def compose(self) -> ComposeResult:
        yield RichLog(id="transition-log", markup=True, wrap=False)


# ---------------------------------------------------------------------------
# Main debugger app
# ---------------------------------------------------------------------------

class TapeDebugger(App):
    """Textual TUI debugger for a single machine run."""

    CSS = DEBUGGER_CSS
    TITLE = "Tape Machine Debugger"

    BINDINGS = [
        Binding("s", "step_1", "Step"),
        Binding("space", "step_1", "Step", show=False),
        Binding("n", "step_10", "x10"),
        Binding("r", "run_to_end", "Run"),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(self, machine: TuringMachine, counter: StepCounter, auto_run: bool = False):
        super().__init__()
        self.machine = machine
        self.counter = counter
        self.auto_run = auto_run
        self.finished = False

    def compose(self) -> ComposeResult:
        yield MainTapePanel(id="main-panel", classes="panel")
        yield AuxTapePanel(id="aux-panel", classes="panel")
        yield StatePanel(id="state-panel", classes="panel")
        yield LogPanel(id="log-panel", classes="panel")
        yield Footer()

    def on_mount(self) -> None:
        self.refresh_panels()
        self._log(describe(self.machine, self.counter))
        if self.auto_run:
            self.action_run_to_end()

    # -------------------------------------------------------------------
    # Panel refresh
    # -------------------------------------------------------------------

    def refresh_panels(self) -> None:
        m = self.machine
        self.query_one("#main-content", Static).update(_esc(render(m.main_tape)))
        self.query_one("#aux-content", Static).update(_esc(render(m.aux_tape)))

        text = (
            f"[bold]Machine:[/bold] {m.name}    [bold]State:[/bold] {m.state_name}\n"
            f"[bold]Ticks:[/bold] {m.ticks}    [bold]Steps:[/bold] {self.counter.value}\n"
            f"[bold]Main head:[/bold] {m.main_tape.head}  "
            f"[bold]Aux head:[/bold] {m.aux_tape.head}"
        )
        if isinstance(m, Orchestrator):
            witness = m.witness or "(not drawn)"
            text += (f"\n[bold]Witness:[/bold] {witness}  "
                     f"[bold]Blocks verified:[/bold] {m.blocks_verified}")
        if self.finished:
            text += "\n[bold reverse] HALTED [/bold reverse]"
        self.query_one("#state-content", Static).update(text)

    def _log(self, line: str) -> None:
        self.query_one("#transition-log", RichLog).write(_esc(line))

    # -------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------

    def _report_error(self, err: Exception) -> None:
        self._log(f"[ERROR] {err}")
        self.finished = True
        self.refresh_panels()

    def _step(self) -> bool:
        running = self.machine.tick()
        self._log(describe(self.machine, self.counter))
        if not running:
            self.finished = True
        return running

    def _do_steps(self, count: int) -> None:
        if self.finished:
            return
        try:
            for _ in range(count):
                if not self._step():
                    break
        except (InvariantError, MachineStateError) as e:
            self._report_error(e)
            return
        self.refresh_panels()

    def action_step_1(self) -> None:
        self._do_steps(1)

    def action_step_10(self) -> None:
        self._do_steps(10)

    @work(thread=True)
    def action_run_to_end(self) -> None:
        """Run to completion in a background thread."""
        try:
            while not self.finished:
                running = self.machine.tick()
                self.call_from_thread(self._log, describe(self.machine, self.counter))
                if not running:
                    self.finished = True
        except (InvariantError, MachineStateError) as e:
            self.call_from_thread(self._report_error, e)
            return
        self.call_from_thread(self.refresh_panels)
