"""
Shared machine contract for the subsequence machines.

Alphabets, the construct/run/destroy capability, the coin source and the
tape-shape checks each machine runs on construction.
"""

from __future__ import annotations

import enum
import random
from typing import Callable, NamedTuple, Protocol

from .tape import EMPTY, PreconditionError, StepCounter, Tape


class InvariantError(RuntimeError):
    """A machine reached a tape shape its transitions do not cover."""


class MachineStateError(RuntimeError):
    """A machine instance was used outside its single-run lifecycle."""


class MainSymbol(enum.Enum):
    A = "a"
    B = "b"
    HASH = "#"

    def __repr__(self) -> str:
        return f"MainSymbol.{self.name}"


class AuxSymbol(enum.Enum):
    A = "a"
    B = "b"

    def __repr__(self) -> str:
        return f"AuxSymbol.{self.name}"


LETTERS = (MainSymbol.A, MainSymbol.B)


class DestroyOutput(NamedTuple):
    main_tape: Tape[MainSymbol]
    aux_tape: Tape[AuxSymbol]


class TuringMachine(Protocol):
    """Construct from two tapes, run once to a verdict, destroy to get them back."""

    name: str
    state: int
    ticks: int
    main_tape: Tape[MainSymbol] | None
    aux_tape: Tape[AuxSymbol] | None

    def __init__(self, main_tape: Tape[MainSymbol], aux_tape: Tape[AuxSymbol],
                 **kwargs): ...

    @property
    def state_name(self) -> str: ...

    def tick(self) -> bool: ...

    def run(self) -> bool: ...

    def destroy(self) -> DestroyOutput: ...


# ---------------------------------------------------------------------------
# Coin
# ---------------------------------------------------------------------------

Coin = Callable[[], bool]


def random_choice() -> bool:
    """Fair coin from the module-level generator. True writes A."""
    return random.getrandbits(1) == 1


def seeded_choice(seed: int | None) -> Coin:
    rng = random.Random(seed)
    return lambda: rng.getrandbits(1) == 1


def scripted_choice(flips) -> Coin:
    """Coin replaying a fixed sequence; raises once the sequence runs out."""
    it = iter(flips)

    def choose() -> bool:
        try:
            return bool(next(it))
        except StopIteration:
            raise InvariantError("Scripted coin ran out of flips") from None

    return choose


# ---------------------------------------------------------------------------
# Shape checks (inspect cells directly so the step counter is untouched)
# ---------------------------------------------------------------------------

def require_blank(tape: Tape, what: str):
    if any(cell is not EMPTY for cell in tape.cells):
        raise PreconditionError(f"{what} must be blank")


def require_blank_left_of_head(tape: Tape, what: str):
    cells = tape.cells
    if cells[tape.head] is not EMPTY:
        raise PreconditionError(f"{what} head must be empty")
    if any(cell is not EMPTY for cell in cells[:tape.head]):
        raise PreconditionError(
            f"{what} must only have empty cells on the left of the head")


def scan_word(cells, start: int, letters) -> int:
    """Index of the first cell at or after ``start`` that is not in ``letters``.

    Cells past the end of the list read as EMPTY, so the returned index may be
    ``len(cells)``.
    """
    index = start
    while index < len(cells) and cells[index] in letters:
        index += 1
    return index


def finish_destroy(machine) -> DestroyOutput:
    """Hand a machine's tapes to the caller and detach them from the instance."""
    ensure_live(machine)
    output = DestroyOutput(machine.main_tape, machine.aux_tape)
    machine.main_tape = None
    machine.aux_tape = None
    return output


def attach_counter(counter: StepCounter | None, *tapes: Tape):
    if counter is None:
        return
    for tape in tapes:
        tape.attach(counter)


def ensure_live(machine):
    if machine.main_tape is None:
        raise MachineStateError(f"{type(machine).__name__} was already destroyed")


def ensure_fresh(machine):
    """A machine runs once; a second run() has nothing defined to do."""
    ensure_live(machine)
    if machine.ticks:
        raise MachineStateError(f"{type(machine).__name__} cannot be run more than once")
