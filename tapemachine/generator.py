"""
M2: random word generator.

Writes a uniformly random a/b word onto a blank aux tape, one coin flip per
letter of the block that follows the main-tape head, then walks the aux head
back to its leading Empty sentinel. Always accepts.
"""

from __future__ import annotations

import logging

from .machine import (
    EMPTY, LETTERS, AuxSymbol, Coin, DestroyOutput, InvariantError, MainSymbol,
    PreconditionError, attach_counter, ensure_fresh, ensure_live,
    finish_destroy, random_choice, require_blank, require_blank_left_of_head,
    scan_word,
)
from .tape import StepCounter, Tape

logger = logging.getLogger(__name__)

# State machine states
S_SCAN   = 0   # step main right, dispatch on what was read
S_EXTEND = 1   # step aux right and write a coin flip
S_REWIND = 2   # walk aux back to its sentinel
S_ACCEPT = 3

STATE_NAMES = {
    S_SCAN: "S_SCAN", S_EXTEND: "S_EXTEND", S_REWIND: "S_REWIND",
    S_ACCEPT: "S_ACCEPT",
}

TERMINAL_STATES = (S_ACCEPT,)


class Generator:
    """Draw a random aux word as long as the main tape's first block.

    Preconditions:
      main: head on Empty, only Empty to its left, followed by a non-empty
            a/b word ending in ``#`` (or in Empty when it is the last block).
      aux:  entirely blank.

    ``choose`` is the coin: a zero-argument callable, True writes A.
    """

    name = "M2"

    def __init__(self, main_tape: Tape[MainSymbol], aux_tape: Tape[AuxSymbol],
                 counter: StepCounter | None = None, choose: Coin | None = None):
        require_blank_left_of_head(main_tape, "M2 main tape")
        cells = main_tape.cells
        end = scan_word(cells, main_tape.head + 1, LETTERS)
        if end == main_tape.head + 1:
            raise PreconditionError("M2 main tape head must be followed by a non-empty word")
        if end < len(cells) and cells[end] not in (MainSymbol.HASH, EMPTY):
            raise PreconditionError("M2 main tape word must be followed by a # or the end of the input")
        require_blank(aux_tape, "M2 aux tape")

        attach_counter(counter, main_tape, aux_tape)
        self.main_tape = main_tape
        self.aux_tape = aux_tape
        self.choose = choose or random_choice
        self.state = S_SCAN
        self.ticks = 0

    def tick(self) -> bool:
        """One transition. Returns True while the machine is still running."""
        ensure_live(self)
        s = self.state
        if s in TERMINAL_STATES:
            return False
        self.ticks += 1
        logger.debug("%s %s", self.name, STATE_NAMES[s])

        if s == S_SCAN:
            self.main_tape.right()
            read = self.main_tape.read()
            if read in LETTERS:
                self.state = S_EXTEND
            elif read is MainSymbol.HASH or read is EMPTY:
                self.state = S_REWIND
            else:
                raise InvariantError(f"M2 read {read!r} from the main tape")

        elif s == S_EXTEND:
            self.aux_tape.right()
            self.aux_tape.write(AuxSymbol.A if self.choose() else AuxSymbol.B)
            self.state = S_SCAN

        elif s == S_REWIND:
            self.aux_tape.left()
            read = self.aux_tape.read()
            if read is EMPTY:
                self.state = S_ACCEPT
            elif read not in (AuxSymbol.A, AuxSymbol.B):
                raise InvariantError(f"M2 read {read!r} from the aux tape")

        if self.state in TERMINAL_STATES:
            logger.debug("%s %s", self.name, STATE_NAMES[self.state])
            return False
        return True

    def run(self) -> bool:
        ensure_fresh(self)
        while self.tick():
            pass
        return True

    def destroy(self) -> DestroyOutput:
        return finish_destroy(self)

    @property
    def state_name(self) -> str:
        return STATE_NAMES[self.state]
