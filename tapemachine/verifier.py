"""
M1: deterministic subsequence verifier.

Checks whether the word written on the aux tape is a subsequence of the block
that follows the main-tape head. Both heads are left advanced afterwards: the
aux head back on its leading Empty sentinel, the main head on the block's
closing delimiter (on accept) or wherever the search ran out (on reject).
"""

from __future__ import annotations

import logging

from .machine import (
    EMPTY, LETTERS, AuxSymbol, DestroyOutput, InvariantError, MainSymbol,
    PreconditionError, attach_counter, ensure_fresh, ensure_live,
    finish_destroy, require_blank_left_of_head, scan_word,
)
from .tape import StepCounter, Tape

logger = logging.getLogger(__name__)

# State machine states
S_NEXT_LETTER      = 0   # step aux right, dispatch on the letter read
S_SEEK_A           = 1   # scan main right for an A
S_SEEK_B           = 2   # scan main right for a B
S_REWIND_MATCHED   = 3   # word exhausted: walk aux back to its sentinel
S_REWIND_UNMATCHED = 4   # block exhausted first: walk aux back, then reject
S_DRAIN            = 5   # skip the rest of the block
S_ACCEPT           = 6
S_REJECT           = 7

STATE_NAMES = {
    S_NEXT_LETTER: "S_NEXT_LETTER", S_SEEK_A: "S_SEEK_A", S_SEEK_B: "S_SEEK_B",
    S_REWIND_MATCHED: "S_REWIND_MATCHED", S_REWIND_UNMATCHED: "S_REWIND_UNMATCHED",
    S_DRAIN: "S_DRAIN", S_ACCEPT: "S_ACCEPT", S_REJECT: "S_REJECT",
}

TERMINAL_STATES = (S_ACCEPT, S_REJECT)

_AUX_LETTERS = (AuxSymbol.A, AuxSymbol.B)
_BLOCK_END = (MainSymbol.HASH, EMPTY)


class Verifier:
    """Is the aux word a subsequence of the main tape's current block?

    Preconditions:
      main: head on the ``#`` preceding a non-empty block of a/b.
      aux:  head on Empty with only Empty to its left, a non-empty word
            immediately to its right, only Empty beyond the word.
    """

    name = "M1"

    def __init__(self, main_tape: Tape[MainSymbol], aux_tape: Tape[AuxSymbol],
                 counter: StepCounter | None = None):
        self._check_main(main_tape)
        self._check_aux(aux_tape)
        attach_counter(counter, main_tape, aux_tape)
        self.main_tape = main_tape
        self.aux_tape = aux_tape
        self.state = S_NEXT_LETTER
        self.ticks = 0

    @staticmethod
    def _check_main(tape: Tape[MainSymbol]):
        cells = tape.cells
        if cells[tape.head] is not MainSymbol.HASH:
            raise PreconditionError("M1 main tape head must be on a #")
        end = scan_word(cells, tape.head + 1, LETTERS)
        if end == tape.head + 1:
            raise PreconditionError("M1 main tape head must precede a non-empty block")

    @staticmethod
    def _check_aux(tape: Tape[AuxSymbol]):
        require_blank_left_of_head(tape, "M1 aux tape")
        cells = tape.cells
        end = scan_word(cells, tape.head + 1, _AUX_LETTERS)
        if end == tape.head + 1:
            raise PreconditionError("M1 aux tape must hold a non-empty word after the head")
        if any(cell is not EMPTY for cell in cells[end:]):
            raise PreconditionError("M1 aux tape must only have empty cells after the word")

    # -------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------

    def tick(self) -> bool:
        """One transition. Returns True while the machine is still running."""
        ensure_live(self)
        s = self.state
        if s in TERMINAL_STATES:
            return False
        self.ticks += 1
        logger.debug("%s %s", self.name, STATE_NAMES[s])

        if s == S_NEXT_LETTER:
            self.aux_tape.right()
            read = self.aux_tape.read()
            if read is AuxSymbol.A:
                self.state = S_SEEK_A
            elif read is AuxSymbol.B:
                self.state = S_SEEK_B
            elif read is EMPTY:
                self.state = S_REWIND_MATCHED
            else:
                raise InvariantError(f"M1 read {read!r} from the aux tape")

        elif s in (S_SEEK_A, S_SEEK_B):
            wanted = MainSymbol.A if s == S_SEEK_A else MainSymbol.B
            self.main_tape.right()
            read = self.main_tape.read()
            if read is wanted:
                self.state = S_NEXT_LETTER
            elif read in LETTERS:
                pass
            elif read in _BLOCK_END:
                self.state = S_REWIND_UNMATCHED
            else:
                raise InvariantError(f"M1 read {read!r} from the main tape")

        elif s in (S_REWIND_MATCHED, S_REWIND_UNMATCHED):
            self.aux_tape.left()
            read = self.aux_tape.read()
            if read is EMPTY:
                self.state = S_DRAIN if s == S_REWIND_MATCHED else S_REJECT
            elif read not in _AUX_LETTERS:
                raise InvariantError(f"M1 read {read!r} from the aux tape")

        elif s == S_DRAIN:
            self.main_tape.right()
            read = self.main_tape.read()
            if read in _BLOCK_END:
                self.state = S_ACCEPT
            elif read not in LETTERS:
                raise InvariantError(f"M1 read {read!r} from the main tape")

        if self.state in TERMINAL_STATES:
            logger.debug("%s %s", self.name, STATE_NAMES[self.state])
            return False
        return True

    # -------------------------------------------------------------------
    # Run to completion
    # -------------------------------------------------------------------

    def run(self) -> bool:
        """Run until S_ACCEPT or S_REJECT. Returns the verdict."""
        ensure_fresh(self)
        while self.tick():
            pass
        return self.state == S_ACCEPT

    def destroy(self) -> DestroyOutput:
        return finish_destroy(self)

    @property
    def state_name(self) -> str:
        return STATE_NAMES[self.state]
