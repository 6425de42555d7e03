"""
M3: one-shot probabilistic common-subsequence check.

Draws one random word with M2 (as long as the first block), then runs M1 on
every following block, rejecting on the first block that does not contain the
word as a subsequence. A rejection may be an unlucky draw; repeating the
check is up to the caller.

Children run on clones of the tapes. Their results are absorbed back, so the
orchestrator owns both tapes for the whole run.
"""

from __future__ import annotations

import logging

from .generator import Generator
from .machine import (
    EMPTY, LETTERS, AuxSymbol, Coin, DestroyOutput, InvariantError,
    MachineStateError, MainSymbol, PreconditionError, attach_counter,
    ensure_fresh, ensure_live, finish_destroy, random_choice, require_blank,
    require_blank_left_of_head, scan_word,
)
from .notation import decode_word
from .tape import StepCounter, Tape
from .verifier import Verifier

logger = logging.getLogger(__name__)

# State machine states
S_GENERATE = 0   # run M2, record the witness
S_BOUNDARY = 1   # read the main tape between blocks
S_VERIFY   = 2   # run M1 against the next block
S_ACCEPT   = 3
S_REJECT   = 4

STATE_NAMES = {
    S_GENERATE: "S_GENERATE", S_BOUNDARY: "S_BOUNDARY", S_VERIFY: "S_VERIFY",
    S_ACCEPT: "S_ACCEPT", S_REJECT: "S_REJECT",
}

TERMINAL_STATES = (S_ACCEPT, S_REJECT)


class Orchestrator:
    """Composes Generator and Verifier into a single randomized check.

    Preconditions:
      main: head on Empty with only Empty to its left, followed by one or
            more non-empty a/b blocks separated by ``#``; the last block is
            followed by Empty and nothing but Empty after it.
      aux:  entirely blank.
    """

    name = "M3"

    def __init__(self, main_tape: Tape[MainSymbol], aux_tape: Tape[AuxSymbol],
                 counter: StepCounter | None = None, choose: Coin | None = None):
        self._check_main(main_tape)
        require_blank(aux_tape, "M3 aux tape")

        attach_counter(counter, main_tape, aux_tape)
        self.main_tape = main_tape
        self.aux_tape = aux_tape
        self.counter = counter
        self.choose = choose or random_choice
        self.state = S_GENERATE
        self.ticks = 0
        self.blocks_verified = 0
        self._substring: str | None = None

    @staticmethod
    def _check_main(tape: Tape[MainSymbol]):
        require_blank_left_of_head(tape, "M3 main tape")
        cells = tape.cells
        index = tape.head
        while True:
            end = scan_word(cells, index + 1, LETTERS)
            if end == index + 1:
                raise PreconditionError("M3 main tape blocks must be non-empty")
            if end < len(cells) and cells[end] is MainSymbol.HASH:
                index = end
                continue
            break
        if any(cell is not EMPTY for cell in cells[end:]):
            raise PreconditionError("M3 main tape must only have empty cells after the last block")

    @property
    def substring(self) -> str:
        """The witness drawn by the generator phase."""
        if self._substring is None:
            raise MachineStateError("M3 has not drawn a witness yet")
        return self._substring

    @property
    def witness(self) -> str | None:
        """The drawn witness, or None before the generator phase."""
        return self._substring

    # -------------------------------------------------------------------
    # Children
    # -------------------------------------------------------------------

    def _absorb(self, output: DestroyOutput):
        self.main_tape = output.main_tape
        self.aux_tape = output.aux_tape

    def _generate(self):
        m2 = Generator(self.main_tape.clone(), self.aux_tape.clone(),
                       counter=self.counter, choose=self.choose)
        m2.run()
        self._absorb(m2.destroy())

        if self.aux_tape.peek() is not EMPTY:
            raise InvariantError("M2 did not return the aux head to its sentinel")
        substring = decode_word(self.aux_tape)
        if not substring:
            raise InvariantError("M2 produced an empty witness")
        self._substring = substring
        logger.debug("M3 witness %s", substring)

    def _verify(self) -> bool:
        m1 = Verifier(self.main_tape.clone(), self.aux_tape.clone(),
                      counter=self.counter)
        verdict = m1.run()
        self._absorb(m1.destroy())
        self.blocks_verified += 1
        return verdict

    # -------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------

    def tick(self) -> bool:
        """One transition. Child machines run to completion inside one tick."""
        ensure_live(self)
        s = self.state
        if s in TERMINAL_STATES:
            return False
        self.ticks += 1
        logger.debug("%s %s", self.name, STATE_NAMES[s])

        if s == S_GENERATE:
            self._generate()
            self.state = S_BOUNDARY

        elif s == S_BOUNDARY:
            read = self.main_tape.read()
            if read is MainSymbol.HASH:
                self.state = S_VERIFY
            elif read is EMPTY:
                self.state = S_ACCEPT
            else:
                raise InvariantError(f"M3 expected a block boundary, read {read!r}")

        elif s == S_VERIFY:
            self.state = S_BOUNDARY if self._verify() else S_REJECT

        if self.state in TERMINAL_STATES:
            logger.debug("%s %s", self.name, STATE_NAMES[self.state])
            return False
        return True

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
