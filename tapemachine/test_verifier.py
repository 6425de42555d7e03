"""
Tests for M1, the subsequence verifier.

Verdicts are checked against reference.is_subsequence over every block and
word up to length four, and step counts against the closed-form formula.
"""

from __future__ import annotations

import itertools
import logging

import pytest

from tapemachine.machine import (
    AuxSymbol, MachineStateError, MainSymbol, PreconditionError,
)
from tapemachine.notation import render, verifier_tapes
from tapemachine.reference import is_subsequence, verifier_steps
from tapemachine.tape import EMPTY, StepCounter, Tape, head, plain
from tapemachine.verifier import S_ACCEPT, S_REJECT, Verifier

A, B, HASH = MainSymbol.A, MainSymbol.B, MainSymbol.HASH


def _words(max_len: int):
    for n in range(1, max_len + 1):
        for letters in itertools.product("ab", repeat=n):
            yield "".join(letters)


def _run(block: str, word: str):
    machine = Verifier(*verifier_tapes(block, word))
    verdict = machine.run()
    return verdict, machine.destroy()


def test_accepts_scattered_subsequence():
    verdict, output = _run("abab", "aa")
    assert verdict is True
    assert render(output.main_tape) == "#abab[#]"
    assert render(output.aux_tape) == "[_]aa_"


def test_rejects_missing_letter():
    verdict, output = _run("aa", "bb")
    assert verdict is False
    assert render(output.main_tape) == "#aa[#]"
    assert render(output.aux_tape) == "[_]bb_"


def test_word_longer_than_block():
    verdict, _ = _run("ab", "abb")
    assert verdict is False


def test_block_ending_in_empty():
    main = Tape([head(HASH), plain(B), plain(A)])
    aux = Tape([head(EMPTY), plain(AuxSymbol.A), plain(EMPTY)])
    machine = Verifier(main, aux)
    assert machine.run() is True
    output = machine.destroy()
    assert output.main_tape.peek() is EMPTY
    assert output.main_tape.cells == (HASH, B, A, EMPTY)


def test_only_current_block_is_searched():
    main = Tape([head(HASH), plain(B), plain(HASH), plain(A)])
    aux = Tape([head(EMPTY), plain(AuxSymbol.A)])
    machine = Verifier(main, aux)
    assert machine.run() is False
    assert machine.state == S_REJECT
    assert machine.main_tape.head == 2


@pytest.mark.parametrize("block", list(_words(4)))
def test_matches_reference(block):
    for word in _words(4):
        verdict, output = _run(block, word)
        assert verdict == is_subsequence(block, word), (block, word)
        # aux head always back on its sentinel
        assert output.aux_tape.head == 0
        assert output.aux_tape.peek() is EMPTY


@pytest.mark.parametrize("n", range(1, 31))
def test_step_count_formula(n):
    for m in range(1, 31):
        steps = StepCounter()
        main, aux = verifier_tapes("a" * n, "a" * m)
        machine = Verifier(main, aux, counter=steps)
        assert machine.run() == (m <= n)
        assert steps.value == verifier_steps(n, m), (n, m)


def test_construction_does_not_count_steps():
    steps = StepCounter()
    Verifier(*verifier_tapes("abab", "ab"), counter=steps)
    assert steps.value == 0


# ---------------------------------------------------------------------------
# Preconditions
# ---------------------------------------------------------------------------

def _aux(*cells):
    return Tape([head(EMPTY)] + [plain(c) for c in cells])


@pytest.mark.parametrize("main, message", [
    (Tape([head(A), plain(HASH)]), "must be on a #"),
    (Tape([head(HASH), plain(HASH), plain(A)]), "non-empty block"),
    (Tape([head(HASH)]), "non-empty block"),
])
def test_main_preconditions(main, message):
    with pytest.raises(PreconditionError, match=message):
        Verifier(main, _aux(AuxSymbol.A))


@pytest.mark.parametrize("aux, message", [
    (Tape([head(AuxSymbol.A), plain(AuxSymbol.A)]), "head must be empty"),
    (Tape([plain(AuxSymbol.B), head(EMPTY), plain(AuxSymbol.A)]), "left of the head"),
    (Tape([head(EMPTY)]), "non-empty word"),
    (Tape([head(EMPTY), plain(EMPTY), plain(AuxSymbol.A)]), "non-empty word"),
    (Tape([head(EMPTY), plain(AuxSymbol.A), plain(EMPTY), plain(AuxSymbol.B)]),
     "empty cells after the word"),
])
def test_aux_preconditions(aux, message):
    main = Tape([head(HASH), plain(A), plain(HASH)])
    with pytest.raises(PreconditionError, match=message):
        Verifier(main, aux)


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

def test_single_run_per_instance():
    machine = Verifier(*verifier_tapes("ab", "a"))
    assert machine.run() is True
    with pytest.raises(MachineStateError):
        machine.run()


def test_destroy_hands_over_tapes_once():
    main, aux = verifier_tapes("ab", "b")
    machine = Verifier(main, aux)
    machine.run()
    output = machine.destroy()
    assert output.main_tape is main
    assert output.aux_tape is aux
    with pytest.raises(MachineStateError):
        machine.destroy()
    with pytest.raises(MachineStateError):
        machine.tick()


def test_tick_reports_running_until_terminal():
    machine = Verifier(*verifier_tapes("a", "a"))
    ticks = 0
    while machine.tick():
        ticks += 1
    assert machine.state == S_ACCEPT
    assert machine.tick() is False
    assert machine.ticks == ticks + 1


def test_transitions_are_traced(caplog):
    caplog.set_level(logging.DEBUG, logger="tapemachine.verifier")
    Verifier(*verifier_tapes("ab", "b")).run()
    messages = [r.getMessage() for r in caplog.records]
    assert messages[0] == "M1 S_NEXT_LETTER"
    assert "M1 S_SEEK_B" in messages
    assert messages[-1] == "M1 S_ACCEPT"
