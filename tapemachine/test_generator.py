"""
Tests for M2, the random word generator.
"""

from __future__ import annotations

import itertools
import random

import pytest

from tapemachine.generator import S_ACCEPT, Generator
from tapemachine.machine import (
    AuxSymbol, InvariantError, MainSymbol, PreconditionError, scripted_choice,
    seeded_choice,
)
from tapemachine.notation import decode_word, generator_tapes, render
from tapemachine.tape import EMPTY, StepCounter, Tape, head, plain

A, B, HASH = MainSymbol.A, MainSymbol.B, MainSymbol.HASH


def test_run_writes_word_of_block_length():
    main, aux = generator_tapes("abab")
    original = main.cells
    m2 = Generator(main, aux)
    assert m2.run() is True
    output = m2.destroy()

    assert output.main_tape.cells == original
    assert output.main_tape.head == 5
    assert output.main_tape.peek() is HASH

    assert output.aux_tape.peek() is EMPTY
    assert output.aux_tape.head == 0
    cells = output.aux_tape.cells
    for index in range(1, 5):
        assert cells[index] in (AuxSymbol.A, AuxSymbol.B)
    assert len(cells) == 5 or cells[5] is EMPTY


@pytest.mark.parametrize("length", range(1, 9))
def test_always_accepts_with_flanked_word(length):
    rng = random.Random(length)
    for _ in range(20):
        block = "".join(rng.choice("ab") for _ in range(length))
        m2 = Generator(*generator_tapes(block), choose=seeded_choice(rng.randrange(1 << 30)))
        assert m2.run() is True
        aux = m2.destroy().aux_tape
        word = decode_word(aux)
        assert len(word) == length
        assert set(word) <= {"a", "b"}
        assert aux.head == 0
        assert aux.cells[0] is EMPTY
        assert all(cell is EMPTY for cell in aux.cells[length + 1:])


def test_every_coin_sequence_spells_its_word():
    for flips in itertools.product([True, False], repeat=3):
        m2 = Generator(*generator_tapes("bba"), choose=scripted_choice(flips))
        m2.run()
        expected = "".join("a" if f else "b" for f in flips)
        assert decode_word(m2.destroy().aux_tape) == expected


def test_one_flip_per_letter():
    # a scripted coin with exactly L flips is enough; one more draw would raise
    m2 = Generator(*generator_tapes("abba"),
                   choose=scripted_choice([True, False, False, True]))
    m2.run()
    assert render(m2.destroy().aux_tape) == "[_]abba"


def test_scripted_coin_running_out_is_fatal():
    m2 = Generator(*generator_tapes("ab"), choose=scripted_choice([True]))
    with pytest.raises(InvariantError):
        m2.run()


def test_last_block_ends_in_empty():
    main = Tape([head(EMPTY), plain(A), plain(B)])
    m2 = Generator(main, Tape([head(EMPTY)]), choose=scripted_choice([False, False]))
    assert m2.run() is True
    assert m2.state == S_ACCEPT
    output = m2.destroy()
    assert output.main_tape.head == 3
    assert output.main_tape.peek() is EMPTY
    assert decode_word(output.aux_tape) == "bb"


def test_stops_at_first_delimiter():
    main = Tape([head(EMPTY), plain(A), plain(HASH), plain(B), plain(B)])
    m2 = Generator(main, Tape([head(EMPTY)]), choose=scripted_choice([True]))
    m2.run()
    output = m2.destroy()
    assert output.main_tape.head == 2
    assert decode_word(output.aux_tape) == "a"


@pytest.mark.parametrize("length", [1, 2, 5, 10])
def test_step_count(length):
    steps = StepCounter()
    m2 = Generator(*generator_tapes("a" * length), counter=steps)
    m2.run()
    assert steps.value == 6 * length + 2


# ---------------------------------------------------------------------------
# Preconditions
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("main, message", [
    (Tape([head(A), plain(HASH)]), "head must be empty"),
    (Tape([plain(A), head(EMPTY), plain(A), plain(HASH)]), "left of the head"),
    (Tape([head(EMPTY), plain(HASH)]), "non-empty word"),
    (Tape([head(EMPTY)]), "non-empty word"),
    (Tape([head(EMPTY), plain(A), plain(AuxSymbol.A)]), "followed by a #"),
])
def test_main_preconditions(main, message):
    with pytest.raises(PreconditionError, match=message):
        Generator(main, Tape([head(EMPTY)]))


def test_aux_must_be_blank():
    main, _ = generator_tapes("ab")
    aux = Tape([head(EMPTY), plain(EMPTY), plain(AuxSymbol.B)])
    with pytest.raises(PreconditionError, match="must be blank"):
        Generator(main, aux)
