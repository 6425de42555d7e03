"""
Text notation for tapes.

``a``, ``b`` and ``#`` spell symbols, ``_`` spells Empty. Builders here lay
out the initial tapes each machine expects; ``render`` prints a tape with its
head in brackets, e.g. ``_[#]ab#_``.
"""

from __future__ import annotations

from .machine import AuxSymbol, MainSymbol
from .tape import EMPTY, Blank, Descriptor, PreconditionError, StepCounter, Tape, head, plain

_MAIN_CHARS = {s.value: s for s in MainSymbol}
_AUX_CHARS = {s.value: s for s in AuxSymbol}


def parse_main(text: str) -> list[MainSymbol]:
    try:
        return [_MAIN_CHARS[ch] for ch in text]
    except KeyError as exc:
        raise PreconditionError(f"Invalid character {exc.args[0]!r} in main tape text") from None


def parse_aux(text: str) -> list[AuxSymbol]:
    try:
        return [_AUX_CHARS[ch] for ch in text]
    except KeyError as exc:
        raise PreconditionError(f"Invalid character {exc.args[0]!r} in aux word") from None


def _tape(head_cell, cells, counter: StepCounter | None) -> Tape:
    descriptors: list[Descriptor] = [head(head_cell)]
    descriptors.extend(plain(cell) for cell in cells)
    return Tape(descriptors, counter)


def blank_tape(counter: StepCounter | None = None) -> Tape[AuxSymbol]:
    return Tape([head(EMPTY)], counter)


def orchestrator_tapes(text: str, counter: StepCounter | None = None):
    """``_[_]aba#aba`` plus a blank aux tape: the layout M3 starts from."""
    return _tape(EMPTY, parse_main(text), counter), blank_tape(counter)


def generator_tapes(block: str, counter: StepCounter | None = None):
    """``[_]block#`` plus a blank aux tape."""
    return (_tape(EMPTY, parse_main(block) + [MainSymbol.HASH], counter),
            blank_tape(counter))


def verifier_tapes(block: str, word: str, counter: StepCounter | None = None):
    """``[#]block#`` against ``[_]word_``."""
    main = _tape(MainSymbol.HASH, parse_main(block) + [MainSymbol.HASH], counter)
    aux = _tape(EMPTY, parse_aux(word) + [EMPTY], counter)
    return main, aux


def decode_word(tape: Tape) -> str:
    """The letters right of the head, up to the first Empty. Not counted."""
    chars = []
    for cell in tape.cells[tape.head + 1:]:
        if cell is EMPTY:
            break
        chars.append(cell.value)
    return "".join(chars)


def cell_char(cell: MainSymbol | AuxSymbol | Blank) -> str:
    return cell.value


def render(tape: Tape) -> str:
    parts = []
    for index, cell in enumerate(tape.cells):
        ch = cell_char(cell)
        parts.append(f"[{ch}]" if index == tape.head else ch)
    return "".join(parts)
