"""
Tape primitives for the subsequence machines.

Models a bidirectional, auto-extending tape with a single head, built from a
list of cell descriptors, plus the step counter tapes can report into.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Generic, Hashable, Iterable, TypeVar


class PreconditionError(ValueError):
    """A tape or machine was constructed from input it does not accept."""


class Blank(enum.Enum):
    EMPTY = "_"

    def __repr__(self) -> str:
        return "EMPTY"


EMPTY = Blank.EMPTY

S = TypeVar("S", bound=Hashable)


@dataclass(frozen=True)
class Descriptor(Generic[S]):
    """One initial cell; exactly one descriptor of a tape carries the head."""
    cell: S | Blank
    head: bool = False


def plain(cell) -> Descriptor:
    return Descriptor(cell, head=False)


def head(cell) -> Descriptor:
    return Descriptor(cell, head=True)


class StepCounter:
    """Shared tally of tape operations. Attach one object to several tapes."""

    def __init__(self, value: int = 0):
        self.value = value

    def increment(self):
        self.value += 1

    def reset(self):
        self.value = 0

    def __int__(self) -> int:
        return self.value

    def __repr__(self) -> str:
        return f"StepCounter({self.value})"


class Tape(Generic[S]):
    """Linear cell store with one head. Grows with EMPTY cells at either end."""

    def __init__(self, descriptors: Iterable[Descriptor[S]],
                 counter: StepCounter | None = None):
        cells: list[S | Blank] = []
        head_index: int | None = None
        for index, descriptor in enumerate(descriptors):
            if descriptor.head:
                if head_index is not None:
                    raise PreconditionError("Tape can only have one head")
                head_index = index
            cells.append(descriptor.cell)
        if head_index is None:
            raise PreconditionError("Tape must have a head")
        self._cells = cells
        self._head = head_index
        self.counter = counter

    # -------------------------------------------------------------------
    # Counted operations
    # -------------------------------------------------------------------

    def _count(self):
        if self.counter is not None:
            self.counter.increment()

    def left(self):
        self._count()
        if self.is_at_head():
            self._cells.insert(0, EMPTY)
        else:
            self._head -= 1

    def right(self):
        self._count()
        if self.is_at_end():
            self._cells.append(EMPTY)
        self._head += 1

    def read(self) -> S | Blank:
        self._count()
        return self._cells[self._head]

    def write(self, cell: S | Blank):
        self._count()
        self._cells[self._head] = cell

    # -------------------------------------------------------------------
    # Inspection (never counted)
    # -------------------------------------------------------------------

    def is_at_head(self) -> bool:
        return self._head == 0

    def is_at_end(self) -> bool:
        return self._head == len(self._cells) - 1

    @property
    def head(self) -> int:
        return self._head

    @property
    def cells(self) -> tuple[S | Blank, ...]:
        return tuple(self._cells)

    def peek(self) -> S | Blank:
        """The cell under the head, without counting a step."""
        return self._cells[self._head]

    def as_constructor(self) -> list[Descriptor[S]]:
        return [Descriptor(cell, head=(index == self._head))
                for index, cell in enumerate(self._cells)]

    def clone(self) -> Tape[S]:
        """Independent copy of the cells; the counter reference is shared."""
        return Tape(self.as_constructor(), self.counter)

    def attach(self, counter: StepCounter | None):
        self.counter = counter

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tape):
            return NotImplemented
        return self._head == other._head and self._cells == other._cells

    def __repr__(self) -> str:
        return f"Tape(head={self._head}, cells={self._cells!r})"
