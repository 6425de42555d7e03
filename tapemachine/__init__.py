"""
Composable Turing machines for a randomized common-subsequence check.

M1 (Verifier) checks one block, M2 (Generator) draws a random word, M3
(Orchestrator) composes the two across every block of the main tape.
"""

from .generator import Generator
from .machine import (
    AuxSymbol, DestroyOutput, InvariantError, MachineStateError, MainSymbol,
    PreconditionError,
)
from .orchestrator import Orchestrator
from .tape import EMPTY, Descriptor, StepCounter, Tape, head, plain
from .verifier import Verifier
