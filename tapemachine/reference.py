"""
Direct Python answers to the questions the machines decide.

Used as oracles: tests compare machine verdicts against these on every
enumerable coin sequence.
"""

from __future__ import annotations


def is_subsequence(block: str, word: str) -> bool:
    """True if ``word`` can be read off ``block`` left to right, gaps allowed."""
    remaining = iter(block)
    return all(ch in remaining for ch in word)


def common_subsequence(text: str, witness: str) -> bool:
    """The verdict M3 must give for ``text`` once it has drawn ``witness``.

    The first block only fixes the witness length; the witness must be a
    subsequence of every block after it.
    """
    first, *rest = text.split("#")
    if len(first) != len(witness):
        return False
    return all(is_subsequence(block, witness) for block in rest)


def verifier_steps(n: int, m: int) -> int:
    """Tape operations M1 makes on ``#a^n#`` against the aux word ``a^m``."""
    if n <= m:
        return n * 6 + 6
    return n * 2 + m * 4 + 6
