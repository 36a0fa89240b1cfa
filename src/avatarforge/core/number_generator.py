"""Deterministic number sources derived from an identity seed.

Two strategies exist side by side and are not interchangeable: each avatar
family keeps the one its images were first generated with, otherwise every
previously generated avatar of that family would change.

- :class:`NumberGenerator` wraps a private :class:`random.Random` seeded from
  the first eight hex digits of the seed.  A fresh instance is created for
  every ``build()`` call, so no state is shared between unrelated seeds.
- :func:`seed_digits` reads a number straight out of the seed string.  It has
  no state at all.
"""

from __future__ import annotations

import random

SEED_PREFIX_LENGTH = 8


class NumberGenerator:
    """Seeded pseudo-random number stream for a single avatar build.

    Args:
        seed: Hexadecimal identity seed.  Only the first eight digits are used.

    Raises:
        ValueError: If the seed prefix is not hexadecimal.
    """

    def __init__(self, seed: str) -> None:
        self._random = random.Random(int(seed[:SEED_PREFIX_LENGTH], 16))

    def get(self, minimum: int, maximum: int) -> int:
        """Return a random integer N with ``minimum <= N <= maximum``."""
        return self._random.randint(minimum, maximum)

    def real_halfopen(self) -> float:
        """Return a random float in the half-open interval [0, 1)."""
        return self._random.random()


def seed_digits(seed: str, offset: int, length: int, modulo: int) -> int:
    """Extract ``length`` hex digits at ``offset`` and reduce them modulo ``modulo``.

    Args:
        seed: Hexadecimal identity seed.
        offset: Index of the first digit to read.
        length: Number of digits to read.
        modulo: Number of possible results.

    Returns:
        Integer in the range ``0 .. modulo - 1``.

    Raises:
        ValueError: If the digits are not hexadecimal or the seed is too short.
        ZeroDivisionError: If ``modulo`` is zero.
    """
    digits = seed[offset : offset + length]
    if len(digits) != length:
        raise ValueError(f"Seed too short to read {length} digits at offset {offset}")

    return int(digits, 16) % modulo
