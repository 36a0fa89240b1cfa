"""Deterministic selection of one part per category.

Selectors answer a single question: given a category and the number of
candidates, which index wins?  :func:`randomize_parts` applies a selector to a
whole catalog.
"""

from __future__ import annotations

from typing import Protocol

from avatarforge.core.exceptions import PartsNotFoundError
from avatarforge.core.number_generator import NumberGenerator, seed_digits


class PartSelector(Protocol):
    """Anything that can pick a part index for a category."""

    def get_random_part_index(self, part_type: str, count: int) -> int:
        """Return an index in the range ``0 .. count - 1``."""
        ...


class RandomPartSelector:
    """Draws indexes from a seeded :class:`NumberGenerator`.

    The generator is owned by the selector for the duration of one build, so
    the draws depend only on the seed and on the order of the categories.
    """

    def __init__(self, rng: NumberGenerator) -> None:
        self._rng = rng

    def get_random_part_index(self, part_type: str, count: int) -> int:
        return self._rng.get(0, count - 1)


class SeedDigitPartSelector:
    """Reads indexes directly from hex digits of the seed.

    Args:
        seed: Hexadecimal identity seed.
        offsets: Digit offset per category.  Categories sharing an offset
            always get the same index (e.g. a face mask and its shine layer).
        length: Number of digits read per category.
    """

    def __init__(self, seed: str, offsets: dict[str, int], length: int = 2) -> None:
        self._seed = seed
        self._offsets = offsets
        self._length = length

    def get_random_part_index(self, part_type: str, count: int) -> int:
        try:
            offset = self._offsets[part_type]
        except KeyError:
            raise PartsNotFoundError(f"No seed offset for part type '{part_type}'") from None

        return seed_digits(self._seed, offset, self._length, count)


def randomize_parts(parts: dict[str, list[str]], selector: PartSelector) -> dict[str, str]:
    """Pick one entry per category.

    Args:
        parts: Candidate lists keyed by category.
        selector: Strategy deciding the winning index.

    Returns:
        Mapping of category to the chosen entry, in the catalog's order.

    Raises:
        PartsNotFoundError: If a category has no candidates.
    """
    selection: dict[str, str] = {}

    for part_type, candidates in parts.items():
        if not candidates:
            raise PartsNotFoundError(f"No parts available for '{part_type}'")

        selection[part_type] = candidates[selector.get_random_part_index(part_type, len(candidates))]

    return selection
