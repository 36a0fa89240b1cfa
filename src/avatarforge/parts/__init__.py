"""Part discovery and deterministic part selection.

- **catalog.py**: Scans a part directory, groups files by category, sorts them
  in natural order and caches the result in the transient store
- **selector.py**: Picks one part per category, either from a seeded number
  stream or directly from digits of the seed
"""

from avatarforge.parts.catalog import PartCatalog, natural_sort_key
from avatarforge.parts.selector import (
    PartSelector,
    RandomPartSelector,
    SeedDigitPartSelector,
    randomize_parts,
)

__all__ = [
    "PartCatalog",
    "natural_sort_key",
    "PartSelector",
    "RandomPartSelector",
    "SeedDigitPartSelector",
    "randomize_parts",
]
