"""
Seeded, reproducible sampling without replacement.

Both functions depend only on their arguments: the same seed and range
always give the same result.
"""
from typing import List, Sequence

import numpy as np


def sample_indices(seed: int, count: int, low: int, high: int) -> List[int]:
    """
    *count* distinct integers from [low, high) in random order.

    Floyd's algorithm picks the set, a Fisher-Yates pass shuffles it.
    """
    if high <= low or count < 0 or count > high - low:
        raise ValueError(
            f"Range {low} to {high} ({high - low} values), or count {count} is illegal"
        )

    rng = np.random.default_rng(seed)
    chosen = []
    seen = set()
    for top in range(high - count, high):
        candidate = int(rng.integers(low, top + 1))
        if candidate in seen:
            candidate = top
        seen.add(candidate)
        chosen.append(candidate)

    return _fisher_yates(rng, chosen)


def shuffled(seed: int, items: Sequence) -> List:
    """Seeded Fisher-Yates shuffle of a copy of *items*"""
    return _fisher_yates(np.random.default_rng(seed), list(items))


def _fisher_yates(rng: np.random.Generator, items: List) -> List:
    for i in range(len(items) - 1, 0, -1):
        k = int(rng.integers(0, i + 1))
        items[k], items[i] = items[i], items[k]
    return items
