"""Random index generation for shuffling and subsampling.

All functions return row indices rather than rows, so a single permutation or
draw can be applied to rows and outcomes alike.
"""

from __future__ import annotations

import logging
from typing import Union

import numpy as np

from labelsplit.data.splits import check_ratio, scaled_count

logger = logging.getLogger(__name__)

RandomSource = Union[None, int, np.random.Generator]


def as_generator(rng: RandomSource = None) -> np.random.Generator:
    """Return ``rng`` itself if it is a Generator, else a new one seeded from it."""
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def permutation_indices(n: int, rng: RandomSource = None) -> list[int]:
    """A uniform random permutation of ``range(n)``."""
    return as_generator(rng).permutation(n).tolist()


def subset_indices(n: int, ratio: float, rng: RandomSource = None) -> list[int]:
    """Draw ``scaled_count(ratio, n)`` distinct indices from ``range(n)``.

    Args:
        n: Number of rows to draw from.
        ratio: Fraction of rows to keep, in (0, 1).
        rng: Random generator or seed.

    Raises:
        InvalidRatio: If ratio is not in (0, 1).
    """
    check_ratio(ratio)
    size = scaled_count(ratio, n)
    return permutation_indices(n, rng)[:size]


def bootstrap_indices(n: int, ratio: float, rng: RandomSource = None) -> list[int]:
    """Draw ``scaled_count(ratio, n)`` indices from ``range(n)`` with replacement.

    Each draw is independent and uniform over ``[0, n - 1]``; the same index
    can appear more than once. The ratio may exceed 1.

    Raises:
        InvalidRatio: If ratio is not positive.
    """
    check_ratio(ratio, bounded=False)
    size = scaled_count(ratio, n)
    if n == 0 or size == 0:
        return []
    return as_generator(rng).integers(0, n, size=size).tolist()
