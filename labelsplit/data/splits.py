"""Stratified split and fold utilities.

Rows are grouped by outcome before partitioning so that every subset keeps
roughly the class distribution of its source. Nothing here shuffles: callers
that want a randomized assignment shuffle the dataset first.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Any

from labelsplit.data.errors import InvalidFoldCount, InvalidRatio
from labelsplit.data.outcomes import Outcome

if TYPE_CHECKING:
    from labelsplit.data.dataset import SupervisedDataset

logger = logging.getLogger(__name__)

Stratification = dict[Outcome, tuple[list[list[Any]], list[Outcome]]]


def round_half_up(value: float | Decimal) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(Decimal(str(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def scaled_count(ratio: float, n: int) -> int:
    """Number of items making up ``ratio`` of ``n``, rounded half up.

    The product is taken in decimal so that, for example, 0.29 of 50 is
    14.5 and rounds to 15 rather than to the 14 a binary float would give.
    """
    return round_half_up(Decimal(str(ratio)) * n)


def check_ratio(ratio: float, *, bounded: bool = True) -> None:
    """Validate a split or sampling ratio.

    Args:
        ratio: Fraction of rows to select.
        bounded: If True the ratio must lie in (0, 1), otherwise it only has
            to be positive.

    Raises:
        InvalidRatio: If the ratio is out of range.
    """
    if bounded and not 0.0 < ratio < 1.0:
        raise InvalidRatio(f"Ratio must be a float value between 0 and 1, got {ratio}.")
    if not bounded and not ratio > 0.0:
        raise InvalidRatio(f"Ratio must be a float value greater than 0, got {ratio}.")


def check_fold_count(k: int) -> None:
    if k < 2:
        raise InvalidFoldCount(f"Number of folds must be at least 2, got {k}.")


def chunk_sizes(n: int, k: int) -> list[int]:
    """Sizes of k near-equal chunks of n items, larger chunks first."""
    base, remainder = divmod(n, k)
    return [base + 1 if i < remainder else base for i in range(k)]


def stratify(dataset: SupervisedDataset) -> Stratification:
    """Group rows by outcome.

    Strata appear in order of first occurrence and keep their rows in the
    order they are stored in ``dataset``.

    Args:
        dataset: Source dataset. It is not modified.

    Returns:
        Mapping of outcome to a ``(rows, outcomes)`` pair of new lists.
    """
    strata: Stratification = {}
    for row, outcome in zip(dataset.rows(), dataset.outcomes()):
        rows, outcomes = strata.setdefault(outcome, ([], []))
        rows.append(row)
        outcomes.append(outcome)
    return strata


def stratified_split(
    dataset: SupervisedDataset,
    ratio: float = 0.5,
) -> tuple[SupervisedDataset, SupervisedDataset]:
    """Split a dataset into training and testing sets stratified by outcome.

    From every stratum the first ``scaled_count(ratio, size)`` rows go to
    the testing set and the rest to the training set, so each stratum is
    represented in both sets up to one row of rounding error.

    Args:
        dataset: Source dataset. It is not modified.
        ratio: Fraction of each stratum to place in the testing set, in (0, 1).

    Returns:
        Tuple of (training, testing).

    Raises:
        InvalidRatio: If ratio is not in (0, 1).
    """
    check_ratio(ratio)

    training: tuple[list[list[Any]], list[Outcome]] = ([], [])
    testing: tuple[list[list[Any]], list[Outcome]] = ([], [])

    for rows, outcomes in stratify(dataset).values():
        n_test = scaled_count(ratio, len(rows))
        testing[0].extend(rows[:n_test])
        testing[1].extend(outcomes[:n_test])
        training[0].extend(rows[n_test:])
        training[1].extend(outcomes[n_test:])

    logger.debug(
        "Stratified split of %d rows at ratio %s: %d training, %d testing",
        dataset.row_count(),
        ratio,
        len(training[1]),
        len(testing[1]),
    )
    if dataset.row_count() > 0 and (not training[1] or not testing[1]):
        logger.warning(
            "Stratified split at ratio %s left one side empty (%d training, %d testing)",
            ratio,
            len(training[1]),
            len(testing[1]),
        )

    return dataset._derive(*training), dataset._derive(*testing)


def fold(dataset: SupervisedDataset, k: int = 10) -> list[SupervisedDataset]:
    """Partition a dataset into k consecutive folds of near-equal size.

    Raises:
        InvalidFoldCount: If k < 2.
    """
    check_fold_count(k)

    rows = dataset.rows()
    outcomes = dataset.outcomes()

    folds = []
    start = 0
    for size in chunk_sizes(len(rows), k):
        end = start + size
        folds.append(dataset._derive(rows[start:end], outcomes[start:end]))
        start = end

    logger.debug("Folded %d rows into %d folds", len(rows), k)
    return folds


def stratified_fold(dataset: SupervisedDataset, k: int = 10) -> list[SupervisedDataset]:
    """Partition a dataset into k folds that each keep the outcome distribution.

    Every stratum is cut into k near-equal chunks and chunk ``j`` of each
    stratum lands in fold ``j``.

    Raises:
        InvalidFoldCount: If k < 2.
    """
    check_fold_count(k)

    buckets: list[tuple[list[list[Any]], list[Outcome]]] = [([], []) for _ in range(k)]

    for rows, outcomes in stratify(dataset).values():
        start = 0
        for bucket, size in zip(buckets, chunk_sizes(len(rows), k)):
            end = start + size
            bucket[0].extend(rows[start:end])
            bucket[1].extend(outcomes[start:end])
            start = end

    logger.debug("Stratified fold of %d rows into %d folds", dataset.row_count(), k)
    return [dataset._derive(rows, outcomes) for rows, outcomes in buckets]
