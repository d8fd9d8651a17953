"""In-memory datasets of feature rows with optional supervised outcomes.

``SupervisedDataset`` keeps rows and outcomes in strict index correspondence.
Every operation that reorders or removes rows applies the same change to the
outcomes, and every operation returning a new dataset hands it lists of its
own, so two datasets never share a row list.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence

from labelsplit.data import sampling, splits
from labelsplit.data.errors import LengthMismatch
from labelsplit.data.outcomes import (
    Outcome,
    OutputType,
    coerce_outcomes,
    infer_output_type,
)

logger = logging.getLogger(__name__)


class Dataset:
    """An ordered collection of feature rows.

    Args:
        rows: Feature rows. Each row is copied into a list owned by the
            dataset.
    """

    def __init__(self, rows: Iterable[Sequence[Any]]) -> None:
        self._rows: list[list[Any]] = [list(row) for row in rows]
        self._width = len(self._rows[0]) if self._rows else 0

    def rows(self) -> list[list[Any]]:
        """Return copies of the rows; changing them leaves the dataset intact."""
        return [list(row) for row in self._rows]

    def row_count(self) -> int:
        return len(self._rows)

    def __len__(self) -> int:
        return self.row_count()

    def column_count(self) -> int:
        """Number of columns, taken from the first row.

        An empty dataset reports the width it was built or derived with.
        """
        return len(self._rows[0]) if self._rows else self._width

    def is_empty(self) -> bool:
        return not self._rows

    def row_at(self, index: int) -> list[Any] | None:
        """Return the row at ``index``, or None if there is no such row."""
        if 0 <= index < len(self._rows):
            return list(self._rows[index])
        return None

    def column(self, index: int) -> list[Any]:
        """Return the values of one column across all rows."""
        return [row[index] for row in self._rows]


class SupervisedDataset(Dataset):
    """Feature rows paired with labeled outcomes.

    Outcomes are coerced on construction: numeric strings become numbers, and
    the output type is determined from the first coerced outcome.

    Args:
        rows: Feature rows.
        outcomes: One outcome per row, each a string or a real number.

    Raises:
        LengthMismatch: If the number of rows differs from the number of
            outcomes.
        InvalidOutcomeType: If an outcome is neither a string nor numeric.
    """

    def __init__(self, rows: Iterable[Sequence[Any]], outcomes: Iterable[Any]) -> None:
        rows = list(rows)
        outcomes = list(outcomes)

        if len(rows) != len(outcomes):
            raise LengthMismatch(
                f"The number of samples must equal the number of outcomes, "
                f"got {len(rows)} samples and {len(outcomes)} outcomes."
            )

        coerced = coerce_outcomes(outcomes)

        super().__init__(rows)
        self._outcomes: list[Outcome] = coerced
        self._output = infer_output_type(coerced) or OutputType.CONTINUOUS

    @classmethod
    def from_iterator(cls, data: Iterable[Sequence[Any]]) -> SupervisedDataset:
        """Build a dataset from rows whose last column is the outcome.

        Args:
            data: Rows of at least one column. They are not modified.

        Returns:
            A dataset of the remaining columns and the popped outcomes.
        """
        rows: list[list[Any]] = []
        outcomes: list[Any] = []
        for record in data:
            record = list(record)
            if not record:
                raise ValueError("Each row must have at least one column holding the outcome.")
            outcomes.append(record.pop())
            rows.append(record)
        return cls(rows, outcomes)

    def _derive(
        self, rows: list[list[Any]], outcomes: list[Outcome]
    ) -> SupervisedDataset:
        """Build a dataset from rows and outcomes taken from this one.

        An empty result keeps this dataset's output type and column count, so
        subsets never change kind or width just because they ended up empty.
        """
        derived = type(self)(rows, outcomes)
        if not outcomes:
            derived._output = self._output
            derived._width = self.column_count()
        return derived

    @property
    def output_type(self) -> OutputType:
        """Output type determined when the dataset was built."""
        return self._output

    @property
    def targets(self) -> list[Outcome]:
        return self.outcomes()

    def outcomes(self) -> list[Outcome]:
        """Return a copy of the outcome list."""
        return list(self._outcomes)

    def outcome_at(self, index: int) -> Outcome | None:
        """Return the outcome at ``index``, or None if there is no such row."""
        if 0 <= index < len(self._outcomes):
            return self._outcomes[index]
        return None

    def unique_outcomes(self) -> set[Outcome]:
        """The set of distinct outcomes."""
        return set(self._outcomes)

    def outcome_type(self) -> OutputType:
        """Recompute the output type from the current first outcome."""
        return infer_output_type(self._outcomes) or self._output

    def __getitem__(self, index: int) -> tuple[list[Any], Outcome]:
        return list(self._rows[index]), self._outcomes[index]

    def to_pair(self) -> tuple[tuple[tuple[Any, ...], ...], tuple[Outcome, ...]]:
        """Return an immutable ``(rows, outcomes)`` snapshot."""
        return tuple(tuple(row) for row in self._rows), tuple(self._outcomes)

    def copy(self) -> SupervisedDataset:
        return self._derive(self._rows, self._outcomes)

    def merge(self, other: SupervisedDataset) -> SupervisedDataset:
        """Return a new dataset with this dataset's rows followed by ``other``'s."""
        return self._derive(
            self._rows + other._rows,
            self._outcomes + other._outcomes,
        )

    # ------------------------------------------------------------------
    # Splicing
    # ------------------------------------------------------------------

    def extract_front(self, n: int) -> SupervisedDataset:
        """Remove the first n rows and return them as a new dataset.

        Counts larger than the dataset are clamped, so extracting more rows
        than available empties this dataset.

        Raises:
            ValueError: If n is negative.
        """
        if n < 0:
            raise ValueError(f"Number of rows to extract must be non-negative, got {n}.")

        taken = self._derive(self._rows[:n], self._outcomes[:n])
        self._rows = self._rows[n:]
        self._outcomes = self._outcomes[n:]
        return taken

    def extract_rest(self, n: int) -> SupervisedDataset:
        """Keep the first n rows and return the remaining rows as a new dataset.

        Raises:
            ValueError: If n is negative.
        """
        if n < 0:
            raise ValueError(f"Number of rows to leave must be non-negative, got {n}.")

        rest = self._derive(self._rows[n:], self._outcomes[n:])
        self._rows = self._rows[:n]
        self._outcomes = self._outcomes[:n]
        return rest

    def take(self, n: int = 1) -> SupervisedDataset:
        """Take n rows off the front of this dataset into a new one."""
        return self.extract_front(n)

    def leave(self, n: int = 1) -> SupervisedDataset:
        """Leave n rows on this dataset and return the rest in a new one."""
        return self.extract_rest(n)

    # ------------------------------------------------------------------
    # Partitioning
    # ------------------------------------------------------------------

    def stratify(self) -> splits.Stratification:
        """Group rows by outcome. See :func:`labelsplit.data.splits.stratify`."""
        return splits.stratify(self)

    def split(self, ratio: float = 0.5) -> tuple[SupervisedDataset, SupervisedDataset]:
        """Stratified split into (training, testing); this dataset is unchanged."""
        return splits.stratified_split(self, ratio)

    def fold(self, k: int = 10) -> list[SupervisedDataset]:
        return splits.fold(self, k)

    def stratified_fold(self, k: int = 10) -> list[SupervisedDataset]:
        return splits.stratified_fold(self, k)

    # ------------------------------------------------------------------
    # Resampling
    # ------------------------------------------------------------------

    def shuffle(self, rng: sampling.RandomSource = None) -> SupervisedDataset:
        """Shuffle rows and outcomes in place with one shared permutation.

        Args:
            rng: Random generator or seed.

        Returns:
            This dataset, for chaining.
        """
        order = sampling.permutation_indices(self.row_count(), rng)
        self._rows = [self._rows[i] for i in order]
        self._outcomes = [self._outcomes[i] for i in order]
        logger.debug("Shuffled %d rows", len(order))
        return self

    def _select(self, indices: Sequence[int]) -> SupervisedDataset:
        return self._derive(
            [list(self._rows[i]) for i in indices],
            [self._outcomes[i] for i in indices],
        )

    def random_subset(
        self, ratio: float = 0.1, rng: sampling.RandomSource = None
    ) -> SupervisedDataset:
        """Sample a fraction of the rows without replacement.

        Args:
            ratio: Fraction of rows to sample, in (0, 1).
            rng: Random generator or seed.

        Returns:
            A new dataset; this dataset is not modified.

        Raises:
            InvalidRatio: If ratio is not in (0, 1).
        """
        indices = sampling.subset_indices(self.row_count(), ratio, rng)
        logger.debug("Random subset of %d out of %d rows", len(indices), self.row_count())
        return self._select(indices)

    def random_subset_with_replacement(
        self, ratio: float = 0.1, rng: sampling.RandomSource = None
    ) -> SupervisedDataset:
        """Sample rows with replacement; the result may repeat rows.

        Args:
            ratio: Size of the sample relative to this dataset. Must be
                positive and may exceed 1.
            rng: Random generator or seed.

        Raises:
            InvalidRatio: If ratio is not positive.
        """
        indices = sampling.bootstrap_indices(self.row_count(), ratio, rng)
        logger.debug(
            "Bootstrap subset of %d rows drawn from %d", len(indices), self.row_count()
        )
        return self._select(indices)
