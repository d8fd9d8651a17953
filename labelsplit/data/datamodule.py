"""PyTorch Lightning DataModule over a supervised dataset.

Converts stratified partitions of a ``SupervisedDataset`` into tensor datasets
and serves train/val/test DataLoaders, k-fold pairs, and random-subset
loaders with configurable batch size and workers.
"""

from __future__ import annotations

import logging
from typing import Sequence

import pytorch_lightning as pl
import torch
from torch.utils.data import DataLoader, TensorDataset

from labelsplit.config import PartitionConfig
from labelsplit.data.dataset import SupervisedDataset
from labelsplit.data.outcomes import Outcome, OutputType

logger = logging.getLogger(__name__)


def encode_outcomes(
    dataset: SupervisedDataset,
    classes: Sequence[Outcome] | None = None,
) -> tuple[torch.Tensor, list[Outcome]]:
    """Encode outcomes as a tensor.

    Categorical outcomes become ``torch.long`` indices into ``classes``;
    continuous outcomes become ``torch.float32`` values.

    Args:
        dataset: Dataset whose outcomes are encoded.
        classes: Class labels in index order. Defaults to the sorted unique
            outcomes of ``dataset``. Ignored for continuous outcomes.

    Returns:
        Tuple of (encoded outcomes, classes). Classes is empty for continuous
        outcomes.

    Raises:
        KeyError: If an outcome is missing from ``classes``.
    """
    outcomes = dataset.outcomes()

    if dataset.output_type is OutputType.CONTINUOUS:
        return torch.tensor(outcomes, dtype=torch.float32), []

    if classes is None:
        classes = sorted(dataset.unique_outcomes(), key=str)
    index = {label: i for i, label in enumerate(classes)}
    encoded = torch.tensor([index[o] for o in outcomes], dtype=torch.long)
    return encoded, list(classes)


def to_tensor_dataset(
    dataset: SupervisedDataset,
    classes: Sequence[Outcome] | None = None,
) -> TensorDataset:
    """Convert a dataset with numeric features into a ``TensorDataset``.

    Raises:
        ValueError: If any feature value is a string.
    """
    rows = dataset.rows()
    if any(isinstance(value, str) for row in rows for value in row):
        raise ValueError("Only numeric feature rows can be converted to tensors.")

    if rows:
        features = torch.tensor(rows, dtype=torch.float32)
    else:
        features = torch.empty((0, dataset.column_count()), dtype=torch.float32)

    targets, _ = encode_outcomes(dataset, classes)
    return TensorDataset(features, targets)


class SupervisedDataModule(pl.LightningDataModule):
    """Lightning DataModule serving stratified partitions of a dataset.

    Args:
        dataset: Source dataset. It is copied before shuffling, so the caller's
            dataset is never reordered.
        config: Ratios, fold settings, seed, and loader settings.
    """

    def __init__(
        self,
        dataset: SupervisedDataset,
        config: PartitionConfig | None = None,
    ) -> None:
        super().__init__()
        self.dataset = dataset
        self.config = config or PartitionConfig()

        self.classes: list[Outcome] = []
        if dataset.output_type is OutputType.CATEGORICAL:
            self.classes = sorted(dataset.unique_outcomes(), key=str)

        self._partitions: tuple[SupervisedDataset, ...] | None = None

    @property
    def num_classes(self) -> int:
        return len(self.classes)

    def _partition(self) -> tuple[SupervisedDataset, ...]:
        """Shuffle a copy once and carve it into (fit, train, val, test).

        ``fit`` is everything outside the test set, i.e. train and val
        together.
        """
        if self._partitions is None:
            working = self.dataset.copy().shuffle(self.config.seed)
            fit, test = working.split(self.config.test_ratio)
            train, val = fit.split(self.config.val_ratio)

            logger.info(
                "Partitioned %d rows into %d train, %d val, %d test",
                self.dataset.row_count(),
                train.row_count(),
                val.row_count(),
                test.row_count(),
            )
            self._partitions = (fit, train, val, test)
        return self._partitions

    def setup(self, stage: str | None = None) -> None:
        """Create tensor datasets for the requested stage.

        The partition is computed on the first call and reused, so setting up
        "fit" and "test" separately never moves rows between sets.
        """
        _, train, val, test = self._partition()
        classes = self.classes or None

        if stage == "fit" or stage is None:
            self.train_dataset = to_tensor_dataset(train, classes)
            self.val_dataset = to_tensor_dataset(val, classes)

        if stage == "test" or stage is None:
            self.test_dataset = to_tensor_dataset(test, classes)

    def folds(self) -> list[tuple[TensorDataset, TensorDataset]]:
        """K-fold (train, val) tensor datasets over the rows outside the test set.

        Uses ``config.folds`` folds, cut with ``stratified_fold`` when
        ``config.stratified`` is set and positionally otherwise. Fold ``j`` is
        the validation set of pair ``j`` and the remaining folds form its
        training set.

        Raises:
            InvalidFoldCount: If ``config.folds`` < 2.
        """
        fit = self._partition()[0]
        if self.config.stratified:
            parts = fit.stratified_fold(self.config.folds)
        else:
            parts = fit.fold(self.config.folds)

        classes = self.classes or None
        pairs = []
        for j, held_out in enumerate(parts):
            rest = [p for i, p in enumerate(parts) if i != j]
            train = rest[0]
            for part in rest[1:]:
                train = train.merge(part)
            pairs.append(
                (to_tensor_dataset(train, classes), to_tensor_dataset(held_out, classes))
            )
        return pairs

    def subset_dataloader(self, replacement: bool = False) -> DataLoader:
        """Loader over a random sample of the training set.

        The sample holds ``config.subset_ratio`` of the training rows. With
        ``replacement`` it is a bootstrap sample, rows may repeat, and the
        ratio may exceed 1.

        Raises:
            InvalidRatio: If ``config.subset_ratio`` is out of range.
        """
        train = self._partition()[1]
        if replacement:
            sample = train.random_subset_with_replacement(
                self.config.subset_ratio, self.config.seed
            )
        else:
            sample = train.random_subset(self.config.subset_ratio, self.config.seed)

        return DataLoader(
            to_tensor_dataset(sample, self.classes or None),
            batch_size=self.config.batch_size,
            shuffle=True,
            num_workers=self.config.num_workers,
            persistent_workers=self.config.num_workers > 0,
        )

    def train_dataloader(self) -> DataLoader:
        return DataLoader(
            self.train_dataset,
            batch_size=self.config.batch_size,
            shuffle=True,
            num_workers=self.config.num_workers,
            persistent_workers=self.config.num_workers > 0,
        )

    def val_dataloader(self) -> DataLoader:
        return DataLoader(
            self.val_dataset,
            batch_size=self.config.batch_size,
            shuffle=False,
            num_workers=self.config.num_workers,
            persistent_workers=self.config.num_workers > 0,
        )

    def test_dataloader(self) -> DataLoader:
        return DataLoader(
            self.test_dataset,
            batch_size=self.config.batch_size,
            shuffle=False,
            num_workers=self.config.num_workers,
        )
