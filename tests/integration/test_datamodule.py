"""Integration tests for the Lightning data module.

These tests use a small synthetic dataset to verify that stratified
partitions flow through to tensor DataLoaders without touching disk.
"""

from __future__ import annotations

from collections import Counter

import pytest
import torch

from labelsplit.config import PartitionConfig
from labelsplit.data.datamodule import (
    SupervisedDataModule,
    encode_outcomes,
    to_tensor_dataset,
)
from labelsplit.data.dataset import SupervisedDataset


def _make_classification(n_per_class: int = 20, n_classes: int = 3) -> SupervisedDataset:
    rows, outcomes = [], []
    for c in range(n_classes):
        for i in range(n_per_class):
            rows.append([float(c), float(i)])
            outcomes.append(f"class_{c}")
    return SupervisedDataset(rows, outcomes)


class TestTensorConversion:
    """Tests for converting datasets to tensors."""

    def test_categorical_encoding(self) -> None:
        ds = SupervisedDataset([[0], [1], [2]], ["dog", "cat", "dog"])
        encoded, classes = encode_outcomes(ds)
        assert classes == ["cat", "dog"]
        assert encoded.tolist() == [1, 0, 1]
        assert encoded.dtype == torch.long

    def test_continuous_encoding(self) -> None:
        ds = SupervisedDataset([[0], [1]], ["1.5", "2"])
        encoded, classes = encode_outcomes(ds)
        assert classes == []
        assert encoded.dtype == torch.float32
        assert encoded.tolist() == [1.5, 2.0]

    def test_tensor_dataset_shapes(self) -> None:
        tds = to_tensor_dataset(_make_classification(5, 2))
        features, targets = tds.tensors
        assert features.shape == (10, 2)
        assert targets.shape == (10,)

    def test_empty_dataset(self) -> None:
        ds = _make_classification(2, 2)
        empty = ds.take(0)
        features, targets = to_tensor_dataset(empty, classes=["class_0", "class_1"]).tensors
        assert features.shape == (0, 2)
        assert targets.shape == (0,)

    def test_string_features_rejected(self) -> None:
        ds = SupervisedDataset([["red"], ["blue"]], ["a", "b"])
        with pytest.raises(ValueError):
            to_tensor_dataset(ds)


class TestSupervisedDataModule:
    """End-to-end tests for the data module."""

    def test_partition_sizes(self) -> None:
        ds = _make_classification(20, 3)
        dm = SupervisedDataModule(ds, PartitionConfig(test_ratio=0.25, val_ratio=0.2, seed=0))
        dm.setup()

        n_test = len(dm.test_dataset)
        n_val = len(dm.val_dataset)
        n_train = len(dm.train_dataset)
        assert n_test == 15
        assert n_val == 9
        assert n_train + n_val + n_test == 60

    def test_partitions_are_stratified(self) -> None:
        ds = _make_classification(20, 3)
        dm = SupervisedDataModule(ds, PartitionConfig(test_ratio=0.25, val_ratio=0.2, seed=0))
        dm.setup()

        _, test_targets = dm.test_dataset.tensors
        assert Counter(test_targets.tolist()) == {0: 5, 1: 5, 2: 5}

    def test_source_dataset_not_reordered(self) -> None:
        ds = _make_classification(10, 2)
        before = ds.to_pair()
        SupervisedDataModule(ds, PartitionConfig(seed=3)).setup()
        assert ds.to_pair() == before

    def test_features_match_labels(self) -> None:
        ds = _make_classification(10, 3)
        dm = SupervisedDataModule(ds, PartitionConfig(seed=1))
        dm.setup()
        features, targets = dm.train_dataset.tensors
        assert torch.equal(features[:, 0].long(), targets)

    def test_dataloaders_batch(self) -> None:
        ds = _make_classification(20, 2)
        dm = SupervisedDataModule(ds, PartitionConfig(batch_size=4, seed=2))
        dm.setup()
        x, y = next(iter(dm.train_dataloader()))
        assert x.shape == (4, 2)
        assert y.shape == (4,)
        assert dm.num_classes == 2
        assert len(list(dm.val_dataloader())) > 0
        assert len(list(dm.test_dataloader())) > 0

    def test_seeded_setup_reproducible(self) -> None:
        ds = _make_classification(10, 2)
        a = SupervisedDataModule(ds, PartitionConfig(seed=5))
        b = SupervisedDataModule(ds, PartitionConfig(seed=5))
        a.setup()
        b.setup()
        assert torch.equal(a.test_dataset.tensors[0], b.test_dataset.tensors[0])

    def test_setup_by_stage(self) -> None:
        ds = _make_classification(20, 3)
        dm = SupervisedDataModule(ds, PartitionConfig(test_ratio=0.25, val_ratio=0.2, seed=0))
        dm.setup("fit")
        assert len(dm.train_dataset) == 36
        assert len(dm.val_dataset) == 9
        assert not hasattr(dm, "test_dataset")

        dm.setup("test")
        assert len(dm.test_dataset) == 15
        train_rows = {tuple(r.tolist()) for r in dm.train_dataset.tensors[0]}
        test_rows = {tuple(r.tolist()) for r in dm.test_dataset.tensors[0]}
        assert not train_rows & test_rows


class TestFoldsAndSubsets:
    """Tests for config-driven folds and subset loaders."""

    def test_stratified_folds(self) -> None:
        ds = _make_classification(20, 2)
        dm = SupervisedDataModule(ds, PartitionConfig(test_ratio=0.2, folds=4, seed=0))
        pairs = dm.folds()
        assert len(pairs) == 4
        for train, val in pairs:
            assert len(train) == 24
            assert Counter(val.tensors[1].tolist()) == {0: 4, 1: 4}

    def test_positional_folds(self) -> None:
        ds = _make_classification(20, 2)
        dm = SupervisedDataModule(
            ds, PartitionConfig(test_ratio=0.2, folds=3, stratified=False, seed=0)
        )
        sizes = [len(val) for _, val in dm.folds()]
        assert sizes == [11, 11, 10]

    def test_subset_dataloader_without_replacement(self) -> None:
        ds = _make_classification(20, 2)
        dm = SupervisedDataModule(ds, PartitionConfig(subset_ratio=0.25, batch_size=64, seed=0))
        x, _ = next(iter(dm.subset_dataloader()))
        assert x.shape[0] == 7
        assert len({tuple(r.tolist()) for r in x}) == 7

    def test_subset_dataloader_with_replacement(self) -> None:
        ds = _make_classification(20, 2)
        dm = SupervisedDataModule(ds, PartitionConfig(subset_ratio=1.5, batch_size=64, seed=0))
        x, _ = next(iter(dm.subset_dataloader(replacement=True)))
        assert x.shape[0] == 42
