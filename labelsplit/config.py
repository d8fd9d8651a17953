"""Partitioning configuration.

Collects the ratios, fold count, and seed used to carve a dataset into
training, validation, and test sets. Supports loading from YAML files so that
splits can be reproduced across experiments.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml


@dataclass
class PartitionConfig:
    """Complete partitioning configuration.

    Attributes:
        test_ratio: Fraction of each stratum held out for testing.
        val_ratio: Fraction of each remaining stratum held out for validation.
        subset_ratio: Fraction of rows drawn by random subsampling.
        folds: Number of folds for k-fold partitioning.
        stratified: Whether folds preserve the outcome distribution.
        seed: Seed for shuffling and sampling.
        batch_size: Samples per batch when loading tensors.
        num_workers: DataLoader worker processes.
    """

    test_ratio: float = 0.2
    val_ratio: float = 0.1
    subset_ratio: float = 0.1
    folds: int = 5
    stratified: bool = True
    seed: int = 42
    batch_size: int = 32
    num_workers: int = 0

    @classmethod
    def from_yaml(cls, path: str | Path) -> PartitionConfig:
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML config file.

        Returns:
            PartitionConfig populated from file values. Unknown keys are
            ignored.
        """
        with open(path) as f:
            raw: dict[str, Any] = yaml.safe_load(f) or {}
        return cls(**{k: v for k, v in raw.items() if k in cls.__dataclass_fields__})

    def to_dict(self) -> dict[str, Any]:
        """Serialize config to a dictionary."""
        return {k: getattr(self, k) for k in self.__dataclass_fields__}
