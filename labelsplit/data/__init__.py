"""Supervised dataset storage, stratified splitting, and resampling."""

from labelsplit.data.datamodule import SupervisedDataModule, to_tensor_dataset
from labelsplit.data.dataset import Dataset, SupervisedDataset
from labelsplit.data.errors import (
    DatasetError,
    InvalidFoldCount,
    InvalidOutcomeType,
    InvalidRatio,
    LengthMismatch,
)
from labelsplit.data.outcomes import OutputType
from labelsplit.data.splits import stratified_split, stratify

__all__ = [
    "Dataset",
    "DatasetError",
    "InvalidFoldCount",
    "InvalidOutcomeType",
    "InvalidRatio",
    "LengthMismatch",
    "OutputType",
    "SupervisedDataModule",
    "SupervisedDataset",
    "stratified_split",
    "stratify",
    "to_tensor_dataset",
]
