"""Exceptions raised by dataset construction and partitioning.

Every error is raised before the dataset it concerns is modified, so catching
one never leaves a dataset with mismatched rows and outcomes.
"""

from __future__ import annotations


class DatasetError(Exception):
    """Base class for all dataset engine errors."""


class LengthMismatch(DatasetError, ValueError):
    """Number of rows does not equal number of outcomes."""


class InvalidOutcomeType(DatasetError, TypeError):
    """An outcome is neither a string nor a real number."""


class InvalidRatio(DatasetError, ValueError):
    """A split or sampling ratio lies outside its allowed interval."""


class InvalidFoldCount(DatasetError, ValueError):
    """Fewer than two folds were requested."""
