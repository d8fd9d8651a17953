"""Stratified partitioning and resampling of supervised datasets."""

__version__ = "0.1.0"
