"""Stratified train/test partitioning with an explicit seed."""

import math
from dataclasses import dataclass

import numpy as np
import pandas as pd

from wdbc_pipeline.errors import InvalidInput
from wdbc_pipeline.utils import get_logger

log = get_logger(__name__)


@dataclass
class Split:
    """Disjoint, exhaustive train/test partition of a labelled table."""

    train_index: np.ndarray
    test_index: np.ndarray
    X_train: pd.DataFrame
    X_test: pd.DataFrame
    y_train: pd.Series
    y_test: pd.Series
    seed: int
    train_size: float

    @property
    def feature_names(self) -> list[str]:
        return list(self.X_train.columns)

    def summary(self) -> dict:
        return {
            "seed": self.seed,
            "train_size": self.train_size,
            "train_samples": len(self.train_index),
            "test_samples": len(self.test_index),
            "train_positive_rate": round(float(self.y_train.mean()), 4),
            "test_positive_rate": round(float(self.y_test.mean()), 4),
        }


class StratifiedSplitter:
    """
    Partitions rows independently within each class label.

    For every class, ceil(train_size * n_class) rows are drawn for training
    and the rest go to test. Identical seed and input order give an
    identical partition.
    """

    def __init__(self, train_size: float = 0.8, seed: int = 101):
        if not 0.0 < train_size < 1.0:
            raise InvalidInput(f"train_size must be in (0, 1), got {train_size}")
        self.train_size = train_size
        self.seed = seed

    def split_indices(self, y) -> tuple[np.ndarray, np.ndarray]:
        labels = np.asarray(y)
        if len(labels) == 0:
            raise InvalidInput("Cannot split an empty table")
        rng = np.random.default_rng(self.seed)

        train_parts, test_parts = [], []
        for label in np.unique(labels):
            members = np.flatnonzero(labels == label)
            n_train = math.ceil(self.train_size * len(members))
            if n_train >= len(members):
                raise InvalidInput(
                    f"Class {label!r} has {len(members)} rows; "
                    f"train_size={self.train_size} leaves none for testing"
                )
            shuffled = rng.permutation(members)
            train_parts.append(shuffled[:n_train])
            test_parts.append(shuffled[n_train:])

        train_index = np.sort(np.concatenate(train_parts))
        test_index = np.sort(np.concatenate(test_parts))
        return train_index, test_index

    def split(self, X: pd.DataFrame, y: pd.Series) -> Split:
        if len(X) != len(y):
            raise InvalidInput(
                f"Feature rows ({len(X)}) and labels ({len(y)}) differ in length"
            )
        train_index, test_index = self.split_indices(y)

        split = Split(
            train_index=train_index,
            test_index=test_index,
            X_train=X.iloc[train_index],
            X_test=X.iloc[test_index],
            y_train=y.iloc[train_index],
            y_test=y.iloc[test_index],
            seed=self.seed,
            train_size=self.train_size,
        )
        log.info(
            "Split (seed=%d): %d train / %d test (%.0f%% train)",
            self.seed, len(train_index), len(test_index), self.train_size * 100,
        )
        return split
