import math

import numpy as np
import pandas as pd
import pytest

from wdbc_pipeline.data import StratifiedSplitter
from wdbc_pipeline.errors import InvalidInput


def _xy(builtin_dataset):
    df = builtin_dataset["df"]
    return df[builtin_dataset["feature_names"]], df[builtin_dataset["target_name"]]


def test_same_seed_same_partition(builtin_dataset):
    X, y = _xy(builtin_dataset)
    first = StratifiedSplitter(0.8, seed=101).split(X, y)
    second = StratifiedSplitter(0.8, seed=101).split(X, y)
    np.testing.assert_array_equal(first.train_index, second.train_index)
    np.testing.assert_array_equal(first.test_index, second.test_index)


def test_different_seed_changes_partition(builtin_dataset):
    X, y = _xy(builtin_dataset)
    a = StratifiedSplitter(0.8, seed=101).split(X, y)
    b = StratifiedSplitter(0.8, seed=102).split(X, y)
    assert not np.array_equal(a.train_index, b.train_index)


def test_partition_is_disjoint_and_exhaustive(builtin_dataset):
    X, y = _xy(builtin_dataset)
    split = StratifiedSplitter(0.8, seed=101).split(X, y)
    assert not set(split.train_index) & set(split.test_index)
    assert sorted(np.concatenate([split.train_index, split.test_index])) == list(range(len(y)))
    assert len(split.X_train) == len(split.y_train) == len(split.train_index)


def test_each_class_gets_ceiling_share(builtin_dataset):
    X, y = _xy(builtin_dataset)
    split = StratifiedSplitter(0.8, seed=101).split(X, y)
    for label, n_class in y.value_counts().items():
        assert (split.y_train == label).sum() == math.ceil(0.8 * n_class)
    # 357 benign, 212 malignant -> 286 + 170 train
    assert len(split.train_index) == 456
    assert len(split.test_index) == 113
    assert abs(split.y_train.mean() - y.mean()) < 0.01
    assert abs(split.y_test.mean() - y.mean()) < 0.02


def test_train_size_bounds():
    with pytest.raises(InvalidInput):
        StratifiedSplitter(1.0)
    with pytest.raises(InvalidInput):
        StratifiedSplitter(0.0)


def test_class_too_small_for_test_side():
    X = pd.DataFrame({"a": range(6)})
    y = pd.Series([0, 0, 0, 0, 0, 1])
    with pytest.raises(InvalidInput):
        StratifiedSplitter(0.8, seed=1).split(X, y)
