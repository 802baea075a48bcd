# tests/conftest.py
# Shared fixtures: the built-in dataset, a CSV export of it and small
# synthetic tables with known structure.
import pathlib
import sys

import numpy as np
import pandas as pd
import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from wdbc_pipeline.config import FEATURE_COLUMNS, TARGET_COLUMN  # noqa: E402
from wdbc_pipeline.data import DatasetLoader, StratifiedSplitter  # noqa: E402


@pytest.fixture(scope="session")
def builtin_dataset():
    return DatasetLoader().load_builtin()


def write_csv(dataset, path, mutate=None):
    """Write a dataset in the original export layout: id, diagnosis,
    30 features and a trailing empty column."""
    df = dataset["df"]
    out = pd.DataFrame({"id": np.arange(842302, 842302 + len(df))})
    out[TARGET_COLUMN] = np.where(df[TARGET_COLUMN] == 1, "M", "B")
    for col in FEATURE_COLUMNS:
        out[col] = df[col].to_numpy()
    out["Unnamed: 32"] = np.nan
    if mutate is not None:
        out = mutate(out)
    out.to_csv(path, index=False)
    return path


@pytest.fixture
def csv_path(builtin_dataset, tmp_path):
    return write_csv(builtin_dataset, tmp_path / "data.csv")


@pytest.fixture
def logistic_data():
    """y depends on x1 and x2; x3 is noise."""
    rng = np.random.default_rng(0)
    n = 600
    X = pd.DataFrame({
        "x1": rng.normal(size=n),
        "x2": rng.normal(size=n),
        "x3": rng.normal(size=n),
    })
    eta = -0.5 + 2.0 * X["x1"] - 1.5 * X["x2"]
    y = pd.Series(rng.binomial(1, 1 / (1 + np.exp(-eta))), name="diagnosis")
    return X, y


@pytest.fixture
def logistic_split(logistic_data):
    X, y = logistic_data
    return StratifiedSplitter(0.8, seed=3).split(X, y)
