import numpy as np
import pandas as pd
import pytest

from conftest import write_csv
from wdbc_pipeline.config import FEATURE_COLUMNS, TARGET_COLUMN
from wdbc_pipeline.data import DatasetLoader, encode_diagnosis
from wdbc_pipeline.errors import InvalidInput, MissingData


def test_builtin_uses_canonical_schema(builtin_dataset):
    df = builtin_dataset["df"]
    assert list(df.columns) == FEATURE_COLUMNS + [TARGET_COLUMN]
    assert "concave points_mean" in df.columns
    assert "fractal_dimension_worst" in df.columns
    # 212 malignant / 357 benign
    assert builtin_dataset["metadata"]["class_distribution"] == {
        "benign": 357, "malignant": 212,
    }


def test_csv_drops_id_and_empty_column(csv_path, builtin_dataset):
    loaded = DatasetLoader().load_csv(csv_path)
    df = loaded["df"]
    assert "id" not in df.columns
    assert "Unnamed: 32" not in df.columns
    assert df.shape == (569, 31)
    assert set(df[TARGET_COLUMN].unique()) == {0, 1}
    pd.testing.assert_frame_equal(df, builtin_dataset["df"], check_dtype=False)


def test_missing_value_fails_loudly(builtin_dataset, tmp_path):
    def knock_out(frame):
        frame.loc[5, "texture_se"] = np.nan
        return frame

    path = write_csv(builtin_dataset, tmp_path / "gap.csv", mutate=knock_out)
    with pytest.raises(MissingData) as info:
        DatasetLoader().load_csv(path)
    assert info.value.feature == "texture_se"
    assert "texture_se=1" in str(info.value)


def test_unknown_diagnosis_rejected(builtin_dataset, tmp_path):
    def relabel(frame):
        frame.loc[0, TARGET_COLUMN] = "X"
        return frame

    path = write_csv(builtin_dataset, tmp_path / "bad.csv", mutate=relabel)
    with pytest.raises(InvalidInput):
        DatasetLoader().load_csv(path)


def test_missing_feature_column_rejected(builtin_dataset, tmp_path):
    path = write_csv(
        builtin_dataset, tmp_path / "short.csv",
        mutate=lambda frame: frame.drop(columns=["area_worst"]),
    )
    with pytest.raises(InvalidInput) as info:
        DatasetLoader().load_csv(path)
    assert info.value.feature == "area_worst"


def test_unexpected_column_rejected(builtin_dataset, tmp_path):
    def add_column(frame):
        frame["site"] = "left"
        return frame

    path = write_csv(builtin_dataset, tmp_path / "extra.csv", mutate=add_column)
    with pytest.raises(InvalidInput) as info:
        DatasetLoader().load_csv(path)
    assert info.value.feature == "site"


def test_non_numeric_feature_rejected(builtin_dataset, tmp_path):
    def corrupt(frame):
        frame["radius_mean"] = frame["radius_mean"].astype(str)
        frame.loc[3, "radius_mean"] = "large"
        return frame

    path = write_csv(builtin_dataset, tmp_path / "text.csv", mutate=corrupt)
    with pytest.raises(InvalidInput) as info:
        DatasetLoader().load_csv(path)
    assert info.value.feature == "radius_mean"


def test_encode_diagnosis():
    codes = encode_diagnosis(pd.Series(["B", "M", " m", "b"], name=TARGET_COLUMN))
    assert codes.tolist() == [0, 1, 1, 0]


def test_encode_diagnosis_needs_both_classes():
    with pytest.raises(InvalidInput):
        encode_diagnosis(pd.Series(["B", "B"], name=TARGET_COLUMN))
