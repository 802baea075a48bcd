"""Dataset loading and label encoding for the WDBC diagnosis table."""

import numpy as np
import pandas as pd
from sklearn.datasets import load_breast_cancer

from wdbc_pipeline.config import (
    CLASS_NAMES,
    DIAGNOSIS_CODES,
    FEATURE_COLUMNS,
    ID_COLUMN,
    TARGET_COLUMN,
)
from wdbc_pipeline.errors import InvalidInput, MissingData
from wdbc_pipeline.utils import get_logger

log = get_logger(__name__)

# sklearn spells features as "mean radius", "radius error", "worst radius"
_SKLEARN_PREFIXES = {"mean ": "mean", "worst ": "worst"}
_SKLEARN_SUFFIXES = {" error": "se"}


def _canonical_name(sklearn_name: str) -> str:
    for prefix, suffix in _SKLEARN_PREFIXES.items():
        if sklearn_name.startswith(prefix):
            base = sklearn_name[len(prefix):]
            break
    else:
        for tail, suffix in _SKLEARN_SUFFIXES.items():
            if sklearn_name.endswith(tail):
                base = sklearn_name[: -len(tail)]
                break
        else:
            raise InvalidInput(f"Unrecognised feature name: {sklearn_name}")
    if base == "fractal dimension":
        base = "fractal_dimension"
    return f"{base}_{suffix}"


def encode_diagnosis(labels: pd.Series) -> pd.Series:
    """Map the categorical diagnosis ("B"/"M") onto 0/1."""
    cleaned = labels.astype(str).str.strip().str.upper()
    unexpected = sorted(set(cleaned) - set(DIAGNOSIS_CODES))
    if unexpected:
        raise InvalidInput(
            f"Diagnosis must be one of {sorted(DIAGNOSIS_CODES)}, found {unexpected}",
            feature=labels.name,
        )
    if cleaned.nunique() != 2:
        raise InvalidInput(
            "Diagnosis column must contain both classes, found only "
            f"{sorted(cleaned.unique())}",
            feature=labels.name,
        )
    return cleaned.map(DIAGNOSIS_CODES).astype(int)


class DatasetLoader:
    """Loads the fixed-schema diagnosis table and validates it."""

    def load_csv(self, path: str) -> dict:
        """
        Read the CSV export of the diagnosis dataset.

        The identifier column and the trailing empty column are dropped, the
        schema is checked against the 30 canonical features and the
        diagnosis is encoded to 0 (benign) / 1 (malignant).
        """
        log.info("Loading CSV from: %s", path)
        try:
            raw = pd.read_csv(path)
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise InvalidInput(f"Cannot read {path}: {e}") from e

        known = set(FEATURE_COLUMNS) | {TARGET_COLUMN}
        empty = [
            c for c in raw.columns if c not in known and raw[c].isnull().all()
        ]
        if empty:
            log.info("Dropping empty column(s): %s", empty)
            raw = raw.drop(columns=empty)
        if ID_COLUMN in raw.columns:
            raw = raw.drop(columns=[ID_COLUMN])

        return self._build(raw, source=str(path))

    def load_builtin(self) -> dict:
        """Rebuild the canonical table from the copy shipped with scikit-learn."""
        log.info("Loading built-in breast cancer dataset from scikit-learn")
        bunch = load_breast_cancer()
        columns = [_canonical_name(n) for n in bunch.feature_names]
        raw = pd.DataFrame(bunch.data, columns=columns)[FEATURE_COLUMNS]
        # sklearn codes malignant as 0
        raw.insert(0, TARGET_COLUMN, np.where(bunch.target == 0, "M", "B"))
        return self._build(raw, source="sklearn.datasets.load_breast_cancer")

    def _build(self, raw: pd.DataFrame, source: str) -> dict:
        self._check_schema(raw)
        self._check_missing(raw)

        features = raw[FEATURE_COLUMNS].copy()
        non_numeric = [
            c for c in FEATURE_COLUMNS if not pd.api.types.is_numeric_dtype(features[c])
        ]
        if non_numeric:
            raise InvalidInput(
                f"Feature columns must be numeric: {non_numeric}",
                feature=non_numeric[0],
            )

        df = features.astype(float)
        df[TARGET_COLUMN] = encode_diagnosis(raw[TARGET_COLUMN]).to_numpy()
        df = df.reset_index(drop=True)

        counts = df[TARGET_COLUMN].value_counts().sort_index()
        metadata = {
            "source": source,
            "n_samples": len(df),
            "n_features": len(FEATURE_COLUMNS),
            "class_distribution": {
                CLASS_NAMES[int(k)]: int(v) for k, v in counts.items()
            },
        }

        log.info(
            "Loaded %d samples with %d features (%s)",
            metadata["n_samples"],
            metadata["n_features"],
            ", ".join(f"{k}={v}" for k, v in metadata["class_distribution"].items()),
        )

        return {
            "df": df,
            "feature_names": list(FEATURE_COLUMNS),
            "target_name": TARGET_COLUMN,
            "metadata": metadata,
        }

    @staticmethod
    def _check_schema(raw: pd.DataFrame):
        expected = set(FEATURE_COLUMNS) | {TARGET_COLUMN}
        missing = [c for c in [TARGET_COLUMN] + FEATURE_COLUMNS if c not in raw.columns]
        if missing:
            raise InvalidInput(
                f"Missing {len(missing)} expected column(s): {missing}",
                feature=missing[0],
            )
        extra = [c for c in raw.columns if c not in expected]
        if extra:
            raise InvalidInput(
                f"Unexpected column(s) in input: {extra}", feature=extra[0]
            )

    @staticmethod
    def _check_missing(raw: pd.DataFrame):
        nulls = raw.isnull().sum()
        nulls = nulls[nulls > 0]
        if not nulls.empty:
            detail = ", ".join(f"{col}={int(n)}" for col, n in nulls.items())
            raise MissingData(
                f"Missing values present ({detail}); refusing to impute",
                feature=nulls.index[0],
            )
