"""Greedy removal of highly correlated features."""

import numpy as np
import pandas as pd

from wdbc_pipeline.errors import InvalidInput
from wdbc_pipeline.utils import get_logger

log = get_logger(__name__)


def correlation_matrix(X: pd.DataFrame) -> pd.DataFrame:
    """Pearson correlation matrix over the numeric columns of ``X``."""
    non_numeric = [c for c in X.columns if not pd.api.types.is_numeric_dtype(X[c])]
    if non_numeric:
        raise InvalidInput(
            f"Correlation requires numeric columns, got {non_numeric}",
            feature=non_numeric[0],
        )
    if X.shape[1] < 2:
        raise InvalidInput(
            f"Correlation pruning needs at least 2 numeric columns, got {X.shape[1]}"
        )
    return X.corr(method="pearson")


def highly_correlated_pairs(corr: pd.DataFrame, threshold: float) -> list[dict]:
    """All feature pairs with |r| above ``threshold``, strongest first."""
    names = list(corr.columns)
    values = corr.to_numpy()
    pairs = []
    for i in range(len(names)):
        for j in range(i + 1, len(names)):
            r = values[i, j]
            if abs(r) > threshold:
                pairs.append({
                    "feature_1": names[i],
                    "feature_2": names[j],
                    "correlation": round(float(r), 4),
                })
    pairs.sort(key=lambda p: abs(p["correlation"]), reverse=True)
    return pairs


class CorrelationPruner:
    """
    Drops features until no pair has |r| above the threshold.

    At each step the most correlated pair is located and the member with the
    larger mean absolute correlation against the other remaining features is
    removed. The matrix is recomputed on the survivors after every drop. This
    is a greedy heuristic: it terminates but does not promise the largest
    surviving set.
    """

    def __init__(self, threshold: float = 0.7):
        if not 0.0 <= threshold <= 1.0:
            raise InvalidInput(f"Correlation threshold must be in [0, 1], got {threshold}")
        self.threshold = threshold
        self.history: list[dict] = []

    def prune(self, X: pd.DataFrame) -> list[str]:
        """Return the surviving column names, in their original order."""
        corr = correlation_matrix(X)
        nan_cols = corr.columns[corr.isnull().all()].tolist()
        if nan_cols:
            raise InvalidInput(
                f"Constant column(s) have undefined correlation: {nan_cols}",
                feature=nan_cols[0],
            )

        remaining = list(X.columns)
        self.history = []

        while len(remaining) > 1:
            sub = corr.loc[remaining, remaining].abs().to_numpy(copy=True)
            np.fill_diagonal(sub, 0.0)
            i, j = np.unravel_index(np.argmax(sub), sub.shape)
            strongest = sub[i, j]
            if strongest <= self.threshold:
                break

            i, j = sorted((int(i), int(j)))
            # mean |r| against every other remaining feature
            means = {k: sub[k].sum() / (len(remaining) - 1) for k in (i, j)}
            # ties drop the later column
            drop, keep = (i, j) if means[i] > means[j] else (j, i)

            record = {
                "dropped": remaining[drop],
                "kept": remaining[keep],
                "correlation": round(float(corr.loc[remaining[i], remaining[j]]), 4),
                "dropped_mean_abs_corr": round(float(means[drop]), 4),
                "kept_mean_abs_corr": round(float(means[keep]), 4),
            }
            self.history.append(record)
            log.info(
                "Dropping %s (|r|=%.3f with %s, mean |r| %.3f vs %.3f)",
                record["dropped"], strongest, record["kept"],
                record["dropped_mean_abs_corr"], record["kept_mean_abs_corr"],
            )
            remaining.pop(drop)

        log.info(
            "Correlation pruning (threshold=%.2f): %d -> %d features",
            self.threshold, X.shape[1], len(remaining),
        )
        return remaining
