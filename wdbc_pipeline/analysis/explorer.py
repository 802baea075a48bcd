"""Exploratory data analysis for the diagnosis table."""

import pandas as pd
from scipy import stats

from wdbc_pipeline.config import CLASS_NAMES
from wdbc_pipeline.selection.correlation import (
    correlation_matrix,
    highly_correlated_pairs,
)
from wdbc_pipeline.utils import get_logger

log = get_logger(__name__)


class DataExplorer:
    """Descriptive statistics grouped by diagnosis."""

    def __init__(self, correlation_threshold: float = 0.7):
        self.correlation_threshold = correlation_threshold
        self.report = {}

    def run(self, dataset: dict) -> dict:
        """
        Run the descriptive analysis on a loaded dataset.

        Returns a dict of tables and summaries for the report.
        """
        df = dataset["df"]
        feature_names = dataset["feature_names"]
        target_name = dataset["target_name"]

        log.info("Running exploratory data analysis on %d samples", len(df))

        corr = correlation_matrix(df[feature_names])
        self.report = {
            "shape": list(df.shape),
            "class_balance": self._class_balance(df, target_name),
            "descriptive": self.descriptive_table(df, feature_names, target_name),
            "correlation_matrix": corr,
            "highly_correlated_pairs": highly_correlated_pairs(
                corr, self.correlation_threshold
            ),
        }
        log.info(
            "Found %d feature pairs with |r| > %.2f",
            len(self.report["highly_correlated_pairs"]), self.correlation_threshold,
        )
        return self.report

    def _class_balance(self, df: pd.DataFrame, target: str) -> dict:
        counts = df[target].value_counts().sort_index()
        proportions = df[target].value_counts(normalize=True).sort_index()
        ratio = counts.max() / counts.min()
        log.info(
            "Class balance: %s (ratio=%.2f)",
            ", ".join(f"{CLASS_NAMES[int(k)]}={int(v)}" for k, v in counts.items()),
            ratio,
        )
        return {
            "counts": {CLASS_NAMES[int(k)]: int(v) for k, v in counts.items()},
            "proportions": {
                CLASS_NAMES[int(k)]: round(float(v), 4) for k, v in proportions.items()
            },
            "imbalance_ratio": round(float(ratio), 4),
        }

    @staticmethod
    def descriptive_table(df: pd.DataFrame, features: list[str],
                          target: str) -> pd.DataFrame:
        """
        Median and interquartile range of every feature within each class,
        with a two-sided Mann-Whitney U test between the classes.
        """
        benign = df[df[target] == 0]
        malignant = df[df[target] == 1]

        rows = []
        for feat in features:
            row = {"feature": feat}
            for label, group in (("benign", benign), ("malignant", malignant)):
                q1, median, q3 = group[feat].quantile([0.25, 0.5, 0.75])
                row[f"{label}_median"] = median
                row[f"{label}_q1"] = q1
                row[f"{label}_q3"] = q3
                row[f"{label}_iqr"] = q3 - q1
            _, p_value = stats.mannwhitneyu(
                benign[feat], malignant[feat], alternative="two-sided"
            )
            row["p_value"] = p_value
            rows.append(row)

        return pd.DataFrame(rows).set_index("feature")
