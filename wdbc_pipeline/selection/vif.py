"""Iterative variance-inflation-factor pruning."""

import numpy as np
import pandas as pd
from statsmodels.stats.outliers_influence import variance_inflation_factor

from wdbc_pipeline.errors import InvalidInput, SingularMatrix
from wdbc_pipeline.models.logistic import (
    INTERCEPT,
    LogisticModel,
    add_intercept,
    check_full_rank,
    fit_logistic,
)
from wdbc_pipeline.utils import get_logger

log = get_logger(__name__)


def ols_vif(X: pd.DataFrame) -> pd.Series:
    """
    VIF_j = 1 / (1 - R_j^2), with R_j^2 from regressing feature j on all
    the other features plus an intercept.
    """
    design = add_intercept(X)
    check_full_rank(design)
    values = design.to_numpy()
    vifs = [variance_inflation_factor(values, k) for k in range(1, values.shape[1])]
    return pd.Series(vifs, index=X.columns, name="vif")


def model_vif(model: LogisticModel) -> pd.Series:
    """
    VIFs from the coefficient covariance of a fitted logistic regression.

    The intercept row/column is removed, the covariance is rescaled to a
    correlation matrix R and VIF_j = (R^-1)_jj, which is the generalized
    VIF for one-degree-of-freedom terms.
    """
    cov = model.cov_params().drop(index=INTERCEPT, columns=INTERCEPT)
    sd = np.sqrt(np.diag(cov.to_numpy()))
    corr = cov.to_numpy() / np.outer(sd, sd)
    try:
        inv = np.linalg.inv(corr)
    except np.linalg.LinAlgError as e:
        raise SingularMatrix(f"Coefficient covariance is singular: {e}") from e
    return pd.Series(np.diag(inv), index=cov.columns, name="vif")


class VIFPruner:
    """
    Removes the highest-VIF feature until every VIF is below the threshold.

    A logistic regression of the response on the current features is fitted
    each round. With ``method="ols"`` the VIFs come from auxiliary least
    squares regressions among the features; with ``method="model"`` they
    come from the fitted model's coefficient covariance. When a perfectly
    collinear column makes the design rank-deficient, that column (the later
    one in column order) is dropped and the round is retried.
    """

    def __init__(self, threshold: float = 10.0, method: str = "ols",
                 max_iter: int = 100):
        if threshold <= 1.0:
            raise InvalidInput(f"VIF threshold must be > 1, got {threshold}")
        if method not in ("ols", "model"):
            raise InvalidInput(f"Unknown VIF method '{method}'")
        self.threshold = threshold
        self.method = method
        self.max_iter = max_iter
        self.history: list[dict] = []
        self.final_vif: pd.Series | None = None

    def compute(self, X: pd.DataFrame, y: pd.Series) -> pd.Series:
        """VIF of every column of ``X`` (fits the logistic model first)."""
        model = fit_logistic(X, y, max_iter=self.max_iter, name="vif_screen")
        if self.method == "model":
            return model_vif(model)
        return ols_vif(X)

    def prune(self, X: pd.DataFrame, y: pd.Series) -> list[str]:
        if X.shape[1] == 0:
            raise InvalidInput("VIF pruning needs at least one feature")
        remaining = list(X.columns)
        self.history = []
        self.final_vif = None

        while len(remaining) > 1:
            try:
                vifs = self.compute(X[remaining], y)
            except SingularMatrix as e:
                if e.feature is None or e.feature not in remaining:
                    raise
                log.warning(
                    "Dropping %s: perfectly collinear with other features",
                    e.feature,
                )
                self.history.append({"dropped": e.feature, "vif": float("inf")})
                remaining.remove(e.feature)
                continue

            worst = vifs.idxmax()
            if vifs[worst] < self.threshold:
                self.final_vif = vifs
                break
            self.history.append({"dropped": worst, "vif": round(float(vifs[worst]), 4)})
            log.info("Dropping %s (VIF=%.2f)", worst, vifs[worst])
            remaining.remove(worst)

        log.info(
            "VIF pruning (%s, threshold=%.1f): %d -> %d features",
            self.method, self.threshold, X.shape[1], len(remaining),
        )
        return remaining
