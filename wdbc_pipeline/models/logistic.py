"""Maximum-likelihood logistic regression and forward-stepwise AIC selection."""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field

import numpy as np
import pandas as pd
import statsmodels.api as sm
from scipy.special import expit
from statsmodels.tools.sm_exceptions import PerfectSeparationError

from wdbc_pipeline.data.splitter import Split
from wdbc_pipeline.errors import ConvergenceFailure, InvalidInput, SingularMatrix
from wdbc_pipeline.utils import get_logger

log = get_logger(__name__)

INTERCEPT = "const"


def add_intercept(X: pd.DataFrame) -> pd.DataFrame:
    design = X.astype(float).copy()
    design.insert(0, INTERCEPT, 1.0)
    return design


def check_full_rank(design: pd.DataFrame) -> None:
    """
    Raise SingularMatrix naming the first column that is a linear
    combination of the columns before it.
    """
    values = design.to_numpy(dtype=float)
    if np.linalg.matrix_rank(values) == values.shape[1]:
        return
    rank = 0
    for k in range(values.shape[1]):
        new_rank = np.linalg.matrix_rank(values[:, : k + 1])
        if new_rank == rank:
            column = design.columns[k]
            raise SingularMatrix(
                f"Design matrix is rank-deficient: '{column}' is perfectly "
                "collinear with earlier columns",
                feature=column,
            )
        rank = new_rank


@dataclass
class LogisticModel:
    """A fitted binary logistic regression (logit link, with intercept)."""

    name: str
    features: list[str]
    result: object
    steps: list[dict] = field(default_factory=list)

    @property
    def params(self) -> pd.Series:
        return self.result.params

    @property
    def log_likelihood(self) -> float:
        return float(self.result.llf)

    @property
    def aic(self) -> float:
        return float(self.result.aic)

    @property
    def n_iter(self) -> int:
        return int(self.result.mle_retvals.get("iterations", 0))

    def cov_params(self) -> pd.DataFrame:
        return self.result.cov_params()

    def coefficients(self, alpha: float = 0.05) -> pd.DataFrame:
        """Estimates with observed-information standard errors and Wald tests."""
        ci = self.result.conf_int(alpha=alpha)
        return pd.DataFrame({
            "estimate": self.result.params,
            "std_error": self.result.bse,
            "z_value": self.result.tvalues,
            "p_value": self.result.pvalues,
            "odds_ratio": np.exp(self.result.params),
            "ci_lower": ci[0],
            "ci_upper": ci[1],
        })

    def predict_proba(self, X: pd.DataFrame) -> np.ndarray:
        """Probability of the positive (malignant) class."""
        design = add_intercept(X[self.features])
        return expit(design.to_numpy() @ self.result.params.to_numpy())


def fit_logistic(X: pd.DataFrame, y: pd.Series, max_iter: int = 100,
                 name: str = "logistic_regression") -> LogisticModel:
    """
    Fit ``y ~ 1 + X`` by Newton-Raphson.

    Raises SingularMatrix for a rank-deficient design and ConvergenceFailure
    when the likelihood does not converge within ``max_iter`` iterations or
    the classes are perfectly separated.
    """
    if len(X) != len(y):
        raise InvalidInput(
            f"Feature rows ({len(X)}) and labels ({len(y)}) differ in length"
        )
    design = add_intercept(X)
    check_full_rank(design)

    model = sm.Logit(np.asarray(y, dtype=float), design)
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        try:
            result = model.fit(method="newton", maxiter=max_iter, disp=0)
        except PerfectSeparationError as e:
            raise ConvergenceFailure(
                f"Perfect separation while fitting on {list(X.columns)}: {e}"
            ) from e
        except np.linalg.LinAlgError as e:
            raise SingularMatrix(
                f"Singular Hessian while fitting on {list(X.columns)}: {e}"
            ) from e

    for w in caught:
        log.warning("%s: %s", name, w.message)

    if not result.mle_retvals.get("converged", False):
        raise ConvergenceFailure(
            f"Logistic regression on {len(X.columns)} feature(s) did not converge "
            f"within {max_iter} iterations"
        )

    return LogisticModel(name=name, features=list(X.columns), result=result)


class LogisticRegressionFitter:
    """Logistic regression on every available feature."""

    name = "logistic_regression"

    def __init__(self, max_iter: int = 100):
        self.max_iter = max_iter

    def fit(self, split: Split) -> LogisticModel:
        model = fit_logistic(
            split.X_train, split.y_train, max_iter=self.max_iter, name=self.name,
        )
        log.info(
            "  %s: %d features, logLik=%.3f, AIC=%.3f (%d iterations)",
            self.name, len(model.features), model.log_likelihood, model.aic,
            model.n_iter,
        )
        return model


class StepwiseLogisticFitter:
    """
    Forward selection by AIC, starting from the intercept-only model.

    Each round tries every remaining feature; the one giving the lowest AIC
    enters only if it beats the current model's AIC.
    """

    name = "stepwise_logistic"

    def __init__(self, max_iter: int = 100):
        self.max_iter = max_iter

    def fit(self, split: Split) -> LogisticModel:
        X, y = split.X_train, split.y_train
        selected: list[str] = []
        candidates = list(X.columns)

        current = fit_logistic(X[selected], y, self.max_iter, name=self.name)
        steps = [{"step": 0, "added": None, "aic": round(current.aic, 4)}]
        log.info("  %s: start AIC=%.3f (intercept only)", self.name, current.aic)

        while candidates:
            trials = {
                c: fit_logistic(X[selected + [c]], y, self.max_iter, name=self.name)
                for c in candidates
            }
            best = min(candidates, key=lambda c: trials[c].aic)
            if trials[best].aic >= current.aic:
                break
            selected.append(best)
            candidates.remove(best)
            current = trials[best]
            steps.append({
                "step": len(selected),
                "added": best,
                "aic": round(current.aic, 4),
            })
            log.info("  %s: + %s (AIC=%.3f)", self.name, best, current.aic)

        current.steps = steps
        log.info(
            "  %s: selected %d of %d features, AIC=%.3f",
            self.name, len(selected), X.shape[1], current.aic,
        )
        return current
