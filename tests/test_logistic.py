import numpy as np
import pandas as pd
import pytest

from wdbc_pipeline.data import StratifiedSplitter
from wdbc_pipeline.errors import ConvergenceFailure, SingularMatrix
from wdbc_pipeline.models import (
    LogisticRegressionFitter,
    StepwiseLogisticFitter,
    fit_logistic,
)


def test_recovers_effect_directions(logistic_data):
    X, y = logistic_data
    model = fit_logistic(X, y)
    coef = model.coefficients()
    assert list(coef.index) == ["const", "x1", "x2", "x3"]
    assert list(coef.columns) == [
        "estimate", "std_error", "z_value", "p_value", "odds_ratio",
        "ci_lower", "ci_upper",
    ]
    assert coef.loc["x1", "estimate"] == pytest.approx(2.0, abs=0.4)
    assert coef.loc["x2", "estimate"] == pytest.approx(-1.5, abs=0.4)
    assert coef.loc["x1", "p_value"] < 1e-6
    assert coef.loc["x3", "p_value"] > 0.01
    assert coef.loc["x1", "z_value"] == pytest.approx(
        coef.loc["x1", "estimate"] / coef.loc["x1", "std_error"]
    )
    assert (coef["ci_lower"] < coef["estimate"]).all()


def test_aic_definition(logistic_data):
    X, y = logistic_data
    model = fit_logistic(X, y)
    k = len(model.features) + 1
    assert model.aic == pytest.approx(-2 * model.log_likelihood + 2 * k)


def test_probabilities_match_linear_predictor(logistic_data):
    X, y = logistic_data
    model = fit_logistic(X, y)
    proba = model.predict_proba(X.head(5))
    eta = model.params["const"] + X.head(5) @ model.params[["x1", "x2", "x3"]]
    np.testing.assert_allclose(proba, 1 / (1 + np.exp(-eta.to_numpy())))
    assert ((proba > 0) & (proba < 1)).all()


def test_intercept_only_fit(logistic_data):
    X, y = logistic_data
    model = fit_logistic(X[[]], y)
    p = y.mean()
    assert model.predict_proba(X[[]].head(3)) == pytest.approx([p] * 3)


def test_rank_deficient_design(logistic_data):
    X, y = logistic_data
    with pytest.raises(SingularMatrix) as info:
        fit_logistic(X.assign(x4=X["x1"] + X["x3"]), y)
    assert info.value.feature == "x4"


def test_iteration_bound(logistic_data):
    X, y = logistic_data
    with pytest.raises(ConvergenceFailure):
        fit_logistic(X, y, max_iter=1)


def test_full_fitter_uses_every_feature(logistic_split):
    model = LogisticRegressionFitter().fit(logistic_split)
    assert model.name == "logistic_regression"
    assert model.features == ["x1", "x2", "x3"]


def test_stepwise_adds_strong_predictors_first(logistic_split):
    model = StepwiseLogisticFitter().fit(logistic_split)
    assert model.name == "stepwise_logistic"
    assert model.steps[0]["added"] is None
    entered = [s["added"] for s in model.steps[1:]]
    assert entered[:2] == ["x1", "x2"]
    assert model.features == entered
    aics = [s["aic"] for s in model.steps]
    assert all(later < earlier for earlier, later in zip(aics, aics[1:]))
    assert model.aic == pytest.approx(aics[-1], abs=1e-3)


def test_stepwise_stops_when_aic_stops_improving():
    rng = np.random.default_rng(5)
    n = 300
    X = pd.DataFrame({"signal": rng.normal(size=n)})
    for k in range(4):
        X[f"noise{k}"] = rng.normal(size=n)
    y = pd.Series(rng.binomial(1, 1 / (1 + np.exp(-3 * X["signal"]))))
    split = StratifiedSplitter(0.8, seed=1).split(X, y)
    model = StepwiseLogisticFitter().fit(split)
    assert model.features[0] == "signal"
    full = fit_logistic(split.X_train[model.features], split.y_train)
    # no remaining candidate lowers the AIC of the selected model
    for extra in set(X.columns) - set(model.features):
        trial = fit_logistic(split.X_train[model.features + [extra]], split.y_train)
        assert trial.aic >= full.aic
