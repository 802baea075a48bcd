import numpy as np
import pandas as pd
import pytest

from wdbc_pipeline.errors import InvalidInput
from wdbc_pipeline.evaluation import ModelEvaluator, best_model, evaluate_scores


def test_confusion_matrix_and_rates():
    y = [0, 0, 0, 1, 1]
    scores = [0.1, 0.7, 0.2, 0.4, 0.9]
    result = evaluate_scores(y, scores)
    assert (result.tn, result.fp, result.fn, result.tp) == (2, 1, 1, 1)
    assert result.accuracy == pytest.approx(3 / 5)
    assert result.sensitivity == pytest.approx(1 / 2)
    assert result.specificity == pytest.approx(2 / 3)
    assert result.confusion_matrix.tolist() == [[2, 1], [1, 1]]


def test_threshold_is_strict():
    result = evaluate_scores([0, 1], [0.5, 0.5], threshold=0.5)
    assert (result.tp, result.fp) == (0, 0)
    lowered = evaluate_scores([0, 1], [0.5, 0.5], threshold=0.4)
    assert (lowered.tp, lowered.fp) == (1, 1)


@pytest.mark.parametrize("seed", range(10))
def test_accuracy_and_misclassification_sum_to_one(seed):
    rng = np.random.default_rng(seed)
    n = int(rng.integers(10, 200))
    y = rng.integers(0, 2, size=n)
    y[:2] = [0, 1]
    result = evaluate_scores(y, rng.random(n))
    assert result.accuracy + result.misclassification_rate == 1.0


def test_perfect_ranking_has_unit_auc():
    result = evaluate_scores([0, 0, 1, 1], [0.1, 0.2, 0.8, 0.9])
    assert result.auc == pytest.approx(1.0)
    assert result.accuracy == 1.0


def test_label_independent_score_has_half_auc():
    rng = np.random.default_rng(0)
    y = rng.integers(0, 2, size=20000)
    assert evaluate_scores(y, np.full(len(y), 0.3)).auc == pytest.approx(0.5)
    random_auc = evaluate_scores(y, rng.random(len(y))).auc
    assert 0.0 <= random_auc <= 1.0
    assert random_auc == pytest.approx(0.5, abs=0.02)


def test_inverted_scores_have_zero_auc():
    result = evaluate_scores([0, 0, 1, 1], [0.9, 0.8, 0.2, 0.1])
    assert result.auc == pytest.approx(0.0)


def test_single_class_test_set_rejected():
    with pytest.raises(InvalidInput):
        evaluate_scores([1, 1, 1], [0.2, 0.6, 0.9])


def test_best_model_prefers_auc_then_error():
    y = [0, 0, 1, 1, 0, 1]
    results = {
        "a": evaluate_scores(y, [0.1, 0.2, 0.8, 0.9, 0.3, 0.7], name="a"),
        # same ranking (AUC 1) but a worse threshold placement
        "b": evaluate_scores(y, [0.1, 0.6, 0.8, 0.9, 0.3, 0.7], name="b"),
        "c": evaluate_scores(y, [0.9, 0.2, 0.8, 0.1, 0.3, 0.7], name="c"),
    }
    assert results["a"].auc == results["b"].auc == pytest.approx(1.0)
    assert results["b"].misclassification_rate > results["a"].misclassification_rate
    assert best_model(results) == "a"
    del results["a"]
    assert best_model(results) == "b"


def test_evaluator_uses_model_scores():
    class Fixed:
        name = "fixed"

        def predict_proba(self, X):
            return np.asarray(X["score"])

    X = pd.DataFrame({"score": [0.2, 0.9, 0.6, 0.1]})
    result = ModelEvaluator(threshold=0.5).evaluate(Fixed(), X, [0, 1, 0, 0])
    assert result.name == "fixed"
    assert (result.tp, result.fp, result.tn, result.fn) == (1, 1, 2, 0)


def test_threshold_bounds():
    with pytest.raises(InvalidInput):
        ModelEvaluator(threshold=1.5)
