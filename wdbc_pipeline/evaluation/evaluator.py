"""Test-set evaluation: confusion matrix, rates, ROC curve and AUC."""

from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.metrics import auc, confusion_matrix, roc_curve

from wdbc_pipeline.data.splitter import Split
from wdbc_pipeline.errors import InvalidInput
from wdbc_pipeline.utils import get_logger

log = get_logger(__name__)


def _ratio(num: int, den: int) -> float:
    return num / den if den else float("nan")


@dataclass
class EvaluationResult:
    """Metrics of one fitted model against one test subset."""

    name: str
    confusion_matrix: np.ndarray  # rows = true (benign, malignant), cols = predicted
    accuracy: float
    misclassification_rate: float
    sensitivity: float
    specificity: float
    fpr: np.ndarray
    tpr: np.ndarray
    roc_thresholds: np.ndarray
    auc: float
    threshold: float
    n: int

    @property
    def tn(self) -> int:
        return int(self.confusion_matrix[0, 0])

    @property
    def fp(self) -> int:
        return int(self.confusion_matrix[0, 1])

    @property
    def fn(self) -> int:
        return int(self.confusion_matrix[1, 0])

    @property
    def tp(self) -> int:
        return int(self.confusion_matrix[1, 1])

    def to_dict(self) -> dict:
        return {
            "confusion_matrix": self.confusion_matrix.tolist(),
            "tp": self.tp,
            "tn": self.tn,
            "fp": self.fp,
            "fn": self.fn,
            "accuracy": round(self.accuracy, 4),
            "misclassification_rate": round(self.misclassification_rate, 4),
            "sensitivity": round(self.sensitivity, 4),
            "specificity": round(self.specificity, 4),
            "auc": round(self.auc, 4),
            "threshold": self.threshold,
            "n": self.n,
            "roc": {
                "fpr": self.fpr.tolist(),
                "tpr": self.tpr.tolist(),
            },
        }


def evaluate_scores(y_true, scores, threshold: float = 0.5,
                    name: str = "model") -> EvaluationResult:
    """
    Score a vector of predicted probabilities against the true labels.

    A row is predicted malignant when its score exceeds ``threshold``.
    """
    y = np.asarray(y_true).astype(int)
    s = np.asarray(scores, dtype=float)
    if y.shape != s.shape:
        raise InvalidInput(f"{len(y)} labels but {len(s)} scores")
    if len(np.unique(y)) != 2:
        raise InvalidInput(
            "ROC/AUC needs both classes in the test subset, found "
            f"{sorted(np.unique(y).tolist())}"
        )

    predicted = (s > threshold).astype(int)
    cm = confusion_matrix(y, predicted, labels=[0, 1])
    tn, fp, fn, tp = (int(v) for v in cm.ravel())

    accuracy = (tp + tn) / len(y)
    fpr, tpr, roc_thresholds = roc_curve(y, s)

    return EvaluationResult(
        name=name,
        confusion_matrix=cm,
        accuracy=accuracy,
        misclassification_rate=1.0 - accuracy,
        sensitivity=_ratio(tp, tp + fn),
        specificity=_ratio(tn, tn + fp),
        fpr=fpr,
        tpr=tpr,
        roc_thresholds=roc_thresholds,
        auc=float(auc(fpr, tpr)),
        threshold=threshold,
        n=len(y),
    )


def best_model(results: dict[str, EvaluationResult]) -> str:
    """Highest AUC wins; ties go to the lower misclassification rate."""
    if not results:
        raise InvalidInput("No evaluation results to compare")
    return min(
        results,
        key=lambda n: (-results[n].auc, results[n].misclassification_rate),
    )


class ModelEvaluator:
    """Evaluates fitted models on their held-out test rows."""

    def __init__(self, threshold: float = 0.5):
        if not 0.0 <= threshold <= 1.0:
            raise InvalidInput(f"Decision threshold must be in [0, 1], got {threshold}")
        self.threshold = threshold

    def evaluate(self, model, X_test: pd.DataFrame, y_test) -> EvaluationResult:
        scores = model.predict_proba(X_test)
        return evaluate_scores(y_test, scores, self.threshold, name=model.name)

    def run(self, training_results: dict, splits: dict[str, Split]) -> dict:
        """
        Evaluate every trained model on the test side of its own split.

        Returns a dict of model_name -> EvaluationResult plus the best model.
        """
        trained_models = training_results["trained_models"]
        log.info("Evaluating %d models", len(trained_models))

        evaluations = {}
        for name, model in trained_models.items():
            split = splits[name]
            result = self.evaluate(model, split.X_test, split.y_test)
            evaluations[name] = result
            log.info(
                "  %s: acc=%.4f, sens=%.4f, spec=%.4f, auc=%.4f (n=%d)",
                name, result.accuracy, result.sensitivity,
                result.specificity, result.auc, result.n,
            )

        best_name = best_model(evaluations)
        log.info(
            "Best model on test set: %s (AUC=%.4f, misclassification=%.4f)",
            best_name, evaluations[best_name].auc,
            evaluations[best_name].misclassification_rate,
        )

        return {
            "evaluations": evaluations,
            "best_model_name": best_name,
        }
