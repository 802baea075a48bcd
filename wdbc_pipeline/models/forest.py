"""Random forest classifier with majority-vote prediction."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.ensemble import RandomForestClassifier

from wdbc_pipeline.data.splitter import Split
from wdbc_pipeline.errors import InvalidInput
from wdbc_pipeline.utils import get_logger

log = get_logger(__name__)


def vote_share(estimator: RandomForestClassifier, X) -> np.ndarray:
    """Fraction of trees voting for the positive class."""
    values = np.asarray(X, dtype=float)
    votes = np.stack([tree.predict(values) for tree in estimator.estimators_])
    # sub-trees predict class indices; index 1 is the positive class
    return votes.mean(axis=0)


def vote_accuracy(estimator: RandomForestClassifier, X, y) -> float:
    """Scorer for majority-vote accuracy (an exact tie counts as negative)."""
    predicted = (vote_share(estimator, X) > 0.5).astype(int)
    return float(np.mean(predicted == np.asarray(y)))


@dataclass
class ForestModel:
    name: str
    features: list[str]
    estimator: RandomForestClassifier
    importance: pd.DataFrame | None = None
    importance_method: str | None = None
    p_value_kind: str | None = None

    @property
    def oob_error(self) -> float | None:
        score = getattr(self.estimator, "oob_score_", None)
        return None if score is None else 1.0 - float(score)

    def predict_proba(self, X: pd.DataFrame) -> np.ndarray:
        return vote_share(self.estimator, X[self.features])


class RandomForestFitter:
    """
    Bootstrap ensemble of decision trees with ``max_features`` candidate
    features per split. Variable importance is delegated to an
    ImportanceStrategy, computed once the forest is fitted.
    """

    name = "random_forest"

    def __init__(self, n_estimators: int = 500, max_depth: int | None = None,
                 max_features: str | int = "sqrt", seed: int = 101,
                 importance=None):
        self.n_estimators = n_estimators
        self.max_depth = max_depth
        self.max_features = max_features
        self.seed = seed
        self.importance = importance

    def fit(self, split: Split) -> ForestModel:
        if not set(np.unique(split.y_train)) <= {0, 1}:
            raise InvalidInput("Random forest expects labels encoded as 0/1")
        estimator = RandomForestClassifier(
            n_estimators=self.n_estimators,
            max_depth=self.max_depth,
            max_features=self.max_features,
            bootstrap=True,
            oob_score=True,
            random_state=self.seed,
        )
        estimator.fit(split.X_train, split.y_train)
        model = ForestModel(
            name=self.name, features=split.feature_names, estimator=estimator,
        )
        log.info(
            "  %s: %d trees (seed=%d), OOB error=%.4f",
            self.name, self.n_estimators, self.seed, model.oob_error,
        )

        if self.importance is not None:
            table = pd.DataFrame({
                "importance": self.importance.importances(model, split),
                "p_value": self.importance.p_values(model, split),
            }).sort_values("importance", ascending=False)
            model.importance = table
            model.importance_method = self.importance.name
            model.p_value_kind = self.importance.p_value_kind
            for feature, row in table.head(5).iterrows():
                log.info(
                    "    %s importance=%.4f (%s=%.3f)",
                    feature, row["importance"], model.p_value_kind, row["p_value"],
                )
        return model
