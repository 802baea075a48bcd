"""
Variable-importance strategies for the random forest.

Each strategy gives two columns for a fitted forest: the importance of each
feature and a p_value column whose meaning the strategy names in
``p_value_kind``. Two permutation schemes are provided:

    PermutationImportance  permute one feature across the test rows and
                           measure the drop in majority-vote accuracy.
    AltmannImportance      permute the response, refit, and compare the
                           observed impurity importance with that null
                           distribution (Altmann et al., 2010).
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np
import pandas as pd
from sklearn.base import clone
from sklearn.inspection import permutation_importance

from wdbc_pipeline.data.splitter import Split
from wdbc_pipeline.errors import InvalidInput
from wdbc_pipeline.models.forest import ForestModel, vote_accuracy
from wdbc_pipeline.utils import get_logger

log = get_logger(__name__)


class ImportanceStrategy(ABC):
    """Capability interface: feature importances and their p-values."""

    #: what the p_value column reports, carried into the model report
    p_value_kind = "p-value"

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def importances(self, model: ForestModel, split: Split) -> pd.Series:
        ...

    @abstractmethod
    def p_values(self, model: ForestModel, split: Split) -> pd.Series:
        ...


class PermutationImportance(ImportanceStrategy):
    """
    Mean accuracy drop over ``n_repeats`` shuffles of each feature on the
    test rows.

    The p_value column is the share of non-positive drops,
    (1 + #{drop <= 0}) / (1 + n_repeats). The repeats are draws of the
    importance itself, not of a null distribution, so this is a stability
    score rather than a significance test. Use AltmannImportance for that.
    """

    name = "permutation"
    p_value_kind = "share of non-positive drops"

    def __init__(self, n_repeats: int = 100, seed: int = 101):
        self.n_repeats = n_repeats
        self.seed = seed
        self._cache: tuple | None = None

    def _drops(self, model: ForestModel, split: Split) -> pd.DataFrame:
        key = (id(model), id(split))
        if self._cache is None or self._cache[0] != key:
            result = permutation_importance(
                model.estimator,
                split.X_test[model.features],
                split.y_test,
                scoring=vote_accuracy,
                n_repeats=self.n_repeats,
                random_state=self.seed,
            )
            drops = pd.DataFrame(result.importances, index=model.features)
            self._cache = (key, drops)
        return self._cache[1]

    def importances(self, model: ForestModel, split: Split) -> pd.Series:
        return self._drops(model, split).mean(axis=1).rename("importance")

    def p_values(self, model: ForestModel, split: Split) -> pd.Series:
        drops = self._drops(model, split)
        no_effect = (drops <= 0).sum(axis=1)
        return ((1 + no_effect) / (1 + self.n_repeats)).rename("p_value")


class AltmannImportance(ImportanceStrategy):
    """
    Impurity importance tested against refits on permuted responses.

    p-value = (1 + #{null >= observed}) / (1 + n_permutations).
    """

    name = "altmann"
    p_value_kind = "permutation test"

    def __init__(self, n_permutations: int = 100, seed: int = 101):
        self.n_permutations = n_permutations
        self.seed = seed

    def importances(self, model: ForestModel, split: Split) -> pd.Series:
        return pd.Series(
            model.estimator.feature_importances_, index=model.features,
            name="importance",
        )

    def null_distribution(self, model: ForestModel, split: Split) -> np.ndarray:
        rng = np.random.default_rng(self.seed)
        X = split.X_train[model.features]
        y = np.asarray(split.y_train)
        null = np.empty((self.n_permutations, len(model.features)))
        log.info(
            "Altmann test: refitting %d forests on permuted responses",
            self.n_permutations,
        )
        for k in range(self.n_permutations):
            refit = clone(model.estimator).set_params(
                oob_score=False, random_state=int(rng.integers(2**31 - 1)),
            )
            refit.fit(X, rng.permutation(y))
            null[k] = refit.feature_importances_
        return null

    def p_values(self, model: ForestModel, split: Split) -> pd.Series:
        observed = self.importances(model, split).to_numpy()
        null = self.null_distribution(model, split)
        exceed = (null >= observed).sum(axis=0)
        return pd.Series(
            (1 + exceed) / (1 + self.n_permutations), index=model.features,
            name="p_value",
        )


IMPORTANCE_STRATEGIES = {
    "permutation": PermutationImportance,
    "altmann": AltmannImportance,
}


def make_importance(method: str, rounds: int, seed: int) -> ImportanceStrategy:
    if method not in IMPORTANCE_STRATEGIES:
        raise InvalidInput(
            f"Unknown importance method '{method}'. "
            f"Available: {list(IMPORTANCE_STRATEGIES)}"
        )
    return IMPORTANCE_STRATEGIES[method](rounds, seed=seed)
