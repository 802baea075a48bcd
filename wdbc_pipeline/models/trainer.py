"""Model training module for the three diagnosis classifiers."""

import time

from wdbc_pipeline.data.splitter import Split
from wdbc_pipeline.errors import InvalidInput
from wdbc_pipeline.models.forest import RandomForestFitter
from wdbc_pipeline.models.importance import make_importance
from wdbc_pipeline.models.logistic import (
    LogisticRegressionFitter,
    StepwiseLogisticFitter,
)
from wdbc_pipeline.utils import get_logger

log = get_logger(__name__)

# Model configurations: name -> (fitter class, default kwargs)
MODEL_CONFIGS = {
    "logistic_regression": (
        LogisticRegressionFitter,
        {"max_iter": 100},
    ),
    "stepwise_logistic": (
        StepwiseLogisticFitter,
        {"max_iter": 100},
    ),
    "random_forest": (
        RandomForestFitter,
        {"n_estimators": 500, "max_depth": None, "max_features": "sqrt", "seed": 101},
    ),
}


class ModelTrainer:
    """Fits the selected classifiers, each on the split assigned to it."""

    def __init__(self, models: list[str] | None = None,
                 overrides: dict[str, dict] | None = None):
        """
        Args:
            models: list of model names to fit, or None for all.
            overrides: per-model keyword arguments merged over the defaults.
        """
        if models is None:
            models = list(MODEL_CONFIGS.keys())

        unknown = set(models) - set(MODEL_CONFIGS.keys())
        if unknown:
            raise InvalidInput(f"Unknown models: {sorted(unknown)}")

        self.model_names = models
        self.overrides = overrides or {}

    @staticmethod
    def list_available_models() -> list[str]:
        """Return all available model names."""
        return list(MODEL_CONFIGS.keys())

    def build(self, name: str):
        cls, kwargs = MODEL_CONFIGS[name]
        params = {**kwargs, **self.overrides.get(name, {})}
        if name == "random_forest":
            method = params.pop("importance", None)
            rounds = params.pop("importance_rounds", 100)
            importance_seed = params.pop("importance_seed", params["seed"])
            if method is not None:
                params["importance"] = make_importance(method, rounds, importance_seed)
        return cls(**params)

    def run(self, splits: dict[str, Split]) -> dict:
        """
        Fit every selected model on ``splits[name]``.

        Returns dict with the fitted models keyed by name plus fit timings.
        """
        missing = [n for n in self.model_names if n not in splits]
        if missing:
            raise InvalidInput(f"No split provided for: {missing}")

        log.info("Fitting %d models", len(self.model_names))

        fitted, timings = {}, {}
        for name in self.model_names:
            fitter = self.build(name)
            split = splits[name]
            log.info("Training: %s on %d rows", name, len(split.train_index))

            t0 = time.time()
            fitted[name] = fitter.fit(split)
            timings[name] = round(time.time() - t0, 3)

        return {
            "trained_models": fitted,
            "fit_time_seconds": timings,
        }
