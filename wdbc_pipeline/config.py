"""Configuration constants and run settings for the diagnosis pipeline."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path

from wdbc_pipeline.errors import InvalidInput

# Dataset schema
ID_COLUMN = "id"
TARGET_COLUMN = "diagnosis"
DIAGNOSIS_CODES = {"B": 0, "M": 1}
CLASS_NAMES = {0: "benign", 1: "malignant"}

BASE_FEATURES = [
    "radius",
    "texture",
    "perimeter",
    "area",
    "smoothness",
    "compactness",
    "concavity",
    "concave points",
    "symmetry",
    "fractal_dimension",
]
FEATURE_SUFFIXES = ["mean", "se", "worst"]
FEATURE_COLUMNS = [
    f"{base}_{suffix}" for suffix in FEATURE_SUFFIXES for base in BASE_FEATURES
]

# Defaults
CORRELATION_THRESHOLD = 0.7
VIF_THRESHOLD = 10.0
TRAIN_SIZE = 0.8
SPLIT_SEED = 101
DECISION_THRESHOLD = 0.5
LOGISTIC_MAX_ITER = 100
FOREST_TREES = 500
VIF_METHODS = ("ols", "model")
IMPORTANCE_METHODS = ("permutation", "altmann")
DEFAULT_MODELS = ["logistic_regression", "stepwise_logistic", "random_forest"]


@dataclass
class PipelineConfig:
    """
    Settings for one reproducible run.

    Every randomised stage takes its own seed. ``forest_seed`` and
    ``importance_seed`` default to ``split_seed`` when left as None.
    ``forest_train_size`` / ``forest_split_seed`` give the random forest its
    own train/test partition; by default all models share one split.
    """

    csv_path: str | None = None
    builtin: bool = False
    correlation_threshold: float = CORRELATION_THRESHOLD
    vif_threshold: float = VIF_THRESHOLD
    vif_method: str = "ols"
    train_size: float = TRAIN_SIZE
    split_seed: int = SPLIT_SEED
    models: list[str] = field(default_factory=lambda: list(DEFAULT_MODELS))
    logistic_max_iter: int = LOGISTIC_MAX_ITER
    forest_trees: int = FOREST_TREES
    forest_max_depth: int | None = None
    forest_seed: int | None = None
    forest_train_size: float | None = None
    forest_split_seed: int | None = None
    importance: str = "permutation"
    importance_rounds: int = 100
    importance_seed: int | None = None
    decision_threshold: float = DECISION_THRESHOLD
    output_dir: str = "wdbc_output"

    def __post_init__(self):
        if not 0.0 <= self.correlation_threshold <= 1.0:
            raise InvalidInput(
                f"correlation_threshold must be in [0, 1], got {self.correlation_threshold}"
            )
        if self.vif_threshold <= 1.0:
            raise InvalidInput(f"vif_threshold must be > 1, got {self.vif_threshold}")
        if self.vif_method not in VIF_METHODS:
            raise InvalidInput(
                f"Unknown VIF method '{self.vif_method}'. Available: {list(VIF_METHODS)}"
            )
        for name in ("train_size", "forest_train_size"):
            value = getattr(self, name)
            if value is not None and not 0.0 < value < 1.0:
                raise InvalidInput(f"{name} must be in (0, 1), got {value}")
        if not 0.0 <= self.decision_threshold <= 1.0:
            raise InvalidInput(
                f"decision_threshold must be in [0, 1], got {self.decision_threshold}"
            )
        if self.importance not in IMPORTANCE_METHODS:
            raise InvalidInput(
                f"Unknown importance method '{self.importance}'. "
                f"Available: {list(IMPORTANCE_METHODS)}"
            )
        if self.forest_trees < 1 or self.importance_rounds < 1 or self.logistic_max_iter < 1:
            raise InvalidInput(
                "forest_trees, importance_rounds and logistic_max_iter must be positive"
            )
        unknown = set(self.models) - set(DEFAULT_MODELS)
        if unknown or not self.models:
            raise InvalidInput(f"Unknown or empty model selection: {sorted(unknown)}")

    @property
    def shared_split(self) -> bool:
        return self.forest_train_size is None and self.forest_split_seed is None

    def seed_for(self, stage: str) -> int:
        """Seed used by a randomised stage, falling back to the split seed."""
        value = getattr(self, f"{stage}_seed")
        return self.split_seed if value is None else value

    @classmethod
    def from_dict(cls, values: dict) -> "PipelineConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise InvalidInput(f"Unknown configuration keys: {sorted(unknown)}")
        return cls(**values)

    @classmethod
    def from_json(cls, path: str | Path, **overrides) -> "PipelineConfig":
        """Load settings from a JSON file, then apply non-None overrides."""
        try:
            with open(path) as f:
                values = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise InvalidInput(f"Cannot read configuration file {path}: {e}") from e
        if not isinstance(values, dict):
            raise InvalidInput(f"Configuration file {path} must hold a JSON object")
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.from_dict(values)

    def to_dict(self) -> dict:
        return asdict(self)
