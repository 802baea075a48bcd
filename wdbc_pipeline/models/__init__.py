from wdbc_pipeline.models.forest import ForestModel, RandomForestFitter
from wdbc_pipeline.models.importance import (
    AltmannImportance,
    ImportanceStrategy,
    PermutationImportance,
)
from wdbc_pipeline.models.logistic import (
    LogisticModel,
    LogisticRegressionFitter,
    StepwiseLogisticFitter,
    fit_logistic,
)
from wdbc_pipeline.models.trainer import MODEL_CONFIGS, ModelTrainer

__all__ = [
    "AltmannImportance",
    "ForestModel",
    "ImportanceStrategy",
    "LogisticModel",
    "LogisticRegressionFitter",
    "MODEL_CONFIGS",
    "ModelTrainer",
    "PermutationImportance",
    "RandomForestFitter",
    "StepwiseLogisticFitter",
    "fit_logistic",
]
