from wdbc_pipeline.evaluation.evaluator import (
    EvaluationResult,
    ModelEvaluator,
    best_model,
    evaluate_scores,
)
from wdbc_pipeline.evaluation.report import Reporter

__all__ = [
    "EvaluationResult",
    "ModelEvaluator",
    "Reporter",
    "best_model",
    "evaluate_scores",
]
