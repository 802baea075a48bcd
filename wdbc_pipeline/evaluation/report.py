"""Assembles run results into a JSON-serialisable report and a text summary."""

import json
import math
from datetime import datetime, timezone

import numpy as np
import pandas as pd

from wdbc_pipeline import __version__
from wdbc_pipeline.models.forest import ForestModel
from wdbc_pipeline.models.logistic import LogisticModel
from wdbc_pipeline.utils import get_logger

log = get_logger(__name__)


def _clean(value):
    """Recursively convert numpy/pandas values into plain JSON types."""
    if isinstance(value, pd.DataFrame):
        return {str(k): _clean(v) for k, v in value.to_dict(orient="index").items()}
    if isinstance(value, pd.Series):
        return {str(k): _clean(v) for k, v in value.items()}
    if isinstance(value, dict):
        return {str(k): _clean(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_clean(v) for v in value]
    if isinstance(value, np.ndarray):
        return _clean(value.tolist())
    if isinstance(value, np.bool_):
        return bool(value)
    if isinstance(value, np.integer):
        return int(value)
    if isinstance(value, (float, np.floating)):
        value = float(value)
        return None if math.isnan(value) or math.isinf(value) else value
    return value


def describe_model(model) -> dict:
    """Coefficient or importance table of a fitted model."""
    if isinstance(model, LogisticModel):
        return {
            "type": "logistic",
            "features": model.features,
            "coefficients": model.coefficients(),
            "log_likelihood": model.log_likelihood,
            "aic": model.aic,
            "iterations": model.n_iter,
            "steps": model.steps,
        }
    if isinstance(model, ForestModel):
        return {
            "type": "random_forest",
            "features": model.features,
            "n_estimators": model.estimator.n_estimators,
            "oob_error": model.oob_error,
            "importance_method": model.importance_method,
            "p_value_kind": model.p_value_kind,
            "importance": model.importance,
        }
    return {"type": type(model).__name__, "features": getattr(model, "features", [])}


class Reporter:
    """Builds the final report consumed by renderers."""

    def generate(self, dataset_metadata: dict, config: dict, eda_report: dict,
                 selection: dict, splits: dict, training_results: dict,
                 evaluation_results: dict) -> dict:
        evaluations = evaluation_results["evaluations"]
        report = {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "version": __version__,
            "dataset": dataset_metadata,
            "config": config,
            "exploratory": eda_report,
            "feature_selection": selection,
            "splits": {name: split.summary() for name, split in splits.items()},
            "models": {
                name: describe_model(model)
                for name, model in training_results["trained_models"].items()
            },
            "fit_time_seconds": training_results.get("fit_time_seconds", {}),
            "evaluation": {name: r.to_dict() for name, r in evaluations.items()},
            "best_model": evaluation_results["best_model_name"],
        }
        return _clean(report)

    def print_summary(self, report: dict) -> str:
        selection = report["feature_selection"]
        lines = [
            "=" * 72,
            "BREAST TUMOUR DIAGNOSIS - MODEL COMPARISON",
            "=" * 72,
            f"Dataset: {report['dataset']['source']} "
            f"({report['dataset']['n_samples']} samples)",
            f"Features: {selection['n_initial']} -> {selection['n_after_correlation']}"
            f" (|r| pruning) -> {len(selection['selected_features'])} (VIF pruning)",
            f"Selected: {', '.join(selection['selected_features'])}",
            "",
            f"{'Model':<22}{'Accuracy':>10}{'Sens.':>10}{'Spec.':>10}{'AUC':>10}",
            "-" * 62,
        ]
        for name, m in report["evaluation"].items():
            lines.append(
                f"{name:<22}{_pct(m['accuracy']):>10}{_pct(m['sensitivity']):>10}"
                f"{_pct(m['specificity']):>10}{_num(m['auc']):>10}"
            )
        lines += ["-" * 62, f"Best model (AUC): {report['best_model']}", "=" * 72]
        return "\n".join(lines)

    def save_json(self, report: dict, path: str):
        with open(path, "w") as f:
            json.dump(report, f, indent=2)
        log.info("Report written to %s", path)


def _pct(value) -> str:
    return "n/a" if value is None else f"{value * 100:.2f}%"


def _num(value) -> str:
    return "n/a" if value is None else f"{value:.4f}"
