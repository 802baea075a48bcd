from wdbc_pipeline.selection.correlation import (
    CorrelationPruner,
    correlation_matrix,
    highly_correlated_pairs,
)
from wdbc_pipeline.selection.vif import VIFPruner, model_vif, ols_vif

__all__ = [
    "CorrelationPruner",
    "VIFPruner",
    "correlation_matrix",
    "highly_correlated_pairs",
    "model_vif",
    "ols_vif",
]
