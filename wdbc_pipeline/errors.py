"""
Error taxonomy for the diagnosis pipeline.

Every error is fatal to a run. Errors carry the pipeline stage that raised
them (filled in by the orchestrator when the raising code does not know it)
and, where one is responsible, the offending column or feature.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for all pipeline failures."""

    def __init__(self, message: str, stage: str | None = None,
                 feature: str | None = None):
        self.message = message
        self.stage = stage
        self.feature = feature
        super().__init__(message)

    def __str__(self) -> str:
        prefix = f"[{self.stage}] " if self.stage else ""
        return f"{prefix}{self.message}"


class InvalidInput(PipelineError):
    """Schema mismatch, unexpected column count/type or bad parameter."""


class MissingData(PipelineError):
    """A null value is present in the input table."""


class SingularMatrix(PipelineError):
    """Perfect collinearity makes a regression design rank-deficient."""


class ConvergenceFailure(PipelineError):
    """An iterative fit did not converge within its iteration bound."""
