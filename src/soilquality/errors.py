"""
Exceptions and warning categories raised by the soil quality pipeline.

Errors abort the run at the stage that detects them. Warnings are
informational: the pipeline records them on the result and lets them
through to the caller's warning filters.
"""


class SQIError(Exception):
    """Base class for fatal pipeline errors."""


class ValidationError(SQIError, ValueError):
    """Malformed input, missing column/rule or out-of-range parameter."""


class InsufficientDataError(SQIError, ValueError):
    """Too few columns, observations or indicators to proceed."""


class InconsistentMatrixError(SQIError, ValueError):
    """Pairwise matrix is not square, diagonal != 1 or not reciprocal."""


class NoIndicatorsSelectedError(SQIError):
    """PCA thresholds left the minimum data set empty."""


class SQIWarning(UserWarning):
    """Base class for non-fatal pipeline conditions."""


class ConsistencyWarning(SQIWarning):
    """Consistency ratio of the pairwise judgments exceeds 0.1."""


class DataQualityWarning(SQIWarning):
    """Rows or columns were dropped because of missing values."""
