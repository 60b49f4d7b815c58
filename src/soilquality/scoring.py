"""
Indicator scoring: map raw property values onto a common [0, 1] quality scale.

Four rules are available, each a small immutable object built by the caller:

- HigherBetter: min-max normalization, larger values score higher
- LowerBetter: inverted min-max normalization
- OptimumRange: 1 at the optimum, decreasing (linearly or quadratically) to 0
  at `tolerance` away from it
- ThresholdScoring: piecewise-linear interpolation through (threshold, score)
  pairs, clamped at both ends

Every rule keeps missing values missing.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Literal, Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from .config import SCORED_SUFFIX
from .errors import ValidationError
from .validators import assert_numeric_columns

logger = logging.getLogger(__name__)

Penalty = Literal["linear", "quadratic"]
PENALTIES = ("linear", "quadratic")


def _as_float_series(x) -> pd.Series:
    if isinstance(x, pd.Series):
        return x.astype(float)
    return pd.Series(np.asarray(x, dtype=float))


def _check_finite(name: str, value) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{name} must be numeric, got {value!r}") from e
    if not np.isfinite(value):
        raise ValidationError(f"{name} must be finite, got {value!r}")
    return value


# -------------------------------
# Scoring functions
# -------------------------------

def _min_max_bounds(x: pd.Series, min_value, max_value) -> tuple[float, float]:
    lo = x.min() if min_value is None else float(min_value)
    hi = x.max() if max_value is None else float(max_value)
    return lo, hi


def score_higher_better(x, min_value: Optional[float] = None, max_value: Optional[float] = None) -> pd.Series:
    """
    Min-max normalization where higher raw values are better.

    Bounds default to the data's own min/max (missing ignored). When the bounds
    coincide every observed value scores 1.
    """
    x = _as_float_series(x)
    lo, hi = _min_max_bounds(x, min_value, max_value)
    if np.isnan(lo) or np.isnan(hi):
        return x.copy()
    if lo == hi:
        return x.where(x.isna(), 1.0)
    return ((x - lo) / (hi - lo)).clip(0.0, 1.0)


def score_lower_better(x, min_value: Optional[float] = None, max_value: Optional[float] = None) -> pd.Series:
    """Inverted min-max normalization where lower raw values are better."""
    x = _as_float_series(x)
    lo, hi = _min_max_bounds(x, min_value, max_value)
    if np.isnan(lo) or np.isnan(hi):
        return x.copy()
    if lo == hi:
        return x.where(x.isna(), 1.0)
    return ((hi - x) / (hi - lo)).clip(0.0, 1.0)


def score_optimum(x, optimum: float, tolerance: float, penalty: Penalty = "linear") -> pd.Series:
    """Score by distance from an optimum: 1 - d/tol (linear) or 1 - (d/tol)^2 (quadratic)."""
    if penalty not in PENALTIES:
        raise ValidationError("penalty must be 'linear' or 'quadratic'")
    if not tolerance > 0:
        raise ValidationError("tolerance must be a positive number")
    x = _as_float_series(x)
    distance = (x - optimum).abs() / tolerance
    if penalty == "quadratic":
        distance = distance ** 2
    return (1.0 - distance).clip(0.0, 1.0)


def score_threshold(x, thresholds: Sequence[float], scores: Sequence[float]) -> pd.Series:
    """
    Piecewise-linear interpolation between (threshold, score) pairs.

    Values below the first or above the last threshold take the boundary
    score; the result is clamped to [0, 1].
    """
    t = np.asarray(thresholds, dtype=float)
    s = np.asarray(scores, dtype=float)
    if t.shape != s.shape or t.ndim != 1:
        raise ValidationError("thresholds and scores must have the same length")
    if t.size == 0:
        raise ValidationError("thresholds and scores must not be empty")
    order = np.argsort(t, kind="stable")
    t, s = t[order], s[order]

    x = _as_float_series(x)
    out = x.copy()
    observed = x.notna()
    out[observed] = np.interp(x[observed].to_numpy(), t, s)
    return out.clip(0.0, 1.0)


# -------------------------------
# Scoring rules
# -------------------------------

class ScoringRule(ABC):
    """
    Base class of the scoring rules.

    The family is closed: HigherBetter, LowerBetter, OptimumRange and
    ThresholdScoring are the rules the pipeline knows how to describe and
    validate.
    """

    @abstractmethod
    def score(self, values) -> pd.Series:
        ...

    @abstractmethod
    def describe(self) -> str:
        ...


@dataclass(frozen=True)
class _MinMaxRule(ScoringRule):
    min_value: Optional[float] = None
    max_value: Optional[float] = None

    def __post_init__(self):
        for name in ("min_value", "max_value"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, _check_finite(name, value))
        if self.min_value is not None and self.max_value is not None and self.min_value > self.max_value:
            raise ValidationError(f"min_value ({self.min_value}) must not exceed max_value ({self.max_value})")

    def _bounds_text(self) -> str:
        parts = []
        if self.min_value is not None:
            parts.append(f"min={self.min_value:g}")
        if self.max_value is not None:
            parts.append(f"max={self.max_value:g}")
        return f" ({', '.join(parts)})" if parts else ""


@dataclass(frozen=True)
class HigherBetter(_MinMaxRule):

    def score(self, values) -> pd.Series:
        return score_higher_better(values, self.min_value, self.max_value)

    def describe(self) -> str:
        return "Higher values are better" + self._bounds_text()


@dataclass(frozen=True)
class LowerBetter(_MinMaxRule):

    def score(self, values) -> pd.Series:
        return score_lower_better(values, self.min_value, self.max_value)

    def describe(self) -> str:
        return "Lower values are better" + self._bounds_text()


@dataclass(frozen=True)
class OptimumRange(ScoringRule):
    optimum: float
    tolerance: float = 1.0
    penalty: Penalty = "linear"

    def __post_init__(self):
        object.__setattr__(self, "optimum", _check_finite("optimum", self.optimum))
        tolerance = _check_finite("tolerance", self.tolerance)
        if tolerance <= 0:
            raise ValidationError("tolerance must be a positive number")
        object.__setattr__(self, "tolerance", tolerance)
        if self.penalty not in PENALTIES:
            raise ValidationError("penalty must be 'linear' or 'quadratic'")

    def score(self, values) -> pd.Series:
        return score_optimum(values, self.optimum, self.tolerance, self.penalty)

    def describe(self) -> str:
        return f"Optimum range (optimum={self.optimum:g}, tolerance={self.tolerance:g}, penalty={self.penalty})"


@dataclass(frozen=True)
class ThresholdScoring(ScoringRule):
    thresholds: tuple[float, ...] = field(default=())
    scores: tuple[float, ...] = field(default=())

    def __post_init__(self):
        if isinstance(self.thresholds, str) or isinstance(self.scores, str):
            raise ValidationError("thresholds and scores must be numeric sequences")
        t = [_check_finite("threshold", v) for v in self.thresholds]
        s = [_check_finite("score", v) for v in self.scores]
        if len(t) != len(s):
            raise ValidationError("thresholds and scores must have equal length")
        if not t:
            raise ValidationError("thresholds and scores must not be empty")
        pairs = sorted(zip(t, s), key=lambda p: p[0])
        if any(a[0] == b[0] for a, b in zip(pairs, pairs[1:])):
            raise ValidationError("thresholds must be distinct")
        object.__setattr__(self, "thresholds", tuple(p[0] for p in pairs))
        object.__setattr__(self, "scores", tuple(p[1] for p in pairs))

    def score(self, values) -> pd.Series:
        return score_threshold(values, self.thresholds, self.scores)

    def describe(self) -> str:
        return (f"Threshold-based scoring (thresholds={', '.join(f'{v:g}' for v in self.thresholds)}; "
                f"scores={', '.join(f'{v:g}' for v in self.scores)})")


RULE_TYPES = (HigherBetter, LowerBetter, OptimumRange, ThresholdScoring)


# -------------------------------
# Applying rules to the MDS
# -------------------------------

def scored_column(indicator: str) -> str:
    return f"{indicator}{SCORED_SUFFIX}"


def score_indicators(data: pd.DataFrame, mds: Sequence[str],
                     rules: Optional[Mapping[str, ScoringRule]] = None) -> pd.DataFrame:
    """
    Add a `<indicator>_scored` column for each MDS indicator.

    Args:
        data: Table holding the raw (unstandardized) indicator values
        mds: Indicators to score
        rules: Mapping indicator -> ScoringRule. None scores every indicator
            with HigherBetter().

    Returns:
        Copy of data with the scored columns appended; raw columns are kept.
    """
    missing_vars = [m for m in mds if m not in data.columns]
    if missing_vars:
        raise ValidationError(f"MDS variables not found in data: {', '.join(missing_vars)}")

    if rules is None:
        rules = {m: HigherBetter() for m in mds}
    for indicator in mds:
        if indicator not in rules or rules[indicator] is None:
            raise ValidationError(f"No scoring rule specified for indicator: {indicator}")
        if not isinstance(rules[indicator], RULE_TYPES):
            raise ValidationError(
                f"Scoring rule for indicator {indicator} must be one of "
                f"{', '.join(t.__name__ for t in RULE_TYPES)}, got {type(rules[indicator]).__name__}"
            )
    assert_numeric_columns(data, mds)

    result = data.copy()
    for indicator in mds:
        rule = rules[indicator]
        result[scored_column(indicator)] = rule.score(data[indicator]).to_numpy()
        logger.debug("Scored %s: %s", indicator, rule.describe())
    return result
