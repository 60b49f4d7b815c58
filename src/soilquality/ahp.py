"""
Indicator weights from pairwise comparisons (Analytic Hierarchy Process).

- ahp_weights: principal-eigenvector weights plus Saaty's consistency ratio
- equal_weights: the fallback used when no judgments are supplied
- ratio_to_saaty / build_pairwise_matrix / create_ahp_matrix: helpers to put
  a comparison matrix together from importance ratios or pairwise judgments

The comparison matrix is not symmetric, so a general eigen solver is used and
the eigenvalue with the largest real part is taken as lambda_max. For a
positive reciprocal matrix this eigenvalue is real and its eigenvector has
entries of a single sign (Perron-Frobenius), which is why the weights are
taken from the absolute values of that eigenvector.
"""
from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from fractions import Fraction
from typing import Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .config import CR_THRESHOLD, MATRIX_TOLERANCE, RANDOM_INDEX, SAATY_MAX, SAATY_MIN
from .errors import ConsistencyWarning, InconsistentMatrixError, InsufficientDataError, ValidationError
from .validators import assert_positive_matrix

logger = logging.getLogger(__name__)

MatrixLike = Union[pd.DataFrame, np.ndarray, Sequence[Sequence[float]]]


@dataclass(frozen=True)
class AHPResult:
    weights: pd.Series  # indicator name -> weight, sums to 1
    lambda_max: float
    CI: float
    RI: float
    CR: float

    @property
    def is_consistent(self) -> bool:
        return self.CR <= CR_THRESHOLD


def random_index(n: int) -> float:
    """Saaty's random consistency index for an n x n matrix."""
    if n <= len(RANDOM_INDEX):
        return RANDOM_INDEX[n - 1]
    return 1.98 * (n - 2) / n


def matrix_labels(pairwise: MatrixLike) -> Optional[list[str]]:
    """Row labels of a labeled DataFrame, None for unlabeled input."""
    if isinstance(pairwise, pd.DataFrame) and not isinstance(pairwise.index, pd.RangeIndex):
        return [str(i) for i in pairwise.index]
    return None


def _as_square_array(pairwise: MatrixLike) -> np.ndarray:
    try:
        A = np.asarray(pairwise, dtype=float)
    except (TypeError, ValueError) as e:
        raise ValidationError("pairwise must be a numeric matrix") from e
    if A.ndim != 2:
        raise ValidationError(f"pairwise must be 2-dimensional, got {A.ndim} dimension(s)")
    if A.shape[0] != A.shape[1]:
        raise InconsistentMatrixError(f"Pairwise matrix must be square, got {A.shape[0]}x{A.shape[1]}")
    return A


def validate_pairwise_matrix(A: np.ndarray, tol: float = MATRIX_TOLERANCE) -> None:
    """Check size, diagonal and reciprocal property of a square comparison matrix."""
    n = A.shape[0]
    if n < 2:
        raise InsufficientDataError("Pairwise matrix must have at least 2 indicators")
    if not np.all(np.isfinite(A)):
        raise ValidationError("Pairwise matrix contains missing or infinite values")

    if not np.all(np.abs(np.diag(A) - 1) < tol):
        raise InconsistentMatrixError("Diagonal values must be 1")

    # A[i, j] * A[j, i] must be 1 for every off-diagonal pair
    bad = np.argwhere(np.abs(A * A.T - 1) > tol)
    if len(bad) > 0:
        i, j = bad[0]
        raise InconsistentMatrixError(
            f"Matrix must be reciprocal: A[{i},{j}] * A[{j},{i}] = {A[i, j] * A[j, i]:.6g}, expected 1"
        )
    assert_positive_matrix(A)


def ahp_weights(pairwise: MatrixLike, indicators: Optional[Sequence[str]] = None) -> AHPResult:
    """
    Calculate indicator weights from a pairwise comparison matrix.

    Parameters:
    - pairwise: square positive reciprocal matrix; A[i, j] is the importance of
      indicator i relative to indicator j. A labeled DataFrame carries its own names.
    - indicators: optional names, one per row. Defaults to the DataFrame row labels,
      then to Indicator1..n.

    Returns:
    - AHPResult with normalized weights, lambda_max, CI, RI and CR.

    A ConsistencyWarning is issued when CR > 0.1; the weights are returned anyway.
    """
    A = _as_square_array(pairwise)
    validate_pairwise_matrix(A)
    n = A.shape[0]

    if indicators is not None:
        indicators = [str(i) for i in indicators]
        if len(indicators) != n:
            raise ValidationError(
                f"Length of indicators ({len(indicators)}) must match matrix dimensions ({n})"
            )
    else:
        indicators = matrix_labels(pairwise) or [f"Indicator{i+1}" for i in range(n)]

    eigenvalues, eigenvectors = np.linalg.eig(A)
    idx = int(np.argmax(eigenvalues.real))
    lambda_max = float(eigenvalues[idx].real)
    principal = np.abs(eigenvectors[:, idx].real)
    weights = principal / principal.sum()

    CI = (lambda_max - n) / (n - 1)
    RI = random_index(n)
    CR = CI / RI if RI > 0 else 0.0

    if CR > CR_THRESHOLD:
        msg = f"Consistency Ratio ({CR:.4f}) exceeds {CR_THRESHOLD}. Consider revising judgments."
        logger.warning(msg)
        warnings.warn(msg, ConsistencyWarning, stacklevel=2)
    logger.debug("AHP: n=%d lambda_max=%.4f CR=%.4f", n, lambda_max, CR)

    return AHPResult(
        weights=pd.Series(weights, index=indicators, name="weight"),
        lambda_max=lambda_max,
        CI=float(CI),
        RI=float(RI),
        CR=float(CR),
    )


def equal_weights(indicators: Sequence[str]) -> AHPResult:
    """1/n for each indicator; a perfectly consistent (CR = 0) weighting."""
    indicators = [str(i) for i in indicators]
    n = len(indicators)
    if n == 0:
        raise InsufficientDataError("At least 1 indicator is required for equal weights")
    return AHPResult(
        weights=pd.Series(np.full(n, 1.0 / n), index=indicators, name="weight"),
        lambda_max=float(n),
        CI=0.0,
        RI=random_index(n),
        CR=0.0,
    )


def ratio_to_saaty(ratios: Union[Sequence[float], Mapping[str, float], pd.Series]) -> pd.DataFrame:
    """
    Convert importance ratios into a pairwise comparison matrix, A[i, j] = r_i / r_j.

    Names are carried over from a dict or Series; a plain sequence gives
    Indicator1..n labels.
    """
    if isinstance(ratios, Mapping):
        ratios = pd.Series(ratios, dtype=float)
    if isinstance(ratios, pd.Series):
        names = [str(i) for i in ratios.index]
        r = ratios.to_numpy(dtype=float)
    else:
        try:
            r = np.asarray(ratios, dtype=float)
        except (TypeError, ValueError) as e:
            raise ValidationError("ratios must be numeric") from e
        names = [f"Indicator{i+1}" for i in range(r.size)]

    if r.ndim != 1 or r.size < 2:
        raise ValidationError("ratios must have at least 2 elements")
    if not np.all(np.isfinite(r)) or np.any(r <= 0):
        raise ValidationError("All ratios must be positive")

    return pd.DataFrame(np.outer(r, 1.0 / r), index=names, columns=names)


def parse_judgement(value) -> float:
    """Parse a comparison value given as a number, a decimal string or a fraction like '1/3'."""
    if isinstance(value, bool):
        raise ValidationError(f"Invalid comparison value: {value!r}")
    if isinstance(value, (int, float, np.integer, np.floating)):
        return float(value)
    text = str(value).strip()
    try:
        if "/" in text:
            return float(Fraction(text.replace(" ", "")))
        return float(text)
    except (ValueError, ZeroDivisionError) as e:
        raise ValidationError(
            f"Invalid comparison value {value!r}; enter a number or fraction (e.g., 3 or 1/3)"
        ) from e


def build_pairwise_matrix(indicators: Sequence[str],
                          judgements: Mapping[tuple[str, str], object]) -> pd.DataFrame:
    """
    Assemble a reciprocal comparison matrix from upper-triangle judgments.

    judgements maps (a, b) to how much more important a is than b, on the
    Saaty scale 1/9..9. Reciprocals are filled in; pairs not given default to 1.
    """
    indicators = [str(i) for i in indicators]
    if len(indicators) < 2:
        raise ValidationError("At least 2 indicators are required")
    if len(set(indicators)) != len(indicators):
        raise ValidationError("Indicator names must be unique")

    pos = {name: i for i, name in enumerate(indicators)}
    A = np.ones((len(indicators), len(indicators)))
    for (a, b), raw in judgements.items():
        if a not in pos or b not in pos:
            raise ValidationError(f"Unknown indicator in judgement ({a!r}, {b!r})")
        if a == b:
            raise ValidationError(f"Cannot compare {a!r} with itself")
        value = parse_judgement(raw)
        if not SAATY_MIN - 1e-9 <= value <= SAATY_MAX:
            raise ValidationError(f"Value for ({a}, {b}) must be between 1/9 (0.111) and 9, got {value}")
        A[pos[a], pos[b]] = value
        A[pos[b], pos[a]] = 1.0 / value

    return pd.DataFrame(A, index=indicators, columns=indicators)


@dataclass(frozen=True)
class AHPMatrix:
    """A labeled comparison matrix with the weights derived from it."""
    indicators: tuple[str, ...]
    matrix: pd.DataFrame
    weights: pd.Series
    CR: float
    lambda_max: float

    def summary(self) -> str:
        lines = ["=== AHP Pairwise Comparison Matrix ===", "", "Pairwise Comparison Matrix:",
                 self.matrix.round(3).to_string(), "", "Indicator Weights:"]
        lines += [f"  {name:<15}: {w:.4f}" for name, w in self.weights.items()]
        status = ("[Acceptable]" if self.CR <= CR_THRESHOLD
                  else "[Inconsistent - Consider revising judgments]")
        lines += ["", "Consistency Information:",
                  f"  Lambda Max: {self.lambda_max:.4f}",
                  f"  Consistency Ratio (CR): {self.CR:.4f} {status}"]
        return "\n".join(lines)

    def __str__(self):
        return self.summary()


def create_ahp_matrix(indicators: Sequence[str], pairwise: MatrixLike) -> AHPMatrix:
    """Label a pre-built comparison matrix with indicator names and compute its weights."""
    if isinstance(indicators, str) or not all(isinstance(i, str) for i in indicators):
        raise ValidationError("indicators must be a sequence of strings")
    indicators = list(indicators)
    if len(indicators) < 2:
        raise ValidationError("At least 2 indicators are required")

    A = _as_square_array(pairwise)
    if A.shape[0] != len(indicators):
        raise ValidationError("pairwise matrix dimensions must match number of indicators")

    result = ahp_weights(A, indicators)
    return AHPMatrix(
        indicators=tuple(indicators),
        matrix=pd.DataFrame(A, index=indicators, columns=indicators),
        weights=result.weights,
        CR=result.CR,
        lambda_max=result.lambda_max,
    )
