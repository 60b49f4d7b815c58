"""
Soil Quality Index computation

Stacks the pipeline stages:

1. standardize_numeric: z-score the numeric properties
2. pca_select_mds: choose the Minimum Data Set (MDS) of indicators
3. ahp_weights / equal_weights: weight the MDS indicators
4. score_indicators: score the raw indicator values onto [0, 1]
5. aggregate_index: weighted sum of the scores -> SQI

Each stage raises on invalid input and nothing is returned from a failed run.
Warnings raised along the way (dropped rows, inconsistent judgments) are
collected on the result and passed on to the caller's warning filters.
"""
from __future__ import annotations

import dataclasses
import logging
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .ahp import AHPResult, MatrixLike, ahp_weights, equal_weights, matrix_labels
from .cleaning import coerce_numeric_columns
from .config import DEFAULT_LOADING_THRESHOLD, DEFAULT_VARIANCE_THRESHOLD, INDEX_COLUMN, WEIGHT_TOLERANCE
from .data_io import save_results
from .errors import InconsistentMatrixError, NoIndicatorsSelectedError, SQIWarning, ValidationError
from .ingest import read_pairwise_matrix, read_soil_table
from .pca_mds import PrincipalComponentModel, pca_select_mds
from .scoring import ScoringRule, score_indicators, scored_column
from .transform import numeric_columns, standardize_numeric
from .validators import assert_id_column

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SQIResult:
    """
    Outcome of one pipeline run.

    Attributes:
        mds: Selected indicators, in selection order
        weights: Indicator -> weight, sums to 1
        CR: Consistency ratio of the pairwise judgments (0 for equal weights)
        results: Input columns + one `<indicator>_scored` column per MDS entry + `SQI`
        pca: Fitted PrincipalComponentModel
        loadings: Variable loadings (variables x components)
        var_exp: Share of variance explained per component
        lambda_max: Principal eigenvalue of the pairwise matrix (n for equal weights)
        warnings: Messages of the non-fatal conditions met during the run

    The result is frozen but the pandas objects it holds are not. They are
    copies owned by the result, so changing them in place does not reach the
    fitted PCA model or the caller's input; treat them as read-only.
    """
    mds: tuple[str, ...]
    weights: pd.Series
    CR: float
    results: pd.DataFrame
    pca: PrincipalComponentModel
    loadings: pd.DataFrame
    var_exp: pd.Series
    lambda_max: float = float("nan")
    warnings: tuple[str, ...] = ()

    @property
    def scored_columns(self) -> list[str]:
        return [scored_column(m) for m in self.mds]

    @property
    def sqi(self) -> pd.Series:
        return self.results[INDEX_COLUMN]

    def summary(self) -> str:
        sqi = self.sqi
        lines = [
            "=== Soil Quality Index ===",
            f"Samples: {len(sqi)} (SQI missing for {int(sqi.isna().sum())})",
            f"MDS ({len(self.mds)}): {', '.join(self.mds)}",
            "Weights:",
        ]
        lines += [f"  {name:<15}: {w:.4f}" for name, w in self.weights.items()]
        lines += [
            f"Consistency Ratio (CR): {self.CR:.4f}",
            f"SQI mean={sqi.mean():.3f} min={sqi.min():.3f} max={sqi.max():.3f}",
        ]
        if self.warnings:
            lines.append(f"Warnings ({len(self.warnings)}):")
            lines += [f"  - {w}" for w in self.warnings]
        return "\n".join(lines)

    def __repr__(self):
        return (f"SQIResult(samples={len(self.results)}, mds={list(self.mds)}, "
                f"CR={self.CR:.4f}, warnings={len(self.warnings)})")


def aggregate_index(scored: pd.DataFrame, weights: Mapping[str, float], mds: Sequence[str]) -> pd.Series:
    """
    Weighted sum of the scored indicator columns.

    A missing score makes the sample's index missing; it is not treated as 0.
    """
    cols = [scored_column(m) for m in mds]
    w = np.array([weights[m] for m in mds], dtype=float)
    if cols and abs(w.sum() - 1.0) > WEIGHT_TOLERANCE:
        raise ValidationError(f"Weights must sum to 1, got {w.sum():.12g}")
    values = scored[cols].to_numpy(dtype=float) @ w if cols else np.zeros(len(scored))
    # float round-off can push a perfect score a hair above 1
    return pd.Series(np.clip(values, 0.0, 1.0), index=scored.index, name=INDEX_COLUMN)


def _align_pairwise(pairwise: MatrixLike, mds: Sequence[str]) -> MatrixLike:
    """Reorder a labeled comparison matrix to MDS order; check the size of any matrix."""
    try:
        shape = np.shape(pairwise)
    except ValueError as e:
        raise ValidationError("pairwise must be a rectangular numeric matrix") from e
    if len(shape) != 2:
        raise ValidationError(f"pairwise must be 2-dimensional, got {len(shape)} dimension(s)")
    if shape[0] != shape[1]:
        raise InconsistentMatrixError(f"Pairwise matrix must be square, got {shape[0]}x{shape[1]}")
    if shape[0] != len(mds):
        raise ValidationError(
            f"Pairwise matrix is {shape[0]}x{shape[1]} but {len(mds)} indicators were selected: {', '.join(mds)}"
        )

    labels = matrix_labels(pairwise)
    if labels is None:
        return pairwise
    if sorted(labels) != sorted(mds):
        raise ValidationError(
            f"Pairwise matrix labels ({', '.join(labels)}) do not match the selected indicators ({', '.join(mds)})"
        )
    frame = pairwise.copy()
    frame.index = labels
    frame.columns = [str(c) for c in frame.columns]
    if sorted(frame.columns) == sorted(mds):
        return frame.loc[list(mds), list(mds)]
    order = [labels.index(m) for m in mds]
    return frame.iloc[order, order]


def derive_weights(mds: Sequence[str], pairwise: Optional[MatrixLike] = None) -> AHPResult:
    """AHP weights from a pairwise matrix over the MDS, or equal weights when none is given."""
    if pairwise is None:
        logger.info("No pairwise matrix supplied; using equal weights")
        return equal_weights(mds)
    return ahp_weights(_align_pairwise(pairwise, mds), indicators=list(mds))


def _run_pipeline(df, id_column, pairwise, rules, variance_threshold, loading_threshold) -> SQIResult:
    exclude = []
    if id_column is not None:
        assert_id_column(df, id_column)
        exclude = [id_column]

    data_std = standardize_numeric(df, exclude=exclude)
    selection = pca_select_mds(
        data_std,
        variance_threshold=variance_threshold,
        loading_threshold=loading_threshold,
        exclude=exclude,
    )
    mds = list(selection.mds)
    if not mds:
        raise NoIndicatorsSelectedError("No indicators selected by PCA. Try adjusting thresholds.")

    ahp = derive_weights(mds, pairwise)
    scored = score_indicators(df, mds, rules)
    scored[INDEX_COLUMN] = aggregate_index(scored, ahp.weights, mds)
    logger.info("Computed SQI for %d samples from %d indicators (CR=%.4f)", len(scored), len(mds), ahp.CR)

    return SQIResult(
        mds=tuple(mds),
        weights=ahp.weights.copy(),
        CR=ahp.CR,
        results=scored,
        pca=selection.pca,
        loadings=selection.loadings.copy(),
        var_exp=selection.var_exp.copy(),
        lambda_max=ahp.lambda_max,
    )


def compute_sqi_df(
    df: pd.DataFrame,
    id_column: Optional[str] = None,
    pairwise: Optional[MatrixLike] = None,
    rules: Optional[Mapping[str, ScoringRule]] = None,
    variance_threshold: float = DEFAULT_VARIANCE_THRESHOLD,
    loading_threshold: float = DEFAULT_LOADING_THRESHOLD,
) -> SQIResult:
    """
    Compute the Soil Quality Index for a table of samples.

    Args:
        df: One row per sample; numeric columns are the candidate indicators
        id_column: Optional sample identifier, kept in the results but left
            out of the numeric analysis
        pairwise: Optional pairwise comparison matrix over the selected
            indicators. A labeled DataFrame is reordered to MDS order; an
            unlabeled matrix is taken to be in MDS order. None = equal weights.
        rules: Indicator -> ScoringRule. None scores every indicator with HigherBetter().
        variance_threshold: Minimum share of variance for a PC to be retained
        loading_threshold: Minimum absolute loading for an indicator to be selected

    Returns:
        SQIResult
    """
    if not isinstance(df, pd.DataFrame):
        raise ValidationError("df must be a data frame")

    caught: list = []
    try:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            result = _run_pipeline(df, id_column, pairwise, rules, variance_threshold, loading_threshold)
    finally:
        for w in caught:
            warnings.warn_explicit(w.message, w.category, w.filename, w.lineno)

    notes = tuple(str(w.message) for w in caught if issubclass(w.category, SQIWarning))
    return dataclasses.replace(result, warnings=notes)


def compute_sqi_properties(
    data: pd.DataFrame,
    properties: Optional[Sequence[str]] = None,
    id_column: Optional[str] = None,
    pairwise: Optional[MatrixLike] = None,
    rules: Optional[Mapping[str, ScoringRule]] = None,
    variance_threshold: float = DEFAULT_VARIANCE_THRESHOLD,
    loading_threshold: float = DEFAULT_LOADING_THRESHOLD,
) -> SQIResult:
    """
    Compute the SQI on a chosen subset of properties.

    properties=None uses every numeric column except the ID column.
    """
    if not isinstance(data, pd.DataFrame):
        raise ValidationError("data must be a data frame")

    if properties is None:
        properties = numeric_columns(data, exclude=[id_column] if id_column else None)
        if not properties:
            raise ValidationError("No numeric columns found in data for analysis")
    else:
        properties = list(properties)
        missing = [p for p in properties if p not in data.columns]
        if missing:
            raise ValidationError(f"Properties not found in data: {', '.join(missing)}")

    if id_column is not None:
        assert_id_column(data, id_column)
        subset_cols = [id_column] + [p for p in properties if p != id_column]
    else:
        subset_cols = properties

    if rules is not None and not isinstance(rules, Mapping):
        raise ValidationError("rules must be a mapping of indicator name to ScoringRule")

    return compute_sqi_df(
        data[subset_cols],
        id_column=id_column,
        pairwise=pairwise,
        rules=rules,
        variance_threshold=variance_threshold,
        loading_threshold=loading_threshold,
    )


def compute_sqi(
    input_path: Union[str, Path],
    id_column: Optional[str] = None,
    pairwise_path: Optional[Union[str, Path]] = None,
    output_path: Optional[Union[str, Path]] = None,
    rules: Optional[Mapping[str, ScoringRule]] = None,
    variance_threshold: float = DEFAULT_VARIANCE_THRESHOLD,
    loading_threshold: float = DEFAULT_LOADING_THRESHOLD,
) -> SQIResult:
    """
    File-level entry point: read samples (and optionally a pairwise matrix),
    compute the SQI and optionally write the results table as CSV.
    """
    data = read_soil_table(input_path)
    data = coerce_numeric_columns(data, exclude=[id_column] if id_column else None)
    pairwise = read_pairwise_matrix(pairwise_path) if pairwise_path is not None else None

    result = compute_sqi_df(
        data,
        id_column=id_column,
        pairwise=pairwise,
        rules=rules,
        variance_threshold=variance_threshold,
        loading_threshold=loading_threshold,
    )

    if output_path is not None:
        path = save_results(result, output_path)
        logger.info("Saved results to %s", path)
    return result


# stack the stages behind a fit / fit_transform interface to match with sklearn
class SQIPipeline:
    def __init__(self, id_column: Optional[str] = None,
                 pairwise: Optional[MatrixLike] = None,
                 rules: Optional[Mapping[str, ScoringRule]] = None,
                 variance_threshold: float = DEFAULT_VARIANCE_THRESHOLD,
                 loading_threshold: float = DEFAULT_LOADING_THRESHOLD):
        self.id_column = id_column
        self.pairwise = pairwise
        self.rules = rules
        self.variance_threshold = variance_threshold
        self.loading_threshold = loading_threshold
        self.result_ = None

    def fit(self, X: pd.DataFrame) -> "SQIPipeline":
        self.result_ = compute_sqi_df(
            X,
            id_column=self.id_column,
            pairwise=self.pairwise,
            rules=self.rules,
            variance_threshold=self.variance_threshold,
            loading_threshold=self.loading_threshold,
        )
        return self

    # returns the augmented results table (raw + scored + SQI)
    def fit_transform(self, X: pd.DataFrame) -> pd.DataFrame:
        return self.fit(X).result_.results
