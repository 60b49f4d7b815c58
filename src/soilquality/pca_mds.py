"""
PCA-based Minimum Data Set (MDS) selection for soil property data

This module runs principal component analysis on a standardized property
table and keeps one representative indicator per informative component.

Two steps:
- the PCA itself (sklearn, centered but not rescaled, since the input is
  expected to come out of `standardize_numeric`)
- the MDS rule: keep PCs explaining more than `variance_threshold` of the
  total variance, and from each of them take the variable with the largest
  absolute loading if it is above `loading_threshold`
"""
from __future__ import annotations

import logging
import numbers
import warnings
from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np
import pandas as pd
from sklearn.decomposition import PCA

from .config import DEFAULT_LOADING_THRESHOLD, DEFAULT_VARIANCE_THRESHOLD
from .errors import DataQualityWarning, InsufficientDataError, ValidationError
from .transform import numeric_columns

logger = logging.getLogger(__name__)


class PrincipalComponentModel:
    """
    Fitted principal component model of the property table.

    Attributes:
        scores (pd.DataFrame): Sample-level PC scores (complete samples x components)
        loadings (pd.DataFrame): Variable loadings (variables x components)
        eigenvalues (np.ndarray): Variance of each component, descending
        explained_variance_ratio (np.ndarray): Eigenvalue / sum of eigenvalues
        center (pd.Series): Column means removed before the decomposition
        pca (sklearn.decomposition.PCA): Fitted PCA object
        n_samples (int): Number of complete samples used in the fit
        n_variables (int): Number of variables used in the fit
    """

    def __init__(self, scores: pd.DataFrame, loadings: pd.DataFrame,
                 eigenvalues: np.ndarray, explained_variance_ratio: np.ndarray,
                 center: pd.Series, pca: PCA):
        self.scores = scores
        self.loadings = loadings
        self.eigenvalues = eigenvalues
        self.explained_variance_ratio = explained_variance_ratio
        self.center = center
        self.pca = pca
        self.n_samples = scores.shape[0]
        self.n_variables = loadings.shape[0]

    @property
    def components(self) -> list[tuple[float, pd.Series]]:
        """(eigenvalue, loading vector) per component, in descending eigenvalue order."""
        return [(float(ev), self.loadings[pc]) for ev, pc in zip(self.eigenvalues, self.loadings.columns)]

    def cumulative_variance(self) -> pd.Series:
        return pd.Series(np.cumsum(self.explained_variance_ratio), index=self.loadings.columns)

    def get_key_indicators(self, pc: int = 1, n: int = 5) -> pd.DataFrame:
        """
        Return the variables with the highest absolute loadings for a given PC.

        Args:
            pc: Principal component number (1-based)
            n: Number of top variables to return
        """
        pc_col = f"PC{pc}"
        if pc_col not in self.loadings.columns:
            raise ValidationError(f"PC{pc} not available. Available PCs: {list(self.loadings.columns)}")

        loadings_abs = self.loadings[pc_col].abs()
        top = loadings_abs.nlargest(n)

        return pd.DataFrame({
            "loading": self.loadings.loc[top.index, pc_col],
            "abs_loading": top,
        })

    def __repr__(self):
        return (
            f"PrincipalComponentModel(samples={self.n_samples}, "
            f"variables={self.n_variables}, "
            f"components={len(self.eigenvalues)}, "
            f"var_explained_PC1={self.explained_variance_ratio[0]:.3f})"
        )


@dataclass(frozen=True)
class MDSSelection:
    """Selected indicators together with the PCA artifacts they came from."""
    mds: tuple[str, ...]
    pca: PrincipalComponentModel
    loadings: pd.DataFrame
    var_exp: pd.Series


def _check_threshold(name: str, value) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real) or not 0 <= value <= 1:
        raise ValidationError(f"{name} must be a single numeric value between 0 and 1, got {value!r}")
    return float(value)


def _prepare_numeric_matrix(data: pd.DataFrame, exclude: Optional[Iterable[str]] = None) -> pd.DataFrame:
    """Numeric block of data with all-missing columns and incomplete rows removed."""
    cols = numeric_columns(data, exclude)
    if len(cols) < 2:
        raise InsufficientDataError(f"At least 2 numeric columns required for PCA (found {len(cols)})")
    numeric = data[cols].astype(float)

    all_na = numeric.columns[numeric.isna().all()]
    if len(all_na) > 0:
        msg = f"Removing columns with all missing values: {', '.join(map(str, all_na))}"
        logger.warning(msg)
        warnings.warn(msg, DataQualityWarning, stacklevel=3)
        numeric = numeric.drop(columns=all_na)
        if numeric.shape[1] < 2:
            raise InsufficientDataError(
                f"At least 2 numeric columns required for PCA (found {numeric.shape[1]} after dropping empty columns)"
            )

    complete_mask = numeric.notna().all(axis=1)
    n_dropped = int((~complete_mask).sum())
    if n_dropped:
        msg = f"Removing {n_dropped} rows with missing values for PCA"
        logger.warning(msg)
        warnings.warn(msg, DataQualityWarning, stacklevel=3)
        numeric = numeric.loc[complete_mask]

    if numeric.shape[0] < 3:
        raise InsufficientDataError(
            f"Insufficient observations for PCA after removing missing data (found {numeric.shape[0]}, need >=3)"
        )
    return numeric


def fit_principal_components(numeric: pd.DataFrame) -> PrincipalComponentModel:
    """Eigen-decompose the covariance of a complete numeric table (centered, not rescaled)."""
    X = numeric.to_numpy(dtype=float)

    pca = PCA(svd_solver="full")
    scores = pca.fit_transform(X)
    eigenvalues = pca.explained_variance_
    total = float(np.sum(eigenvalues))
    if not total > 0:
        raise InsufficientDataError("Numeric columns carry no variance; PCA is undefined")

    pc_names = [f"PC{i+1}" for i in range(scores.shape[1])]
    scores_df = pd.DataFrame(scores, index=numeric.index, columns=pc_names)
    loadings_df = pd.DataFrame(pca.components_.T, index=numeric.columns, columns=pc_names)

    return PrincipalComponentModel(
        scores=scores_df,
        loadings=loadings_df,
        eigenvalues=eigenvalues,
        explained_variance_ratio=eigenvalues / total,
        center=pd.Series(pca.mean_, index=numeric.columns),
        pca=pca,
    )


def select_mds_from_loadings(loadings: pd.DataFrame, var_exp: pd.Series,
                             variance_threshold: float,
                             loading_threshold: float) -> list[str]:
    """
    Pick one indicator per retained PC.

    A PC is retained when its share of variance is strictly above
    variance_threshold. Its indicator is the first variable with the largest
    absolute loading, kept only if that loading is strictly above
    loading_threshold and the variable was not already picked.
    """
    mds: list[str] = []
    for pc in loadings.columns:
        if not var_exp[pc] > variance_threshold:
            continue
        abs_loadings = loadings[pc].abs().to_numpy()
        idx = int(np.argmax(abs_loadings))
        if abs_loadings[idx] > loading_threshold:
            name = loadings.index[idx]
            if name not in mds:
                mds.append(name)
            logger.debug("%s: %s (|loading|=%.3f)", pc, name, abs_loadings[idx])
    return mds


def pca_select_mds(
    data: pd.DataFrame,
    variance_threshold: float = DEFAULT_VARIANCE_THRESHOLD,
    loading_threshold: float = DEFAULT_LOADING_THRESHOLD,
    exclude: Optional[Iterable[str]] = None,
) -> MDSSelection:
    """
    Select a Minimum Data Set of indicators using PCA.

    Args:
        data: Standardized property table; non-numeric columns are ignored
        variance_threshold: Minimum share of total variance a PC must exceed
        loading_threshold: Minimum absolute loading the top variable must exceed
        exclude: Numeric columns to keep out of the analysis (e.g. a sample ID)

    Returns:
        MDSSelection with the ordered, duplicate-free MDS (possibly empty), the
        fitted PrincipalComponentModel, the loadings matrix and the
        variance-explained vector.

    Raises:
        ValidationError: thresholds outside [0, 1]
        InsufficientDataError: fewer than 2 usable columns or 3 complete rows
    """
    variance_threshold = _check_threshold("variance_threshold", variance_threshold)
    loading_threshold = _check_threshold("loading_threshold", loading_threshold)

    numeric = _prepare_numeric_matrix(data, exclude)
    model = fit_principal_components(numeric)
    var_exp = pd.Series(model.explained_variance_ratio, index=model.loadings.columns, name="var_exp")

    mds = select_mds_from_loadings(model.loadings, var_exp, variance_threshold, loading_threshold)
    if mds:
        logger.info("Selected %d indicators for the MDS: %s", len(mds), ", ".join(mds))
    else:
        logger.info("No indicator met the variance/loading thresholds")

    return MDSSelection(mds=tuple(mds), pca=model, loadings=model.loadings.copy(), var_exp=var_exp)
