from __future__ import annotations
import logging
from typing import Iterable, Optional

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


def is_numeric_column(s: pd.Series) -> bool:
    """True for numeric, non-boolean columns (booleans are treated as labels)."""
    return pd.api.types.is_numeric_dtype(s) and not pd.api.types.is_bool_dtype(s)


def numeric_columns(df: pd.DataFrame, exclude: Optional[Iterable[str]] = None) -> list[str]:
    """Names of the numeric, non-excluded columns of df in column order."""
    skip = set(exclude or ())
    return [c for c in df.columns if c not in skip and is_numeric_column(df[c])]


def standardize_numeric(df: pd.DataFrame, exclude: Optional[Iterable[str]] = None) -> pd.DataFrame:
    """
    Z-score every numeric column: (x - mean) / sd, ignoring missing values.

    Args:
        df: Input DataFrame
        exclude: Column names to pass through untouched (e.g. a sample ID)

    Returns:
        New DataFrame with the same shape, index and column order. Columns with
        zero variance, a single observation or no observations at all are
        returned unchanged; missing entries stay missing at the same positions.
    """
    exclude = [] if exclude is None else [exclude] if isinstance(exclude, str) else list(exclude)
    missing = [c for c in exclude if c not in df.columns]
    if missing:
        logger.warning("Excluded columns not found in data: %s", ", ".join(map(str, missing)))

    out = df.copy()
    for col in numeric_columns(df, exclude):
        x = df[col].astype(float)
        if x.isna().all():
            continue
        mu = x.mean()
        sd = x.std(ddof=1)
        # constant or single-valued columns are left as-is
        if np.isnan(sd) or sd <= 0:
            logger.debug("Column %r has no spread; left unstandardized", col)
            continue
        out[col] = (x - mu) / sd
    return out
