from __future__ import annotations
import logging
from typing import Iterable, Optional

import pandas as pd

logger = logging.getLogger(__name__)


def to_numeric(s: pd.Series) -> pd.Series:
    """
    Convert values to floats; anything unparsable becomes missing.

    Args:
        s: Input Series (strings, numbers or a mix)

    Returns:
        Float Series with the same index and name
    """
    return pd.to_numeric(s, errors="coerce").astype(float)


def coerce_numeric_columns(
    df: pd.DataFrame,
    exclude: Optional[Iterable[str]] = None,
    min_valid_fraction: float = 0.5,
) -> pd.DataFrame:
    """
    Turn text columns that are mostly numbers into numeric columns.

    Columns read from files often carry a few non-numeric markers
    ("n.d.", "<0.1", blanks). A text column is converted when at least
    `min_valid_fraction` of its non-missing cells parse as numbers; the
    remaining cells become missing.

    Args:
        df: Input DataFrame
        exclude: Columns never converted (e.g. a sample ID)
        min_valid_fraction: Share of parsable cells required to convert

    Returns:
        DataFrame with converted columns
    """
    df = df.copy()
    skip = set(exclude or ())
    for col in df.columns:
        if col in skip or not (pd.api.types.is_object_dtype(df[col]) or pd.api.types.is_string_dtype(df[col])):
            continue
        present = df[col].notna() & (df[col].astype(str).str.strip() != "")
        if not present.any():
            continue
        converted = to_numeric(df[col])
        valid = converted[present].notna().mean()
        if valid >= min_valid_fraction:
            n_lost = int((present & converted.isna()).sum())
            if n_lost:
                logger.warning("Column %r: %d non-numeric values set to missing", col, n_lost)
            df[col] = converted
    return df
