from __future__ import annotations
from typing import Iterable

import numpy as np
import pandas as pd
import pandera as pa
from pandera import Check, Column, DataFrameSchema
from pandera.errors import SchemaError, SchemaErrors

from .config import INDEX_COLUMN, SCORED_SUFFIX
from .errors import ValidationError

schema_positive_matrix = DataFrameSchema(
    checks=Check(lambda df: df > 0, error="pairwise comparisons must be positive"),
)


def _validate(schema: DataFrameSchema, df: pd.DataFrame, what: str) -> pd.DataFrame:
    try:
        return schema.validate(df, lazy=True)
    except (SchemaError, SchemaErrors) as e:
        raise ValidationError(f"{what} failed validation:\n{e}") from e


def assert_positive_matrix(A: np.ndarray) -> None:
    _validate(schema_positive_matrix, pd.DataFrame(A), "Pairwise matrix")


def assert_id_column(df: pd.DataFrame, id_column: str) -> None:
    if id_column not in df.columns:
        raise ValidationError(f"ID column '{id_column}' not found in data")


def results_schema(mds: Iterable[str]) -> DataFrameSchema:
    """Scored indicator columns and the index column: floats in [0, 1], missing allowed."""
    score_col = Column(float, Check.in_range(0.0, 1.0), nullable=True, coerce=True)
    cols = {f"{m}{SCORED_SUFFIX}": score_col for m in mds}
    cols[INDEX_COLUMN] = score_col
    return DataFrameSchema(cols)


def assert_scored_results(df: pd.DataFrame, mds: Iterable[str]) -> None:
    _validate(results_schema(mds), df, "Results table")


def assert_numeric_columns(df: pd.DataFrame, columns: Iterable[str]) -> None:
    schema = DataFrameSchema({c: Column(pa.Float, nullable=True, coerce=True) for c in columns})
    _validate(schema, df, "Numeric columns")
