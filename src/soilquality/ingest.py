from __future__ import annotations
import logging
from pathlib import Path
from typing import Union

import pandas as pd

from .ahp import parse_judgement
from .errors import ValidationError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
EXCEL_SUFFIXES = (".xlsx", ".xlsm", ".xls")


def _existing(path: PathLike) -> Path:
    if not isinstance(path, (str, Path)):
        raise ValidationError("path must be a single character string")
    path = Path(path)
    if not path.exists():
        raise ValidationError(f"File not found: {path}")
    return path


def read_soil_table(path: PathLike) -> pd.DataFrame:
    """Read a sample table from CSV (UTF-8, falling back to Latin-1) or Excel."""
    path = _existing(path)
    if path.suffix.lower() in EXCEL_SUFFIXES:
        return pd.read_excel(path, engine="openpyxl")
    try:
        return pd.read_csv(path, encoding="utf-8")
    except UnicodeDecodeError:
        logger.info("%s is not UTF-8; retrying as Latin-1", path.name)
        return pd.read_csv(path, encoding="latin-1")


def read_pairwise_matrix(path: PathLike) -> pd.DataFrame:
    """
    Read a pairwise comparison matrix.

    The first column holds the row labels and the header the column labels;
    cells may be numbers or fractions such as 1/3.
    """
    raw = read_soil_table(path)
    if raw.shape[1] < 2:
        raise ValidationError("Pairwise file must have at least 2 columns")
    raw = raw.set_index(raw.columns[0])
    raw.index = raw.index.astype(str)
    raw.columns = raw.columns.astype(str)
    return raw.apply(lambda col: col.map(parse_judgement)).astype(float)
