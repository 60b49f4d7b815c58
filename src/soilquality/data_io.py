from __future__ import annotations
from pathlib import Path
from typing import TYPE_CHECKING, Union

import pandas as pd

from .config import PROC
from .validators import assert_scored_results

if TYPE_CHECKING:
    from .sqi_compute import SQIResult


def _resolve(path: Union[str, Path]) -> Path:
    # a bare file name goes to the processed data folder
    path = Path(path)
    if not path.is_absolute() and path.parent == Path("."):
        return PROC / path
    return path


def save_results(result: Union["SQIResult", pd.DataFrame], path: Union[str, Path]) -> Path:
    """
    Save the augmented results table as a flat CSV, one row per sample.

    Args:
        result: An SQIResult (its `results` table is written) or a DataFrame
        path: Output file path; a bare file name is saved under data/processed.
            Parent directories are created.

    Returns:
        Path: The full path to the saved file
    """
    if isinstance(result, pd.DataFrame):
        df = result
    else:
        assert_scored_results(result.results, result.mds)
        df = result.results
    path = _resolve(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False)
    return path


def load_results(path: Union[str, Path]) -> pd.DataFrame:
    return pd.read_csv(_resolve(path))
