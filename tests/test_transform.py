import numpy as np
import pandas as pd
from soilquality.transform import standardize_numeric, numeric_columns


def test_standardize_numeric_basic():
    df = pd.DataFrame({"A": [1.0, 2.0, 3.0, 4.0], "B": [10, 0, 5, 7]})
    Z = standardize_numeric(df)
    assert Z.shape == df.shape
    assert list(Z.columns) == list(df.columns)
    # columnwise z-score: mean ~0, std ~1
    assert np.allclose(Z.mean(0).to_numpy(), 0, atol=1e-8)
    assert np.allclose(Z.std(0, ddof=1).to_numpy(), 1, atol=1e-8)


def test_standardize_numeric_passes_through_non_numeric_and_excluded():
    df = pd.DataFrame({"id": ["a", "b", "c"], "code": [101, 102, 103],
                       "flag": [True, False, True], "x": [1.0, 2.0, 4.0]})
    Z = standardize_numeric(df, exclude=["code"])
    assert list(Z["id"]) == ["a", "b", "c"]
    assert list(Z["code"]) == [101, 102, 103]
    assert list(Z["flag"]) == [True, False, True]
    assert not np.allclose(Z["x"], df["x"])


def test_standardize_numeric_keeps_missing_positions():
    df = pd.DataFrame({"x": [1.0, np.nan, 3.0, 5.0]})
    Z = standardize_numeric(df)
    assert np.isnan(Z.loc[1, "x"])
    assert Z["x"].notna().sum() == 3
    assert np.isclose(Z["x"].mean(), 0)


def test_standardize_numeric_zero_variance_and_all_missing_unchanged():
    df = pd.DataFrame({"const": [2.0, 2.0, 2.0], "empty": [np.nan] * 3, "single": [np.nan, 4.0, np.nan]})
    Z = standardize_numeric(df)
    pd.testing.assert_frame_equal(Z, df)


def test_standardize_numeric_does_not_modify_input():
    df = pd.DataFrame({"x": [1.0, 2.0, 3.0]})
    _ = standardize_numeric(df)
    assert list(df["x"]) == [1.0, 2.0, 3.0]


def test_standardize_numeric_accepts_unknown_exclusions():
    df = pd.DataFrame({"x": [1.0, 2.0, 3.0]})
    Z = standardize_numeric(df, exclude=["not_there"])
    assert np.allclose(Z["x"], [-1, 0, 1])


def test_numeric_columns_skips_booleans_and_text():
    df = pd.DataFrame({"a": [1, 2], "b": ["x", "y"], "c": [True, False], "d": [0.5, 1.5]})
    assert numeric_columns(df) == ["a", "d"]
    assert numeric_columns(df, exclude=["a"]) == ["d"]
