import numpy as np
import pandas as pd
import pytest

from soilquality.ahp import ahp_weights
from soilquality.errors import (
    ConsistencyWarning, DataQualityWarning, InconsistentMatrixError, NoIndicatorsSelectedError,
    ValidationError,
)
from soilquality.pca_mds import PrincipalComponentModel
from soilquality.scoring import HigherBetter, LowerBetter
from soilquality.sqi_compute import (
    SQIPipeline, SQIResult, aggregate_index, compute_sqi_df, compute_sqi_properties, derive_weights,
)

JUDGEMENTS = [[1, 3, 5], [1 / 3, 1, 2], [1 / 5, 1 / 2, 1]]


@pytest.fixture
def result(soil_data):
    return compute_sqi_df(soil_data, id_column="SampleID")


def test_compute_sqi_df_returns_all_components(result, soil_data):
    assert isinstance(result, SQIResult)
    assert isinstance(result.pca, PrincipalComponentModel)
    assert len(result.mds) == 3
    assert list(result.weights.index) == list(result.mds)
    assert "SampleID" not in result.loadings.index
    assert np.isclose(result.var_exp.sum(), 1.0)
    expected_cols = list(soil_data.columns) + [f"{m}_scored" for m in result.mds] + ["SQI"]
    assert list(result.results.columns) == expected_cols
    assert result.scored_columns == [f"{m}_scored" for m in result.mds]


def test_sqi_values_are_in_unit_interval(result):
    sqi = result.sqi
    assert sqi.notna().all()
    assert sqi.between(0, 1).all()
    assert sqi.nunique() > 1


def test_equal_weights_without_pairwise_matrix(result):
    n = len(result.mds)
    assert np.allclose(result.weights.to_numpy(), 1 / n)
    assert abs(result.weights.sum() - 1) < 1e-10
    assert result.CR == 0
    assert result.lambda_max == n
    assert result.warnings == ()


def test_sqi_is_weighted_sum_of_scores(result):
    scored = result.results[result.scored_columns].to_numpy()
    expected = scored @ result.weights.to_numpy()
    assert np.allclose(result.sqi.to_numpy(), expected)


def test_id_column_is_preserved(result, soil_data):
    assert list(result.results["SampleID"]) == list(soil_data["SampleID"])
    assert list(result.results.index) == list(soil_data.index)


def test_works_without_id_column(soil_data):
    res = compute_sqi_df(soil_data.drop(columns="SampleID"))
    assert "SQI" in res.results.columns
    assert len(res.mds) == 3


def test_pairwise_matrix_drives_weights(result, soil_data):
    mds = list(result.mds)
    pairwise = pd.DataFrame(JUDGEMENTS, index=mds, columns=mds)
    res = compute_sqi_df(soil_data, id_column="SampleID", pairwise=pairwise)
    assert res.mds == result.mds
    assert np.allclose(res.weights.to_numpy(), [0.6483, 0.2297, 0.1220], atol=1e-4)
    assert res.CR == pytest.approx(0.0032, abs=1e-4)
    assert not np.allclose(res.sqi, result.sqi)


def test_labeled_pairwise_matrix_is_aligned_to_mds_order(result, soil_data):
    mds = list(result.mds)
    pairwise = pd.DataFrame(JUDGEMENTS, index=mds, columns=mds)
    rev = mds[::-1]
    res_a = compute_sqi_df(soil_data, id_column="SampleID", pairwise=pairwise)
    res_b = compute_sqi_df(soil_data, id_column="SampleID", pairwise=pairwise.loc[rev, rev])
    assert list(res_b.weights.index) == mds
    assert np.allclose(res_a.weights.to_numpy(), res_b.weights.to_numpy())
    assert np.allclose(res_a.sqi, res_b.sqi)


def test_unlabeled_pairwise_matrix_is_taken_in_mds_order(result, soil_data):
    res = compute_sqi_df(soil_data, id_column="SampleID", pairwise=np.array(JUDGEMENTS))
    assert res.weights.iloc[0] == pytest.approx(0.6483, abs=1e-4)
    assert list(res.weights.index) == list(result.mds)


def test_pairwise_matrix_size_must_match_mds(soil_data):
    with pytest.raises(ValidationError, match="indicators were selected"):
        compute_sqi_df(soil_data, id_column="SampleID", pairwise=[[1, 3], [1 / 3, 1]])


def test_pairwise_labels_must_match_mds(soil_data):
    labels = ["X", "Y", "Z"]
    pairwise = pd.DataFrame(JUDGEMENTS, index=labels, columns=labels)
    with pytest.raises(ValidationError, match="do not match"):
        compute_sqi_df(soil_data, id_column="SampleID", pairwise=pairwise)


def test_inconsistent_judgements_are_reported(result, soil_data):
    mds = list(result.mds)
    bad = pd.DataFrame([[1, 9, 1 / 9], [1 / 9, 1, 1 / 9], [9, 9, 1]], index=mds, columns=mds)
    with pytest.warns(ConsistencyWarning):
        res = compute_sqi_df(soil_data, id_column="SampleID", pairwise=bad)
    assert res.CR > 0.1
    assert any("Consistency Ratio" in w for w in res.warnings)
    assert res.sqi.between(0, 1).all()


def test_no_indicators_selected(soil_data):
    with pytest.raises(NoIndicatorsSelectedError, match="Try adjusting thresholds"):
        compute_sqi_df(soil_data, id_column="SampleID", loading_threshold=1.0)
    with pytest.raises(NoIndicatorsSelectedError):
        compute_sqi_df(soil_data, id_column="SampleID", variance_threshold=1.0)


def test_input_validation(soil_data):
    with pytest.raises(ValidationError, match="ID column 'Nope' not found"):
        compute_sqi_df(soil_data, id_column="Nope")
    with pytest.raises(ValidationError, match="must be a data frame"):
        compute_sqi_df(soil_data.to_numpy())
    with pytest.raises(ValidationError):
        compute_sqi_df(soil_data, id_column="SampleID", variance_threshold=1.5)


def test_missing_rule_for_selected_indicator(soil_data):
    with pytest.raises(ValidationError, match="No scoring rule specified"):
        compute_sqi_df(soil_data, id_column="SampleID", rules={"Nope": HigherBetter()})


def test_lower_better_rules_mirror_higher_better(result, soil_data):
    rules = {m: LowerBetter() for m in result.mds}
    res = compute_sqi_df(soil_data, id_column="SampleID", rules=rules)
    assert np.allclose(res.sqi + result.sqi, 1.0)


def test_pipeline_is_deterministic(soil_data):
    a = compute_sqi_df(soil_data, id_column="SampleID")
    b = compute_sqi_df(soil_data.copy(), id_column="SampleID")
    assert a.mds == b.mds
    pd.testing.assert_frame_equal(a.results, b.results, check_exact=True)
    pd.testing.assert_series_equal(a.weights, b.weights, check_exact=True)


def test_input_table_is_not_modified(soil_data):
    before = soil_data.copy()
    compute_sqi_df(soil_data, id_column="SampleID")
    pd.testing.assert_frame_equal(soil_data, before)


def test_rows_with_missing_values_get_missing_sqi(soil_data):
    gap = pd.DataFrame({"SampleID": ["gap"]})
    data = pd.concat([soil_data, gap], ignore_index=True)
    with pytest.warns(DataQualityWarning, match="Removing 1 rows"):
        res = compute_sqi_df(data, id_column="SampleID")
    assert len(res.results) == len(data)
    assert np.isnan(res.sqi.iloc[-1])
    assert res.sqi.iloc[:-1].notna().all()
    assert res.pca.n_samples == len(soil_data)
    assert any("Removing 1 rows" in w for w in res.warnings)


def test_aggregate_index_propagates_missing_scores():
    scored = pd.DataFrame({"a_scored": [1.0, 0.5, np.nan], "b_scored": [1.0, 0.0, 1.0]})
    sqi = aggregate_index(scored, {"a": 0.25, "b": 0.75}, ["a", "b"])
    assert sqi.name == "SQI"
    assert sqi.iloc[0] == pytest.approx(1.0)
    assert sqi.iloc[1] == pytest.approx(0.125)
    assert np.isnan(sqi.iloc[2])


def test_derive_weights():
    eq = derive_weights(["a", "b"])
    assert eq.CR == 0 and np.allclose(eq.weights.to_numpy(), 0.5)
    ahp = derive_weights(["a", "b", "c"], JUDGEMENTS)
    pd.testing.assert_series_equal(ahp.weights, ahp_weights(JUDGEMENTS, ["a", "b", "c"]).weights)


def test_compute_sqi_properties(soil_data):
    props = ["Sand", "Clay", "OM", "pH", "BD"]
    res = compute_sqi_properties(soil_data, properties=props, id_column="SampleID")
    assert set(res.mds) <= set(props)
    assert "Silt" not in res.results.columns
    assert list(res.results["SampleID"]) == list(soil_data["SampleID"])

    everything = compute_sqi_properties(soil_data, id_column="SampleID")
    assert "Silt" in everything.loadings.index


def test_compute_sqi_properties_validation(soil_data):
    with pytest.raises(ValidationError, match="Properties not found in data: Zn"):
        compute_sqi_properties(soil_data, properties=["pH", "Zn"])
    with pytest.raises(ValidationError, match="No numeric columns"):
        compute_sqi_properties(soil_data[["SampleID"]], id_column="SampleID")
    with pytest.raises(ValidationError, match="rules must be a mapping"):
        compute_sqi_properties(soil_data, id_column="SampleID", rules=[HigherBetter()])


def test_sqi_pipeline(soil_data):
    pipe = SQIPipeline(id_column="SampleID")
    assert pipe.result_ is None
    table = pipe.fit_transform(soil_data)
    assert "SQI" in table.columns
    assert isinstance(pipe.result_, SQIResult)
    pd.testing.assert_frame_equal(table, compute_sqi_df(soil_data, id_column="SampleID").results)


def test_summary_and_repr(result):
    text = result.summary()
    assert "Soil Quality Index" in text
    for m in result.mds:
        assert m in text
    assert repr(result).startswith("SQIResult(samples=30")


def test_aggregate_index_rejects_unnormalized_weights():
    scored = pd.DataFrame({"a_scored": [1.0], "b_scored": [0.0]})
    with pytest.raises(ValidationError, match="sum to 1"):
        aggregate_index(scored, {"a": 0.5, "b": 0.6}, ["a", "b"])


def test_labeled_pairwise_matrix_must_be_square(result, soil_data):
    mds = list(result.mds)
    wide = pd.DataFrame([row + [7.0] for row in JUDGEMENTS], index=mds, columns=mds + ["Extra"])
    with pytest.raises(InconsistentMatrixError, match="square, got 3x4"):
        compute_sqi_df(soil_data, id_column="SampleID", pairwise=wide)
    narrow = pd.DataFrame([row[:2] for row in JUDGEMENTS], index=mds, columns=mds[:2])
    with pytest.raises(InconsistentMatrixError, match="square, got 3x2"):
        compute_sqi_df(soil_data, id_column="SampleID", pairwise=narrow)
    with pytest.raises(ValidationError, match="2-dimensional"):
        compute_sqi_df(soil_data, id_column="SampleID", pairwise=[1, 3, 5])


def test_id_column_may_hold_missing_ids(soil_data):
    data = soil_data.copy()
    data.loc[0, "SampleID"] = None
    res = compute_sqi_df(data, id_column="SampleID")
    assert res.results["SampleID"].isna().sum() == 1
    assert res.sqi.notna().all()


def test_result_tables_are_independent_copies(result, soil_data):
    assert result.loadings is not result.pca.loadings
    result.loadings.iloc[0, 0] = 99.0
    assert result.pca.loadings.iloc[0, 0] != 99.0

    om_before = soil_data["OM"].copy()
    result.results.loc[0, "OM"] = -1.0
    pd.testing.assert_series_equal(soil_data["OM"], om_before)
