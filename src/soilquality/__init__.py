"""
soilquality - PCA/AHP composite Soil Quality Index (SQI)

Standardize soil properties, select a Minimum Data Set (MDS) of indicators with
PCA, weight them with the Analytic Hierarchy Process (or equally), score each
indicator onto [0, 1] and aggregate the scores into a single index per sample.
"""

from .transform import standardize_numeric
from .pca_mds import pca_select_mds, MDSSelection, PrincipalComponentModel
from .ahp import (
    ahp_weights, equal_weights, AHPResult, random_index,
    ratio_to_saaty, parse_judgement, build_pairwise_matrix,
    create_ahp_matrix, AHPMatrix
)
from .scoring import (
    ScoringRule, HigherBetter, LowerBetter, OptimumRange, ThresholdScoring,
    score_higher_better, score_lower_better, score_optimum, score_threshold,
    score_indicators
)
from .property_sets import SOIL_PROPERTY_SETS, standard_scoring_rules
from .sqi_compute import (
    SQIResult, SQIPipeline, aggregate_index, compute_sqi, compute_sqi_df,
    compute_sqi_properties
)
from .ingest import read_soil_table, read_pairwise_matrix
from .data_io import save_results, load_results
from .errors import (
    SQIError, ValidationError, InsufficientDataError, InconsistentMatrixError,
    NoIndicatorsSelectedError, SQIWarning, ConsistencyWarning, DataQualityWarning
)

__all__ = [
    # Standardizer
    "standardize_numeric",

    # PCA / MDS
    "pca_select_mds", "MDSSelection", "PrincipalComponentModel",

    # AHP
    "ahp_weights", "equal_weights", "AHPResult", "random_index",
    "ratio_to_saaty", "parse_judgement", "build_pairwise_matrix",
    "create_ahp_matrix", "AHPMatrix",

    # Scoring
    "ScoringRule", "HigherBetter", "LowerBetter", "OptimumRange", "ThresholdScoring",
    "score_higher_better", "score_lower_better", "score_optimum", "score_threshold",
    "score_indicators", "SOIL_PROPERTY_SETS", "standard_scoring_rules",

    # Pipeline
    "SQIResult", "SQIPipeline", "aggregate_index", "compute_sqi", "compute_sqi_df",
    "compute_sqi_properties",

    # I/O
    "read_soil_table", "read_pairwise_matrix", "save_results", "load_results",

    # Errors and warnings
    "SQIError", "ValidationError", "InsufficientDataError", "InconsistentMatrixError",
    "NoIndicatorsSelectedError", "SQIWarning", "ConsistencyWarning", "DataQualityWarning",
]

__version__ = "0.1.0"
