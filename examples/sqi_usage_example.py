"""
Simple usage example for the soil quality index pipeline.

Runs the full workflow on a synthetic soil table: PCA selection of the
minimum data set, AHP weighting from pairwise judgments, scoring with the
standard name-based rules and the final index.
"""

import numpy as np
import pandas as pd

from soilquality import (
    SOIL_PROPERTY_SETS,
    build_pairwise_matrix,
    compute_sqi_df,
    standard_scoring_rules,
)


def simple_usage_example():
    """Simple example showing basic usage of the SQI pipeline."""

    print("=== Soil Quality Index - Usage Example ===\n")

    print("1. Creating sample data...")
    soil = create_mock_soil_data()
    print(f"   Loaded: {soil.shape[0]} samples × {soil.shape[1] - 1} properties")

    print("\n2. Selecting the minimum data set with equal weights...")
    rules = standard_scoring_rules(SOIL_PROPERTY_SETS["standard"])
    first = compute_sqi_df(soil, id_column="SampleID", rules=rules)
    mds = list(first.mds)
    print(f"   ✓ MDS: {', '.join(mds)}")
    print(f"   ✓ PC1 explains {first.var_exp.iloc[0]:.1%} of variance")

    print("\n3. Weighting the MDS from pairwise judgments...")
    # the first selected indicator is judged 3x as important as each of the others
    judgements = {(mds[0], other): 3 for other in mds[1:]}
    pairwise = build_pairwise_matrix(mds, judgements)
    result = compute_sqi_df(soil, id_column="SampleID", pairwise=pairwise, rules=rules)
    for name, w in result.weights.items():
        print(f"   {name}: weight = {w:.3f} ({rules[name].describe()})")
    print(f"   Consistency Ratio: {result.CR:.4f}")

    print("\n4. Top 5 samples by SQI:")
    top = result.results.nlargest(5, "SQI")
    for i, (_, row) in enumerate(top.iterrows(), 1):
        print(f"   {i}. {row['SampleID']}: SQI = {row['SQI']:.3f}")

    print("\n5. Full summary:")
    print(result.summary())

    print("\n=== Example completed successfully! ===")


def create_mock_soil_data():
    """Create a mock soil property table for demonstration purposes."""
    np.random.seed(42)
    n = 40
    texture = np.random.normal(size=n)
    fertility = np.random.normal(size=n)

    return pd.DataFrame({
        "SampleID": [f"S{i:02d}" for i in range(1, n + 1)],
        "Sand": 45 + 10 * texture + np.random.normal(0, 2, n),
        "Silt": 30 + np.random.normal(0, 5, n),
        "Clay": 25 - 5 * texture + np.random.normal(0, 1, n),
        "pH": 6.5 + 0.5 * np.random.normal(size=n),
        "OM": 3 + 0.6 * fertility + np.random.normal(0, 0.2, n),
        "N": 0.2 + 0.04 * fertility + np.random.normal(0, 0.01, n),
        "P": 15 + 4 * fertility + np.random.normal(0, 2, n),
        "K": 150 + 30 * np.random.normal(size=n),
        "CEC": 12 + 3 * fertility + np.random.normal(0, 1, n),
    })


if __name__ == "__main__":
    simple_usage_example()
