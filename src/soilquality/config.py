from __future__ import annotations
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
DATA = ROOT / "data"
PROC = DATA / "processed"

# MDS selection defaults
DEFAULT_VARIANCE_THRESHOLD = 0.05
DEFAULT_LOADING_THRESHOLD = 0.5

# AHP
CR_THRESHOLD = 0.1
MATRIX_TOLERANCE = 1e-6
WEIGHT_TOLERANCE = 1e-10
SAATY_MIN = 1 / 9
SAATY_MAX = 9

# Saaty's random consistency index, indexed by matrix size n = 1..11
RANDOM_INDEX = (0.0, 0.0, 0.58, 0.90, 1.12, 1.24, 1.32, 1.41, 1.45, 1.49, 1.51)

# output column naming
SCORED_SUFFIX = "_scored"
INDEX_COLUMN = "SQI"
