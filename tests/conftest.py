import numpy as np
import pandas as pd
import pytest


def make_soil_data(n: int = 30, seed: int = 123) -> pd.DataFrame:
    """
    Synthetic soil table with a known structure:
    - Sand, Clay, OM driven by one latent factor
    - pH, BD driven by a second one
    - Silt independent of both
    """
    rng = np.random.default_rng(seed)
    # three exactly uncorrelated, centered sources of variation
    raw = rng.normal(size=(n, 3))
    raw -= raw.mean(axis=0)
    q, _ = np.linalg.qr(raw)
    f1, f2, f3 = (q * np.sqrt(n)).T
    noise = lambda: 0.1 * rng.normal(size=n)
    return pd.DataFrame({
        "SampleID": [f"S{i+1}" for i in range(n)],
        "Sand": 45 + 10 * (f1 + noise()),
        "Clay": 25 - 5 * (f1 + noise()),
        "OM": 3 + 0.5 * (f1 + noise()),
        "pH": 6.5 + 0.5 * (f2 + noise()),
        "BD": 1.4 - 0.1 * (f2 + noise()),
        "Silt": 30 + 5 * f3,
    })


@pytest.fixture
def soil_data():
    return make_soil_data()
