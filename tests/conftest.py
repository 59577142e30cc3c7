import matplotlib
matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from house_prices.config import SENTINEL_COLUMNS, PipelineConfig

NEIGHBORHOODS = ["NAmes", "CollgCr", "OldTown", "Edwards", "Somerst"]


def make_house_frame(n: int = 240, seed: int = 7) -> pd.DataFrame:
    """Small synthetic stand-in for train.csv with the columns the pipeline touches."""
    rng = np.random.default_rng(seed)
    ids = list(range(1, n - 1)) + [524, 1299]
    qual = rng.integers(1, 10, size=n)
    area = rng.normal(1500, 450, size=n).clip(500, 4000).round()
    # the two famous partial sales: top quality, huge, cheap
    qual[-2:] = 10
    area[-2:] = [4676, 5642]
    # a couple of ordinary quality-10 houses
    qual[:2] = 10

    garage = rng.integers(0, 4, size=n)
    bsmt = rng.normal(1000, 350, size=n).clip(0, 3000).round()
    year = rng.integers(1900, 2010, size=n)
    neighborhood = rng.choice(NEIGHBORHOODS, size=n)
    neighborhood[-6:-2] = "Blueste"

    frontage = rng.normal(70, 15, size=n).round()
    frontage[rng.random(n) < 0.2] = np.nan
    frontage[neighborhood == "Blueste"] = np.nan

    masvnr = rng.normal(100, 60, size=n).clip(0).round()
    masvnr[rng.random(n) < 0.05] = np.nan

    log_price = (10.4 + 0.11 * qual + 0.00035 * area + 0.06 * garage
                 + 0.0001 * bsmt + rng.normal(0, 0.08, size=n))
    price = np.exp(log_price).round()
    price[-2:] = [184750, 160000]

    df = pd.DataFrame({
        "Id": ids,
        "MSSubClass": rng.choice([20, 60, 50, 120], size=n),
        "LotFrontage": frontage,
        "LotArea": rng.normal(10000, 3000, size=n).clip(1500).round(),
        "Neighborhood": neighborhood,
        "OverallQual": qual,
        "OverallCond": rng.integers(1, 10, size=n),
        "YearBuilt": year,
        "MasVnrArea": masvnr,
        "TotalBsmtSF": bsmt,
        "GrLivArea": area,
        "FullBath": rng.integers(0, 4, size=n),
        "GarageCars": garage,
        "SalePrice": price,
    })
    for i, col in enumerate(SENTINEL_COLUMNS):
        values = rng.choice(["Gd", "TA", "Fa"], size=n).astype(object)
        values[rng.random(n) < 0.1 + 0.05 * (i % 5)] = np.nan
        df[col] = values
    return df


@pytest.fixture
def house_df() -> pd.DataFrame:
    return make_house_frame()


@pytest.fixture
def house_csv(tmp_path, house_df):
    path = tmp_path / "train.csv"
    house_df.to_csv(path, index=False)
    return path


@pytest.fixture
def pipeline_config(tmp_path, house_csv) -> PipelineConfig:
    return PipelineConfig(
        data_path=str(house_csv),
        artifact_dir=str(tmp_path / "artifacts"),
        report_dir=str(tmp_path / "reports"),
        forest_params={"n_estimators": 60, "n_jobs": 1},
    )
