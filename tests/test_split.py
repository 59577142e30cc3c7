import json

import numpy as np
import pandas as pd
import pytest

from house_prices.Stage_5_Split_data.QuantileSplit import (
    QuantileSplit,
    quantile_bins,
    quantile_split,
)


def test_partition_is_disjoint_and_covers_every_row(house_df):
    train_idx, test_idx = quantile_split(house_df, "SalePrice", seed=42)
    assert set(train_idx).isdisjoint(test_idx)
    assert set(train_idx) | set(test_idx) == set(house_df.index)


def test_partition_is_deterministic(house_df):
    first = quantile_split(house_df, "SalePrice", test_size=0.2, seed=42)
    second = quantile_split(house_df, "SalePrice", test_size=0.2, seed=42)
    np.testing.assert_array_equal(first[0], second[0])
    np.testing.assert_array_equal(first[1], second[1])


def test_other_seed_gives_other_partition(house_df):
    _, a = quantile_split(house_df, "SalePrice", seed=1)
    _, b = quantile_split(house_df, "SalePrice", seed=2)
    assert set(a) != set(b)


def test_holdout_proportion(house_df):
    _, test_idx = quantile_split(house_df, "SalePrice", test_size=0.2)
    assert len(test_idx) == int(np.ceil(0.2 * len(house_df)))


def test_every_price_quintile_is_in_the_test_set(house_df):
    _, test_idx = quantile_split(house_df, "SalePrice", n_bins=5)
    bins = quantile_bins(house_df["SalePrice"], 5)
    counts = bins.loc[test_idx].value_counts()
    assert len(counts) == 5
    # stratified: each quintile holds about a fifth of the test rows
    assert counts.max() - counts.min() <= 2


def test_bins_shrink_for_tiny_tables():
    y = pd.Series([100.0, 200.0, 300.0, 400.0, 500.0])
    bins = quantile_bins(y, 5)
    assert bins.value_counts().min() >= 2


@pytest.mark.parametrize("n", [5, 10, 12, 20])
def test_small_tables_still_split(n):
    df = pd.DataFrame({"SalePrice": np.arange(1, n + 1) * 1000.0})
    train_idx, test_idx = quantile_split(df, "SalePrice", test_size=0.2, seed=42)
    assert set(train_idx).isdisjoint(test_idx)
    assert set(train_idx) | set(test_idx) == set(df.index)
    assert len(test_idx) == int(np.ceil(0.2 * n))


def test_bins_never_outnumber_the_test_rows():
    y = pd.Series(np.arange(1, 11) * 1000.0)
    bins = quantile_bins(y, 5, test_size=0.2)
    assert bins.nunique() == 2
    assert quantile_bins(y.iloc[:5], 5, test_size=0.2).nunique() == 1


def test_missing_target_rejected(house_df):
    df = house_df.copy()
    df.loc[0, "SalePrice"] = np.nan
    with pytest.raises(ValueError):
        quantile_split(df, "SalePrice")


@pytest.mark.parametrize("size", [0.0, 1.0, -0.1])
def test_bad_test_size(house_df, size):
    with pytest.raises(ValueError):
        quantile_split(house_df, "SalePrice", test_size=size)


def test_quantile_split_class_persists_splits(tmp_path, house_df):
    splitter = QuantileSplit("SalePrice", seed=42, split_dir=tmp_path / "splits")
    train, test = splitter.run(house_df)

    assert len(train) + len(test) == len(house_df)
    assert (tmp_path / "splits" / "train.parquet").exists()
    assert (tmp_path / "splits" / "test.parquet").exists()
    manifest = json.loads((tmp_path / "splits" / "split_manifest.json").read_text())
    assert manifest["rows"] == {"train": len(train), "test": len(test)}
    assert manifest["seed"] == 42


def test_sanity_checks_flag_overlap(house_df):
    with pytest.raises(AssertionError):
        QuantileSplit.sanity_checks(house_df.iloc[:10], house_df.iloc[5:20])
