import numpy as np
import pandas as pd
import pytest

from house_prices.config import SENTINEL_COLUMNS, default_imputation_plan
from house_prices.Stage_3_Preprocessor.Missing_Imputer import (
    GroupMedianFill,
    ImputationPlan,
    MissingImputer,
    SentinelFill,
    missing_summary,
)


@pytest.fixture
def small_df():
    return pd.DataFrame({
        "Neighborhood": ["A", "A", "A", "A", "B", "B", "B", "C", "C"],
        "LotFrontage": [60.0, 70.0, np.nan, 81.0, 50.0, np.nan, 57.0, np.nan, np.nan],
        "PoolQC": [np.nan, "Gd", np.nan, "Ex", np.nan, np.nan, "Gd", np.nan, "Fa"],
    })


def plan_for(fallback="global_median"):
    return {
        "PoolQC": {"strategy": "sentinel"},
        "LotFrontage": {"strategy": "group_median", "group_by": "Neighborhood",
                        "fallback": fallback},
    }


def test_sentinel_fill_leaves_only_observed_categories_and_none(house_df):
    imputed = MissingImputer(default_imputation_plan()).fit_transform(house_df)
    for col in SENTINEL_COLUMNS:
        observed = set(house_df[col].dropna().unique())
        assert imputed[col].notna().all()
        assert set(imputed[col].unique()) <= observed | {"None"}
        # untouched values keep their category
        kept = house_df[col].notna()
        assert (imputed.loc[kept, col] == house_df.loc[kept, col]).all()


def test_sentinel_fill_on_categorical_dtype():
    df = pd.DataFrame({"Alley": pd.Categorical(["Grvl", None, "Pave"])})
    out = MissingImputer({"Alley": {"strategy": "sentinel"}}).fit_transform(df)
    assert out["Alley"].tolist() == ["Grvl", "None", "Pave"]
    assert "None" in out["Alley"].cat.categories


def test_group_median_fill(small_df):
    out = MissingImputer(plan_for()).fit_transform(small_df)
    # A: median(60, 70, 81) = 70 ; B: median(50, 57) = 53.5 -> rounds to 54
    assert out.loc[2, "LotFrontage"] == 70
    assert out.loc[5, "LotFrontage"] == 54
    # observed values are untouched
    assert out.loc[[0, 1, 3, 4, 6], "LotFrontage"].tolist() == [60.0, 70.0, 81.0, 50.0, 57.0]


def test_group_median_matches_rounded_group_median(house_df):
    out = MissingImputer(default_imputation_plan()).fit_transform(house_df)
    was_missing = house_df["LotFrontage"].isna()
    medians = house_df.groupby("Neighborhood")["LotFrontage"].median()
    for idx in house_df.index[was_missing]:
        group = house_df.at[idx, "Neighborhood"]
        if pd.notna(medians.get(group, np.nan)):
            assert out.at[idx, "LotFrontage"] == np.round(medians[group])


def test_empty_group_falls_back_to_global_median(small_df):
    imputer = MissingImputer(plan_for())
    out = imputer.fit_transform(small_df)
    global_median = np.round(small_df["LotFrontage"].median())
    assert (out.loc[[7, 8], "LotFrontage"] == global_median).all()
    assert imputer.report["LotFrontage"]["fallback_groups"] == ["C"]
    assert out["LotFrontage"].notna().all()


def test_empty_group_keep_nan(small_df):
    out = MissingImputer(plan_for("keep_nan")).fit_transform(small_df)
    assert out.loc[[7, 8], "LotFrontage"].isna().all()
    assert out.loc[[2, 5], "LotFrontage"].notna().all()


def test_transform_does_not_mutate_input(small_df):
    before = small_df.copy()
    MissingImputer(plan_for()).fit_transform(small_df)
    pd.testing.assert_frame_equal(small_df, before)


def test_report_counts_filled_cells(small_df):
    imputer = MissingImputer(plan_for())
    imputer.fit_transform(small_df)
    assert imputer.report["PoolQC"] == {
        "strategy": "sentinel", "n_missing": 5, "value": "None", "n_filled": 5}
    assert imputer.report["LotFrontage"]["n_filled"] == 4


def test_plan_parsing():
    plan = ImputationPlan.from_dict(plan_for())
    assert plan.rules["PoolQC"] == SentinelFill()
    assert plan.rules["LotFrontage"] == GroupMedianFill(group_by="Neighborhood")
    assert len(plan) == 2


@pytest.mark.parametrize("rules", [
    {"X": {"strategy": "mode"}},
    {"X": {"strategy": "group_median"}},
    {"X": {"strategy": "group_median", "group_by": "G", "fallback": "zero"}},
])
def test_plan_rejects_bad_rules(rules):
    with pytest.raises(ValueError):
        ImputationPlan.from_dict(rules)


def test_unknown_plan_column(small_df):
    with pytest.raises(KeyError):
        MissingImputer({"Fence": {"strategy": "sentinel"}}).fit(small_df)


def test_transform_before_fit(small_df):
    with pytest.raises(RuntimeError):
        MissingImputer(plan_for()).transform(small_df)


def test_save_and_load_state(tmp_path, small_df):
    imputer = MissingImputer(plan_for())
    expected = imputer.fit_transform(small_df)
    path = imputer.save_state(tmp_path / "imputer.joblib")

    restored = MissingImputer.load_state(path)
    pd.testing.assert_frame_equal(restored.transform(small_df), expected)


def test_missing_summary(small_df):
    summary = missing_summary(small_df)
    assert list(summary.index) == ["PoolQC", "LotFrontage"]
    assert summary.loc["PoolQC", "missing_count"] == 5
    assert summary.loc["LotFrontage", "missing_pct"] == pytest.approx(44.44)
