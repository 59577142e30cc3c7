import numpy as np
import pandas as pd
import pytest

from house_prices.Stage_4_Feature_Engineering.pca_contributions import PCAContributions


@pytest.fixture
def fitted(house_df):
    return PCAContributions(n_components=4).fit(house_df)


def test_excludes_id_target_and_text(fitted):
    assert "Id" not in fitted.numeric_cols
    assert "SalePrice" not in fitted.numeric_cols
    assert "Neighborhood" not in fitted.numeric_cols
    assert "GrLivArea" in fitted.numeric_cols


def test_contributions_sum_to_100_per_component(fitted):
    sums = fitted.contributions_.sum(axis=0)
    np.testing.assert_allclose(sums.values, 100.0)
    assert list(fitted.contributions_.columns) == ["Dim1", "Dim2", "Dim3", "Dim4"]


def test_coordinates_square_to_eigenvalues(fitted):
    # sum of squared coordinates over variables is the component's eigenvalue
    np.testing.assert_allclose(
        (fitted.coordinates_ ** 2).sum(axis=0).values, fitted.eigenvalues_)


def test_rank_top_two_weighted_by_eigenvalues(fitted):
    ranking = fitted.rank_top_two()
    eig = fitted.eigenvalues_[:2]
    c1, c2 = fitted.contributions_["Dim1"], fitted.contributions_["Dim2"]
    expected = (c1 * eig[0] + c2 * eig[1]) / eig.sum()

    pd.testing.assert_series_equal(
        ranking, expected.loc[ranking.index], check_names=False)
    assert ranking.is_monotonic_decreasing
    assert ranking.sum() == pytest.approx(100.0)


def test_rows_with_missing_numeric_values_are_left_out(house_df, fitted):
    expected = len(house_df[fitted.numeric_cols].dropna())
    assert fitted.report["n_rows_used"] == expected
    assert fitted.report["n_rows_dropped"] == len(house_df) - expected


def test_reduce_keeps_id_and_target(house_df, fitted):
    reduced = fitted.reduce(house_df)
    assert list(reduced.columns) == ["Id", "SalePrice", "PC1", "PC2", "PC3", "PC4"]
    assert len(reduced) == fitted.report["n_rows_used"]
    # scores are centred
    np.testing.assert_allclose(reduced[["PC1", "PC2"]].mean().values, 0.0, atol=1e-8)


def test_plots_and_report(tmp_path, fitted):
    charts = fitted.save_plots(tmp_path)
    report_path = fitted.save_report(tmp_path)
    assert len(charts) == 2
    for chart in charts:
        assert chart.endswith(".png")
    assert report_path.exists()


def test_needs_two_numeric_columns():
    df = pd.DataFrame({"Id": [1, 2, 3], "SalePrice": [1.0, 2.0, 3.0],
                       "GrLivArea": [800.0, 900.0, 1000.0]})
    with pytest.raises(ValueError):
        PCAContributions().fit(df)


def test_rank_before_fit():
    with pytest.raises(RuntimeError):
        PCAContributions().rank_top_two()
