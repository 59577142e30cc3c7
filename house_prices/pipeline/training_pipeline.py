import warnings
from typing import Any, Dict, List

from zenml import pipeline

from house_prices.config import PipelineConfig
from house_prices.Stage_1_Ingestion.data_loaders import dataCheck, dataLoader
from house_prices.Stage_2_EPD_Analysis.PED_Analysis import EDAnalyze
from house_prices.Stage_3_Preprocessor.preprocessor import missing_imputer
from house_prices.Stage_4_Feature_Engineering.dimensionality import pca_ranking
from house_prices.Stage_5_Split_data.data_split import data_splitter
from house_prices.Stage_7_Evaluation.Evaluate_register import (
    evaluate_and_register,
    fit_forest,
)

warnings.filterwarnings("ignore", category=FutureWarning)


@pipeline(enable_cache=False)
def house_price_pipeline(
    data_path: str,
    report_dir: str,
    features: List[str],
    forest_params: Dict[str, Any],
    imputation_plan: Dict[str, Dict[str, Any]],
    target: str = "SalePrice",
    id_column: str = "Id",
    seed: int = 42,
    test_size: float = 0.20,
    stratify_bins: int = 5,
    corr_threshold: float = 0.5,
    pca_components: int = 5,
    make_plots: bool = True,
    enable_mlflow: bool = False,
):
    df = dataLoader(data_path, id_column=id_column, target=target)
    dataCheck(df, target=target, id_column=id_column)
    EDAnalyze(
        df,
        target=target,
        outdir=f"{report_dir}/eda",
        id_column=id_column,
        corr_threshold=corr_threshold,
        make_plots=make_plots,
    )
    imputed = missing_imputer(df, plan=imputation_plan)
    pca_ranking(
        imputed,
        n_components=pca_components,
        id_column=id_column,
        target=target,
        outdir=f"{report_dir}/pca",
        make_plots=make_plots,
    )
    train, test = data_splitter(
        data=imputed,
        target=target,
        test_size=test_size,
        n_bins=stratify_bins,
        seed=seed,
    )
    model = fit_forest(
        train, features=features, target=target,
        forest_params=forest_params, seed=seed)
    evaluate_and_register(
        model, train, test,
        features=features,
        target=target,
        id_column=id_column,
        log_to_mlflow=enable_mlflow,
    )


def run_zenml(cfg: PipelineConfig):
    return house_price_pipeline(
        data_path=cfg.data_path,
        report_dir=cfg.report_dir,
        features=list(cfg.features),
        forest_params=dict(cfg.forest_params),
        imputation_plan=dict(cfg.imputation_plan),
        target=cfg.target,
        id_column=cfg.id_column,
        seed=cfg.seed,
        test_size=cfg.test_size,
        stratify_bins=cfg.stratify_bins,
        corr_threshold=cfg.corr_threshold,
        pca_components=cfg.pca_components,
        make_plots=cfg.make_plots,
        enable_mlflow=cfg.enable_mlflow,
    )
