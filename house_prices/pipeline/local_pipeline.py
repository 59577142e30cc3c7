"""
Local (in-process) runner: the five stages in order, snapshots persisted
between them and read back by the next stage, one RMSE at the end.  The
ZenML pipeline in `training_pipeline.py` wires the same stage code as steps.
"""
import contextlib
import logging
from typing import Any, Dict, Optional

import mlflow
import pandas as pd

from house_prices.config import PipelineConfig
from house_prices.Stage_1_Ingestion.DataHealthCheck import DataHealthCheck
from house_prices.Stage_1_Ingestion.house_data import find_outliers, load_house_data
from house_prices.Stage_2_EPD_Analysis.EDAnalyzer import EDAnalyzer
from house_prices.Stage_3_Preprocessor.Missing_Imputer import MissingImputer, missing_summary
from house_prices.Stage_4_Feature_Engineering.pca_contributions import PCAContributions
from house_prices.Stage_5_Split_data.QuantileSplit import QuantileSplit
from house_prices.Stage_6_Training.model_training import (
    feature_importances,
    predict_prices,
    train_model,
)
from house_prices.Stage_7_Evaluation.evaluation import ModelEvaluation
from house_prices.utils.artifacts import (
    load_snapshot,
    save_json,
    save_model,
    save_snapshot,
)
from house_prices.utils.monitor import log_model_artifact, monitor
from house_prices.utils.PipelineReporter import PipelineReporter

log = logging.getLogger("RunPipeline")


class HousePricePipeline:
    def __init__(self, config: Optional[PipelineConfig] = None):
        self.cfg = config or PipelineConfig()
        self.reporter = PipelineReporter(
            report_dir=self.cfg.reports, enable_mlflow=self.cfg.enable_mlflow)
        self.results: Dict[str, Any] = {}

    @monitor(name="ingestion", log_result=True)
    def ingest(self) -> pd.DataFrame:
        cfg = self.cfg
        df = load_house_data(cfg.data_path, cfg.id_column, cfg.target)
        health = DataHealthCheck(df, target_col=cfg.target, id_col=cfg.id_column)
        summary = health.run_all_checks()
        if {"OverallQual", "GrLivArea"} <= set(df.columns):
            outliers = find_outliers(df)
            summary["large_area_outliers"] = outliers[cfg.id_column].tolist() \
                if cfg.id_column in outliers.columns else outliers.index.tolist()
        self.reporter.register("ingestion", summary)
        return df

    @monitor(name="descriptive_analysis")
    def analyze(self, df: pd.DataFrame) -> Dict[str, Any]:
        cfg = self.cfg
        analyzer = EDAnalyzer(
            df,
            target=cfg.target,
            outdir=cfg.reports / "eda",
            id_column=cfg.id_column,
            corr_threshold=cfg.corr_threshold,
            make_plots=cfg.make_plots,
        )
        report = analyzer.run()
        self.reporter.register(
            "descriptive_analysis",
            {k: v for k, v in report.items() if k != "figures"},
            report["figures"])
        return report

    @monitor(name="imputation", track_memory=True, track_input_size=True)
    def impute(self, df: pd.DataFrame) -> pd.DataFrame:
        cfg = self.cfg
        before = missing_summary(df)
        imputer = MissingImputer(
            cfg.imputation_plan, model_path=cfg.artifacts / "missing_model.joblib")
        imputed = imputer.fit_transform(df)
        imputer.save_state()
        save_snapshot(imputed, cfg.artifacts / "imputed.parquet")
        self.reporter.register("imputation", {
            "missing_before": {k: int(v) for k, v in before["missing_count"].items()},
            "columns": imputer.report,
        })
        return imputed

    @monitor(name="pca_ranking")
    def rank_features(self, df: pd.DataFrame) -> pd.Series:
        cfg = self.cfg
        pca = PCAContributions(
            n_components=cfg.pca_components,
            exclude=(cfg.id_column, cfg.target),
        ).fit(df)
        save_snapshot(
            pca.reduce(df, keep=(cfg.id_column, cfg.target)),
            cfg.artifacts / "pca_reduced.parquet")
        outdir = cfg.reports / "pca"
        charts = pca.save_plots(outdir) if cfg.make_plots else []
        pca.save_report(outdir)
        self.reporter.register("pca_ranking", pca.report, charts)
        return pca.rank_top_two()

    @monitor(name="fit_and_evaluate", track_memory=True)
    def fit_evaluate(self, df: pd.DataFrame) -> Dict[str, Any]:
        cfg = self.cfg
        splitter = QuantileSplit(
            target=cfg.target,
            seed=cfg.seed,
            test_size=cfg.test_size,
            n_bins=cfg.stratify_bins,
            split_dir=cfg.artifacts / "splits",
        )
        splitter.run(df)
        train = load_snapshot(splitter.split_dir / "train.parquet")
        test = load_snapshot(splitter.split_dir / "test.parquet")

        model = train_model(
            train, cfg.features, cfg.target, cfg.forest_params, seed=cfg.seed)
        predictions = predict_prices(
            model, test, cfg.features, cfg.target, cfg.id_column)

        evaluator = ModelEvaluation()
        metrics = evaluator.evaluate(predictions, baseline_prices=train[cfg.target])
        metrics["feature_importances"] = {
            k: round(float(v), 4) for k, v in feature_importances(model, cfg.features).items()}

        model_path = save_model(model, cfg.artifacts / "model.joblib")
        save_json(metrics, cfg.artifacts / "metrics.json")
        predictions.to_csv(cfg.artifacts / "predictions.csv", index=False)

        charts = []
        if cfg.make_plots:
            charts.append(ModelEvaluation.plot_predictions(
                predictions, cfg.reports / "evaluation" / "predicted_vs_actual.png"))
        self.reporter.register(
            "fit_and_evaluate", {"split": splitter.manifest, "metrics": metrics}, charts)

        if cfg.enable_mlflow:
            mlflow.log_params({
                "seed": cfg.seed,
                "test_size": cfg.test_size,
                "features": ",".join(cfg.features),
                **cfg.forest_params,
            })
            mlflow.log_metrics({
                k: v for k, v in metrics.items() if isinstance(v, (int, float))})
            log_model_artifact(model, model_path)
        return metrics

    def run(self) -> Dict[str, Any]:
        run_ctx = mlflow.start_run(run_name="house_prices") if self.cfg.enable_mlflow \
            else contextlib.nullcontext()
        with run_ctx:
            df = self.ingest()
            self.results["analysis"] = self.analyze(df)
            self.impute(df)
            imputed = load_snapshot(self.cfg.artifacts / "imputed.parquet")
            self.results["pca_ranking"] = self.rank_features(imputed)
            self.results["metrics"] = self.fit_evaluate(imputed)
            self.reporter.generate_report(output_name="pipeline_report")
        self.results["rmse_log"] = self.results["metrics"]["rmse_log"]
        log.info(f"RMSE (log SalePrice): {self.results['rmse_log']:.5f}")
        return self.results
