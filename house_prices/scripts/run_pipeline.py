#!/usr/bin/env python3
"""
run_pipeline.py

Driver for the House Prices EDA + baseline pipeline:
ingestion → descriptive analysis → imputation → PCA ranking → split, fit & RMSE.

    house-prices --data Data/raw/train.csv
    house-prices --config params.yaml --engine zenml --mlflow

Defaults live in house_prices.config; a YAML file passed with --config
overrides them, and the flags below override both.
"""

import argparse
import logging
import sys

from house_prices.config import load_config

log = logging.getLogger("RunPipeline")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="house-prices",
        description="EDA, imputation, PCA ranking and a random-forest baseline on the House Prices data."
    )
    parser.add_argument("--data", help="Path to train.csv")
    parser.add_argument("--config", help="YAML file overriding the defaults")
    parser.add_argument("--artifacts", help="Directory for snapshots, model and metrics")
    parser.add_argument("--reports", help="Directory for figures and reports")
    parser.add_argument("--seed", type=int, help="Random seed for split and forest")
    parser.add_argument(
        "--engine", choices=["local", "zenml"], default="local",
        help="Run in-process (default) or as a ZenML pipeline")
    parser.add_argument("--no-plots", action="store_true", help="Skip figure rendering")
    parser.add_argument("--mlflow", action="store_true", help="Log params, metrics and artifacts to MLflow")
    parser.add_argument("-v", "--verbose", action="store_true", help="DEBUG logging")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s | %(levelname)s | %(message)s")

    cfg = load_config(args.config).with_overrides(
        data_path=args.data,
        artifact_dir=args.artifacts,
        report_dir=args.reports,
        seed=args.seed,
        make_plots=False if args.no_plots else None,
        enable_mlflow=True if args.mlflow else None,
    )
    log.info(f"▶ Running {args.engine} pipeline on {cfg.data_path}")

    if args.engine == "zenml":
        from house_prices.pipeline.training_pipeline import run_zenml
        run_zenml(cfg)
        return 0

    from house_prices.pipeline.local_pipeline import HousePricePipeline
    results = HousePricePipeline(cfg).run()
    print(f"RMSE (log SalePrice): {results['rmse_log']:.5f}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
