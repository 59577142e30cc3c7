#!/usr/bin/env python3
"""
config.py

Pipeline defaults for the House Prices EDA run.  Everything the stages need
lives in one `PipelineConfig`; `load_config()` overlays a YAML file on top of
the defaults below and the CLI overrides that.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

log = logging.getLogger("config")

# ─────────────────────────────────────────────────────────────────────────────
# 1) DEFAULTS
# ─────────────────────────────────────────────────────────────────────────────

DATA_PATH = "Data/raw/train.csv"
ARTIFACT_DIR = "artifacts"
REPORT_DIR = "reports"

TARGET_COLUMN = "SalePrice"
ID_COLUMN = "Id"
SEED = 42
TEST_SIZE = 0.20
STRATIFY_BINS = 5
CORR_THRESHOLD = 0.5
PCA_COMPONENTS = 5

MODEL_FEATURES = ["OverallQual", "GrLivArea", "GarageCars", "TotalBsmtSF"]
FOREST_PARAMS = {"n_estimators": 500, "n_jobs": 1}

# Categorical columns whose NA means "feature absent" in the data dictionary
SENTINEL_COLUMNS = [
    "PoolQC", "MiscFeature", "Alley", "Fence", "FireplaceQu",
    "GarageType", "GarageFinish", "GarageQual", "GarageCond",
    "BsmtQual", "BsmtCond", "BsmtExposure", "BsmtFinType1", "BsmtFinType2",
    "MasVnrType",
]
SENTINEL_VALUE = "None"
GROUP_MEDIAN_COLUMNS = {"LotFrontage": "Neighborhood"}


def default_imputation_plan() -> Dict[str, Dict[str, Any]]:
    """column -> rule options, as consumed by `ImputationPlan.from_dict`."""
    plan: Dict[str, Dict[str, Any]] = {
        col: {"strategy": "sentinel", "value": SENTINEL_VALUE}
        for col in SENTINEL_COLUMNS
    }
    for col, group in GROUP_MEDIAN_COLUMNS.items():
        plan[col] = {
            "strategy": "group_median",
            "group_by": group,
            "fallback": "global_median",
        }
    return plan


@dataclass
class PipelineConfig:
    data_path: str = DATA_PATH
    artifact_dir: str = ARTIFACT_DIR
    report_dir: str = REPORT_DIR
    target: str = TARGET_COLUMN
    id_column: str = ID_COLUMN
    seed: int = SEED
    test_size: float = TEST_SIZE
    stratify_bins: int = STRATIFY_BINS
    corr_threshold: float = CORR_THRESHOLD
    pca_components: int = PCA_COMPONENTS
    features: List[str] = field(default_factory=lambda: list(MODEL_FEATURES))
    forest_params: Dict[str, Any] = field(
        default_factory=lambda: dict(FOREST_PARAMS))
    imputation_plan: Dict[str, Dict[str, Any]] = field(
        default_factory=default_imputation_plan)
    make_plots: bool = True
    enable_mlflow: bool = False

    def __post_init__(self):
        if not 0.0 < self.test_size < 1.0:
            raise ValueError(
                f"test_size must be in (0, 1), got {self.test_size}")
        if self.stratify_bins < 1:
            raise ValueError(
                f"stratify_bins must be >= 1, got {self.stratify_bins}")
        if not 0.0 <= self.corr_threshold < 1.0:
            raise ValueError(
                f"corr_threshold must be in [0, 1), got {self.corr_threshold}")
        if self.pca_components < 2:
            raise ValueError(
                "pca_components must be >= 2 to rank the first two components")
        if not self.features:
            raise ValueError("At least one model feature is required.")
        if not isinstance(self.imputation_plan, dict):
            raise ValueError(
                "imputation_plan must be a mapping of column -> rule, "
                f"got {type(self.imputation_plan).__name__}")
        if not isinstance(self.forest_params, dict):
            raise ValueError(
                "forest_params must be a mapping, "
                f"got {type(self.forest_params).__name__}")

    @property
    def artifacts(self) -> Path:
        return Path(self.artifact_dir)

    @property
    def reports(self) -> Path:
        return Path(self.report_dir)

    def with_overrides(self, **overrides) -> "PipelineConfig":
        """Copy with the non-None overrides applied (CLI flags)."""
        clean = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **clean)


def load_config(path: Optional[Union[str, Path]] = None) -> PipelineConfig:
    """
    Build a PipelineConfig from the defaults, overlaid with a YAML file.

    The YAML may either be flat or hold the settings under a top-level
    `pipeline:` key.  `imputation_plan` in YAML replaces the default plan
    entirely; `forest_params` is merged key by key.
    """
    if path is None:
        return PipelineConfig()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config file {path} must contain a mapping.")
    raw = raw.get("pipeline", raw)
    if not isinstance(raw, dict):
        raise ValueError(f"'pipeline' section of {path} must be a mapping.")

    known = {f.name for f in fields(PipelineConfig)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValueError(f"Unknown config keys in {path}: {unknown}")

    if "forest_params" in raw:
        params = raw["forest_params"] or {}
        if not isinstance(params, dict):
            raise ValueError(f"forest_params in {path} must be a mapping.")
        raw["forest_params"] = {**FOREST_PARAMS, **params}

    cfg = PipelineConfig(**raw)
    log.info(f"Loaded config from {path}")
    return cfg
