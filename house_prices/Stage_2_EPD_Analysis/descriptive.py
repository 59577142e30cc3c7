#!/usr/bin/env python3
"""
Descriptive statistics for the SalePrice target and its numeric predictors.

  • target_summary      – describe() + skewness/kurtosis, raw and log scale
  • numeric_correlation – Pearson matrix over numeric columns, pairwise-complete
  • strong_correlations – predictors with |r| > threshold, sorted by |r|
"""
import logging
from typing import Dict, Sequence

import numpy as np
import pandas as pd
from scipy import stats

log = logging.getLogger("stage2")


def target_summary(df: pd.DataFrame, target: str) -> Dict[str, float]:
    y = df[target].dropna()
    if y.empty:
        raise ValueError(f"Target column '{target}' has no values.")
    summary = {k: float(v) for k, v in y.describe().items()}
    summary["skewness"] = float(stats.skew(y))
    summary["kurtosis"] = float(stats.kurtosis(y))
    if (y > 0).all():
        log_y = np.log(y)
        summary["log_skewness"] = float(stats.skew(log_y))
        summary["log_kurtosis"] = float(stats.kurtosis(log_y))
    log.info(
        f"{target}: mean={summary['mean']:.1f} median={summary['50%']:.1f} "
        f"skew={summary['skewness']:.2f} kurt={summary['kurtosis']:.2f}")
    return summary


def numeric_correlation(
    df: pd.DataFrame, exclude: Sequence[str] = ("Id",)
) -> pd.DataFrame:
    """
    Pearson correlation over numeric columns.  pandas drops missing values
    per pair of columns, not per row, so every pair uses all rows where both
    sides are present.
    """
    num = df.select_dtypes(include=[np.number]).drop(
        columns=list(exclude), errors="ignore")
    constant = [c for c in num.columns if num[c].nunique(dropna=True) <= 1]
    if constant:
        log.warning(f"Zero-variance columns give undefined correlation: {constant}")
    return num.corr(method="pearson")


def strong_correlations(
    corr: pd.DataFrame, target: str, threshold: float = 0.5
) -> pd.Series:
    if target not in corr.columns:
        raise KeyError(f"Target '{target}' is not a numeric column.")
    r = corr[target].drop(labels=[target]).dropna()
    strong = r[r.abs() > threshold]
    order = strong.abs().sort_values(ascending=False).index
    return strong.loc[order]
