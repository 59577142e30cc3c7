#!/usr/bin/env python3
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
import pandas as pd
from sklearn.model_selection import train_test_split

from house_prices.utils.artifacts import save_json, save_snapshot, utc_timestamp

log = logging.getLogger("stage5")


def quantile_bins(
    y: pd.Series, n_bins: int = 5, test_size: Optional[float] = None
) -> pd.Series:
    """
    Quantile group of every target value.  Bins are merged (n_bins reduced)
    until each one holds at least two rows, so the stratified split can put a
    member of every bin on both sides.  With test_size given, the number of
    bins also may not exceed the row count of either side.
    """
    if y.isna().any():
        raise ValueError("Cannot stratify on a target with missing values.")
    max_bins = len(y)
    if test_size is not None:
        n_test = int(np.ceil(test_size * len(y)))
        max_bins = min(n_test, len(y) - n_test)
    for k in range(n_bins, 1, -1):
        bins = pd.qcut(y, q=k, labels=False, duplicates="drop")
        if bins.value_counts().min() >= 2 and bins.nunique() <= max_bins:
            if k < n_bins:
                log.info(f"Stratification bins reduced from {n_bins} to {k}")
            return bins
    return pd.Series(0, index=y.index)


def quantile_split(
    df: pd.DataFrame,
    target: str,
    test_size: float = 0.20,
    seed: int = 42,
    n_bins: int = 5,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Train/test row labels, stratified on target quantile groups.
    Deterministic for a given (seed, test_size, n_bins).
    """
    if not 0.0 < test_size < 1.0:
        raise ValueError(f"test_size must be in (0, 1), got {test_size}")
    bins = quantile_bins(df[target], n_bins, test_size)
    stratify = bins if bins.nunique() > 1 else None
    train_idx, test_idx = train_test_split(
        df.index.to_numpy(),
        test_size=test_size,
        random_state=seed,
        stratify=stratify,
    )
    return np.sort(train_idx), np.sort(test_idx)


class QuantileSplit:
    def __init__(
        self,
        target: str,
        seed: int = 42,
        test_size: float = 0.20,
        n_bins: int = 5,
        split_dir: Optional[Path] = None,
    ):
        self.target = target
        self.seed = seed
        self.test_size = test_size
        self.n_bins = n_bins
        self.split_dir = Path(split_dir) if split_dir is not None else None
        self.manifest: dict = {}

    def split_data(self, df: pd.DataFrame) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """
        1) Quantile-stratified train/test split (80/20 by default).
        2) If split_dir is set, persist both sides as Parquet and write a JSON manifest.
        """
        train_idx, test_idx = quantile_split(
            df, self.target, self.test_size, self.seed, self.n_bins)
        train, test = df.loc[train_idx], df.loc[test_idx]

        self.manifest = {
            "timestamp": utc_timestamp(),
            "seed": self.seed,
            "test_size": self.test_size,
            "n_bins": self.n_bins,
            "target": self.target,
            "rows": {"train": len(train), "test": len(test)},
        }
        log.info(f"Split: train={len(train)} test={len(test)} (seed={self.seed})")

        if self.split_dir is not None:
            save_snapshot(train, self.split_dir / "train.parquet")
            save_snapshot(test, self.split_dir / "test.parquet")
            save_json(self.manifest, self.split_dir / "split_manifest.json")
        return train, test

    @staticmethod
    def sanity_checks(train: pd.DataFrame, test: pd.DataFrame, full_index=None) -> None:
        """
        Basic checks:
          - No duplicate rows between train/test (on index)
          - Together they cover the full index, when given
        """
        dup = set(train.index).intersection(test.index)
        if dup:
            raise AssertionError(f"Duplicate rows across splits: {len(dup)}")
        if full_index is not None:
            covered = set(train.index) | set(test.index)
            if covered != set(full_index):
                raise AssertionError(
                    f"Split does not cover the table: {len(set(full_index) - covered)} rows missing")

    def run(self, df: pd.DataFrame) -> Tuple[pd.DataFrame, pd.DataFrame]:
        train, test = self.split_data(df)
        self.sanity_checks(train, test, df.index)
        return train, test
