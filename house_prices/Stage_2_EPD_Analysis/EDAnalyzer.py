#!/usr/bin/env python3
"""
EDAnalyzer – exploratory plots and tables for the SalePrice target

    analyzer = EDAnalyzer(df, target="SalePrice", outdir="reports/eda")
    report = analyzer.run()

Writes into `outdir`:
    univariate_stats.csv            describe(include="all") + missing counts
    correlation_matrix.csv          numeric Pearson matrix
    SalePrice__hist.png             histogram + KDE
    SalePrice__qq.png / log_*__qq   QQ plots, raw and log scale
    <feature>__SalePrice__scatter   one per strongly-correlated predictor
    OverallQual__SalePrice__box.png
    corr_top_heatmap.png            heatmap of the top-k correlated columns
"""
import logging
from pathlib import Path
from typing import Any, Dict, List

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402
import seaborn as sns  # noqa: E402
from scipy.stats import probplot  # noqa: E402

from house_prices.Stage_2_EPD_Analysis.descriptive import (  # noqa: E402
    numeric_correlation,
    strong_correlations,
    target_summary,
)

log = logging.getLogger("stage2")


class EDAnalyzer:
    def __init__(
        self,
        df: pd.DataFrame,
        target: str = "SalePrice",
        outdir: str = "reports/eda",
        id_column: str = "Id",
        corr_threshold: float = 0.5,
        heatmap_top_k: int = 10,
        box_column: str = "OverallQual",
        make_plots: bool = True,
    ):
        self.df = df.copy()
        self.target = target
        self.id_column = id_column
        self.outdir = Path(outdir)
        self.outdir.mkdir(parents=True, exist_ok=True)
        self.corr_thr = corr_threshold
        self.top_k = heatmap_top_k
        self.box_column = box_column
        self.make_plots = make_plots

        self.corr: pd.DataFrame = None
        self.strong: pd.Series = None
        self.figures: List[str] = []
        self.report: Dict[str, Any] = {}

    def _save(self, name: str) -> None:
        path = self.outdir / name
        plt.tight_layout()
        plt.savefig(path)
        plt.close()
        self.figures.append(str(path))

    def univariate(self):
        desc = self.df.describe(include="all").T
        desc["missing"] = self.df.isna().sum()
        desc.to_csv(self.outdir / "univariate_stats.csv")
        self.report["target_summary"] = target_summary(self.df, self.target)

        if not self.make_plots:
            return
        y = self.df[self.target].dropna()

        plt.figure(figsize=(7, 4))
        sns.histplot(y, kde=True, color="steelblue")
        plt.title(f"Distribution of {self.target}")
        self._save(f"{self.target}__hist.png")

        plt.figure()
        probplot(y, plot=plt)
        plt.title(f"QQ-plot {self.target}")
        self._save(f"{self.target}__qq.png")

        if (y > 0).all():
            plt.figure()
            probplot(np.log(y), plot=plt)
            plt.title(f"QQ-plot log({self.target})")
            self._save(f"log_{self.target}__qq.png")

    def bivariate(self):
        self.corr = numeric_correlation(self.df, exclude=(self.id_column,))
        self.corr.to_csv(self.outdir / "correlation_matrix.csv")
        self.strong = strong_correlations(self.corr, self.target, self.corr_thr)
        self.report["strong_correlations"] = {
            k: round(float(v), 4) for k, v in self.strong.items()}
        log.info(
            f"{len(self.strong)} predictors with |r| > {self.corr_thr}: "
            f"{list(self.strong.index)}")

        if not self.make_plots:
            return

        for col in self.strong.index:
            plt.figure()
            sns.scatterplot(x=col, y=self.target, data=self.df, s=10)
            plt.title(f"{col}↔{self.target} (pearson r={self.strong[col]:.2f})")
            self._save(f"{col}__{self.target}__scatter.png")

        if self.box_column in self.df.columns:
            plt.figure(figsize=(8, 5))
            sns.boxplot(x=self.box_column, y=self.target, data=self.df)
            plt.title(f"{self.target} by {self.box_column}")
            self._save(f"{self.box_column}__{self.target}__box.png")

    def multivariate(self):
        if not self.make_plots or self.corr is None:
            return
        top = (self.corr[self.target].abs()
               .sort_values(ascending=False)
               .head(self.top_k + 1).index)
        plt.figure(figsize=(9, 7))
        sns.heatmap(self.corr.loc[top, top], annot=True, fmt=".2f",
                    cmap="coolwarm", vmin=-1, vmax=1)
        plt.title(f"Top {len(top) - 1} correlations with {self.target}")
        self._save("corr_top_heatmap.png")

    def run(self) -> Dict[str, Any]:
        self.univariate()
        self.bivariate()
        self.multivariate()
        self.report["figures"] = list(self.figures)
        return self.report
