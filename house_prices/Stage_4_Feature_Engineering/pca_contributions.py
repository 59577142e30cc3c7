#!/usr/bin/env python3
"""
Stage 4: PCA on Numeric Features

  • Fits a PCA on the standardized numeric block (id and target excluded).
  • Rows with NaNs in the numeric block are dropped for the fit (logged).
  • Per variable and component:
        coord        = loading * sqrt(eigenvalue)
        contribution = loading² * 100          (sums to 100 per component)
  • rank_top_two() ranks variables by their combined contribution to the
    first two components, weighted by the two eigenvalues.
  • Saves a scree plot, a contribution bar plot and `pca_report.json`.

The ranking is advisory only: the model's feature set stays fixed in config.
"""
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402
from sklearn.decomposition import PCA  # noqa: E402
from sklearn.preprocessing import StandardScaler  # noqa: E402

log = logging.getLogger("stage4")


class PCAContributions:
    """
    Parameters
    ----------
      n_components : int
          Components kept (default 5, capped by the number of variables).
      scale : bool
          Standardize variables before the fit (default True).
      exclude : sequence of str
          Numeric columns left out of the analysis (id, target).
    """
    N_COMPONENTS: int = 5

    def __init__(
        self,
        n_components: int = N_COMPONENTS,
        scale: bool = True,
        exclude: Sequence[str] = ("Id", "SalePrice"),
        random_state: int = 0,
    ):
        self.n_components = n_components
        self.scale = scale
        self.exclude = list(exclude)
        self.random_state = random_state
        self.numeric_cols: List[str] = []
        self.scaler: Optional[StandardScaler] = None
        self.pca_model: Optional[PCA] = None
        self.eigenvalues_: Optional[np.ndarray] = None
        self.contributions_: Optional[pd.DataFrame] = None
        self.coordinates_: Optional[pd.DataFrame] = None
        self.report: Dict = {}

    def _numeric_block(self, df: pd.DataFrame) -> pd.DataFrame:
        num = df.select_dtypes(include=[np.number]).drop(
            columns=self.exclude, errors="ignore")
        constant = [c for c in num.columns if num[c].nunique(dropna=True) <= 1]
        if constant:
            log.warning(f"PCA: dropping zero-variance columns {constant}")
            num = num.drop(columns=constant)
        return num

    def fit(self, df: pd.DataFrame) -> "PCAContributions":
        X = self._numeric_block(df)
        self.numeric_cols = X.columns.tolist()
        if len(self.numeric_cols) < 2:
            raise ValueError("PCA needs at least two numeric feature columns.")

        complete = X.dropna()
        dropped = len(X) - len(complete)
        if dropped:
            log.info(f"PCA: {dropped} rows with missing numeric values left out")
        if len(complete) < 2:
            raise ValueError("PCA needs at least two complete rows.")

        values = complete.values
        if self.scale:
            self.scaler = StandardScaler()
            values = self.scaler.fit_transform(values)

        n_comp = min(self.n_components, values.shape[1], values.shape[0])
        self.pca_model = PCA(n_components=n_comp, random_state=self.random_state)
        self.pca_model.fit(values)

        dims = [f"Dim{i + 1}" for i in range(n_comp)]
        loadings = pd.DataFrame(
            self.pca_model.components_.T, index=self.numeric_cols, columns=dims)
        self.eigenvalues_ = self.pca_model.explained_variance_
        self.coordinates_ = loadings * np.sqrt(self.eigenvalues_)
        self.contributions_ = loadings ** 2 * 100

        self.report = {
            "n_rows_used": int(len(complete)),
            "n_rows_dropped": int(dropped),
            "n_variables": len(self.numeric_cols),
            "eigenvalues": [float(v) for v in self.eigenvalues_],
            "explained_variance_ratio": [
                float(v) for v in self.pca_model.explained_variance_ratio_],
            "top_two_ranking": {
                k: round(float(v), 4) for k, v in self.rank_top_two().head(15).items()},
        }
        log.info(
            f"PCA: {n_comp} components, Dim1+Dim2 explain "
            f"{self.pca_model.explained_variance_ratio_[:2].sum():.3f}")
        return self

    def _check_fitted(self):
        if self.pca_model is None:
            raise RuntimeError("PCAContributions is not fitted yet.")

    def rank_top_two(self) -> pd.Series:
        """Combined contribution (%) of each variable to Dim1 and Dim2."""
        self._check_fitted()
        if self.contributions_.shape[1] < 2:
            raise ValueError("Need at least two components to rank.")
        eig = self.eigenvalues_[:2]
        c = self.contributions_.iloc[:, :2]
        combined = (c.iloc[:, 0] * eig[0] + c.iloc[:, 1] * eig[1]) / eig.sum()
        return combined.sort_values(ascending=False).rename("contribution")

    def reduce(self, df: pd.DataFrame, keep: Sequence[str] = ("Id", "SalePrice")) -> pd.DataFrame:
        """PC scores for every complete row, alongside the `keep` columns."""
        self._check_fitted()
        X = df[self.numeric_cols].dropna()
        values = self.scaler.transform(X.values) if self.scaler else X.values
        scores = self.pca_model.transform(values)
        cols = [f"PC{i + 1}" for i in range(scores.shape[1])]
        df_pcs = pd.DataFrame(scores, columns=cols, index=X.index)
        kept = [c for c in keep if c in df.columns]
        return pd.concat([df.loc[X.index, kept], df_pcs], axis=1)

    def save_plots(self, outdir: Path, top_n: int = 15) -> List[str]:
        self._check_fitted()
        outdir = Path(outdir)
        outdir.mkdir(parents=True, exist_ok=True)

        ratio = self.pca_model.explained_variance_ratio_
        plt.figure(figsize=(6, 4))
        plt.bar(np.arange(1, len(ratio) + 1), ratio * 100, color="steelblue")
        plt.plot(np.arange(1, len(ratio) + 1), ratio * 100, marker="o", color="black")
        plt.xlabel("Dimension")
        plt.ylabel("Explained variance (%)")
        plt.title("PCA Scree Plot")
        scree_path = outdir / "pca_scree.png"
        plt.tight_layout()
        plt.savefig(scree_path)
        plt.close()

        ranking = self.rank_top_two().head(top_n)
        expected = 100 / len(self.numeric_cols)
        plt.figure(figsize=(8, 4))
        ranking.plot(kind="bar", color="steelblue")
        plt.axhline(expected, color="red", linestyle="--")
        plt.ylabel("Contribution (%)")
        plt.title("Contribution of variables to Dim-1-2")
        contrib_path = outdir / "pca_contrib_dim12.png"
        plt.tight_layout()
        plt.savefig(contrib_path)
        plt.close()

        log.info(f"PCA plots saved to {outdir}")
        return [str(scree_path), str(contrib_path)]

    def save_report(self, outdir: Path) -> Path:
        outpath = Path(outdir) / "pca_report.json"
        outpath.parent.mkdir(parents=True, exist_ok=True)
        with open(outpath, "w") as f:
            json.dump(self.report, f, indent=2)
        log.info(f"PCA report → {outpath}")
        return outpath
