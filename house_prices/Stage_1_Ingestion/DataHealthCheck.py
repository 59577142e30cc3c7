import logging
from itertools import combinations

import numpy as np
import pandas as pd
from statsmodels.stats.outliers_influence import variance_inflation_factor

log = logging.getLogger("stage1")


class DataHealthCheck:
    """
    Run a battery of pre-analysis checks on the raw house table and collect
    them in `self.results`.
    """

    def __init__(self, df: pd.DataFrame,
                 target_col: str = None,
                 id_col: str = "Id",
                 top_n: int = 10):
        self.df = df.copy()
        self.n_rows, self.n_cols = df.shape
        self.target_col = target_col
        self.id_col = id_col
        self.top_n = top_n
        self.results = {}

    def _numeric(self) -> pd.DataFrame:
        num = self.df.select_dtypes(include=[np.number])
        return num.drop(columns=[self.id_col], errors="ignore")

    def detect_dimensionality(self):
        ratio = self.n_cols / self.n_rows
        tag = "p≫n" if self.n_cols > self.n_rows else (
            "n≫p" if self.n_rows > self.n_cols else "p≈n")
        self.results['dimensionality'] = {
            'n_rows': self.n_rows,
            'n_cols': self.n_cols,
            'ratio': f"{self.n_cols}/{self.n_rows}={ratio:.2f}",
            'regime': tag
        }

    def detect_missingness(self):
        miss = self.df.isna().mean().sort_values(ascending=False)
        self.results['missingness'] = {
            'overall_pct': float(miss.mean()),
            'top_missing_cols': miss[miss > 0].head(self.top_n).to_dict()
        }

    def detect_dtypes(self):
        counts = self.df.dtypes.astype(str).value_counts().to_dict()
        self.results['dtypes'] = counts

    def detect_skew(self):
        skew = self._numeric().skew().abs().sort_values(ascending=False)
        self.results['skewness'] = skew.head(self.top_n).to_dict()

    def detect_categorical_cardinality(self):
        cats = self.df.select_dtypes(include=['object', 'category', 'string'])
        card = {c: int(cats[c].nunique()) for c in cats.columns}
        card = dict(
            sorted(card.items(), key=lambda kv: kv[1], reverse=True)[:self.top_n])
        self.results['cardinality'] = card

    def detect_outliers(self):
        out = {}
        num = self._numeric()
        for col in num.columns:
            if num[col].notna().sum() == 0:
                continue
            q1, q3 = np.nanpercentile(num[col], [25, 75])
            iqr = q3 - q1
            low, high = q1 - 1.5*iqr, q3 + 1.5*iqr
            out[col] = int(((num[col] < low) | (num[col] > high)).sum())
        self.results['outliers'] = dict(
            sorted(out.items(), key=lambda kv: kv[1], reverse=True)[:self.top_n])

    def detect_collinearity(self, thresh=0.8):
        corr = self._numeric().corr().abs()
        pairs = [(i, j, corr.loc[i, j]) for i, j in combinations(
            corr.columns, 2) if corr.loc[i, j] > thresh]
        pairs = sorted(pairs, key=lambda x: x[2], reverse=True)[:self.top_n]
        self.results['collinearity'] = [
            {'pair': [i, j], 'corr': round(float(c), 3)} for i, j, c in pairs]

    def detect_vif(self, max_cols: int = 20):
        num = self._numeric().drop(
            columns=[self.target_col], errors="ignore").dropna()
        # constant columns make VIF blow up
        num = num.loc[:, num.std() > 0].iloc[:, :max_cols]
        if num.shape[1] < 2 or len(num) <= num.shape[1]:
            self.results['vif'] = {}
            return
        X = num.values
        vifs = {num.columns[i]: float(variance_inflation_factor(X, i))
                for i in range(X.shape[1])}
        self.results['vif'] = dict(
            sorted(vifs.items(), key=lambda kv: kv[1], reverse=True)[:self.top_n])

    def run_all_checks(self):
        self.detect_dimensionality()
        self.detect_missingness()
        self.detect_dtypes()
        self.detect_skew()
        self.detect_categorical_cardinality()
        self.detect_outliers()
        self.detect_collinearity()
        self.detect_vif()
        log.info(
            f"Health check: {self.n_rows} rows × {self.n_cols} cols, "
            f"{len(self.results['missingness']['top_missing_cols'])} columns with NAs in top {self.top_n}")
        return self.results
