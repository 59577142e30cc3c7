#!/usr/bin/env python3
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import joblib
import numpy as np
import pandas as pd

log = logging.getLogger("stage3")
DEFAULT_MODEL_PATH = Path("artifacts/missing_model.joblib")
SENTINEL_VALUE = "None"
FALLBACKS = ("global_median", "keep_nan")


def missing_summary(df: pd.DataFrame) -> pd.DataFrame:
    """Columns with at least one NA, most-missing first."""
    null_counts = df.isna().sum()
    pct_missing = (null_counts / len(df) * 100).round(2)
    summary = pd.DataFrame(
        {"missing_count": null_counts, "missing_pct": pct_missing})
    summary = summary[summary["missing_count"] > 0]
    return summary.sort_values("missing_count", ascending=False)


@dataclass(frozen=True)
class SentinelFill:
    value: str = SENTINEL_VALUE
    strategy: str = "sentinel"


@dataclass(frozen=True)
class GroupMedianFill:
    group_by: str
    rounding: int = 0
    fallback: str = "global_median"
    strategy: str = "group_median"

    def __post_init__(self):
        if self.fallback not in FALLBACKS:
            raise ValueError(
                f"fallback must be one of {FALLBACKS}, got '{self.fallback}'")


ImputeRule = Union[SentinelFill, GroupMedianFill]


class ImputationPlan:
    """
    Explicit column -> fill rule mapping.

    Built from a plain dict so it can live in YAML:

        LotFrontage: {strategy: group_median, group_by: Neighborhood}
        PoolQC:      {strategy: sentinel, value: "None"}
    """

    def __init__(self, rules: Mapping[str, ImputeRule]):
        self.rules: Dict[str, ImputeRule] = dict(rules)

    @classmethod
    def from_dict(cls, options: Mapping[str, Mapping[str, Any]]) -> "ImputationPlan":
        rules: Dict[str, ImputeRule] = {}
        for col, opts in options.items():
            opts = dict(opts)
            strategy = opts.pop("strategy", None)
            if strategy == "sentinel":
                rules[col] = SentinelFill(**opts)
            elif strategy == "group_median":
                if "group_by" not in opts:
                    raise ValueError(
                        f"group_median rule for '{col}' needs 'group_by'.")
                rules[col] = GroupMedianFill(**opts)
            else:
                raise ValueError(
                    f"Unknown imputation strategy for '{col}': {strategy!r}")
        return cls(rules)

    def columns(self) -> List[str]:
        return list(self.rules)

    def __iter__(self):
        return iter(self.rules.items())

    def __len__(self):
        return len(self.rules)


class MissingImputer:
    """
    Missing-Value Imputation for a hand-chosen set of columns.

    Workflow:
      1) fit(): for every GroupMedianFill column, learn the per-group median
         of the non-missing values and the column's global median.
      2) transform(): on a copy,
           • SentinelFill   → NA replaced with the literal sentinel category.
           • GroupMedianFill → NA replaced with round(median of its group).
             If a row's group has no observed value (or the group key itself
             is NA) the rule's fallback applies: the rounded global median,
             or leave NA with fallback="keep_nan".
      3) report[col] records strategy, cells filled and any fallback groups.
    """

    def __init__(
        self,
        plan: Union[ImputationPlan, Mapping[str, Mapping[str, Any]]],
        model_path: Union[str, Path] = DEFAULT_MODEL_PATH,
    ):
        if not isinstance(plan, ImputationPlan):
            plan = ImputationPlan.from_dict(plan)
        self.plan = plan
        self.model_path = Path(model_path)
        self.group_medians_: Dict[str, pd.Series] = {}
        self.global_medians_: Dict[str, float] = {}
        self.report: Dict[str, Dict[str, Any]] = {}
        self.fitted_ = False

    def _check_columns(self, df: pd.DataFrame) -> None:
        needed = set(self.plan.columns())
        for _, rule in self.plan:
            if isinstance(rule, GroupMedianFill):
                needed.add(rule.group_by)
        missing = sorted(needed - set(df.columns))
        if missing:
            raise KeyError(f"Imputation plan columns not in DataFrame: {missing}")

    def fit(self, df: pd.DataFrame) -> "MissingImputer":
        self._check_columns(df)
        for col, rule in self.plan:
            if not isinstance(rule, GroupMedianFill):
                continue
            values = pd.to_numeric(df[col], errors="raise")
            self.group_medians_[col] = values.groupby(df[rule.group_by]).median()
            self.global_medians_[col] = float(values.median())
            log.info(
                f"{col}: learned medians for {self.group_medians_[col].notna().sum()} "
                f"'{rule.group_by}' groups (global={self.global_medians_[col]:.1f})")
        self.fitted_ = True
        return self

    def _fill_sentinel(self, s: pd.Series, rule: SentinelFill) -> pd.Series:
        if isinstance(s.dtype, pd.CategoricalDtype):
            if rule.value not in s.cat.categories:
                s = s.cat.add_categories([rule.value])
            return s.fillna(rule.value)
        return s.astype(object).where(s.notna(), rule.value)

    def _fill_group_median(
        self, df: pd.DataFrame, col: str, rule: GroupMedianFill
    ) -> pd.Series:
        s = df[col].copy()
        na = s.isna()
        if not na.any():
            return s
        medians = self.group_medians_[col]
        fill = df.loc[na, rule.group_by].map(medians)

        empty = fill.isna()
        if empty.any():
            groups = sorted(df.loc[na, rule.group_by][empty].astype(str).unique())
            self.report[col]["fallback_groups"] = groups
            if rule.fallback == "global_median":
                log.warning(
                    f"{col}: no observed values in groups {groups}; "
                    f"using global median {self.global_medians_[col]:.1f}")
                fill[empty] = self.global_medians_[col]
            else:
                log.warning(f"{col}: groups {groups} have no observed values; leaving NA")

        s.loc[na] = np.round(fill.astype(float), rule.rounding)
        return s

    def transform(self, df: pd.DataFrame) -> pd.DataFrame:
        if not self.fitted_:
            raise RuntimeError("MissingImputer.transform() called before fit().")
        self._check_columns(df)
        out = df.copy()
        for col, rule in self.plan:
            n_missing = int(out[col].isna().sum())
            self.report[col] = {"strategy": rule.strategy, "n_missing": n_missing}
            if isinstance(rule, SentinelFill):
                out[col] = self._fill_sentinel(out[col], rule)
                self.report[col]["value"] = rule.value
            else:
                out[col] = self._fill_group_median(out, col, rule)
                self.report[col]["group_by"] = rule.group_by
            self.report[col]["n_filled"] = n_missing - int(out[col].isna().sum())
        total = sum(r["n_filled"] for r in self.report.values())
        log.info(f"Imputed {total} cells across {len(self.plan)} columns")
        return out

    def fit_transform(self, df: pd.DataFrame) -> pd.DataFrame:
        return self.fit(df).transform(df)

    def save_state(self, path: Optional[Union[str, Path]] = None) -> Path:
        path = Path(path or self.model_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        joblib.dump({
            "plan": self.plan.rules,
            "group_medians": self.group_medians_,
            "global_medians": self.global_medians_,
        }, path)
        log.info(f"MissingImputer state → {path}")
        return path

    @classmethod
    def load_state(cls, path: Union[str, Path]) -> "MissingImputer":
        state = joblib.load(path)
        imputer = cls(ImputationPlan(state["plan"]), model_path=path)
        imputer.group_medians_ = state["group_medians"]
        imputer.global_medians_ = state["global_medians"]
        imputer.fitted_ = True
        return imputer
