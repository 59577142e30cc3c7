"""Parquet snapshots and joblib/JSON artifacts shared between stages."""
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Union

import joblib
import pandas as pd

log = logging.getLogger("artifacts")

PathLike = Union[str, Path]


def save_snapshot(df: pd.DataFrame, path: PathLike) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_parquet(path, index=True)
    log.info(f"Snapshot {df.shape} → {path}")
    return path


def load_snapshot(path: PathLike) -> pd.DataFrame:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Expected snapshot at {path}")
    return pd.read_parquet(path)


def save_json(payload: Dict[str, Any], path: PathLike) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(payload, f, indent=2, default=str)
    return path


def save_model(model: Any, path: PathLike) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    joblib.dump(model, path)
    log.info(f"Model saved → {path}")
    return path


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")
