import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

import pandas as pd

log = logging.getLogger("stage1")

DATASET_TARGET_COLUMN_NAME = "SalePrice"
DATASET_ID_COLUMN_NAME = "Id"


def load_house_data(
    path: Union[str, Path],
    id_column: str = DATASET_ID_COLUMN_NAME,
    target: str = DATASET_TARGET_COLUMN_NAME,
) -> pd.DataFrame:
    """
    Read the Kaggle training CSV.  Column types are whatever pandas infers;
    the only checks are that the file exists, is non-empty and carries the
    target column.  The id column, when present, is checked for duplicates.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    df = pd.read_csv(path)
    if df.empty:
        raise ValueError(
            "DataFrame is empty. Please check the file path or data source.")
    if target not in df.columns:
        raise ValueError(f"Target column '{target}' not found in DataFrame.")
    if id_column in df.columns and df[id_column].duplicated().any():
        dupes = df.loc[df[id_column].duplicated(), id_column].tolist()
        raise ValueError(f"Duplicate ids in '{id_column}': {dupes[:10]}")

    log.info(f"Data loaded from {path} with shape {df.shape}.")
    return df


def select_rows_by_id(
    df: pd.DataFrame,
    ids: Iterable[int],
    columns: Optional[Sequence[str]] = None,
    id_column: str = DATASET_ID_COLUMN_NAME,
) -> pd.DataFrame:
    """Rows whose id is in `ids`, in the order given."""
    ids = list(ids)
    indexed = df.set_index(id_column, drop=False)
    missing = [i for i in ids if i not in indexed.index]
    if missing:
        raise KeyError(f"Ids not found in '{id_column}': {missing}")
    out = indexed.loc[ids]
    if columns is not None:
        cols = list(columns)
        if id_column not in cols:
            cols = [id_column] + cols
        out = out[cols]
    return out.reset_index(drop=True)


def find_outliers(
    df: pd.DataFrame,
    quality: int = 10,
    min_area: float = 4500,
    quality_column: str = "OverallQual",
    area_column: str = "GrLivArea",
) -> pd.DataFrame:
    # top quality, huge living area, low price: Ids 524 and 1299 in train.csv
    mask = (df[quality_column] == quality) & (df[area_column] > min_area)
    return df.loc[mask]
