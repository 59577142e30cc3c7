import pandas as pd
from zenml import step

from house_prices.Stage_1_Ingestion.DataHealthCheck import DataHealthCheck
from house_prices.Stage_1_Ingestion.house_data import (
    DATASET_ID_COLUMN_NAME,
    DATASET_TARGET_COLUMN_NAME,
    load_house_data,
)


@step
def dataCheck(
    df: pd.DataFrame,
    target: str = DATASET_TARGET_COLUMN_NAME,
    id_column: str = DATASET_ID_COLUMN_NAME,
) -> dict:
    if df is None or df.empty:
        raise ValueError(
            "DataFrame is None or empty. Cannot perform health check.")
    health_check = DataHealthCheck(df, target_col=target, id_col=id_column)
    return health_check.run_all_checks()


@step
def dataLoader(
    file: str,
    id_column: str = DATASET_ID_COLUMN_NAME,
    target: str = DATASET_TARGET_COLUMN_NAME,
) -> pd.DataFrame:
    return load_house_data(file, id_column=id_column, target=target)
