from typing import Tuple

import pandas as pd
from typing_extensions import Annotated
from zenml import step

from house_prices.Stage_5_Split_data.QuantileSplit import QuantileSplit

DATASET_TARGET_COLUMN_NAME = "SalePrice"


@step
def data_splitter(
    data: pd.DataFrame,
    target: str = DATASET_TARGET_COLUMN_NAME,
    test_size: float = 0.20,
    n_bins: int = 5,
    seed: int = 42,
) -> Tuple[Annotated[pd.DataFrame, "train"], Annotated[pd.DataFrame, "test"]]:
    splitter = QuantileSplit(
        target=target, seed=seed, test_size=test_size, n_bins=n_bins)
    return splitter.run(data)
