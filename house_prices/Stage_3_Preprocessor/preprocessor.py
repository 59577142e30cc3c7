from typing import Any, Dict, Optional

import pandas as pd
from zenml import step

from house_prices.config import default_imputation_plan
from house_prices.Stage_3_Preprocessor.Missing_Imputer import MissingImputer
from house_prices.utils.monitor import monitor


@step
@monitor(name="missing_imputer_step", track_memory=True, track_input_size=True)
def missing_imputer(
    df: pd.DataFrame,
    plan: Optional[Dict[str, Dict[str, Any]]] = None,
) -> pd.DataFrame:
    imputer = MissingImputer(plan or default_imputation_plan())
    return imputer.fit_transform(df)
