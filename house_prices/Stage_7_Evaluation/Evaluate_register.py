from typing import Any, Dict, List, Optional, Tuple

import mlflow
import pandas as pd
from sklearn.ensemble import RandomForestRegressor
from typing_extensions import Annotated
from zenml import step

from house_prices.Stage_6_Training.model_training import predict_prices, train_model
from house_prices.Stage_7_Evaluation.evaluation import ModelEvaluation


@step
def fit_forest(
    train: pd.DataFrame,
    features: List[str],
    target: str = "SalePrice",
    forest_params: Optional[Dict[str, Any]] = None,
    seed: int = 42,
) -> RandomForestRegressor:
    return train_model(train, features, target, forest_params, seed=seed)


@step
def evaluate_and_register(
    model: RandomForestRegressor,
    train: pd.DataFrame,
    test: pd.DataFrame,
    features: List[str],
    target: str = "SalePrice",
    id_column: str = "Id",
    log_to_mlflow: bool = False,
) -> Tuple[Annotated[pd.DataFrame, "predictions"], Annotated[dict, "metrics"]]:
    predictions = predict_prices(model, test, features, target, id_column)
    metrics = ModelEvaluation().evaluate(predictions, baseline_prices=train[target])
    if log_to_mlflow:
        with mlflow.start_run(run_name="house_prices_zenml"):
            mlflow.log_metrics(metrics)
            mlflow.sklearn.log_model(model, "random_forest")
    print(f"RMSE (log SalePrice): {metrics['rmse_log']:.5f}")
    return predictions, metrics
