import logging
from typing import Any, Dict, Optional, Sequence

import numpy as np
import pandas as pd
from sklearn.ensemble import RandomForestRegressor

log = logging.getLogger("stage6")


def _feature_block(df: pd.DataFrame, features: Sequence[str]) -> pd.DataFrame:
    missing = [f for f in features if f not in df.columns]
    if missing:
        raise KeyError(f"Model features not in DataFrame: {missing}")
    X = df[list(features)]
    if X.isna().any().any():
        cols = X.columns[X.isna().any()].tolist()
        raise ValueError(f"Missing values in model features: {cols}")
    return X


def train_model(
    train: pd.DataFrame,
    features: Sequence[str],
    target: str = "SalePrice",
    config: Optional[Dict[str, Any]] = None,
    seed: int = 42,
) -> RandomForestRegressor:
    """Random forest on log(target) using the fixed feature subset."""
    config = config or {}
    X = _feature_block(train, features)
    y = train[target]
    if (y <= 0).any():
        raise ValueError(f"'{target}' must be strictly positive for the log transform.")

    model = RandomForestRegressor(
        n_estimators=config.get("n_estimators", 500),
        max_features=config.get("max_features", 1.0),
        min_samples_leaf=config.get("min_samples_leaf", 1),
        n_jobs=config.get("n_jobs", 1),
        random_state=seed,
    )
    model.fit(X, np.log(y))
    log.info(
        f"RandomForest fitted on {len(X)} rows, features={list(features)}, "
        f"n_estimators={model.n_estimators}")
    return model


def predict_prices(
    model: RandomForestRegressor,
    test: pd.DataFrame,
    features: Sequence[str],
    target: str = "SalePrice",
    id_column: str = "Id",
) -> pd.DataFrame:
    """Predictions back on the price scale, next to the actual price."""
    X = _feature_block(test, features)
    predicted = np.exp(model.predict(X))
    ids = test[id_column].to_numpy() if id_column in test.columns else test.index.to_numpy()
    return pd.DataFrame({
        id_column: ids,
        "predicted": predicted,
        "actual": test[target].to_numpy(),
    }, index=test.index)


def feature_importances(model: RandomForestRegressor, features: Sequence[str]) -> pd.Series:
    return pd.Series(model.feature_importances_, index=list(features)).sort_values(ascending=False)
