import logging
from pathlib import Path
from typing import Dict, Optional

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402
from sklearn.dummy import DummyRegressor  # noqa: E402
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score  # noqa: E402

log = logging.getLogger("stage7")


def log_rmse(predicted, actual) -> float:
    """RMSE between log(predicted) and log(actual) prices."""
    predicted = np.asarray(predicted, dtype=float)
    actual = np.asarray(actual, dtype=float)
    if predicted.shape != actual.shape:
        raise ValueError(
            f"Shape mismatch: predicted {predicted.shape} vs actual {actual.shape}")
    if (predicted <= 0).any() or (actual <= 0).any():
        raise ValueError("log-RMSE needs strictly positive prices.")
    return float(np.sqrt(mean_squared_error(np.log(actual), np.log(predicted))))


class ModelEvaluation:
    """
    Evaluates the fitted forest on the held-out rows.  Regression metrics are
    reported on both the log scale (rmse_log, the headline number) and the
    price scale (MAE, R²), with an optional median-price baseline.
    """

    def __init__(self):
        self.results: Dict[str, float] = {}

    def evaluate(self, predictions: pd.DataFrame, baseline_prices: Optional[pd.Series] = None):
        """
        :param predictions: frame with `predicted` and `actual` price columns.
        :param baseline_prices: training prices; their median becomes a constant baseline.
        :return: dict of metrics.
        """
        y_pred = predictions["predicted"].to_numpy()
        y_test = predictions["actual"].to_numpy()
        results = {
            "rmse_log": log_rmse(y_pred, y_test),
            "mae": float(mean_absolute_error(y_test, y_pred)),
            "r2": float(r2_score(y_test, y_pred)),
            "n_test": int(len(y_test)),
        }
        if baseline_prices is not None:
            baseline = DummyRegressor(strategy="median")
            baseline.fit(np.zeros((len(baseline_prices), 1)), baseline_prices)
            y_base = baseline.predict(np.zeros((len(y_test), 1)))
            results["baseline_rmse_log"] = log_rmse(y_base, y_test)
            results["rmse_log_reduction"] = results["baseline_rmse_log"] - results["rmse_log"]
        self.results = results
        log.info(f"Evaluation: {results}")
        return results

    @staticmethod
    def plot_predictions(predictions: pd.DataFrame, path: Path) -> str:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        lo = min(predictions["predicted"].min(), predictions["actual"].min())
        hi = max(predictions["predicted"].max(), predictions["actual"].max())
        plt.figure(figsize=(6, 6))
        plt.scatter(predictions["actual"], predictions["predicted"], s=10, alpha=0.6)
        plt.plot([lo, hi], [lo, hi], color="red", linestyle="--")
        plt.xlabel("Actual SalePrice")
        plt.ylabel("Predicted SalePrice")
        plt.title("Predicted vs actual (test)")
        plt.tight_layout()
        plt.savefig(path)
        plt.close()
        return str(path)
