import pandas as pd
from zenml import step

from house_prices.Stage_2_EPD_Analysis.EDAnalyzer import EDAnalyzer


@step
def EDAnalyze(
    df: pd.DataFrame,
    target: str = "SalePrice",
    outdir: str = "reports/eda",
    id_column: str = "Id",
    corr_threshold: float = 0.5,
    make_plots: bool = True,
) -> dict:
    """Descriptive statistics, correlation ranking and EDA figures."""
    analyzer = EDAnalyzer(
        df,
        target=target,
        outdir=outdir,
        id_column=id_column,
        corr_threshold=corr_threshold,
        make_plots=make_plots,
    )
    return analyzer.run()
