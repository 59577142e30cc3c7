from typing import Tuple

import pandas as pd
from typing_extensions import Annotated
from zenml import step

from house_prices.Stage_4_Feature_Engineering.pca_contributions import PCAContributions


@step
def pca_ranking(
    df: pd.DataFrame,
    n_components: int = 5,
    id_column: str = "Id",
    target: str = "SalePrice",
    outdir: str = "reports/pca",
    make_plots: bool = True,
) -> Tuple[Annotated[pd.DataFrame, "pca_reduced"], Annotated[dict, "pca_report"]]:
    pca = PCAContributions(n_components=n_components, exclude=(id_column, target))
    pca.fit(df)
    if make_plots:
        pca.save_plots(outdir)
    pca.save_report(outdir)
    return pca.reduce(df, keep=(id_column, target)), pca.report
