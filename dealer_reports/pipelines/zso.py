import logging
from datetime import date
from typing import Any, Optional

import pandas as pd

from .. import parsers, settings
from ..aggregators.inventory import count_models
from ..aggregators.norms import flag_zero_stock_outs
from ..data_handler import ReportFile, ReportSheet, ReportTable
from ..mappings import build_entity_mappings
from ..pipeline import ReportPipeline
from ..schemas import ZSOFlag
from ..utils import load_sheet

logger = logging.getLogger(__name__)

ZSO_MARK = "ZSO"
TOTAL_COLUMN = "Total ZSO"


def zso_matrix(flags: list[ZSOFlag], name_to_tse: dict[str, str]) -> pd.DataFrame:
    """
    One row per dealer with at least one stock-out, one column per model that
    is out of stock somewhere. Dealers are grouped by TSE.
    """
    out_of_stock = [flag for flag in flags if flag.zso]
    models = sorted({flag.model for flag in out_of_stock})

    rows: dict[str, dict[str, Any]] = {}
    for flag in out_of_stock:
        row = rows.setdefault(flag.dealer, {"TSE": name_to_tse.get(flag.dealer, ""), "Dealer Name": flag.dealer})
        row[flag.model] = ZSO_MARK

    df = pd.DataFrame(list(rows.values()), columns=["TSE", "Dealer Name", *models])
    if models:
        df[models] = df[models].fillna("")
    df[TOTAL_COLUMN] = (df[models] == ZSO_MARK).sum(axis=1).astype(int)
    return df.sort_values("TSE", kind="stable").reset_index(drop=True)


class ZSOPipeline(ReportPipeline):
    """
    Zero stock-outs: models a dealer sold in the last two months
    but no longer holds any units of.
    """

    def __init__(self, as_of: Optional[date] = None, models: Optional[list[str]] = None):
        super().__init__("zso", settings.ZSO_REPORT_PREFIX, as_of=as_of)
        self.models = models if models is not None else settings.ZSO_MODELS_OF_INTEREST

    def extract(self) -> dict[str, Any]:
        logger.info("--- Loading inventory and L2M sell-out ---")
        metadata = load_sheet(settings.METADATA_FILE)
        return {
            "mappings": build_entity_mappings(metadata, settings.ZSO_DEALER_NAME_HEADER),
            "inventory": parsers.parse_inventory(load_sheet(settings.INVENTORY_FILE)),
            "sales": parsers.parse_spu_sales(load_sheet(settings.L2M_SO_FILE)),
        }

    def transform(self, sources: dict[str, Any]) -> list[ReportFile]:
        logger.info(f"--- Identifying ZSO for {', '.join(self.models)} ---")
        inventory_counts = count_models(
            sources["inventory"], dealer_field="Dealer Name", models_of_interest=self.models
        )
        sales_counts = count_models(
            sources["sales"], dealer_field="Dealer Name", models_of_interest=self.models
        )
        flags = flag_zero_stock_outs(sales_counts, inventory_counts)

        df = zso_matrix(flags, sources["mappings"].name_to_tse)
        logger.info(f"  > {len(df)} dealers with at least one ZSO")

        model_columns = [c for c in df.columns if c not in ("TSE", "Dealer Name", TOTAL_COLUMN)]
        table = ReportTable(
            df=df,
            highlights={model: (lambda cell: cell == ZSO_MARK) for model in model_columns},
        )
        return [
            ReportFile(
                filename="zso_report.xlsx",
                sheets=[ReportSheet("ZSO Report", [table])],
            )
        ]
