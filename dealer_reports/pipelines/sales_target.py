import logging
from datetime import date
from typing import Any, Optional

from .. import parsers, settings
from ..aggregators.sales_target import (
    CATEGORIES,
    aggregate_dealer_sales,
    compute_tse_targets,
    split_by_category,
)
from ..data_handler import (
    GREEN_FILL,
    PEACH_FILL,
    ReportFile,
    ReportSheet,
    ReportTable,
    records_to_frame,
)
from ..mappings import build_entity_mappings
from ..pipeline import ReportPipeline
from ..schemas import DealerSales
from ..utils import load_sheet

logger = logging.getLogger(__name__)

TARGET_COLUMNS = ["TSE", "Target: Overall", "Achieved", "Balance", "Balance %"]
DEALER_SALES_COLUMNS = ["Dealer Code", "Dealer Name", "Sell Out", "Total Sales Value(₹)", "TSE"]


def dealer_sales_table(dealer_sales: list[DealerSales]) -> ReportTable:
    """
    Dealers grouped by TSE (descending), biggest sellers first within a TSE,
    followed by a Total row of units and value.
    """
    ordered = sorted(dealer_sales, key=lambda s: s.value, reverse=True)
    ordered.sort(key=lambda s: s.tse, reverse=True)

    total = DealerSales(
        dealer_code="Total",
        units=sum(s.units for s in ordered),
        value=sum(s.value for s in ordered),
    )
    df = records_to_frame([*ordered, total], DEALER_SALES_COLUMNS)
    return ReportTable(df=df.round(2), title="Sales")


class SalesTargetPipeline(ReportPipeline):
    """Monthly Tally sales per category: TSE attainment against target, then per-dealer sales."""

    def __init__(self, as_of: Optional[date] = None, targets: Optional[dict[str, dict[str, int]]] = None):
        super().__init__("salestarget", settings.SALES_REPORT_PREFIX, as_of=as_of)
        self.targets = targets if targets is not None else settings.TSE_TARGETS

    def extract(self) -> dict[str, Any]:
        logger.info("--- Loading monthly sales register ---")
        mappings = build_entity_mappings(load_sheet(settings.METADATA_FILE))
        sales_df = load_sheet(settings.MONTHLY_SALES_FILE, header=settings.SALES_HEADER_ROW)
        return {"lines": parsers.parse_sales_lines(sales_df, mappings.code_to_tse)}

    def transform(self, sources: dict[str, Any]) -> list[ReportFile]:
        by_category = split_by_category(sources["lines"])

        sheets = []
        for category in CATEGORIES:
            dealer_sales = aggregate_dealer_sales(by_category[category])
            target_rows = compute_tse_targets(dealer_sales, self.targets.get(category, {}))
            logger.info(f"  > {category}: {len(dealer_sales)} dealers, {len(target_rows)} TSEs")

            sheets.append(
                ReportSheet(
                    name=category,
                    tables=[
                        ReportTable(
                            df=records_to_frame(target_rows, TARGET_COLUMNS).round(2),
                            title=f"{category}: TSE Targets",
                            fills={
                                "Achieved": lambda _: GREEN_FILL,
                                "Balance": lambda _: PEACH_FILL,
                            },
                        ),
                        dealer_sales_table(dealer_sales),
                    ],
                )
            )

        return [ReportFile(filename="sales_report.xlsx", sheets=sheets)]
