import logging
from datetime import date
from typing import Any, Optional

import pandas as pd

from .. import parsers, settings
from ..aggregators.credit import (
    aggregate_credit_by_retailer,
    attach_inventory_cost,
    split_by_tse,
)
from ..aggregators.inventory import compute_inventory_cost
from ..data_handler import ReportFile, ReportSheet, ReportTable, records_to_frame
from ..mappings import build_entity_mappings
from ..pipeline import ReportPipeline
from ..schemas import RetailerCreditSummary
from ..utils import load_sheet

logger = logging.getLogger(__name__)

SHEET_NAME = "Credit Report"
MISSING_TSE_FILENAME = "TSE_MISSING_credit_report.xlsx"

CREDIT_COLUMNS = [
    "Retailer Code",
    "Retailer Name",
    "Credit: 0-7 Days(₹)",
    "Credit: 8-14 Days(₹)",
    "Credit: 15-20 Days(₹)",
    "Credit: 21-30 Days(₹)",
    "Credit: 31+ Days(₹)",
    "Total Credit(₹)",
    "Total Inventory Cost(₹)",
    "Inventory Shortfall (₹)",
    "TSE",
]
AMOUNT_COLUMNS = CREDIT_COLUMNS[2:-1]


def credit_table(summaries: list[RetailerCreditSummary]) -> ReportTable:
    """Retailer rows followed by a Total row summing every amount column."""
    df = records_to_frame(summaries, CREDIT_COLUMNS)
    totals = {column: float(df[column].sum()) for column in AMOUNT_COLUMNS}
    total_row = pd.DataFrame([{"Retailer Code": "Total", "Retailer Name": "", "TSE": "", **totals}])
    df = pd.concat([df, total_row[CREDIT_COLUMNS]], ignore_index=True)

    return ReportTable(
        df=df.round(2),
        highlights={
            "Credit: 31+ Days(₹)": lambda amount: amount > 0,
            "Inventory Shortfall (₹)": lambda shortfall: shortfall < 0,
        },
    )


class CreditPipeline(ReportPipeline):
    """Credit aging per retailer, one workbook per TSE."""

    def __init__(self, as_of: Optional[date] = None):
        super().__init__("credit", settings.CREDIT_REPORT_PREFIX, as_of=as_of)

    def extract(self) -> dict[str, Any]:
        logger.info("--- Loading credit inputs ---")
        metadata = load_sheet(settings.METADATA_FILE)
        bills_df = load_sheet(settings.BILLS_FILE, header=None, skiprows=settings.BILLS_SKIP_ROWS)
        inventory_df = load_sheet(settings.INVENTORY_FILE)
        prices_df = load_sheet(settings.PRODUCT_PRICE_FILE)

        return {
            "mappings": build_entity_mappings(metadata, settings.CREDIT_DEALER_NAME_HEADER),
            "bills": parsers.parse_bills(bills_df),
            "inventory": parsers.parse_inventory(inventory_df),
            "prices": parsers.parse_product_prices(prices_df),
        }

    def transform(self, sources: dict[str, Any]) -> list[ReportFile]:
        mappings = sources["mappings"]

        logger.info("--- Aggregating credit by retailer ---")
        summaries = aggregate_credit_by_retailer(
            sources["bills"], mappings.name_to_tse, mappings.name_to_code
        )

        logger.info("--- Valuing retailer inventory ---")
        inventory = compute_inventory_cost(sources["inventory"], sources["prices"], mappings.code_to_tse)
        cost_by_code = {code: record.total_inventory_cost for code, record in inventory.items()}
        summaries = attach_inventory_cost(summaries, cost_by_code)

        by_tse, unassigned = split_by_tse(summaries)

        reports = []
        for tse in sorted(by_tse):
            logger.info(f"  > {tse}: {len(by_tse[tse])} retailers")
            reports.append(
                ReportFile(
                    filename=f"{tse}_credit_report.xlsx",
                    sheets=[ReportSheet(SHEET_NAME, [credit_table(by_tse[tse])])],
                )
            )

        if unassigned:
            logger.warning(f"⚠️ {len(unassigned)} retailers have no TSE mapped")
            reports.append(
                ReportFile(
                    filename=MISSING_TSE_FILENAME,
                    sheets=[ReportSheet(SHEET_NAME, [credit_table(unassigned)])],
                )
            )
        return reports
