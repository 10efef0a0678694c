import logging
from datetime import date
from typing import Any, Optional

from .. import parsers, settings, utils
from ..aggregators.inventory import compute_inventory_cost, join_credit
from ..data_handler import ReportFile, ReportSheet, ReportTable, records_to_frame
from ..mappings import build_entity_mappings
from ..pipeline import ReportPipeline
from ..utils import load_sheet

logger = logging.getLogger(__name__)

COGS_COLUMNS = [
    "Dealer Code",
    "Dealer Name",
    "TSE",
    "Total Inventory Cost(₹)",
    "Total Credit Due(₹)",
    "Inventory Shortfall (₹)",
]


class CogsPipeline(ReportPipeline):
    """
    Inventory value per dealer against the credit it owes.
    Credit is read back from the same day's credit report workbooks.
    """

    def __init__(self, as_of: Optional[date] = None):
        super().__init__("cogs", settings.COGS_REPORT_PREFIX, as_of=as_of)

    def extract(self) -> dict[str, Any]:
        logger.info("--- Loading inventory inputs ---")
        metadata = load_sheet(settings.METADATA_FILE)
        inventory_df = load_sheet(settings.INVENTORY_FILE)
        prices_df = load_sheet(settings.PRODUCT_PRICE_FILE)

        credit_dir = utils.generate_output_dir(settings.CREDIT_REPORT_PREFIX, self.as_of)
        credit_files = sorted(credit_dir.glob("*.xlsx"))
        if not credit_files:
            logger.warning(f"⚠️ No credit reports in {credit_dir}. Credit due will be 0 for every dealer.")
        logger.info(f"  > Reading {len(credit_files)} credit reports from {credit_dir}")

        return {
            "mappings": build_entity_mappings(metadata, settings.CREDIT_DEALER_NAME_HEADER),
            "inventory": parsers.parse_inventory(inventory_df),
            "prices": parsers.parse_product_prices(prices_df),
            "credit": parsers.parse_credit_totals([load_sheet(path) for path in credit_files]),
        }

    def transform(self, sources: dict[str, Any]) -> list[ReportFile]:
        mappings = sources["mappings"]

        logger.info("--- Valuing dealer inventory ---")
        inventory = compute_inventory_cost(sources["inventory"], sources["prices"], mappings.code_to_tse)
        records = join_credit(inventory.values(), sources["credit"])
        records.sort(key=lambda r: (r.tse, r.inventory_shortfall))

        shortfalls = sum(1 for r in records if r.inventory_shortfall < 0)
        logger.info(f"  > {len(records)} dealers, {shortfalls} with credit above stock value")

        table = ReportTable(
            df=records_to_frame(records, COGS_COLUMNS).round(2),
            highlights={"Inventory Shortfall (₹)": lambda shortfall: shortfall < 0},
        )
        return [
            ReportFile(
                filename="inventory_cost_report.xlsx",
                sheets=[ReportSheet("Inventory Cost Report", [table])],
            )
        ]
