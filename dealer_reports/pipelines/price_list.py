import logging
from datetime import date
from typing import Any, Optional

from .. import parsers, settings
from ..aggregators.inventory import material_code_map
from ..aggregators.price_list import flatten_price_list
from ..data_handler import ReportFile, ReportSheet, ReportTable, records_to_frame
from ..pipeline import ReportPipeline
from ..utils import load_sheet

logger = logging.getLogger(__name__)

PRICE_LIST_COLUMNS = ["Type", "Model", "Color", "Variant", "NLC", "MOP", "MRP", "Material Code"]


class PriceListPipeline(ReportPipeline):
    """The distributor's monthly price list, one row per SKU with its material code."""

    def __init__(self, as_of: Optional[date] = None):
        super().__init__("pricelist", settings.PRICE_LIST_PREFIX, as_of=as_of, monthly=True)

    def extract(self) -> dict[str, Any]:
        logger.info(f"--- Loading price list for {self.as_of.strftime('%B %Y')} ---")
        return {
            "price_list": load_sheet(
                settings.DISTRIBUTOR_PRICE_LIST_FILE, header=settings.PRICE_LIST_HEADER_ROW
            ),
            "inventory": parsers.parse_inventory(load_sheet(settings.INVENTORY_FILE)),
        }

    def transform(self, sources: dict[str, Any]) -> list[ReportFile]:
        material_codes = material_code_map(sources["inventory"])
        logger.info(f"  > Material code map size: {len(material_codes)}")

        rows = flatten_price_list(sources["price_list"], material_codes)
        unmatched = sum(1 for row in rows if not row.material_code)
        if unmatched:
            logger.warning(f"⚠️ {unmatched} SKUs have no material code in the inventory export")

        table = ReportTable(
            df=records_to_frame(rows, PRICE_LIST_COLUMNS),
            highlights={"Material Code": lambda code: code == ""},
        )
        return [ReportFile(filename="price_list.xlsx", sheets=[ReportSheet("Price List", [table])])]
