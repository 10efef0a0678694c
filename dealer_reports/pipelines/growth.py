import logging
from datetime import date
from typing import Any, Optional

from .. import parsers, settings
from ..aggregators.growth import compute_growth
from ..data_handler import (
    GREEN_FILL,
    RED_FILL,
    YELLOW_FILL,
    ReportFile,
    ReportSheet,
    ReportTable,
    records_to_frame,
)
from ..mappings import build_entity_mappings
from ..pipeline import ReportPipeline
from ..utils import load_sheet

logger = logging.getLogger(__name__)

GROWTH_COLUMNS = [
    "TSE",
    "Dealer Code",
    "Dealer Name",
    "MTD SO",
    "LMTD SO",
    "Growth SO %",
    "MTD ST",
    "LMTD ST",
    "Growth ST %",
]

# Window name -> input file. MTD sell-out decides which dealers appear.
SELL_WINDOWS = {
    "mtd_so": settings.MTD_SO_FILE,
    "lmtd_so": settings.LMTD_SO_FILE,
    "mtd_st": settings.MTD_ST_FILE,
    "lmtd_st": settings.LMTD_ST_FILE,
}


def growth_fill(pct: float, red_threshold: float = settings.GROWTH_RED_THRESHOLD):
    """Red below the threshold, yellow for any other decline, green for flat or growing."""
    if pct < red_threshold:
        return RED_FILL
    if pct < 0:
        return YELLOW_FILL
    return GREEN_FILL


class GrowthPipeline(ReportPipeline):
    """Month-to-date vs last-month-to-date sell-out and sell-through, per dealer."""

    def __init__(self, as_of: Optional[date] = None, red_threshold: float = settings.GROWTH_RED_THRESHOLD):
        super().__init__("growth", settings.GROWTH_REPORT_PREFIX, as_of=as_of)
        self.red_threshold = red_threshold

    def extract(self) -> dict[str, Any]:
        logger.info("--- Loading sales windows ---")
        sources: dict[str, Any] = {
            "mappings": build_entity_mappings(load_sheet(settings.METADATA_FILE)),
        }
        for window, path in SELL_WINDOWS.items():
            logger.info(f"  > {window.upper()} from {path.name}")
            sources[window] = parsers.parse_sell_counts(load_sheet(path), self.as_of)
        return sources

    def transform(self, sources: dict[str, Any]) -> list[ReportFile]:
        logger.info("--- Computing growth ---")
        records = compute_growth(
            sources["mtd_so"],
            sources["lmtd_so"],
            sources["mtd_st"],
            sources["lmtd_st"],
            descending=True,
            code_to_tse=sources["mappings"].code_to_tse,
        )
        # Stable: growth order is kept within each TSE
        records.sort(key=lambda r: r.tse)
        logger.info(f"  > {len(records)} dealers with MTD sell-out")

        def pick_fill(pct: float):
            return growth_fill(pct, self.red_threshold)

        table = ReportTable(
            df=records_to_frame(records, GROWTH_COLUMNS).round(2),
            fills={"Growth SO %": pick_fill, "Growth ST %": pick_fill},
        )
        return [
            ReportFile(
                filename="sales_growth_report.xlsx",
                sheets=[ReportSheet("Growth Report", [table])],
            )
        ]
