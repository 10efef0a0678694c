import logging
from datetime import date
from typing import Any, Optional

import pandas as pd

from .. import parsers, settings
from ..aggregators.inventory import count_models
from ..aggregators.norms import compute_ra_norms
from ..data_handler import ReportFile, ReportSheet, ReportTable
from ..mappings import EntityMappings, build_entity_mappings
from ..pipeline import ReportPipeline
from ..schemas import RefillRequirement
from ..utils import load_sheet

logger = logging.getLogger(__name__)

TOTAL_COLUMN = "Total Refill"


def refill_matrix(
    requirements: list[RefillRequirement], models: list[str], mappings: EntityMappings
) -> pd.DataFrame:
    """One row per RA dealer (grouped by TSE), one column per model, plus the row total."""
    rows: dict[str, dict[str, Any]] = {}
    for req in requirements:
        row = rows.setdefault(
            req.dealer_code,
            {
                "TSE": mappings.code_to_tse.get(req.dealer_code, ""),
                "Dealer Name": mappings.code_to_name.get(req.dealer_code, ""),
            },
        )
        row[req.model] = req.required_refill

    df = pd.DataFrame(list(rows.values()), columns=["TSE", "Dealer Name", *models])
    if models:
        df[models] = df[models].fillna(0).astype(int)
    df[TOTAL_COLUMN] = df[models].sum(axis=1).astype(int)
    return df.sort_values("TSE", kind="stable").reset_index(drop=True)


class RANormsPipeline(ReportPipeline):
    """Units each Retailer Agreement dealer needs to reach its stocking norm."""

    def __init__(
        self,
        as_of: Optional[date] = None,
        models: Optional[list[str]] = None,
        multiplier: int = settings.RA_REFILL_MULTIPLIER,
    ):
        super().__init__("ranorms", settings.RA_NORMS_REPORT_PREFIX, as_of=as_of)
        self.models = sorted(models if models is not None else settings.RA_MODELS_OF_INTEREST)
        self.multiplier = multiplier

    def extract(self) -> dict[str, Any]:
        logger.info("--- Loading RA dealers and inventory ---")
        metadata = load_sheet(settings.METADATA_FILE)
        return {
            "mappings": build_entity_mappings(metadata, include_ra_quota=True),
            "inventory": parsers.parse_inventory(load_sheet(settings.INVENTORY_FILE)),
        }

    def transform(self, sources: dict[str, Any]) -> list[ReportFile]:
        mappings = sources["mappings"]

        logger.info(f"--- Computing RA norms (x{self.multiplier}) for {', '.join(self.models)} ---")
        counts = count_models(
            sources["inventory"],
            dealer_field="Dealer Code",
            models_of_interest=self.models,
            dealers=mappings.ra_quota.keys(),
        )
        requirements = compute_ra_norms(mappings.ra_quota, counts, self.models, self.multiplier)
        logger.info(f"  > {len(mappings.ra_quota)} RA dealers")

        table = ReportTable(
            df=refill_matrix(requirements, self.models, mappings),
            highlights={model: (lambda units: units > 0) for model in self.models},
        )
        return [
            ReportFile(
                filename="ra_norms_report.xlsx",
                sheets=[ReportSheet("RA Norms", [table])],
            )
        ]
