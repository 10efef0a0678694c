import logging
from abc import ABC, abstractmethod
from datetime import date
from pathlib import Path
from typing import Any, Optional

from . import data_handler, utils
from .data_handler import ReportFile

logger = logging.getLogger(__name__)


class ReportPipeline(ABC):
    """
    Abstract base class for report pipelines (credit, growth, zso, ...).
    Follows an Extract -> Transform -> Load (ETL) pattern: every input is read
    before anything is computed, and nothing is written unless every step succeeded.
    """

    def __init__(self, report_type: str, output_prefix: str, as_of: Optional[date] = None, monthly: bool = False):
        self.report_type = report_type
        self.output_prefix = output_prefix
        self.as_of = as_of or date.today()
        # Monthly reports (the price list) get a YYYY-Mon folder instead of YYYY-MM-DD
        self.monthly = monthly

    @property
    def output_dir(self) -> Path:
        return utils.generate_output_dir(self.output_prefix, self.as_of, monthly=self.monthly)

    def run(self) -> list[Path]:
        """
        Orchestrates the pipeline execution.
        Errors propagate to the caller; the run is all or nothing.
        """
        logger.info(f"🚀 STEP: {self.report_type.upper()} REPORT ({self.as_of.isoformat()})")
        logger.info("-" * 30)

        # --- 1. EXTRACT ---
        sources = self.extract()

        # --- 2. TRANSFORM ---
        reports = self.transform(sources)

        # --- 3. LOAD ---
        paths = self.load(reports)

        logger.info(f"✅ {self.report_type.capitalize()} Pipeline Finished.\n")
        logger.info("=" * 60)
        return paths

    @abstractmethod
    def extract(self) -> dict[str, Any]:
        """
        Loads and parses every input the report needs.
        Returns the parsed sources keyed by name.
        """
        pass

    @abstractmethod
    def transform(self, sources: dict[str, Any]) -> list[ReportFile]:
        """
        Pure computation: aggregates the parsed sources and lays out the workbooks.
        Never touches the filesystem.
        """
        pass

    def load(self, reports: list[ReportFile]) -> list[Path]:
        """Saves every workbook into the report's dated output folder."""
        if not reports:
            logger.warning(f"⚠️ {self.report_type} produced no workbooks.")
            return []

        output_dir = self.output_dir
        return [data_handler.save_report(report, output_dir) for report in reports]
