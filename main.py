import argparse
import logging
import sys
from datetime import date, datetime
from typing import Optional

from pydantic import ValidationError

from dealer_reports.logger import setup_logger
from dealer_reports.pipeline import ReportPipeline
from dealer_reports.pipelines.cogs import CogsPipeline
from dealer_reports.pipelines.credit import CreditPipeline
from dealer_reports.pipelines.growth import GrowthPipeline
from dealer_reports.pipelines.price_list import PriceListPipeline
from dealer_reports.pipelines.ranorms import RANormsPipeline
from dealer_reports.pipelines.sales_target import SalesTargetPipeline
from dealer_reports.pipelines.zso import ZSOPipeline
from dealer_reports.utils import MissingColumnError

logger = logging.getLogger(__name__)

# --- Report Registry ---
# Report id -> pipeline class. To add a report, add an entry here.
REPORT_REGISTRY: dict[str, type[ReportPipeline]] = {
    "cogs": CogsPipeline,
    "credit": CreditPipeline,
    "growth": GrowthPipeline,
    "pricelist": PriceListPipeline,
    "salestarget": SalesTargetPipeline,
    "zso": ZSOPipeline,
    "ranorms": RANormsPipeline,
}


class UnknownReportError(ValueError):
    pass


def create_pipeline(report_id: str, as_of: Optional[date] = None) -> ReportPipeline:
    try:
        pipeline_class = REPORT_REGISTRY[report_id]
    except KeyError:
        raise UnknownReportError(
            f"Unknown report '{report_id}'. Available: {', '.join(REPORT_REGISTRY)}"
        ) from None
    return pipeline_class(as_of=as_of)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate dealer reports from spreadsheet exports.")
    parser.add_argument("report", help=f"Report to generate: {', '.join(REPORT_REGISTRY)}")
    parser.add_argument(
        "--as-of",
        type=lambda value: datetime.strptime(value, "%Y-%m-%d").date(),
        default=None,
        help="Report date (YYYY-MM-DD). Defaults to today.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    """Runs one report. Returns the process exit code."""
    setup_logger()
    args = parse_args(argv)

    try:
        pipeline = create_pipeline(args.report, as_of=args.as_of)
        paths = pipeline.run()
    except UnknownReportError as e:
        logger.error(f"❌ {e}")
        return 1
    except FileNotFoundError as e:
        logger.error(f"❌ Missing input file: {e}")
        return 1
    except MissingColumnError as e:
        logger.error(f"❌ {e}")
        return 1
    except ValidationError as e:
        logger.error("❌ Data validation failed!")
        logger.error(e)
        return 1

    logger.info(f"Wrote {len(paths)} workbook(s).")
    return 0


if __name__ == "__main__":
    sys.exit(main())
