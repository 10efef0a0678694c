import logging
import math
from datetime import date, datetime
from pathlib import Path

import pandas as pd

from . import settings

logger = logging.getLogger(__name__)


class MissingColumnError(KeyError):
    """Raised when a sheet lacks a header the report cannot run without."""

    def __init__(self, column: str, source: str = "sheet"):
        self.column = column
        self.source = source
        super().__init__(f"Column '{column}' not found in {source}")

    def __str__(self) -> str:
        return self.args[0]


def get_date_suffix_for_filename(as_of: date | None = None) -> str:
    """Returns the date as a YYYY-MM-DD string for folder names."""
    return (as_of or datetime.now()).strftime("%Y-%m-%d")


def get_month_suffix_for_filename(as_of: date | None = None) -> str:
    """Returns the date as a YYYY-Mon string, e.g. '2024-Sep'."""
    return (as_of or datetime.now()).strftime("%Y-%b")


def generate_output_dir(prefix: str, as_of: date | None = None, monthly: bool = False) -> Path:
    """Builds the date-stamped folder a report writes into, e.g. output/zso_report_2024-09-02."""
    suffix = get_month_suffix_for_filename(as_of) if monthly else get_date_suffix_for_filename(as_of)
    return settings.OUTPUT_DIR / f"{prefix}_{suffix}"


def load_csv(file_path: Path, header: int | None = 0, skiprows: int = 0) -> pd.DataFrame:
    """
    CSV loader with an encoding fallback.
    1. UTF-8 with BOM support ('utf-8-sig').
    2. Latin-1, which reads any byte but may misinterpret characters.
    Every cell comes back as a string; blanks are "".
    """
    options = dict(header=header, skiprows=skiprows, dtype=str, keep_default_na=False)
    try:
        return pd.read_csv(file_path, encoding="utf-8-sig", **options)
    except UnicodeDecodeError:
        logger.info(f"UTF-8 decoding failed for {file_path.name}. Retrying with 'latin-1'.")
        return pd.read_csv(file_path, encoding="latin-1", **options)


def load_sheet(file_path: Path, header: int | None = 0, skiprows: int = 0) -> pd.DataFrame:
    """
    Reads the first sheet of a workbook (or a CSV export) as strings.
    A missing file is fatal for the report, so FileNotFoundError propagates.
    """
    file_path = Path(file_path)
    if not file_path.exists():
        logger.error(f"❌ Input not found: {file_path}")
        raise FileNotFoundError(file_path)

    if file_path.suffix.lower() == ".csv":
        df = load_csv(file_path, header=header, skiprows=skiprows)
    else:
        df = pd.read_excel(
            file_path,
            sheet_name=0,
            header=header,
            skiprows=skiprows,
            dtype=str,
            keep_default_na=False,
        )
    return df.fillna("")


def require_columns(df: pd.DataFrame, columns: list[str], source: str = "sheet") -> None:
    """Fails fast when any of the named headers is absent."""
    for column in columns:
        if column not in df.columns:
            raise MissingColumnError(column, source)


def resolve_column(df: pd.DataFrame, *candidates: str, source: str = "sheet") -> str:
    """Returns the first candidate header present in the sheet."""
    for candidate in candidates:
        if candidate in df.columns:
            return candidate
    raise MissingColumnError(" | ".join(candidates), source)


def parse_amount(value) -> float:
    """Parses a currency cell, tolerating comma thousands separators."""
    text = str(value).replace(",", "").strip()
    if not text:
        raise ValueError("empty amount")
    number = float(text)
    if not math.isfinite(number):
        raise ValueError(f"not a finite amount: {value}")
    return number


def parse_count(value) -> int:
    """Parses an integer cell. Excel sometimes renders integers as '12.0'."""
    number = parse_amount(value)
    if not number.is_integer():
        raise ValueError(f"not an integer: {value}")
    return int(number)


def normalize_model_name(spu_name: str, brand_prefix: str = settings.BRAND_PREFIX) -> str:
    """Strips the brand from an SPU name: 'realme C63 5G' -> 'C63 5G'."""
    if brand_prefix:
        spu_name = spu_name.replace(brand_prefix, "")
    return spu_name.strip()


def growth_pct(current: float, previous: float) -> float:
    """
    Period-over-period growth in percent.
    A dealer going from nothing to something counts as +100%, and 0 -> 0 as flat.
    """
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return (current - previous) / previous * 100


def fold_key(text: str) -> str:
    """Case- and whitespace-insensitive form of a name, for joining across exports."""
    return " ".join(str(text).split()).casefold()
