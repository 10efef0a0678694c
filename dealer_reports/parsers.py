"""
Turns loaded sheets (DataFrames of strings) into typed records.

Header problems are fatal (MissingColumnError). A bad value on a single
row only drops that row, with a warning naming it.
"""

import logging
from datetime import date

import pandas as pd
from pydantic import ValidationError

from .schemas import Bill, SalesLine, SellThroughPeriod
from .utils import (
    MissingColumnError,
    parse_amount,
    parse_count,
    require_columns,
    resolve_column,
)

logger = logging.getLogger(__name__)

# Tally receivables export, by position: date, ref no, party, amount, due on, age.
BILL_COLUMNS = ["date", "ref_no", "retailer_name", "pending_amount", "due_date", "age_of_bill"]

INVENTORY_COLUMNS = [
    "Material Code",
    "Dealer Code",
    "Dealer Name",
    "SPU Name",
    "Color",
    "SKU Spec",
    "Product Type",
]
SPU_SALES_COLUMNS = ["SPU Name", "Dealer Code", "Dealer Name", "Product Type"]

# "2024-09-01 10:00:00", optionally with fractional seconds ("... 11:30:15.5")
ACTIVATION_TIME_FORMAT = "ISO8601"

CREDIT_TOTALS_CODE = "Retailer Code"
CREDIT_TOTALS_AMOUNT = "Total Credit(₹)"
TOTAL_ROW_LABEL = "Total"

SALES_CODE = "Retailer Code"
SALES_NAME = "Party Name"
SALES_AMOUNT = "Amount "  # the export pads this header with a trailing space
SALES_ITEM = "Item Name"


def parse_bills(df: pd.DataFrame) -> list[Bill]:
    """
    Parses the receivables export (already past its preamble, read without a header).
    The last row is the grand total and is dropped.
    """
    if df.shape[1] < len(BILL_COLUMNS):
        raise MissingColumnError("Overdue by days", source="bills")

    rows = df.iloc[:-1, : len(BILL_COLUMNS)].copy()
    rows.columns = BILL_COLUMNS

    bills = []
    for row in rows.to_dict("records"):
        if row["retailer_name"] == "":
            continue
        try:
            bills.append(
                Bill(
                    retailer_name=row["retailer_name"],
                    pending_amount=parse_amount(row["pending_amount"]),
                    age_of_bill=parse_count(row["age_of_bill"]),
                    date=row["date"],
                    ref_no=row["ref_no"],
                    due_date=row["due_date"],
                )
            )
        except (ValueError, ValidationError):
            logger.warning(
                f"⚠️ Skipping bill {row['ref_no'] or '?'} for {row['retailer_name']}: "
                f"amount='{row['pending_amount']}', age='{row['age_of_bill']}'"
            )

    logger.info(f"  > Parsed {len(bills)} bills")
    return bills


def parse_product_prices(df: pd.DataFrame) -> dict[str, float]:
    """Material code -> net landing cost. A repeated code keeps its last price."""
    require_columns(df, ["Material Code", "NLC"], source="product price list")

    prices: dict[str, float] = {}
    for material_code, nlc in zip(df["Material Code"], df["NLC"]):
        if material_code == "":
            continue
        try:
            prices[material_code] = parse_amount(nlc)
        except ValueError:
            logger.warning(f"⚠️ Invalid NLC '{nlc}' for material {material_code}, skipping...")

    logger.info(f"  > Loaded prices for {len(prices)} materials")
    return prices


def parse_inventory(df: pd.DataFrame) -> pd.DataFrame:
    """Checks the dealer inventory export. One row is one physical unit."""
    require_columns(df, INVENTORY_COLUMNS, source="inventory")
    return df[INVENTORY_COLUMNS].apply(lambda col: col.str.strip())


def parse_spu_sales(df: pd.DataFrame) -> pd.DataFrame:
    """Checks a dealer x SPU sell-out export (one row per unit sold)."""
    require_columns(df, SPU_SALES_COLUMNS, source="dealer SPU sales")
    return df[SPU_SALES_COLUMNS].apply(lambda col: col.str.strip())


def parse_sell_counts(df: pd.DataFrame, as_of: date) -> dict[str, SellThroughPeriod]:
    """
    Counts units per dealer code in a sell-out or sell-through export.

    Rows activated later in the month than `as_of` are excluded, so a full
    last month lines up against a partial current month.
    """
    code_col = resolve_column(df, "Dealer Code", "toDealerCode", source="sales")
    name_col = resolve_column(df, "Dealer Name", "toDealerName", source="sales")
    time_col = resolve_column(df, "Activate Time", "activateTime", source="sales")

    sales = df.loc[df[code_col] != "", [code_col, name_col, time_col]].copy()
    sales.columns = ["dealer_code", "dealer_name", "activated_at"]

    sales["activated_at"] = pd.to_datetime(
        sales["activated_at"], format=ACTIVATION_TIME_FORMAT, errors="coerce"
    )
    unparsed = sales["activated_at"].isna()
    if unparsed.any():
        logger.warning(f"⚠️ Skipping {int(unparsed.sum())} rows with unreadable activation time")
        sales = sales[~unparsed]

    sales = sales[sales["activated_at"].dt.day <= as_of.day]

    grouped = sales.groupby("dealer_code", sort=False).agg(
        dealer_name=("dealer_name", "first"), units=("activated_at", "size")
    )
    return {
        code: SellThroughPeriod(dealer_code=code, dealer_name=row.dealer_name, units=int(row.units))
        for code, row in grouped.iterrows()
    }


def parse_credit_totals(frames: list[pd.DataFrame]) -> dict[str, float]:
    """
    Sums 'Total Credit(₹)' per retailer code across the day's credit workbooks.
    The trailing Total row and blank codes are ignored.
    """
    totals: dict[str, float] = {}
    for df in frames:
        require_columns(df, [CREDIT_TOTALS_CODE, CREDIT_TOTALS_AMOUNT], source="credit report")
        for code, amount in zip(df[CREDIT_TOTALS_CODE], df[CREDIT_TOTALS_AMOUNT]):
            if code in ("", TOTAL_ROW_LABEL):
                continue
            try:
                totals[code] = totals.get(code, 0.0) + parse_amount(amount)
            except ValueError:
                logger.warning(f"⚠️ Invalid total credit '{amount}' for retailer {code}, skipping...")
    return totals


def parse_sales_lines(df: pd.DataFrame, code_to_tse: dict[str, str]) -> list[SalesLine]:
    """Parses the monthly Tally sales register. Repeated header rows are dropped."""
    require_columns(df, [SALES_CODE, SALES_NAME, SALES_AMOUNT, SALES_ITEM], source="sales register")

    lines = []
    for row in df[[SALES_CODE, SALES_NAME, SALES_AMOUNT, SALES_ITEM]].itertuples(index=False):
        code, name, amount, item = row
        if code == "" or item == SALES_ITEM:
            continue
        try:
            value = parse_amount(amount)
        except ValueError:
            logger.warning(f"⚠️ Invalid amount '{amount}' for retailer {code}, skipping...")
            continue
        lines.append(
            SalesLine(
                dealer_code=code,
                dealer_name=name,
                item_name=item,
                value=value,
                tse=code_to_tse.get(code, ""),
            )
        )
    return lines
