import logging
from typing import Optional

import pandas as pd

from ..schemas import DealerSales, SalesLine, TSETargetRow

logger = logging.getLogger(__name__)

SMART_PHONES = "SMART PHONES"
ACCESSORIES = "ACCESSORIES"
OTHERS = "OTHERS"
CATEGORIES = [SMART_PHONES, ACCESSORIES, OTHERS]


def categorize_item(item_name: str) -> Optional[str]:
    """Sales category for a Tally item name, or None for a repeated header row."""
    if "SMART" in item_name:
        return SMART_PHONES
    if "ACCESSORIES" in item_name or "Buds" in item_name:
        return ACCESSORIES
    if "Item Name" in item_name:
        return None
    return OTHERS


def split_by_category(lines: list[SalesLine]) -> dict[str, list[SalesLine]]:
    by_category: dict[str, list[SalesLine]] = {category: [] for category in CATEGORIES}
    for line in lines:
        category = categorize_item(line.item_name)
        if category is not None:
            by_category[category].append(line)
    return by_category


def aggregate_dealer_sales(lines: list[SalesLine]) -> list[DealerSales]:
    """Units (one per invoice line) and summed value per dealer code."""
    if not lines:
        return []

    df = pd.DataFrame([line.model_dump() for line in lines])
    grouped = df.groupby("dealer_code", sort=False).agg(
        dealer_name=("dealer_name", "first"),
        tse=("tse", "first"),
        units=("dealer_code", "size"),
        value=("value", "sum"),
    )
    return [
        DealerSales(
            dealer_code=code,
            dealer_name=row.dealer_name,
            tse=row.tse,
            units=int(row.units),
            value=float(row.value),
        )
        for code, row in grouped.iterrows()
    ]


def compute_tse_targets(dealer_sales: list[DealerSales], targets: dict[str, int]) -> list[TSETargetRow]:
    """
    Achieved units against target for every TSE with sales.
    Dealers with no TSE are left out; a TSE without a configured target gets 0.
    """
    achieved: dict[str, int] = {}
    for sales in dealer_sales:
        if not sales.tse:
            continue
        achieved[sales.tse] = achieved.get(sales.tse, 0) + sales.units

    missing_targets = [tse for tse in achieved if tse not in targets]
    if missing_targets:
        logger.warning(f"⚠️ No target configured for: {', '.join(missing_targets)}")

    return [
        TSETargetRow(tse=tse, target=targets.get(tse, 0), achieved=units)
        for tse, units in achieved.items()
    ]
