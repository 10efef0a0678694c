"""Flattens the distributor's merged-cell price list into one row per model, colour and variant."""

import logging

import pandas as pd

from ..schemas import PriceListRow
from ..utils import fold_key, normalize_model_name, require_columns

logger = logging.getLogger(__name__)

PRICE_LIST_COLUMNS = ["TYPE", "Model", "COLOURS", "Variant", "DLR PRICE", "MOP", "MRP"]
MERGED_COLUMNS = ["TYPE", "Model", "COLOURS"]

# Colour cells the distributor writes without any separator.
MULTI_WORD_COLORS = {
    "SAFARI GREEN MARBLE BLACK": ["SAFARI GREEN", "MARBLE BLACK"],
    "GREEN BLACK": ["GREEN", "BLACK"],
    "Sunny Oasis Dark Purple": ["Sunny Oasis", "Dark Purple"],
    "TWILIGHT PURPLE WOODLAND GREEN": ["TWILIGHT PURPLE", "WOODLAND GREEN"],
    "NAVIGATOR BEIGE SUBMARINE BLUE": ["NAVIGATOR BEIGE", "SUBMARINE BLUE"],
    "NAVIGATOR BEIGE SUBMARINE BLUE EXPLORER RED": ["NAVIGATOR BEIGE", "SUBMARINE BLUE", "EXPLORER RED"],
    "SPEED GREEN DARK PURPLE": ["SPEED GREEN", "DARK PURPLE"],
    "VICTORY GOLD SPEED GREEN DARK PURPLE": ["VICTORY GOLD", "SPEED GREEN", "DARK PURPLE"],
    "MONET GOLD MONET PURPLE EMERALD GREEN": ["MONET GOLD", "MONET PURPLE", "EMERALD GREEN"],
    "MONET GOLD EMERALD GREEN": ["MONET GOLD", "EMERALD GREEN"],
    "FLUID SILVER RAZOR GREEN": ["FLUID SILVER", "RAZOR GREEN"],
}

# Checked in order; the first one found in a cell is the one it is split on.
COLOR_SEPARATORS = ["\n", "/", "\\", ":", ","]


def split_colors(color: str) -> list[str]:
    """'BLACK / BLUE' -> ['BLACK', 'BLUE']. A single colour comes back as a one-item list."""
    if color in MULTI_WORD_COLORS:
        logger.info(f"  > Colour cell without separator: {color}")
        return list(MULTI_WORD_COLORS[color])

    for separator in COLOR_SEPARATORS:
        if separator in color:
            return [part.strip() for part in color.split(separator) if part.strip()]
    return [color.strip()]


def _price(value) -> int:
    # Informational columns; a blank or text cell becomes 0.
    try:
        return int(float(str(value).replace(",", "").strip()))
    except (ValueError, OverflowError):
        return 0


def flatten_price_list(
    raw_df: pd.DataFrame, material_codes: dict[tuple[str, str, str], str] | None = None
) -> list[PriceListRow]:
    """
    Forward-fills the merged TYPE / Model / COLOURS cells, splits multi-colour
    cells into one row each, and attaches material codes ("" when unknown).
    """
    require_columns(raw_df, PRICE_LIST_COLUMNS, source="price list")
    material_codes = material_codes or {}

    df = raw_df[PRICE_LIST_COLUMNS].copy()
    merged = df[MERGED_COLUMNS]
    df[MERGED_COLUMNS] = merged.mask(merged == "").ffill().fillna("")
    df = df[df["Model"] != ""]

    rows = []
    for record in df.to_dict("records"):
        variant = record["Variant"].strip()
        for color in split_colors(record["COLOURS"]):
            key = (fold_key(normalize_model_name(record["Model"])), fold_key(color), fold_key(variant))
            rows.append(
                PriceListRow(
                    type=record["TYPE"].strip(),
                    model=record["Model"].strip(),
                    color=color,
                    variant=variant,
                    nlc=_price(record["DLR PRICE"]),
                    mop=_price(record["MOP"]),
                    mrp=_price(record["MRP"]),
                    material_code=material_codes.get(key, ""),
                )
            )

    logger.info(f"  > Flattened price list: {len(rows)} SKUs")
    return rows
