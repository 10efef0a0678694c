import logging
from typing import Iterable, Optional

import pandas as pd

from .. import settings
from ..schemas import InventoryRecord, ModelKey
from ..utils import fold_key, normalize_model_name

logger = logging.getLogger(__name__)


def compute_inventory_cost(
    lines: pd.DataFrame, prices: dict[str, float], code_to_tse: dict[str, str]
) -> dict[str, InventoryRecord]:
    """
    Values each dealer's stock at net landing cost, one inventory row per unit.
    Units whose material code is not in the price list are valued at 0, so
    a dealer's cost is a lower bound when the price list is stale.
    """
    df = lines[(lines["Material Code"] != "") & (lines["Dealer Code"] != "")].copy()
    if df.empty:
        return {}

    df["unit_cost"] = df["Material Code"].map(prices)
    unpriced = df["unit_cost"].isna()
    if unpriced.any():
        missing = sorted(df.loc[unpriced, "Material Code"].unique())
        logger.warning(
            f"⚠️ {int(unpriced.sum())} units have no price ({len(missing)} material codes), valued at 0"
        )
    df["unit_cost"] = df["unit_cost"].fillna(0.0).astype(float)

    grouped = df.groupby("Dealer Code", sort=False).agg(
        dealer_name=("Dealer Name", "first"), cost=("unit_cost", "sum")
    )
    return {
        code: InventoryRecord(
            dealer_code=code,
            dealer_name=row.dealer_name,
            tse=code_to_tse.get(code, ""),
            total_inventory_cost=float(row.cost),
        )
        for code, row in grouped.iterrows()
    }


def join_credit(
    records: Iterable[InventoryRecord], credit_by_dealer: dict[str, float]
) -> list[InventoryRecord]:
    """Left join on dealer code: dealers with no credit owe 0."""
    return [
        record.model_copy(
            update={"total_credit_due": credit_by_dealer.get(record.dealer_code, 0.0)}
        )
        for record in records
    ]


def count_models(
    lines: pd.DataFrame,
    dealer_field: str,
    models_of_interest: Optional[Iterable[str]] = None,
    dealers: Optional[Iterable[str]] = None,
    product_type: str = settings.PRODUCT_TYPE_FILTER,
    brand_prefix: str = settings.BRAND_PREFIX,
) -> dict[ModelKey, int]:
    """
    Units per (dealer, model), where the model is the SPU name without the brand.

    `dealer_field` is the column used as the dealer half of the key
    ('Dealer Code' or 'Dealer Name'). Only handsets are counted.
    """
    df = lines[lines["Product Type"].str.contains(product_type, regex=False)]
    df = pd.DataFrame(
        {
            "dealer": df[dealer_field],
            "model": df["SPU Name"].map(lambda name: normalize_model_name(name, brand_prefix)),
        }
    )
    df = df[(df["dealer"] != "") & (df["model"] != "")]

    if models_of_interest is not None:
        df = df[df["model"].isin(set(models_of_interest))]
    if dealers is not None:
        df = df[df["dealer"].isin(set(dealers))]

    counts = df.groupby(["dealer", "model"], sort=False).size()
    return {ModelKey(dealer, model): int(count) for (dealer, model), count in counts.items()}


def material_code_map(lines: pd.DataFrame, brand_prefix: str = settings.BRAND_PREFIX) -> dict[tuple[str, str, str], str]:
    """(model, colour, variant), case-folded -> material code, from the inventory export."""
    codes: dict[tuple[str, str, str], str] = {}
    for spu_name, color, variant, material_code in lines[
        ["SPU Name", "Color", "SKU Spec", "Material Code"]
    ].itertuples(index=False):
        if material_code == "":
            continue
        key = (
            fold_key(normalize_model_name(spu_name, brand_prefix)),
            fold_key(color),
            fold_key(variant),
        )
        codes[key] = material_code
    return codes
