"""Stocking checks against dealer inventory: RA refill norms and zero-stock-outs."""

from typing import Iterable

from .. import settings
from ..schemas import ModelKey, RefillRequirement, ZSOFlag


def compute_ra_norms(
    ra_quota: dict[str, int],
    inventory_counts: dict[ModelKey, int],
    models: Iterable[str],
    multiplier: int = settings.RA_REFILL_MULTIPLIER,
) -> list[RefillRequirement]:
    """
    Refill requirement for every RA dealer x model.
    Each dealer should hold `multiplier` units per contracted RA; counts are
    keyed by dealer code and a dealer with no stock of a model holds 0.
    """
    models = list(models)
    return [
        RefillRequirement(
            dealer_code=dealer_code,
            model=model,
            ra_quota=quota,
            current_count=inventory_counts.get(ModelKey(dealer_code, model), 0),
            multiplier=multiplier,
        )
        for dealer_code, quota in ra_quota.items()
        for model in models
    ]


def flag_zero_stock_outs(
    sales_counts: dict[ModelKey, int], inventory_counts: dict[ModelKey, int]
) -> list[ZSOFlag]:
    """
    Checks every (dealer, model) that sold in the lookback window.
    Pairs with no recent sales are never evaluated, so a model a dealer
    never carried cannot be a stock-out.
    """
    return [
        ZSOFlag(
            dealer=key.dealer,
            model=key.model,
            recent_sales=sold,
            current_count=inventory_counts.get(key, 0),
        )
        for key, sold in sales_counts.items()
        if sold > 0
    ]
