from typing import Optional

from ..schemas import GrowthRecord, SellThroughPeriod


def _units(period: dict[str, SellThroughPeriod], dealer_code: str) -> int:
    entry = period.get(dealer_code)
    return entry.units if entry else 0


def compute_growth(
    mtd_so: dict[str, SellThroughPeriod],
    lmtd_so: dict[str, SellThroughPeriod],
    mtd_st: dict[str, SellThroughPeriod],
    lmtd_st: dict[str, SellThroughPeriod],
    descending: bool = True,
    code_to_tse: Optional[dict[str, str]] = None,
) -> list[GrowthRecord]:
    """
    One growth row per dealer that sold anything this month (the MTD sell-out keys).
    A dealer absent from another window counts 0 there.
    Rows are ordered by sell-out growth; ties keep MTD order.
    """
    code_to_tse = code_to_tse or {}
    records = [
        GrowthRecord(
            dealer_code=code,
            dealer_name=period.dealer_name,
            tse=code_to_tse.get(code, ""),
            mtd_so=period.units,
            lmtd_so=_units(lmtd_so, code),
            mtd_st=_units(mtd_st, code),
            lmtd_st=_units(lmtd_st, code),
        )
        for code, period in mtd_so.items()
    ]
    return sorted(records, key=lambda r: r.growth_so_pct, reverse=descending)
