"""Tests for MTD vs LMTD growth records."""

import pytest

from dealer_reports.aggregators.growth import compute_growth
from dealer_reports.schemas import GrowthRecord, SellThroughPeriod


def _period(**units: int) -> dict[str, SellThroughPeriod]:
    return {code: SellThroughPeriod(dealer_code=code, dealer_name=f"{code} Mobiles", units=n) for code, n in units.items()}


def test_growth_uses_mtd_sell_out_dealers_only() -> None:
    """Dealers that only sold last month are not reported."""
    records = compute_growth(
        mtd_so=_period(D1=150),
        lmtd_so=_period(D1=100, D2=80),
        mtd_st=_period(D1=40),
        lmtd_st=_period(D1=80),
    )

    [record] = records
    assert record.dealer_code == "D1"
    assert record.dealer_name == "D1 Mobiles"
    assert record.growth_so_pct == pytest.approx(50.0)
    assert record.growth_st_pct == pytest.approx(-50.0)


def test_missing_windows_count_as_zero() -> None:
    [record] = compute_growth(_period(D1=5), {}, {}, {})

    assert (record.lmtd_so, record.mtd_st, record.lmtd_st) == (0, 0, 0)
    assert record.growth_so_pct == 100.0
    assert record.growth_st_pct == 0.0


def test_dealer_with_nothing_in_either_window_is_still_reported() -> None:
    [record] = compute_growth(_period(D1=0), _period(D1=0), {}, {})
    assert record.growth_so_pct == 0.0


def test_growth_sorted_descending_with_stable_ties() -> None:
    records = compute_growth(
        mtd_so=_period(A=10, B=30, C=20, D=30),
        lmtd_so=_period(A=10, B=10, C=10, D=10),
        mtd_st={},
        lmtd_st={},
    )
    assert [r.dealer_code for r in records] == ["B", "D", "C", "A"]


def test_growth_sorted_ascending_on_request() -> None:
    records = compute_growth(_period(A=10, B=30), _period(A=10, B=10), {}, {}, descending=False)
    assert [r.dealer_code for r in records] == ["A", "B"]


def test_growth_attaches_tse() -> None:
    records = compute_growth(_period(D1=1, D2=1), {}, {}, {}, code_to_tse={"D1": "HARISH"})
    assert {r.dealer_code: r.tse for r in records} == {"D1": "HARISH", "D2": ""}


def test_growth_record_report_headers() -> None:
    row = GrowthRecord(dealer_code="D1", mtd_so=3, lmtd_so=2).model_dump(by_alias=True)
    assert row["Growth SO %"] == pytest.approx(50.0)
    assert row["Growth ST %"] == 0.0
    assert row["MTD SO"] == 3
