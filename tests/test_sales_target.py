"""Tests for the monthly sales categorisation and TSE target attainment."""

import pytest

from dealer_reports.aggregators.sales_target import (
    ACCESSORIES,
    OTHERS,
    SMART_PHONES,
    aggregate_dealer_sales,
    categorize_item,
    compute_tse_targets,
    split_by_category,
)
from dealer_reports.schemas import DealerSales, SalesLine, TSETargetRow


@pytest.mark.parametrize(
    ("item_name", "category"),
    [
        ("REALME SMART PHONE C63 4+128", SMART_PHONES),
        ("REALME ACCESSORIES CHARGER", ACCESSORIES),
        ("realme Buds T110", ACCESSORIES),
        ("REALME PAD", OTHERS),
        ("Item Name", None),
    ],
)
def test_categorize_item(item_name: str, category) -> None:
    assert categorize_item(item_name) == category


def test_split_by_category_drops_repeated_headers() -> None:
    lines = [
        SalesLine(dealer_code="D1", item_name="SMART PHONE C63"),
        SalesLine(dealer_code="D1", item_name="Item Name"),
        SalesLine(dealer_code="D2", item_name="Buds Air"),
    ]

    by_category = split_by_category(lines)

    assert [len(by_category[c]) for c in (SMART_PHONES, ACCESSORIES, OTHERS)] == [1, 1, 0]


def test_aggregate_dealer_sales_counts_lines_and_sums_value() -> None:
    lines = [
        SalesLine(dealer_code="D1", dealer_name="Sri", value=1000, tse="HARISH"),
        SalesLine(dealer_code="D1", dealer_name="Sri", value=500.5, tse="HARISH"),
        SalesLine(dealer_code="D2", dealer_name="City", value=10, tse=""),
    ]

    sales = {s.dealer_code: s for s in aggregate_dealer_sales(lines)}

    assert sales["D1"].units == 2
    assert sales["D1"].value == pytest.approx(1500.5)
    assert sales["D1"].tse == "HARISH"
    assert sales["D2"].units == 1


def test_aggregate_dealer_sales_empty() -> None:
    assert aggregate_dealer_sales([]) == []


def test_tse_targets_skip_dealers_without_tse() -> None:
    dealer_sales = [
        DealerSales(dealer_code="D1", units=30, tse="HARISH"),
        DealerSales(dealer_code="D2", units=20, tse="HARISH"),
        DealerSales(dealer_code="D3", units=99, tse=""),
        DealerSales(dealer_code="D4", units=5, tse="SATHISH"),
    ]

    rows = {r.tse: r for r in compute_tse_targets(dealer_sales, {"HARISH": 100})}

    assert set(rows) == {"HARISH", "SATHISH"}
    assert rows["HARISH"].achieved == 50
    assert rows["HARISH"].balance == 50
    assert rows["HARISH"].balance_pct == pytest.approx(50.0)
    # No configured target
    assert rows["SATHISH"].target == 0
    assert rows["SATHISH"].balance_pct == 0.0


def test_target_row_report_headers() -> None:
    row = TSETargetRow(tse="HARISH", target=200, achieved=250).model_dump(by_alias=True)
    assert row == {
        "TSE": "HARISH",
        "Target: Overall": 200,
        "Achieved": 250,
        "Balance": -50,
        "Balance %": pytest.approx(-25.0),
    }
