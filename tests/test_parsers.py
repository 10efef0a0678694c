"""Tests for turning raw export sheets into typed records."""

import logging
from datetime import date

import pandas as pd
import pytest

from dealer_reports import parsers
from dealer_reports.utils import MissingColumnError, load_sheet


def _bills_sheet(rows: list[list[str]]) -> pd.DataFrame:
    """Receivables rows as read without a header, grand total last."""
    return pd.DataFrame(rows + [["", "", "", "1,50,000.00", "", ""]])


def test_parse_bills_reads_columns_by_position() -> None:
    df = _bills_sheet(
        [
            ["1-Sep-24", "INV/101", "SRI MOBILES", "1,000.50", "8-Sep-24", "3"],
            ["2-Aug-24", "INV/055", "CITY PHONES", "250", "9-Aug-24", "40"],
        ]
    )

    bills = parsers.parse_bills(df)

    assert [(b.retailer_name, b.pending_amount, b.age_of_bill) for b in bills] == [
        ("SRI MOBILES", 1000.5, 3),
        ("CITY PHONES", 250.0, 40),
    ]
    assert bills[0].ref_no == "INV/101"
    assert bills[0].due_date == "8-Sep-24"


def test_parse_bills_drops_bad_rows_with_warning(caplog) -> None:
    df = _bills_sheet(
        [
            ["1-Sep-24", "INV/1", "SRI MOBILES", "abc", "", "3"],
            ["1-Sep-24", "INV/2", "SRI MOBILES", "100", "", "-2"],
            ["1-Sep-24", "INV/3", "SRI MOBILES", "100", "", ""],
            ["", "", "", "", "", ""],
            ["1-Sep-24", "INV/4", "SRI MOBILES", "100", "", "5"],
        ]
    )

    with caplog.at_level(logging.WARNING):
        bills = parsers.parse_bills(df)

    assert [b.ref_no for b in bills] == ["INV/4"]
    for ref_no in ("INV/1", "INV/2", "INV/3"):
        assert ref_no in caplog.text


def test_parse_bills_drops_non_finite_amounts(caplog) -> None:
    """A 'nan' amount would vanish from the bucket sums while still counting as a bill."""
    df = _bills_sheet(
        [
            ["1-Sep-24", "INV/7", "SRI MOBILES", "nan", "", "3"],
            ["1-Sep-24", "INV/8", "SRI MOBILES", "inf", "", "3"],
            ["1-Sep-24", "INV/9", "SRI MOBILES", "100", "", "3"],
        ]
    )

    with caplog.at_level(logging.WARNING):
        bills = parsers.parse_bills(df)

    assert [(b.ref_no, b.pending_amount) for b in bills] == [("INV/9", 100.0)]
    assert "INV/7" in caplog.text
    assert "INV/8" in caplog.text


def test_parse_bills_requires_six_columns() -> None:
    with pytest.raises(MissingColumnError):
        parsers.parse_bills(pd.DataFrame([["a", "b", "c"]]))


def test_parse_product_prices() -> None:
    df = pd.DataFrame(
        {"Material Code": ["M1", "M2", "", "M1"], "NLC": ["200", "bad", "5", "1,250"]}
    )
    assert parsers.parse_product_prices(df) == {"M1": 1250.0}


def test_parse_inventory_requires_every_column() -> None:
    df = pd.DataFrame({"Material Code": ["M1"], "Dealer Code": ["D1"]})
    with pytest.raises(MissingColumnError, match="Dealer Name"):
        parsers.parse_inventory(df)


def test_parse_sell_counts_excludes_days_after_as_of() -> None:
    """On the 15th, last month's sales from the 16th onward are left out."""
    df = pd.DataFrame(
        {
            "toDealerCode": ["D1", "D1", "D1", "D2", "", "D2"],
            "toDealerName": ["Sri", "Sri", "Sri", "City", "Ghost", "City"],
            "activateTime": [
                "2024-08-01 10:00:00",
                "2024-08-15 23:59:59",
                "2024-08-16 00:00:01",
                "2024-08-20 12:00:00",
                "2024-08-01 12:00:00",
                "yesterday",
            ],
        }
    )

    counts = parsers.parse_sell_counts(df, as_of=date(2024, 9, 15))

    assert list(counts) == ["D1"]
    assert counts["D1"].units == 2
    assert counts["D1"].dealer_name == "Sri"


def test_parse_sell_counts_accepts_fractional_seconds(tmp_path) -> None:
    """Exports sometimes carry milliseconds on the activation time."""
    path = tmp_path / "MTD-SO.xlsx"
    pd.DataFrame(
        {
            "Dealer Code": ["D1", "D1", "D1"],
            "Dealer Name": ["Sri", "Sri", "Sri"],
            "Activate Time": [
                "2024-09-01 10:00:00",
                "2024-09-01 11:30:15.5",
                "2024-09-02 18:45:00.500000",
            ],
        }
    ).to_excel(path, index=False)

    counts = parsers.parse_sell_counts(load_sheet(path), as_of=date(2024, 9, 2))

    assert counts["D1"].units == 3


def test_parse_sell_counts_requires_dealer_code_column() -> None:
    df = pd.DataFrame({"Dealer Name": ["Sri"], "Activate Time": ["2024-09-01 10:00:00"]})
    with pytest.raises(MissingColumnError, match="toDealerCode"):
        parsers.parse_sell_counts(df, as_of=date(2024, 9, 15))


def test_parse_credit_totals_sums_across_workbooks_and_skips_total_row() -> None:
    harish = pd.DataFrame(
        {"Retailer Code": ["D1", "D2", "Total"], "Total Credit(₹)": ["1,000", "50.5", "1050.5"]}
    )
    missing_tse = pd.DataFrame(
        {"Retailer Code": ["", "D1", "Total"], "Total Credit(₹)": ["75", "25", "100"]}
    )

    totals = parsers.parse_credit_totals([harish, missing_tse])

    assert totals == {"D1": 1025.0, "D2": 50.5}


def test_parse_sales_lines_skips_repeated_headers_and_bad_amounts() -> None:
    df = pd.DataFrame(
        {
            "Retailer Code": ["D1", "Retailer Code", "D2", "D3", ""],
            "Party Name": ["Sri", "Party Name", "City", "New Era", "Nobody"],
            "Amount ": ["12,000", "Amount ", "x", "900", "1"],
            "Item Name": ["SMART PHONE C63", "Item Name", "Buds", "PAD", "PAD"],
        }
    )

    lines = parsers.parse_sales_lines(df, {"D1": "HARISH"})

    assert [(line.dealer_code, line.value, line.tse) for line in lines] == [
        ("D1", 12000.0, "HARISH"),
        ("D3", 900.0, ""),
    ]
