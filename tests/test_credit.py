"""Tests for credit aging: bucketing, per-retailer totals and the TSE split."""

import pytest

from dealer_reports.aggregators.credit import (
    BUCKET_FIELDS,
    age_bucket,
    aggregate_credit_by_retailer,
    attach_inventory_cost,
    split_by_tse,
)
from dealer_reports.schemas import Bill, RetailerCreditSummary


def _bill(name: str, amount: float, age: int) -> Bill:
    return Bill(retailer_name=name, pending_amount=amount, age_of_bill=age)


@pytest.mark.parametrize(
    ("age", "bucket"),
    [
        (0, "days_0_7"),
        (7, "days_0_7"),
        (8, "days_8_14"),
        (14, "days_8_14"),
        (15, "days_15_20"),
        (20, "days_15_20"),
        (21, "days_21_30"),
        (30, "days_21_30"),
        (31, "days_31_plus"),
        (365, "days_31_plus"),
    ],
)
def test_age_bucket_boundaries(age: int, bucket: str) -> None:
    assert age_bucket(age) == bucket


def test_age_bucket_rejects_negative_age() -> None:
    with pytest.raises(ValueError, match="negative"):
        age_bucket(-1)


def test_bills_are_bucketed_per_retailer() -> None:
    """A retailer with a 3-day and a 25-day bill owes 150 across two buckets."""
    bills = [_bill("A", 100, 3), _bill("A", 50, 25)]

    [summary] = aggregate_credit_by_retailer(bills, {"A": "HARISH"}, {"A": "D1"})

    assert summary.retailer_code == "D1"
    assert summary.tse == "HARISH"
    assert summary.days_0_7 == 100
    assert summary.days_21_30 == 50
    assert summary.days_8_14 == summary.days_15_20 == summary.days_31_plus == 0
    assert summary.total_credit == 150


def test_total_credit_is_always_the_bucket_sum() -> None:
    bills = [
        _bill("A", 10.5, 1),
        _bill("A", 20, 9),
        _bill("B", 30, 16),
        _bill("B", 40, 40),
        _bill("C", 5, 31),
        _bill("A", 0.25, 7),
    ]
    summaries = aggregate_credit_by_retailer(bills, {}, {})

    assert {s.retailer_name for s in summaries} == {"A", "B", "C"}
    for summary in summaries:
        assert summary.total_credit == pytest.approx(sum(getattr(summary, f) for f in BUCKET_FIELDS))
    assert sum(s.total_credit for s in summaries) == pytest.approx(sum(b.pending_amount for b in bills))


def test_unmapped_retailer_keeps_empty_code_and_tse() -> None:
    [summary] = aggregate_credit_by_retailer([_bill("Walk-in", 99, 2)], {}, {})
    assert summary.retailer_code == ""
    assert summary.tse == ""


def test_no_bills_no_summaries() -> None:
    assert aggregate_credit_by_retailer([], {}, {}) == []


def test_attach_inventory_cost_derives_shortfall() -> None:
    summaries = [
        RetailerCreditSummary(retailer_name="A", retailer_code="D1", days_0_7=300),
        RetailerCreditSummary(retailer_name="B", retailer_code="D2", days_31_plus=50),
    ]

    joined = attach_inventory_cost(summaries, {"D1": 1000.0})

    assert joined[0].inventory_cost == 1000.0
    assert joined[0].inventory_shortfall == 700.0
    # No stock on record means the whole credit is uncovered
    assert joined[1].inventory_cost == 0.0
    assert joined[1].inventory_shortfall == -50.0
    # Originals are untouched
    assert summaries[0].inventory_cost == 0.0


def test_summary_serialises_with_report_headers() -> None:
    summary = RetailerCreditSummary(retailer_name="A", days_8_14=20, inventory_cost=5)
    row = summary.model_dump(by_alias=True)

    assert row["Credit: 8-14 Days(₹)"] == 20
    assert row["Total Credit(₹)"] == 20
    assert row["Inventory Shortfall (₹)"] == -15


def test_split_by_tse_is_a_partition_ordered_by_shortfall() -> None:
    summaries = [
        RetailerCreditSummary(retailer_name="A", tse="HARISH", days_0_7=10, inventory_cost=100),
        RetailerCreditSummary(retailer_name="B", tse="HARISH", days_0_7=500),
        RetailerCreditSummary(retailer_name="C", tse="SATHISH", days_0_7=1),
        RetailerCreditSummary(retailer_name="D", days_0_7=7),
        RetailerCreditSummary(retailer_name="E", tse="HARISH", days_0_7=20),
    ]

    by_tse, unassigned = split_by_tse(summaries)

    assert [s.retailer_name for s in by_tse["HARISH"]] == ["B", "E", "A"]
    assert [s.retailer_name for s in by_tse["SATHISH"]] == ["C"]
    assert [s.retailer_name for s in unassigned] == ["D"]

    placed = [s.retailer_name for group in by_tse.values() for s in group] + [s.retailer_name for s in unassigned]
    assert sorted(placed) == ["A", "B", "C", "D", "E"]
