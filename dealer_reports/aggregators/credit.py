import logging

import pandas as pd

from ..schemas import Bill, RetailerCreditSummary

logger = logging.getLogger(__name__)

# (field, first day, last day); the last bucket is open-ended.
AGE_BUCKETS = [
    ("days_0_7", 0, 7),
    ("days_8_14", 8, 14),
    ("days_15_20", 15, 20),
    ("days_21_30", 21, 30),
    ("days_31_plus", 31, None),
]
BUCKET_FIELDS = [field for field, _, _ in AGE_BUCKETS]


def age_bucket(age: int) -> str:
    """Returns the RetailerCreditSummary field a bill of this age belongs to."""
    if age < 0:
        raise ValueError(f"Bill age cannot be negative: {age}")
    for field, low, high in AGE_BUCKETS:
        if low <= age and (high is None or age <= high):
            return field
    raise ValueError(f"No credit bucket for age {age}")


def aggregate_credit_by_retailer(
    bills: list[Bill], name_to_tse: dict[str, str], name_to_code: dict[str, str]
) -> list[RetailerCreditSummary]:
    """
    Groups bills by retailer name and sums each pending amount into its age bucket.
    Retailers missing from the metadata keep an empty code and TSE.
    """
    if not bills:
        return []

    df = pd.DataFrame([bill.model_dump() for bill in bills])
    df["bucket"] = df["age_of_bill"].map(age_bucket)

    pivot = df.pivot_table(
        index="retailer_name",
        columns="bucket",
        values="pending_amount",
        aggfunc="sum",
        fill_value=0.0,
        sort=False,
    ).reindex(columns=BUCKET_FIELDS, fill_value=0.0)

    summaries = []
    for retailer_name, buckets in pivot.iterrows():
        summaries.append(
            RetailerCreditSummary(
                retailer_name=retailer_name,
                retailer_code=name_to_code.get(retailer_name, ""),
                tse=name_to_tse.get(retailer_name, ""),
                **{field: float(buckets[field]) for field in BUCKET_FIELDS},
            )
        )

    logger.info(f"  > Aggregated {len(bills)} bills into {len(summaries)} retailers")
    return summaries


def attach_inventory_cost(
    summaries: list[RetailerCreditSummary], cost_by_code: dict[str, float]
) -> list[RetailerCreditSummary]:
    """Copies each summary with its dealer's stock value (0 when the dealer holds no stock)."""
    joined = []
    for summary in summaries:
        cost = cost_by_code.get(summary.retailer_code)
        if cost is None:
            logger.info(f"  > No inventory found for retailer {summary.retailer_name}")
            cost = 0.0
        joined.append(summary.model_copy(update={"inventory_cost": cost}))
    return joined


def split_by_tse(
    summaries: list[RetailerCreditSummary],
) -> tuple[dict[str, list[RetailerCreditSummary]], list[RetailerCreditSummary]]:
    """
    Partitions summaries into one list per TSE plus the retailers with no TSE.
    Each list is ordered by inventory shortfall, worst first.
    """
    ordered = sorted(summaries, key=lambda s: s.inventory_shortfall)

    by_tse: dict[str, list[RetailerCreditSummary]] = {}
    unassigned = []
    for summary in ordered:
        if summary.tse:
            by_tse.setdefault(summary.tse, []).append(summary)
        else:
            unassigned.append(summary)
    return by_tse, unassigned
