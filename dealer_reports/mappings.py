"""Lookup tables built once per run from the retailer metadata sheet."""

import logging

import pandas as pd
from pydantic import BaseModel, Field

from . import settings
from .utils import parse_count, require_columns

logger = logging.getLogger(__name__)

DEALER_CODE = "Dealer Code"
DEALER_NAME = "Dealer Name"
TSE_NAME = "TSE Name"
RETAILER_TYPE = "Type"
COUNT_OF_RA = "Count of RA"


class EntityMappings(BaseModel):
    """Read-only dealer lookups shared by every aggregator in a run."""

    code_to_tse: dict[str, str] = Field(default_factory=dict)
    code_to_name: dict[str, str] = Field(default_factory=dict)
    name_to_code: dict[str, str] = Field(default_factory=dict)
    name_to_tse: dict[str, str] = Field(default_factory=dict)
    ra_quota: dict[str, int] = Field(default_factory=dict)

    class Config:
        frozen = True


def map_column(df: pd.DataFrame, key_column: str, value_column: str) -> dict[str, str]:
    """
    Single pass key -> value map. Blank keys are skipped (metadata sheets
    carry trailing empty rows) and a repeated key keeps its last value.
    """
    require_columns(df, [key_column, value_column], source="metadata")
    mapping: dict[str, str] = {}
    for key, value in zip(df[key_column], df[value_column]):
        if key == "":
            continue
        mapping[key] = value
    return mapping


def build_ra_quota_map(df: pd.DataFrame) -> dict[str, int]:
    """Dealer code -> contracted RA count, for dealers whose Type is 'RA'."""
    require_columns(df, [DEALER_CODE, RETAILER_TYPE, COUNT_OF_RA], source="metadata")

    quotas: dict[str, int] = {}
    for row in df[[DEALER_CODE, RETAILER_TYPE, COUNT_OF_RA]].itertuples(index=False):
        dealer_code, retailer_type, count = row
        if retailer_type != settings.RA_TYPE_SENTINEL or dealer_code == "":
            continue
        try:
            quota = parse_count(count)
            if quota < 0:
                raise ValueError(f"negative count: {count}")
            quotas[dealer_code] = quota
        except ValueError:
            logger.warning(f"⚠️ Invalid count of RA for retailer {dealer_code}, skipping...")
    return quotas


def build_entity_mappings(
    df: pd.DataFrame,
    dealer_name_header: str = settings.CREDIT_DEALER_NAME_HEADER,
    include_ra_quota: bool = False,
) -> EntityMappings:
    """
    Builds every dealer lookup from the metadata sheet.

    `dealer_name_header` selects which name column the name-keyed maps use:
    billing exports carry the Tally ledger name, DMS exports the plain dealer name.
    The RA quota map is only built on request since its columns are not
    present in every metadata export.
    """
    logger.info(f"Building dealer lookups (name column: '{dealer_name_header}')")
    mappings = EntityMappings(
        code_to_tse=map_column(df, DEALER_CODE, TSE_NAME),
        code_to_name=map_column(df, DEALER_CODE, DEALER_NAME),
        name_to_code=map_column(df, dealer_name_header, DEALER_CODE),
        name_to_tse=map_column(df, dealer_name_header, TSE_NAME),
        ra_quota=build_ra_quota_map(df) if include_ra_quota else {},
    )
    logger.info(
        f"  > {len(mappings.code_to_tse)} dealer codes, {len(mappings.name_to_code)} dealer names"
        + (f", {len(mappings.ra_quota)} RA dealers" if include_ra_quota else "")
    )
    return mappings
