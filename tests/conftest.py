"""Shared builders for in-memory dealer sheets."""

import pandas as pd
import pytest

from dealer_reports import settings
from dealer_reports.parsers import INVENTORY_COLUMNS

METADATA_COLUMNS = [
    "Dealer Code",
    "Dealer Name",
    "TSE Name",
    "Type",
    "Count of RA",
    "Tally Name(Dealer Name)",
]


def make_metadata(rows: list[tuple]) -> pd.DataFrame:
    """Rows are (code, name, tse, type, count of RA, tally name)."""
    return pd.DataFrame(rows, columns=METADATA_COLUMNS)


def make_unit(
    dealer_code: str,
    material_code: str,
    spu_name: str = "realme C63",
    dealer_name: str = "",
    color: str = "Leather Blue",
    sku_spec: str = "4+128",
    product_type: str = "mobile",
) -> dict[str, str]:
    """One inventory row, i.e. one physical unit held by a dealer."""
    return {
        "Material Code": material_code,
        "Dealer Code": dealer_code,
        "Dealer Name": dealer_name or f"{dealer_code} Mobiles",
        "SPU Name": spu_name,
        "Color": color,
        "SKU Spec": sku_spec,
        "Product Type": product_type,
    }


def make_inventory(units: list[dict[str, str]]) -> pd.DataFrame:
    return pd.DataFrame(units, columns=INVENTORY_COLUMNS)


@pytest.fixture
def metadata_df() -> pd.DataFrame:
    return make_metadata(
        [
            ("D1", "Sri Mobiles", "HARISH", "RA", "2", "SRI MOBILES (BLR)"),
            ("D2", "City Phones", "SATHISH", "", "", "CITY PHONES"),
            ("D3", "New Era", "HARISH", "RA", "1", "NEW ERA TELECOM"),
            ("D4", "No Tse Store", "", "", "", "NO TSE STORE"),
        ]
    )


@pytest.fixture
def output_dir(tmp_path, monkeypatch):
    """Redirects every report folder into the test's temp directory."""
    out = tmp_path / "output"
    monkeypatch.setattr(settings, "OUTPUT_DIR", out)
    return out
