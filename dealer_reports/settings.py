import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- Path Configuration ---
DATA_DIR = BASE_DIR / os.getenv("DATA_DIR", "data")
OUTPUT_DIR = BASE_DIR / os.getenv("OUTPUT_DIR", "output")

# --- Input Files ---
# Shared by several reports.
METADATA_FILE = DATA_DIR / "common" / os.getenv("METADATA_FILE", "Retailer Metadata.xlsx")
PRODUCT_PRICE_FILE = DATA_DIR / "common" / os.getenv("PRODUCT_PRICE_FILE", "ProductPriceList.xlsx")
INVENTORY_FILE = DATA_DIR / "cogs_report" / os.getenv("INVENTORY_FILE", "DealerInventory.xlsx")

# Report specific.
BILLS_FILE = DATA_DIR / "credit_report" / os.getenv("BILLS_FILE", "Bills.xlsx")
MTD_SO_FILE = DATA_DIR / "growth_report" / os.getenv("MTD_SO_FILE", "MTD-SO.xlsx")
LMTD_SO_FILE = DATA_DIR / "growth_report" / os.getenv("LMTD_SO_FILE", "LMTD-SO.xlsx")
MTD_ST_FILE = DATA_DIR / "growth_report" / os.getenv("MTD_ST_FILE", "MTD-ST.xlsx")
LMTD_ST_FILE = DATA_DIR / "growth_report" / os.getenv("LMTD_ST_FILE", "LMTD-ST.xlsx")
L2M_SO_FILE = DATA_DIR / "zso_report" / os.getenv("L2M_SO_FILE", "L2M-SO.xlsx")
MONTHLY_SALES_FILE = DATA_DIR / "sales_report" / os.getenv("MONTHLY_SALES_FILE", "Sales.xlsx")
DISTRIBUTOR_PRICE_LIST_FILE = DATA_DIR / "price_list" / os.getenv(
    "DISTRIBUTOR_PRICE_LIST_FILE", "PriceList.xlsx"
)

# --- Output Folder Prefixes ---
CREDIT_REPORT_PREFIX = "credit_reports"
COGS_REPORT_PREFIX = "inventory_cost_report"
GROWTH_REPORT_PREFIX = "growth_report"
RA_NORMS_REPORT_PREFIX = "ranorms_report"
ZSO_REPORT_PREFIX = "zso_report"
SALES_REPORT_PREFIX = "sales_report"
PRICE_LIST_PREFIX = "price_list"

# --- Header Names ---
CREDIT_DEALER_NAME_HEADER = os.getenv("CREDIT_DEALER_NAME_HEADER", "Tally Name(Dealer Name)")
ZSO_DEALER_NAME_HEADER = os.getenv("ZSO_DEALER_NAME_HEADER", "Dealer Name")
RA_TYPE_SENTINEL = "RA"

# Tally exports carry a preamble above the data.
BILLS_SKIP_ROWS = int(os.getenv("BILLS_SKIP_ROWS", "11"))
SALES_HEADER_ROW = int(os.getenv("SALES_HEADER_ROW", "9"))
PRICE_LIST_HEADER_ROW = int(os.getenv("PRICE_LIST_HEADER_ROW", "1"))

# --- Shared Business Logic ---
BRAND_PREFIX = os.getenv("BRAND_PREFIX", "realme")
PRODUCT_TYPE_FILTER = os.getenv("PRODUCT_TYPE_FILTER", "mobile")

# Refill target for RA dealers is this multiple of their agreement count.
RA_REFILL_MULTIPLIER = int(os.getenv("RA_REFILL_MULTIPLIER", "3"))

# Growth % below this value is highlighted red in the growth report.
GROWTH_RED_THRESHOLD = float(os.getenv("GROWTH_RED_THRESHOLD", "-60"))

RA_MODELS_OF_INTEREST = [
    "C61",
    "C63",
    "C63 5G",
    "C65 5G",
    "13 5G",
    "13+ 5G",
    "13 Pro 5G",
    "13 Pro+ 5G",
    "GT 6T",
    "GT6",
]

ZSO_MODELS_OF_INTEREST = RA_MODELS_OF_INTEREST + [
    "P1 5G",
    "P1 Pro",
    "P2 Pro",
]

# Monthly unit targets per TSE, keyed by sales category.
SMART_PHONE_TARGETS = {
    "Krishna Murthy": 2490,
    "SATHISH": 1900,
    "HARISH": 600,
}

TSE_TARGETS = {
    "SMART PHONES": SMART_PHONE_TARGETS,
    "ACCESSORIES": {
        "Krishna Murthy": 1000,
        "SATHISH": 800,
        "HARISH": 600,
    },
    # No separate targets are set for other products; the smartphone numbers apply.
    "OTHERS": SMART_PHONE_TARGETS,
}
