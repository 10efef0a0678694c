from typing import NamedTuple

from pydantic import BaseModel, Field, computed_field

from .utils import growth_pct


class ModelKey(NamedTuple):
    """Composite key for per-dealer, per-model unit counts."""

    dealer: str
    model: str


class Bill(BaseModel):
    """One outstanding invoice line from the Tally receivables export."""

    retailer_name: str = Field(..., alias="Party's Name")
    pending_amount: float = Field(..., alias="Pending Amount")
    age_of_bill: int = Field(..., ge=0, alias="Overdue by days")
    date: str = Field(default="", alias="Date")
    ref_no: str = Field(default="", alias="Ref. No.")
    due_date: str = Field(default="", alias="Due on")

    class Config:
        populate_by_name = True
        frozen = True


class RetailerCreditSummary(BaseModel):
    """
    Credit outstanding for one retailer, split into age buckets.
    The total is always the bucket sum and the shortfall is always derived,
    so neither can drift from the values it is built from.
    """

    retailer_code: str = Field(default="", alias="Retailer Code")
    retailer_name: str = Field(..., alias="Retailer Name")
    days_0_7: float = Field(default=0.0, alias="Credit: 0-7 Days(₹)")
    days_8_14: float = Field(default=0.0, alias="Credit: 8-14 Days(₹)")
    days_15_20: float = Field(default=0.0, alias="Credit: 15-20 Days(₹)")
    days_21_30: float = Field(default=0.0, alias="Credit: 21-30 Days(₹)")
    days_31_plus: float = Field(default=0.0, alias="Credit: 31+ Days(₹)")
    inventory_cost: float = Field(default=0.0, alias="Total Inventory Cost(₹)")
    tse: str = Field(default="", alias="TSE")

    class Config:
        populate_by_name = True
        frozen = True

    @computed_field(alias="Total Credit(₹)")
    @property
    def total_credit(self) -> float:
        return (
            self.days_0_7
            + self.days_8_14
            + self.days_15_20
            + self.days_21_30
            + self.days_31_plus
        )

    @computed_field(alias="Inventory Shortfall (₹)")
    @property
    def inventory_shortfall(self) -> float:
        return self.inventory_cost - self.total_credit


class InventoryRecord(BaseModel):
    """Stock valuation for one dealer against the credit it owes."""

    dealer_code: str = Field(..., alias="Dealer Code")
    dealer_name: str = Field(default="", alias="Dealer Name")
    tse: str = Field(default="", alias="TSE")
    total_inventory_cost: float = Field(default=0.0, alias="Total Inventory Cost(₹)")
    total_credit_due: float = Field(default=0.0, alias="Total Credit Due(₹)")

    class Config:
        populate_by_name = True
        frozen = True

    @computed_field(alias="Inventory Shortfall (₹)")
    @property
    def inventory_shortfall(self) -> float:
        # Negative means the dealer owes more than its stock is worth.
        return self.total_inventory_cost - self.total_credit_due


class SellThroughPeriod(BaseModel):
    """Units moved by one dealer in one window (MTD or LMTD) for one channel."""

    dealer_code: str
    dealer_name: str = ""
    units: int = Field(default=0, ge=0)


class GrowthRecord(BaseModel):
    tse: str = Field(default="", alias="TSE")
    dealer_code: str = Field(..., alias="Dealer Code")
    dealer_name: str = Field(default="", alias="Dealer Name")
    mtd_so: int = Field(default=0, ge=0, alias="MTD SO")
    lmtd_so: int = Field(default=0, ge=0, alias="LMTD SO")
    mtd_st: int = Field(default=0, ge=0, alias="MTD ST")
    lmtd_st: int = Field(default=0, ge=0, alias="LMTD ST")

    class Config:
        populate_by_name = True
        frozen = True

    @computed_field(alias="Growth SO %")
    @property
    def growth_so_pct(self) -> float:
        return growth_pct(self.mtd_so, self.lmtd_so)

    @computed_field(alias="Growth ST %")
    @property
    def growth_st_pct(self) -> float:
        return growth_pct(self.mtd_st, self.lmtd_st)


class RefillRequirement(BaseModel):
    """Units an RA dealer must be sent to meet its stocking norm for one model."""

    dealer_code: str
    model: str
    ra_quota: int = Field(..., ge=0)
    current_count: int = Field(default=0, ge=0)
    multiplier: int = Field(..., ge=0)

    class Config:
        frozen = True

    @computed_field
    @property
    def required_refill(self) -> int:
        return max(0, self.multiplier * self.ra_quota - self.current_count)


class ZSOFlag(BaseModel):
    """A dealer/model pair with recent sales, and whether it is now out of stock."""

    dealer: str
    model: str
    recent_sales: int = Field(..., ge=0)
    current_count: int = Field(default=0, ge=0)

    class Config:
        frozen = True

    @computed_field
    @property
    def zso(self) -> bool:
        return self.current_count == 0 and self.recent_sales > 0


class SalesLine(BaseModel):
    """One invoice line from the monthly Tally sales register."""

    dealer_code: str
    dealer_name: str = ""
    item_name: str = ""
    value: float = 0.0
    tse: str = ""


class DealerSales(BaseModel):
    dealer_code: str = Field(..., alias="Dealer Code")
    dealer_name: str = Field(default="", alias="Dealer Name")
    units: int = Field(default=0, alias="Sell Out")
    value: float = Field(default=0.0, alias="Total Sales Value(₹)")
    tse: str = Field(default="", alias="TSE")

    class Config:
        populate_by_name = True


class TSETargetRow(BaseModel):
    tse: str = Field(..., alias="TSE")
    target: int = Field(default=0, alias="Target: Overall")
    achieved: int = Field(default=0, alias="Achieved")

    class Config:
        populate_by_name = True
        frozen = True

    @computed_field(alias="Balance")
    @property
    def balance(self) -> int:
        return self.target - self.achieved

    @computed_field(alias="Balance %")
    @property
    def balance_pct(self) -> float:
        if self.target == 0:
            return 0.0
        return self.balance / self.target * 100


class PriceListRow(BaseModel):
    type: str = Field(default="", alias="Type")
    model: str = Field(..., alias="Model")
    color: str = Field(default="", alias="Color")
    variant: str = Field(default="", alias="Variant")
    nlc: int = Field(default=0, alias="NLC")
    mop: int = Field(default=0, alias="MOP")
    mrp: int = Field(default=0, alias="MRP")
    material_code: str = Field(default="", alias="Material Code")

    class Config:
        populate_by_name = True
