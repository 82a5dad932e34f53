"""Pydantic models describing the public API surface."""

from __future__ import annotations

from datetime import date
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

__all__ = [
    "TransactionInput",
    "IncomeContextInput",
    "AssumptionsInput",
    "AllocationInput",
    "CalculationRequest",
    "HoldingPeriodOutput",
    "IndexLookupOutput",
    "CostInflationIndexOutput",
    "RegimeResultOutput",
    "RegimeDecisionOutput",
    "BaselineOutput",
    "PropertyProjectionOutput",
    "BondProjectionOutput",
    "StrategyOutput",
    "BondAllocationOutput",
    "RealEstateAllocationOutput",
    "AllocationOutput",
    "ResponseMeta",
    "CalculationResponse",
    "format_validation_error",
]


AssetTypeLiteral = Literal["residential", "commercial", "land"]
RegimeLiteral = Literal["old", "new"]

# Upper bound for any monetary input; keeps projections within float range.
MAX_AMOUNT = 1e15


class TransactionInput(BaseModel):
    """Facts about the property disposal supplied by the user."""

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    asset_type: AssetTypeLiteral = "residential"
    purchase_date: date
    sale_date: date
    purchase_price: float = Field(..., ge=0, le=MAX_AMOUNT)
    sale_price: float = Field(..., ge=0, le=MAX_AMOUNT)
    stamp_duty: float = Field(default=0.0, ge=0, le=MAX_AMOUNT)
    improvement_cost: float = Field(default=0.0, ge=0, le=MAX_AMOUNT)
    improvement_date: date | None = None
    brokerage: float = Field(default=0.0, ge=0, le=MAX_AMOUNT)
    legal_fees: float = Field(default=0.0, ge=0, le=MAX_AMOUNT)

    @field_validator("asset_type", mode="before")
    @classmethod
    def _normalise_asset_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("improvement_date", mode="before")
    @classmethod
    def _blank_improvement_date(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _validate_dates(self) -> TransactionInput:
        if self.sale_date <= self.purchase_date:
            raise ValueError("Sale date must be after the purchase date")
        return self


class IncomeContextInput(BaseModel):
    """Existing taxable income used to stack projected income on the slabs."""

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    taxable_income: float = Field(..., ge=0, le=MAX_AMOUNT)
    regime: RegimeLiteral = "new"


class AssumptionsInput(BaseModel):
    """Projection assumptions; rates are fractions (``0.08`` for 8%)."""

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    appreciation_rate: float | None = Field(default=None, gt=-1, le=1)
    enable_rental: bool = False
    monthly_rent: float = Field(default=0.0, ge=0, le=MAX_AMOUNT)
    rent_start_month: int = Field(default=0, ge=0)
    tax_slab: float | None = Field(default=None, ge=0, le=1)
    user_selected_regime: RegimeLiteral | None = None
    income_context: IncomeContextInput | None = None

    @field_validator("user_selected_regime", mode="before")
    @classmethod
    def _normalise_regime(cls, value: Any) -> Any:
        if value is None:
            return None
        text = str(value).strip().lower()
        return text or None


class AllocationInput(BaseModel):
    """Requested split of the net proceeds after tax."""

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    personal_use: float = Field(default=0.0, ge=0, le=MAX_AMOUNT)
    bonds: float = Field(default=0.0, ge=0, le=MAX_AMOUNT)
    invest_real_estate: bool = True
    appreciation_rate: float | None = Field(default=None, gt=-1, le=1)
    enable_rental: bool = False
    monthly_rent: float = Field(default=0.0, ge=0, le=MAX_AMOUNT)
    rent_start_month: int = Field(default=0, ge=0)


class CalculationRequest(BaseModel):
    """Top-level payload accepted by the capital gains endpoint."""

    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    year: int | None = Field(default=None, ge=0)
    transaction: TransactionInput
    assumptions: AssumptionsInput = Field(default_factory=AssumptionsInput)
    allocation: AllocationInput | None = None


class HoldingPeriodOutput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    months: int
    years: int
    remainder_months: int
    is_long_term: bool
    threshold_months: int


class IndexLookupOutput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    fiscal_year: int
    value: int
    estimated: bool


class CostInflationIndexOutput(BaseModel):
    """Index values applied to the transaction and the resulting costs."""

    model_config = ConfigDict(extra="forbid")

    purchase: IndexLookupOutput
    sale: IndexLookupOutput
    improvement: IndexLookupOutput | None = None
    indexed_purchase_cost: int
    indexed_improvement_cost: int
    indexed_cost: int


class RegimeResultOutput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    regime: Literal["old", "new", "short_term"]
    capital_gain: int
    tax_rate: float
    tax_before_cess: int
    cess: int
    total_tax: int
    net_proceeds: int
    indexed_cost: int | None = None


class RegimeDecisionOutput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    state: Literal["mandatory_new", "mandatory_old", "choice", "short_term"]
    can_choose: bool
    recommended: Literal["old", "new", "short_term"]
    active_regime: Literal["old", "new", "short_term"]
    mandatory_regime: RegimeLiteral | None = None
    user_selected: RegimeLiteral | None = None


class BaselineOutput(BaseModel):
    """Pay-the-tax-and-invest comparison attached to property strategies."""

    model_config = ConfigDict(extra="forbid")

    tax_paid: int
    invested_amount: int
    baseline_rate: float
    interest_earned: int
    tax_on_interest: int
    net_interest: int
    net_amount: int
    strategy_is_better: bool


class PropertyProjectionOutput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    investment_amount: int
    appreciation_rate: float
    projected_value: int
    capital_appreciation: int
    rental_enabled: bool
    monthly_rent: int
    rent_start_month: int
    rental_months: int
    rental_income: int
    total_returns: int
    annualized_return: float
    tax_slab: float
    tax_on_rental_income: int
    tax_on_appreciation: int
    total_tax_on_returns: int
    net_cash_in_hand: int
    baseline: BaselineOutput


class BondProjectionOutput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    principal: int
    interest_rate: float
    lock_in_years: int
    total_interest: int
    maturity_value: int
    tax_on_interest: int
    net_maturity_value: int


class StrategyOutput(BaseModel):
    """Serialised exemption strategy, tagged by ``kind``."""

    model_config = ConfigDict(extra="forbid")

    kind: Literal["property", "bond"]
    section: str
    name: str
    description: str
    max_exemption: int
    investment_required: int
    tax_saved: int
    deadline: date
    lock_in_years: int
    notes: list[str]
    projected_net_value: int
    property_projection: PropertyProjectionOutput | None = None
    bond_projection: BondProjectionOutput | None = None

    @model_validator(mode="after")
    def _validate_variant(self) -> StrategyOutput:
        if self.kind == "property" and self.property_projection is None:
            raise ValueError("Property strategies require a property projection")
        if self.kind == "bond" and self.bond_projection is None:
            raise ValueError("Bond strategies require a bond projection")
        return self


class BondAllocationOutput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    amount: int
    projection: BondProjectionOutput


class RealEstateAllocationOutput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    amount: int
    lock_in_years: int
    appreciation_rate: float
    projected_value: int
    capital_appreciation: int
    rental_months: int
    rental_income: int
    total_returns: int
    tax_on_rental_income: int
    tax_on_appreciation: int
    total_tax: int
    net_value: int


class AllocationOutput(BaseModel):
    model_config = ConfigDict(extra="forbid")

    net_proceeds: int
    max_bond_amount: int
    personal_use_amount: int
    bonds: BondAllocationOutput
    real_estate: RealEstateAllocationOutput
    unallocated: int
    total_projected_value: int


class ResponseMeta(BaseModel):
    """Metadata returned alongside the calculation output."""

    model_config = ConfigDict(extra="forbid")

    year: int
    asset_type: AssetTypeLiteral
    total_acquisition_cost: int
    transfer_expenses: int
    net_sale_consideration: int
    original_property_cagr: float
    appreciation_rate: float
    tax_slab: float
    cess_rate: float
    uses_estimated_index: bool


class CalculationResponse(BaseModel):
    """Full response payload produced by the calculation service."""

    model_config = ConfigDict(extra="forbid")

    holding_period: HoldingPeriodOutput
    cost_inflation_index: CostInflationIndexOutput
    regime_results: list[RegimeResultOutput]
    regime_decision: RegimeDecisionOutput
    active_result: RegimeResultOutput
    strategies: list[StrategyOutput]
    allocation: AllocationOutput | None = None
    meta: ResponseMeta


def format_validation_error(error: ValidationError) -> str:
    """Return a concise human-readable description of validation issues."""

    messages: list[str] = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue.get("loc", ()))
        message = issue.get("msg", "Invalid value")
        if "greater than or equal to 0" in message.lower():
            message = "value cannot be negative"
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        if location:
            messages.append(f"{location}: {message}")
        else:
            messages.append(message)

    details = "; ".join(messages) if messages else str(error)
    return f"Invalid calculation payload: {details}"
