"""Immutable value objects flowing through the capital gains pipeline.

Inputs (``Transaction`` and ``ProjectionAssumptions``) validate themselves on
construction so that formulas never see negative amounts or reversed dates.
Everything else is derived by the calculator modules and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum


class AssetType(str, Enum):
    RESIDENTIAL = "residential"
    COMMERCIAL = "commercial"
    LAND = "land"


class TaxRegime(str, Enum):
    """Computation paths available for a disposal."""

    OLD = "old"  # indexed cost, higher rate
    NEW = "new"  # unindexed cost, lower rate
    SHORT_TERM = "short_term"


@dataclass(frozen=True)
class Transaction:
    """A single property disposal."""

    asset_type: AssetType
    purchase_date: date
    sale_date: date
    purchase_price: float
    sale_price: float
    stamp_duty: float = 0.0
    improvement_cost: float = 0.0
    improvement_date: date | None = None
    brokerage: float = 0.0
    legal_fees: float = 0.0

    def __post_init__(self) -> None:
        if not isinstance(self.asset_type, AssetType):
            try:
                object.__setattr__(self, "asset_type", AssetType(self.asset_type))
            except ValueError as exc:
                raise ValueError(f"Unknown asset type '{self.asset_type}'") from exc

        for name in (
            "purchase_price",
            "sale_price",
            "stamp_duty",
            "improvement_cost",
            "brokerage",
            "legal_fees",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"Field '{name}' cannot be negative")

        if self.sale_date <= self.purchase_date:
            raise ValueError("Sale date must be after the purchase date")
        if self.improvement_date is not None and not (
            self.purchase_date <= self.improvement_date <= self.sale_date
        ):
            raise ValueError("Improvement date must fall between purchase and sale")

    @property
    def total_acquisition_cost(self) -> float:
        return self.purchase_price + self.stamp_duty

    @property
    def transfer_expenses(self) -> float:
        return self.brokerage + self.legal_fees

    @property
    def net_sale_consideration(self) -> float:
        return self.sale_price - self.transfer_expenses


@dataclass(frozen=True)
class IncomeContext:
    """Existing taxable income used to stack projected income on the slabs."""

    taxable_income: float
    regime: str = "new"

    def __post_init__(self) -> None:
        if self.taxable_income < 0:
            raise ValueError("Taxable income cannot be negative")
        if self.regime not in {"new", "old"}:
            raise ValueError("Income regime must be 'new' or 'old'")


@dataclass(frozen=True)
class ProjectionAssumptions:
    """User-declared assumptions for projecting reinvestment outcomes.

    ``appreciation_rate`` and ``tax_slab`` are fractions (``0.08`` for 8%).
    """

    appreciation_rate: float = 0.08
    enable_rental: bool = False
    monthly_rent: float = 0.0
    rent_start_month: int = 0
    tax_slab: float = 0.30
    user_selected_regime: TaxRegime | None = None
    income_context: IncomeContext | None = None

    def __post_init__(self) -> None:
        if self.appreciation_rate <= -1:
            raise ValueError("Appreciation rate must be greater than -100%")
        if self.monthly_rent < 0:
            raise ValueError("Field 'monthly_rent' cannot be negative")
        if self.rent_start_month < 0:
            raise ValueError("Field 'rent_start_month' cannot be negative")
        if not 0 <= self.tax_slab <= 1:
            raise ValueError("Tax slab must be between 0 and 1")
        if self.user_selected_regime is TaxRegime.SHORT_TERM:
            raise ValueError("Only the 'old' or 'new' regime can be selected")


@dataclass(frozen=True)
class AllocationRequest:
    """How the taxpayer intends to split the net proceeds of the sale.

    Bonds are capped by the planner; whatever is left after personal use and
    bonds goes to real estate when ``invest_real_estate`` is set.
    """

    personal_use: float = 0.0
    bonds: float = 0.0
    invest_real_estate: bool = True
    appreciation_rate: float = 0.08
    enable_rental: bool = False
    monthly_rent: float = 0.0
    rent_start_month: int = 0

    def __post_init__(self) -> None:
        for name in ("personal_use", "bonds", "monthly_rent", "rent_start_month"):
            if getattr(self, name) < 0:
                raise ValueError(f"Field '{name}' cannot be negative")
        if self.appreciation_rate <= -1:
            raise ValueError("Appreciation rate must be greater than -100%")


@dataclass(frozen=True)
class HoldingPeriod:
    months: int
    years: int
    is_long_term: bool

    @property
    def remainder_months(self) -> int:
        return self.months % 12


@dataclass(frozen=True)
class CIILookup:
    """Cost inflation index resolved for a date."""

    fiscal_year: int
    value: int
    estimated: bool = False


@dataclass(frozen=True)
class IndexedCost:
    """Acquisition and improvement costs scaled to the sale year's index."""

    purchase_cii: CIILookup
    sale_cii: CIILookup
    improvement_cii: CIILookup | None
    indexed_purchase_cost: int
    indexed_improvement_cost: float

    @property
    def total(self) -> float:
        return self.indexed_purchase_cost + self.indexed_improvement_cost


@dataclass(frozen=True)
class RegimeResult:
    regime: TaxRegime
    capital_gain: float
    tax_rate: float
    tax_before_cess: float
    cess: float
    total_tax: float
    net_proceeds: float
    indexed_cost: float | None = None


class RegimeState(str, Enum):
    MANDATORY_NEW = "mandatory_new"
    MANDATORY_OLD = "mandatory_old"
    CHOICE = "choice"
    SHORT_TERM = "short_term"


@dataclass(frozen=True)
class RegimeDecision:
    state: RegimeState
    can_choose: bool
    recommended: TaxRegime
    active_regime: TaxRegime
    mandatory_regime: TaxRegime | None = None
    user_selected: TaxRegime | None = None


@dataclass(frozen=True)
class BaselineComparison:
    """Outcome of paying the tax and parking the remainder at a fixed rate."""

    tax_paid: float
    invested_amount: float
    baseline_rate: float
    interest_earned: int
    tax_on_interest: int
    net_interest: int
    net_amount: float
    strategy_is_better: bool


@dataclass(frozen=True)
class ReturnProjection:
    investment_amount: float
    appreciation_rate: float
    projected_value: int
    capital_appreciation: float
    rental_enabled: bool
    monthly_rent: float
    rent_start_month: int
    rental_months: int
    rental_income: float
    total_returns: float
    annualized_return: float
    tax_slab: float
    tax_on_rental_income: int
    tax_on_appreciation: int
    total_tax_on_returns: int
    net_cash_in_hand: float
    baseline: BaselineComparison


@dataclass(frozen=True)
class BondProjection:
    principal: float
    interest_rate: float
    lock_in_years: int
    total_interest: int
    maturity_value: float
    tax_on_interest: int
    net_maturity_value: float


@dataclass(frozen=True, kw_only=True)
class _StrategyFields:
    section: str
    name: str
    description: str
    max_exemption: float
    investment_required: float
    tax_saved: float
    deadline: date
    lock_in_years: int
    notes: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True, kw_only=True)
class PropertyStrategy(_StrategyFields):
    """Reinvestment in a new house (Sections 54 and 54F)."""

    projection: ReturnProjection
    kind = "property"

    @property
    def projected_net_value(self) -> float:
        return self.projection.net_cash_in_hand


@dataclass(frozen=True, kw_only=True)
class BondStrategy(_StrategyFields):
    """Investment in specified long-term bonds (Section 54EC)."""

    projection: BondProjection
    kind = "bond"

    @property
    def projected_net_value(self) -> float:
        return self.projection.net_maturity_value


ExemptionStrategy = PropertyStrategy | BondStrategy


@dataclass(frozen=True)
class BondAllocation:
    amount: float
    projection: BondProjection


@dataclass(frozen=True)
class RealEstateAllocation:
    amount: float
    lock_in_years: int
    appreciation_rate: float
    projected_value: int
    capital_appreciation: float
    rental_months: int
    rental_income: float
    total_returns: float
    tax_on_rental_income: int
    tax_on_appreciation: int
    total_tax: int
    net_value: float


@dataclass(frozen=True)
class AllocationPlan:
    """Split of the sale's net proceeds across personal use, bonds and property."""

    net_proceeds: float
    max_bond_amount: float
    personal_use_amount: float
    bonds: BondAllocation
    real_estate: RealEstateAllocation
    unallocated: float
    total_projected_value: float


__all__ = [
    "AllocationPlan",
    "AllocationRequest",
    "AssetType",
    "BaselineComparison",
    "BondAllocation",
    "BondProjection",
    "BondStrategy",
    "CIILookup",
    "ExemptionStrategy",
    "HoldingPeriod",
    "IndexedCost",
    "IncomeContext",
    "ProjectionAssumptions",
    "PropertyStrategy",
    "RealEstateAllocation",
    "RegimeDecision",
    "RegimeResult",
    "RegimeState",
    "ReturnProjection",
    "TaxRegime",
]
