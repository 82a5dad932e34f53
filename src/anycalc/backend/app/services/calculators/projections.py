"""Forward projections for reinvestment strategies.

Property reinvestments compound at the assumed appreciation rate over the
lock-in and may earn rent; bonds earn simple interest. Both are compared
against paying the tax up front and parking the remainder at the baseline
rate.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import NamedTuple

from anycalc.backend.config.year_config import (
    IncomeTaxSlabsConfig,
    ProjectionConfig,
    TaxBracket,
)

from .domain import (
    AllocationPlan,
    AllocationRequest,
    BaselineComparison,
    BondAllocation,
    BondProjection,
    HoldingPeriod,
    ProjectionAssumptions,
    RealEstateAllocation,
    ReturnProjection,
    Transaction,
)
from .utils import cagr, calculate_additional_income_tax, round_currency


@dataclass(frozen=True)
class IncomeTaxPolicy:
    """Taxes projected income at the declared slab or on top of existing income.

    When ``taxable_income`` is known the extra income is walked across
    ``brackets``; otherwise it is taxed at the flat ``tax_slab`` with cess.
    """

    tax_slab: float
    cess_rate: float
    brackets: Sequence[TaxBracket] = ()
    taxable_income: float | None = None

    @classmethod
    def from_assumptions(
        cls,
        assumptions: ProjectionAssumptions,
        slabs: IncomeTaxSlabsConfig,
        cess_rate: float,
    ) -> IncomeTaxPolicy:
        context = assumptions.income_context
        if context is None:
            return cls(tax_slab=assumptions.tax_slab, cess_rate=cess_rate)
        return cls(
            tax_slab=assumptions.tax_slab,
            cess_rate=cess_rate,
            brackets=tuple(slabs.brackets_for(context.regime)),
            taxable_income=context.taxable_income,
        )

    def tax_on(self, amount: float) -> int:
        if amount <= 0:
            return 0
        if self.taxable_income is not None and self.brackets:
            return calculate_additional_income_tax(
                amount, self.taxable_income, self.brackets, self.cess_rate
            )
        return round_currency(amount * self.tax_slab * (1 + self.cess_rate))


class _PropertyGrowth(NamedTuple):
    projected_value: int
    capital_appreciation: float
    rental_months: int
    rental_income: float
    total_returns: float
    tax_on_rental_income: int
    tax_on_appreciation: int

    @property
    def total_tax(self) -> int:
        return self.tax_on_rental_income + self.tax_on_appreciation


def _grow_property(
    amount: float,
    lock_in_years: int,
    appreciation_rate: float,
    *,
    enable_rental: bool,
    monthly_rent: float,
    rent_start_month: int,
    appreciation_tax_rate: float,
    income_tax: IncomeTaxPolicy,
) -> _PropertyGrowth:
    projected_value = round_currency(amount * (1 + appreciation_rate) ** lock_in_years)
    capital_appreciation = projected_value - amount

    rental_months = max(0, lock_in_years * 12 - rent_start_month)
    rental_income = monthly_rent * rental_months if enable_rental else 0.0

    # Appreciation on the new asset is taxed as an unindexed long-term gain.
    tax_on_appreciation = 0
    if capital_appreciation > 0:
        tax_on_appreciation = round_currency(
            capital_appreciation * appreciation_tax_rate * (1 + income_tax.cess_rate)
        )

    return _PropertyGrowth(
        projected_value=projected_value,
        capital_appreciation=capital_appreciation,
        rental_months=rental_months,
        rental_income=rental_income,
        total_returns=capital_appreciation + rental_income,
        tax_on_rental_income=income_tax.tax_on(rental_income),
        tax_on_appreciation=tax_on_appreciation,
    )


def project_baseline(
    *,
    tax_paid: float,
    net_sale_consideration: float,
    lock_in_years: int,
    baseline_rate: float,
    income_tax: IncomeTaxPolicy,
    strategy_net_value: float,
) -> BaselineComparison:
    """Pay the tax and compound the remainder at ``baseline_rate``."""

    invested = net_sale_consideration - tax_paid
    interest = round_currency(invested * (1 + baseline_rate) ** lock_in_years - invested)
    tax_on_interest = income_tax.tax_on(interest)
    net_interest = interest - tax_on_interest
    net_amount = invested + net_interest
    return BaselineComparison(
        tax_paid=tax_paid,
        invested_amount=invested,
        baseline_rate=baseline_rate,
        interest_earned=interest,
        tax_on_interest=tax_on_interest,
        net_interest=net_interest,
        net_amount=net_amount,
        strategy_is_better=strategy_net_value > net_amount,
    )


def project_property_returns(
    investment: float,
    lock_in_years: int,
    assumptions: ProjectionAssumptions,
    policy: ProjectionConfig,
    income_tax: IncomeTaxPolicy,
    *,
    tax_paid: float,
    net_sale_consideration: float,
) -> ReturnProjection:
    """Project a property reinvestment over its lock-in period."""

    growth = _grow_property(
        investment,
        lock_in_years,
        assumptions.appreciation_rate,
        enable_rental=assumptions.enable_rental,
        monthly_rent=assumptions.monthly_rent,
        rent_start_month=assumptions.rent_start_month,
        appreciation_tax_rate=policy.appreciation_tax_rate,
        income_tax=income_tax,
    )
    net_cash_in_hand = investment + growth.total_returns - growth.total_tax

    return ReturnProjection(
        investment_amount=investment,
        appreciation_rate=assumptions.appreciation_rate,
        projected_value=growth.projected_value,
        capital_appreciation=growth.capital_appreciation,
        rental_enabled=assumptions.enable_rental,
        monthly_rent=assumptions.monthly_rent,
        rent_start_month=assumptions.rent_start_month,
        rental_months=growth.rental_months,
        rental_income=growth.rental_income,
        total_returns=growth.total_returns,
        annualized_return=cagr(
            investment, investment + growth.total_returns, lock_in_years
        ),
        tax_slab=income_tax.tax_slab,
        tax_on_rental_income=growth.tax_on_rental_income,
        tax_on_appreciation=growth.tax_on_appreciation,
        total_tax_on_returns=growth.total_tax,
        net_cash_in_hand=net_cash_in_hand,
        baseline=project_baseline(
            tax_paid=tax_paid,
            net_sale_consideration=net_sale_consideration,
            lock_in_years=lock_in_years,
            baseline_rate=policy.baseline_rate,
            income_tax=income_tax,
            strategy_net_value=net_cash_in_hand,
        ),
    )


def project_bond(
    principal: float,
    interest_rate: float,
    lock_in_years: int,
    income_tax: IncomeTaxPolicy,
) -> BondProjection:
    """Simple (non-compounding) interest on bonds held to maturity."""

    total_interest = round_currency(principal * interest_rate * lock_in_years)
    maturity_value = principal + total_interest
    tax_on_interest = income_tax.tax_on(total_interest)
    return BondProjection(
        principal=principal,
        interest_rate=interest_rate,
        lock_in_years=lock_in_years,
        total_interest=total_interest,
        maturity_value=maturity_value,
        tax_on_interest=tax_on_interest,
        net_maturity_value=maturity_value - tax_on_interest,
    )


def original_property_cagr(transaction: Transaction, holding: HoldingPeriod) -> float:
    """Annual growth of the sold property from acquisition cost to sale price."""

    return cagr(
        transaction.total_acquisition_cost,
        transaction.sale_price,
        holding.months / 12,
    )


def default_appreciation_rate(original_cagr: float, fallback: float) -> float:
    """Seed the projection with the sold property's own growth, to 0.1%."""

    if original_cagr > 0:
        return round(original_cagr, 3)
    return fallback


def plan_allocation(
    net_proceeds: float,
    request: AllocationRequest,
    *,
    bond_cap: float,
    bond_rate: float,
    bond_lock_in_years: int,
    policy: ProjectionConfig,
    income_tax: IncomeTaxPolicy,
) -> AllocationPlan:
    """Split ``net_proceeds`` between personal use, bonds and real estate.

    Personal use is taken first, bonds next (capped by the bond limit and
    what is left) and real estate receives the remainder.
    """

    available = max(0.0, net_proceeds)
    max_bond_amount = min(bond_cap, available)

    personal_use = min(request.personal_use, available)
    bonds_amount = min(request.bonds, max_bond_amount, available - personal_use)
    remaining = max(0.0, available - personal_use - bonds_amount)
    real_estate_amount = remaining if request.invest_real_estate else 0.0
    unallocated = available - personal_use - bonds_amount - real_estate_amount

    bond_projection = project_bond(
        bonds_amount, bond_rate, bond_lock_in_years, income_tax
    )

    lock_in_years = policy.reinvestment_lock_in_years
    growth = _grow_property(
        real_estate_amount,
        lock_in_years,
        request.appreciation_rate,
        enable_rental=request.enable_rental,
        monthly_rent=request.monthly_rent,
        rent_start_month=request.rent_start_month,
        appreciation_tax_rate=policy.appreciation_tax_rate,
        income_tax=income_tax,
    )
    real_estate_net = real_estate_amount + growth.total_returns - growth.total_tax

    return AllocationPlan(
        net_proceeds=net_proceeds,
        max_bond_amount=max_bond_amount,
        personal_use_amount=personal_use,
        bonds=BondAllocation(amount=bonds_amount, projection=bond_projection),
        real_estate=RealEstateAllocation(
            amount=real_estate_amount,
            lock_in_years=lock_in_years,
            appreciation_rate=request.appreciation_rate,
            projected_value=growth.projected_value,
            capital_appreciation=growth.capital_appreciation,
            rental_months=growth.rental_months,
            rental_income=growth.rental_income,
            total_returns=growth.total_returns,
            tax_on_rental_income=growth.tax_on_rental_income,
            tax_on_appreciation=growth.tax_on_appreciation,
            total_tax=growth.total_tax,
            net_value=real_estate_net,
        ),
        unallocated=unallocated,
        total_projected_value=(
            personal_use
            + bond_projection.net_maturity_value
            + real_estate_net
            + unallocated
        ),
    )


__all__ = [
    "IncomeTaxPolicy",
    "default_appreciation_rate",
    "original_property_cagr",
    "plan_allocation",
    "project_baseline",
    "project_bond",
    "project_property_returns",
]
