"""Reinvestment exemptions available against a long-term capital gain."""

from __future__ import annotations

from anycalc.backend.config.year_config import ExemptionSectionConfig, YearConfiguration

from .domain import (
    AssetType,
    BondStrategy,
    ExemptionStrategy,
    HoldingPeriod,
    ProjectionAssumptions,
    PropertyStrategy,
    RegimeResult,
    Transaction,
)
from .projections import IncomeTaxPolicy, project_bond, project_property_returns
from .utils import add_months, format_percentage, round_currency


def _tax_saved(exemption: float, active: RegimeResult, cess_rate: float) -> float:
    return exemption * active.tax_rate * (1 + cess_rate)


def _capped(gain: float, section: ExemptionSectionConfig) -> float:
    if section.cap is None:
        return gain
    return min(gain, section.cap)


def _property_strategy(
    code: str,
    section: ExemptionSectionConfig,
    *,
    max_exemption: float,
    investment: float,
    transaction: Transaction,
    active: RegimeResult,
    assumptions: ProjectionAssumptions,
    config: YearConfiguration,
    income_tax: IncomeTaxPolicy,
) -> PropertyStrategy:
    return PropertyStrategy(
        section=code,
        name=section.name,
        description=section.description,
        max_exemption=max_exemption,
        investment_required=investment,
        tax_saved=_tax_saved(max_exemption, active, config.cess_rate),
        deadline=add_months(transaction.sale_date, section.deadline_months),
        lock_in_years=section.lock_in_years,
        notes=tuple(section.notes),
        projection=project_property_returns(
            investment,
            section.lock_in_years,
            assumptions,
            config.projection,
            income_tax,
            tax_paid=active.total_tax,
            net_sale_consideration=transaction.net_sale_consideration,
        ),
    )


def plan_section_54(
    transaction: Transaction,
    gain: float,
    active: RegimeResult,
    assumptions: ProjectionAssumptions,
    config: YearConfiguration,
    income_tax: IncomeTaxPolicy,
) -> PropertyStrategy | None:
    """Reinvestment of a residential gain in another house."""

    if transaction.asset_type is not AssetType.RESIDENTIAL:
        return None
    section = config.exemptions.section_54
    exemption = _capped(gain, section)
    return _property_strategy(
        "54",
        section,
        max_exemption=exemption,
        investment=exemption,
        transaction=transaction,
        active=active,
        assumptions=assumptions,
        config=config,
        income_tax=income_tax,
    )


def plan_section_54ec(
    transaction: Transaction,
    gain: float,
    active: RegimeResult,
    config: YearConfiguration,
    income_tax: IncomeTaxPolicy,
) -> BondStrategy:
    """Investment of the gain in specified bonds; open to every asset type."""

    section = config.exemptions.section_54ec
    exemption = _capped(gain, section)
    if income_tax.taxable_income is None:
        interest_note = (
            f"Interest taxed at {format_percentage(income_tax.tax_slab)} (your slab rate)"
        )
    else:
        interest_note = "Interest taxed at your slab rates on top of existing income"

    return BondStrategy(
        section="54EC",
        name=section.name,
        description=section.description,
        max_exemption=exemption,
        investment_required=exemption,
        tax_saved=_tax_saved(exemption, active, config.cess_rate),
        deadline=add_months(transaction.sale_date, section.deadline_months),
        lock_in_years=section.lock_in_years,
        notes=(*section.notes, interest_note),
        projection=project_bond(
            exemption,
            section.interest_rate or 0.0,
            section.lock_in_years,
            income_tax,
        ),
    )


def plan_section_54f(
    transaction: Transaction,
    gain: float,
    active: RegimeResult,
    assumptions: ProjectionAssumptions,
    config: YearConfiguration,
    income_tax: IncomeTaxPolicy,
) -> PropertyStrategy | None:
    """Reinvestment of a non-residential gain in a house.

    The exemption is proportional to how much of the net consideration is
    reinvested; the full gain is exempt only when all of it is.
    """

    if transaction.asset_type is AssetType.RESIDENTIAL:
        return None
    section = config.exemptions.section_54f
    net_consideration = transaction.net_sale_consideration
    ratio = min(1.0, gain / net_consideration)
    exemption = _capped(round_currency(gain * ratio), section)
    return _property_strategy(
        "54F",
        section,
        max_exemption=exemption,
        investment=net_consideration,
        transaction=transaction,
        active=active,
        assumptions=assumptions,
        config=config,
        income_tax=income_tax,
    )


def rank_strategies(strategies: list[ExemptionStrategy]) -> list[ExemptionStrategy]:
    """Order by tax saved, then by projected net value, both descending."""

    return sorted(
        strategies,
        key=lambda strategy: (strategy.tax_saved, strategy.projected_net_value),
        reverse=True,
    )


def plan_exemptions(
    transaction: Transaction,
    holding: HoldingPeriod,
    active: RegimeResult,
    assumptions: ProjectionAssumptions,
    config: YearConfiguration,
    income_tax: IncomeTaxPolicy | None = None,
) -> list[ExemptionStrategy]:
    """Return the ranked strategies for the active regime's gain.

    Short-term holdings and non-positive gains yield an empty list.
    """

    gain = max(0.0, active.capital_gain)
    if not holding.is_long_term or gain <= 0:
        return []

    if income_tax is None:
        income_tax = IncomeTaxPolicy.from_assumptions(
            assumptions, config.income_tax_slabs, config.cess_rate
        )

    candidates = [
        plan_section_54(transaction, gain, active, assumptions, config, income_tax),
        plan_section_54ec(transaction, gain, active, config, income_tax),
        plan_section_54f(transaction, gain, active, assumptions, config, income_tax),
    ]
    return rank_strategies([strategy for strategy in candidates if strategy is not None])


__all__ = [
    "plan_exemptions",
    "plan_section_54",
    "plan_section_54ec",
    "plan_section_54f",
    "rank_strategies",
]
