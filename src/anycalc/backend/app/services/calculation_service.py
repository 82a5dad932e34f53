"""Orchestrate request validation, rule loading and the capital gains pipeline.

Each calculator module handles one step (holding period, indexation, regime
tax, selection, exemptions, projections); this module wires them together in
the order the data flows and serialises the result. Profiling hooks and
request validation live here to give the rest of the application a single
``calculate_capital_gains`` entry point.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from contextlib import contextmanager
from functools import lru_cache
from time import perf_counter
from typing import Any

from pydantic import ValidationError

from anycalc.backend.app.models import (
    AssumptionsInput,
    CalculationRequest,
    CalculationResponse,
    format_validation_error,
)
from anycalc.backend.config.year_config import (
    YearConfiguration,
    default_year,
    load_year_configuration,
)

from .calculators import (
    IncomeTaxPolicy,
    IndexationTable,
    active_result,
    calculate_regime_results,
    classify_holding_period,
    compute_indexed_cost,
    default_appreciation_rate,
    marginal_rate,
    original_property_cagr,
    plan_allocation,
    plan_exemptions,
    resolve_state,
    round_currency,
    round_rate,
    select_regime,
)
from .calculators.domain import (
    AllocationPlan,
    AllocationRequest,
    BaselineComparison,
    BondProjection,
    BondStrategy,
    CIILookup,
    ExemptionStrategy,
    HoldingPeriod,
    IncomeContext,
    IndexedCost,
    ProjectionAssumptions,
    RegimeDecision,
    RegimeResult,
    ReturnProjection,
    TaxRegime,
    Transaction,
)

_LOGGER = logging.getLogger(__name__)


def _profiling_enabled() -> bool:
    """Return ``True`` when calculation profiling should be captured."""

    flag = os.getenv("ANYCALC_PROFILE_CALCULATIONS", "")
    return flag.strip().lower() in {"1", "true", "yes", "on"}


@contextmanager
def _profile_section(name: str, store: dict[str, float] | None):
    """Capture the duration of a named section when profiling is enabled."""

    if store is None:
        yield
        return

    start = perf_counter()
    try:
        yield
    finally:
        store[name] = perf_counter() - start


@lru_cache(maxsize=8)
def _indexation_table(year: int) -> IndexationTable:
    return IndexationTable.from_config(
        load_year_configuration(year).cost_inflation_index
    )


def _validate_request(payload: Mapping[str, Any] | CalculationRequest) -> CalculationRequest:
    if isinstance(payload, CalculationRequest):
        data: Any = payload.model_dump(mode="python")
    else:
        if not isinstance(payload, Mapping):
            raise ValueError("Payload must be a mapping")
        if "transaction" not in payload:
            raise ValueError("Payload must include a transaction")
        data = payload

    try:
        return CalculationRequest.model_validate(data)
    except ValidationError as exc:
        raise ValueError(format_validation_error(exc)) from exc


def _resolve_assumptions(
    raw: AssumptionsInput,
    config: YearConfiguration,
    original_cagr: float,
) -> ProjectionAssumptions:
    """Fill omitted assumptions from the rule year and the sold property."""

    context = None
    if raw.income_context is not None:
        context = IncomeContext(
            taxable_income=raw.income_context.taxable_income,
            regime=raw.income_context.regime,
        )

    appreciation_rate = raw.appreciation_rate
    if appreciation_rate is None:
        appreciation_rate = default_appreciation_rate(
            original_cagr, config.projection.default_appreciation_rate
        )

    tax_slab = raw.tax_slab
    if tax_slab is None:
        if context is not None:
            tax_slab = marginal_rate(
                context.taxable_income,
                config.income_tax_slabs.brackets_for(context.regime),
            )
        else:
            tax_slab = config.projection.default_tax_slab

    user_selected = None
    if raw.user_selected_regime is not None:
        user_selected = TaxRegime(raw.user_selected_regime)

    return ProjectionAssumptions(
        appreciation_rate=appreciation_rate,
        enable_rental=raw.enable_rental,
        monthly_rent=raw.monthly_rent,
        rent_start_month=raw.rent_start_month,
        tax_slab=tax_slab,
        user_selected_regime=user_selected,
        income_context=context,
    )


def _serialise_lookup(lookup: CIILookup) -> dict[str, Any]:
    return {
        "fiscal_year": lookup.fiscal_year,
        "value": lookup.value,
        "estimated": lookup.estimated,
    }


def _serialise_indexed_cost(indexed: IndexedCost) -> dict[str, Any]:
    return {
        "purchase": _serialise_lookup(indexed.purchase_cii),
        "sale": _serialise_lookup(indexed.sale_cii),
        "improvement": (
            _serialise_lookup(indexed.improvement_cii)
            if indexed.improvement_cii is not None
            else None
        ),
        "indexed_purchase_cost": indexed.indexed_purchase_cost,
        "indexed_improvement_cost": round_currency(indexed.indexed_improvement_cost),
        "indexed_cost": round_currency(indexed.total),
    }


def _serialise_holding(holding: HoldingPeriod, threshold: int) -> dict[str, Any]:
    return {
        "months": holding.months,
        "years": holding.years,
        "remainder_months": holding.remainder_months,
        "is_long_term": holding.is_long_term,
        "threshold_months": threshold,
    }


def _serialise_result(result: RegimeResult) -> dict[str, Any]:
    return {
        "regime": result.regime.value,
        "capital_gain": round_currency(result.capital_gain),
        "tax_rate": round_rate(result.tax_rate),
        "tax_before_cess": round_currency(result.tax_before_cess),
        "cess": round_currency(result.cess),
        "total_tax": round_currency(result.total_tax),
        "net_proceeds": round_currency(result.net_proceeds),
        "indexed_cost": (
            round_currency(result.indexed_cost) if result.indexed_cost is not None else None
        ),
    }


def _serialise_decision(decision: RegimeDecision) -> dict[str, Any]:
    return {
        "state": decision.state.value,
        "can_choose": decision.can_choose,
        "recommended": decision.recommended.value,
        "active_regime": decision.active_regime.value,
        "mandatory_regime": (
            decision.mandatory_regime.value if decision.mandatory_regime else None
        ),
        "user_selected": decision.user_selected.value if decision.user_selected else None,
    }


def _serialise_baseline(baseline: BaselineComparison) -> dict[str, Any]:
    return {
        "tax_paid": round_currency(baseline.tax_paid),
        "invested_amount": round_currency(baseline.invested_amount),
        "baseline_rate": round_rate(baseline.baseline_rate),
        "interest_earned": baseline.interest_earned,
        "tax_on_interest": baseline.tax_on_interest,
        "net_interest": baseline.net_interest,
        "net_amount": round_currency(baseline.net_amount),
        "strategy_is_better": baseline.strategy_is_better,
    }


def _serialise_property_projection(projection: ReturnProjection) -> dict[str, Any]:
    return {
        "investment_amount": round_currency(projection.investment_amount),
        "appreciation_rate": round_rate(projection.appreciation_rate),
        "projected_value": projection.projected_value,
        "capital_appreciation": round_currency(projection.capital_appreciation),
        "rental_enabled": projection.rental_enabled,
        "monthly_rent": round_currency(projection.monthly_rent),
        "rent_start_month": projection.rent_start_month,
        "rental_months": projection.rental_months,
        "rental_income": round_currency(projection.rental_income),
        "total_returns": round_currency(projection.total_returns),
        "annualized_return": round_rate(projection.annualized_return),
        "tax_slab": round_rate(projection.tax_slab),
        "tax_on_rental_income": projection.tax_on_rental_income,
        "tax_on_appreciation": projection.tax_on_appreciation,
        "total_tax_on_returns": projection.total_tax_on_returns,
        "net_cash_in_hand": round_currency(projection.net_cash_in_hand),
        "baseline": _serialise_baseline(projection.baseline),
    }


def _serialise_bond_projection(projection: BondProjection) -> dict[str, Any]:
    return {
        "principal": round_currency(projection.principal),
        "interest_rate": round_rate(projection.interest_rate),
        "lock_in_years": projection.lock_in_years,
        "total_interest": projection.total_interest,
        "maturity_value": round_currency(projection.maturity_value),
        "tax_on_interest": projection.tax_on_interest,
        "net_maturity_value": round_currency(projection.net_maturity_value),
    }


def _serialise_strategy(strategy: ExemptionStrategy) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "kind": strategy.kind,
        "section": strategy.section,
        "name": strategy.name,
        "description": strategy.description,
        "max_exemption": round_currency(strategy.max_exemption),
        "investment_required": round_currency(strategy.investment_required),
        "tax_saved": round_currency(strategy.tax_saved),
        "deadline": strategy.deadline,
        "lock_in_years": strategy.lock_in_years,
        "notes": list(strategy.notes),
        "projected_net_value": round_currency(strategy.projected_net_value),
    }
    if isinstance(strategy, BondStrategy):
        entry["bond_projection"] = _serialise_bond_projection(strategy.projection)
    else:
        entry["property_projection"] = _serialise_property_projection(strategy.projection)
    return entry


def _serialise_allocation(plan: AllocationPlan) -> dict[str, Any]:
    real_estate = plan.real_estate
    return {
        "net_proceeds": round_currency(plan.net_proceeds),
        "max_bond_amount": round_currency(plan.max_bond_amount),
        "personal_use_amount": round_currency(plan.personal_use_amount),
        "bonds": {
            "amount": round_currency(plan.bonds.amount),
            "projection": _serialise_bond_projection(plan.bonds.projection),
        },
        "real_estate": {
            "amount": round_currency(real_estate.amount),
            "lock_in_years": real_estate.lock_in_years,
            "appreciation_rate": round_rate(real_estate.appreciation_rate),
            "projected_value": real_estate.projected_value,
            "capital_appreciation": round_currency(real_estate.capital_appreciation),
            "rental_months": real_estate.rental_months,
            "rental_income": round_currency(real_estate.rental_income),
            "total_returns": round_currency(real_estate.total_returns),
            "tax_on_rental_income": real_estate.tax_on_rental_income,
            "tax_on_appreciation": real_estate.tax_on_appreciation,
            "total_tax": real_estate.total_tax,
            "net_value": round_currency(real_estate.net_value),
        },
        "unallocated": round_currency(plan.unallocated),
        "total_projected_value": round_currency(plan.total_projected_value),
    }


def calculate_capital_gains(
    payload: Mapping[str, Any] | CalculationRequest,
) -> dict[str, Any]:
    """Compute regime results, exemption strategies and projections for ``payload``."""

    request_model = _validate_request(payload)

    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    overall_start = perf_counter() if timings is not None else None

    year = request_model.year if request_model.year is not None else default_year()
    config: YearConfiguration = load_year_configuration(year)

    transaction = Transaction(**request_model.transaction.model_dump())
    threshold = config.holding.long_term_threshold_months

    with _profile_section("holding_period", timings):
        holding = classify_holding_period(
            transaction.purchase_date, transaction.sale_date, threshold
        )

    with _profile_section("indexation", timings):
        indexed = compute_indexed_cost(transaction, _indexation_table(year))

    with _profile_section("regimes", timings):
        results = calculate_regime_results(
            transaction, holding, indexed, config.regimes, config.cess_rate
        )

    original_cagr = original_property_cagr(transaction, holding)
    assumptions = _resolve_assumptions(request_model.assumptions, config, original_cagr)

    with _profile_section("regime_selection", timings):
        cutoff_date = config.regimes.cutoff_date
        state = resolve_state(transaction.purchase_date, holding, cutoff_date)
        decision = select_regime(
            results,
            state,
            assumptions.user_selected_regime,
            acquired_after_cutoff=transaction.purchase_date >= cutoff_date,
        )
        active = active_result(results, decision)

    income_tax = IncomeTaxPolicy.from_assumptions(
        assumptions, config.income_tax_slabs, config.cess_rate
    )

    with _profile_section("exemptions", timings):
        strategies = plan_exemptions(
            transaction, holding, active, assumptions, config, income_tax
        )

    allocation_payload: dict[str, Any] | None = None
    if request_model.allocation is not None:
        raw_allocation = request_model.allocation
        bonds_section = config.exemptions.section_54ec
        with _profile_section("allocation", timings):
            plan = plan_allocation(
                active.net_proceeds,
                AllocationRequest(
                    personal_use=raw_allocation.personal_use,
                    bonds=raw_allocation.bonds,
                    invest_real_estate=raw_allocation.invest_real_estate,
                    appreciation_rate=(
                        raw_allocation.appreciation_rate
                        if raw_allocation.appreciation_rate is not None
                        else assumptions.appreciation_rate
                    ),
                    enable_rental=raw_allocation.enable_rental,
                    monthly_rent=raw_allocation.monthly_rent,
                    rent_start_month=raw_allocation.rent_start_month,
                ),
                bond_cap=bonds_section.cap or 0.0,
                bond_rate=bonds_section.interest_rate or 0.0,
                bond_lock_in_years=bonds_section.lock_in_years,
                policy=config.projection,
                income_tax=income_tax,
            )
        allocation_payload = _serialise_allocation(plan)

    if timings is not None and overall_start is not None:
        timings["total"] = perf_counter() - overall_start
        _LOGGER.debug(
            "calculate_capital_gains timings (ms): %s",
            {name: round(duration * 1000, 3) for name, duration in timings.items()},
        )

    lookups = [indexed.purchase_cii, indexed.sale_cii]
    if indexed.improvement_cii is not None:
        lookups.append(indexed.improvement_cii)

    meta_payload: dict[str, Any] = {
        "year": config.year,
        "asset_type": transaction.asset_type.value,
        "total_acquisition_cost": round_currency(transaction.total_acquisition_cost),
        "transfer_expenses": round_currency(transaction.transfer_expenses),
        "net_sale_consideration": round_currency(transaction.net_sale_consideration),
        "original_property_cagr": round_rate(original_cagr),
        "appreciation_rate": round_rate(assumptions.appreciation_rate),
        "tax_slab": round_rate(assumptions.tax_slab),
        "cess_rate": round_rate(config.cess_rate),
        "uses_estimated_index": any(lookup.estimated for lookup in lookups),
    }

    response_model = CalculationResponse.model_validate(
        {
            "holding_period": _serialise_holding(holding, threshold),
            "cost_inflation_index": _serialise_indexed_cost(indexed),
            "regime_results": [_serialise_result(result) for result in results],
            "regime_decision": _serialise_decision(decision),
            "active_result": _serialise_result(active),
            "strategies": [_serialise_strategy(strategy) for strategy in strategies],
            "allocation": allocation_payload,
            "meta": meta_payload,
        }
    )

    return response_model.model_dump(mode="json", exclude_none=True)


__all__ = ["calculate_capital_gains"]
