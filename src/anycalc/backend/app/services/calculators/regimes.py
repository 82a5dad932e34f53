"""Capital gain and tax liability under each statutory regime."""

from __future__ import annotations

from anycalc.backend.config.year_config import RegimeConfig

from .domain import (
    HoldingPeriod,
    IndexedCost,
    RegimeResult,
    TaxRegime,
    Transaction,
)
from .indexation import IndexationTable, index_cost


def compute_indexed_cost(transaction: Transaction, table: IndexationTable) -> IndexedCost:
    """Scale acquisition and improvement costs to the sale year's index.

    The improvement is indexed from its own fiscal year; without an
    improvement date it is carried at cost.
    """

    purchase_cii = table.lookup(transaction.purchase_date)
    sale_cii = table.lookup(transaction.sale_date)

    indexed_purchase = index_cost(
        transaction.total_acquisition_cost, purchase_cii.value, sale_cii.value
    )

    improvement_cii = None
    indexed_improvement: float = transaction.improvement_cost
    if transaction.improvement_cost > 0 and transaction.improvement_date is not None:
        improvement_cii = table.lookup(transaction.improvement_date)
        indexed_improvement = index_cost(
            transaction.improvement_cost, improvement_cii.value, sale_cii.value
        )

    return IndexedCost(
        purchase_cii=purchase_cii,
        sale_cii=sale_cii,
        improvement_cii=improvement_cii,
        indexed_purchase_cost=indexed_purchase,
        indexed_improvement_cost=indexed_improvement,
    )


def _build_result(
    regime: TaxRegime,
    transaction: Transaction,
    capital_gain: float,
    rate: float,
    cess_rate: float,
    *,
    indexed_cost: float | None = None,
) -> RegimeResult:
    taxable = max(0.0, capital_gain)
    tax_before_cess = taxable * rate
    total_tax = taxable * rate * (1 + cess_rate)
    return RegimeResult(
        regime=regime,
        capital_gain=capital_gain,
        tax_rate=rate,
        tax_before_cess=tax_before_cess,
        cess=total_tax - tax_before_cess,
        total_tax=total_tax,
        net_proceeds=transaction.net_sale_consideration - total_tax,
        indexed_cost=indexed_cost,
    )


def _unindexed_gain(transaction: Transaction) -> float:
    return (
        transaction.net_sale_consideration
        - transaction.total_acquisition_cost
        - transaction.improvement_cost
    )


def calculate_indexed_regime(
    transaction: Transaction,
    indexed: IndexedCost,
    rate: float,
    cess_rate: float,
) -> RegimeResult:
    """Old regime: indexed cost of acquisition at the higher rate."""

    gain = transaction.net_sale_consideration - indexed.total
    return _build_result(
        TaxRegime.OLD, transaction, gain, rate, cess_rate, indexed_cost=indexed.total
    )


def calculate_non_indexed_regime(
    transaction: Transaction, rate: float, cess_rate: float
) -> RegimeResult:
    """New regime: historical cost at the lower rate."""

    return _build_result(
        TaxRegime.NEW, transaction, _unindexed_gain(transaction), rate, cess_rate
    )


def calculate_short_term(
    transaction: Transaction, rate: float, cess_rate: float
) -> RegimeResult:
    """Short-term gains are taxed once at the flat slab rate, never indexed."""

    return _build_result(
        TaxRegime.SHORT_TERM, transaction, _unindexed_gain(transaction), rate, cess_rate
    )


def calculate_regime_results(
    transaction: Transaction,
    holding: HoldingPeriod,
    indexed: IndexedCost,
    config: RegimeConfig,
    cess_rate: float,
) -> tuple[RegimeResult, ...]:
    """Return ``(old, new)`` for long-term holdings and ``(short_term,)`` otherwise."""

    if not holding.is_long_term:
        return (calculate_short_term(transaction, config.short_term_rate, cess_rate),)

    return (
        calculate_indexed_regime(transaction, indexed, config.indexed_rate, cess_rate),
        calculate_non_indexed_regime(transaction, config.non_indexed_rate, cess_rate),
    )


__all__ = [
    "calculate_indexed_regime",
    "calculate_non_indexed_regime",
    "calculate_regime_results",
    "calculate_short_term",
    "compute_indexed_cost",
]
