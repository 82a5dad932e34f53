"""Capital gains calculators, from index lookup to ranked exemption strategies."""

from .exemptions import plan_exemptions
from .holding_period import classify_holding_period
from .indexation import IndexationTable, fiscal_year_for, index_cost
from .projections import (
    IncomeTaxPolicy,
    default_appreciation_rate,
    original_property_cagr,
    plan_allocation,
    project_bond,
    project_property_returns,
)
from .regime_selector import active_result, resolve_state, select_regime
from .regimes import calculate_regime_results, compute_indexed_cost
from .utils import cagr, format_percentage, marginal_rate, round_currency, round_rate

__all__ = [
    "IncomeTaxPolicy",
    "IndexationTable",
    "active_result",
    "cagr",
    "calculate_regime_results",
    "classify_holding_period",
    "compute_indexed_cost",
    "default_appreciation_rate",
    "fiscal_year_for",
    "format_percentage",
    "index_cost",
    "marginal_rate",
    "original_property_cagr",
    "plan_allocation",
    "plan_exemptions",
    "project_bond",
    "project_property_returns",
    "resolve_state",
    "round_currency",
    "round_rate",
    "select_regime",
]
