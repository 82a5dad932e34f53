"""Unit tests for reinvestment exemption planning and ranking."""

from __future__ import annotations

from datetime import date
from typing import Any

import pytest

from anycalc.backend.app.services.calculators import (
    IncomeTaxPolicy,
    IndexationTable,
    calculate_regime_results,
    classify_holding_period,
    compute_indexed_cost,
    plan_exemptions,
)
from anycalc.backend.app.services.calculators.domain import (
    AssetType,
    BondStrategy,
    HoldingPeriod,
    IncomeContext,
    ProjectionAssumptions,
    PropertyStrategy,
    RegimeResult,
    TaxRegime,
    Transaction,
)
from anycalc.backend.app.services.calculators.exemptions import (
    plan_section_54ec,
    rank_strategies,
)
from anycalc.backend.config.year_config import YearConfiguration, load_year_configuration

ASSUMPTIONS = ProjectionAssumptions(appreciation_rate=0.038, tax_slab=0.30)


@pytest.fixture()
def config() -> YearConfiguration:
    return load_year_configuration(2025)


def build_transaction(**overrides: Any) -> Transaction:
    fields: dict[str, Any] = {
        "asset_type": AssetType.RESIDENTIAL,
        "purchase_date": date(2015, 1, 1),
        "sale_date": date(2026, 1, 1),
        "purchase_price": 5_000_000,
        "stamp_duty": 300_000,
        "sale_price": 8_000_000,
        "brokerage": 80_000,
        "legal_fees": 20_000,
    }
    fields.update(overrides)
    return Transaction(**fields)


def evaluate(
    transaction: Transaction, config: YearConfiguration
) -> tuple[HoldingPeriod, dict[TaxRegime, RegimeResult]]:
    holding = classify_holding_period(transaction.purchase_date, transaction.sale_date)
    indexed = compute_indexed_cost(
        transaction, IndexationTable.from_config(config.cost_inflation_index)
    )
    results = calculate_regime_results(
        transaction, holding, indexed, config.regimes, config.cess_rate
    )
    return holding, {result.regime: result for result in results}


def test_residential_gain_offers_sections_54_and_54ec(config: YearConfiguration) -> None:
    transaction = build_transaction()
    holding, results = evaluate(transaction, config)

    strategies = plan_exemptions(
        transaction, holding, results[TaxRegime.NEW], ASSUMPTIONS, config
    )

    assert [strategy.section for strategy in strategies] == ["54EC", "54"]

    bonds, house = strategies
    assert isinstance(bonds, BondStrategy)
    assert bonds.kind == "bond"
    assert bonds.max_exemption == 2_600_000
    assert bonds.tax_saved == pytest.approx(338_000)
    assert bonds.deadline == date(2026, 7, 1)
    assert bonds.lock_in_years == 5
    assert bonds.projection.total_interest == 682_500
    assert bonds.projection.tax_on_interest == 212_940
    assert bonds.projected_net_value == 3_069_560
    assert bonds.notes[-1] == "Interest taxed at 30% (your slab rate)"

    assert isinstance(house, PropertyStrategy)
    assert house.kind == "property"
    assert house.max_exemption == 2_600_000
    assert house.investment_required == 2_600_000
    assert house.deadline == date(2028, 1, 1)
    assert house.projection.projected_value == 2_907_806
    assert house.projected_net_value == 2_867_791
    assert house.projection.baseline.net_amount == 8_913_192


def test_negative_active_gain_yields_no_strategies(config: YearConfiguration) -> None:
    transaction = build_transaction()
    holding, results = evaluate(transaction, config)

    assert results[TaxRegime.OLD].capital_gain < 0
    assert plan_exemptions(
        transaction, holding, results[TaxRegime.OLD], ASSUMPTIONS, config
    ) == []


def test_short_term_sale_yields_no_strategies(config: YearConfiguration) -> None:
    transaction = build_transaction(
        purchase_date=date(2024, 1, 10), sale_date=date(2025, 6, 9)
    )
    holding, results = evaluate(transaction, config)

    assert plan_exemptions(
        transaction, holding, results[TaxRegime.SHORT_TERM], ASSUMPTIONS, config
    ) == []


def test_commercial_gain_offers_54ec_and_proportional_54f(
    config: YearConfiguration,
) -> None:
    transaction = build_transaction(
        asset_type=AssetType.COMMERCIAL,
        purchase_date=date(2024, 8, 1),
        sale_date=date(2026, 9, 1),
        purchase_price=10_000_000,
        stamp_duty=0,
        sale_price=12_000_000,
        brokerage=0,
        legal_fees=0,
    )
    holding, results = evaluate(transaction, config)

    strategies = plan_exemptions(
        transaction, holding, results[TaxRegime.NEW], ASSUMPTIONS, config
    )

    assert [strategy.section for strategy in strategies] == ["54EC", "54F"]
    section_54f = strategies[1]
    # 2,000,000 gain scaled by 2,000,000 / 12,000,000
    assert section_54f.max_exemption == 333_333
    assert section_54f.investment_required == 12_000_000
    assert section_54f.tax_saved == pytest.approx(43_333.29)
    assert section_54f.max_exemption <= results[TaxRegime.NEW].capital_gain


def test_caps_limit_exemptions_and_ranking_follows_tax_saved(
    config: YearConfiguration,
) -> None:
    transaction = build_transaction(
        asset_type=AssetType.LAND,
        purchase_price=1_000_000,
        stamp_duty=0,
        sale_price=11_000_000,
        brokerage=0,
        legal_fees=0,
    )
    holding, results = evaluate(transaction, config)
    active = results[TaxRegime.NEW]

    strategies = plan_exemptions(transaction, holding, active, ASSUMPTIONS, config)

    assert active.capital_gain == 10_000_000
    assert [strategy.section for strategy in strategies] == ["54F", "54EC"]
    assert strategies[0].max_exemption == 9_090_909
    assert strategies[1].max_exemption == 5_000_000
    for strategy in strategies:
        assert strategy.max_exemption <= active.capital_gain
        assert strategy.tax_saved >= 0


def test_54ec_note_mentions_existing_income_when_known(config: YearConfiguration) -> None:
    transaction = build_transaction()
    _, results = evaluate(transaction, config)
    income_tax = IncomeTaxPolicy.from_assumptions(
        ProjectionAssumptions(
            tax_slab=0.20,
            income_context=IncomeContext(taxable_income=1_300_000),
        ),
        config.income_tax_slabs,
        config.cess_rate,
    )

    strategy = plan_section_54ec(
        transaction, 2_600_000, results[TaxRegime.NEW], config, income_tax
    )

    assert strategy.notes[-1] == "Interest taxed at your slab rates on top of existing income"
    # 200,000 at 20% then 482,500 at 30%, plus cess
    assert strategy.projection.tax_on_interest == 192_140


def test_rank_strategies_breaks_ties_on_projected_value(config: YearConfiguration) -> None:
    transaction = build_transaction()
    holding, results = evaluate(transaction, config)
    strategies = plan_exemptions(
        transaction, holding, results[TaxRegime.NEW], ASSUMPTIONS, config
    )

    reranked = rank_strategies(list(reversed(strategies)))

    assert [strategy.section for strategy in reranked] == ["54EC", "54"]
    assert reranked[0].tax_saved == reranked[1].tax_saved
