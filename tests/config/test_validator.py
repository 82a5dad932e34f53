from anycalc.backend.config.schema import CostInflationIndexEntry
from anycalc.backend.config.validator import (
    main,
    validate_all_years,
    validate_year_configuration,
)
from anycalc.backend.config.year_config import load_year_configuration


def test_current_configurations_are_valid() -> None:
    results = validate_all_years()
    assert all(not issues for issues in results.values()), results


def test_validator_flags_missing_index_years() -> None:
    config = load_year_configuration(2025)
    entries = [
        entry for entry in config.cost_inflation_index.entries if entry.year != 2010
    ]
    table = config.cost_inflation_index.model_copy(update={"entries": entries})
    broken = config.model_copy(update={"cost_inflation_index": table})

    errors = validate_year_configuration(broken)

    assert any("missing fiscal year(s) between 2009 and 2011" in error for error in errors)


def test_validator_flags_stale_index_table() -> None:
    config = load_year_configuration(2025)
    entries = list(config.cost_inflation_index.entries[:-2])
    entries.append(CostInflationIndexEntry(year=2025, value=376, estimate=True))
    table = config.cost_inflation_index.model_copy(update={"entries": entries})
    broken = config.model_copy(update={"cost_inflation_index": table})

    errors = validate_year_configuration(broken)

    assert any("latest notified fiscal year 2024 predates" in error for error in errors)


def test_validator_flags_inverted_regime_rates() -> None:
    config = load_year_configuration(2024)
    regimes = config.regimes.model_copy(update={"non_indexed_rate": 0.25})
    broken = config.model_copy(update={"regimes": regimes})

    errors = validate_year_configuration(broken)

    assert any(
        "regimes" in error and "should not exceed the indexed rate" in error
        for error in errors
    )


def test_validator_flags_invalid_bond_interest_rate() -> None:
    config = load_year_configuration(2024)
    section = config.exemptions.section_54ec.model_copy(update={"interest_rate": 1.5})
    exemptions = config.exemptions.model_copy(update={"section_54ec": section})
    broken = config.model_copy(update={"exemptions": exemptions})

    errors = validate_year_configuration(broken)

    assert any(
        "exemptions.section_54ec" in error and "between 0 and 1" in error
        for error in errors
    )


def test_validator_flags_decreasing_slab_rates() -> None:
    config = load_year_configuration(2025)
    slabs = config.income_tax_slabs
    reordered = list(slabs.new)
    reordered[1], reordered[2] = (
        reordered[1].model_copy(update={"rate": 0.10}),
        reordered[2].model_copy(update={"rate": 0.05}),
    )
    broken = config.model_copy(
        update={"income_tax_slabs": slabs.model_copy(update={"new": reordered})}
    )

    errors = validate_year_configuration(broken)

    assert any("income_tax_slabs.new" in error for error in errors)


def test_main_reports_success(capsys) -> None:
    exit_code = main(["2024", "2025"])

    output = capsys.readouterr().out
    assert exit_code == 0
    assert "[2024] OK" in output
    assert "[2025] OK" in output


def test_main_reports_unknown_year(capsys) -> None:
    exit_code = main(["1999"])

    output = capsys.readouterr().out
    assert exit_code == 1
    assert "[1999] failed to load configuration" in output
