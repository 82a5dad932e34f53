"""Utilities for validating rule-year configuration data and surfacing issues."""

from __future__ import annotations

import argparse
from datetime import date
from typing import Sequence

from .year_config import (
    CostInflationIndexConfig,
    ExemptionSectionConfig,
    IncomeTaxSlabsConfig,
    ProjectionConfig,
    RegimeConfig,
    YearConfiguration,
    available_years,
    load_year_configuration,
)

# Fiscal years ahead of the rule year that may still be covered by estimates.
_MAX_ESTIMATE_HORIZON = 2


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_rate(scope: str, label: str, value: float) -> list[str]:
    if value < 0 or value > 1:
        return [_format_scope(scope, f"{label} {value} must be between 0 and 1")]
    return []


def _validate_cost_inflation_index(
    year: int, table: CostInflationIndexConfig
) -> list[str]:
    errors: list[str] = []
    scope = "cost_inflation_index"

    base_entry = table.entries[0]
    if base_entry.value != 100:
        errors.append(
            _format_scope(
                scope,
                f"base year {base_entry.year} should carry index value 100, found {base_entry.value}",
            )
        )

    previous = None
    for entry in table.entries:
        if previous is not None and entry.year != previous.year + 1:
            errors.append(
                _format_scope(
                    scope,
                    f"missing fiscal year(s) between {previous.year} and {entry.year}",
                )
            )
        if previous is not None and previous.estimate and not entry.estimate:
            errors.append(
                _format_scope(
                    scope,
                    f"notified year {entry.year} follows an estimated row",
                )
            )
        previous = entry

    last_notified = max(
        (entry.year for entry in table.entries if not entry.estimate), default=None
    )
    if last_notified is None:
        errors.append(_format_scope(scope, "no notified (non-estimated) rows present"))
    elif last_notified < year:
        errors.append(
            _format_scope(
                scope,
                f"latest notified fiscal year {last_notified} predates rule year {year}",
            )
        )

    estimates = [entry.year for entry in table.entries if entry.estimate]
    if estimates and max(estimates) > year + _MAX_ESTIMATE_HORIZON:
        errors.append(
            _format_scope(
                scope,
                f"estimated rows extend beyond {year + _MAX_ESTIMATE_HORIZON}",
            )
        )

    return errors


def _validate_regimes(regimes: RegimeConfig) -> list[str]:
    errors: list[str] = []
    scope = "regimes"

    errors.extend(_validate_rate(scope, "indexed rate", regimes.indexed_rate))
    errors.extend(_validate_rate(scope, "non-indexed rate", regimes.non_indexed_rate))
    errors.extend(_validate_rate(scope, "short-term rate", regimes.short_term_rate))

    if regimes.non_indexed_rate > regimes.indexed_rate:
        errors.append(
            _format_scope(
                scope,
                "non-indexed rate should not exceed the indexed rate",
            )
        )
    if regimes.cutoff_date < date(2001, 4, 1):
        errors.append(_format_scope(scope, "cutoff date predates the index base year"))

    return errors


def _validate_section(scope: str, section: ExemptionSectionConfig) -> list[str]:
    errors: list[str] = []

    if not section.name.strip():
        errors.append(_format_scope(scope, "section name must not be empty"))
    if section.cap is not None and section.cap <= 0:
        errors.append(_format_scope(scope, "cap must be positive"))
    if section.deadline_months > 36:
        errors.append(
            _format_scope(scope, "deadline beyond 36 months is not supported")
        )
    if section.interest_rate is not None:
        errors.extend(_validate_rate(scope, "interest rate", section.interest_rate))

    return errors


def _validate_projection(projection: ProjectionConfig) -> list[str]:
    errors: list[str] = []
    scope = "projection"

    errors.extend(_validate_rate(scope, "baseline rate", projection.baseline_rate))
    errors.extend(
        _validate_rate(scope, "appreciation tax rate", projection.appreciation_tax_rate)
    )
    errors.extend(_validate_rate(scope, "default tax slab", projection.default_tax_slab))

    if projection.default_appreciation_rate <= -1:
        errors.append(
            _format_scope(scope, "default appreciation rate must exceed -100%")
        )

    return errors


def _validate_slabs(slabs: IncomeTaxSlabsConfig) -> list[str]:
    errors: list[str] = []

    for regime, brackets in (("new", slabs.new), ("old", slabs.old)):
        scope = f"income_tax_slabs.{regime}"
        previous_rate = None
        for bracket in brackets:
            errors.extend(_validate_rate(scope, "slab rate", bracket.rate))
            if previous_rate is not None and bracket.rate < previous_rate:
                errors.append(
                    _format_scope(scope, "slab rates should not decrease")
                )
            previous_rate = bracket.rate

    return errors


def validate_year_configuration(config: YearConfiguration) -> list[str]:
    """Return human-readable issues detected for ``config``."""

    errors: list[str] = []

    errors.extend(_validate_rate("cess_rate", "cess rate", config.cess_rate))
    errors.extend(_validate_cost_inflation_index(config.year, config.cost_inflation_index))
    errors.extend(_validate_regimes(config.regimes))
    errors.extend(_validate_section("exemptions.section_54", config.exemptions.section_54))
    errors.extend(
        _validate_section("exemptions.section_54ec", config.exemptions.section_54ec)
    )
    errors.extend(_validate_section("exemptions.section_54f", config.exemptions.section_54f))
    errors.extend(_validate_projection(config.projection))
    errors.extend(_validate_slabs(config.income_tax_slabs))

    return errors


def validate_all_years(years: Sequence[int] | None = None) -> dict[int, list[str]]:
    """Validate all configured years and return issues keyed by year."""

    targets = years or available_years()
    results: dict[int, list[str]] = {}

    for year in targets:
        config = load_year_configuration(year)
        results[int(year)] = validate_year_configuration(config)

    return results


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Validate configured rule years and report issues helpful to contributors."
        )
    )
    parser.add_argument(
        "years",
        nargs="*",
        type=int,
        help="Specific years to validate (defaults to all configured years)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)
    years = args.years or available_years()

    if not years:
        parser.print_help()
        return 1

    exit_code = 0

    for year in years:
        try:
            config = load_year_configuration(year)
        except FileNotFoundError as error:
            print(f"[{year}] failed to load configuration: {error}")
            exit_code = 1
            continue

        issues = validate_year_configuration(config)
        if issues:
            exit_code = 1
            print(f"[{year}] {len(issues)} issue(s) detected:")
            for issue in issues:
                print(f"  - {issue}")
        else:
            print(f"[{year}] OK")

    return exit_code


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
