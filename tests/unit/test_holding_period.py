"""Unit tests for holding-period classification."""

from __future__ import annotations

from datetime import date

import pytest

from anycalc.backend.app.services.calculators.holding_period import (
    classify_holding_period,
    elapsed_months,
)


def test_elapsed_months_ignores_incomplete_final_month() -> None:
    """A month only counts once its day of month has been reached."""

    assert elapsed_months(date(2020, 1, 15), date(2020, 3, 14)) == 1
    assert elapsed_months(date(2020, 1, 15), date(2020, 3, 15)) == 2


def test_exactly_twenty_four_months_is_long_term() -> None:
    holding = classify_holding_period(date(2022, 1, 15), date(2024, 1, 15))

    assert holding.months == 24
    assert holding.years == 2
    assert holding.remainder_months == 0
    assert holding.is_long_term is True


def test_one_day_short_of_threshold_is_short_term() -> None:
    holding = classify_holding_period(date(2022, 1, 15), date(2024, 1, 14))

    assert holding.months == 23
    assert holding.is_long_term is False


def test_twenty_three_months_and_change_is_short_term() -> None:
    """23 months and 29 days still falls below the long-term threshold."""

    holding = classify_holding_period(date(2022, 1, 1), date(2023, 12, 30))

    assert holding.months == 23
    assert holding.is_long_term is False


def test_years_and_remainder_split() -> None:
    holding = classify_holding_period(date(2015, 1, 1), date(2026, 3, 1))

    assert holding.months == 134
    assert holding.years == 11
    assert holding.remainder_months == 2


def test_custom_threshold_is_honoured() -> None:
    holding = classify_holding_period(date(2023, 1, 1), date(2024, 1, 1), 12)

    assert holding.is_long_term is True


@pytest.mark.parametrize(
    "purchase, sale",
    [
        (date(2024, 1, 1), date(2024, 1, 1)),
        (date(2024, 6, 1), date(2023, 6, 1)),
    ],
)
def test_sale_must_follow_purchase(purchase: date, sale: date) -> None:
    with pytest.raises(ValueError, match="Sale date must be after"):
        classify_holding_period(purchase, sale)
