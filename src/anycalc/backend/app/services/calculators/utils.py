"""Utility helpers for calculator modules."""

from __future__ import annotations

import calendar
import math
from collections.abc import Sequence
from datetime import date

from anycalc.backend.config.year_config import TaxBracket


def format_percentage(value: float) -> str:
    """Return a human-readable percentage label for ``value``."""

    percentage = round(value * 100, 6)
    if float(int(percentage)) == percentage:
        return f"{int(percentage)}%"
    return f"{percentage:.2f}%"


def round_currency(value: float) -> int:
    """Round monetary amounts to whole currency units, halves away from below."""

    return int(math.floor(value + 0.5))


def round_rate(value: float) -> float:
    """Round rate values to four decimals."""

    return round(value, 4)


def cagr(begin: float, end: float, years: float) -> float:
    """Compound annual growth rate from ``begin`` to ``end`` over ``years``.

    Degenerate inputs return sentinels rather than ``NaN`` or ``inf``: ``0``
    when ``begin`` or ``years`` is not positive and ``-1`` (a total loss)
    when ``end`` is not positive.
    """

    if begin <= 0 or years <= 0:
        return 0.0
    if end <= 0:
        return -1.0
    return (end / begin) ** (1 / years) - 1


def add_months(start: date, months: int) -> date:
    """Return ``start`` shifted by ``months``, clamping to the month's last day."""

    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def marginal_rate(taxable_income: float, brackets: Sequence[TaxBracket]) -> float:
    """Return the slab rate applying to the next unit of income above ``taxable_income``."""

    for bracket in brackets:
        upper = bracket.upper_bound
        if upper is None or taxable_income < upper:
            return bracket.rate
    return brackets[-1].rate if brackets else 0.0


def calculate_additional_income_tax(
    additional_income: float,
    current_taxable_income: float,
    brackets: Sequence[TaxBracket],
    cess_rate: float,
) -> int:
    """Tax on ``additional_income`` stacked on top of ``current_taxable_income``.

    The extra income is split across the slabs it spills into. Each slab's
    share is rounded to a whole unit and cess is added (also rounded) on the
    summed tax.
    """

    if additional_income <= 0:
        return 0

    remaining = additional_income
    income_so_far = max(0.0, current_taxable_income)
    total = 0
    lower_bound = 0.0

    for bracket in brackets:
        if remaining <= 0:
            break
        upper = bracket.upper_bound
        if upper is not None and income_so_far >= upper:
            lower_bound = upper
            continue

        room = math.inf if upper is None else upper - max(income_so_far, lower_bound)
        portion = min(remaining, room)
        if portion > 0:
            total += round_currency(portion * bracket.rate)
            remaining -= portion
            income_so_far += portion
        lower_bound = upper if upper is not None else lower_bound

    return total + round_currency(total * cess_rate)


__all__ = [
    "add_months",
    "cagr",
    "calculate_additional_income_tax",
    "format_percentage",
    "marginal_rate",
    "round_currency",
    "round_rate",
]
