"""Holding-period classification for immovable property."""

from __future__ import annotations

from datetime import date

from .domain import HoldingPeriod

LONG_TERM_THRESHOLD_MONTHS = 24


def elapsed_months(start: date, end: date) -> int:
    """Return the whole calendar months between ``start`` and ``end``.

    A month only counts once its day of month has been reached, so
    2020-01-15 to 2020-03-14 is one month.
    """

    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day < start.day:
        months -= 1
    return months


def classify_holding_period(
    purchase_date: date,
    sale_date: date,
    threshold_months: int = LONG_TERM_THRESHOLD_MONTHS,
) -> HoldingPeriod:
    """Classify the holding period between ``purchase_date`` and ``sale_date``."""

    if sale_date <= purchase_date:
        raise ValueError("Sale date must be after the purchase date")

    months = max(0, elapsed_months(purchase_date, sale_date))
    return HoldingPeriod(
        months=months,
        years=months // 12,
        is_long_term=months >= threshold_months,
    )


__all__ = ["LONG_TERM_THRESHOLD_MONTHS", "classify_holding_period", "elapsed_months"]
