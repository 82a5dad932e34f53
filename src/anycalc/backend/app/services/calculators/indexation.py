"""Cost inflation index lookups and indexed-cost arithmetic."""

from __future__ import annotations

import logging
from bisect import bisect_right
from collections.abc import Mapping
from datetime import date

from anycalc.backend.config.year_config import CostInflationIndexConfig

from .domain import CIILookup
from .utils import round_currency

_LOGGER = logging.getLogger(__name__)

# Fiscal years start on April 1st.
FISCAL_YEAR_START_MONTH = 4


def fiscal_year_for(value: date) -> int:
    """Return the calendar year in which ``value``'s fiscal year started."""

    return value.year if value.month >= FISCAL_YEAR_START_MONTH else value.year - 1


class IndexationTable:
    """Read-only fiscal year to CII mapping with forward-fill lookups."""

    def __init__(
        self,
        values: Mapping[int, int],
        *,
        estimated_years: frozenset[int] = frozenset(),
    ) -> None:
        if not values:
            raise ValueError("Indexation table requires at least one entry")
        self._years = tuple(sorted(values))
        self._values = dict(values)
        self._estimated = frozenset(estimated_years)

    @classmethod
    def from_config(cls, config: CostInflationIndexConfig) -> IndexationTable:
        return cls(
            config.as_mapping(),
            estimated_years=frozenset(
                entry.year for entry in config.entries if entry.estimate
            ),
        )

    @property
    def first_year(self) -> int:
        return self._years[0]

    @property
    def last_year(self) -> int:
        return self._years[-1]

    def lookup_year(self, fiscal_year: int) -> CIILookup:
        """Return the CII for ``fiscal_year`` without raising for gaps."""

        if fiscal_year in self._values:
            return CIILookup(
                fiscal_year=fiscal_year,
                value=self._values[fiscal_year],
                estimated=fiscal_year in self._estimated,
            )

        if fiscal_year > self.last_year:
            _LOGGER.warning(
                "No cost inflation index for FY %s; using FY %s value as an estimate",
                fiscal_year,
                self.last_year,
            )
            return CIILookup(
                fiscal_year=fiscal_year,
                value=self._values[self.last_year],
                estimated=True,
            )

        if fiscal_year < self.first_year:
            # Assets acquired before the base year are indexed from the base year.
            return CIILookup(
                fiscal_year=fiscal_year,
                value=self._values[self.first_year],
                estimated=False,
            )

        # Gap inside the table: carry the closest earlier row forward.
        position = bisect_right(self._years, fiscal_year) - 1
        known_year = self._years[position]
        return CIILookup(
            fiscal_year=fiscal_year,
            value=self._values[known_year],
            estimated=True,
        )

    def lookup(self, value: date) -> CIILookup:
        """Return the CII applicable to ``value``'s fiscal year."""

        return self.lookup_year(fiscal_year_for(value))

    def as_rows(self) -> list[dict[str, object]]:
        return [
            {
                "year": year,
                "value": self._values[year],
                "estimate": year in self._estimated,
            }
            for year in self._years
        ]


def index_cost(cost: float, acquisition_cii: int, sale_cii: int) -> int:
    """Scale ``cost`` by ``sale_cii / acquisition_cii`` rounded to whole units.

    A non-positive ``acquisition_cii`` leaves the cost unindexed.
    """

    if acquisition_cii <= 0:
        return round_currency(cost)
    return round_currency(cost * sale_cii / acquisition_cii)


__all__ = [
    "FISCAL_YEAR_START_MONTH",
    "IndexationTable",
    "fiscal_year_for",
    "index_cost",
]
