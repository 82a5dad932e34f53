"""Decide which regime result drives the rest of the calculation.

The selector is a small state machine with a single transition function::

    SHORT_TERM      holding below the long-term threshold; flat result only,
                    new regime still recorded as mandatory after the cutoff
    MANDATORY_NEW   acquired on/after the cutoff date; new regime is fixed
    MANDATORY_OLD   reserved for rules that force indexation (none today)
    CHOICE          taxpayer may pick; the cheaper regime is recommended

Only the ``CHOICE`` state honours a user selection.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date

from .domain import (
    HoldingPeriod,
    RegimeDecision,
    RegimeResult,
    RegimeState,
    TaxRegime,
)

_LOGGER = logging.getLogger(__name__)


def resolve_state(
    purchase_date: date, holding: HoldingPeriod, cutoff_date: date
) -> RegimeState:
    """Return the selector state for a transaction."""

    if not holding.is_long_term:
        return RegimeState.SHORT_TERM
    if purchase_date >= cutoff_date:
        return RegimeState.MANDATORY_NEW
    return RegimeState.CHOICE


def _by_regime(results: Sequence[RegimeResult]) -> dict[TaxRegime, RegimeResult]:
    return {result.regime: result for result in results}


def recommend_regime(results: Sequence[RegimeResult]) -> TaxRegime:
    """Return the regime with the lower total tax; ties favour indexation."""

    indexed = _by_regime(results)
    old = indexed.get(TaxRegime.OLD)
    new = indexed.get(TaxRegime.NEW)
    if old is None or new is None:
        raise ValueError("Both long-term regimes are required for a recommendation")
    return TaxRegime.OLD if old.total_tax <= new.total_tax else TaxRegime.NEW


def select_regime(
    results: Sequence[RegimeResult],
    state: RegimeState,
    user_selected: TaxRegime | None = None,
    *,
    acquired_after_cutoff: bool = False,
) -> RegimeDecision:
    """Apply the transition for ``state`` and mark the active regime.

    ``acquired_after_cutoff`` only matters for short-term holdings, whose state
    does not encode the acquisition date.
    """

    if state is RegimeState.SHORT_TERM:
        return RegimeDecision(
            state=state,
            can_choose=False,
            recommended=TaxRegime.SHORT_TERM,
            active_regime=TaxRegime.SHORT_TERM,
            mandatory_regime=TaxRegime.NEW if acquired_after_cutoff else None,
        )

    if state in (RegimeState.MANDATORY_NEW, RegimeState.MANDATORY_OLD):
        mandatory = TaxRegime.NEW if state is RegimeState.MANDATORY_NEW else TaxRegime.OLD
        if user_selected is not None and user_selected is not mandatory:
            _LOGGER.warning(
                "Ignoring '%s' regime selection; '%s' regime is mandatory",
                user_selected.value,
                mandatory.value,
            )
        return RegimeDecision(
            state=state,
            can_choose=False,
            recommended=mandatory,
            active_regime=mandatory,
            mandatory_regime=mandatory,
        )

    recommended = recommend_regime(results)
    return RegimeDecision(
        state=state,
        can_choose=True,
        recommended=recommended,
        active_regime=user_selected or recommended,
        user_selected=user_selected,
    )


def active_result(
    results: Sequence[RegimeResult], decision: RegimeDecision
) -> RegimeResult:
    """Return the result matching ``decision.active_regime``."""

    try:
        return _by_regime(results)[decision.active_regime]
    except KeyError as exc:
        raise ValueError(
            f"No result computed for the '{decision.active_regime.value}' regime"
        ) from exc


__all__ = ["active_result", "recommend_regime", "resolve_state", "select_regime"]
