"""Typed request/response models shared across the calculation services.

Inputs are validated by Pydantic before the calculators see them; the
calculators themselves work on the frozen dataclasses in
``anycalc.backend.app.services.calculators.domain``. The response models
validate the serialised result so routes and report renderers agree on its
shape.
"""

from __future__ import annotations

from .api import (
    AllocationInput,
    AllocationOutput,
    AssumptionsInput,
    BaselineOutput,
    BondAllocationOutput,
    BondProjectionOutput,
    CalculationRequest,
    CalculationResponse,
    CostInflationIndexOutput,
    HoldingPeriodOutput,
    IncomeContextInput,
    IndexLookupOutput,
    PropertyProjectionOutput,
    RealEstateAllocationOutput,
    RegimeDecisionOutput,
    RegimeResultOutput,
    ResponseMeta,
    StrategyOutput,
    TransactionInput,
    format_validation_error,
)

__all__ = [
    "AllocationInput",
    "AllocationOutput",
    "AssumptionsInput",
    "BaselineOutput",
    "BondAllocationOutput",
    "BondProjectionOutput",
    "CalculationRequest",
    "CalculationResponse",
    "CostInflationIndexOutput",
    "HoldingPeriodOutput",
    "IncomeContextInput",
    "IndexLookupOutput",
    "PropertyProjectionOutput",
    "RealEstateAllocationOutput",
    "RegimeDecisionOutput",
    "RegimeResultOutput",
    "ResponseMeta",
    "StrategyOutput",
    "TransactionInput",
    "format_validation_error",
]
