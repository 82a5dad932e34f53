#!/usr/bin/env python3
"""Time repeated capital gains calculations to spot performance regressions."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from statistics import median
from time import perf_counter

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from anycalc.backend.app.services.calculation_service import (  # noqa: E402
    calculate_capital_gains,
)

SAMPLE_PAYLOADS = {
    "residential_choice": {
        "transaction": {
            "asset_type": "residential",
            "purchase_date": "2015-01-01",
            "sale_date": "2026-01-01",
            "purchase_price": 5000000,
            "stamp_duty": 300000,
            "sale_price": 8000000,
            "brokerage": 80000,
            "legal_fees": 20000,
        },
        "assumptions": {"enable_rental": True, "monthly_rent": 25000},
    },
    "land_with_allocation": {
        "transaction": {
            "asset_type": "land",
            "purchase_date": "2010-06-15",
            "sale_date": "2025-09-30",
            "purchase_price": 2000000,
            "sale_price": 9000000,
            "brokerage": 90000,
        },
        "assumptions": {
            "income_context": {"taxable_income": 1100000, "regime": "new"},
        },
        "allocation": {"personal_use": 500000, "bonds": 5000000},
    },
}


def measure(payload: dict[str, object], iterations: int) -> dict[str, float]:
    """Return timing statistics for repeated calculations of ``payload``."""

    calculate_capital_gains(payload)  # Warm configuration caches
    samples: list[float] = []
    for _ in range(iterations):
        start = perf_counter()
        calculate_capital_gains(payload)
        samples.append(perf_counter() - start)
    return {
        "iterations": iterations,
        "total_ms": sum(samples) * 1000,
        "median_ms": median(samples) * 1000,
        "max_ms": max(samples) * 1000,
    }


def main() -> None:
    iterations = int(os.getenv("ANYCALC_PROFILE_ITERATIONS", "200"))
    report = {name: measure(payload, iterations) for name, payload in SAMPLE_PAYLOADS.items()}
    print(json.dumps(report, indent=2, sort_keys=True))


if __name__ == "__main__":
    main()
