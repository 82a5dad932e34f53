"""Expose rule-year configuration consumed by the calculator front-end.

These endpoints bridge the YAML-backed rule years and the UI so that forms
can show the index table, regime rates and exemption limits without
duplicating business rules.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from flask import Blueprint, jsonify

from anycalc.backend.app.http import ProblemResponse, problem_response
from anycalc.backend.config.year_config import (
    ExemptionSectionConfig,
    TaxBracket,
    YearConfiguration,
    available_years,
    load_manifest,
    load_year_configuration,
)
from anycalc.backend.version import get_project_version

blueprint = Blueprint("config", __name__, url_prefix="/api/v1/config")


@dataclass(frozen=True)
class YearRouteContext:
    """Common context shared by year-scoped configuration endpoints."""

    year: int
    configuration: YearConfiguration


def _build_year_context(year: int) -> YearRouteContext | ProblemResponse:
    try:
        configuration = load_year_configuration(year)
    except FileNotFoundError as exc:
        return problem_response("not_found", status=404, message=str(exc))

    return YearRouteContext(year=year, configuration=configuration)


def get_configuration_metadata() -> dict[str, Any]:
    """Expose runtime metadata derived from the configuration manifest."""

    manifest = load_manifest()
    supported_years = list(manifest.supported_years)
    default_year = supported_years[-1] if supported_years else None
    return {
        "version": get_project_version(),
        "supported_years": supported_years,
        "default_year": default_year,
    }


def _serialise_tax_bracket(bracket: TaxBracket) -> dict[str, Any]:
    return {"upper": bracket.upper_bound, "rate": bracket.rate}


def _serialise_section(code: str, section: ExemptionSectionConfig) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "section": code,
        "name": section.name,
        "description": section.description,
        "cap": section.cap,
        "deadline_months": section.deadline_months,
        "lock_in_years": section.lock_in_years,
        "notes": list(section.notes),
    }
    if section.interest_rate is not None:
        payload["interest_rate"] = section.interest_rate
    return payload


def _serialise_rules(config: YearConfiguration) -> dict[str, Any]:
    exemptions = config.exemptions
    return {
        "year": config.year,
        "meta": dict(config.meta),
        "cess_rate": config.cess_rate,
        "holding": config.holding.model_dump(mode="json"),
        "regimes": config.regimes.model_dump(mode="json"),
        "exemptions": [
            _serialise_section("54", exemptions.section_54),
            _serialise_section("54EC", exemptions.section_54ec),
            _serialise_section("54F", exemptions.section_54f),
        ],
        "projection": config.projection.model_dump(mode="json"),
        "income_tax_slabs": {
            "new": [_serialise_tax_bracket(b) for b in config.income_tax_slabs.new],
            "old": [_serialise_tax_bracket(b) for b in config.income_tax_slabs.old],
        },
    }


@blueprint.get("/meta")
def get_application_metadata() -> tuple[Any, int]:
    """Expose lightweight application metadata such as the version identifier."""

    payload = get_configuration_metadata()
    return jsonify(payload), 200


@blueprint.get("/years")
def list_years() -> tuple[Any, int]:
    """Return all configured rule years with their manifest status."""

    manifest = load_manifest()
    years = [
        {
            "year": entry.year,
            "status": entry.status,
            "label": load_year_configuration(entry.year).meta.get("label"),
        }
        for entry in sorted(manifest.years, key=lambda item: item.year)
    ]
    metadata = get_configuration_metadata()
    payload = {
        "years": years,
        "default_year": metadata["default_year"],
        "supported_years": list(available_years()),
    }
    return jsonify(payload), 200


@blueprint.get("/<int:year>/cost-inflation-index")
def get_cost_inflation_index(year: int) -> tuple[Any, int]:
    """Expose the cost inflation index rows for ``year``."""

    context = _build_year_context(year)
    if isinstance(context, ProblemResponse):
        return context.to_response()

    table = context.configuration.cost_inflation_index
    payload = {
        "year": context.year,
        "base_year": table.base_year,
        "entries": [
            {"year": entry.year, "value": entry.value, "estimate": entry.estimate}
            for entry in table.entries
        ],
    }
    return jsonify(payload), 200


@blueprint.get("/<int:year>/rules")
def get_rules(year: int) -> tuple[Any, int]:
    """Expose regime rates, exemption limits and projection defaults for ``year``."""

    context = _build_year_context(year)
    if isinstance(context, ProblemResponse):
        return context.to_response()

    return jsonify(_serialise_rules(context.configuration)), 200


__all__ = ["blueprint", "get_configuration_metadata"]
