"""REST endpoints for capital gains calculations and their reports."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, Response, request

from anycalc.backend.app.http import download_response
from anycalc.backend.app.services.calculation_service import calculate_capital_gains
from anycalc.backend.app.services.report_service import (
    render_csv,
    render_html,
    render_pdf,
)
from anycalc.backend.services import (
    build_calculation_response,
    parse_calculation_payload,
)

blueprint = Blueprint("calculations", __name__, url_prefix="/api/v1")


@blueprint.post("/capital-gains")
def create_calculation() -> tuple[Any, int]:
    """Run the capital gains pipeline on the submitted JSON payload."""

    payload = parse_calculation_payload(request)
    result = calculate_capital_gains(payload)

    return build_calculation_response(result)


@blueprint.post("/capital-gains/report.csv")
def download_csv_report() -> Response:
    result = calculate_capital_gains(parse_calculation_payload(request))
    return download_response(
        render_csv(result),
        mimetype="text/csv; charset=utf-8",
        filename="capital-gains.csv",
    )


@blueprint.post("/capital-gains/report.html")
def render_html_report() -> tuple[str, int, dict[str, str]]:
    result = calculate_capital_gains(parse_calculation_payload(request))
    return render_html(result), 200, {"Content-Type": "text/html; charset=utf-8"}


@blueprint.post("/capital-gains/report.pdf")
def download_pdf_report() -> Response:
    result = calculate_capital_gains(parse_calculation_payload(request))
    return download_response(
        render_pdf(result),
        mimetype="application/pdf",
        filename="capital-gains.pdf",
    )


__all__ = ["blueprint"]
