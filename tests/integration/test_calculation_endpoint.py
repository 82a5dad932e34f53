"""Integration tests for the capital gains REST endpoints."""

from __future__ import annotations

import json
from http import HTTPStatus
from pathlib import Path
from typing import Dict, Iterable

import pytest
from flask.testing import FlaskClient

DATA_PATH = Path(__file__).resolve().parents[1] / "data" / "regression_scenarios.json"

SALE = {
    "year": 2025,
    "transaction": {
        "asset_type": "residential",
        "purchase_date": "2015-01-01",
        "sale_date": "2026-01-01",
        "purchase_price": 5_000_000,
        "stamp_duty": 300_000,
        "sale_price": 8_000_000,
        "brokerage": 80_000,
        "legal_fees": 20_000,
    },
    "assumptions": {"user_selected_regime": "new"},
}


def _load_scenarios() -> Iterable[Dict[str, object]]:
    with DATA_PATH.open("r", encoding="utf-8") as handle:
        return json.load(handle)


@pytest.mark.parametrize("scenario", _load_scenarios(), ids=lambda item: item["name"])
def test_calculation_endpoint_matches_regression_scenarios(
    client: FlaskClient, scenario: Dict[str, object]
) -> None:
    """Each regression scenario should remain stable over time."""

    response = client.post("/api/v1/capital-gains", json=scenario["payload"])
    assert response.status_code == HTTPStatus.OK

    result = response.get_json()
    expected = scenario["expectations"]

    active = result["active_result"]
    for key, value in expected["active_result"].items():
        assert active[key] == value

    sections = [strategy["section"] for strategy in result["strategies"]]
    assert sections == list(expected["strategies"])


def test_calculation_endpoint_disables_caching(client: FlaskClient) -> None:
    response = client.post("/api/v1/capital-gains", json=SALE)

    assert response.status_code == HTTPStatus.OK
    assert response.headers["Cache-Control"] == "no-store"
    payload = response.get_json()
    assert payload["strategies"][0]["deadline"] == "2026-07-01"


def test_calculation_endpoint_reads_year_from_query(client: FlaskClient) -> None:
    """The ``?year=`` query parameter selects the rule year when the body omits it."""

    payload = {key: value for key, value in SALE.items() if key != "year"}

    response = client.post("/api/v1/capital-gains?year=2024", json=payload)

    assert response.status_code == HTTPStatus.OK
    result = response.get_json()
    assert result["meta"]["year"] == 2024
    # FY 2025 is beyond the 2024 rule year's table and is carried forward
    assert result["cost_inflation_index"]["sale"]["value"] == 363
    assert result["meta"]["uses_estimated_index"] is True


def test_calculation_endpoint_returns_bad_request_for_non_json(
    client: FlaskClient,
) -> None:
    """Invalid payloads should return a structured 400 response."""

    response = client.post(
        "/api/v1/capital-gains",
        data="not-json",
        content_type="text/plain",
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    payload = response.get_json()
    assert payload["error"] == "bad_request"
    assert "JSON" in payload["message"].upper()


def test_calculation_endpoint_handles_validation_errors(client: FlaskClient) -> None:
    """Domain validation errors should surface as 400 responses."""

    payload = json.loads(json.dumps(SALE))
    payload["transaction"]["sale_price"] = -1

    response = client.post("/api/v1/capital-gains", json=payload)

    assert response.status_code == HTTPStatus.BAD_REQUEST
    body = response.get_json()
    assert body["error"] == "validation_error"
    assert "transaction.sale_price" in body["message"]
    assert "cannot be negative" in body["message"].lower()


def test_calculation_endpoint_rejects_non_finite_amounts(client: FlaskClient) -> None:
    body = json.dumps(SALE).replace("8000000", "Infinity", 1)
    assert "Infinity" in body

    response = client.post(
        "/api/v1/capital-gains", data=body, content_type="application/json"
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    payload = response.get_json()
    assert payload["error"] == "validation_error"
    assert "transaction.sale_price" in payload["message"]


def test_calculation_endpoint_rejects_runaway_appreciation_rate(
    client: FlaskClient,
) -> None:
    payload = json.loads(json.dumps(SALE))
    payload["assumptions"]["appreciation_rate"] = 1e200

    response = client.post("/api/v1/capital-gains", json=payload)

    assert response.status_code == HTTPStatus.BAD_REQUEST
    body = response.get_json()
    assert body["error"] == "validation_error"
    assert "assumptions.appreciation_rate" in body["message"]


def test_calculation_endpoint_rejects_reversed_dates(client: FlaskClient) -> None:
    payload = json.loads(json.dumps(SALE))
    payload["transaction"]["sale_date"] = "2014-12-31"

    response = client.post("/api/v1/capital-gains", json=payload)

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert "Sale date must be after the purchase date" in response.get_json()["message"]


def test_calculation_endpoint_unknown_year(client: FlaskClient) -> None:
    response = client.post("/api/v1/capital-gains", json={**SALE, "year": 1999})

    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.get_json()["error"] == "not_found"


def test_csv_report_download(client: FlaskClient) -> None:
    response = client.post("/api/v1/capital-gains/report.csv", json=SALE)

    assert response.status_code == HTTPStatus.OK
    assert response.mimetype == "text/csv"
    assert "filename=capital-gains.csv" in response.headers["Content-Disposition"]
    assert response.get_data(as_text=True).startswith("Section,Field,Value")


def test_html_report(client: FlaskClient) -> None:
    response = client.post("/api/v1/capital-gains/report.html", json=SALE)

    assert response.status_code == HTTPStatus.OK
    assert response.mimetype == "text/html"
    assert "<h1>Capital Gains Report</h1>" in response.get_data(as_text=True)


def test_pdf_report_download(client: FlaskClient) -> None:
    response = client.post("/api/v1/capital-gains/report.pdf", json=SALE)

    assert response.status_code == HTTPStatus.OK
    assert response.mimetype == "application/pdf"
    assert "filename=capital-gains.pdf" in response.headers["Content-Disposition"]
    assert response.data.startswith(b"%PDF")


def test_report_endpoints_validate_payloads(client: FlaskClient) -> None:
    response = client.post("/api/v1/capital-gains/report.pdf", json={"year": 2025})

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.get_json()["error"] == "validation_error"
