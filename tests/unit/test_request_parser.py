"""Unit tests for calculation request parsing helpers."""

from __future__ import annotations

import pytest
from flask import Flask, request
from werkzeug.exceptions import BadRequest

from anycalc.backend.services.request_parser import parse_calculation_payload

TRANSACTION = {
    "purchase_date": "2015-01-01",
    "sale_date": "2026-01-01",
    "purchase_price": 5_000_000,
    "sale_price": 8_000_000,
}


def test_parse_payload_uses_year_query_parameter(app: Flask) -> None:
    """The ``?year=`` query parameter should supply the rule year when absent."""

    with app.test_request_context(
        "/api/v1/capital-gains?year=2024",
        method="POST",
        json={"transaction": TRANSACTION},
    ):
        payload = parse_calculation_payload(request)

    assert payload["year"] == 2024
    assert payload["transaction"] == TRANSACTION


def test_parse_payload_preserves_explicit_year(app: Flask) -> None:
    """Explicit year fields take precedence over the query string."""

    with app.test_request_context(
        "/api/v1/capital-gains?year=2024",
        method="POST",
        json={"year": 2025, "transaction": TRANSACTION},
    ):
        payload = parse_calculation_payload(request)

    assert payload["year"] == 2025


def test_parse_payload_rejects_non_integer_year(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/capital-gains?year=latest",
        method="POST",
        json={"transaction": TRANSACTION},
    ):
        with pytest.raises(BadRequest, match="must be an integer"):
            parse_calculation_payload(request)


def test_parse_payload_rejects_non_object(app: Flask) -> None:
    """Non-object JSON payloads should trigger BadRequest responses."""

    with app.test_request_context(
        "/api/v1/capital-gains",
        method="POST",
        json=["not", "an", "object"],
    ):
        with pytest.raises(BadRequest):
            parse_calculation_payload(request)


def test_parse_payload_rejects_invalid_json(app: Flask) -> None:
    with app.test_request_context(
        "/api/v1/capital-gains",
        method="POST",
        data="{not json",
        content_type="application/json",
    ):
        with pytest.raises(BadRequest, match="valid JSON"):
            parse_calculation_payload(request)
