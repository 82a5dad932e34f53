"""Integration coverage for configuration metadata endpoints."""

from http import HTTPStatus
from shutil import copy2
from unittest.mock import patch

import pytest
import yaml
from flask.testing import FlaskClient

from anycalc.backend.config import year_config
from anycalc.backend.version import get_project_version


def test_meta_endpoint(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/meta")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload == {
        "version": get_project_version(),
        "supported_years": [2024, 2025],
        "default_year": 2025,
    }


def test_list_years_endpoint(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/years")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["years"] == [
        {"year": 2024, "status": "archived", "label": "FY 2024-25"},
        {"year": 2025, "status": "active", "label": "FY 2025-26"},
    ]
    assert payload["default_year"] == 2025
    assert payload["supported_years"] == [2024, 2025]


def test_list_years_endpoint_discovers_new_config_file(
    client: FlaskClient, tmp_path
) -> None:
    original_directory = year_config.CONFIG_DIRECTORY
    for filename in ("2024.yaml", "2025.yaml"):
        copy2(original_directory / filename, tmp_path / filename)

    new_year_path = tmp_path / "2030.yaml"
    config = yaml.safe_load((original_directory / "2025.yaml").read_text())
    config["year"] = 2030
    config.setdefault("meta", {})["label"] = "FY 2030-31"
    new_year_path.write_text(yaml.safe_dump(config, sort_keys=False))

    manifest = yaml.safe_load((original_directory / "manifest.yaml").read_text())
    manifest["years"].append({"year": 2030, "status": "draft"})
    manifest_path = tmp_path / "manifest.yaml"
    manifest_path.write_text(yaml.safe_dump(manifest, sort_keys=False))

    year_config.load_year_configuration.cache_clear()
    year_config.load_manifest.cache_clear()
    with patch.object(year_config, "CONFIG_DIRECTORY", tmp_path), patch.object(
        year_config, "MANIFEST_FILE", manifest_path
    ):
        response = client.get("/api/v1/config/years")

    year_config.load_year_configuration.cache_clear()
    year_config.load_manifest.cache_clear()

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    discovered = {entry["year"]: entry for entry in payload["years"]}
    assert {2024, 2025, 2030}.issubset(discovered)
    assert discovered[2030]["status"] == "draft"
    assert discovered[2030]["label"] == "FY 2030-31"
    assert payload["default_year"] == 2030


def test_cost_inflation_index_endpoint(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/2025/cost-inflation-index")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["year"] == 2025
    assert payload["base_year"] == 2001
    entries = {entry["year"]: entry for entry in payload["entries"]}
    assert entries[2001] == {"year": 2001, "value": 100, "estimate": False}
    assert entries[2014]["value"] == 240
    assert entries[2026] == {"year": 2026, "value": 390, "estimate": True}


def test_rules_endpoint(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/2025/rules")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["year"] == 2025
    assert payload["meta"]["label"] == "FY 2025-26"
    assert payload["cess_rate"] == pytest.approx(0.04)
    assert payload["holding"]["long_term_threshold_months"] == 24
    assert payload["regimes"]["cutoff_date"] == "2024-07-23"
    assert payload["regimes"]["indexed_rate"] == pytest.approx(0.20)

    sections = {entry["section"]: entry for entry in payload["exemptions"]}
    assert list(sections) == ["54", "54EC", "54F"]
    assert sections["54"]["cap"] == 100_000_000
    assert sections["54EC"]["interest_rate"] == pytest.approx(0.0525)
    assert sections["54EC"]["deadline_months"] == 6
    assert sections["54F"]["cap"] is None
    assert "interest_rate" not in sections["54F"]

    assert payload["projection"]["baseline_rate"] == pytest.approx(0.08)
    new_slabs = payload["income_tax_slabs"]["new"]
    assert new_slabs[0] == {"upper": 300000.0, "rate": 0.0}
    assert new_slabs[-1]["upper"] is None


@pytest.mark.parametrize(
    "path",
    ["/api/v1/config/1999/cost-inflation-index", "/api/v1/config/1999/rules"],
)
def test_missing_year_returns_not_found(client: FlaskClient, path: str) -> None:
    response = client.get(path)

    assert response.status_code == HTTPStatus.NOT_FOUND
    payload = response.get_json()
    assert payload["error"] == "not_found"
