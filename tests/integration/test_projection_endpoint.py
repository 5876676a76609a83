"""Integration tests for the projection endpoint."""

from __future__ import annotations

from datetime import date
from http import HTTPStatus
from typing import Any

import pytest
from flask.testing import FlaskClient

from rentencheck.backend.app import create_app
from rentencheck.backend.config.settings_store import SettingsStore

ENDPOINT = "/api/v1/projections"


def build_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "as_of": "2025-03-01",
        "currentAge": 40,
        "retirementAge": 67,
        "pensionWishCurrentValue": 2_500,
        "statutoryPensionClaims": True,
        "statutoryPensionAmount": 1_000,
        "professionalProvisionWorks": False,
        "pensionContracts": [{"type": "ETF Sparplan", "amount": 100}],
    }
    payload.update(overrides)
    return payload


def test_projection_returns_chart_ready_payload(client: FlaskClient) -> None:
    response = client.post(ENDPOINT, json=build_payload())

    assert response.status_code == HTTPStatus.OK
    body = response.get_json()
    assert set(body) >= {
        "general",
        "desired_pension",
        "legal_pension",
        "private_pension",
        "occupational_pension",
        "pension_gap",
        "required_capital_at_retirement",
        "statutory_pension",
        "tax_estimate",
        "parameters",
        "meta",
    }
    assert body["general"]["years_to_retirement"] == 27
    assert body["statutory_pension"]["after_insurance"] == pytest.approx(878.50)
    assert body["desired_pension"]["retirement"] == pytest.approx(round(2_500 * 1.02**27, 2))
    assert body["private_pension"]["today"] == pytest.approx(100.0)
    assert body["meta"] == {
        "as_of": "2025-03-01",
        "defaults_applied": False,
        "intake_assumed_inflation": None,
    }


def test_as_of_selects_the_settings_in_force(client: FlaskClient) -> None:
    body_2024 = client.post(ENDPOINT, json=build_payload(as_of="2024-06-01")).get_json()
    body_2025 = client.post(ENDPOINT, json=build_payload()).get_json()

    assert body_2024["parameters"]["tax_bracket_thresholds"][0] == pytest.approx(11_604.0)
    assert body_2025["parameters"]["tax_bracket_thresholds"][0] == pytest.approx(12_097.0)
    # 2024: 7.30 + 0.85 + 3.40 percent insurance.
    assert body_2024["statutory_pension"]["after_insurance"] == pytest.approx(884.50)


def test_query_string_as_of_is_honoured(client: FlaskClient) -> None:
    payload = build_payload()
    del payload["as_of"]

    response = client.post(f"{ENDPOINT}?as_of=2024-06-01", json=payload)

    assert response.status_code == HTTPStatus.OK
    assert response.get_json()["meta"]["as_of"] == "2024-06-01"


def test_invalid_json_is_rejected(client: FlaskClient) -> None:
    response = client.post(ENDPOINT, data="{oops", content_type="application/json")

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.get_json()["error"] == "bad_request"


def test_invalid_as_of_is_rejected(client: FlaskClient) -> None:
    response = client.post(ENDPOINT, json=build_payload(as_of="01.03.2025"))

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.get_json()["error"] == "bad_request"


@pytest.mark.parametrize(
    "overrides",
    [
        {"retirementAge": 35},
        {"currentAge": "forty"},
        {"pensionContracts": [{"type": "ETF", "amount": -1}]},
        {"churchTaxRegion": "hamburg"},
    ],
)
def test_invalid_intake_returns_validation_error(
    client: FlaskClient, overrides: dict[str, Any]
) -> None:
    response = client.post(ENDPOINT, json=build_payload(**overrides))

    assert response.status_code == HTTPStatus.BAD_REQUEST
    body = response.get_json()
    assert body["error"] == "validation_error"
    assert body["message"]


def test_unresolvable_parameters_return_503(client: FlaskClient) -> None:
    response = client.post(ENDPOINT, json=build_payload(as_of="2023-01-01"))

    assert response.status_code == HTTPStatus.SERVICE_UNAVAILABLE
    body = response.get_json()
    assert body["error"] == "parameters_unavailable"
    assert "inflation_rate" in body["missing"]


def test_fallback_flag_fills_missing_parameters(
    client: FlaskClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("RENTENCHECK_FALLBACK_TO_DEFAULTS", "1")

    response = client.post(ENDPOINT, json=build_payload(as_of="2023-01-01"))

    assert response.status_code == HTTPStatus.OK
    assert response.get_json()["meta"]["defaults_applied"] is True


def test_fallback_flag_applies_to_parameters_endpoint(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("RENTENCHECK_FALLBACK_TO_DEFAULTS", "1")
    app = create_app(provider=SettingsStore([]))
    app.config.update(TESTING=True)
    client = app.test_client()

    projection = client.post(ENDPOINT, json=build_payload())
    parameters = client.get("/api/v1/parameters?as_of=2025-03-01")

    assert projection.status_code == HTTPStatus.OK
    assert parameters.status_code == HTTPStatus.OK
    body = parameters.get_json()
    assert body["defaults_applied"] is True
    assert body["data"]["economic_assumptions"]["inflation_rate"] == pytest.approx(2.0)


def test_oversized_ages_return_validation_error(client: FlaskClient) -> None:
    response = client.post(ENDPOINT, json=build_payload(retirementAge=100_000))

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.get_json()["error"] == "validation_error"


def test_non_finite_numbers_return_validation_error(client: FlaskClient) -> None:
    response = client.post(
        ENDPOINT,
        data='{"currentAge": 40, "retirementAge": 67, "pensionWishCurrentValue": NaN}',
        content_type="application/json",
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.get_json()["error"] == "validation_error"


def test_injected_provider_replaces_packaged_settings(
    default_rows: list[dict[str, object]],
) -> None:
    rows = [
        {**row, "value": 4.0} if row["key"] == "inflation_rate" else row
        for row in default_rows
    ]
    app = create_app(provider=SettingsStore.from_rows(rows))
    app.config.update(TESTING=True)

    response = app.test_client().post(ENDPOINT, json=build_payload())

    assert response.status_code == HTTPStatus.OK
    body = response.get_json()
    assert body["general"]["inflation_rate"] == pytest.approx(4.0)
    assert body["meta"]["as_of"] == date(2025, 3, 1).isoformat()
