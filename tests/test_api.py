from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

import main
from conftest import IDEA, StubCompletionClient
from core.errors import ConfigurationError, FailureKind, ProviderError
from core.pipeline import StartupAnalyzer


@pytest.fixture
def api():
    def install(client=None):
        analyzer = StartupAnalyzer(client or StubCompletionClient())
        main.app.dependency_overrides[main.get_analyzer_factory] = lambda: lambda: analyzer
        return TestClient(main.app)

    yield install
    main.app.dependency_overrides.clear()


def test_root_describes_the_service(api) -> None:
    response = api().get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_analyze_returns_full_analysis(api) -> None:
    response = api().post("/analyze", json={"startupIdea": IDEA})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["analysis"]["isValid"] is True
    assert body["analysis"]["scores"]["overall"] == pytest.approx(7.3)
    assert body["analysis"]["launchPlan"]["ninetyDayPlan"][0] == {"kind": "action", "text": "Recruit 20 cooks"}
    assert body["metadata"]["version"] == "1.0"
    assert "processingTime" in body["metadata"]


def test_invalid_idea_is_a_successful_response(api) -> None:
    stub = StubCompletionClient({"Validation": {"isValid": False, "satiricalFeedback": "Uber for pebbles?"}})

    response = api(stub).post("/analyze", json={"startupIdea": "Uber for pebbles, but slower"})

    assert response.status_code == 200
    assert response.json()["analysis"]["satiricalFeedback"] == "Uber for pebbles?"
    assert stub.call_order == ["Validation"]


@pytest.mark.parametrize(
    "payload, code",
    [
        ({}, "INVALID_INPUT"),
        ({"startupIdea": 42}, "INVALID_INPUT"),
        ({"startupIdea": "a"}, "INPUT_TOO_SHORT"),
        ({"startupIdea": "x" * 2001}, "INPUT_TOO_LONG"),
    ],
)
def test_input_is_checked_before_the_pipeline(api, payload, code) -> None:
    stub = StubCompletionClient()

    response = api(stub).post("/analyze", json=payload)

    assert response.status_code == 400
    assert response.json()["code"] == code
    assert stub.calls == []


@pytest.mark.parametrize(
    "kind, status, code",
    [
        (FailureKind.RATE_LIMITED, 429, "RATE_LIMIT_ERROR"),
        (FailureKind.AUTH_FAILURE, 503, "API_KEY_ERROR"),
        (FailureKind.TIMEOUT, 504, "TIMEOUT_ERROR"),
        (FailureKind.UNKNOWN, 502, "PROVIDER_ERROR"),
    ],
)
def test_stage_failures_map_to_status_codes(api, kind, status, code) -> None:
    stub = StubCompletionClient({"Improvement": ProviderError("provider said no", kind)})

    response = api(stub).post("/analyze", json={"startupIdea": IDEA})

    assert response.status_code == status
    body = response.json()
    assert body["code"] == code
    assert body["stage"] == "Improvement"
    assert body["stageIndex"] == 3


def test_malformed_stage_output_is_a_chain_error(api) -> None:
    stub = StubCompletionClient({"Launch": "not json"})

    response = api(stub).post("/analyze", json={"startupIdea": IDEA})

    assert response.status_code == 422
    assert response.json()["code"] == "CHAIN_ERROR"
    assert response.json()["stage"] == "Launch"


def _unconfigured():
    raise ConfigurationError("MISTRAL_API_KEY is not configured.")


@pytest.fixture
def unconfigured_api():
    main.app.dependency_overrides[main.get_analyzer_factory] = lambda: _unconfigured
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


def test_missing_credential_is_a_configuration_error(unconfigured_api) -> None:
    response = unconfigured_api.post("/analyze", json={"startupIdea": IDEA})

    assert response.status_code == 500
    assert response.json()["code"] == "CONFIGURATION_ERROR"


@pytest.mark.parametrize(
    "payload, code",
    [
        ({"startupIdea": "a"}, "INPUT_TOO_SHORT"),
        ({"startupIdea": "x" * 2001}, "INPUT_TOO_LONG"),
        ({"startupIdea": 42}, "INVALID_INPUT"),
    ],
)
def test_bad_input_is_reported_even_without_a_credential(unconfigured_api, payload, code) -> None:
    response = unconfigured_api.post("/analyze", json=payload)

    assert response.status_code == 400
    assert response.json()["code"] == code


def test_export_pdf_renders_an_analysis(api) -> None:
    client = api()
    analysis = client.post("/analyze", json={"startupIdea": IDEA}).json()["analysis"]

    response = client.post("/export/pdf", json=analysis)

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.content.startswith(b"%PDF")


def test_export_pdf_for_an_invalid_idea(api) -> None:
    response = api().post(
        "/export/pdf",
        json={"isValid": False, "sanitizedInput": "Uber for pebbles", "satiricalFeedback": "Rock solid. Literally."},
    )

    assert response.status_code == 200
    assert response.content.startswith(b"%PDF")
