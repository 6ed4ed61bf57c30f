from __future__ import annotations

import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

import extraction_agent.agent as agent_module
import extraction_agent.main as main
from extraction_agent.agent import initialize_agent
from extraction_agent.config import AgentConfig, AppConfig, LLMSettings


client = TestClient(main.app)


@pytest.fixture
def runs_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setattr(main, "RUNS_DIR", tmp_path)
    monkeypatch.setattr(main, "CONFIG", AppConfig(runs_dir=tmp_path, save_runs=True))
    return tmp_path


@pytest.fixture
def no_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(agent_module, "resolve_llm_settings", lambda: LLMSettings(endpoint="http://localhost", api_key=None))


def test_health() -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_templates() -> None:
    body = client.get("/templates").json()
    assert "passport" in body["templates"]
    assert "general" in body["templates"]
    assert "identification" in body["categories"]


def test_extract_returns_result_and_writes_artifacts(runs_dir: Path, stub_llm, make_envelope) -> None:
    initialize_agent(
        config=AgentConfig(model="test-model"),
        llm_client=stub_llm(
            lambda prompt: make_envelope(
                {"field_name": "passport_number", "field_value": "A1234567", "confidence_score": 0.95}
            )
        ),
    )
    resp = client.post(
        "/extract",
        json={
            "document_category": "passport",
            "document_text": "Surname: SMITH\nGiven Names: JOHN\nPassport No: A1234567",
            "filename": "passport.txt",
        },
    )
    assert resp.status_code == 200
    body = resp.json()
    run_id = body["run_id"]
    fields = body["result"]["extracted_fields"]
    assert fields[0]["field_name"] == "passport_number"
    assert fields[0]["validation_status"] == "validated"

    saved = json.loads((runs_dir / run_id / "result.json").read_text())
    assert saved["document_type"] == "Passport"
    assert "Extraction complete" in (runs_dir / run_id / "run.log").read_text()


def test_extract_failure_maps_to_bad_gateway(runs_dir: Path, stub_llm) -> None:
    def responder(prompt: str) -> str:
        raise ConnectionError("upstream down")

    initialize_agent(config=AgentConfig(model="test-model", retry_attempts=1), llm_client=stub_llm(responder))
    resp = client.post("/extract", json={"document_category": "visa", "document_text": "Visa"})
    assert resp.status_code == 502
    assert "upstream down" in resp.json()["error"]


def test_extract_without_credentials(runs_dir: Path, no_credentials: None) -> None:
    resp = client.post("/extract", json={"document_category": "visa", "document_text": "Visa"})
    assert resp.status_code == 503
    assert "API_KEY" in resp.json()["error"]


def test_config_roundtrip(stub_llm) -> None:
    initialize_agent(config=AgentConfig(model="test-model", temperature=0.1), llm_client=stub_llm(lambda p: "{}"))

    assert client.get("/config").json()["config"]["temperature"] == 0.1

    resp = client.patch("/config", json={"temperature": 0.3, "retry_attempts": 2})
    assert resp.status_code == 200
    assert resp.json()["config"]["retry_attempts"] == 2
    assert client.get("/config").json()["config"]["temperature"] == 0.3


def test_config_rejects_invalid_updates(stub_llm) -> None:
    initialize_agent(config=AgentConfig(model="test-model"), llm_client=stub_llm(lambda p: "{}"))
    assert client.patch("/config", json={"temperature": 4}).status_code == 400
    assert client.patch("/config", json={"unknown_option": True}).status_code == 400


def test_config_without_credentials(no_credentials: None) -> None:
    assert client.get("/config").status_code == 503


def test_validate_endpoint() -> None:
    payload = {
        "extracted_fields": [
            {"field_name": "email", "field_value": "not-an-email", "confidence_score": 0.9},
            {"field_name": "passport_number", "field_value": "A1234567", "confidence_score": 0.9},
        ]
    }
    resp = client.post("/validate", json=payload)
    assert resp.status_code == 200
    validation = resp.json()["validation"]
    assert validation["overall_assessment"].startswith("Fair")
    email = validation["validation_results"][0]
    assert email["is_valid"] is False
    assert "Invalid email format" in email["issues"]


def test_validate_endpoint_rejects_bad_payload() -> None:
    assert client.post("/validate", json={"extracted_fields": "email"}).status_code == 400
    assert client.post("/validate", json={"extracted_fields": [{"field_value": "x"}]}).status_code == 400


def test_autofill_endpoint() -> None:
    payload = {
        "form_fields": {"personal_info": {"nationality": {"type": "text"}, "date_of_birth": {"type": "date"}}},
        "extracted_fields": [
            {"field_name": "nationality", "field_value": "canadian"},
            {"field_name": "date_of_birth", "field_value": "July 4, 1985"},
        ],
    }
    resp = client.post("/autofill", json=payload)
    assert resp.status_code == 200
    body = resp.json()
    assert body["form_data"] == {
        "personal_info.nationality": "CANADIAN",
        "personal_info.date_of_birth": "1985-07-04",
    }
    assert body["filled_count"] == 2


def test_autofill_requires_form_fields() -> None:
    assert client.post("/autofill", json={"extracted_fields": []}).status_code == 400


def test_config_rejects_wrong_types_and_keeps_extraction_working(runs_dir: Path, stub_llm, make_envelope) -> None:
    initialize_agent(
        config=AgentConfig(model="test-model", retry_attempts=1, enable_validation=True),
        llm_client=stub_llm(lambda prompt: make_envelope()),
    )
    assert client.patch("/config", json={"retry_attempts": 2.5}).status_code == 400
    resp = client.patch("/config", json={"enable_validation": "false"})
    assert resp.status_code == 400
    assert "enable_validation" in resp.json()["error"]

    config = client.get("/config").json()["config"]
    assert config["retry_attempts"] == 1
    assert config["enable_validation"] is True

    resp = client.post("/extract", json={"document_category": "visa", "document_text": "Visa"})
    assert resp.status_code == 200
