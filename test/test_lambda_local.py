# test/test_lambda_local.py
import importlib
import json

import pytest

from tenant_verification.config import PROVIDER_PROFILES
from tenant_verification.orchestrator import run_verification_sync

lambda_handler_module = importlib.import_module("tenant_verification.lambda_handler")


@pytest.fixture(autouse=True)
def _no_provider_keys(monkeypatch):
    for profile in PROVIDER_PROFILES.values():
        monkeypatch.delenv(f"{profile.prefix}_API_KEY", raising=False)
    monkeypatch.delenv("VERIFICATION_CONFIG_FILE", raising=False)


def test_api_gateway_event_returns_report(monkeypatch, transport):
    monkeypatch.setenv("UIDAI_API_KEY", "k")
    monkeypatch.setattr(
        lambda_handler_module,
        "run_verification_sync",
        lambda record, config: run_verification_sync(record, config, transport=transport),
    )
    event = {"body": json.dumps({"identityNumber": "1234 5678 9012"})}

    result = lambda_handler_module.lambda_handler(event, None)

    assert result["statusCode"] == 200
    report = json.loads(result["body"])
    assert report["verifications"]["identity"]["verified"] is True
    assert report["verifications"]["background"]["status"] == "not_configured"
    assert report["overall_score"] == 100


def test_dict_body_is_accepted_and_nothing_configured():
    result = lambda_handler_module.lambda_handler({"body": {"fullName": "Asha"}}, None)

    assert result["statusCode"] == 200
    report = json.loads(result["body"])
    assert report["coverage"] == "none"
    assert report["recommendations"][0].startswith("PARTIAL SETUP:")


@pytest.mark.parametrize("event", [
    {"body": "{not json"},
    {"body": "[1, 2]"},
    {},
    {"body": json.dumps({"monthlySalary": "a lot"})},
])
def test_invalid_body_is_rejected(event):
    result = lambda_handler_module.lambda_handler(event, None)
    assert result["statusCode"] == 400
    assert "message" in json.loads(result["body"])


def test_bad_configuration_returns_server_error(monkeypatch):
    monkeypatch.setenv("UIDAI_RATE_LIMIT", "lots")
    result = lambda_handler_module.lambda_handler({"body": {"fullName": "Asha"}}, None)

    assert result["statusCode"] == 500
    assert "UIDAI_RATE_LIMIT" in json.loads(result["body"])["message"]
