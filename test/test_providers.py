# test/test_providers.py
import asyncio

import pytest

from conftest import (
    BACKGROUND_URL,
    EMAIL_URL,
    IDENTITY_URL,
    RENTAL_URL,
    TAX_URL,
    TELECOM_URL,
)
from tenant_verification.errors import TransportError
from tenant_verification.models import TenantRecord
from tenant_verification.tools.background import BackgroundCheckClient
from tenant_verification.tools.email_check import EmailClient
from tenant_verification.tools.identity import IdentityClient
from tenant_verification.tools.rate_limiter import RateLimiter
from tenant_verification.tools.rental import RentalHistoryClient
from tenant_verification.tools.tax import TaxIdClient
from tenant_verification.tools.telecom import TelecomClient

RECORD = TenantRecord(
    full_name="Asha Verma",
    identity_number="1234-5678-9012",
    tax_id="abcde1234f",
    phone_number="98765 43210",
    email="asha@example.com",
)


def _client(cls, config, transport, clock):
    limiter = RateLimiter.from_config(config, clock=clock)
    return cls(config.provider(cls.kind), limiter, transport)


def _verify(client, record=RECORD):
    return asyncio.run(client.verify(record))


# ------------------------- identity -------------------------

def test_identity_success_maps_fields_and_sends_bearer(make_config, transport, clock):
    client = _client(IdentityClient, make_config("identity"), transport, clock)
    result = _verify(client)

    assert result.status == "success"
    assert result.verified is True
    assert result.confidence == 95
    assert result.source == "UIDAI"
    assert result.name == "Asha Verma"
    assert result.dob == "1990-04-12"
    assert result.photo == "https://example.test/photo.jpg"

    (call,) = transport.calls_to(IDENTITY_URL)
    assert call.url == "https://resident.uidai.gov.in/api/verify"
    assert call.payload == {
        "aadhaar_number": "123456789012",
        "otp": None,
        "consent": True,
        "purpose": "tenant_verification",
    }
    assert call.headers["Authorization"] == "Bearer test-key-identity"
    assert call.headers["Content-Type"] == "application/json"
    assert call.headers["X-API-Version"] == "2.0"


def test_identity_with_eleven_digits_never_hits_network(make_config, transport, clock):
    client = _client(IdentityClient, make_config("identity"), transport, clock)
    result = _verify(client, TenantRecord(identity_number="1234-5678-901"))

    assert result.status == "error"
    assert result.verified is False
    assert result.error == "Invalid Aadhaar number. Must be 12 digits."
    assert transport.calls == []
    assert client.limiter.request_count("identity") == 0


def test_unconfigured_provider_is_skipped(make_config, transport, clock):
    client = _client(IdentityClient, make_config(), transport, clock)
    result = _verify(client)

    assert result.status == "not_configured"
    assert result.verified is False
    assert result.confidence is None
    assert result.error == "UIDAI API key not configured. Please set up your environment variables."
    assert transport.calls == []
    assert client.limiter.request_count("identity") == 0


def test_placeholder_key_is_treated_as_unconfigured(make_config, transport, clock):
    config = make_config(UIDAI_API_KEY="your_uidai_production_api_key_here")
    result = _verify(_client(IdentityClient, config, transport, clock))
    assert result.status == "not_configured"
    assert transport.calls == []


def test_identity_non_success_status_is_not_verified(make_config, transport, clock):
    transport.responses[IDENTITY_URL] = {"status": "mismatch"}
    result = _verify(_client(IdentityClient, make_config("identity"), transport, clock))

    assert result.status == "success"
    assert result.verified is False
    assert result.confidence == 0


# ------------------------- failures -------------------------

def test_http_error_reports_status_code(make_config, transport, clock):
    transport.responses[IDENTITY_URL] = 503
    client = _client(IdentityClient, make_config("identity"), transport, clock)
    result = _verify(client)

    assert result.status == "error"
    assert result.error == "UIDAI API error: 503"
    # the call went out, so it consumed budget
    assert client.limiter.request_count("identity") == 1


def test_timeout_reports_transport_message(make_config, transport, clock):
    transport.responses[TAX_URL] = TransportError("Request timed out after 10s")
    result = _verify(_client(TaxIdClient, make_config("tax"), transport, clock))

    assert result.status == "error"
    assert result.error == "Income Tax API error: Request timed out after 10s"


def test_malformed_response_becomes_error(make_config, transport, clock):
    transport.responses[TELECOM_URL] = {"status": 1}
    result = _verify(_client(TelecomClient, make_config("telecom"), transport, clock))

    assert result.status == "error"
    assert result.error.startswith("Telecom API error: malformed response")


def test_non_object_response_becomes_error(make_config, transport, clock):
    transport.responses[TELECOM_URL] = ["active"]
    result = _verify(_client(TelecomClient, make_config("telecom"), transport, clock))
    assert result.status == "error"


def test_unexpected_exception_is_contained(make_config, transport, clock):
    transport.responses[EMAIL_URL] = RuntimeError("boom")
    result = _verify(_client(EmailClient, make_config("email"), transport, clock))

    assert result.status == "error"
    assert result.verified is False
    assert "boom" in result.error


def test_rate_limit_exhaustion(make_config, transport, clock):
    client = _client(TelecomClient, make_config("telecom", TELECOM_RATE_LIMIT=1), transport, clock)

    first = _verify(client)
    second = _verify(client)

    assert first.status == "success"
    assert second.status == "error"
    assert second.error == "Rate limit exceeded for telecom. Try again later."
    assert len(transport.calls_to(TELECOM_URL)) == 1


def test_invalid_input_does_not_consume_budget(make_config, transport, clock):
    client = _client(TelecomClient, make_config("telecom", TELECOM_RATE_LIMIT=1), transport, clock)

    bad = _verify(client, TenantRecord(phone_number="12345"))
    good = _verify(client)

    assert bad.error == "Invalid phone number. Must be 10 digits."
    assert good.status == "success"


def test_client_rejects_settings_of_another_kind(make_config, transport, clock):
    config = make_config()
    with pytest.raises(ValueError):
        TaxIdClient(config.provider("identity"), RateLimiter.from_config(config, clock=clock), transport)


# ------------------------- tax / telecom / email -------------------------

def test_tax_normalises_and_maps_status(make_config, transport, clock):
    transport.responses[TAX_URL] = {"status": "inactive", "name": "ASHA VERMA"}
    result = _verify(_client(TaxIdClient, make_config("tax"), transport, clock))

    assert result.status == "success"
    assert result.verified is False
    assert result.pan_status == "inactive"
    (call,) = transport.calls_to(TAX_URL)
    assert call.payload["pan_number"] == "ABCDE1234F"
    assert call.headers["X-API-Version"] == "1.0"


def test_tax_rejects_short_pan(make_config, transport, clock):
    result = _verify(_client(TaxIdClient, make_config("tax"), transport, clock), TenantRecord(tax_id="ABC123"))
    assert result.error == "Invalid PAN number. Must be 10 characters."
    assert transport.calls == []


def test_telecom_maps_line_type(make_config, transport, clock):
    result = _verify(_client(TelecomClient, make_config("telecom"), transport, clock))

    assert result.verified is True
    assert result.confidence == 85
    assert (result.carrier, result.location, result.line_type) == ("Airtel", "Karnataka", "postpaid")
    (call,) = transport.calls_to(TELECOM_URL)
    assert call.payload["phone_number"] == "9876543210"
    assert "X-API-Version" not in call.headers


def test_email_success(make_config, transport, clock):
    result = _verify(_client(EmailClient, make_config("email"), transport, clock))

    assert result.verified is True
    assert result.confidence == 70
    assert result.domain == "example.com"
    assert result.disposable is False
    (call,) = transport.calls_to(EMAIL_URL)
    assert call.headers["Authorization"] == "Bearer test-key-email"


@pytest.mark.parametrize("email", ["not-an-email", "a@b", "two words@example.com"])
def test_email_rejects_bad_format(make_config, transport, clock, email):
    result = _verify(_client(EmailClient, make_config("email"), transport, clock), TenantRecord(email=email))
    assert result.error == "Invalid email format."
    assert transport.calls == []


# ------------------------- background / rental -------------------------

def test_background_reports_criminal_record(make_config, transport, clock):
    transport.responses[BACKGROUND_URL] = {"verified": True, "criminal_record": True, "court_cases": 2}
    result = _verify(_client(BackgroundCheckClient, make_config("background"), transport, clock))

    assert result.status == "success"
    assert result.confidence == 80
    assert result.criminal_record is True
    assert result.court_cases == 2
    assert result.pending_cases == 0
    (call,) = transport.calls_to(BACKGROUND_URL)
    assert call.payload == {
        "name": "Asha Verma",
        "aadhaar": "1234-5678-9012",
        "pan": "abcde1234f",
        "phone": "98765 43210",
        "purpose": "tenant_verification",
    }


def test_background_fallback_fields_on_not_configured(make_config, transport, clock):
    result = _verify(_client(BackgroundCheckClient, make_config(), transport, clock))
    assert result.status == "not_configured"
    assert result.criminal_record is False
    assert result.court_cases == 0


def test_rental_history_mapping(make_config, transport, clock):
    transport.responses[RENTAL_URL] = {
        "verified": True,
        "total_rentals": 4,
        "evictions": 1,
        "late_payments": 5,
        "issues": ["noise complaint"],
        "average_rating": 3.2,
    }
    result = _verify(_client(RentalHistoryClient, make_config("rental"), transport, clock))

    assert result.verified is True
    assert result.confidence == 75
    assert result.total_rentals == 4
    assert result.evictions == 1
    assert result.late_payments == 5
    assert result.issues == ["noise complaint"]
    assert result.current_rentals == 0


def test_rental_fallback_fields_on_error(make_config, transport, clock):
    transport.responses[RENTAL_URL] = 500
    result = _verify(_client(RentalHistoryClient, make_config("rental"), transport, clock))
    assert result.status == "error"
    assert result.total_rentals == 0
    assert result.issues == []


# ------------------------- message wording -------------------------

@pytest.mark.parametrize("cls,not_configured,http_error", [
    (IdentityClient, "UIDAI API key not configured.", "UIDAI API error: 500"),
    (TaxIdClient, "Income Tax API key not configured.", "Income Tax API error: 500"),
    (TelecomClient, "Telecom API key not configured.", "Telecom API error: 500"),
    (EmailClient, "Email verification API key not configured.", "Email verification error: 500"),
    (BackgroundCheckClient, "Police/Background check API key not configured.", "Background check API error: 500"),
    (RentalHistoryClient, "Rental database API key not configured.", "Rental history API error: 500"),
])
def test_provider_messages(make_config, transport, clock, cls, not_configured, http_error):
    missing = _verify(_client(cls, make_config(), transport, clock))
    assert missing.error == f"{not_configured} Please set up your environment variables."

    for url in list(transport.responses):
        transport.responses[url] = 500
    failed = _verify(_client(cls, make_config(cls.kind), transport, clock))
    assert failed.error == http_error
