# test/conftest.py
import pytest

from tenant_verification.config import PROVIDER_PROFILES, load_config
from tenant_verification.tools.fakes import FakeTransport

# Host-qualified suffixes: identity and email both POST to ".../api/verify"
IDENTITY_URL = "resident.uidai.gov.in/api/verify"
TAX_URL = "www.incometax.gov.in/api/pan/verify"
TELECOM_URL = "www.trai.gov.in/api/phone/verify"
EMAIL_URL = "api.email-validator.net/api/verify"
BACKGROUND_URL = "bprd.gov.in/api/background-check"
RENTAL_URL = "api.rentalverification.in/api/rental-history"

OK_RESPONSES = {
    IDENTITY_URL: {
        "status": "success",
        "name": "Asha Verma",
        "date_of_birth": "1990-04-12",
        "address": "12 MG Road, Bengaluru",
        "gender": "F",
        "photo_url": "https://example.test/photo.jpg",
    },
    TAX_URL: {"status": "active", "name": "ASHA VERMA", "category": "Individual"},
    TELECOM_URL: {"status": "active", "carrier": "Airtel", "location": "Karnataka", "type": "postpaid"},
    EMAIL_URL: {"status": "valid", "disposable": False},
    BACKGROUND_URL: {
        "verified": True,
        "criminal_record": False,
        "court_cases": 0,
        "pending_cases": 0,
        "credit_score": 760,
        "employment_status": "employed",
    },
    RENTAL_URL: {
        "verified": True,
        "total_rentals": 3,
        "current_rentals": 1,
        "past_rentals": 2,
        "issues": [],
        "evictions": 0,
        "late_payments": 1,
        "average_rating": 4.5,
        "last_rental": "2024-03-01",
    },
}


def keys_for(*kinds):
    """Config overrides giving each named provider kind a real-looking API key."""
    return {f"{PROVIDER_PROFILES[k].prefix}_API_KEY": f"test-key-{k}" for k in kinds}


@pytest.fixture
def make_config():
    """Config built from explicit values only; the process environment is ignored."""
    def _make(*kinds, **overrides):
        values = keys_for(*kinds)
        values.update(overrides)
        return load_config(values, environ={})
    return _make


@pytest.fixture
def all_configured(make_config):
    return make_config(*PROVIDER_PROFILES)


@pytest.fixture
def transport():
    return FakeTransport(responses=dict(OK_RESPONSES))


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()
