# src/tenant_verification/tools/background.py
from __future__ import annotations

from typing import Any, Dict

from ..config import BACKGROUND
from ..models import TenantRecord
from .provider_base import PURPOSE, ProviderClient, count, nullable


class BackgroundCheckClient(ProviderClient):
    """
    Criminal-record / court-case screening.

    Keyed on name, national ID, PAN and phone together, so there is no single
    field to shape-check; whatever the record carries is forwarded as-is.
    """

    kind = BACKGROUND
    path = "api/background-check"
    confidence_ceiling = 80
    response_schema = {
        "type": "object",
        "properties": {
            "verified": nullable("boolean"),
            "criminal_record": nullable("boolean"),
            "court_cases": nullable("integer"),
            "pending_cases": nullable("integer"),
            "credit_score": nullable("integer"),
            "employment_status": nullable(),
        },
    }

    def build_payload(self, record: TenantRecord) -> Dict[str, Any]:
        return {
            "name": record.full_name,
            "aadhaar": record.identity_number,
            "pan": record.tax_id,
            "phone": record.phone_number,
            "purpose": PURPOSE,
        }

    def map_response(self, data: Dict[str, Any], record: TenantRecord) -> Dict[str, Any]:
        return {
            "verified": bool(data.get("verified")),
            "criminal_record": bool(data.get("criminal_record")),
            "court_cases": count(data, "court_cases"),
            "pending_cases": count(data, "pending_cases"),
            "credit_score": data.get("credit_score"),
            "employment_status": data.get("employment_status"),
        }

    def fallback_fields(self) -> Dict[str, Any]:
        return {"criminal_record": False, "court_cases": 0}
