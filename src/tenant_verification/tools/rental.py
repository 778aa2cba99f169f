# src/tenant_verification/tools/rental.py
from __future__ import annotations

from typing import Any, Dict

from ..config import RENTAL
from ..models import TenantRecord
from .provider_base import PURPOSE, ProviderClient, count, nullable


class RentalHistoryClient(ProviderClient):
    kind = RENTAL
    path = "api/rental-history"
    confidence_ceiling = 75
    response_schema = {
        "type": "object",
        "properties": {
            "verified": nullable("boolean"),
            "total_rentals": nullable("integer"),
            "current_rentals": nullable("integer"),
            "past_rentals": nullable("integer"),
            "issues": {"type": ["array", "null"], "items": {"type": "string"}},
            "evictions": nullable("integer"),
            "late_payments": nullable("integer"),
            "average_rating": nullable("number"),
            "last_rental": nullable(),
        },
    }

    def build_payload(self, record: TenantRecord) -> Dict[str, Any]:
        return {
            "name": record.full_name,
            "phone": record.phone_number,
            "aadhaar": record.identity_number,
            "purpose": PURPOSE,
        }

    def map_response(self, data: Dict[str, Any], record: TenantRecord) -> Dict[str, Any]:
        return {
            "verified": bool(data.get("verified")),
            "total_rentals": count(data, "total_rentals"),
            "current_rentals": count(data, "current_rentals"),
            "past_rentals": count(data, "past_rentals"),
            "issues": list(data.get("issues") or []),
            "evictions": count(data, "evictions"),
            "late_payments": count(data, "late_payments"),
            "average_rating": data.get("average_rating"),
            "last_rental": data.get("last_rental"),
        }

    def fallback_fields(self) -> Dict[str, Any]:
        return {"total_rentals": 0, "issues": []}
