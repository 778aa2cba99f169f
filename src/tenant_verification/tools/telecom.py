# src/tenant_verification/tools/telecom.py
from __future__ import annotations

from typing import Any, Dict

from ..config import TELECOM
from ..errors import FieldValidationError
from ..models import TenantRecord
from .provider_base import PURPOSE, ProviderClient, digits_only, nullable


class TelecomClient(ProviderClient):
    kind = TELECOM
    path = "api/phone/verify"
    confidence_ceiling = 85
    response_schema = {
        "type": "object",
        "properties": {
            "status": nullable(),
            "carrier": nullable(),
            "location": nullable(),
            "type": nullable(),
        },
    }

    def build_payload(self, record: TenantRecord) -> Dict[str, Any]:
        phone = digits_only(record.phone_number)
        if len(phone) != 10:
            raise FieldValidationError("Invalid phone number. Must be 10 digits.")
        return {"phone_number": phone, "purpose": PURPOSE}

    def map_response(self, data: Dict[str, Any], record: TenantRecord) -> Dict[str, Any]:
        return {
            "verified": data.get("status") == "active",
            "carrier": data.get("carrier"),
            "location": data.get("location"),
            "line_type": data.get("type"),
        }
