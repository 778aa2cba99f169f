# src/tenant_verification/tools/identity.py
from __future__ import annotations

from typing import Any, Dict

from ..config import IDENTITY
from ..errors import FieldValidationError
from ..models import TenantRecord
from .provider_base import PURPOSE, ProviderClient, digits_only, nullable


class IdentityClient(ProviderClient):
    """National identity (Aadhaar) lookup against the UIDAI registry."""

    kind = IDENTITY
    path = "api/verify"
    confidence_ceiling = 95
    api_version = "2.0"
    response_schema = {
        "type": "object",
        "properties": {
            "status": nullable(),
            "name": nullable(),
            "date_of_birth": nullable(),
            "address": nullable(),
            "gender": nullable(),
            "photo_url": nullable(),
        },
    }

    def build_payload(self, record: TenantRecord) -> Dict[str, Any]:
        number = digits_only(record.identity_number)
        if len(number) != 12:
            raise FieldValidationError("Invalid Aadhaar number. Must be 12 digits.")
        return {"aadhaar_number": number, "otp": None, "consent": True, "purpose": PURPOSE}

    def map_response(self, data: Dict[str, Any], record: TenantRecord) -> Dict[str, Any]:
        return {
            "verified": data.get("status") == "success",
            "name": data.get("name"),
            "dob": data.get("date_of_birth"),
            "address": data.get("address"),
            "gender": data.get("gender"),
            "photo": data.get("photo_url"),
        }
