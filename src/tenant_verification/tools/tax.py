# src/tenant_verification/tools/tax.py
from __future__ import annotations

import re
from typing import Any, Dict

from ..config import TAX
from ..errors import FieldValidationError
from ..models import TenantRecord
from .provider_base import PURPOSE, ProviderClient, nullable


class TaxIdClient(ProviderClient):
    """PAN status lookup at the income tax registry."""

    kind = TAX
    path = "api/pan/verify"
    confidence_ceiling = 90
    api_version = "1.0"
    response_schema = {
        "type": "object",
        "properties": {
            "status": nullable(),
            "name": nullable(),
            "category": nullable(),
        },
    }

    def build_payload(self, record: TenantRecord) -> Dict[str, Any]:
        pan = re.sub(r"[^A-Z0-9]", "", (record.tax_id or "").upper())
        if len(pan) != 10:
            raise FieldValidationError("Invalid PAN number. Must be 10 characters.")
        return {"pan_number": pan, "purpose": PURPOSE}

    def map_response(self, data: Dict[str, Any], record: TenantRecord) -> Dict[str, Any]:
        return {
            "verified": data.get("status") == "active",
            "name": data.get("name"),
            "pan_status": data.get("status") or "unknown",
            "category": data.get("category"),
        }
