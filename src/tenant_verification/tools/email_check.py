# src/tenant_verification/tools/email_check.py
from __future__ import annotations

import re
from typing import Any, Dict

from ..config import EMAIL
from ..errors import FieldValidationError
from ..models import TenantRecord
from .provider_base import PURPOSE, ProviderClient, nullable

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class EmailClient(ProviderClient):
    """Deliverability / disposable-domain check."""

    kind = EMAIL
    path = "api/verify"
    confidence_ceiling = 70
    response_schema = {
        "type": "object",
        "properties": {
            "status": nullable(),
            "disposable": nullable("boolean"),
        },
    }

    def build_payload(self, record: TenantRecord) -> Dict[str, Any]:
        email = (record.email or "").strip()
        if not EMAIL_PATTERN.fullmatch(email):
            raise FieldValidationError("Invalid email format.")
        return {"email": email, "purpose": PURPOSE}

    def map_response(self, data: Dict[str, Any], record: TenantRecord) -> Dict[str, Any]:
        return {
            "verified": data.get("status") == "valid",
            "domain": (record.email or "").strip().split("@")[-1],
            "disposable": bool(data.get("disposable")),
        }
