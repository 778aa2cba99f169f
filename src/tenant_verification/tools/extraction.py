# src/tenant_verification/tools/extraction.py
"""
Build a TenantRecord from what a front end scraped: free text the user
selected on a page, or the name/value pairs of a rental application form.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from typing import Dict, Mapping, Optional, Tuple

from ..models import TenantRecord

logger = logging.getLogger(__name__)

PHONE_RE = re.compile(r"(?:\+91)?[-\s]?[6-9]\d{9}")
EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
AADHAAR_RE = re.compile(r"\d{4}-?\d{4}-?\d{4}")
PAN_RE = re.compile(r"[A-Z]{5}[0-9]{4}[A-Z]")

# (substrings of the form field name, TenantRecord field); first hit wins
FORM_FIELD_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("name", "fullname"), "full_name"),
    (("phone", "mobile"), "phone_number"),
    (("email",), "email"),
    (("address",), "current_address"),
    (("aadhaar",), "identity_number"),
    (("employer", "company"), "employer"),
    (("pan",), "tax_id"),
    (("salary", "income"), "monthly_salary"),
)


def _norm(text: Optional[str]) -> str:
    """NFKC + drop zero-width characters (copy/paste from web pages)."""
    text = unicodedata.normalize("NFKC", text or "")
    for ch in ("\u200b", "\u200c", "\u200d", "\ufeff"):
        text = text.replace(ch, "")
    return text


def _first(pattern: re.Pattern[str], text: str) -> Optional[str]:
    m = pattern.search(text)
    return m.group(0).strip() if m else None


def extract_from_text(text: str) -> TenantRecord:
    """Pull phone, email, Aadhaar and PAN out of free text."""
    text = _norm(text)
    email = _first(EMAIL_RE, text)
    # keep the email's digits from being read as a phone number
    scrubbed = text.replace(email, " ") if email else text
    aadhaar = _first(AADHAAR_RE, scrubbed)
    if aadhaar:
        scrubbed = scrubbed.replace(aadhaar, " ")
    phone = _first(PHONE_RE, scrubbed)
    if phone:
        phone = re.sub(r"^\+91", "", phone).strip(" -")
    return TenantRecord(
        phone_number=phone,
        email=email,
        identity_number=aadhaar,
        tax_id=_first(PAN_RE, text),
    )


def map_form_field(field_name: str) -> Optional[str]:
    lowered = (field_name or "").lower()
    for needles, target in FORM_FIELD_RULES:
        if any(n in lowered for n in needles):
            return target
    return None


def extract_from_form(fields: Mapping[str, Optional[str]]) -> TenantRecord:
    """Map arbitrary form field names (``applicant_mobile``, ``panNo`` ...) onto a record."""
    data: Dict[str, str] = {}
    for name, value in fields.items():
        target = map_form_field(name)
        if target is None:
            logger.debug("Ignoring form field %r", name)
            continue
        if value is not None and str(value).strip():
            data[target] = _norm(str(value)).strip()
    return TenantRecord(**data)
