from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

STATUS_SUCCESS = "success"
STATUS_ERROR = "error"
STATUS_NOT_CONFIGURED = "not_configured"

RISK_LOW = "Low"
RISK_MEDIUM = "Medium"
RISK_HIGH = "High"
RISK_VERY_HIGH = "Very High"
RISK_UNKNOWN = "Unknown"

COVERAGE_NONE = "none"
COVERAGE_PARTIAL = "partial"
COVERAGE_FULL = "full"

IDENTIFYING_FIELDS = ("full_name", "identity_number", "tax_id", "phone_number", "email")


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


class TenantRecord(BaseModel):
    """Applicant data as collected by a front end; accepts snake_case or camelCase keys."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True, extra="ignore")

    full_name: Optional[str] = None
    identity_number: Optional[str] = None   # 12-digit national ID, separators allowed
    tax_id: Optional[str] = None            # 10-character alphanumeric
    phone_number: Optional[str] = None      # 10-digit
    email: Optional[str] = None
    current_address: Optional[str] = None
    employer: Optional[str] = None
    monthly_salary: Optional[float] = None

    @field_validator("full_name", "identity_number", "tax_id", "phone_number", "email",
                     "current_address", "employer", mode="before")
    @classmethod
    def _blank_is_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("monthly_salary", mode="before")
    @classmethod
    def _parse_salary(cls, v):
        if isinstance(v, str):
            v = v.replace(",", "").replace("₹", "").strip()
            return v or None
        return v

    def has_identifying_field(self) -> bool:
        return any(getattr(self, name) for name in IDENTIFYING_FIELDS)


class ProviderResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: str
    verified: bool = False
    source: str
    status: Literal["success", "error", "not_configured"]
    confidence: Optional[int] = Field(default=None, ge=0, le=100)
    last_verified: datetime = Field(default_factory=utc_now)
    error: Optional[str] = None

    # identity / tax
    name: Optional[str] = None
    dob: Optional[str] = None
    address: Optional[str] = None
    gender: Optional[str] = None
    photo: Optional[str] = None
    pan_status: Optional[str] = None
    category: Optional[str] = None

    # telecom
    carrier: Optional[str] = None
    location: Optional[str] = None
    line_type: Optional[str] = None   # prepaid | postpaid

    # email
    domain: Optional[str] = None
    disposable: Optional[bool] = None

    # background
    criminal_record: Optional[bool] = None
    court_cases: Optional[int] = None
    pending_cases: Optional[int] = None
    credit_score: Optional[int] = None
    employment_status: Optional[str] = None

    # rental
    total_rentals: Optional[int] = None
    current_rentals: Optional[int] = None
    past_rentals: Optional[int] = None
    issues: Optional[List[str]] = None
    evictions: Optional[int] = None
    late_payments: Optional[int] = None
    average_rating: Optional[float] = None
    last_rental: Optional[str] = None

    @model_validator(mode="after")
    def _status_invariants(self) -> "ProviderResult":
        if self.status != STATUS_SUCCESS and self.verified:
            raise ValueError(f"{self.status} result cannot be verified")
        if self.status == STATUS_NOT_CONFIGURED and self.confidence is not None:
            raise ValueError("not_configured result carries no confidence")
        return self

    @property
    def is_configured(self) -> bool:
        return self.status != STATUS_NOT_CONFIGURED


class VerificationReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=utc_now)
    tenant_data: TenantRecord
    verifications: Dict[str, ProviderResult] = Field(default_factory=dict)
    overall_score: int = Field(default=0, ge=0, le=100)
    risk_level: str = RISK_UNKNOWN       # Low | Medium | High | Very High | Unknown
    recommendations: List[str] = Field(default_factory=list)
    configured_services: int = 0
    coverage: str = COVERAGE_NONE        # none | partial | full
    error: Optional[str] = None
