# -*- coding: utf-8 -*-
"""
Scoring for a finished verification run.

Works on the assembled ``kind -> ProviderResult`` mapping only, so the outcome
never depends on which provider answered first.

- Weighted score: identity 30, tax 25, telecom 20, email 10, background 15.
  Rental history feeds recommendations only.
- A configured provider always adds its weight; it adds score only when it
  passed (background passes unless it reports a criminal record; an errored
  check reports none).
- Not-configured providers are left out of both sums.
- Recommendation order is fixed and part of the contract.
"""

from __future__ import annotations

from typing import Dict, List, Mapping

from .config import BACKGROUND, EMAIL, IDENTITY, PROVIDER_KINDS, PROVIDER_PROFILES, RENTAL, TAX, TELECOM
from .models import (
    COVERAGE_FULL,
    COVERAGE_NONE,
    COVERAGE_PARTIAL,
    RISK_HIGH,
    RISK_LOW,
    RISK_MEDIUM,
    RISK_VERY_HIGH,
    ProviderResult,
)

WEIGHTS: Dict[str, int] = {
    IDENTITY: 30,
    TAX: 25,
    TELECOM: 20,
    EMAIL: 10,
    BACKGROUND: 15,
}

LATE_PAYMENT_THRESHOLD = 3

MSG_SETUP_REQUIRED = (
    "SETUP REQUIRED: No API keys configured. Please set up your environment variables "
    "to enable verification services."
)
MSG_SETUP_DOCS = "See ENVIRONMENT_SETUP.md for detailed instructions."
MSG_PARTIAL_SETUP = "PARTIAL SETUP: The following services are not configured: {services}"
MSG_CONFIGURE_ALL = "Configure these services for complete verification coverage."
MSG_RECOMMENDED = "RECOMMENDED: This tenant appears to be a good candidate for rental."
MSG_CAUTION = "CAUTION: Additional verification may be required before proceeding."
MSG_NOT_RECOMMENDED = "NOT RECOMMENDED: This tenant has significant risk factors."
MSG_CRIMINAL_RECORD = "CRITICAL: Criminal record found. Strongly advise against proceeding."
MSG_EVICTIONS = "WARNING: Previous evictions detected. Proceed with extreme caution."
MSG_LATE_PAYMENTS = "CAUTION: Multiple late payments in rental history."
MSG_NO_DATA = "NO VERIFICATION DATA: Unable to verify tenant information with current configuration."
MSG_INTERNAL_ERROR = "ERROR: Verification failed due to an internal error. Please try again."


def _passed(result: ProviderResult) -> bool:
    if result.kind == BACKGROUND:
        return not result.criminal_record
    return result.verified


def count_configured_services(results: Mapping[str, ProviderResult]) -> int:
    return sum(1 for kind, r in results.items() if kind in WEIGHTS and r.is_configured)


def calculate_overall_score(results: Mapping[str, ProviderResult]) -> int:
    total_score = 0
    total_weight = 0
    for kind, weight in WEIGHTS.items():
        result = results.get(kind)
        if result is None or not result.is_configured:
            continue
        total_weight += weight
        if _passed(result):
            total_score += weight

    if count_configured_services(results) == 0 or total_weight == 0:
        return 0
    # integer round-half-up of 100 * score / weight
    return (200 * total_score + total_weight) // (2 * total_weight)


def calculate_risk_level(score: int) -> str:
    if score >= 90:
        return RISK_LOW
    if score >= 70:
        return RISK_MEDIUM
    if score >= 50:
        return RISK_HIGH
    return RISK_VERY_HIGH


def not_configured_labels(results: Mapping[str, ProviderResult]) -> List[str]:
    return [
        PROVIDER_PROFILES[kind].label
        for kind in PROVIDER_KINDS
        if kind in results and not results[kind].is_configured
    ]


def calculate_coverage(results: Mapping[str, ProviderResult]) -> str:
    missing = sum(1 for r in results.values() if not r.is_configured)
    if not results or missing == len(results):
        return COVERAGE_NONE
    return COVERAGE_PARTIAL if missing else COVERAGE_FULL


def generate_recommendations(results: Mapping[str, ProviderResult], overall_score: int) -> List[str]:
    recommendations: List[str] = []
    missing = not_configured_labels(results)

    if len(missing) == len(PROVIDER_KINDS):
        return [MSG_SETUP_REQUIRED, MSG_SETUP_DOCS]

    if missing:
        recommendations.append(MSG_PARTIAL_SETUP.format(services=", ".join(missing)))
        recommendations.append(MSG_CONFIGURE_ALL)

    if overall_score > 0:
        if overall_score >= 90:
            recommendations.append(MSG_RECOMMENDED)
        elif overall_score >= 70:
            recommendations.append(MSG_CAUTION)
        else:
            recommendations.append(MSG_NOT_RECOMMENDED)

        background = results.get(BACKGROUND)
        if background and background.is_configured and background.criminal_record:
            recommendations.append(MSG_CRIMINAL_RECORD)

        rental = results.get(RENTAL)
        if rental and rental.is_configured and (rental.evictions or 0) > 0:
            recommendations.append(MSG_EVICTIONS)
        if rental and rental.is_configured and (rental.late_payments or 0) > LATE_PAYMENT_THRESHOLD:
            recommendations.append(MSG_LATE_PAYMENTS)
    elif not missing:
        recommendations.append(MSG_NO_DATA)

    return recommendations
