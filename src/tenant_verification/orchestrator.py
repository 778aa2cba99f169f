# -*- coding: utf-8 -*-
"""
Verification orchestrator.

Fans one TenantRecord out to every provider whose precondition field is
present, waits for all of them (no short-circuit on failure), then hands the
assembled results to the scorer.

Usage
-----
    config = load_config()
    async with VerificationOrchestrator(config) as orchestrator:
        report = await orchestrator.run_verification(record)

The rate limiter is passed in (or built from the config) and outlives a single
run; everything else is scoped to the call.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, List, Optional

from .config import BACKGROUND, EMAIL, IDENTITY, PROVIDER_KINDS, RENTAL, TAX, TELECOM, VerificationConfig
from .errors import InternalError
from .models import RISK_UNKNOWN, ProviderResult, TenantRecord, VerificationReport
from .scoring import (
    MSG_INTERNAL_ERROR,
    calculate_coverage,
    calculate_overall_score,
    calculate_risk_level,
    count_configured_services,
    generate_recommendations,
)
from .tools.background import BackgroundCheckClient
from .tools.email_check import EmailClient
from .tools.identity import IdentityClient
from .tools.provider_base import ProviderClient
from .tools.rate_limiter import RateLimiter
from .tools.rental import RentalHistoryClient
from .tools.tax import TaxIdClient
from .tools.telecom import TelecomClient
from .tools.transport import HttpTransport, Transport

LOGGER = logging.getLogger(__name__)

CLIENT_CLASSES = {
    IDENTITY: IdentityClient,
    TAX: TaxIdClient,
    TELECOM: TelecomClient,
    EMAIL: EmailClient,
    BACKGROUND: BackgroundCheckClient,
    RENTAL: RentalHistoryClient,
}


def build_clients(
    config: VerificationConfig,
    limiter: RateLimiter,
    transport: Transport,
) -> Dict[str, ProviderClient]:
    return {
        kind: CLIENT_CLASSES[kind](config.provider(kind), limiter, transport)
        for kind in PROVIDER_KINDS
    }


def select_providers(record: TenantRecord) -> List[str]:
    """
    Provider kinds to invoke for this record, in catalogue order.

    Identity, tax, telecom and email each need their own field. Background and
    rental key off name/phone/ID jointly and run whenever any identifying
    field is present.
    """
    if not record.has_identifying_field():
        return []
    selected: List[str] = []
    if record.identity_number:
        selected.append(IDENTITY)
    if record.tax_id:
        selected.append(TAX)
    if record.phone_number:
        selected.append(TELECOM)
    if record.email:
        selected.append(EMAIL)
    selected.extend([BACKGROUND, RENTAL])
    return selected


class VerificationOrchestrator:
    def __init__(
        self,
        config: VerificationConfig,
        limiter: Optional[RateLimiter] = None,
        transport: Optional[Transport] = None,
        clients: Optional[Dict[str, ProviderClient]] = None,
    ):
        self.config = config
        self.limiter = limiter or RateLimiter.from_config(config)
        self._owns_transport = transport is None
        self.transport = transport or HttpTransport(timeout_seconds=config.timeout_seconds)
        self.clients = clients if clients is not None else build_clients(config, self.limiter, self.transport)

    async def __aenter__(self) -> "VerificationOrchestrator":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_transport:
            await self.transport.close()

    async def run_verification(self, record: TenantRecord) -> VerificationReport:
        kinds = [k for k in select_providers(record) if k in self.clients]
        LOGGER.info("Verification started: providers=%s", ",".join(kinds) or "none")

        try:
            results = await self._gather(kinds, record)
            overall_score = calculate_overall_score(results)
            report = VerificationReport(
                tenant_data=record,
                verifications=results,
                overall_score=overall_score,
                risk_level=calculate_risk_level(overall_score),
                recommendations=generate_recommendations(results, overall_score),
                configured_services=count_configured_services(results),
                coverage=calculate_coverage(results),
            )
        except Exception as exc:  # noqa: BLE001
            LOGGER.exception("Verification failed inside the orchestrator")
            return self._failed_report(record, exc)

        LOGGER.info(
            "Verification finished: score=%d risk=%s coverage=%s",
            report.overall_score, report.risk_level, report.coverage,
        )
        return report

    async def _gather(self, kinds: Iterable[str], record: TenantRecord) -> Dict[str, ProviderResult]:
        kinds = list(kinds)
        outcomes = await asyncio.gather(
            *(self.clients[kind].verify(record) for kind in kinds),
            return_exceptions=True,
        )
        results: Dict[str, ProviderResult] = {}
        for kind, outcome in zip(kinds, outcomes):
            if isinstance(outcome, BaseException):
                raise InternalError(f"{kind} client raised instead of returning a result: {outcome!r}") from outcome
            results[kind] = outcome
        return results

    @staticmethod
    def _failed_report(record: TenantRecord, exc: Exception) -> VerificationReport:
        return VerificationReport(
            tenant_data=record,
            overall_score=0,
            risk_level=RISK_UNKNOWN,
            recommendations=[MSG_INTERNAL_ERROR],
            error=str(exc),
        )


async def verify_tenant(record: TenantRecord, config: VerificationConfig, **kwargs) -> VerificationReport:
    async with VerificationOrchestrator(config, **kwargs) as orchestrator:
        return await orchestrator.run_verification(record)


def run_verification_sync(record: TenantRecord, config: VerificationConfig, **kwargs) -> VerificationReport:
    """Blocking wrapper for callers without an event loop (CLI, serverless handler)."""
    return asyncio.run(verify_tenant(record, config, **kwargs))
