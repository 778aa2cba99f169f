# -*- coding: utf-8 -*-
"""
Uniform provider client contract.

Every concrete client (identity, tax, telecom, email, background, rental) only
supplies three things: how to build its request body from a TenantRecord, the
JSON schema its response must satisfy, and how to map that response onto a
ProviderResult. The shared ``verify`` pipeline below does the rest:

1. credential check   -> not_configured (no budget consumed)
2. input validation   -> error          (no budget consumed, no network)
3. rate-limit admit   -> error when the window is exhausted
4. POST with bearer   -> error on non-2xx / network fault / timeout
5. schema + mapping   -> success, confidence = ceiling if verified else 0

``verify`` never raises; every failure comes back as result data.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from jsonschema import ValidationError as SchemaError
from jsonschema import validate as json_validate

from ..config import ProviderSettings
from ..errors import FieldValidationError, NotConfiguredError, RateLimitedError, TransportError
from ..models import (
    STATUS_ERROR,
    STATUS_NOT_CONFIGURED,
    STATUS_SUCCESS,
    ProviderResult,
    TenantRecord,
)
from .rate_limiter import RateLimiter
from .transport import Transport

LOGGER = logging.getLogger(__name__)

PURPOSE = "tenant_verification"


class ProviderClient:
    kind: str = ""
    path: str = ""
    confidence_ceiling: int = 0
    api_version: Optional[str] = None
    response_schema: Dict[str, Any] = {"type": "object"}

    def __init__(self, settings: ProviderSettings, limiter: RateLimiter, transport: Transport):
        if settings.kind != self.kind:
            raise ValueError(f"{type(self).__name__} expects {self.kind!r} settings, got {settings.kind!r}")
        self.settings = settings
        self.limiter = limiter
        self.transport = transport

    # ------------------------------ hooks ------------------------------------

    def build_payload(self, record: TenantRecord) -> Dict[str, Any]:
        """Normalised request body; raise FieldValidationError on bad input."""
        raise NotImplementedError

    def map_response(self, data: Dict[str, Any], record: TenantRecord) -> Dict[str, Any]:
        """Provider fields for a success result; must include ``verified``."""
        raise NotImplementedError

    def fallback_fields(self) -> Dict[str, Any]:
        """Payload fields reported alongside not_configured / error results."""
        return {}

    # ------------------------------ pipeline ---------------------------------

    @property
    def source(self) -> str:
        return self.settings.profile.source

    @property
    def url(self) -> str:
        return f"{self.settings.base_url}{self.path}"

    async def verify(self, record: TenantRecord) -> ProviderResult:
        try:
            if not self.settings.is_configured:
                raise NotConfiguredError(
                    f"{self.settings.profile.key_name} API key not configured. Please set up your environment variables."
                )
            payload = self.build_payload(record)
            if not self.limiter.admit(self.kind):
                raise RateLimitedError(f"Rate limit exceeded for {self.kind}. Try again later.")
            data = await self._call(payload)
            return self._success(self.map_response(data, record))
        except NotConfiguredError as exc:
            LOGGER.info("%s skipped: API key not configured", self.source)
            return self._result(STATUS_NOT_CONFIGURED, error=str(exc))
        except (FieldValidationError, RateLimitedError) as exc:
            LOGGER.warning("%s verification rejected: %s", self.source, exc)
            return self._result(STATUS_ERROR, error=str(exc))
        except TransportError as exc:
            detail = exc.status_code if exc.status_code is not None else exc
            LOGGER.warning("%s verification failed: %s", self.source, exc)
            return self._result(STATUS_ERROR, error=f"{self.settings.profile.error_prefix}: {detail}")
        except Exception as exc:  # noqa: BLE001
            LOGGER.exception("%s verification crashed", self.source)
            return self._result(STATUS_ERROR, error=f"{self.source} unexpected failure: {exc}")

    def _success(self, fields: Dict[str, Any]) -> ProviderResult:
        verified = bool(fields.pop("verified", False))
        return ProviderResult(
            kind=self.kind,
            source=self.source,
            status=STATUS_SUCCESS,
            verified=verified,
            confidence=self.confidence_ceiling if verified else 0,
            **fields,
        )

    async def _call(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = await self.transport.post_json(self.url, payload, self._headers())
        try:
            json_validate(instance=data, schema=self.response_schema)
        except SchemaError as exc:
            raise TransportError(f"malformed response ({str(exc).splitlines()[0]})") from exc
        return data

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.settings.api_key}",
        }
        if self.api_version:
            headers["X-API-Version"] = self.api_version
        return headers

    def _result(self, status: str, error: Optional[str] = None) -> ProviderResult:
        return ProviderResult(
            kind=self.kind,
            source=self.source,
            status=status,
            verified=False,
            error=error,
            **self.fallback_fields(),
        )


# ------------------------------ shared helpers --------------------------------

def digits_only(value: Optional[str]) -> str:
    return "".join(ch for ch in (value or "") if ch.isdigit())


def count(data: Dict[str, Any], key: str) -> int:
    return int(data.get(key) or 0)


def nullable(kind: str = "string") -> Dict[str, Any]:
    return {"type": [kind, "null"]}
