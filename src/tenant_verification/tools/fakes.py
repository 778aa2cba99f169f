"""
Deterministic stand-ins for provider traffic.

FakeTransport answers POSTs from canned per-path responses (or fails them with
a status code), and records every call so tests can assert what went out.
StaticProviderClient skips HTTP entirely and returns a fixed ProviderResult.
Neither makes random decisions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from ..errors import TransportError
from ..models import ProviderResult, TenantRecord


@dataclass
class RecordedCall:
    url: str
    payload: Dict[str, Any]
    headers: Dict[str, str]


@dataclass
class FakeTransport:
    """
    ``responses`` maps a URL suffix (e.g. ``"api/pan/verify"``) to either a JSON
    body or an ``int`` HTTP status that should fail the call. The longest
    matching suffix wins; unmatched URLs fail with 404.
    """

    responses: Dict[str, Union[Dict[str, Any], int, Any]] = field(default_factory=dict)
    calls: List[RecordedCall] = field(default_factory=list)
    closed: bool = False

    async def post_json(self, url: str, payload: Dict[str, Any], headers: Dict[str, str]) -> Any:
        self.calls.append(RecordedCall(url=url, payload=dict(payload), headers=dict(headers)))
        matches = [suffix for suffix in self.responses if url.endswith(suffix)]
        if not matches:
            raise TransportError("HTTP 404", status_code=404)
        canned = self.responses[max(matches, key=len)]
        if isinstance(canned, int) and not isinstance(canned, bool):
            raise TransportError(f"HTTP {canned}", status_code=canned)
        if isinstance(canned, Exception):
            raise canned
        return canned

    async def close(self) -> None:
        self.closed = True

    def calls_to(self, suffix: str) -> List[RecordedCall]:
        return [c for c in self.calls if c.url.endswith(suffix)]


class StaticProviderClient:
    """Provider client replacement that returns one canned result per call."""

    def __init__(self, result: ProviderResult, error: Optional[BaseException] = None):
        self.kind = result.kind
        self.result = result
        self.error = error
        self.calls = 0

    async def verify(self, record: TenantRecord) -> ProviderResult:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result
