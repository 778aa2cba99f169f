from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Mapping

from ..config import WINDOW_SECONDS, VerificationConfig

logger = logging.getLogger(__name__)


@dataclass
class RateLimitState:
    request_count: int
    limit: int
    window_reset_at: float


class RateLimiter:
    """
    Fixed-window request counter, one window per provider kind.

    The window is rolled over lazily inside ``admit`` (no background timer).
    Check-then-increment is one step under ``_lock``; providers never share a
    budget, so one exhausted provider cannot block another.
    """

    def __init__(
        self,
        limits: Mapping[str, int],
        clock: Callable[[], float] = time.time,
        window_seconds: float = WINDOW_SECONDS,
    ):
        self._clock = clock
        self._window = window_seconds
        self._lock = threading.Lock()
        now = clock()
        self._states: Dict[str, RateLimitState] = {
            kind: RateLimitState(request_count=0, limit=int(limit), window_reset_at=now + window_seconds)
            for kind, limit in limits.items()
        }

    @classmethod
    def from_config(cls, config: VerificationConfig, clock: Callable[[], float] = time.time) -> "RateLimiter":
        limits = {kind: settings.rate_limit for kind, settings in config.providers.items()}
        return cls(limits, clock=clock)

    def admit(self, kind: str) -> bool:
        with self._lock:
            state = self._states.get(kind)
            if state is None:
                logger.warning("Rate limiter has no budget for provider %r; denying", kind)
                return False

            now = self._clock()
            if now > state.window_reset_at:
                state.request_count = 0
                state.window_reset_at = now + self._window

            if state.request_count >= state.limit:
                logger.warning("Rate limit exhausted for %s (%d/%d)", kind, state.request_count, state.limit)
                return False

            state.request_count += 1
            return True

    def request_count(self, kind: str) -> int:
        with self._lock:
            state = self._states.get(kind)
            return state.request_count if state else 0
