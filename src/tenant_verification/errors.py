"""Failure taxonomy for the verification core.

Provider-level failures (not configured, bad input, rate limit, transport) are
raised and caught inside a provider client and turned into result data. Only
``InternalError`` reaches the orchestrator, which still answers with a
degraded report.
"""

from __future__ import annotations

from typing import Optional


class VerificationError(Exception):
    """Base class for every error raised by tenant_verification."""


class ConfigError(VerificationError):
    """Configuration value present but unusable (bad rate limit, timeout, YAML)."""


class NotConfiguredError(VerificationError):
    """Provider credential missing or still set to its placeholder."""


class FieldValidationError(VerificationError):
    """Input field has the wrong shape; never reaches the network."""


class RateLimitedError(VerificationError):
    """Provider budget exhausted for the current window."""


class TransportError(VerificationError):
    """Non-2xx response, network fault or timeout."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class InternalError(VerificationError):
    """Fault inside the orchestrator or scorer, not tied to one provider."""
