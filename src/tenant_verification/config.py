# -*- coding: utf-8 -*-
"""
Provider configuration for the verification core.

Design
------
- One static profile per provider kind (prefix, display names, defaults, placeholder key).
- Recognised keys per provider: <PREFIX>_BASE_URL, <PREFIX>_API_KEY, <PREFIX>_RATE_LIMIT.
- Sources, lowest to highest precedence: hard-coded defaults -> YAML file -> environment -> explicit overrides.
- A credential equal to its known placeholder is treated exactly like an absent one.
- The result is an explicitly constructed, frozen VerificationConfig (no module-level mutable state).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from jsonschema import ValidationError as SchemaError
from jsonschema import validate as json_validate
from pydantic import BaseModel, ConfigDict

from .errors import ConfigError

# ------------------------------ Logger ---------------------------------------

LOGGER = logging.getLogger(__name__)

# ------------------------------ Provider catalogue ---------------------------

IDENTITY = "identity"
TAX = "tax"
TELECOM = "telecom"
EMAIL = "email"
BACKGROUND = "background"
RENTAL = "rental"

# Fixed order used for reporting and recommendations
PROVIDER_KINDS = (IDENTITY, TAX, TELECOM, EMAIL, BACKGROUND, RENTAL)

WINDOW_SECONDS: float = 3600.0
DEFAULT_TIMEOUT_SECONDS: float = 10.0
DEFAULT_LOG_LEVEL: str = "INFO"


@dataclass(frozen=True)
class ProviderProfile:
    kind: str
    prefix: str
    source: str
    label: str
    default_base_url: str
    default_rate_limit: int
    placeholder_key: str
    key_name: str       # "<key_name> API key not configured..."
    error_prefix: str   # "<error_prefix>: <status>"


PROVIDER_PROFILES: Dict[str, ProviderProfile] = {
    IDENTITY: ProviderProfile(
        IDENTITY, "UIDAI", "UIDAI", "Aadhaar verification",
        "https://resident.uidai.gov.in/", 100, "your_uidai_production_api_key_here",
        "UIDAI", "UIDAI API error",
    ),
    TAX: ProviderProfile(
        TAX, "INCOMETAX", "Income Tax Department", "PAN verification",
        "https://www.incometax.gov.in/", 50, "your_incometax_production_api_key_here",
        "Income Tax", "Income Tax API error",
    ),
    TELECOM: ProviderProfile(
        TELECOM, "TELECOM", "Telecom Database", "Phone verification",
        "https://www.trai.gov.in/", 200, "your_telecom_production_api_key_here",
        "Telecom", "Telecom API error",
    ),
    EMAIL: ProviderProfile(
        EMAIL, "EMAIL", "Email Verification Service", "Email verification",
        "https://api.email-validator.net/", 100, "your_email_verification_production_api_key_here",
        "Email verification", "Email verification error",
    ),
    BACKGROUND: ProviderProfile(
        BACKGROUND, "POLICE", "Background Check Service", "Background check",
        "https://bprd.gov.in/", 30, "your_police_production_api_key_here",
        "Police/Background check", "Background check API error",
    ),
    RENTAL: ProviderProfile(
        RENTAL, "RENTAL", "Rental History Database", "Rental history",
        "https://api.rentalverification.in/", 500, "your_rental_database_production_api_key_here",
        "Rental database", "Rental history API error",
    ),
}

# Top-level YAML must be a flat mapping of UPPER_SNAKE keys to scalars
_CONFIG_FILE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "propertyNames": {"pattern": r"^[A-Z][A-Z0-9_]*$"},
    "additionalProperties": {"type": ["string", "integer", "number", "boolean", "null"]},
}


# ------------------------------ Models ---------------------------------------

class ProviderSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: str
    base_url: str
    api_key: Optional[str] = None
    rate_limit: int

    @property
    def profile(self) -> ProviderProfile:
        return PROVIDER_PROFILES[self.kind]

    @property
    def is_configured(self) -> bool:
        key = (self.api_key or "").strip()
        return bool(key) and key != self.profile.placeholder_key


class VerificationConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    providers: Dict[str, ProviderSettings]
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    log_level: str = DEFAULT_LOG_LEVEL

    def provider(self, kind: str) -> ProviderSettings:
        return self.providers[kind]

    def configuration_status(self) -> Dict[str, List[str]]:
        """Source names split into configured / not configured, in catalogue order."""
        configured: List[str] = []
        missing: List[str] = []
        for kind in PROVIDER_KINDS:
            settings = self.providers[kind]
            (configured if settings.is_configured else missing).append(settings.profile.source)
        return {"configured": configured, "not_configured": missing}

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "VerificationConfig":
        providers = {
            kind: _provider_from_mapping(profile, values)
            for kind, profile in PROVIDER_PROFILES.items()
        }
        timeout = _positive_float(values.get("PROVIDER_TIMEOUT_SECONDS"), DEFAULT_TIMEOUT_SECONDS, "PROVIDER_TIMEOUT_SECONDS")
        log_level = str(values.get("LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
        return cls(providers=providers, timeout_seconds=timeout, log_level=log_level)


# ------------------------------ Helpers --------------------------------------

def _blank_to_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _non_negative_int(value: Any, default: int, key: str) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    try:
        number = int(str(value).strip())
    except ValueError as exc:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from exc
    if number < 0:
        raise ConfigError(f"{key} must not be negative, got {number}")
    return number


def _positive_float(value: Any, default: float, key: str) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    try:
        number = float(str(value).strip())
    except ValueError as exc:
        raise ConfigError(f"{key} must be a number, got {value!r}") from exc
    if number <= 0:
        raise ConfigError(f"{key} must be positive, got {number}")
    return number


def _provider_from_mapping(profile: ProviderProfile, values: Mapping[str, Any]) -> ProviderSettings:
    base_url = _blank_to_none(values.get(f"{profile.prefix}_BASE_URL")) or profile.default_base_url
    if not base_url.endswith("/"):
        base_url += "/"
    return ProviderSettings(
        kind=profile.kind,
        base_url=base_url,
        api_key=_blank_to_none(values.get(f"{profile.prefix}_API_KEY")),
        rate_limit=_non_negative_int(values.get(f"{profile.prefix}_RATE_LIMIT"), profile.default_rate_limit,
                                      f"{profile.prefix}_RATE_LIMIT"),
    )


def _load_config_file(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config file {path} is not valid YAML: {exc}") from exc
    try:
        json_validate(instance=data, schema=_CONFIG_FILE_SCHEMA)
    except SchemaError as exc:
        raise ConfigError(f"Config file {path} is invalid: {str(exc).splitlines()[0]}") from exc
    return data


def _recognised(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Keep only keys this package understands (environments carry a lot of noise)."""
    keys = {"PROVIDER_TIMEOUT_SECONDS", "LOG_LEVEL"}
    for profile in PROVIDER_PROFILES.values():
        keys.update({f"{profile.prefix}_BASE_URL", f"{profile.prefix}_API_KEY", f"{profile.prefix}_RATE_LIMIT"})
    return {k: v for k, v in values.items() if k in keys}


# ------------------------------ Public API -----------------------------------

def load_config(
    overrides: Optional[Mapping[str, Any]] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
    config_file: Optional[str | os.PathLike[str]] = None,
) -> VerificationConfig:
    """
    Build a VerificationConfig from defaults, an optional YAML file, the environment and overrides.

    ``environ`` defaults to ``os.environ``; pass ``{}`` to ignore the process environment.
    ``config_file`` defaults to ``VERIFICATION_CONFIG_FILE`` when that is set.
    """
    env = os.environ if environ is None else environ
    merged: Dict[str, Any] = {}

    file_path = config_file or env.get("VERIFICATION_CONFIG_FILE")
    if file_path:
        merged.update(_recognised(_load_config_file(Path(file_path))))

    merged.update(_recognised(env))
    if overrides:
        merged.update(overrides)

    config = VerificationConfig.from_mapping(merged)
    log_configuration_status(config)
    return config


def log_configuration_status(config: VerificationConfig) -> None:
    status = config.configuration_status()
    LOGGER.info("Configured services: %s", ", ".join(status["configured"]) or "None")
    LOGGER.info("Not configured services: %s", ", ".join(status["not_configured"]) or "None")


def configure_logging(level: Optional[str] = None) -> None:
    """Root logging setup for entry points (CLI, API, serverless handler)."""
    name = (level or os.getenv("LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
