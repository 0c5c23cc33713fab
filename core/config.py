"""
Contact Relay Configuration

Built once at process start from the environment and threaded into the
request handler. Request code never reads the environment itself.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from core.secrets import get_secret, mask_secret, secrets_manager

logger = logging.getLogger(__name__)

PRODUCTION_ORIGIN = "https://solarastudios.com.br"
DEFAULT_RECEIVER_EMAIL = "contato@solarastudios.com.br"
DEFAULT_SENDER = "Contato Solara Studios <contato-site@solarastudios.com.br>"

DEFAULT_RATE_LIMIT = 5
DEFAULT_RATE_WINDOW_SECONDS = 60
DEFAULT_RATE_LIMIT_MAX_KEYS = 10_000
DEFAULT_DISPATCH_TIMEOUT_SECONDS = 10.0


def parse_rate_limit_config(rate_str: Optional[str]) -> Tuple[int, int]:
    """
    Parse a rate limit string into (limit, window_seconds).

    Supports formats like:
    - "5/minute" -> (5, 60)
    - "100/hour" -> (100, 3600)
    - "2/second" -> (2, 1)

    Invalid strings fall back to the default of 5 per minute.
    """
    if not rate_str:
        return DEFAULT_RATE_LIMIT, DEFAULT_RATE_WINDOW_SECONDS

    try:
        parts = rate_str.lower().strip().split('/')
        if len(parts) != 2:
            raise ValueError("Invalid format")

        limit = int(parts[0])
        time_unit = parts[1].strip()
        if limit < 1:
            raise ValueError("Limit must be positive")

        if time_unit in ['hour', 'hours', 'h']:
            window = 3600
        elif time_unit in ['minute', 'minutes', 'min', 'm']:
            window = 60
        elif time_unit in ['second', 'seconds', 'sec', 's']:
            window = 1
        else:
            raise ValueError(f"Unknown time unit: {time_unit}")

        return limit, window

    except (ValueError, IndexError):
        logger.warning(f"Invalid rate limit config '{rate_str}', using defaults")
        return DEFAULT_RATE_LIMIT, DEFAULT_RATE_WINDOW_SECONDS


def _int_setting(name: str, default: int) -> int:
    raw = get_secret(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid integer for {name}: '{raw}', using {default}")
        return default


def _float_setting(name: str, default: float) -> float:
    raw = get_secret(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Invalid number for {name}: '{raw}', using {default}")
        return default
    if value <= 0:
        logger.warning(f"{name} must be positive, got '{raw}', using {default}")
        return default
    return value


@dataclass(frozen=True)
class ContactConfig:
    """Process-wide settings for the contact endpoint."""
    resend_api_key: Optional[str] = None
    receiver_email: Optional[str] = DEFAULT_RECEIVER_EMAIL
    sender: str = DEFAULT_SENDER
    allowed_origins: Tuple[str, ...] = (PRODUCTION_ORIGIN,)
    rate_limit: int = DEFAULT_RATE_LIMIT
    rate_window_seconds: int = DEFAULT_RATE_WINDOW_SECONDS
    rate_limit_max_keys: int = DEFAULT_RATE_LIMIT_MAX_KEYS
    dispatch_timeout_seconds: float = DEFAULT_DISPATCH_TIMEOUT_SECONDS
    log_level: str = "INFO"
    environment: str = "development"

    @classmethod
    def from_env(cls) -> "ContactConfig":
        """
        Read configuration from environment variables (and .env files).

        Environment:
            RESEND_API_KEY: Email provider API key
            CONTACT_RECEIVER_EMAIL: Inbox receiving submissions
            CONTACT_SENDER: From identity for relayed mail
            API_URL_DEV: Extra trusted origin (development frontend)
            CONTACT_RATE_LIMIT: e.g. "5/minute"
            CONTACT_RATE_LIMIT_MAX_KEYS: Tracked client keys before LRU eviction
            CONTACT_DISPATCH_TIMEOUT: Seconds to wait on the provider
            LOG_LEVEL, ENVIRONMENT
        """
        secrets_manager.clear_cache()

        origins = [PRODUCTION_ORIGIN]
        dev_origin = get_secret("API_URL_DEV")
        if dev_origin and dev_origin not in origins:
            origins.append(dev_origin)

        limit, window = parse_rate_limit_config(get_secret("CONTACT_RATE_LIMIT"))

        return cls(
            resend_api_key=get_secret("RESEND_API_KEY") or None,
            receiver_email=get_secret("CONTACT_RECEIVER_EMAIL") or DEFAULT_RECEIVER_EMAIL,
            sender=get_secret("CONTACT_SENDER") or DEFAULT_SENDER,
            allowed_origins=tuple(origins),
            rate_limit=limit,
            rate_window_seconds=window,
            rate_limit_max_keys=_int_setting(
                "CONTACT_RATE_LIMIT_MAX_KEYS", DEFAULT_RATE_LIMIT_MAX_KEYS
            ),
            dispatch_timeout_seconds=_float_setting(
                "CONTACT_DISPATCH_TIMEOUT", DEFAULT_DISPATCH_TIMEOUT_SECONDS
            ),
            log_level=(get_secret("LOG_LEVEL") or "INFO").upper(),
            environment=get_secret("ENVIRONMENT") or "development",
        )

    @property
    def email_configured(self) -> bool:
        return bool(self.resend_api_key) and bool(self.receiver_email)

    def describe(self) -> Dict[str, Any]:
        """Log-safe view of the configuration."""
        return {
            "resend_api_key": mask_secret(self.resend_api_key) or "<not set>",
            "receiver_email": self.receiver_email or "<not set>",
            "sender": self.sender,
            "allowed_origins": list(self.allowed_origins),
            "rate_limit": f"{self.rate_limit}/{self.rate_window_seconds}s",
            "rate_limit_max_keys": self.rate_limit_max_keys,
            "dispatch_timeout_seconds": self.dispatch_timeout_seconds,
            "environment": self.environment,
        }
