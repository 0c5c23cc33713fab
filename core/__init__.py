"""
Contact Relay Core - Configuration, Errors & Admission Control

Shared building blocks for the contact endpoint: environment-backed
configuration, the error taxonomy, structured logging, metrics and the
in-memory rate limiter.
"""

from .config import ContactConfig, parse_rate_limit_config
from .error_handling import (
    ContactRelayException,
    RateLimitExceeded,
    MissingConfiguration,
    ValidationError,
    MissingField,
    TooManyAttachments,
    AttachmentTooLarge,
    DispatchError,
)
from .rate_limiter import FixedWindowRateLimiter, RateWindow, RateLimiterStats

__all__ = [
    # Configuration
    "ContactConfig",
    "parse_rate_limit_config",
    # Exceptions
    "ContactRelayException",
    "RateLimitExceeded",
    "MissingConfiguration",
    "ValidationError",
    "MissingField",
    "TooManyAttachments",
    "AttachmentTooLarge",
    "DispatchError",
    # Rate limiting
    "FixedWindowRateLimiter",
    "RateWindow",
    "RateLimiterStats",
]
