"""
Contact Relay Error Taxonomy

Every failure the contact endpoint can report maps to one exception here.
Each class carries the HTTP status and the fixed, localized message shown to
the caller; internal detail stays in `message`/`context` for logs only.
"""

import logging
from typing import Any, Dict, Optional
from datetime import datetime

logger = logging.getLogger(__name__)


# ============================================================================
# Base Exception
# ============================================================================

class ContactRelayException(Exception):
    """Base exception for all contact relay errors."""

    status_code: int = 500
    public_message: str = "Erro ao enviar o e-mail."

    def __init__(self, message: Optional[str] = None, component: str = "unknown",
                 context: Optional[Dict[str, Any]] = None):
        """Initialize exception with metadata.

        Args:
            message: Internal error description (never sent to clients)
            component: Component where the error occurred
            context: Additional context data for logs
        """
        self.message = message or self.public_message
        self.component = component
        self.context = context or {}
        self.timestamp = datetime.now()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to structured log format."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "component": self.component,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
        }


# ============================================================================
# Admission
# ============================================================================

class RateLimitExceeded(ContactRelayException):
    """Raised when a client key has used up its window."""

    status_code = 429
    public_message = "Muitas requisições. Tente novamente em breve."

    def __init__(self, client_key: str, limit: int, retry_after: int):
        self.client_key = client_key
        self.limit = limit
        self.retry_after = retry_after
        super().__init__(
            f"Rate limit of {limit} exceeded for {client_key}",
            component="rate_limiter",
            context={"limit": limit, "retry_after": retry_after},
        )


# ============================================================================
# Configuration
# ============================================================================

class MissingConfiguration(ContactRelayException):
    """Raised when a required setting is absent. Operator-facing."""

    status_code = 500

    def __init__(self, setting: str):
        self.setting = setting
        self.public_message = f"{setting} não definida!"
        super().__init__(
            f"{setting} is not configured",
            component="config",
            context={"setting": setting},
        )


# ============================================================================
# Submission Validation
# ============================================================================

class ValidationError(ContactRelayException):
    """Raised when a parsed submission breaks a field or attachment rule."""

    status_code = 400


class MissingField(ValidationError):
    """name, email or message is empty or absent."""

    public_message = "Campos obrigatórios ausentes."


class TooManyAttachments(ValidationError):
    """More attachments than allowed."""

    public_message = "Máximo de 5 arquivos permitidos."


class AttachmentTooLarge(ValidationError):
    """An attachment declares a size above the per-file cap."""

    public_message = "Cada arquivo deve ter no máximo 1MB."


# ============================================================================
# Dispatch
# ============================================================================

class DispatchError(ContactRelayException):
    """
    Raised when the body cannot be parsed or the email provider fails.

    Both cases share one generic message so provider details never leak.
    """

    status_code = 500
    public_message = "Erro ao enviar o e-mail."
