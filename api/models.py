"""
Pydantic models for the contact endpoint.

Inbound models describe the submission as the site's form posts it; outbound
models describe the message handed to the email provider.
"""

import base64
import binascii
import json
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from core.error_handling import DispatchError


# ============================================================================
# Inbound
# ============================================================================

class Attachment(BaseModel):
    """
    File attached to a submission. content is base64 text or raw bytes as ints.

    The declared size is kept as sent; content_length is measured from the
    content itself so an understated size cannot slip past the size cap.
    """
    name: str = Field(..., description="Original filename")
    content: Union[str, List[int]] = Field(..., description="Base64 content or byte list")
    type: str = Field(..., description="MIME type")
    size: int = Field(..., ge=0, description="Declared size in bytes")

    @field_validator('content')
    @classmethod
    def content_must_decode(cls, v):
        """Reject base64 that does not decode and byte lists with values outside 0-255."""
        if isinstance(v, str):
            try:
                base64.b64decode(_compact(v), validate=True)
            except (binascii.Error, ValueError):
                raise ValueError("content is not valid base64")
        elif any(byte < 0 or byte > 255 for byte in v):
            raise ValueError("byte values must be between 0 and 255")
        return v

    @property
    def content_length(self) -> int:
        """Number of bytes the content decodes to."""
        if isinstance(self.content, list):
            return len(self.content)
        compact = _compact(self.content)
        return len(compact) * 3 // 4 - compact[-2:].count("=")

    @property
    def effective_size(self) -> int:
        """Larger of the declared size and the measured content length."""
        return max(self.size, self.content_length)


def _compact(encoded: str) -> str:
    return "".join(encoded.split())


class ContactSubmission(BaseModel):
    """
    Contact form submission.

    name, email and message default to None so that their absence is reported
    by the validator as a missing field rather than rejected by the parser.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: Optional[str] = None
    email: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None
    contact_type: Optional[str] = Field(None, alias="contactType")
    attachments: List[Attachment] = Field(default_factory=list)

    @field_validator('attachments', mode='before')
    @classmethod
    def default_attachments(cls, v):
        """Treat an explicit null like an absent list."""
        if v is None:
            return []
        return v


def parse_submission(body: bytes) -> ContactSubmission:
    """
    Parse a raw request body into a ContactSubmission.

    Raises:
        DispatchError: Body is not JSON, not an object, or has malformed fields
    """
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as e:
        raise DispatchError(f"Request body is not valid JSON: {e}", component="parser")

    if not isinstance(data, dict):
        raise DispatchError(
            f"Request body must be a JSON object, got {type(data).__name__}",
            component="parser",
        )

    try:
        return ContactSubmission.model_validate(data)
    except PydanticValidationError as e:
        raise DispatchError(
            f"Malformed submission: {e.error_count()} invalid field(s)",
            component="parser",
            context={"fields": [".".join(str(p) for p in err["loc"]) for err in e.errors()]},
        )


# ============================================================================
# Outbound
# ============================================================================

class OutboundAttachment(BaseModel):
    """Attachment in the shape the email provider expects."""
    filename: str
    content: Union[str, List[int]]
    type: str
    disposition: Literal["attachment"] = "attachment"


class OutboundEmail(BaseModel):
    """Composed message ready for the email-sending collaborator."""
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(..., alias="from")
    reply_to: str
    to: str
    subject: str = ""
    text: str
    attachments: List[OutboundAttachment] = Field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        """Collaborator payload: from, replyTo, to, subject, text, attachments."""
        return {
            "from": self.from_,
            "replyTo": self.reply_to,
            "to": self.to,
            "subject": self.subject,
            "text": self.text,
            "attachments": [a.model_dump() for a in self.attachments],
        }


# ============================================================================
# Responses
# ============================================================================

class ContactResponse(BaseModel):
    """Body of a successful submission."""
    message: str


class ErrorResponse(BaseModel):
    """Body of a rejected or failed submission."""
    error: str
