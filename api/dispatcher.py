"""
Submission Dispatcher

Turns a validated submission into an outbound email and hands it to the
email-sending collaborator exactly once. There are no retries: any provider
failure, including the provider transport timing out, surfaces as
DispatchError. The dispatcher waits for the sender to finish so a failure
reported to the caller always means the sender gave up.
"""

import asyncio
import time
from typing import Any, Protocol

import resend

from api.models import ContactSubmission, OutboundAttachment, OutboundEmail
from core.config import DEFAULT_DISPATCH_TIMEOUT_SECONDS, ContactConfig
from core.error_handling import DispatchError
from core.logging_config import get_logger
from core.metrics import DISPATCH_LATENCY_SECONDS

logger = get_logger(__name__)


class EmailSender(Protocol):
    """Email-sending collaborator. Raises on failure."""

    def send(self, email: OutboundEmail) -> Any:
        ...


class ResendEmailSender:
    """EmailSender backed by the Resend Python SDK.

    The timeout is applied to the SDK's HTTP transport, so a slow provider
    raises from inside send() instead of completing after the caller moved on.
    """

    def __init__(self, api_key: str, timeout: float = DEFAULT_DISPATCH_TIMEOUT_SECONDS):
        if not api_key:
            raise ValueError("Resend API key is required")
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self._api_key = api_key
        self._http_client = resend.RequestsClient(timeout=timeout)

    def send(self, email: OutboundEmail) -> Any:
        # The SDK reads its key and transport from module state
        resend.api_key = self._api_key
        resend.default_http_client = self._http_client

        params = {
            "from": email.from_,
            "to": [email.to],
            "reply_to": email.reply_to,
            "subject": email.subject,
            "text": email.text,
        }
        if email.attachments:
            # Resend has no disposition field; every file is sent as a regular attachment.
            params["attachments"] = [
                {
                    "filename": attachment.filename,
                    "content": attachment.content,
                    "content_type": attachment.type,
                }
                for attachment in email.attachments
            ]

        return resend.Emails.send(params)


def build_body_text(submission: ContactSubmission) -> str:
    """Plain text body: name, email, optional contact type, then the message."""
    text = f"Nome: {submission.name}\n"
    text += f"E-mail: {submission.email}\n"
    if submission.contact_type:
        text += f"Tipo: {submission.contact_type}\n"
    text += f"Mensagem:\n{submission.message}"
    return text


def build_email(submission: ContactSubmission, config: ContactConfig) -> OutboundEmail:
    """Compose the outbound message for a validated submission."""
    return OutboundEmail(
        from_=config.sender,
        reply_to=submission.email,
        to=config.receiver_email,
        subject=submission.subject or "",
        text=build_body_text(submission),
        attachments=[
            OutboundAttachment(
                filename=attachment.name,
                content=attachment.content,
                type=attachment.type,
            )
            for attachment in submission.attachments
        ],
    )


class SubmissionDispatcher:
    """Relays submissions through an EmailSender."""

    def __init__(self, sender: EmailSender, config: ContactConfig):
        self.sender = sender
        self.config = config

    async def dispatch(self, submission: ContactSubmission) -> None:
        """
        Send one email for the submission.

        The blocking provider call runs in a worker thread so it never stalls
        the event loop. Its duration is bounded by the sender's own transport
        timeout.

        Raises:
            DispatchError: Provider raised, timeouts included
        """
        email = build_email(submission, self.config)
        start = time.perf_counter()

        try:
            await asyncio.to_thread(self.sender.send, email)
        except Exception as e:
            raise DispatchError(
                f"Email provider failed: {type(e).__name__}: {e}",
                component="dispatcher",
                context={"error_type": type(e).__name__},
            ) from e
        finally:
            DISPATCH_LATENCY_SECONDS.observe(time.perf_counter() - start)

        logger.debug(
            "email_handed_to_provider",
            attachments=len(email.attachments),
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )
