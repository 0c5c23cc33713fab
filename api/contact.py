"""
Contact Form API

Relays contact form submissions to the site inbox through the email provider.
Each POST is gated by the per-client rate limiter before any other work, then
checked for configuration, parsed, validated and dispatched. Every response,
including failures, carries the CORS headers computed from the request origin.
"""

import time
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from api.cors import resolve_cors_headers
from api.dispatcher import SubmissionDispatcher
from api.models import ContactResponse, ErrorResponse, parse_submission
from api.validation import validate_submission
from core.config import ContactConfig
from core.error_handling import (
    ContactRelayException,
    DispatchError,
    MissingConfiguration,
    RateLimitExceeded,
    ValidationError,
)
from core.logging_config import get_logger, log_error, log_request
from core.metrics import CONTACT_SUBMISSIONS_TOTAL
from core.rate_limiter import FixedWindowRateLimiter

logger = get_logger(__name__)

router = APIRouter(tags=["contact"])

SUCCESS_MESSAGE = "E-mail enviado com sucesso!"


# ============================================================================
# Dependencies
# ============================================================================

def get_contact_config(request: Request) -> ContactConfig:
    return request.app.state.contact_config


def get_rate_limiter(request: Request) -> FixedWindowRateLimiter:
    return request.app.state.rate_limiter


def get_dispatcher(request: Request) -> Optional[SubmissionDispatcher]:
    return getattr(request.app.state, "dispatcher", None)


def get_client_ip(request: Request) -> str:
    """Extract client IP address from request"""
    # Behind proxy/load balancer the first hop is the real client
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host

    return "unknown"


def _mask_email(email: Optional[str]) -> str:
    if not email or "@" not in email:
        return "<invalid>"
    local, _, domain = email.partition("@")
    return f"{local[:1]}***@{domain}"


def _error(exc: ContactRelayException, cors_headers: Dict[str, str]) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(error=exc.public_message).model_dump(),
        headers=cors_headers,
    )


def _check_configuration(config: ContactConfig) -> None:
    if not config.resend_api_key:
        raise MissingConfiguration("RESEND_API_KEY")
    if not config.receiver_email:
        raise MissingConfiguration("CONTACT_RECEIVER_EMAIL")


# ============================================================================
# Endpoints
# ============================================================================

@router.post(
    "/contact",
    response_model=ContactResponse,
    responses={
        400: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def submit_contact_form(
    request: Request,
    config: ContactConfig = Depends(get_contact_config),
    limiter: FixedWindowRateLimiter = Depends(get_rate_limiter),
    dispatcher: Optional[SubmissionDispatcher] = Depends(get_dispatcher),
):
    """
    Submit a contact form

    - **name**, **email**, **message**: required
    - **subject**, **contactType**: optional
    - **attachments**: up to 5 files of at most 1MB each

    Rate limit: 5 submissions per window per client address
    """
    start_time = time.perf_counter()
    cors_headers = resolve_cors_headers(request.headers.get("origin"), config.allowed_origins)
    client_key = get_client_ip(request)

    response = await _handle_submission(request, config, limiter, dispatcher, client_key, cors_headers)

    log_request(
        logger,
        method="POST",
        endpoint=request.url.path,
        status=response.status_code,
        duration_ms=(time.perf_counter() - start_time) * 1000,
        client=client_key,
    )
    return response


async def _handle_submission(
    request: Request,
    config: ContactConfig,
    limiter: FixedWindowRateLimiter,
    dispatcher: Optional[SubmissionDispatcher],
    client_key: str,
    cors_headers: Dict[str, str],
) -> Response:
    try:
        limiter.admit(client_key, config.rate_limit)
    except RateLimitExceeded as exc:
        CONTACT_SUBMISSIONS_TOTAL.labels(outcome="rate_limited").inc()
        logger.warning("contact_rate_limited", client=client_key, retry_after=exc.retry_after)
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=exc.public_message).model_dump(),
            headers={**cors_headers, "Retry-After": str(exc.retry_after)},
        )

    try:
        _check_configuration(config)
        if dispatcher is None:
            raise MissingConfiguration("RESEND_API_KEY")
    except MissingConfiguration as exc:
        CONTACT_SUBMISSIONS_TOTAL.labels(outcome="misconfigured").inc()
        logger.error("contact_missing_configuration", setting=exc.setting)
        return PlainTextResponse(
            exc.public_message,
            status_code=exc.status_code,
            headers=cors_headers,
        )

    try:
        submission = parse_submission(await request.body())
        validate_submission(submission)
        await dispatcher.dispatch(submission)
    except ValidationError as exc:
        CONTACT_SUBMISSIONS_TOTAL.labels(outcome="invalid").inc()
        logger.info("contact_rejected", client=client_key, reason=exc.__class__.__name__)
        return _error(exc, cors_headers)
    except DispatchError as exc:
        CONTACT_SUBMISSIONS_TOTAL.labels(outcome="failed").inc()
        log_error(logger, exc, "contact_dispatch_failed", client=client_key, component=exc.component)
        return _error(exc, cors_headers)

    CONTACT_SUBMISSIONS_TOTAL.labels(outcome="sent").inc()
    logger.info(
        "contact_dispatched",
        client=client_key,
        reply_to=_mask_email(submission.email),
        contact_type=submission.contact_type,
        attachments=len(submission.attachments),
    )
    return JSONResponse(
        status_code=200,
        content=ContactResponse(message=SUCCESS_MESSAGE).model_dump(),
        headers=cors_headers,
    )


@router.options("/contact", status_code=204)
async def contact_preflight(
    request: Request,
    config: ContactConfig = Depends(get_contact_config),
):
    """Answer CORS preflight without touching the limiter or the provider."""
    cors_headers = resolve_cors_headers(request.headers.get("origin"), config.allowed_origins)
    log_request(logger, method="OPTIONS", endpoint=request.url.path, status=204, duration_ms=0.0)
    return Response(status_code=204, headers=cors_headers)
