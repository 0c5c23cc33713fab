"""
FastAPI application exposing the contact relay.

Configuration, the rate limiter and the email sender are created once here
and handed to the router through app.state, so tests can inject their own.
"""
import os
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from api.contact import router as contact_router
from api.cors import resolve_cors_headers
from api.dispatcher import EmailSender, ResendEmailSender, SubmissionDispatcher
from core.config import ContactConfig
from core.error_handling import DispatchError
from core.logging_config import get_logger, log_error, setup_json_logging
from core.metrics import get_metrics_content_type, get_metrics_text
from core.rate_limiter import FixedWindowRateLimiter

logger = get_logger(__name__)


def create_app(
    config: Optional[ContactConfig] = None,
    limiter: Optional[FixedWindowRateLimiter] = None,
    sender: Optional[EmailSender] = None,
    configure_logging: bool = True,
) -> FastAPI:
    """
    Build the contact relay application.

    Args:
        config: Settings; read from the environment when omitted
        limiter: Rate limiter; sized from config when omitted
        sender: Email sender; a Resend sender is created when an API key is set,
            with dispatch_timeout_seconds as its transport timeout
        configure_logging: Install JSON logging (disable in tests)
    """
    config = config or ContactConfig.from_env()

    if configure_logging:
        setup_json_logging(log_level=config.log_level, environment=config.environment)

    if limiter is None:
        limiter = FixedWindowRateLimiter(
            window_seconds=config.rate_window_seconds,
            max_keys=config.rate_limit_max_keys,
        )

    if sender is None and config.resend_api_key:
        sender = ResendEmailSender(config.resend_api_key, timeout=config.dispatch_timeout_seconds)

    app = FastAPI(title="Contact Relay", version="1.0.0")
    app.state.contact_config = config
    app.state.rate_limiter = limiter
    app.state.dispatcher = SubmissionDispatcher(sender, config) if sender is not None else None

    app.include_router(contact_router)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Turn anything unexpected into the generic failure, keeping CORS headers."""
        log_error(logger, exc, "unhandled_exception", path=request.url.path)
        headers = resolve_cors_headers(request.headers.get("origin"), config.allowed_origins)
        return JSONResponse(
            status_code=500,
            content={"error": DispatchError.public_message},
            headers=headers,
        )

    @app.get("/health")
    async def health():
        """Report whether email delivery is configured and limiter occupancy."""
        return {
            "status": "healthy" if config.email_configured else "degraded",
            "email_configured": config.email_configured,
            "rate_limiter": limiter.stats().to_dict(),
        }

    @app.get("/metrics")
    async def metrics():
        return Response(content=get_metrics_text(), media_type=get_metrics_content_type())

    logger.info("contact_relay_configured", **config.describe())
    return app


def main():
    """Serve the contact relay with uvicorn."""
    import uvicorn

    host = os.getenv("CONTACT_HOST", "0.0.0.0")
    port = int(os.getenv("CONTACT_PORT", "8000"))
    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":
    main()
