"""
Pytest fixtures for contact flow end-to-end tests.

Provides:
- App built from environment variables, as in production
- Captured Resend SDK calls with a switchable failure mode
- Submission payloads
"""

import threading
from typing import Any, Dict, Generator, List

import pytest
import resend
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.contact_app import create_app


# ============================================================================
# PROVIDER CAPTURE
# ============================================================================

class ProviderCapture:
    """Thread-safe capture of Resend send calls for assertions."""

    def __init__(self):
        self.calls: List[Dict[str, Any]] = []
        self.api_keys: List[str] = []
        self.should_fail: bool = False
        self._lock = threading.Lock()

    def reset(self):
        """Reset captured calls and failure state."""
        with self._lock:
            self.calls = []
            self.api_keys = []
            self.should_fail = False

    def set_failure_mode(self):
        """Make every following send raise like a rejected request."""
        self.should_fail = True

    def send(self, params: Dict[str, Any]) -> Dict[str, str]:
        with self._lock:
            if self.should_fail:
                raise RuntimeError("422 validation_error: domain is not verified")
            self.calls.append(params)
            self.api_keys.append(resend.api_key)
            return {"id": f"e2e-{len(self.calls)}"}


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def provider(monkeypatch) -> Generator[ProviderCapture, None, None]:
    """Patch the Resend SDK so no request leaves the process."""
    capture = ProviderCapture()
    monkeypatch.setattr(resend, "api_key", resend.api_key)
    monkeypatch.setattr(resend, "default_http_client", resend.default_http_client)
    monkeypatch.setattr(resend.Emails, "send", staticmethod(capture.send))
    yield capture
    capture.reset()


@pytest.fixture
def contact_env(monkeypatch) -> Dict[str, str]:
    """Production-like environment for the contact relay."""
    env = {
        "RESEND_API_KEY": "re_e2e_0123456789",
        "CONTACT_RECEIVER_EMAIL": "contato@solarastudios.com.br",
        "API_URL_DEV": "http://localhost:5173",
        "CONTACT_RATE_LIMIT": "5/minute",
        "CONTACT_DISPATCH_TIMEOUT": "5",
    }
    for name in ("CONTACT_SENDER", "CONTACT_RATE_LIMIT_MAX_KEYS", "LOG_LEVEL", "ENVIRONMENT"):
        monkeypatch.delenv(name, raising=False)
    for name, value in env.items():
        monkeypatch.setenv(name, value)
    return env


@pytest.fixture
def e2e_test_app(contact_env, provider) -> FastAPI:
    """App assembled entirely from the environment."""
    return create_app(configure_logging=False)


@pytest.fixture
def e2e_client(e2e_test_app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(e2e_test_app) as client:
        yield client


@pytest.fixture
def valid_contact_data() -> Dict[str, Any]:
    """Contact form submission as the site posts it."""
    return {
        "name": "Ana",
        "email": "ana@x.com",
        "message": "Olá",
    }


@pytest.fixture
def project_contact_data() -> Dict[str, Any]:
    """Submission with a subject, contact type and one attachment."""
    return {
        "name": "Bruno Lima",
        "email": "bruno@example.com",
        "subject": "Novo site institucional",
        "contactType": "projeto",
        "message": "Segue o briefing em anexo.",
        "attachments": [
            {
                "name": "briefing.pdf",
                "content": "JVBERi0xLjQK",
                "type": "application/pdf",
                "size": 9,
            }
        ],
    }
