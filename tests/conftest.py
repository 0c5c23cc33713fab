"""Pytest configuration and fixtures for the contact relay test suite."""
import sys
import threading
import time
from pathlib import Path
from typing import Dict, List, Any

import pytest
from fastapi.testclient import TestClient

# Ensure project modules are importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from api.contact_app import create_app
from api.models import OutboundEmail
from core.config import ContactConfig
from core.rate_limiter import FixedWindowRateLimiter


# ============================================================================
# TEST DOUBLES
# ============================================================================

class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeEmailSender:
    """Thread-safe EmailSender that records messages instead of sending them."""

    def __init__(self):
        self.sent: List[OutboundEmail] = []
        self.error: Exception = None
        self.delay: float = 0.0
        self._lock = threading.Lock()

    def fail_with(self, error: Exception) -> None:
        self.error = error

    def send(self, email: OutboundEmail) -> Dict[str, Any]:
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        with self._lock:
            self.sent.append(email)
        return {"id": f"fake-{len(self.sent)}"}


# ============================================================================
# CONFIGURATION FIXTURES
# ============================================================================

TRUSTED_ORIGIN = "https://solarastudios.com.br"
DEV_ORIGIN = "http://localhost:3000"
FOREIGN_ORIGIN = "https://evil.example.com"


@pytest.fixture
def contact_config() -> ContactConfig:
    """Fully configured settings for a test app."""
    return ContactConfig(
        resend_api_key="re_test_1234567890",
        receiver_email="inbox@solarastudios.com.br",
        allowed_origins=(TRUSTED_ORIGIN, DEV_ORIGIN),
        rate_limit=5,
        rate_window_seconds=60,
        rate_limit_max_keys=100,
        dispatch_timeout_seconds=1.0,
    )


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def limiter(contact_config, fake_clock) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(
        window_seconds=contact_config.rate_window_seconds,
        max_keys=contact_config.rate_limit_max_keys,
        clock=fake_clock,
    )


@pytest.fixture
def email_sender() -> FakeEmailSender:
    return FakeEmailSender()


# ============================================================================
# APPLICATION FIXTURES
# ============================================================================

@pytest.fixture
def test_app(contact_config, limiter, email_sender):
    """Contact relay app wired to the fake sender and clock."""
    return create_app(
        config=contact_config,
        limiter=limiter,
        sender=email_sender,
        configure_logging=False,
    )


@pytest.fixture
def client(test_app):
    """Create test client"""
    return TestClient(test_app)


@pytest.fixture
def valid_contact_data() -> Dict[str, Any]:
    """Minimal valid submission."""
    return {
        "name": "Ana",
        "email": "ana@x.com",
        "message": "Olá",
    }


@pytest.fixture
def full_contact_data() -> Dict[str, Any]:
    """Submission with every optional field."""
    return {
        "name": "Ana Souza",
        "email": "ana@example.com",
        "subject": "Orçamento de site",
        "message": "Gostaria de um orçamento.\nObrigada!",
        "contactType": "projeto",
        "attachments": [
            {
                "name": "briefing.pdf",
                "content": "JVBERi0xLjQK",
                "type": "application/pdf",
                "size": 9,
            }
        ],
    }


@pytest.fixture
def make_attachments():
    """Factory for attachment payloads of a given count and declared size."""
    def _make(count: int, size: int = 10) -> List[Dict[str, Any]]:
        return [
            {
                "name": f"file-{i}.txt",
                "content": "aGVsbG8=",
                "type": "text/plain",
                "size": size,
            }
            for i in range(count)
        ]
    return _make


# ============================================================================
# MARK DEFINITIONS
# ============================================================================

def pytest_configure(config):
    """Register custom marks."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "e2e: mark test as end-to-end test"
    )
