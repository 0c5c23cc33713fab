"""Tests for environment-backed configuration."""

import pytest

from core.config import (
    DEFAULT_RECEIVER_EMAIL,
    DEFAULT_SENDER,
    PRODUCTION_ORIGIN,
    ContactConfig,
    parse_rate_limit_config,
)


pytestmark = pytest.mark.unit

CONFIG_VARS = [
    "RESEND_API_KEY",
    "CONTACT_RECEIVER_EMAIL",
    "CONTACT_SENDER",
    "API_URL_DEV",
    "CONTACT_RATE_LIMIT",
    "CONTACT_RATE_LIMIT_MAX_KEYS",
    "CONTACT_DISPATCH_TIMEOUT",
    "LOG_LEVEL",
    "ENVIRONMENT",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every variable the config reads."""
    for name in CONFIG_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestFromEnv:

    def test_defaults(self, clean_env):
        config = ContactConfig.from_env()

        assert config.resend_api_key is None
        assert config.receiver_email == DEFAULT_RECEIVER_EMAIL
        assert config.sender == DEFAULT_SENDER
        assert config.allowed_origins == (PRODUCTION_ORIGIN,)
        assert config.rate_limit == 5
        assert config.rate_window_seconds == 60
        assert config.dispatch_timeout_seconds == 10.0
        assert config.email_configured is False

    def test_reads_environment(self, clean_env):
        clean_env.setenv("RESEND_API_KEY", "re_live_abcdef")
        clean_env.setenv("CONTACT_RECEIVER_EMAIL", "equipe@example.com")
        clean_env.setenv("CONTACT_RATE_LIMIT", "10/hour")
        clean_env.setenv("CONTACT_RATE_LIMIT_MAX_KEYS", "500")
        clean_env.setenv("CONTACT_DISPATCH_TIMEOUT", "2.5")
        clean_env.setenv("LOG_LEVEL", "debug")

        config = ContactConfig.from_env()

        assert config.resend_api_key == "re_live_abcdef"
        assert config.receiver_email == "equipe@example.com"
        assert (config.rate_limit, config.rate_window_seconds) == (10, 3600)
        assert config.rate_limit_max_keys == 500
        assert config.dispatch_timeout_seconds == 2.5
        assert config.log_level == "DEBUG"
        assert config.email_configured is True

    def test_dev_origin_added_to_allow_list(self, clean_env):
        clean_env.setenv("API_URL_DEV", "http://localhost:3000")

        config = ContactConfig.from_env()

        assert config.allowed_origins == (PRODUCTION_ORIGIN, "http://localhost:3000")

    def test_empty_receiver_falls_back_to_default(self, clean_env):
        clean_env.setenv("CONTACT_RECEIVER_EMAIL", "")

        assert ContactConfig.from_env().receiver_email == DEFAULT_RECEIVER_EMAIL

    def test_empty_api_key_treated_as_missing(self, clean_env):
        clean_env.setenv("RESEND_API_KEY", "")

        assert ContactConfig.from_env().resend_api_key is None

    def test_invalid_numbers_fall_back(self, clean_env):
        clean_env.setenv("CONTACT_RATE_LIMIT_MAX_KEYS", "lots")
        clean_env.setenv("CONTACT_DISPATCH_TIMEOUT", "soon")

        config = ContactConfig.from_env()

        assert config.rate_limit_max_keys == 10_000
        assert config.dispatch_timeout_seconds == 10.0

    def test_environment_reread_on_each_build(self, clean_env):
        clean_env.setenv("RESEND_API_KEY", "re_first")
        ContactConfig.from_env()
        clean_env.setenv("RESEND_API_KEY", "re_second")

        assert ContactConfig.from_env().resend_api_key == "re_second"

    def test_describe_masks_api_key(self):
        config = ContactConfig(resend_api_key="re_secret_value_9876")

        described = config.describe()

        assert described["resend_api_key"].endswith("9876")
        assert "re_secret" not in described["resend_api_key"]
        assert described["rate_limit"] == "5/60s"


class TestParseRateLimit:

    @pytest.mark.parametrize("raw,expected", [
        ("5/minute", (5, 60)),
        ("5/min", (5, 60)),
        ("100/hour", (100, 3600)),
        ("2/second", (2, 1)),
        (" 7/M ", (7, 60)),
        (None, (5, 60)),
        ("", (5, 60)),
    ])
    def test_valid(self, raw, expected):
        assert parse_rate_limit_config(raw) == expected

    @pytest.mark.parametrize("raw", ["five/minute", "5", "5/fortnight", "0/minute", "1/2/3"])
    def test_invalid_falls_back(self, raw):
        assert parse_rate_limit_config(raw) == (5, 60)


@pytest.mark.parametrize("raw", ["0", "-3"])
def test_non_positive_dispatch_timeout_falls_back(clean_env, raw):
    clean_env.setenv("CONTACT_DISPATCH_TIMEOUT", raw)

    assert ContactConfig.from_env().dispatch_timeout_seconds == 10.0
