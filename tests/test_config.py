import logging

import pytest

from payrelay.config import Config, mask_secret, setup_logging
from payrelay.errors import ConfigurationError

ENV_VARS = (
    "RAZORPAY_KEY_ID", "RAZORPAY_KEY_SECRET", "RAZORPAY_API_URL", "DATABASE_URL",
    "DATABASE_PASSWORD", "HOST", "PORT", "GATEWAY_TIMEOUT", "DATABASE_TIMEOUT", "LOG_LEVEL",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConfig:
    def test_from_env(self, clean_env) -> None:
        clean_env.setenv("RAZORPAY_KEY_ID", "rzp_test_abc")
        clean_env.setenv("RAZORPAY_KEY_SECRET", "secret")
        clean_env.setenv("DATABASE_URL", "postgresql://db/payments")
        clean_env.setenv("PORT", "8080")
        clean_env.setenv("GATEWAY_TIMEOUT", "5")

        config = Config.from_env()

        assert config.gateway_configured is True
        assert config.persistence_enabled is True
        assert config.port == 8080
        assert config.gateway_timeout == 5.0
        assert config.database_timeout == 10.0
        config.validate_required()

    def test_defaults(self, clean_env) -> None:
        config = Config.from_env()
        assert config.razorpay_api_url == "https://api.razorpay.com/v1"
        assert config.port == 3000
        assert config.persistence_enabled is False

    def test_missing_credentials_reported(self, clean_env) -> None:
        clean_env.setenv("RAZORPAY_KEY_ID", "rzp_test_abc")
        clean_env.setenv("RAZORPAY_KEY_SECRET", "   ")
        config = Config.from_env()

        assert config.gateway_configured is False
        with pytest.raises(ConfigurationError, match="RAZORPAY_KEY_SECRET"):
            config.validate_required()

    def test_both_credentials_missing(self, clean_env) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            Config.from_env().validate_required()
        assert "RAZORPAY_KEY_ID" in str(exc_info.value)
        assert "RAZORPAY_KEY_SECRET" in str(exc_info.value)


def test_mask_secret() -> None:
    assert mask_secret("rzp_test_1234567890") == "rzp_test..."
    assert mask_secret(None) == "<not set>"


def test_setup_logging_returns_logger() -> None:
    assert isinstance(setup_logging("debug"), logging.Logger)
