"""Tests for configuration loading and validation."""

from dataclasses import FrozenInstanceError, replace

import pytest

from leadchat.config import (
    AppConfig,
    MessageConfig,
    SessionConfig,
    WebhookConfig,
    _validate_config,
)


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        config = AppConfig()
        _validate_config(config)  # should not raise

    def test_webhook_url_requires_http_scheme(self):
        config = replace(AppConfig(), webhook=WebhookConfig(url="ftp://example.com/hook"))
        with pytest.raises(ValueError, match="WEBHOOK_URL"):
            _validate_config(config)

    def test_https_webhook_url_accepted(self):
        config = replace(AppConfig(), webhook=WebhookConfig(url="https://example.com/hook"))
        _validate_config(config)

    def test_session_prefix_must_be_url_safe(self):
        config = replace(AppConfig(), session=SessionConfig(id_prefix="sess ão"))
        with pytest.raises(ValueError, match="SESSION_ID_PREFIX"):
            _validate_config(config)

    def test_max_input_length_must_be_positive(self):
        config = replace(AppConfig(), session=SessionConfig(max_input_length=0))
        with pytest.raises(ValueError, match="MAX_INPUT_LENGTH"):
            _validate_config(config)

    def test_blank_apology_rejected(self):
        config = replace(AppConfig(), messages=MessageConfig(apology="   "))
        with pytest.raises(ValueError, match="APOLOGY_MESSAGE"):
            _validate_config(config)

    def test_config_is_frozen(self):
        config = AppConfig()
        with pytest.raises(FrozenInstanceError):
            config.log_level = "DEBUG"  # type: ignore[misc]

    def test_safe_int_parsing(self):
        from leadchat.config import _safe_int

        assert _safe_int("NONEXISTENT_VAR_12345", "42") == 42

    def test_safe_int_rejects_garbage(self, monkeypatch):
        from leadchat.config import _safe_int

        monkeypatch.setenv("LEADCHAT_TEST_INT", "many")
        with pytest.raises(ValueError, match="LEADCHAT_TEST_INT"):
            _safe_int("LEADCHAT_TEST_INT", "1")

    def test_safe_float_rejects_garbage(self, monkeypatch):
        from leadchat.config import _safe_float

        monkeypatch.setenv("LEADCHAT_TEST_FLOAT", "slow")
        with pytest.raises(ValueError, match="LEADCHAT_TEST_FLOAT"):
            _safe_float("LEADCHAT_TEST_FLOAT", "0")

    def test_negative_timeout_rejected(self):
        config = replace(AppConfig(), webhook=WebhookConfig(timeout_seconds=-1.0))
        with pytest.raises(ValueError, match="WEBHOOK_TIMEOUT"):
            _validate_config(config)


class TestDefaults:
    def test_default_messages(self):
        messages = MessageConfig()
        assert "reenviar" in messages.apology
        assert "processar a resposta" in messages.fallback
        assert messages.preset.endswith("?")

    def test_default_session_prefix(self):
        assert SessionConfig().id_prefix == "sessao"

    def test_webhook_timeout_disabled_by_default(self):
        assert WebhookConfig().timeout_seconds == 0
