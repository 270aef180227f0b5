"""
Centralized configuration with environment variable overrides.

Webhook endpoint, user-visible fallback texts, and session identity
settings are configurable here. Nothing is hardcoded in the exchange
or orchestration logic.
"""

import logging
import os
import re
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

_URL_SAFE = re.compile(r"^[A-Za-z0-9_-]+$")


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


@dataclass(frozen=True)
class WebhookConfig:
    """Conversational backend endpoint."""

    url: str = os.getenv("WEBHOOK_URL", "http://localhost:5678/webhook/chat")
    # 0 means wait for the reply indefinitely
    timeout_seconds: float = _safe_float("WEBHOOK_TIMEOUT", "0")


@dataclass(frozen=True)
class MessageConfig:
    """Fixed assistant texts shown when the exchange cannot produce a reply."""

    apology: str = os.getenv(
        "APOLOGY_MESSAGE",
        "Estou passando por uma instabilidade na conexão. "
        "Você poderia reenviar a última mensagem, por favor?",
    )
    fallback: str = os.getenv(
        "FALLBACK_MESSAGE",
        "Desculpe, não consegui processar a resposta. Tente novamente.",
    )
    preset: str = os.getenv(
        "PRESET_MESSAGE", "Quero dar um salto na minha carreira. Pode me ajudar?"
    )


@dataclass(frozen=True)
class SessionConfig:
    """Session identity and input limits."""

    id_prefix: str = os.getenv("SESSION_ID_PREFIX", "sessao")
    max_input_length: int = _safe_int("MAX_INPUT_LENGTH", "2000")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    webhook: WebhookConfig = field(default_factory=WebhookConfig)
    messages: MessageConfig = field(default_factory=MessageConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    assistant_name: str = os.getenv("ASSISTANT_NAME", "Mari")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if not config.webhook.url.startswith(("http://", "https://")):
        raise ValueError(
            f"WEBHOOK_URL must start with http:// or https://, got {config.webhook.url!r}"
        )
    if config.webhook.timeout_seconds < 0:
        raise ValueError(
            f"WEBHOOK_TIMEOUT must be >= 0, got {config.webhook.timeout_seconds}"
        )
    if not _URL_SAFE.match(config.session.id_prefix):
        raise ValueError(
            "SESSION_ID_PREFIX must contain only letters, digits, '_' or '-', "
            f"got {config.session.id_prefix!r}"
        )
    if config.session.max_input_length < 1:
        raise ValueError(
            f"MAX_INPUT_LENGTH must be >= 1, got {config.session.max_input_length}"
        )
    for name, text in [
        ("APOLOGY_MESSAGE", config.messages.apology),
        ("FALLBACK_MESSAGE", config.messages.fallback),
        ("PRESET_MESSAGE", config.messages.preset),
    ]:
        if not text.strip():
            raise ValueError(f"{name} must not be empty")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for webhook '%s'", config.webhook.url)
    return config


# Singleton instance
settings = load_config()
