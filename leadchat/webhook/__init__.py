from leadchat.webhook.client import (
    ExchangeError,
    ExchangeResult,
    ResponseShapeError,
    TransportError,
    WebhookClient,
)

__all__ = [
    "WebhookClient", "ExchangeResult",
    "ExchangeError", "TransportError", "ResponseShapeError",
]
