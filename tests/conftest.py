"""Shared test fixtures and helpers."""

import json
from typing import Any, Callable, Optional

import httpx
import pytest

from leadchat.conversation.conversation_log import ConversationLog
from leadchat.conversation.lead_store import LeadStore
from leadchat.conversation.state_machine import ExchangeStateMachine
from leadchat.orchestrator import SessionOrchestrator
from leadchat.schemas.webhook_schema import ServerTurn
from leadchat.webhook.client import WebhookClient

WEBHOOK_URL = "https://hooks.test/webhook/chat"
APOLOGY = "Connection problem, please resend."
FALLBACK = "Could not process the response, please retry."


@pytest.fixture
def state_machine():
    return ExchangeStateMachine()


@pytest.fixture
def conversation_log():
    return ConversationLog()


@pytest.fixture
def lead_store():
    return LeadStore()


def make_lead_payload(
    name: str = "Ana Souza",
    email: str = "ana@example.com",
    phone: str = "11999990000",
    has_degree: Optional[bool] = True,
    course: str = "Data Science",
    contact_id: Optional[str] = None,
) -> dict[str, Any]:
    """Helper to create a wire-format leadInfo dict."""
    return {
        "Nome": name,
        "Email": email,
        "Telefone": phone,
        "TemGraduacao": has_degree,
        "CursoInteresse": course,
        "ContactId": contact_id,
    }


def make_server_turn(output: str = "Oi! Como posso ajudar?", **fields: Any) -> ServerTurn:
    """Helper to create a ServerTurn from wire-format fields."""
    return ServerTurn.model_validate({"output": output, **fields})


def make_client(handler: Callable[[httpx.Request], Any]) -> WebhookClient:
    """WebhookClient whose HTTP traffic is served by ``handler``."""
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return WebhookClient(url=WEBHOOK_URL, http_client=http_client)


def make_orchestrator(handler: Callable[[httpx.Request], Any]) -> SessionOrchestrator:
    return SessionOrchestrator(
        client=make_client(handler),
        apology_text=APOLOGY,
        fallback_text=FALLBACK,
        preset_text="Quero dar um salto na minha carreira. Pode me ajudar?",
    )


def request_body(request: httpx.Request) -> dict[str, Any]:
    return json.loads(request.content)


class RecordingHandler:
    """Mock transport handler that replays queued responses and records requests."""

    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def bodies(self) -> list[dict[str, Any]]:
        return [request_body(r) for r in self.requests]
