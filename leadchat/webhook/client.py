"""
Webhook exchange protocol: one POST per user turn, classified reply.

The request envelope is built from the session's CRM state and message
log. The reply is classified by content type and shape:

    non-2xx status                  -> TransportError
    JSON object with non-empty output -> ServerTurn (merged into state)
    JSON string                     -> reply text, no merge
    any other JSON                  -> ResponseShapeError
    non-JSON body                   -> reply text verbatim, no merge

An object whose output is usable but whose CRM fields are malformed still
yields the output as the reply; only the fields that validate are merged.

Failures are never retried here; the user resubmits manually.
"""

from dataclasses import dataclass
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from leadchat.config import settings
from leadchat.conversation.lead_store import resolve_contact_id
from leadchat.logging_context import get_session_logger
from leadchat.schemas.conversation_schema import ConversationHistoryItem
from leadchat.schemas.lead_schema import CrmState
from leadchat.schemas.webhook_schema import ServerTurn, WebhookRequest

logger = get_session_logger(__name__)

JSON_CONTENT_TYPE = "application/json"


class ExchangeError(Exception):
    """Base class for a failed exchange; terminal for the current turn only."""


class TransportError(ExchangeError):
    """The webhook could not be reached or answered with a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ResponseShapeError(ExchangeError):
    """A successful JSON reply matched none of the recognized shapes."""


@dataclass(frozen=True)
class ExchangeResult:
    """Reply text for the assistant message plus the merge source, if any."""

    reply: str
    turn: Optional[ServerTurn] = None

    @property
    def has_update(self) -> bool:
        return self.turn is not None


def build_request(
    text: str,
    session_id: str,
    crm: CrmState,
    history: list[ConversationHistoryItem],
) -> WebhookRequest:
    """Assemble the outbound envelope from the current session stores."""
    return WebhookRequest(
        chat_input=text,
        session_id=session_id,
        contact_id=resolve_contact_id(crm),
        deal_id=crm.deal_id or None,
        email_sent=crm.email_sent,
        lead_info=crm.lead_info,
        conversation_history=history,
        summary=crm.summary or "",
    )


def parse_turn(payload: dict[str, Any]) -> Optional[ServerTurn]:
    """
    Validate a structured reply, dropping top-level fields the model rejects.

    Returns None when nothing mergeable survives.
    """
    try:
        return ServerTurn.model_validate(payload)
    except ValidationError as exc:
        rejected = {str(error["loc"][0]) for error in exc.errors() if error["loc"]}
    rejected.discard("output")
    logger.warning(
        "Skipping malformed reply fields: %s", ", ".join(sorted(rejected)) or "<model>"
    )
    kept = {key: value for key, value in payload.items() if key not in rejected}
    try:
        return ServerTurn.model_validate(kept)
    except ValidationError:
        logger.warning("Reply fields could not be merged; showing output only")
        return None


def classify_payload(payload: Any) -> ExchangeResult:
    """Classify a decoded JSON payload from a successful reply."""
    if isinstance(payload, dict) and payload.get("output"):
        output = payload["output"]
        if not isinstance(output, str):
            raise ResponseShapeError(
                f"Reply output must be text, got {type(output).__name__}"
            )
        return ExchangeResult(reply=output, turn=parse_turn(payload))
    if isinstance(payload, str):
        return ExchangeResult(reply=payload)
    raise ResponseShapeError(f"Unrecognized payload of type {type(payload).__name__}")


def classify_response(response: httpx.Response) -> ExchangeResult:
    """Turn an HTTP response into an ExchangeResult or raise an ExchangeError."""
    if not response.is_success:
        raise TransportError(
            f"HTTP {response.status_code}: {response.reason_phrase}",
            status_code=response.status_code,
        )

    content_type = response.headers.get("content-type", "")
    if JSON_CONTENT_TYPE not in content_type:
        return ExchangeResult(reply=response.text)

    try:
        payload = response.json()
    except ValueError as exc:
        raise TransportError("Reply declared JSON but could not be decoded") from exc
    return classify_payload(payload)


class WebhookClient:
    """
    Sends one chat turn to the conversational webhook.

    An ``httpx.AsyncClient`` may be injected for connection reuse or
    testing; otherwise a short-lived client is opened per call. Owned
    clients follow redirects and wait without a deadline unless a
    positive ``timeout`` is given.
    """

    def __init__(
        self,
        url: str = settings.webhook.url,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = settings.webhook.timeout_seconds,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._http_client = http_client

    def new_http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout if self.timeout > 0 else None,
            follow_redirects=True,
        )

    async def send(
        self,
        text: str,
        session_id: str,
        crm: CrmState,
        history: list[ConversationHistoryItem],
    ) -> ExchangeResult:
        """
        Perform one exchange.

        Raises:
            TransportError: network failure or non-success status.
            ResponseShapeError: JSON reply of an unrecognized shape.
        """
        request = build_request(text, session_id, crm, history)
        response = await self._post(request.to_payload())
        result = classify_response(response)
        logger.debug(
            "Exchange completed (status=%d, structured=%s)",
            response.status_code, result.has_update,
        )
        return result

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        headers = {"Content-Type": JSON_CONTENT_TYPE}
        try:
            if self._http_client is not None:
                return await self._http_client.post(self.url, json=payload, headers=headers)
            async with self.new_http_client() as client:
                return await client.post(self.url, json=payload, headers=headers)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(f"Webhook unreachable: {exc}") from exc
