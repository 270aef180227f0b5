"""
Session orchestrator: the single writer of one chat session's state.

Each user turn is appended to the log, sent through the webhook, and the
reply is reconciled into the CRM state before the assistant message is
appended. A session handles one exchange at a time; submissions made
while a reply is pending are ignored. Resetting mints a new session id,
and any reply still in flight for the old id is discarded on arrival.

Usage:
    orchestrator = SessionOrchestrator()
    await orchestrator.submit("Olá")
    snapshot = orchestrator.snapshot()
    orchestrator.reset()
"""

from dataclasses import dataclass, field
from typing import Optional

from leadchat.config import settings
from leadchat.conversation.conversation_log import ConversationLog
from leadchat.conversation.identity import new_session_id
from leadchat.conversation.lead_store import LeadStore
from leadchat.conversation.state_machine import (
    ExchangeState,
    ExchangeStateMachine,
    ExchangeTrigger,
)
from leadchat.logging_context import get_session_logger, set_session_id
from leadchat.schemas.conversation_schema import Message, Origin
from leadchat.schemas.lead_schema import LeadInfo
from leadchat.webhook.client import (
    ExchangeError,
    ExchangeResult,
    ResponseShapeError,
    WebhookClient,
)

logger = get_session_logger(__name__)


class InputValidationError(ValueError):
    """User input rejected before any network call."""


class StaleResponseError(ExchangeError):
    """A reply arrived for a session id that has since been reset."""


@dataclass
class SessionState:
    """
    Per-session state owned by exactly one orchestrator.

    Replaced wholesale on reset; never shared between orchestrators.
    """
    session_id: str = field(default_factory=new_session_id)
    log: ConversationLog = field(default_factory=ConversationLog)
    leads: LeadStore = field(default_factory=LeadStore)
    show_preset: bool = True


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a session handed to the render layer."""
    session_id: str
    messages: tuple[Message, ...]
    pending: bool
    lead_info: LeadInfo
    contact_id: Optional[str]
    deal_id: Optional[str]
    email_sent: bool
    summary: str
    show_preset: bool


class SessionOrchestrator:
    """Coordinates identity, CRM state, message log and webhook exchanges."""

    def __init__(
        self,
        client: Optional[WebhookClient] = None,
        apology_text: str = settings.messages.apology,
        fallback_text: str = settings.messages.fallback,
        preset_text: str = settings.messages.preset,
        max_input_length: int = settings.session.max_input_length,
    ) -> None:
        self.client = client or WebhookClient()
        self.apology_text = apology_text
        self.fallback_text = fallback_text
        self.preset_text = preset_text
        self.max_input_length = max_input_length
        self._machine = ExchangeStateMachine()
        self._session = SessionState()
        logger.info("Session started: %s", self._session.session_id)

    @property
    def session_id(self) -> str:
        return self._session.session_id

    @property
    def pending(self) -> bool:
        return self._machine.current_state == ExchangeState.AWAITING

    @property
    def state_machine(self) -> ExchangeStateMachine:
        return self._machine

    def snapshot(self) -> SessionSnapshot:
        crm = self._session.leads.state
        return SessionSnapshot(
            session_id=self._session.session_id,
            messages=self._session.log.messages,
            pending=self.pending,
            lead_info=crm.lead_info,
            contact_id=self._session.leads.contact_id,
            deal_id=self._session.leads.deal_id,
            email_sent=crm.email_sent,
            summary=crm.summary or "",
            show_preset=self._session.show_preset,
        )

    def validate_input(self, text: str) -> str:
        """Return the trimmed text or raise InputValidationError."""
        cleaned = (text or "").strip()
        if not cleaned:
            raise InputValidationError("Message is empty")
        if len(cleaned) > self.max_input_length:
            raise InputValidationError(
                f"Message exceeds {self.max_input_length} characters"
            )
        return cleaned

    async def submit(self, text: str) -> Optional[Message]:
        """
        Run one user turn.

        Returns:
            The assistant message appended for this turn, or None when the
            submission was ignored (exchange already pending) or the reply
            arrived after a reset.

        Raises:
            InputValidationError: If the text is empty or too long.
        """
        cleaned = self.validate_input(text)
        if not self._machine.can_transition(ExchangeTrigger.USER_SUBMITTED):
            logger.debug("Submission ignored: an exchange is already in flight")
            return None

        session = self._session
        set_session_id(session.session_id)
        history = session.log.to_history()
        session.log.add(Origin.USER, cleaned)
        session.show_preset = False
        self._machine.transition(ExchangeTrigger.USER_SUBMITTED)

        try:
            result = await self.client.send(
                cleaned, session.session_id, session.leads.state, history
            )
            self._ensure_current(session)
        except StaleResponseError as exc:
            logger.debug("Discarded reply: %s", exc)
            return None
        except ExchangeError as exc:
            if not self._is_current(session):
                logger.debug("Discarded failure for reset session: %s", exc)
                return None
            return self._record_failure(exc)
        else:
            return self._record_success(result)
        finally:
            self._release(session)

    async def send_preset(self) -> Optional[Message]:
        """Submit the canned opener offered before the first message."""
        return await self.submit(self.preset_text)

    def reset(self) -> str:
        """Discard all session state and start over under a fresh id."""
        old_id = self._session.session_id
        self._session = SessionState()
        self._machine.transition(ExchangeTrigger.RESET)
        set_session_id(self._session.session_id)
        logger.info("Session reset: %s -> %s", old_id, self._session.session_id)
        return self._session.session_id

    def _is_current(self, session: SessionState) -> bool:
        return session.session_id == self._session.session_id

    def _ensure_current(self, session: SessionState) -> None:
        if not self._is_current(session):
            raise StaleResponseError(
                f"reply for {session.session_id} arrived after reset "
                f"to {self._session.session_id}"
            )

    def _release(self, session: SessionState) -> None:
        """Leave AWAITING if the exchange ended without recording an outcome."""
        if self._is_current(session) and self.pending:
            logger.warning("Exchange abandoned before completion; session released")
            self._machine.transition(ExchangeTrigger.EXCHANGE_FAILED)

    def _record_success(self, result: ExchangeResult) -> Message:
        if result.turn is not None:
            self._session.leads.apply(result.turn)
        message = self._session.log.add(Origin.ASSISTANT, result.reply)
        self._machine.transition(ExchangeTrigger.EXCHANGE_SUCCEEDED)
        return message

    def _record_failure(self, exc: ExchangeError) -> Message:
        if isinstance(exc, ResponseShapeError):
            logger.warning("Unprocessable webhook reply: %s", exc)
            text = self.fallback_text
        else:
            logger.warning("Webhook exchange failed: %s", exc)
            text = self.apology_text
        message = self._session.log.add(Origin.ASSISTANT, text)
        self._machine.transition(ExchangeTrigger.EXCHANGE_FAILED)
        return message
