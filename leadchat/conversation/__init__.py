from leadchat.conversation.conversation_log import ConversationLog
from leadchat.conversation.identity import is_session_id, new_session_id
from leadchat.conversation.lead_store import LeadStore, merge_crm_state, resolve_contact_id
from leadchat.conversation.state_machine import (
    ExchangeState,
    ExchangeStateMachine,
    ExchangeTrigger,
)

__all__ = [
    "ConversationLog",
    "new_session_id",
    "is_session_id",
    "LeadStore",
    "merge_crm_state",
    "resolve_contact_id",
    "ExchangeStateMachine",
    "ExchangeState",
    "ExchangeTrigger",
]
