"""Webhook request envelope and server turn models."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from leadchat.schemas.conversation_schema import ConversationHistoryItem
from leadchat.schemas.lead_schema import CrmUpdate, LeadInfo


class WebhookRequest(BaseModel):
    """Outbound body for one exchange. Every key is always serialized."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    chat_input: str = Field(alias="chatInput")
    session_id: str = Field(alias="sessionId")
    contact_id: Optional[str] = Field(default=None, alias="contactId")
    deal_id: Optional[str] = Field(default=None, alias="dealId")
    email_sent: bool = Field(default=False, alias="emailSent")
    lead_info: LeadInfo = Field(default_factory=LeadInfo, alias="leadInfo")
    conversation_history: list[ConversationHistoryItem] = Field(
        default_factory=list, alias="conversationHistory"
    )
    summary: str = ""

    @field_serializer("lead_info")
    def _serialize_lead_info(self, lead_info: LeadInfo) -> dict[str, Any]:
        return lead_info.to_wire()

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class ServerTurn(CrmUpdate):
    """Successful structured reply from the conversational backend."""

    output: str
    conversation_history: Optional[list[dict[str, Any]]] = Field(
        default_factory=list, alias="conversationHistory"
    )
    session_id: Optional[str] = Field(default=None, alias="sessionId")
