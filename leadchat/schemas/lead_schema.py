"""Lead profile and CRM identifier models."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class LeadInfo(BaseModel):
    """Prospective-student profile as known by the CRM.

    Python names are used in code; the wire aliases are the field names
    the conversational backend speaks.
    """

    model_config = ConfigDict(
        populate_by_name=True, frozen=True, extra="ignore", coerce_numbers_to_str=True
    )

    name: Optional[str] = Field(default=None, alias="Nome")
    email: Optional[str] = Field(default=None, alias="Email")
    phone: Optional[str] = Field(default=None, alias="Telefone")
    has_degree: Optional[bool] = Field(default=None, alias="TemGraduacao")
    course_of_interest: Optional[str] = Field(default=None, alias="CursoInteresse")
    contact_id: Optional[str] = Field(default=None, alias="ContactId")

    def to_wire(self) -> dict[str, Any]:
        """Outbound shape: unknown strings become "", unknown flags/ids stay null."""
        return {
            "Nome": self.name or "",
            "Email": self.email or "",
            "Telefone": self.phone or "",
            "TemGraduacao": self.has_degree,
            "CursoInteresse": self.course_of_interest or "",
            "ContactId": self.contact_id or None,
        }


class CrmState(BaseModel):
    """Accumulated lead and CRM state for one session."""

    model_config = ConfigDict(frozen=True)

    lead_info: LeadInfo = Field(default_factory=LeadInfo)
    contact_id: Optional[str] = None
    deal_id: Optional[str] = None
    email_sent: bool = False
    summary: Optional[str] = None


class CrmUpdate(BaseModel):
    """Partial CRM state as delivered by the server.

    Absent fields are distinguishable from explicit nulls through
    ``model_fields_set``; only fields that were actually sent take part
    in a merge.
    """

    model_config = ConfigDict(
        populate_by_name=True, frozen=True, extra="ignore", coerce_numbers_to_str=True
    )

    lead_info: Optional[LeadInfo] = Field(default=None, alias="leadInfo")
    contact_id: Optional[str] = Field(default=None, alias="contactId")
    deal_id: Optional[str] = Field(default=None, alias="dealId")
    email_sent: Optional[bool] = Field(default=None, alias="emailSent")
    summary: Optional[str] = None
