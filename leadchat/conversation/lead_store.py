"""
Lead/CRM state store with non-destructive, field-level merging.

Each server turn may carry any subset of the lead profile and CRM
identifiers. Fields the server sent overwrite the stored ones; fields it
left out are kept. The email-sent flag only ever moves towards True.

Usage:
    store = LeadStore()
    store.apply(CrmUpdate.model_validate({"contactId": "c1"}))
    store.contact_id  # "c1"
"""

import logging
from typing import Optional

from leadchat.schemas.lead_schema import CrmState, CrmUpdate, LeadInfo

logger = logging.getLogger(__name__)

_SCALAR_FIELDS = ("contact_id", "deal_id", "summary")
_IDENTIFIER_FIELDS = ("contact_id", "deal_id")


def merge_lead_info(current: LeadInfo, incoming: LeadInfo) -> LeadInfo:
    """Overwrite only the lead fields present in ``incoming``."""
    update = {name: getattr(incoming, name) for name in incoming.model_fields_set}
    if not update:
        return current
    return current.model_copy(update=update)


def merge_crm_state(current: CrmState, incoming: CrmUpdate) -> CrmState:
    """
    Merge a partial server update into the accumulated CRM state.

    Rules:
        - a field present in ``incoming`` overwrites the current value,
          including an explicit null for contact/deal ids and summary
        - an absent field is retained
        - ``leadInfo`` merges field by field; a null ``leadInfo`` is ignored
        - ``emailSent`` never reverts from True to False
    """
    sent = incoming.model_fields_set
    update: dict = {}

    if "lead_info" in sent and incoming.lead_info is not None:
        merged = merge_lead_info(current.lead_info, incoming.lead_info)
        if merged is not current.lead_info:
            update["lead_info"] = merged

    for name in _SCALAR_FIELDS:
        if name not in sent:
            continue
        old, new = getattr(current, name), getattr(incoming, name)
        if name in _IDENTIFIER_FIELDS and old and new and old != new:
            logger.warning("Server replaced %s %r with %r", name, old, new)
        update[name] = new

    if "email_sent" in sent and incoming.email_sent is not None:
        if current.email_sent and not incoming.email_sent:
            logger.debug("Ignoring emailSent=false after a confirmed send")
        update["email_sent"] = current.email_sent or incoming.email_sent

    if not update:
        return current
    return current.model_copy(update=update)


def resolve_contact_id(state: CrmState) -> Optional[str]:
    """Top-level contact id first, then the one nested in the lead profile."""
    return state.contact_id or state.lead_info.contact_id or None


class LeadStore:
    """Holds the latest known CRM state for one session."""

    def __init__(self) -> None:
        self._state = CrmState()

    @property
    def state(self) -> CrmState:
        return self._state

    @property
    def contact_id(self) -> Optional[str]:
        return resolve_contact_id(self._state)

    @property
    def deal_id(self) -> Optional[str]:
        return self._state.deal_id

    def apply(self, update: CrmUpdate) -> CrmState:
        """Merge a server update and return the new state."""
        self._state = merge_crm_state(self._state, update)
        logger.debug(
            "CRM state merged (contact=%s, deal=%s, email_sent=%s)",
            self.contact_id, self._state.deal_id, self._state.email_sent,
        )
        return self._state
