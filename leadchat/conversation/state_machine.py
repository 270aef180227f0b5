"""
Finite state machine gating the request/response cycle of a session.

Two states: IDLE (waiting for the user) and AWAITING (an exchange is in
flight). Every transition is declared explicitly; anything else is
rejected, which is what keeps a session to one in-flight exchange.

Usage:
    sm = ExchangeStateMachine()
    sm.transition(ExchangeTrigger.USER_SUBMITTED)
    assert sm.current_state == ExchangeState.AWAITING
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class ExchangeState(str, Enum):
    """Lifecycle states of a chat session."""
    IDLE = "idle"
    AWAITING = "awaiting"


class ExchangeTrigger(str, Enum):
    """Events that cause state transitions."""
    USER_SUBMITTED = "user_submitted"
    EXCHANGE_SUCCEEDED = "exchange_succeeded"
    EXCHANGE_FAILED = "exchange_failed"
    RESET = "reset"


@dataclass
class Transition:
    """A single valid state transition."""
    from_state: ExchangeState
    to_state: ExchangeState
    trigger: ExchangeTrigger


@dataclass
class StateEntry:
    """Recorded history entry for a state visit."""
    state: ExchangeState
    entered_at: datetime
    trigger: Optional[ExchangeTrigger] = None


class InvalidTransitionError(Exception):
    """Raised when a transition is not valid from the current state."""


class ExchangeStateMachine:
    """Deterministic IDLE/AWAITING machine for one session."""

    TRANSITIONS: list[Transition] = [
        Transition(ExchangeState.IDLE, ExchangeState.AWAITING,
                   ExchangeTrigger.USER_SUBMITTED),
        Transition(ExchangeState.AWAITING, ExchangeState.IDLE,
                   ExchangeTrigger.EXCHANGE_SUCCEEDED),
        Transition(ExchangeState.AWAITING, ExchangeState.IDLE,
                   ExchangeTrigger.EXCHANGE_FAILED),

        # --- Reset is accepted from anywhere ---
        Transition(ExchangeState.IDLE, ExchangeState.IDLE,
                   ExchangeTrigger.RESET),
        Transition(ExchangeState.AWAITING, ExchangeState.IDLE,
                   ExchangeTrigger.RESET),
    ]

    def __init__(self) -> None:
        self._current_state = ExchangeState.IDLE
        self._history: list[StateEntry] = [
            StateEntry(state=ExchangeState.IDLE, entered_at=datetime.now(timezone.utc))
        ]
        self._failure_count: int = 0

    @property
    def current_state(self) -> ExchangeState:
        return self._current_state

    @property
    def failure_count(self) -> int:
        return self._failure_count

    @property
    def is_awaiting(self) -> bool:
        return self._current_state == ExchangeState.AWAITING

    def can_transition(self, trigger: ExchangeTrigger) -> bool:
        return trigger in self.get_valid_triggers()

    def transition(self, trigger: ExchangeTrigger) -> ExchangeState:
        """
        Execute a state transition.

        Args:
            trigger: The event triggering the transition.

        Returns:
            The new state.

        Raises:
            InvalidTransitionError: If no valid transition exists.
        """
        for t in self.TRANSITIONS:
            if t.from_state == self._current_state and t.trigger == trigger:
                old_state = self._current_state
                self._current_state = t.to_state

                self._history.append(StateEntry(
                    state=self._current_state,
                    entered_at=datetime.now(timezone.utc),
                    trigger=trigger,
                ))

                if trigger == ExchangeTrigger.EXCHANGE_FAILED:
                    self._failure_count += 1

                logger.debug(
                    "State transition: %s -> %s (trigger: %s)",
                    old_state.value, self._current_state.value, trigger.value,
                )
                return self._current_state

        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"No valid transition from '{self._current_state.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def get_valid_triggers(self) -> list[ExchangeTrigger]:
        """Return all triggers valid from the current state."""
        return [t.trigger for t in self.TRANSITIONS if t.from_state == self._current_state]

    def get_history(self) -> list[StateEntry]:
        return list(self._history)

    def get_state_trace(self) -> list[str]:
        """Return ordered list of state names visited."""
        return [entry.state.value for entry in self._history]
