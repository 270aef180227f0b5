"""Tests for the exchange state machine."""

import pytest

from leadchat.conversation.state_machine import (
    ExchangeState,
    ExchangeStateMachine,
    ExchangeTrigger,
    InvalidTransitionError,
)


class TestInitialState:
    def test_starts_idle(self, state_machine):
        assert state_machine.current_state == ExchangeState.IDLE

    def test_initial_history_has_one_entry(self, state_machine):
        assert len(state_machine.get_history()) == 1

    def test_initial_failure_count_is_zero(self, state_machine):
        assert state_machine.failure_count == 0

    def test_not_awaiting_at_start(self, state_machine):
        assert not state_machine.is_awaiting


class TestExchangeCycle:
    def test_submit_enters_awaiting(self, state_machine):
        new = state_machine.transition(ExchangeTrigger.USER_SUBMITTED)
        assert new == ExchangeState.AWAITING
        assert state_machine.is_awaiting

    def test_success_returns_to_idle(self, state_machine):
        state_machine.transition(ExchangeTrigger.USER_SUBMITTED)
        new = state_machine.transition(ExchangeTrigger.EXCHANGE_SUCCEEDED)
        assert new == ExchangeState.IDLE

    def test_failure_returns_to_idle_and_counts(self, state_machine):
        state_machine.transition(ExchangeTrigger.USER_SUBMITTED)
        new = state_machine.transition(ExchangeTrigger.EXCHANGE_FAILED)
        assert new == ExchangeState.IDLE
        assert state_machine.failure_count == 1

    def test_second_submit_while_awaiting_is_invalid(self, state_machine):
        state_machine.transition(ExchangeTrigger.USER_SUBMITTED)
        assert not state_machine.can_transition(ExchangeTrigger.USER_SUBMITTED)
        with pytest.raises(InvalidTransitionError):
            state_machine.transition(ExchangeTrigger.USER_SUBMITTED)

    def test_result_without_exchange_is_invalid(self, state_machine):
        with pytest.raises(InvalidTransitionError):
            state_machine.transition(ExchangeTrigger.EXCHANGE_SUCCEEDED)


class TestReset:
    def test_reset_from_idle(self, state_machine):
        assert state_machine.transition(ExchangeTrigger.RESET) == ExchangeState.IDLE

    def test_reset_while_awaiting(self, state_machine):
        state_machine.transition(ExchangeTrigger.USER_SUBMITTED)
        assert state_machine.transition(ExchangeTrigger.RESET) == ExchangeState.IDLE

    def test_reset_does_not_count_as_failure(self, state_machine):
        state_machine.transition(ExchangeTrigger.USER_SUBMITTED)
        state_machine.transition(ExchangeTrigger.RESET)
        assert state_machine.failure_count == 0


class TestHistory:
    def test_state_trace_returns_state_names(self, state_machine):
        state_machine.transition(ExchangeTrigger.USER_SUBMITTED)
        state_machine.transition(ExchangeTrigger.EXCHANGE_SUCCEEDED)
        assert state_machine.get_state_trace() == ["idle", "awaiting", "idle"]

    def test_history_records_triggers(self, state_machine):
        state_machine.transition(ExchangeTrigger.USER_SUBMITTED)
        last = state_machine.get_history()[-1]
        assert last.trigger == ExchangeTrigger.USER_SUBMITTED

    def test_valid_triggers_from_idle(self, state_machine):
        assert state_machine.get_valid_triggers() == [
            ExchangeTrigger.USER_SUBMITTED, ExchangeTrigger.RESET,
        ]

    def test_valid_triggers_from_awaiting(self, state_machine):
        state_machine.transition(ExchangeTrigger.USER_SUBMITTED)
        assert len(state_machine.get_valid_triggers()) == 3  # success, failure, reset

    def test_history_is_a_copy(self):
        sm = ExchangeStateMachine()
        sm.get_history().clear()
        assert len(sm.get_history()) == 1
