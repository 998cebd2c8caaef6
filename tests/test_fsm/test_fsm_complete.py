"""
Testes abrangentes para o módulo FSM de consultas.

- Testamos comportamento e contrato público
- Um teste cobre múltiplos componentes relacionados
- Foco em cenários válidos + inválidos + bordas
"""

from datetime import datetime

import pytest

from fsm import (
    DEFAULT_INITIAL_STATE,
    INITIAL_STATES,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    ConsultationStateMachine,
    ConsultationStatus,
    GuardResult,
    StateTransition,
    TransitionResult,
    create_fsm,
    evaluate_guards,
    get_valid_targets,
    is_terminal,
    is_transition_valid,
    is_valid_state,
    validate_transition_map,
)
from fsm.rules.guards import (
    DEFAULT_GUARDS,
    guard_same_state,
    guard_terminal_state,
    guard_valid_state,
)


class TestConsultationStatusAndTerminals:
    """ConsultationStatus, TERMINAL_STATES, is_terminal e is_valid_state."""

    def test_enum_has_five_states_and_three_terminals(self) -> None:
        assert len(list(ConsultationStatus)) == 5
        assert TERMINAL_STATES == {
            ConsultationStatus.COMPLETED,
            ConsultationStatus.FAILED,
            ConsultationStatus.TIMED_OUT,
        }
        for state in TERMINAL_STATES:
            assert is_terminal(state)
        assert not is_terminal(ConsultationStatus.PENDING)
        assert not is_terminal(ConsultationStatus.RUNNING)

    def test_values_are_snake_case_strings(self) -> None:
        assert ConsultationStatus.TIMED_OUT == "timed_out"
        assert str(ConsultationStatus.RUNNING) == "running"
        assert ConsultationStatus("completed") is ConsultationStatus.COMPLETED

    def test_is_valid_state_rejects_plain_strings(self) -> None:
        assert is_valid_state(ConsultationStatus.PENDING)
        assert not is_valid_state("pending")  # type: ignore[arg-type]

    def test_initial_state_is_pending(self) -> None:
        assert DEFAULT_INITIAL_STATE is ConsultationStatus.PENDING
        assert INITIAL_STATES == {ConsultationStatus.PENDING}


class TestTransitionRules:
    """Grafo VALID_TRANSITIONS e validação do mapa."""

    def test_transition_graph(self) -> None:
        assert get_valid_targets(ConsultationStatus.PENDING) == {
            ConsultationStatus.RUNNING,
            ConsultationStatus.FAILED,
        }
        assert get_valid_targets(ConsultationStatus.RUNNING) == {
            ConsultationStatus.COMPLETED,
            ConsultationStatus.FAILED,
            ConsultationStatus.TIMED_OUT,
        }
        for state in TERMINAL_STATES:
            assert VALID_TRANSITIONS[state] == frozenset()

    @pytest.mark.parametrize(
        ("from_state", "to_state", "expected"),
        [
            (ConsultationStatus.PENDING, ConsultationStatus.RUNNING, True),
            (ConsultationStatus.PENDING, ConsultationStatus.FAILED, True),
            (ConsultationStatus.PENDING, ConsultationStatus.COMPLETED, False),
            (ConsultationStatus.PENDING, ConsultationStatus.TIMED_OUT, False),
            (ConsultationStatus.RUNNING, ConsultationStatus.COMPLETED, True),
            (ConsultationStatus.RUNNING, ConsultationStatus.TIMED_OUT, True),
            (ConsultationStatus.RUNNING, ConsultationStatus.PENDING, False),
            (ConsultationStatus.COMPLETED, ConsultationStatus.FAILED, False),
            (ConsultationStatus.TIMED_OUT, ConsultationStatus.COMPLETED, False),
            (ConsultationStatus.FAILED, ConsultationStatus.RUNNING, False),
        ],
    )
    def test_is_transition_valid(
        self,
        from_state: ConsultationStatus,
        to_state: ConsultationStatus,
        expected: bool,
    ) -> None:
        assert is_transition_valid(from_state, to_state) is expected

    def test_transition_map_is_consistent(self) -> None:
        assert validate_transition_map() == []

    def test_no_state_returns_to_pending(self) -> None:
        for targets in VALID_TRANSITIONS.values():
            assert ConsultationStatus.PENDING not in targets


class TestGuards:
    """Guards individuais e evaluate_guards."""

    def test_terminal_guard_denies_exit(self) -> None:
        result = guard_terminal_state(ConsultationStatus.COMPLETED, ConsultationStatus.FAILED)
        assert result.allowed is False
        assert "COMPLETED" in (result.reason or "")

    def test_same_state_guard_denies_reflexive(self) -> None:
        result = guard_same_state(ConsultationStatus.RUNNING, ConsultationStatus.RUNNING)
        assert result.allowed is False

    def test_valid_state_guard_denies_unknown_values(self) -> None:
        result = guard_valid_state("running", ConsultationStatus.COMPLETED)  # type: ignore[arg-type]
        assert result.allowed is False
        result = guard_valid_state(ConsultationStatus.RUNNING, "done")  # type: ignore[arg-type]
        assert result.allowed is False

    def test_evaluate_guards_allows_valid_transition(self) -> None:
        assert evaluate_guards(ConsultationStatus.PENDING, ConsultationStatus.RUNNING).allowed
        assert len(DEFAULT_GUARDS) == 3

    def test_evaluate_guards_stops_on_first_deny(self) -> None:
        calls: list[str] = []

        def deny(_from: ConsultationStatus, _to: ConsultationStatus) -> GuardResult:
            calls.append("deny")
            return GuardResult.deny("nope")

        def never(_from: ConsultationStatus, _to: ConsultationStatus) -> GuardResult:
            calls.append("never")
            return GuardResult.allow()

        result = evaluate_guards(
            ConsultationStatus.PENDING, ConsultationStatus.RUNNING, guards=[deny, never]
        )
        assert result.reason == "nope"
        assert calls == ["deny"]


class TestConsultationStateMachine:
    """Ciclo de vida completo na máquina de estados."""

    def test_async_lifecycle_pending_running_completed(self) -> None:
        machine = create_fsm("req-1")
        assert machine.current_state is ConsultationStatus.PENDING
        assert machine.request_id == "req-1"

        first = machine.transition(ConsultationStatus.RUNNING, "provider_accepted")
        second = machine.transition(
            ConsultationStatus.COMPLETED, "finalize", {"provider": "infosimples"}
        )

        assert first.success and second.success
        assert machine.is_terminal
        history = machine.history
        assert [t.to_state for t in history] == [
            ConsultationStatus.RUNNING,
            ConsultationStatus.COMPLETED,
        ]
        assert history[1].metadata == {"provider": "infosimples"}

    def test_invalid_transition_keeps_state(self) -> None:
        machine = ConsultationStateMachine(request_id="req-2")
        result = machine.transition(ConsultationStatus.COMPLETED, "finalize")

        assert result.success is False
        assert "PENDING" in (result.error_reason or "")
        assert machine.current_state is ConsultationStatus.PENDING
        assert machine.history == []

    def test_terminal_state_rejects_everything(self) -> None:
        machine = create_fsm("req-3", ConsultationStatus.TIMED_OUT)
        for target in ConsultationStatus:
            assert machine.can_transition_to(target) is False
        assert machine.get_valid_targets() == frozenset()

    def test_history_is_a_copy(self) -> None:
        machine = create_fsm("req-4")
        machine.transition(ConsultationStatus.FAILED, "provider_error")
        machine.history.clear()
        assert len(machine.history) == 1

    def test_summaries_have_no_payload_data(self) -> None:
        machine = create_fsm("req-5")
        machine.transition(ConsultationStatus.RUNNING, "provider_accepted")

        summary = machine.get_state_summary()
        assert summary == {
            "request_id": "req-5",
            "current_state": "RUNNING",
            "is_terminal": False,
            "transition_count": 1,
            "valid_targets": ["COMPLETED", "FAILED", "TIMED_OUT"],
        }
        history = machine.get_history_summary()
        assert history[0]["from_state"] == "PENDING"
        assert history[0]["trigger"] == "provider_accepted"


class TestTransitionTypes:
    """StateTransition e TransitionResult."""

    def test_state_transition_requires_trigger(self) -> None:
        with pytest.raises(ValueError, match="trigger"):
            StateTransition(
                from_state=ConsultationStatus.PENDING,
                to_state=ConsultationStatus.RUNNING,
                trigger="  ",
            )

    def test_state_transition_log_dict(self) -> None:
        transition = StateTransition(
            from_state=ConsultationStatus.RUNNING,
            to_state=ConsultationStatus.TIMED_OUT,
            trigger="expire",
        )
        log = transition.to_log_dict()
        assert log["to_state"] == "TIMED_OUT"
        assert datetime.fromisoformat(log["timestamp"]).tzinfo is not None

    def test_transition_result_invariants(self) -> None:
        with pytest.raises(ValueError):
            TransitionResult(success=True)
        with pytest.raises(ValueError):
            TransitionResult(success=False)
