"""
Máquina de estados (ConsultationStateMachine) de uma consulta externa.

A máquina é reconstruída a partir do status persistido a cada operação
do orquestrador; o histórico vale apenas para a operação corrente e vai
para os logs.
"""

from typing import Any

from fsm.rules.guards import GuardResult, evaluate_guards
from fsm.states.consultation import (
    DEFAULT_INITIAL_STATE,
    ConsultationStatus,
    is_terminal,
)
from fsm.transitions.rules import get_valid_targets, is_transition_valid
from fsm.types.transition import StateTransition, TransitionResult


class ConsultationStateMachine:
    """
    Máquina de estados de uma ConsultationRequest.

    Attributes:
        current_state: Estado atual da máquina
        history: Transições realizadas nesta instância
    """

    __slots__ = ("_current_state", "_history", "_request_id")

    def __init__(
        self,
        initial_state: ConsultationStatus | None = None,
        request_id: str = "",
    ) -> None:
        self._current_state = initial_state or DEFAULT_INITIAL_STATE
        self._history: list[StateTransition] = []
        self._request_id = request_id

    @property
    def current_state(self) -> ConsultationStatus:
        return self._current_state

    @property
    def history(self) -> list[StateTransition]:
        """Histórico de transições (cópia para evitar mutação externa)."""
        return list(self._history)

    @property
    def request_id(self) -> str:
        return self._request_id

    @property
    def is_terminal(self) -> bool:
        return is_terminal(self._current_state)

    def can_transition_to(self, target: ConsultationStatus) -> bool:
        """Verifica se pode transitar para o estado alvo."""
        if not is_transition_valid(self._current_state, target):
            return False
        return evaluate_guards(self._current_state, target).allowed

    def get_valid_targets(self) -> frozenset[ConsultationStatus]:
        return get_valid_targets(self._current_state)

    def transition(
        self,
        target: ConsultationStatus,
        trigger: str,
        metadata: dict[str, Any] | None = None,
    ) -> TransitionResult:
        """
        Tenta realizar uma transição de estado.

        Args:
            target: Estado de destino
            trigger: Identificador do gatilho
            metadata: Dados adicionais para auditoria (nunca PII)

        Returns:
            TransitionResult com sucesso/falha e dados da transição
        """
        if not is_transition_valid(self._current_state, target):
            return TransitionResult(
                success=False,
                error_reason=(
                    f"Transição inválida: {self._current_state.name} → {target.name}"
                ),
            )

        guard_result: GuardResult = evaluate_guards(self._current_state, target)
        if not guard_result.allowed:
            return TransitionResult(
                success=False,
                error_reason=guard_result.reason,
            )

        transition = StateTransition(
            from_state=self._current_state,
            to_state=target,
            trigger=trigger,
            metadata=metadata or {},
        )
        self._current_state = target
        self._history.append(transition)

        return TransitionResult(success=True, transition=transition)

    def get_state_summary(self) -> dict[str, Any]:
        """Resumo do estado atual para observability."""
        return {
            "request_id": self._request_id,
            "current_state": self._current_state.name,
            "is_terminal": self.is_terminal,
            "transition_count": len(self._history),
            "valid_targets": sorted(s.name for s in self.get_valid_targets()),
        }

    def get_history_summary(self) -> list[dict[str, Any]]:
        return [t.to_log_dict() for t in self._history]


def create_fsm(
    request_id: str,
    initial_state: ConsultationStatus | None = None,
) -> ConsultationStateMachine:
    """Factory para criar a FSM de uma consulta."""
    return ConsultationStateMachine(
        initial_state=initial_state,
        request_id=request_id,
    )


INITIAL_STATES = frozenset({DEFAULT_INITIAL_STATE})
