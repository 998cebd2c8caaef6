"""
Módulo FSM: Máquina de Estados de consultas externas.

Governa o ciclo de vida de uma ConsultationRequest:
PENDING → RUNNING → COMPLETED | FAILED | TIMED_OUT.

Estrutura:
    - states/: Definições dos estados (ConsultationStatus enum)
    - transitions/: Regras de transição (VALID_TRANSITIONS)
    - rules/: Guards e invariantes
    - manager/: Máquina de estados (ConsultationStateMachine)
    - types/: Tipos de dados (StateTransition, TransitionResult)
"""

from fsm.manager import (
    INITIAL_STATES,
    ConsultationStateMachine,
    create_fsm,
)
from fsm.rules import (
    GuardResult,
    evaluate_guards,
)
from fsm.states import (
    DEFAULT_INITIAL_STATE,
    TERMINAL_STATES,
    ConsultationStatus,
    is_terminal,
    is_valid_state,
)
from fsm.transitions import (
    VALID_TRANSITIONS,
    get_valid_targets,
    is_transition_valid,
    validate_transition_map,
)
from fsm.types import (
    StateTransition,
    TransitionResult,
)

__all__ = [
    "DEFAULT_INITIAL_STATE",
    "INITIAL_STATES",
    "TERMINAL_STATES",
    "VALID_TRANSITIONS",
    "ConsultationStateMachine",
    "ConsultationStatus",
    "GuardResult",
    "StateTransition",
    "TransitionResult",
    "create_fsm",
    "evaluate_guards",
    "get_valid_targets",
    "is_terminal",
    "is_transition_valid",
    "is_valid_state",
    "validate_transition_map",
]
