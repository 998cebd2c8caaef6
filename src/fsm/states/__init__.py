"""
Exports públicos do módulo fsm/states.

Estados canônicos de uma consulta externa.
"""

from fsm.states.consultation import (
    DEFAULT_INITIAL_STATE,
    TERMINAL_STATES,
    ConsultationStatus,
    is_terminal,
    is_valid_state,
)

__all__ = [
    "DEFAULT_INITIAL_STATE",
    "TERMINAL_STATES",
    "ConsultationStatus",
    "is_terminal",
    "is_valid_state",
]
