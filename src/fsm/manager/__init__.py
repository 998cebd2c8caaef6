"""
Exports públicos do módulo fsm/manager.

Máquina de estados (ConsultationStateMachine) de consultas externas.
"""

from fsm.manager.machine import (
    INITIAL_STATES,
    ConsultationStateMachine,
    create_fsm,
)

__all__ = [
    "INITIAL_STATES",
    "ConsultationStateMachine",
    "create_fsm",
]
