"""
Estados canônicos de uma consulta externa (ConsultationRequest).

O ciclo de vida é estritamente progressivo: uma consulta nunca volta
para PENDING ou RUNNING depois de atingir um estado terminal.
"""

from enum import StrEnum


class ConsultationStatus(StrEnum):
    """
    Estados de uma ConsultationRequest.

    Estados não-terminais:
        - PENDING: Registro criado, provedor ainda não respondeu
        - RUNNING: Provedor aceitou o job (com protocolo) ou respondeu na hora

    Estados terminais:
        - COMPLETED: ConsultationResult gravado
        - FAILED: ProviderError registrado
        - TIMED_OUT: Consulta abandonada após o prazo máximo de polling
    """

    PENDING = "pending"
    RUNNING = "running"

    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"

    def __str__(self) -> str:
        return self.value


# Uma vez em estado terminal, a consulta não transita para outro estado
TERMINAL_STATES: frozenset[ConsultationStatus] = frozenset({
    ConsultationStatus.COMPLETED,
    ConsultationStatus.FAILED,
    ConsultationStatus.TIMED_OUT,
})

DEFAULT_INITIAL_STATE: ConsultationStatus = ConsultationStatus.PENDING


def is_terminal(state: ConsultationStatus) -> bool:
    """Verifica se o estado é terminal."""
    return state in TERMINAL_STATES


def is_valid_state(state: ConsultationStatus) -> bool:
    """Verifica se o valor é um ConsultationStatus válido."""
    return isinstance(state, ConsultationStatus)
