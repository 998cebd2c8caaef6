"""
Guards e invariantes para transições de estado de consultas.

Guards podem bloquear uma transição mesmo quando ela consta no grafo
de VALID_TRANSITIONS.
"""

from collections.abc import Callable

from fsm.states.consultation import TERMINAL_STATES, ConsultationStatus


class GuardResult:
    """
    Resultado da avaliação de um guard.

    Attributes:
        allowed: Se a transição é permitida
        reason: Motivo do bloqueio (se allowed=False)
    """

    __slots__ = ("allowed", "reason")

    def __init__(self, allowed: bool, reason: str | None = None) -> None:
        self.allowed = allowed
        self.reason = reason

    @classmethod
    def allow(cls) -> "GuardResult":
        """Cria resultado permitindo a transição."""
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "GuardResult":
        """Cria resultado negando a transição."""
        return cls(allowed=False, reason=reason)


Guard = Callable[[ConsultationStatus, ConsultationStatus], GuardResult]


def guard_terminal_state(
    from_state: ConsultationStatus,
    to_state: ConsultationStatus,
) -> GuardResult:
    """Guard: estados terminais não permitem saída."""
    if from_state in TERMINAL_STATES:
        return GuardResult.deny(
            f"Estado {from_state.name} é terminal, não permite transição"
        )
    return GuardResult.allow()


def guard_same_state(
    from_state: ConsultationStatus,
    to_state: ConsultationStatus,
) -> GuardResult:
    """Guard: nenhuma transição reflexiva é permitida."""
    if from_state == to_state:
        return GuardResult.deny(
            f"Transição reflexiva não permitida: {from_state.name} → {to_state.name}"
        )
    return GuardResult.allow()


def guard_valid_state(
    from_state: ConsultationStatus,
    to_state: ConsultationStatus,
) -> GuardResult:
    """Guard: ambos os estados devem ser ConsultationStatus."""
    if not isinstance(from_state, ConsultationStatus):
        return GuardResult.deny(f"Estado de origem inválido: {from_state}")

    if not isinstance(to_state, ConsultationStatus):
        return GuardResult.deny(f"Estado de destino inválido: {to_state}")

    return GuardResult.allow()


# Aplicados em ordem; o primeiro deny interrompe a avaliação
DEFAULT_GUARDS: list[Guard] = [
    guard_valid_state,
    guard_terminal_state,
    guard_same_state,
]


def evaluate_guards(
    from_state: ConsultationStatus,
    to_state: ConsultationStatus,
    guards: list[Guard] | None = None,
) -> GuardResult:
    """
    Avalia todos os guards para uma transição.

    Args:
        from_state: Estado de origem
        to_state: Estado de destino
        guards: Lista de guards a aplicar (usa DEFAULT_GUARDS se None)

    Returns:
        GuardResult do primeiro guard que negar, ou allow() se todos passarem
    """
    guards_to_apply = guards if guards is not None else DEFAULT_GUARDS

    for guard in guards_to_apply:
        result = guard(from_state, to_state)
        if not result.allowed:
            return result

    return GuardResult.allow()
