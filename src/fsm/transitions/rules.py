"""
Regras de transição válidas entre estados de uma consulta.

Grafo:
    PENDING → RUNNING | FAILED
    RUNNING → COMPLETED | FAILED | TIMED_OUT
    (terminais não têm saída)
"""

from fsm.states.consultation import TERMINAL_STATES, ConsultationStatus

TransitionMap = dict[ConsultationStatus, frozenset[ConsultationStatus]]

VALID_TRANSITIONS: TransitionMap = {
    # PENDING: provedor aceitou o job (ou respondeu na hora) ou falhou de cara
    ConsultationStatus.PENDING: frozenset({
        ConsultationStatus.RUNNING,
        ConsultationStatus.FAILED,
    }),

    ConsultationStatus.RUNNING: frozenset({
        ConsultationStatus.COMPLETED,
        ConsultationStatus.FAILED,
        ConsultationStatus.TIMED_OUT,
    }),

    ConsultationStatus.COMPLETED: frozenset(),
    ConsultationStatus.FAILED: frozenset(),
    ConsultationStatus.TIMED_OUT: frozenset(),
}


def get_valid_targets(state: ConsultationStatus) -> frozenset[ConsultationStatus]:
    """Retorna os estados de destino válidos para um estado de origem."""
    return VALID_TRANSITIONS.get(state, frozenset())


def is_transition_valid(
    from_state: ConsultationStatus,
    to_state: ConsultationStatus,
) -> bool:
    """
    Verifica se uma transição é válida segundo as regras definidas.

    Args:
        from_state: Estado de origem
        to_state: Estado de destino

    Returns:
        True se a transição é permitida, False caso contrário
    """
    if from_state in TERMINAL_STATES:
        return False

    return to_state in get_valid_targets(from_state)


def validate_transition_map() -> list[str]:
    """
    Valida a integridade do mapa de transições.

    Verifica:
    - Todos os estados do enum estão no mapa
    - Estados terminais têm conjunto vazio
    - Nenhuma transição volta para PENDING

    Returns:
        Lista de erros encontrados (vazia se válido)
    """
    errors: list[str] = []

    for state in ConsultationStatus:
        if state not in VALID_TRANSITIONS:
            errors.append(f"Estado {state.name} ausente em VALID_TRANSITIONS")

    for state in TERMINAL_STATES:
        targets = VALID_TRANSITIONS.get(state, frozenset())
        if targets:
            errors.append(
                f"Estado terminal {state.name} não deveria ter transições: {targets}"
            )

    for from_state, targets in VALID_TRANSITIONS.items():
        if ConsultationStatus.PENDING in targets:
            errors.append(f"Transição {from_state.name} → PENDING não é permitida")

    return errors
