"""Helpers puros do ConsultationOrchestrator (sem IO)."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from app.domain.history import ResultSnapshot, SearchHistoryEntry
from app.domain.lookup import LookupRequest, ProviderName
from fsm.transitions import get_valid_targets
from utils.errors import (
    InvalidInputError,
    InvalidTransitionError,
    ProviderError,
    ProviderTerminalError,
    ProviderTransientError,
)

if TYPE_CHECKING:
    from app.domain.canonical import CnhResult, FinesResult, VehicleResult
    from app.domain.consultation import ConsultationRequest
    from fsm import ConsultationStateMachine, ConsultationStatus

TIMEOUT_CODE = "timeout"
TIMEOUT_MESSAGE = "Consulta expirada sem resposta do provedor"
INVALID_RESPONSE_CODE = "invalid_response"

# Códigos terminais que ainda justificam tentar o próximo provedor
FALLBACK_TERMINAL_CODES = frozenset({"invalid_credentials"})

def utcnow() -> datetime:
    return datetime.now(UTC)

def lookup_from_request(request: ConsultationRequest) -> LookupRequest:
    """Reconstrói o pedido canônico a partir do registro persistido."""
    return LookupRequest(
        search_type=request.search_type,
        query=request.search_query,
        uf=request.uf,
        params=request.params,
    )

def advance(
    fsm: ConsultationStateMachine,
    target: ConsultationStatus,
    trigger: str,
    **metadata: Any,
) -> None:
    """Aplica a transição ou levanta InvalidTransitionError."""
    result = fsm.transition(target, trigger, metadata)
    if not result.success:
        allowed = sorted(state.value for state in get_valid_targets(fsm.current_state))
        raise InvalidTransitionError(
            f"{result.error_reason} (permitidos: {', '.join(allowed) or 'nenhum'})"
        )

def should_try_next(error: ProviderError) -> bool:
    """Transitório ou credencial inválida: vale tentar o próximo provedor."""
    return error.transient or error.code in FALLBACK_TERMINAL_CODES

def error_from_request(request: ConsultationRequest) -> ProviderError:
    """Reconstrói o ProviderError gravado na consulta."""
    provider = request.provider.value if request.provider else ""
    code = request.error_code or "provider_error"
    message = request.error_message or ""
    if request.error_transient:
        return ProviderTransientError(code, message, provider=provider)
    return ProviderTerminalError(code, message, provider=provider)

def error_fields(error: ProviderError) -> dict[str, Any]:
    return {
        "error_code": error.code,
        "error_message": error.message,
        "error_transient": error.transient,
    }

def success_entry(
    request: ConsultationRequest,
    canonical: CnhResult | VehicleResult | FinesResult,
    provider: ProviderName,
    *,
    degraded: bool = False,
) -> SearchHistoryEntry:
    return _entry(
        request,
        provider.value,
        ResultSnapshot(
            success=True,
            data=canonical.model_dump(mode="json"),
            degraded=degraded,
        ),
    )

def failure_entry(request: ConsultationRequest, error: ProviderError) -> SearchHistoryEntry:
    provider_source = error.provider or (request.provider.value if request.provider else "")
    return _entry(
        request,
        provider_source or "unknown",
        ResultSnapshot(success=False, error=error.to_dict()),
    )

def _entry(
    request: ConsultationRequest,
    provider_source: str,
    snapshot: ResultSnapshot,
) -> SearchHistoryEntry:
    return SearchHistoryEntry(
        user_id=request.owner_id,
        search_type=request.search_type,
        search_query=request.search_query,
        uf=request.uf,
        provider_source=provider_source,
        request_id=request.id,
        result_snapshot=snapshot,
    )


def invalid_response(provider: str, exc: Exception) -> ProviderTerminalError:
    """Falha inesperada do adaptador (payload ilegível, bug de normalização)."""
    return ProviderTerminalError(
        INVALID_RESPONSE_CODE,
        f"Resposta do provedor não pôde ser processada ({type(exc).__name__})",
        provider=provider,
    )


def rejected_input(provider: str, exc: InvalidInputError) -> ProviderTerminalError:
    """Pedido recusado por um adaptador depois do primeiro (parâmetro que só ele exige)."""
    return ProviderTerminalError("invalid_input", str(exc), provider=provider)
