"""ConsultationOrchestrator - ciclo de vida de uma consulta externa.

Responsabilidades:
- Validar auth e pedido antes de qualquer chamada externa
- Percorrer a cadeia de provedores (fallback em erro transitório)
- Conduzir a FSM pending → running → completed | failed | timed_out
- Gravar ConsultationResult e exatamente uma SearchHistoryEntry por consulta

get_status nunca escreve. finalize é idempotente: em consulta terminal
devolve o resultado gravado (ou relança o erro gravado) sem escrever nada.
Chamadas concorrentes de finalize/expire para o mesmo id são serializadas
por um asyncio.Lock por consulta.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from app.domain.auth import require_user
from app.domain.consultation import (
    ConsultationRequest,
    ConsultationResult,
    StatusSnapshot,
)
from app.domain.lookup import ProviderName, validate_lookup
from app.domain.webhook import WebhookEvent
from app.observability import record_latency, record_lookup_outcome
from app.services import _consultation_helpers as helpers
from app.services.demo_data import build_demo_result
from config.logging import log_fallback, mask_query
from fsm import ConsultationStatus, create_fsm, is_terminal
from utils.errors import (
    ConsultationNotFoundError,
    ConsultationNotReadyError,
    InvalidInputError,
    InvalidTransitionError,
    LookupTimeoutError,
    ProviderError,
    ProviderTerminalError,
    ResultAlreadyExistsError,
)

if TYPE_CHECKING:
    from app.domain.auth import AuthContext
    from app.domain.canonical import CnhResult, FinesResult, VehicleResult
    from app.domain.consultation import ProviderJobStatus
    from app.domain.history import SearchHistoryEntry
    from app.domain.lookup import LookupRequest
    from app.protocols.consultation_store import ConsultationStoreProtocol
    from app.protocols.provider_adapter import ProviderAdapter
    from app.services.provider_registry import ProviderRegistry
    from app.services.search_history_ledger import SearchHistoryLedger
    from app.services.webhook_dispatcher import WebhookDispatcher
    from fsm import ConsultationStateMachine

    Canonical = CnhResult | VehicleResult | FinesResult

logger = logging.getLogger(__name__)

_COMPONENT = "consultation_orchestrator"


@dataclass
class _RequestLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class ConsultationOrchestrator:
    """Ponto único de mutação de ConsultationRequest."""

    def __init__(
        self,
        *,
        store: ConsultationStoreProtocol,
        registry: ProviderRegistry,
        ledger: SearchHistoryLedger,
        demo_mode: bool = False,
        default_uf: str = "SP",
        dispatcher: WebhookDispatcher | None = None,
    ) -> None:
        self._store = store
        self._registry = registry
        self._ledger = ledger
        self._demo_mode = demo_mode
        self._default_uf = default_uf
        self._dispatcher = dispatcher
        self._locks: dict[str, _RequestLock] = {}

    @property
    def active_locks(self) -> int:
        """Consultas com finalize/expire em andamento ou aguardando."""
        return len(self._locks)

    # ──────────────────────────────────────────────────────────────────────
    # submit
    # ──────────────────────────────────────────────────────────────────────

    async def submit(self, auth: AuthContext | None, lookup: LookupRequest) -> str:
        """Cria a consulta e chama a cadeia de provedores.

        Returns:
            request_id da consulta (em running, completed ou failed)

        Raises:
            UnauthorizedError: Sem usuário autenticado
            InvalidInputError: Pedido inválido (nenhuma chamada externa feita)
        """
        started = time.perf_counter()
        user_id = require_user(auth)
        lookup = validate_lookup(lookup, default_uf=self._default_uf)
        chain = self._registry.chain(lookup.search_type)
        if chain:
            chain[0].validate(lookup)

        request = ConsultationRequest(
            owner_id=user_id,
            search_type=lookup.search_type,
            search_query=lookup.query,
            uf=lookup.uf,
            params=lookup.params,
        )
        await self._store.create(request)
        fsm = create_fsm(request.id, request.status)
        logger.info(
            "consultation_created",
            extra={
                "component": _COMPONENT,
                "request_id": request.id,
                "search_type": lookup.search_type.value,
                "query": mask_query(lookup.query),
                "uf": lookup.uf,
                "providers": [adapter.provider.value for adapter in chain],
            },
        )

        last_error: ProviderError = ProviderTerminalError(
            "provider_not_configured",
            "Nenhum provedor configurado para este tipo de consulta.",
        )
        for position, adapter in enumerate(chain):
            try:
                outcome = await adapter.lookup(lookup)
                canonical = adapter.normalize(outcome.raw_payload) if outcome.is_sync else None
            except Exception as exc:
                error = self._as_provider_error(adapter, request.id, exc)
                last_error = error
                has_next = position + 1 < len(chain)
                if has_next and helpers.should_try_next(error):
                    log_fallback(
                        logger,
                        "provider_chain",
                        reason=error.code,
                        request_id=request.id,
                        provider=adapter.provider.value,
                        next_provider=chain[position + 1].provider.value,
                    )
                    continue
                break

            if canonical is not None:
                await self._complete(
                    request,
                    fsm,
                    canonical=canonical,
                    raw_payload=outcome.raw_payload,
                    provider=adapter.provider,
                    trigger="provider_answered",
                )
            else:
                advance_to_running(fsm, adapter.provider, "provider_accepted")
                request = request.model_copy(
                    update={
                        "status": fsm.current_state,
                        "provider": adapter.provider,
                        "provider_protocol": outcome.protocol,
                        "updated_at": helpers.utcnow(),
                    }
                )
                await self._store.update(request)
                logger.info(
                    "consultation_running",
                    extra={
                        "component": _COMPONENT,
                        "request_id": request.id,
                        "provider": adapter.provider.value,
                    },
                )
            record_latency(_COMPONENT, "submit", (time.perf_counter() - started) * 1000)
            return request.id

        await self._resolve_failure(request, fsm, last_error, trigger="provider_failed")
        record_latency(_COMPONENT, "submit", (time.perf_counter() - started) * 1000)
        return request.id

    # ──────────────────────────────────────────────────────────────────────
    # leitura
    # ──────────────────────────────────────────────────────────────────────

    async def get_request(self, auth: AuthContext | None, request_id: str) -> ConsultationRequest:
        user_id = require_user(auth)
        request = await self._store.get(request_id)
        if request is None or request.owner_id != user_id:
            raise ConsultationNotFoundError(request_id)
        return request

    async def get_status(self, auth: AuthContext | None, request_id: str) -> StatusSnapshot:
        """Leitura sem efeito colateral.

        Para consultas em RUNNING com protocolo, consulta o estado do job no
        provedor e o devolve em provider_status. Erro terminal do provedor
        nessa checagem vira provider_status="failed" (finalize registra o
        erro); erro transitório é propagado.
        """
        request = await self.get_request(auth, request_id)
        provider_status: ProviderJobStatus | None = None
        if request.status is ConsultationStatus.RUNNING and request.provider_protocol:
            adapter = self._adapter_for(request)
            try:
                provider_status = await adapter.check_status(request.provider_protocol)
            except ProviderError as exc:
                if exc.transient:
                    raise
                logger.warning(
                    "provider_status_check_rejected",
                    extra={
                        "component": _COMPONENT,
                        "request_id": request.id,
                        "provider": adapter.provider.value,
                        "error_code": exc.code,
                    },
                )
                provider_status = "failed"
        return StatusSnapshot.of(request, provider_status)

    # ──────────────────────────────────────────────────────────────────────
    # finalize / expire
    # ──────────────────────────────────────────────────────────────────────

    async def finalize(self, auth: AuthContext | None, request_id: str) -> Canonical:
        """Busca o resultado final e encerra a consulta.

        Raises:
            ConsultationNotReadyError: Provedor ainda processando (sem mudança)
            ProviderError: Consulta falhou (gravada como failed)
            LookupTimeoutError: Consulta expirada
            InvalidTransitionError: Consulta ainda sem protocolo
        """
        started = time.perf_counter()
        async with self._serialized(request_id):
            request = await self.get_request(auth, request_id)
            if is_terminal(request.status):
                return await self._stored_outcome(request)

            if request.status is not ConsultationStatus.RUNNING or not request.provider_protocol:
                raise InvalidTransitionError(
                    f"finalize exige consulta em running com protocolo (atual: {request.status})"
                )

            fsm = create_fsm(request.id, request.status)
            adapter = self._adapter_for(request)
            try:
                raw_payload = await adapter.fetch_result(request.provider_protocol)
                canonical = adapter.normalize(raw_payload)
            except ConsultationNotReadyError:
                logger.info(
                    "consultation_not_ready",
                    extra={"component": _COMPONENT, "request_id": request.id},
                )
                raise
            except Exception as exc:
                error = self._as_provider_error(adapter, request.id, exc)
                request = await self._resolve_failure(request, fsm, error, trigger="finalize")
                if request.status is ConsultationStatus.FAILED:
                    if error is exc:
                        raise
                    raise error from exc
                return await self._stored_outcome(request)

            await self._complete(
                request,
                fsm,
                canonical=canonical,
                raw_payload=raw_payload,
                provider=adapter.provider,
                trigger="finalize",
            )
        record_latency(_COMPONENT, "finalize", (time.perf_counter() - started) * 1000)
        return canonical

    async def expire(self, auth: AuthContext | None, request_id: str) -> StatusSnapshot:
        """Abandona uma consulta em RUNNING (running → timed_out).

        Idempotente para consultas já expiradas.
        """
        async with self._serialized(request_id):
            request = await self.get_request(auth, request_id)
            if request.status is not ConsultationStatus.TIMED_OUT:
                fsm = create_fsm(request.id, request.status)
                helpers.advance(fsm, ConsultationStatus.TIMED_OUT, "expire")
                error = ProviderError(
                    helpers.TIMEOUT_CODE,
                    helpers.TIMEOUT_MESSAGE,
                    transient=True,
                    provider=request.provider.value if request.provider else "",
                )
                request = request.model_copy(
                    update={
                        "status": fsm.current_state,
                        **helpers.error_fields(error),
                        "updated_at": helpers.utcnow(),
                    }
                )
                request = await self._record_history(request, helpers.failure_entry(request, error))
                await self._store.update(request)
                self._log_terminal(request, fsm)
        return StatusSnapshot.of(request)

    # ──────────────────────────────────────────────────────────────────────
    # internos
    # ──────────────────────────────────────────────────────────────────────

    @asynccontextmanager
    async def _serialized(self, request_id: str) -> AsyncIterator[None]:
        """Serializa finalize/expire da mesma consulta.

        O lock sai do mapa quando o último usuário (dono ou em espera) sai,
        inclusive por exceção.
        """
        entry = self._locks.get(request_id)
        if entry is None:
            entry = self._locks[request_id] = _RequestLock()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                self._locks.pop(request_id, None)

    def _as_provider_error(
        self,
        adapter: ProviderAdapter,
        request_id: str,
        exc: Exception,
    ) -> ProviderError:
        """ProviderError passa direto; falha inesperada do adaptador vira invalid_response."""
        if isinstance(exc, ProviderError):
            return exc
        if isinstance(exc, InvalidInputError):
            return helpers.rejected_input(adapter.provider.value, exc)
        logger.error(
            "provider_response_unprocessable",
            extra={
                "component": _COMPONENT,
                "request_id": request_id,
                "provider": adapter.provider.value,
                "error_type": type(exc).__name__,
            },
        )
        return helpers.invalid_response(adapter.provider.value, exc)

    def _adapter_for(self, request: ConsultationRequest) -> ProviderAdapter:
        adapter = (
            self._registry.get(request.search_type, request.provider)
            if request.provider
            else None
        )
        if adapter is None:
            raise ProviderTerminalError(
                "provider_not_configured",
                "Provedor da consulta não está mais configurado.",
                provider=request.provider.value if request.provider else "",
            )
        return adapter

    async def _stored_outcome(self, request: ConsultationRequest) -> Canonical:
        if request.status is ConsultationStatus.COMPLETED:
            result = await self._store.get_result(request.id)
            if result is None:
                raise ConsultationNotFoundError(f"resultado ausente para {request.id}")
            return result.normalized_payload
        if request.status is ConsultationStatus.TIMED_OUT:
            raise LookupTimeoutError(request.id)
        raise helpers.error_from_request(request)

    async def _complete(
        self,
        request: ConsultationRequest,
        fsm: ConsultationStateMachine,
        *,
        canonical: Canonical,
        raw_payload: dict[str, Any],
        provider: ProviderName,
        trigger: str,
        degraded: bool = False,
    ) -> ConsultationRequest:
        if fsm.current_state is ConsultationStatus.PENDING:
            advance_to_running(fsm, provider, trigger)
        helpers.advance(fsm, ConsultationStatus.COMPLETED, trigger, provider=provider.value)

        try:
            await self._store.save_result(
                ConsultationResult(
                    request_id=request.id,
                    normalized_payload=canonical,
                    raw_provider_payload=raw_payload,
                    provider_source=provider,
                    degraded=degraded,
                )
            )
        except ResultAlreadyExistsError:
            logger.warning(
                "consultation_result_already_exists",
                extra={"component": _COMPONENT, "request_id": request.id},
            )

        request = request.model_copy(
            update={
                "status": fsm.current_state,
                "provider": provider,
                "updated_at": helpers.utcnow(),
            }
        )
        request = await self._record_history(
            request,
            helpers.success_entry(request, canonical, provider, degraded=degraded),
        )
        await self._store.update(request)
        self._log_terminal(request, fsm, degraded=degraded)
        await self._emit_search_completed(request, degraded=degraded)
        return request

    async def _resolve_failure(
        self,
        request: ConsultationRequest,
        fsm: ConsultationStateMachine,
        error: ProviderError,
        *,
        trigger: str,
    ) -> ConsultationRequest:
        """Grava a falha, ou substitui por resultado demo quando DEMO_MODE."""
        if self._demo_mode:
            log_fallback(
                logger,
                "demo_result",
                reason=error.code,
                request_id=request.id,
                search_type=request.search_type.value,
                provider=error.provider or None,
            )
            return await self._complete(
                request,
                fsm,
                canonical=build_demo_result(helpers.lookup_from_request(request)),
                raw_payload={"demo": True, "replaced_error": error.to_dict()},
                provider=ProviderName.DEMO,
                trigger=trigger,
                degraded=True,
            )

        helpers.advance(fsm, ConsultationStatus.FAILED, trigger, error_code=error.code)
        update: dict[str, object] = {
            "status": fsm.current_state,
            **helpers.error_fields(error),
            "updated_at": helpers.utcnow(),
        }
        if request.provider is None and error.provider:
            update["provider"] = ProviderName(error.provider)
        request = request.model_copy(update=update)
        request = await self._record_history(request, helpers.failure_entry(request, error))
        await self._store.update(request)
        self._log_terminal(request, fsm)
        return request

    async def _record_history(
        self,
        request: ConsultationRequest,
        entry: SearchHistoryEntry,
    ) -> ConsultationRequest:
        if request.history_entry_id:
            return request
        recorded = await self._ledger.record(entry)
        if recorded is None:
            return request
        return request.model_copy(update={"history_entry_id": recorded.id})

    async def _emit_search_completed(self, request: ConsultationRequest, *, degraded: bool) -> None:
        if self._dispatcher is None:
            return
        try:
            await self._dispatcher.trigger(
                WebhookEvent.SEARCH_COMPLETED,
                {
                    "request_id": request.id,
                    "search_type": request.search_type.value,
                    "status": request.status.value,
                    "provider": request.provider.value if request.provider else None,
                    "degraded": degraded,
                },
            )
        except Exception as exc:
            logger.error(
                "search_completed_dispatch_failed",
                extra={
                    "component": _COMPONENT,
                    "request_id": request.id,
                    "error_type": type(exc).__name__,
                },
            )

    def _log_terminal(
        self,
        request: ConsultationRequest,
        fsm: ConsultationStateMachine,
        *,
        degraded: bool = False,
    ) -> None:
        provider = request.provider.value if request.provider else "none"
        record_lookup_outcome(
            request.search_type.value,
            provider,
            request.status.value,
            error_code=request.error_code,
            degraded=degraded,
        )
        logger.info(
            "consultation_terminal",
            extra={
                "component": _COMPONENT,
                "request_id": request.id,
                "status": request.status.value,
                "provider": provider,
                "error_code": request.error_code,
                "transitions": fsm.get_history_summary(),
            },
        )


def advance_to_running(
    fsm: ConsultationStateMachine,
    provider: ProviderName,
    trigger: str,
) -> None:
    helpers.advance(fsm, ConsultationStatus.RUNNING, trigger, provider=provider.value)
