"""PollingCoordinator - acompanhamento de consultas assíncronas.

Uma asyncio.Task por request_id, dona do próprio cancelamento. Cada tick
chama get_status; quando a consulta (ou o job no provedor) chega a um
estado terminal, chama finalize uma única vez e para.

O prazo máximo (POLL_MAX_DURATION_SECONDS) resolve o handle localmente
como timed_out, sem nenhuma chamada adicional ao orquestrador. Erros
dentro de um tick são logados e o tick seguinte tenta de novo.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from fsm import ConsultationStatus, is_terminal
from utils.errors import (
    ConsultaError,
    ConsultationNotReadyError,
    LookupTimeoutError,
    ProviderError,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from app.domain.auth import AuthContext
    from app.domain.canonical import CnhResult, FinesResult, VehicleResult
    from app.domain.lookup import LookupRequest
    from app.services.consultation_orchestrator import ConsultationOrchestrator
    from config.settings import PollingSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PollOutcome:
    """Desfecho de um acompanhamento.

    Attributes:
        request_id: Consulta acompanhada
        status: completed | failed | timed_out
        result: Resultado canônico (completed)
        error: ProviderError (failed) ou LookupTimeoutError (timed_out)
    """

    request_id: str
    status: ConsultationStatus
    result: CnhResult | VehicleResult | FinesResult | None = None
    error: ConsultaError | None = None

    @property
    def timed_out(self) -> bool:
        return self.status is ConsultationStatus.TIMED_OUT


class PollHandle:
    """Handle de uma task de polling."""

    __slots__ = ("_task", "request_id")

    def __init__(self, request_id: str, task: asyncio.Task[PollOutcome]) -> None:
        self.request_id = request_id
        self._task = task

    @property
    def task(self) -> asyncio.Task[PollOutcome]:
        return self._task

    def done(self) -> bool:
        return self._task.done()

    async def wait(self) -> PollOutcome:
        # shield: cancelar quem espera não cancela o polling
        return await asyncio.shield(self._task)

    def cancel(self) -> None:
        self._task.cancel()


class PollingCoordinator:
    """Supervisiona as tasks de polling por request_id."""

    def __init__(
        self,
        orchestrator: ConsultationOrchestrator,
        settings: PollingSettings,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._orchestrator = orchestrator
        self._interval = settings.interval_seconds
        self._max_duration = settings.max_duration_seconds
        self._sleep = sleep
        self._clock = clock
        self._handles: dict[str, PollHandle] = {}

    @property
    def active_count(self) -> int:
        return len(self._handles)

    def track(self, auth: AuthContext | None, request_id: str) -> PollHandle:
        """Inicia (ou reaproveita) o polling de uma consulta."""
        existing = self._handles.get(request_id)
        if existing is not None:
            return existing

        task = asyncio.create_task(
            self._run(auth, request_id),
            name=f"poll:{request_id}",
        )
        handle = PollHandle(request_id, task)
        self._handles[request_id] = handle
        task.add_done_callback(lambda _: self._handles.pop(request_id, None))
        logger.info(
            "polling_started",
            extra={"request_id": request_id, "active_polls": len(self._handles)},
        )
        return handle

    async def submit(self, auth: AuthContext | None, lookup: LookupRequest) -> PollHandle:
        request_id = await self._orchestrator.submit(auth, lookup)
        return self.track(auth, request_id)

    async def drain(self, timeout_seconds: float = 5.0) -> None:
        """Aguarda tasks pendentes no shutdown e cancela as restantes."""
        if not self._handles:
            return
        tasks = [handle.task for handle in self._handles.values()]
        logger.info(
            "polling_shutdown_wait",
            extra={"pending_polls": len(tasks), "timeout_seconds": timeout_seconds},
        )
        _, pending = await asyncio.wait(tasks, timeout=timeout_seconds)
        if not pending:
            return
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        logger.warning("polling_shutdown_cancelled", extra={"cancelled_polls": len(pending)})

    async def _run(self, auth: AuthContext | None, request_id: str) -> PollOutcome:
        started = self._clock()
        deadline = started + self._max_duration
        ticks = 0
        while True:
            if self._clock() >= deadline:
                return self._timed_out(request_id, ticks, self._clock() - started)
            ticks += 1
            outcome = await self._tick(auth, request_id, ticks)
            if outcome is not None:
                logger.info(
                    "polling_finished",
                    extra={
                        "request_id": request_id,
                        "status": outcome.status.value,
                        "ticks": ticks,
                    },
                )
                return outcome
            remaining = deadline - self._clock()
            if remaining <= 0:
                continue
            await self._sleep(min(self._interval, remaining))

    async def _tick(
        self,
        auth: AuthContext | None,
        request_id: str,
        tick: int,
    ) -> PollOutcome | None:
        try:
            snapshot = await self._orchestrator.get_status(auth, request_id)
            if not (is_terminal(snapshot.status) or snapshot.is_ready_to_finalize):
                return None
            return await self._finalize(auth, request_id)
        except ConsultationNotReadyError:
            return None
        except Exception as exc:
            logger.warning(
                "polling_tick_failed",
                extra={
                    "request_id": request_id,
                    "tick": tick,
                    "error_type": type(exc).__name__,
                },
            )
            return None

    async def _finalize(self, auth: AuthContext | None, request_id: str) -> PollOutcome:
        try:
            result = await self._orchestrator.finalize(auth, request_id)
        except ProviderError as exc:
            return PollOutcome(request_id, ConsultationStatus.FAILED, error=exc)
        except LookupTimeoutError as exc:
            return PollOutcome(request_id, ConsultationStatus.TIMED_OUT, error=exc)
        return PollOutcome(request_id, ConsultationStatus.COMPLETED, result=result)

    def _timed_out(self, request_id: str, ticks: int, elapsed: float) -> PollOutcome:
        logger.warning(
            "polling_timed_out",
            extra={
                "request_id": request_id,
                "ticks": ticks,
                "elapsed_seconds": round(elapsed, 2),
            },
        )
        return PollOutcome(
            request_id,
            ConsultationStatus.TIMED_OUT,
            error=LookupTimeoutError(request_id),
        )

