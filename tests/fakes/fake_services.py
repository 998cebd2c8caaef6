"""Montagem do orquestrador com stores em memória e dublês de provedor."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from app.domain.auth import AuthContext
from app.domain.webhook import DispatchReport
from app.infra.stores import MemoryConsultationStore, MemoryHistoryStore
from app.protocols.provider_adapter import ProviderAdapter
from app.services import ConsultationOrchestrator, ProviderRegistry, SearchHistoryLedger
from utils.errors import FirestoreUnavailableError

USER = AuthContext(user_id="user-1")
OTHER_USER = AuthContext(user_id="user-2")


class FailingHistoryStore(MemoryHistoryStore):
    """Ledger cuja escrita sempre falha (Firestore fora do ar)."""

    async def append(self, entry: Any) -> None:
        raise FirestoreUnavailableError("Erro ao gravar histórico")


class FakeDispatcher:
    """Registra os eventos disparados; opcionalmente falha."""

    def __init__(self, *, fail: bool = False) -> None:
        self.events: list[tuple[str, dict[str, Any]]] = []
        self._fail = fail

    async def trigger(self, event_type: str, payload: dict[str, Any]) -> DispatchReport:
        self.events.append((event_type, payload))
        if self._fail:
            raise RuntimeError("dispatcher offline")
        return DispatchReport(event_type=event_type)


@dataclass
class Harness:
    orchestrator: ConsultationOrchestrator
    store: MemoryConsultationStore
    history: MemoryHistoryStore
    registry: ProviderRegistry
    dispatcher: FakeDispatcher | None = None
    adapters: list[ProviderAdapter] = field(default_factory=list)


def make_harness(
    *adapters: ProviderAdapter,
    demo_mode: bool = False,
    history: MemoryHistoryStore | None = None,
    dispatcher: FakeDispatcher | None = None,
) -> Harness:
    store = MemoryConsultationStore()
    history_store = history if history is not None else MemoryHistoryStore()
    registry = ProviderRegistry(adapters)
    orchestrator = ConsultationOrchestrator(
        store=store,
        registry=registry,
        ledger=SearchHistoryLedger(history_store),
        demo_mode=demo_mode,
        dispatcher=dispatcher,  # type: ignore[arg-type]
    )
    return Harness(
        orchestrator=orchestrator,
        store=store,
        history=history_store,
        registry=registry,
        dispatcher=dispatcher,
        adapters=list(adapters),
    )
