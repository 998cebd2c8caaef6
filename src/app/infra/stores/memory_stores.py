"""Stores em memória, apenas para desenvolvimento e testes.

ATENÇÃO: Não usar em staging/production. Sem persistência entre reinícios.
Nenhum método faz await entre leitura e escrita, então cada operação é
atômica no event loop.
"""

from __future__ import annotations

import itertools
from typing import TYPE_CHECKING

from app.protocols.consultation_store import ConsultationStoreProtocol
from app.protocols.history_store import HistoryStoreProtocol
from app.protocols.webhook_store import WebhookStoreProtocol
from utils.errors import (
    ConsultationNotFoundError,
    HistoryEntryNotFoundError,
    ResultAlreadyExistsError,
)

if TYPE_CHECKING:
    from datetime import datetime

    from app.domain.consultation import ConsultationRequest, ConsultationResult
    from app.domain.history import HistoryFilters, SearchHistoryEntry
    from app.domain.webhook import Webhook


class MemoryConsultationStore(ConsultationStoreProtocol):
    """Store de consultas em memória, apenas para dev/test."""

    def __init__(self) -> None:
        self._requests: dict[str, ConsultationRequest] = {}
        self._results: dict[str, ConsultationResult] = {}

    async def create(self, request: ConsultationRequest) -> None:
        self._requests[request.id] = request

    async def get(self, request_id: str) -> ConsultationRequest | None:
        return self._requests.get(request_id)

    async def update(self, request: ConsultationRequest) -> None:
        if request.id not in self._requests:
            raise ConsultationNotFoundError(request.id)
        self._requests[request.id] = request

    async def save_result(self, result: ConsultationResult) -> None:
        if result.request_id in self._results:
            raise ResultAlreadyExistsError(result.request_id)
        self._results[result.request_id] = result

    async def get_result(self, request_id: str) -> ConsultationResult | None:
        return self._results.get(request_id)

    def result_count(self) -> int:
        """Total de resultados gravados (apenas para testes)."""
        return len(self._results)


class MemoryHistoryStore(HistoryStoreProtocol):
    """Ledger em memória, apenas para dev/test."""

    def __init__(self) -> None:
        self._entries: dict[str, tuple[int, SearchHistoryEntry]] = {}
        self._seq = itertools.count()

    async def append(self, entry: SearchHistoryEntry) -> None:
        self._entries[entry.id] = (next(self._seq), entry)

    async def get(self, entry_id: str) -> SearchHistoryEntry | None:
        item = self._entries.get(entry_id)
        return item[1] if item else None

    async def set_links(
        self,
        entry_id: str,
        *,
        related_client_id: str | None = None,
        related_vehicle_id: str | None = None,
    ) -> SearchHistoryEntry:
        item = self._entries.get(entry_id)
        if item is None:
            raise HistoryEntryNotFoundError(entry_id)
        seq, entry = item
        update: dict[str, str] = {}
        if related_client_id is not None:
            update["related_client_id"] = related_client_id
        if related_vehicle_id is not None:
            update["related_vehicle_id"] = related_vehicle_id
        updated = entry.model_copy(update=update)
        self._entries[entry_id] = (seq, updated)
        return updated

    async def query(
        self,
        user_id: str,
        filters: HistoryFilters,
        *,
        offset: int = 0,
        limit: int | None = None,
    ) -> tuple[list[SearchHistoryEntry], int]:
        matching = [
            (seq, entry)
            for seq, entry in self._entries.values()
            if entry.user_id == user_id and filters.matches(entry)
        ]
        # Mais recentes primeiro; empate resolvido pela ordem de inserção
        matching.sort(key=lambda item: (item[1].created_at, item[0]), reverse=True)
        entries = [entry for _, entry in matching]
        end = None if limit is None else offset + limit
        return entries[offset:end], len(entries)

    def all_entries(self) -> list[SearchHistoryEntry]:
        """Todas as entradas em ordem de inserção (apenas para testes)."""
        return [entry for _, entry in sorted(self._entries.values(), key=lambda i: i[0])]


class MemoryWebhookStore(WebhookStoreProtocol):
    """Store de webhooks em memória, apenas para dev/test."""

    def __init__(self) -> None:
        self._webhooks: dict[str, Webhook] = {}

    async def save(self, webhook: Webhook) -> None:
        self._webhooks[webhook.id] = webhook

    async def get(self, webhook_id: str) -> Webhook | None:
        return self._webhooks.get(webhook_id)

    async def list_all(self) -> list[Webhook]:
        return sorted(self._webhooks.values(), key=lambda w: w.created_at)

    async def delete(self, webhook_id: str) -> bool:
        return self._webhooks.pop(webhook_id, None) is not None

    async def record_delivery(
        self,
        webhook_id: str,
        *,
        success: bool,
        attempted_at: datetime,
    ) -> Webhook | None:
        webhook = self._webhooks.get(webhook_id)
        if webhook is None:
            return None
        updated = webhook.model_copy(
            update={
                "last_triggered_at": attempted_at,
                "fail_count": 0 if success else webhook.fail_count + 1,
            }
        )
        self._webhooks[webhook_id] = updated
        return updated
