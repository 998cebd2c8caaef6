"""Ledger de histórico de consultas (append-only).

record() nunca propaga falha de store: o desfecho da consulta não pode
mudar por causa da trilha de auditoria. Só os back-links
(related_client_id / related_vehicle_id) mudam depois da escrita.
"""

from __future__ import annotations

import csv
import io
import logging
from typing import TYPE_CHECKING

from app.domain.auth import require_user
from app.domain.history import HistoryFilters, HistoryPage, PageRequest
from app.domain.lookup import SearchType
from config.logging import mask_query
from utils.errors import HistoryEntryNotFoundError, InvalidInputError

if TYPE_CHECKING:
    from app.domain.auth import AuthContext
    from app.domain.history import SearchHistoryEntry
    from app.protocols.history_store import HistoryStoreProtocol

logger = logging.getLogger(__name__)

CSV_HEADER = ("ID", "Tipo", "Consulta", "UF", "Data", "Cliente", "Veículo")

SEARCH_TYPE_LABELS: dict[SearchType, str] = {
    SearchType.PLATE: "Placa",
    SearchType.RENAVAM: "RENAVAM",
    SearchType.CNH: "CNH",
    SearchType.DRIVER_CPF: "CPF do condutor",
    SearchType.VEHICLE_FINES: "Débitos veiculares",
}


class SearchHistoryLedger:
    """Trilha de auditoria de todas as tentativas de consulta."""

    def __init__(self, store: HistoryStoreProtocol) -> None:
        self._store = store

    async def record(self, entry: SearchHistoryEntry) -> SearchHistoryEntry | None:
        """Grava a entrada. Falha de store é logada e devolve None."""
        try:
            await self._store.append(entry)
        except Exception as exc:
            logger.error(
                "history_record_failed",
                extra={
                    "component": "search_history_ledger",
                    "entry_id": entry.id,
                    "request_id": entry.request_id,
                    "search_type": entry.search_type.value,
                    "error_type": type(exc).__name__,
                },
            )
            return None
        logger.info(
            "history_recorded",
            extra={
                "component": "search_history_ledger",
                "entry_id": entry.id,
                "request_id": entry.request_id,
                "search_type": entry.search_type.value,
                "query": mask_query(entry.search_query),
                "success": entry.result_snapshot.success,
                "degraded": entry.result_snapshot.degraded,
            },
        )
        return entry

    async def query(
        self,
        auth: AuthContext | None,
        filters: HistoryFilters | None = None,
        page: PageRequest | None = None,
    ) -> HistoryPage:
        """Página de entradas do usuário, mais recentes primeiro."""
        user_id = require_user(auth)
        filters = filters or HistoryFilters()
        page = page or PageRequest()
        items, total = await self._store.query(
            user_id,
            filters,
            offset=page.offset,
            limit=page.limit,
        )
        return HistoryPage.build(items, page, total)

    async def get(self, auth: AuthContext | None, entry_id: str) -> SearchHistoryEntry:
        user_id = require_user(auth)
        entry = await self._store.get(entry_id)
        if entry is None or entry.user_id != user_id:
            raise HistoryEntryNotFoundError(entry_id)
        return entry

    async def attach(
        self,
        auth: AuthContext | None,
        entry_id: str,
        *,
        client_id: str | None = None,
        vehicle_id: str | None = None,
    ) -> SearchHistoryEntry:
        """Vincula cliente e/ou veículo à entrada.

        Raises:
            InvalidInputError: Nenhum vínculo informado
            HistoryEntryNotFoundError: Entrada inexistente ou de outro usuário
        """
        if not client_id and not vehicle_id:
            raise InvalidInputError("informe client_id ou vehicle_id para vincular")
        await self.get(auth, entry_id)
        updated = await self._store.set_links(
            entry_id,
            related_client_id=client_id or None,
            related_vehicle_id=vehicle_id or None,
        )
        logger.info(
            "history_links_attached",
            extra={
                "component": "search_history_ledger",
                "entry_id": entry_id,
                "client_linked": bool(client_id),
                "vehicle_linked": bool(vehicle_id),
            },
        )
        return updated

    async def export_csv(
        self,
        auth: AuthContext | None,
        filters: HistoryFilters | None = None,
    ) -> str:
        """Exporta todo o histórico filtrado do usuário em CSV.

        Raises:
            InvalidInputError: Nenhum registro para exportar
        """
        user_id = require_user(auth)
        items, _ = await self._store.query(user_id, filters or HistoryFilters())
        if not items:
            raise InvalidInputError("Nenhum registro encontrado para exportar")

        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for item in items:
            writer.writerow([
                item.id,
                SEARCH_TYPE_LABELS[item.search_type],
                item.search_query,
                item.uf or "SP",
                item.created_at.strftime("%d/%m/%Y %H:%M:%S"),
                item.related_client_id or "",
                item.related_vehicle_id or "",
            ])
        return buffer.getvalue()
