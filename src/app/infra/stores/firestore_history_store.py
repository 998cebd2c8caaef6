"""Firestore History Store: ledger append-only de consultas.

Estrutura no Firestore:
    {collection_history}/{entry_id}

Índice composto necessário: user_id ASC + created_at DESC (mais os
campos de filtro usados: search_type, uf, related_client_id,
related_vehicle_id).
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from google.api_core.exceptions import NotFound
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from app.domain.history import SearchHistoryEntry
from app.protocols.history_store import HistoryStoreProtocol
from utils.errors import FirestoreUnavailableError, HistoryEntryNotFoundError

if TYPE_CHECKING:
    from google.cloud.firestore import Client as FirestoreClient

    from app.domain.history import HistoryFilters

logger = logging.getLogger(__name__)

HISTORY_COLLECTION = "search_history"


class FirestoreHistoryStore(HistoryStoreProtocol):
    """Ledger de consultas usando Firestore.

    Args:
        firestore_client: Cliente Firestore
        collection_name: Nome da collection (default: search_history)
    """

    def __init__(
        self,
        firestore_client: FirestoreClient,
        collection_name: str = HISTORY_COLLECTION,
    ) -> None:
        self._db = firestore_client
        self._collection = collection_name

    async def append(self, entry: SearchHistoryEntry) -> None:
        await asyncio.to_thread(self._append_sync, entry)

    async def get(self, entry_id: str) -> SearchHistoryEntry | None:
        return await asyncio.to_thread(self._get_sync, entry_id)

    async def set_links(
        self,
        entry_id: str,
        *,
        related_client_id: str | None = None,
        related_vehicle_id: str | None = None,
    ) -> SearchHistoryEntry:
        return await asyncio.to_thread(
            self._set_links_sync,
            entry_id,
            related_client_id,
            related_vehicle_id,
        )

    async def query(
        self,
        user_id: str,
        filters: HistoryFilters,
        *,
        offset: int = 0,
        limit: int | None = None,
    ) -> tuple[list[SearchHistoryEntry], int]:
        return await asyncio.to_thread(self._query_sync, user_id, filters, offset, limit)

    def _append_sync(self, entry: SearchHistoryEntry) -> None:
        doc = entry.model_dump(mode="json")
        doc["created_at"] = entry.created_at
        try:
            self._db.collection(self._collection).document(entry.id).create(doc)
        except Exception as exc:
            logger.error(
                "history_append_error",
                extra={"entry_id": entry.id, "error_type": type(exc).__name__},
            )
            raise FirestoreUnavailableError("Erro ao gravar histórico") from exc

    def _get_sync(self, entry_id: str) -> SearchHistoryEntry | None:
        try:
            snapshot = self._db.collection(self._collection).document(entry_id).get()
        except Exception as exc:
            logger.error(
                "history_get_error",
                extra={"entry_id": entry_id, "error_type": type(exc).__name__},
            )
            raise FirestoreUnavailableError("Erro ao ler histórico") from exc
        if not snapshot.exists:
            return None
        return SearchHistoryEntry.model_validate(snapshot.to_dict())

    def _set_links_sync(
        self,
        entry_id: str,
        related_client_id: str | None,
        related_vehicle_id: str | None,
    ) -> SearchHistoryEntry:
        update: dict[str, Any] = {}
        if related_client_id is not None:
            update["related_client_id"] = related_client_id
        if related_vehicle_id is not None:
            update["related_vehicle_id"] = related_vehicle_id

        doc_ref = self._db.collection(self._collection).document(entry_id)
        try:
            if update:
                doc_ref.update(update)
            snapshot = doc_ref.get()
        except NotFound as exc:
            raise HistoryEntryNotFoundError(entry_id) from exc
        except Exception as exc:
            logger.error(
                "history_set_links_error",
                extra={"entry_id": entry_id, "error_type": type(exc).__name__},
            )
            raise FirestoreUnavailableError("Erro ao atualizar histórico") from exc
        if not snapshot.exists:
            raise HistoryEntryNotFoundError(entry_id)
        return SearchHistoryEntry.model_validate(snapshot.to_dict())

    def _query_sync(
        self,
        user_id: str,
        filters: HistoryFilters,
        offset: int,
        limit: int | None,
    ) -> tuple[list[SearchHistoryEntry], int]:
        query = self._db.collection(self._collection).where(
            filter=FieldFilter("user_id", "==", user_id)
        )
        for field_name, value in _filter_fields(filters):
            query = query.where(filter=FieldFilter(field_name, "==", value))

        try:
            total = int(query.count(alias="total").get()[0][0].value)
            page_query = query.order_by(
                "created_at", direction=firestore.Query.DESCENDING
            ).offset(offset)
            if limit is not None:
                page_query = page_query.limit(limit)
            entries = [
                SearchHistoryEntry.model_validate(doc.to_dict())
                for doc in page_query.stream()
            ]
        except Exception as exc:
            logger.error(
                "history_query_error",
                extra={"error_type": type(exc).__name__},
            )
            raise FirestoreUnavailableError("Erro ao consultar histórico") from exc

        logger.debug(
            "history_query_completed",
            extra={"count": len(entries), "total": total},
        )
        return entries, total


def _filter_fields(filters: HistoryFilters) -> list[tuple[str, str]]:
    fields: list[tuple[str, str]] = []
    if filters.search_type is not None:
        fields.append(("search_type", filters.search_type.value))
    if filters.uf:
        fields.append(("uf", filters.uf.upper()))
    if filters.related_client_id is not None:
        fields.append(("related_client_id", filters.related_client_id))
    if filters.related_vehicle_id is not None:
        fields.append(("related_vehicle_id", filters.related_vehicle_id))
    return fields
