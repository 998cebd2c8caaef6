"""Firestore Webhook Store: configuração e contadores de entrega.

Estrutura no Firestore:
    {collection_webhooks}/{webhook_id}

Contadores são last-write-wins; falhas usam Increment para não perder
incrementos de entregas de eventos diferentes.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from google.api_core.exceptions import NotFound
from google.cloud import firestore

from app.domain.webhook import Webhook
from app.protocols.webhook_store import WebhookStoreProtocol
from utils.errors import FirestoreUnavailableError

if TYPE_CHECKING:
    from datetime import datetime

    from google.cloud.firestore import Client as FirestoreClient

logger = logging.getLogger(__name__)

WEBHOOKS_COLLECTION = "webhooks"


class FirestoreWebhookStore(WebhookStoreProtocol):
    """Store de webhooks usando Firestore."""

    def __init__(
        self,
        firestore_client: FirestoreClient,
        collection_name: str = WEBHOOKS_COLLECTION,
    ) -> None:
        self._db = firestore_client
        self._collection = collection_name

    async def save(self, webhook: Webhook) -> None:
        await asyncio.to_thread(self._save_sync, webhook)

    async def get(self, webhook_id: str) -> Webhook | None:
        return await asyncio.to_thread(self._get_sync, webhook_id)

    async def list_all(self) -> list[Webhook]:
        return await asyncio.to_thread(self._list_sync)

    async def delete(self, webhook_id: str) -> bool:
        return await asyncio.to_thread(self._delete_sync, webhook_id)

    async def record_delivery(
        self,
        webhook_id: str,
        *,
        success: bool,
        attempted_at: datetime,
    ) -> Webhook | None:
        return await asyncio.to_thread(
            self._record_delivery_sync, webhook_id, success, attempted_at
        )

    def _save_sync(self, webhook: Webhook) -> None:
        try:
            self._db.collection(self._collection).document(webhook.id).set(
                _webhook_to_doc(webhook)
            )
        except Exception as exc:
            logger.error(
                "webhook_save_error",
                extra={"webhook_id": webhook.id, "error_type": type(exc).__name__},
            )
            raise FirestoreUnavailableError("Erro ao salvar webhook") from exc

    def _get_sync(self, webhook_id: str) -> Webhook | None:
        try:
            snapshot = self._db.collection(self._collection).document(webhook_id).get()
        except Exception as exc:
            logger.error(
                "webhook_get_error",
                extra={"webhook_id": webhook_id, "error_type": type(exc).__name__},
            )
            raise FirestoreUnavailableError("Erro ao ler webhook") from exc
        if not snapshot.exists:
            return None
        return Webhook.model_validate(snapshot.to_dict())

    def _list_sync(self) -> list[Webhook]:
        try:
            docs = (
                self._db.collection(self._collection)
                .order_by("created_at")
                .stream()
            )
            return [Webhook.model_validate(doc.to_dict()) for doc in docs]
        except Exception as exc:
            logger.error("webhook_list_error", extra={"error_type": type(exc).__name__})
            raise FirestoreUnavailableError("Erro ao listar webhooks") from exc

    def _delete_sync(self, webhook_id: str) -> bool:
        doc_ref = self._db.collection(self._collection).document(webhook_id)
        try:
            if not doc_ref.get().exists:
                return False
            doc_ref.delete()
        except Exception as exc:
            logger.error(
                "webhook_delete_error",
                extra={"webhook_id": webhook_id, "error_type": type(exc).__name__},
            )
            raise FirestoreUnavailableError("Erro ao remover webhook") from exc
        return True

    def _record_delivery_sync(
        self,
        webhook_id: str,
        success: bool,
        attempted_at: datetime,
    ) -> Webhook | None:
        doc_ref = self._db.collection(self._collection).document(webhook_id)
        update: dict[str, Any] = {
            "last_triggered_at": attempted_at,
            "fail_count": 0 if success else firestore.Increment(1),
        }
        try:
            doc_ref.update(update)
            snapshot = doc_ref.get()
        except NotFound:
            return None
        except Exception as exc:
            logger.error(
                "webhook_record_delivery_error",
                extra={"webhook_id": webhook_id, "error_type": type(exc).__name__},
            )
            raise FirestoreUnavailableError("Erro ao atualizar webhook") from exc
        if not snapshot.exists:
            return None
        return Webhook.model_validate(snapshot.to_dict())


def _webhook_to_doc(webhook: Webhook) -> dict[str, Any]:
    doc = webhook.model_dump(mode="json")
    doc["created_at"] = webhook.created_at
    doc["last_triggered_at"] = webhook.last_triggered_at
    return doc
