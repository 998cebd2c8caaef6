"""Factories de stores baseadas em STORE_BACKEND."""

from __future__ import annotations

import logging

from app.bootstrap.clients import create_firestore_client
from app.infra.stores import (
    FirestoreConsultationStore,
    FirestoreHistoryStore,
    FirestoreWebhookStore,
    MemoryConsultationStore,
    MemoryHistoryStore,
    MemoryWebhookStore,
)
from app.protocols.consultation_store import ConsultationStoreProtocol
from app.protocols.history_store import HistoryStoreProtocol
from app.protocols.webhook_store import WebhookStoreProtocol
from config.settings import get_base_settings, get_firestore_settings, get_store_settings

logger = logging.getLogger(__name__)


def _backend() -> str:
    backend = get_store_settings().backend
    environment = get_base_settings().environment
    if backend == "memory" and environment != "development":
        logger.warning(
            "memory_store_in_non_dev",
            extra={"backend": backend, "environment": environment},
        )
    return backend


def create_consultation_store() -> ConsultationStoreProtocol:
    """Cria store de consultas e resultados.

    - "memory": MemoryConsultationStore (dev only)
    - "firestore": FirestoreConsultationStore (staging/production)
    """
    if _backend() == "firestore":
        settings = get_firestore_settings()
        store: ConsultationStoreProtocol = FirestoreConsultationStore(
            create_firestore_client(),
            consultations_collection=settings.collection_consultations,
            results_collection=settings.collection_results,
        )
        logger.info("consultation_store_created", extra={"backend": "firestore"})
        return store

    logger.info("consultation_store_created", extra={"backend": "memory"})
    return MemoryConsultationStore()


def create_history_store() -> HistoryStoreProtocol:
    """Cria store do ledger de histórico."""
    if _backend() == "firestore":
        store: HistoryStoreProtocol = FirestoreHistoryStore(
            create_firestore_client(),
            collection_name=get_firestore_settings().collection_history,
        )
        logger.info("history_store_created", extra={"backend": "firestore"})
        return store

    logger.info("history_store_created", extra={"backend": "memory"})
    return MemoryHistoryStore()


def create_webhook_store() -> WebhookStoreProtocol:
    """Cria store de webhooks."""
    if _backend() == "firestore":
        store: WebhookStoreProtocol = FirestoreWebhookStore(
            create_firestore_client(),
            collection_name=get_firestore_settings().collection_webhooks,
        )
        logger.info("webhook_store_created", extra={"backend": "firestore"})
        return store

    logger.info("webhook_store_created", extra={"backend": "memory"})
    return MemoryWebhookStore()
