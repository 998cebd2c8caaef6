"""Stores: implementações concretas de persistência.

Módulos disponíveis:
    - memory_stores: Stores em memória para desenvolvimento/testes
    - firestore_consultation_store: Consultas e resultados no Firestore
    - firestore_history_store: Ledger de histórico no Firestore
    - firestore_webhook_store: Webhooks no Firestore
"""

from __future__ import annotations

from app.infra.stores.firestore_consultation_store import FirestoreConsultationStore
from app.infra.stores.firestore_history_store import FirestoreHistoryStore
from app.infra.stores.firestore_webhook_store import FirestoreWebhookStore
from app.infra.stores.memory_stores import (
    MemoryConsultationStore,
    MemoryHistoryStore,
    MemoryWebhookStore,
)

__all__ = [
    # Firestore
    "FirestoreConsultationStore",
    "FirestoreHistoryStore",
    "FirestoreWebhookStore",
    # Memory (dev/test)
    "MemoryConsultationStore",
    "MemoryHistoryStore",
    "MemoryWebhookStore",
]
