"""Settings do Firestore.

Configurações para Google Cloud Firestore.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class FirestoreSettings:
    """Configurações do Firestore.

    Attributes:
        project_id: ID do projeto GCP (usa GCP_PROJECT se não definido)
        collection_consultations: Collection para ConsultationRequest
        collection_results: Collection para ConsultationResult
        collection_history: Collection para SearchHistoryEntry
        collection_webhooks: Collection para Webhook
    """

    project_id: str = ""
    collection_consultations: str = "consultations"
    collection_results: str = "consultation_results"
    collection_history: str = "search_history"
    collection_webhooks: str = "webhooks"

    def validate(self, gcp_project: str) -> list[str]:
        """Valida configurações do Firestore.

        Args:
            gcp_project: Projeto GCP padrão para fallback.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []
        effective_project = self.project_id or gcp_project

        if not effective_project:
            errors.append(
                "FIRESTORE_PROJECT_ID ou GCP_PROJECT deve estar configurado"
            )

        collections = (
            self.collection_consultations,
            self.collection_results,
            self.collection_history,
            self.collection_webhooks,
        )
        if len(set(collections)) != len(collections):
            errors.append("Collections do Firestore devem ser distintas")

        return errors


def _load_firestore_from_env() -> FirestoreSettings:
    """Carrega FirestoreSettings de variáveis de ambiente."""
    return FirestoreSettings(
        project_id=os.getenv("FIRESTORE_PROJECT_ID", ""),
        collection_consultations=os.getenv(
            "FIRESTORE_COLLECTION_CONSULTATIONS", "consultations"
        ),
        collection_results=os.getenv(
            "FIRESTORE_COLLECTION_RESULTS", "consultation_results"
        ),
        collection_history=os.getenv("FIRESTORE_COLLECTION_HISTORY", "search_history"),
        collection_webhooks=os.getenv("FIRESTORE_COLLECTION_WEBHOOKS", "webhooks"),
    )


@lru_cache(maxsize=1)
def get_firestore_settings() -> FirestoreSettings:
    """Retorna instância cacheada de FirestoreSettings."""
    return _load_firestore_from_env()
