"""Firestore Consultation Store: consultas e resultados finais.

Estrutura no Firestore:
    {collection_consultations}/{request_id}
    {collection_results}/{request_id}

O SDK Python do Firestore é síncrono; cada operação roda em
asyncio.to_thread para não bloquear o event loop.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from google.api_core.exceptions import AlreadyExists, NotFound

from app.domain.consultation import ConsultationRequest, ConsultationResult
from app.protocols.consultation_store import ConsultationStoreProtocol
from utils.errors import (
    ConsultationNotFoundError,
    FirestoreUnavailableError,
    ResultAlreadyExistsError,
)

if TYPE_CHECKING:
    from google.cloud.firestore import Client as FirestoreClient

logger = logging.getLogger(__name__)

CONSULTATIONS_COLLECTION = "consultations"
RESULTS_COLLECTION = "consultation_results"


class FirestoreConsultationStore(ConsultationStoreProtocol):
    """Store de consultas usando Firestore.

    Args:
        firestore_client: Cliente Firestore
        consultations_collection: Collection das ConsultationRequest
        results_collection: Collection dos ConsultationResult
    """

    def __init__(
        self,
        firestore_client: FirestoreClient,
        consultations_collection: str = CONSULTATIONS_COLLECTION,
        results_collection: str = RESULTS_COLLECTION,
    ) -> None:
        self._db = firestore_client
        self._consultations = consultations_collection
        self._results = results_collection

    async def create(self, request: ConsultationRequest) -> None:
        await asyncio.to_thread(self._create_sync, request)

    async def get(self, request_id: str) -> ConsultationRequest | None:
        return await asyncio.to_thread(self._get_sync, request_id)

    async def update(self, request: ConsultationRequest) -> None:
        await asyncio.to_thread(self._update_sync, request)

    async def save_result(self, result: ConsultationResult) -> None:
        await asyncio.to_thread(self._save_result_sync, result)

    async def get_result(self, request_id: str) -> ConsultationResult | None:
        return await asyncio.to_thread(self._get_result_sync, request_id)

    def _create_sync(self, request: ConsultationRequest) -> None:
        try:
            self._db.collection(self._consultations).document(request.id).set(
                _request_to_doc(request)
            )
        except Exception as exc:
            logger.error(
                "consultation_create_error",
                extra={"request_id": request.id, "error_type": type(exc).__name__},
            )
            raise FirestoreUnavailableError("Erro ao criar consulta") from exc

    def _get_sync(self, request_id: str) -> ConsultationRequest | None:
        try:
            snapshot = self._db.collection(self._consultations).document(request_id).get()
        except Exception as exc:
            logger.error(
                "consultation_get_error",
                extra={"request_id": request_id, "error_type": type(exc).__name__},
            )
            raise FirestoreUnavailableError("Erro ao ler consulta") from exc
        if not snapshot.exists:
            return None
        return ConsultationRequest.model_validate(snapshot.to_dict())

    def _update_sync(self, request: ConsultationRequest) -> None:
        doc_ref = self._db.collection(self._consultations).document(request.id)
        try:
            doc_ref.update(_request_to_doc(request))
        except NotFound as exc:
            raise ConsultationNotFoundError(request.id) from exc
        except Exception as exc:
            logger.error(
                "consultation_update_error",
                extra={"request_id": request.id, "error_type": type(exc).__name__},
            )
            raise FirestoreUnavailableError("Erro ao atualizar consulta") from exc

    def _save_result_sync(self, result: ConsultationResult) -> None:
        doc_ref = self._db.collection(self._results).document(result.request_id)
        try:
            # create() falha se o documento já existe
            doc_ref.create(_result_to_doc(result))
        except AlreadyExists as exc:
            raise ResultAlreadyExistsError(result.request_id) from exc
        except Exception as exc:
            logger.error(
                "consultation_result_save_error",
                extra={
                    "request_id": result.request_id,
                    "error_type": type(exc).__name__,
                },
            )
            raise FirestoreUnavailableError("Erro ao gravar resultado") from exc
        logger.debug("consultation_result_saved", extra={"request_id": result.request_id})

    def _get_result_sync(self, request_id: str) -> ConsultationResult | None:
        try:
            snapshot = self._db.collection(self._results).document(request_id).get()
        except Exception as exc:
            logger.error(
                "consultation_result_get_error",
                extra={"request_id": request_id, "error_type": type(exc).__name__},
            )
            raise FirestoreUnavailableError("Erro ao ler resultado") from exc
        if not snapshot.exists:
            return None
        return ConsultationResult.model_validate(snapshot.to_dict())


def _request_to_doc(request: ConsultationRequest) -> dict[str, Any]:
    doc = request.model_dump(mode="json")
    # Timestamps nativos para ordenação/TTL no Firestore
    doc["created_at"] = request.created_at
    doc["updated_at"] = request.updated_at
    return doc


def _result_to_doc(result: ConsultationResult) -> dict[str, Any]:
    doc = result.model_dump(mode="json")
    doc["created_at"] = result.created_at
    return doc
