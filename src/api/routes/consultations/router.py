"""Endpoints de consultas externas.

Endpoints:
- POST /consultations: submete a consulta e inicia o polling em background
- GET /consultations/{id}: status (sem efeito colateral)
- POST /consultations/{id}/finalize: busca o resultado final
- POST /consultations/{id}/expire: abandona consulta em running
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from api.routes.dependencies import Auth, Services
from app.domain.consultation import StatusSnapshot
from app.domain.lookup import LookupRequest, SearchType
from fsm import ConsultationStatus

logger = logging.getLogger(__name__)

router = APIRouter()


class ConsultationCreate(BaseModel):
    """Corpo do POST /consultations."""

    search_type: SearchType
    query: str
    uf: str = ""
    params: dict[str, str] = Field(default_factory=dict)

    def to_lookup(self) -> LookupRequest:
        return LookupRequest(
            search_type=self.search_type,
            query=self.query,
            uf=self.uf,
            params=self.params,
        )


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_consultation(
    body: ConsultationCreate,
    auth: Auth,
    services: Services,
) -> dict[str, Any]:
    request_id = await services.orchestrator.submit(auth, body.to_lookup())
    # Lê o registro gravado: o POST não depende de uma nova chamada ao provedor
    request = await services.orchestrator.get_request(auth, request_id)
    if request.status is ConsultationStatus.RUNNING:
        services.polling.track(auth, request_id)
    return StatusSnapshot.of(request).model_dump(mode="json")


@router.get("/{request_id}")
async def get_consultation_status(
    request_id: str,
    auth: Auth,
    services: Services,
) -> dict[str, Any]:
    snapshot = await services.orchestrator.get_status(auth, request_id)
    return snapshot.model_dump(mode="json")


@router.post("/{request_id}/finalize")
async def finalize_consultation(
    request_id: str,
    auth: Auth,
    services: Services,
) -> dict[str, Any]:
    result = await services.orchestrator.finalize(auth, request_id)
    return {
        "request_id": request_id,
        "status": ConsultationStatus.COMPLETED.value,
        "result": result.model_dump(mode="json"),
    }


@router.post("/{request_id}/expire")
async def expire_consultation(
    request_id: str,
    auth: Auth,
    services: Services,
) -> dict[str, Any]:
    snapshot = await services.orchestrator.expire(auth, request_id)
    logger.info("consultation_expired_by_operator", extra={"request_id": request_id})
    return snapshot.model_dump(mode="json")
