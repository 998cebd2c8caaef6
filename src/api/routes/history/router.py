"""Endpoints do histórico de consultas (ledger)."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any

from fastapi import APIRouter, Query
from fastapi.responses import Response
from pydantic import BaseModel

from api.routes.dependencies import Auth, Services
from app.domain.history import HistoryFilters, PageRequest
from app.domain.lookup import SearchType

router = APIRouter()


class HistoryLinks(BaseModel):
    """Corpo do PATCH /history/{id}."""

    related_client_id: str | None = None
    related_vehicle_id: str | None = None


def _filters(
    search_type: SearchType | None,
    uf: str | None,
    client_id: str | None,
    vehicle_id: str | None,
) -> HistoryFilters:
    return HistoryFilters(
        search_type=search_type,
        uf=uf,
        related_client_id=client_id,
        related_vehicle_id=vehicle_id,
    )


@router.get("")
async def list_history(
    auth: Auth,
    services: Services,
    search_type: SearchType | None = None,
    uf: str | None = None,
    client_id: str | None = None,
    vehicle_id: str | None = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> dict[str, Any]:
    result = await services.ledger.query(
        auth,
        _filters(search_type, uf, client_id, vehicle_id),
        PageRequest(page=page, limit=limit),
    )
    return result.model_dump(mode="json")


@router.get("/export")
async def export_history(
    auth: Auth,
    services: Services,
    search_type: SearchType | None = None,
    uf: str | None = None,
    client_id: str | None = None,
    vehicle_id: str | None = None,
) -> Response:
    content = await services.ledger.export_csv(
        auth,
        _filters(search_type, uf, client_id, vehicle_id),
    )
    filename = f"historico_consultas_{datetime.now(UTC).date().isoformat()}.csv"
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{entry_id}")
async def get_history_entry(entry_id: str, auth: Auth, services: Services) -> dict[str, Any]:
    entry = await services.ledger.get(auth, entry_id)
    return entry.model_dump(mode="json")


@router.patch("/{entry_id}")
async def attach_history_links(
    entry_id: str,
    body: HistoryLinks,
    auth: Auth,
    services: Services,
) -> dict[str, Any]:
    entry = await services.ledger.attach(
        auth,
        entry_id,
        client_id=body.related_client_id,
        vehicle_id=body.related_vehicle_id,
    )
    return entry.model_dump(mode="json")
