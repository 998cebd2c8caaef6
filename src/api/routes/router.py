"""Agregador de rotas: registra todos os routers da API.

Uso:
    from api.routes import create_api_router

    app = FastAPI()
    app.include_router(create_api_router())
"""

from __future__ import annotations

from fastapi import APIRouter

from api.routes.consultations import router as consultations_router
from api.routes.health.router import router as health_router
from api.routes.history import router as history_router
from api.routes.webhooks import events_router
from api.routes.webhooks import router as webhooks_router


def create_api_router() -> APIRouter:
    """Cria router principal com todos os sub-routers registrados.

    Returns:
        APIRouter configurado com todos os endpoints.
    """
    api_router = APIRouter()

    # Health checks (sem prefixo para /health e /ready na raiz)
    api_router.include_router(health_router, tags=["health"])

    api_router.include_router(
        consultations_router,
        prefix="/consultations",
        tags=["consultations"],
    )
    api_router.include_router(history_router, prefix="/history", tags=["history"])
    api_router.include_router(webhooks_router, prefix="/webhooks", tags=["webhooks"])
    api_router.include_router(events_router, prefix="/events", tags=["events"])

    return api_router
