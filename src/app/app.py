"""Entrypoint da aplicação Consulta Multas.

Inicializa o bootstrap e expõe a aplicação ASGI (FastAPI).

Uso (produção):
    uvicorn app.app:app --host 0.0.0.0 --port 8080

Uso (desenvolvimento):
    uvicorn app.app:app --reload --host 0.0.0.0 --port 8080

Cloud Run:
    O container deve expor a porta 8080 (padrão do Cloud Run).
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from fastapi import FastAPI

from api.routes import create_api_router
from api.routes.errors import register_exception_handlers
from api.routes.middleware import correlation_id_middleware
from app.bootstrap import get_container, initialize_app, validate_runtime_settings
from app.bootstrap.clients import create_firestore_client
from config.logging import get_logger
from config.settings import get_polling_settings, get_store_settings

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from app.bootstrap.dependencies import ServiceContainer

# Inicializar logging ANTES de qualquer import que use logger
initialize_app()

logger = get_logger(__name__)


async def _seed_firestore_health_doc(firestore_client: object) -> None:
    """Escreve documento mínimo de health para check de readiness."""

    def _write_doc() -> None:
        firestore_client.collection("_health").document("check").set(  # type: ignore[attr-defined]
            {
                "updated_at": datetime.now(UTC).isoformat(),
                "service": "consulta-multas",
            }
        )

    await asyncio.to_thread(_write_doc)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Gerencia ciclo de vida da aplicação.

    Startup:
    - Valida configurações
    - Cria o container de serviços (stores, provedores, orquestrador)

    Shutdown:
    - Aguarda (e cancela, após o prazo) as tasks de polling
    """
    logger.info("app_starting", extra={"service": "consulta-multas"})
    validate_runtime_settings()
    if getattr(app.state, "container", None) is None:
        app.state.container = get_container()
    app.state.firestore_client = None

    if get_store_settings().backend == "firestore":
        try:
            app.state.firestore_client = create_firestore_client()
            await _seed_firestore_health_doc(app.state.firestore_client)
        except Exception as exc:
            logger.warning("firestore_client_not_ready", extra={"error_type": type(exc).__name__})

    yield

    logger.info("app_shutting_down", extra={"service": "consulta-multas"})
    container: ServiceContainer = app.state.container
    await container.polling.drain(timeout_seconds=get_polling_settings().drain_timeout_seconds)


def create_app(container: ServiceContainer | None = None) -> FastAPI:
    """Cria e configura a aplicação FastAPI.

    Args:
        container: Serviços já montados (testes); None usa get_container() no startup.

    Returns:
        Aplicação FastAPI configurada.
    """
    fastapi_app = FastAPI(
        title="Consulta Multas",
        description="Orquestração de consultas externas de CNH, veículos e multas",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    fastapi_app.state.container = container

    fastapi_app.middleware("http")(correlation_id_middleware)
    register_exception_handlers(fastapi_app)

    # Registra todas as rotas
    fastapi_app.include_router(create_api_router())

    logger.info("app_configured", extra={"service": "consulta-multas"})

    return fastapi_app


# Aplicação ASGI exposta para uvicorn
app = create_app()


def main() -> None:
    """Entrypoint para execução direta (desenvolvimento)."""
    import uvicorn

    logger.info("Starting Consulta Multas in development mode")
    uvicorn.run(
        "app.app:app",
        host="0.0.0.0",
        port=8080,
        reload=True,
    )


if __name__ == "__main__":
    main()
