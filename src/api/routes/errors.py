"""Mapeamento de exceções de domínio para respostas HTTP."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import status
from fastapi.responses import JSONResponse

from utils.errors import (
    ConsultaError,
    ConsultationNotFoundError,
    ConsultationNotReadyError,
    HistoryEntryNotFoundError,
    InfrastructureError,
    InvalidInputError,
    InvalidTransitionError,
    LookupTimeoutError,
    ProviderError,
    UnauthorizedError,
    WebhookNotFoundError,
)

if TYPE_CHECKING:
    from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)

STILL_PROCESSING_MESSAGE = "Consulta ainda em processamento. Verifique novamente mais tarde."

_STATUS_BY_ERROR: tuple[tuple[type[Exception], int, str], ...] = (
    (InvalidInputError, status.HTTP_422_UNPROCESSABLE_ENTITY, "invalid_input"),
    (UnauthorizedError, status.HTTP_401_UNAUTHORIZED, "unauthorized"),
    (ConsultationNotFoundError, status.HTTP_404_NOT_FOUND, "consultation_not_found"),
    (HistoryEntryNotFoundError, status.HTTP_404_NOT_FOUND, "history_entry_not_found"),
    (WebhookNotFoundError, status.HTTP_404_NOT_FOUND, "webhook_not_found"),
    (InvalidTransitionError, status.HTTP_409_CONFLICT, "invalid_transition"),
    (ConsultationNotReadyError, status.HTTP_409_CONFLICT, "not_ready"),
)


def _error_body(code: str, message: str, **extra: object) -> dict[str, object]:
    return {"error": {"code": code, "message": message, **extra}}


async def handle_provider_error(request: Request, exc: ProviderError) -> JSONResponse:
    status_code = (
        status.HTTP_503_SERVICE_UNAVAILABLE if exc.transient else status.HTTP_502_BAD_GATEWAY
    )
    logger.warning(
        "provider_error_response",
        extra={"error_code": exc.code, "provider": exc.provider, "status_code": status_code},
    )
    return JSONResponse(
        status_code=status_code,
        content=_error_body(
            exc.code,
            exc.message,
            transient=exc.transient,
            provider=exc.provider,
        ),
    )


async def handle_lookup_timeout(request: Request, exc: LookupTimeoutError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_202_ACCEPTED,
        content={
            "request_id": exc.request_id,
            "status": "timed_out",
            "message": STILL_PROCESSING_MESSAGE,
        },
    )


async def handle_consulta_error(request: Request, exc: Exception) -> JSONResponse:
    for error_type, status_code, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return JSONResponse(status_code=status_code, content=_error_body(code, str(exc)))
    logger.error("unmapped_domain_error", extra={"error_type": type(exc).__name__})
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("internal_error", "Erro interno"),
    )


async def handle_infrastructure_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("infrastructure_error_response", extra={"error_type": type(exc).__name__})
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=_error_body("infrastructure_unavailable", "Serviço temporariamente indisponível"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    # Starlette resolve pelo MRO: handlers específicos vencem o de ConsultaError
    app.add_exception_handler(ProviderError, handle_provider_error)
    app.add_exception_handler(LookupTimeoutError, handle_lookup_timeout)
    app.add_exception_handler(ConsultaError, handle_consulta_error)
    app.add_exception_handler(InfrastructureError, handle_infrastructure_error)
