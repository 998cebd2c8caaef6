"""Configuração centralizada de logging JSON.

Chamada uma vez por app/bootstrap; os demais módulos apenas usam
get_logger(__name__).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from config.logging.filters import CorrelationIdFilter, DocumentRedactionFilter
from config.logging.formatters import create_json_formatter

if TYPE_CHECKING:
    from collections.abc import Callable

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

DEFAULT_SERVICE_NAME = "consulta_multas"

# Bibliotecas ruidosas: só WARNING+ chega aos logs do serviço
_QUIET_LOGGERS = ("httpx", "httpcore", "google.auth", "urllib3")


def configure_logging(
    level: str = "INFO",
    service_name: str = DEFAULT_SERVICE_NAME,
    correlation_id_getter: Callable[[], str] | None = None,
) -> None:
    """Configura logging JSON estruturado no root logger.

    Args:
        level: Nível de log (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Função que retorna o correlation_id
            do contexto atual (ex: app.observability.get_correlation_id).

    Raises:
        ValueError: Se o nível de log for inválido.
    """
    level_upper = level.upper()
    if level_upper not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Nível de log inválido: {level}. "
            f"Válidos: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )

    handler = logging.StreamHandler()
    handler.setLevel(level_upper)
    handler.setFormatter(create_json_formatter())
    handler.addFilter(CorrelationIdFilter(service_name, correlation_id_getter))
    handler.addFilter(DocumentRedactionFilter())

    root = logging.getLogger()
    root.setLevel(level_upper)
    # Substituir handlers existentes para evitar duplicação
    root.handlers = [handler]

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Retorna logger para o módulo especificado."""
    return logging.getLogger(name)


def log_fallback(
    logger: logging.Logger,
    component: str,
    reason: str | None = None,
    elapsed_ms: float | None = None,
    **fields: object,
) -> None:
    """Log observável de fallback (modo demo, troca de provedor).

    Nunca é silencioso: sai em WARNING com fallback_used=True.

    Args:
        logger: Logger instance.
        component: Nome do componente (ex: "provider_chain").
        reason: Razão do fallback (ex: "provider_transient"), sem PII.
        elapsed_ms: Tempo decorrido em ms (quando aplicável).
        **fields: Campos extras sem PII (request_id, provider, search_type).

    Exemplo:
        log_fallback(logger, "demo_result", reason="all_providers_failed",
                     request_id=request_id, search_type="cnh")
    """
    extra: dict[str, object] = {
        "fallback_used": True,
        "component": component,
        **fields,
    }
    if reason:
        extra["reason"] = reason
    if elapsed_ms is not None:
        extra["elapsed_ms"] = elapsed_ms

    logger.warning(
        "Fallback applied for %s",
        component,
        extra=extra,
    )
