"""Bootstrap da aplicação: inicialização e wiring.

Este módulo é o composition root: configura logging, valida settings e
conecta implementações concretas aos protocolos.

Uso:
    from app.bootstrap import get_container, initialize_app

    # Na inicialização do serviço
    initialize_app()

    # Obter serviços
    container = get_container()
    request_id = await container.orchestrator.submit(auth, lookup)
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import TYPE_CHECKING

from app.observability import get_correlation_id
from config.logging import configure_logging
from config.settings import (
    get_base_settings,
    get_firestore_settings,
    get_helena_settings,
    get_infosimples_settings,
    get_polling_settings,
    get_store_settings,
    get_webhook_settings,
)

if TYPE_CHECKING:
    from app.bootstrap.dependencies import ServiceContainer

# Nome do serviço para logs e métricas
SERVICE_NAME = "consulta_multas"

# Nível de log padrão (pode ser sobrescrito por env)
DEFAULT_LOG_LEVEL = "INFO"
STRICT_VALIDATION_ENVS = {"staging", "production"}

logger = logging.getLogger(__name__)


def initialize_app() -> None:
    """Inicializa a aplicação com todas as configurações necessárias.

    Deve ser chamada uma vez no início do serviço.
    """
    log_level = os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()

    configure_logging(
        level=log_level,
        service_name=SERVICE_NAME,
        correlation_id_getter=get_correlation_id,
    )


def initialize_test_app() -> None:
    """Inicializa a aplicação para testes (logging em DEBUG)."""
    configure_logging(
        level="DEBUG",
        service_name=f"{SERVICE_NAME}_test",
        correlation_id_getter=get_correlation_id,
    )


def collect_settings_errors() -> list[str]:
    """Agrega os erros de validação de todas as settings."""
    base = get_base_settings()
    store = get_store_settings()
    errors: list[str] = []
    errors.extend(f"base: {error}" for error in base.validate())
    errors.extend(f"store: {error}" for error in store.validate(base))
    if store.backend == "firestore":
        errors.extend(
            f"firestore: {error}"
            for error in get_firestore_settings().validate(base.gcp_project)
        )
    infosimples = get_infosimples_settings()
    helena = get_helena_settings()
    if not infosimples.is_configured and not helena.is_configured and not base.demo_mode:
        errors.append("providers: nenhum provedor configurado (INFOSIMPLES_API_TOKEN/HELENA_API_KEY)")
    if infosimples.is_configured:
        errors.extend(f"infosimples: {error}" for error in infosimples.validate())
    if helena.is_configured:
        errors.extend(f"helena: {error}" for error in helena.validate())
    errors.extend(f"polling: {error}" for error in get_polling_settings().validate())
    errors.extend(f"webhooks: {error}" for error in get_webhook_settings().validate())
    return errors


def validate_runtime_settings() -> None:
    """Valida settings obrigatórias no startup.

    Em `staging`/`production` falha rápido para impedir boot inválido.
    Em `development`/`test` mantém alerta sem bloquear execução local.
    """
    environment = os.getenv("ENVIRONMENT", "development").lower()
    strict_mode = environment in STRICT_VALIDATION_ENVS
    errors = collect_settings_errors()

    if not errors:
        logger.info(
            "settings_validated",
            extra={"component": "bootstrap", "result": "ok", "environment": environment},
        )
        return

    logger.warning(
        "settings_validation_failed",
        extra={
            "component": "bootstrap",
            "result": "failed",
            "environment": environment,
            "error_count": len(errors),
            "errors": errors,
        },
    )
    if strict_mode:
        details = "\n".join(f"- {error}" for error in errors)
        raise RuntimeError(f"Configuração inválida para {environment}:\n{details}")


@lru_cache(maxsize=1)
def get_container() -> ServiceContainer:
    """Obtém o container de serviços (singleton)."""
    from app.bootstrap.dependencies import create_container

    return create_container()
