"""Configuração de logging estruturado.

Uso:
    from config.logging import configure_logging, get_logger

    # Na inicialização (app/bootstrap)
    configure_logging(level="INFO", service_name="consulta_multas")

    # Em qualquer módulo
    logger = get_logger(__name__)
    logger.info("lookup_submitted", extra={"request_id": "..."})

Todo log carrega correlation_id, service, level, logger, message e asctime.
CPF, CNH, placa e RENAVAM nunca saem crus: use mask_query() e o
DocumentRedactionFilter instalado pelo configure_logging.
"""

from config.logging.config import configure_logging, get_logger, log_fallback
from config.logging.filters import CorrelationIdFilter, DocumentRedactionFilter
from config.logging.formatters import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    create_json_formatter,
    mask_query,
)

__all__ = [
    "FIELD_RENAME_MAP",
    "REQUIRED_LOG_FIELDS",
    "CorrelationIdFilter",
    "DocumentRedactionFilter",
    "configure_logging",
    "create_json_formatter",
    "get_logger",
    "log_fallback",
    "mask_query",
]
