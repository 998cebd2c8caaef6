"""Filters de logging para injeção de contexto e redação de documentos.

Campos injetados:
- correlation_id: ID de rastreamento da requisição
- service: Nome do serviço (ex: consulta_multas)
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

# CPF (com ou sem pontuação), placas antiga/Mercosul e sequências longas de
# dígitos (CNH, RENAVAM)
_DOCUMENT_PATTERNS = (
    re.compile(r"\b\d{3}\.\d{3}\.\d{3}-\d{2}\b"),
    re.compile(r"\b[A-Z]{3}-?\d[A-Z0-9]\d{2}\b"),
    re.compile(r"\b\d{9,11}\b"),
)
_REDACTED = "***"


class CorrelationIdFilter(logging.Filter):
    """Injeta correlation_id e service em cada record de log.

    Args:
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Função que retorna o correlation_id atual.
            Se não fornecida, usa string vazia como fallback.
    """

    def __init__(
        self,
        service_name: str,
        correlation_id_getter: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._get_correlation_id = correlation_id_getter or (lambda: "")

    def filter(self, record: logging.LogRecord) -> bool:
        # Preservar correlation_id passado explicitamente via `extra`
        existing = getattr(record, "correlation_id", None)
        record.correlation_id = existing if existing else self._get_correlation_id()
        record.service = self._service_name
        return True


class DocumentRedactionFilter(logging.Filter):
    """Substitui documentos e placas na mensagem final por '***'.

    Atua só sobre a mensagem formatada; campos de `extra` são
    responsabilidade de quem loga (use mask_query).
    """

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact_documents(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


def redact_documents(text: str) -> str:
    """Remove CPF, placas, CNH e RENAVAM de um texto livre."""
    for pattern in _DOCUMENT_PATTERNS:
        text = pattern.sub(_REDACTED, text)
    return text
