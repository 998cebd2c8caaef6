"""Formatters de logging estruturado e mascaramento de consultas."""

from __future__ import annotations

from pythonjsonlogger.json import JsonFormatter

# Campos obrigatórios em todo log estruturado
REQUIRED_LOG_FIELDS = frozenset(
    {
        "asctime",
        "levelname",
        "name",
        "message",
        "correlation_id",
        "service",
    }
)

FIELD_RENAME_MAP = {
    "levelname": "level",
    "name": "logger",
}


def create_json_formatter() -> JsonFormatter:
    """Cria formatter JSON com campos padronizados.

    Exemplo de output:
        {
            "asctime": "2026-02-02T10:30:00",
            "level": "INFO",
            "logger": "app.services.consultation_orchestrator",
            "message": "lookup_submitted",
            "correlation_id": "abc-123",
            "service": "consulta_multas"
        }
    """
    format_string = " ".join(f"%({field})s" for field in sorted(REQUIRED_LOG_FIELDS))

    return JsonFormatter(
        format_string,
        rename_fields=FIELD_RENAME_MAP,
    )


def mask_query(query: str, visible: int = 3) -> str:
    """Mascara um documento/placa mantendo apenas o final.

    >>> mask_query("ABC1D23")
    '****D23'
    """
    cleaned = (query or "").strip()
    if len(cleaned) <= visible:
        return "*" * len(cleaned)
    return "*" * (len(cleaned) - visible) + cleaned[-visible:]
