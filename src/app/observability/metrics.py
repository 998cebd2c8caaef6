"""Registro de métricas via structured logging.

As métricas saem como logs estruturados (metric_type + campos) e são
agregadas depois (BigQuery, Cloud Logging).

Métricas suportadas:
- Latência: tempo por componente/operação
- Lookup outcome: resultado final de cada consulta por provedor/tipo
- Webhook delivery: sucesso/falha por webhook

Uso:
    start = time.perf_counter()
    # ... operação ...
    record_latency("orchestrator", "finalize", (time.perf_counter() - start) * 1000)
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def record_latency(
    component: str,
    operation: str,
    latency_ms: float,
    correlation_id: str | None = None,
) -> None:
    """Registra latência de operação.

    Args:
        component: Nome do componente (ex: "orchestrator", "infosimples")
        operation: Nome da operação (ex: "submit", "fetch_result")
        latency_ms: Latência em milissegundos
        correlation_id: ID de correlação (usa o do contexto se None)
    """
    extra: dict[str, object] = {
        "metric_type": "latency",
        "component": component,
        "operation": operation,
        "latency_ms": round(latency_ms, 2),
    }
    if correlation_id:
        extra["correlation_id"] = correlation_id
    logger.info("metric_latency", extra=extra)


def record_lookup_outcome(
    search_type: str,
    provider: str,
    status: str,
    *,
    error_code: str | None = None,
    degraded: bool = False,
) -> None:
    """Registra o desfecho terminal de uma consulta.

    Args:
        search_type: Tipo de consulta (cnh, plate, ...)
        provider: Provedor que atendeu (ou "demo")
        status: Estado terminal (completed|failed|timed_out)
        error_code: Código do ProviderError quando houver
        degraded: True quando o resultado veio do modo demo
    """
    logger.info(
        "metric_lookup_outcome",
        extra={
            "metric_type": "lookup_outcome",
            "search_type": search_type,
            "provider": provider,
            "status": status,
            "error_code": error_code,
            "degraded": degraded,
        },
    )


def record_webhook_delivery(
    webhook_id: str,
    event_type: str,
    success: bool,
    status_code: int | None = None,
    latency_ms: float | None = None,
) -> None:
    """Registra uma tentativa de entrega de webhook (após retries)."""
    extra: dict[str, object] = {
        "metric_type": "webhook_delivery",
        "webhook_id": webhook_id,
        "event_type": event_type,
        "success": success,
        "status_code": status_code,
    }
    if latency_ms is not None:
        extra["latency_ms"] = round(latency_ms, 2)
    logger.info("metric_webhook_delivery", extra=extra)
