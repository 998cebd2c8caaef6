"""WebhookDispatcher - fan-out de eventos de domínio para assinantes.

Cada entrega é isolada: a falha de um assinante nunca bloqueia nem
desfaz a entrega de outro, e todo desfecho volta explícito no
DispatchReport. fail_count/last_triggered_at só são escritos aqui.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from app.domain.webhook import TEST_EVENT, DeliveryResult, DispatchReport
from app.infra.http import BackoffExecutor, HttpClientConfig, HttpError
from app.observability import record_webhook_delivery
from utils.errors import DeliveryFailureError

if TYPE_CHECKING:
    from collections.abc import Callable

    from app.domain.webhook import Webhook
    from app.protocols.webhook_store import WebhookStoreProtocol
    from config.settings import WebhookSettings

logger = logging.getLogger(__name__)

TEST_MESSAGE = "Este é um evento de teste do webhook."


def build_envelope(event_type: str, payload: dict[str, Any], now: datetime) -> dict[str, Any]:
    return {
        "event": event_type,
        "timestamp": now.isoformat(),
        "data": payload,
    }


class WebhookDispatcher:
    """Entrega eventos a todos os webhooks habilitados que os assinam."""

    def __init__(
        self,
        store: WebhookStoreProtocol,
        settings: WebhookSettings,
        executor: BackoffExecutor | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._settings = settings
        self._executor = executor or BackoffExecutor(
            HttpClientConfig(
                timeout_seconds=settings.timeout_seconds,
                max_retries=settings.max_retries,
            )
        )
        self._clock = clock or (lambda: datetime.now(UTC))

    async def trigger(self, event_type: str, payload: dict[str, Any]) -> DispatchReport:
        """Entrega o evento concorrentemente a cada assinante."""
        webhooks = [
            webhook
            for webhook in await self._store.list_all()
            if webhook.subscribes_to(event_type)
        ]
        if not webhooks:
            logger.info("webhook_no_subscribers", extra={"event_type": event_type})
            return DispatchReport(event_type=event_type)

        envelope = build_envelope(event_type, payload, self._clock())
        outcomes = await asyncio.gather(
            *(self._deliver_and_record(webhook, envelope) for webhook in webhooks),
            return_exceptions=True,
        )

        results: list[DeliveryResult] = []
        for webhook, outcome in zip(webhooks, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                logger.error(
                    "webhook_delivery_crashed",
                    extra={
                        "webhook_id": webhook.id,
                        "event_type": event_type,
                        "error_type": type(outcome).__name__,
                    },
                )
                outcome = DeliveryResult(
                    webhook_id=webhook.id,
                    success=False,
                    error=type(outcome).__name__,
                )
            results.append(outcome)

        report = DispatchReport(event_type=event_type, results=results)
        logger.info(
            "webhook_event_dispatched",
            extra={
                "event_type": event_type,
                "delivered": report.delivered,
                "failed": report.failed,
            },
        )
        return report

    async def test(self, webhook: Webhook) -> DeliveryResult:
        """Uma única tentativa com payload sintético; não toca contadores."""
        envelope = build_envelope(TEST_EVENT, {"message": TEST_MESSAGE}, self._clock())
        result = await self._deliver(webhook, envelope, max_retries=0)
        logger.info(
            "webhook_test_delivered",
            extra={
                "webhook_id": webhook.id,
                "success": result.success,
                "status_code": result.status_code,
            },
        )
        return result

    async def _deliver_and_record(
        self,
        webhook: Webhook,
        envelope: dict[str, Any],
    ) -> DeliveryResult:
        result = await self._deliver(webhook, envelope)
        updated = await self._store.record_delivery(
            webhook.id,
            success=result.success,
            attempted_at=self._clock(),
        )
        record_webhook_delivery(
            webhook.id,
            envelope["event"],
            result.success,
            status_code=result.status_code,
            latency_ms=result.latency_ms,
        )
        if updated is not None and updated.is_unhealthy(self._settings.fail_warning_threshold):
            logger.warning(
                "webhook_unhealthy",
                extra={"webhook_id": webhook.id, "fail_count": updated.fail_count},
            )
        return result

    async def _deliver(
        self,
        webhook: Webhook,
        envelope: dict[str, Any],
        *,
        max_retries: int | None = None,
    ) -> DeliveryResult:
        started = time.perf_counter()
        try:
            status_code = await self._post(webhook, envelope, max_retries)
        except DeliveryFailureError as exc:
            logger.warning(
                "webhook_delivery_failed",
                extra={
                    "webhook_id": webhook.id,
                    "event_type": envelope["event"],
                    "status_code": exc.status_code,
                },
            )
            return DeliveryResult(
                webhook_id=webhook.id,
                success=False,
                status_code=exc.status_code,
                error=str(exc),
                latency_ms=(time.perf_counter() - started) * 1000,
            )
        return DeliveryResult(
            webhook_id=webhook.id,
            success=True,
            status_code=status_code,
            latency_ms=(time.perf_counter() - started) * 1000,
        )

    async def _post(
        self,
        webhook: Webhook,
        envelope: dict[str, Any],
        max_retries: int | None,
    ) -> int:
        """POST do envelope; qualquer resposta fora de 2xx vira DeliveryFailureError."""
        headers = {"Content-Type": "application/json", **webhook.headers}
        try:
            response = await self._executor.request(
                "POST",
                webhook.url,
                json=envelope,
                headers=headers,
                max_retries=max_retries,
            )
        except HttpError as exc:
            raise DeliveryFailureError(webhook.id, str(exc), exc.status_code) from exc
        if not response.is_success:
            raise DeliveryFailureError(
                webhook.id,
                f"HTTP {response.status_code}",
                response.status_code,
            )
        return response.status_code
