"""Cadastro de webhooks (CRUD administrativo) e catálogo de eventos."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.domain.webhook import EVENT_DESCRIPTIONS, Webhook
from utils.errors import WebhookNotFoundError

if TYPE_CHECKING:
    from app.domain.webhook import DeliveryResult, WebhookCreate, WebhookUpdate
    from app.protocols.webhook_store import WebhookStoreProtocol
    from app.services.webhook_dispatcher import WebhookDispatcher

logger = logging.getLogger(__name__)


class WebhookRegistry:
    """Operações de configuração; contadores de entrega ficam com o dispatcher."""

    def __init__(
        self,
        store: WebhookStoreProtocol,
        dispatcher: WebhookDispatcher,
        fail_warning_threshold: int = 5,
    ) -> None:
        self._store = store
        self._dispatcher = dispatcher
        self._fail_warning_threshold = fail_warning_threshold

    @staticmethod
    def events() -> list[dict[str, str]]:
        """Catálogo de eventos disponíveis para assinatura."""
        return [
            {"event": event.value, "description": description}
            for event, description in EVENT_DESCRIPTIONS.items()
        ]

    async def list_webhooks(self) -> list[Webhook]:
        return await self._store.list_all()

    async def get(self, webhook_id: str) -> Webhook:
        webhook = await self._store.get(webhook_id)
        if webhook is None:
            raise WebhookNotFoundError(webhook_id)
        return webhook

    async def create(self, data: WebhookCreate) -> Webhook:
        webhook = Webhook(**data.model_dump())
        await self._store.save(webhook)
        logger.info(
            "webhook_created",
            extra={"webhook_id": webhook.id, "events": webhook.events},
        )
        return webhook

    async def update(self, webhook_id: str, data: WebhookUpdate) -> Webhook:
        current = await self.get(webhook_id)
        changes = data.model_dump(exclude_none=True)
        updated = current.model_copy(update=changes)
        await self._store.save(updated)
        logger.info(
            "webhook_updated",
            extra={"webhook_id": webhook_id, "fields": sorted(changes)},
        )
        return updated

    async def toggle(self, webhook_id: str) -> Webhook:
        current = await self.get(webhook_id)
        updated = current.model_copy(update={"enabled": not current.enabled})
        await self._store.save(updated)
        logger.info(
            "webhook_toggled",
            extra={"webhook_id": webhook_id, "enabled": updated.enabled},
        )
        return updated

    async def delete(self, webhook_id: str) -> None:
        if not await self._store.delete(webhook_id):
            raise WebhookNotFoundError(webhook_id)
        logger.info("webhook_deleted", extra={"webhook_id": webhook_id})

    async def test(self, webhook_id: str) -> DeliveryResult:
        return await self._dispatcher.test(await self.get(webhook_id))

    def is_unhealthy(self, webhook: Webhook) -> bool:
        return webhook.is_unhealthy(self._fail_warning_threshold)
