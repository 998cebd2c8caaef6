"""Protocolo de persistência de webhooks."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

    from app.domain.webhook import Webhook


class WebhookStoreProtocol(ABC):
    """Contrato para configuração de webhooks e contadores de entrega."""

    @abstractmethod
    async def save(self, webhook: Webhook) -> None:
        """Cria ou sobrescreve o webhook."""

    @abstractmethod
    async def get(self, webhook_id: str) -> Webhook | None:
        """Retorna o webhook ou None."""

    @abstractmethod
    async def list_all(self) -> list[Webhook]:
        """Lista webhooks por ordem de criação."""

    @abstractmethod
    async def delete(self, webhook_id: str) -> bool:
        """Remove o webhook. Retorna False se não existia."""

    @abstractmethod
    async def record_delivery(
        self,
        webhook_id: str,
        *,
        success: bool,
        attempted_at: datetime,
    ) -> Webhook | None:
        """Atualiza last_triggered_at e fail_count após uma entrega.

        Sucesso zera fail_count; falha incrementa. Retorna None se o
        webhook foi removido durante a entrega.
        """
