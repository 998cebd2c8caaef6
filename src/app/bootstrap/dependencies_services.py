"""Factories dos serviços do núcleo de consultas."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from app.services import (
    ConfiguredProviderRegistry,
    ConsultationOrchestrator,
    PollingCoordinator,
    SearchHistoryLedger,
    WebhookDispatcher,
    WebhookRegistry,
)
from config.settings import (
    get_base_settings,
    get_helena_settings,
    get_infosimples_settings,
    get_polling_settings,
    get_webhook_settings,
)

if TYPE_CHECKING:
    from app.protocols.consultation_store import ConsultationStoreProtocol
    from app.protocols.webhook_store import WebhookStoreProtocol

logger = logging.getLogger(__name__)


def create_provider_registry() -> ConfiguredProviderRegistry:
    """Monta as cadeias de provedores com as credenciais do ambiente."""
    registry = ConfiguredProviderRegistry(
        infosimples=get_infosimples_settings(),
        helena=get_helena_settings(),
    )
    logger.info("provider_registry_created", extra={"chains": registry.summary()})
    return registry


def create_webhook_dispatcher(store: WebhookStoreProtocol) -> WebhookDispatcher:
    return WebhookDispatcher(store, get_webhook_settings())


def create_webhook_registry(
    store: WebhookStoreProtocol,
    dispatcher: WebhookDispatcher,
) -> WebhookRegistry:
    return WebhookRegistry(
        store,
        dispatcher,
        fail_warning_threshold=get_webhook_settings().fail_warning_threshold,
    )


def create_consultation_orchestrator(
    *,
    store: ConsultationStoreProtocol,
    ledger: SearchHistoryLedger,
    registry: ConfiguredProviderRegistry,
    dispatcher: WebhookDispatcher | None = None,
) -> ConsultationOrchestrator:
    base = get_base_settings()
    if base.demo_mode:
        logger.warning(
            "demo_mode_enabled",
            extra={"component": "bootstrap", "environment": base.environment},
        )
    return ConsultationOrchestrator(
        store=store,
        registry=registry,
        ledger=ledger,
        demo_mode=base.demo_mode,
        default_uf=get_infosimples_settings().default_uf,
        dispatcher=dispatcher,
    )


def create_polling_coordinator(orchestrator: ConsultationOrchestrator) -> PollingCoordinator:
    return PollingCoordinator(orchestrator, get_polling_settings())
