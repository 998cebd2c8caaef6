"""Composition root: conecta stores, provedores e serviços.

Referência: app/bootstrap é o único lugar que escolhe implementações
concretas para os protocolos.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from app.bootstrap.dependencies_services import (
    create_consultation_orchestrator,
    create_polling_coordinator,
    create_provider_registry,
    create_webhook_dispatcher,
    create_webhook_registry,
)
from app.bootstrap.dependencies_stores import (
    create_consultation_store,
    create_history_store,
    create_webhook_store,
)
from app.services import (
    ConfiguredProviderRegistry,
    ConsultationOrchestrator,
    PollingCoordinator,
    SearchHistoryLedger,
    WebhookDispatcher,
    WebhookRegistry,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ServiceContainer:
    """Serviços compartilhados pelas rotas durante a vida do processo."""

    orchestrator: ConsultationOrchestrator
    polling: PollingCoordinator
    ledger: SearchHistoryLedger
    dispatcher: WebhookDispatcher
    webhooks: WebhookRegistry
    providers: ConfiguredProviderRegistry


def create_container() -> ServiceContainer:
    """Cria todos os serviços a partir das settings do ambiente."""
    ledger = SearchHistoryLedger(create_history_store())
    webhook_store = create_webhook_store()
    dispatcher = create_webhook_dispatcher(webhook_store)
    providers = create_provider_registry()
    orchestrator = create_consultation_orchestrator(
        store=create_consultation_store(),
        ledger=ledger,
        registry=providers,
        dispatcher=dispatcher,
    )
    container = ServiceContainer(
        orchestrator=orchestrator,
        polling=create_polling_coordinator(orchestrator),
        ledger=ledger,
        dispatcher=dispatcher,
        webhooks=create_webhook_registry(webhook_store, dispatcher),
        providers=providers,
    )
    logger.info("service_container_created", extra={"component": "bootstrap"})
    return container
