"""Serviços de aplicação.

Unidades de orquestração do núcleo de consultas. IO concreto fica em
app/infra/ (stores, HTTP) e api/connectors/ (provedores).
"""

from app.services.consultation_orchestrator import ConsultationOrchestrator
from app.services.polling_coordinator import PollHandle, PollingCoordinator, PollOutcome
from app.services.provider_registry import (
    PROVIDER_CHAIN,
    ConfiguredProviderRegistry,
    ProviderRegistry,
)
from app.services.search_history_ledger import SearchHistoryLedger
from app.services.webhook_dispatcher import WebhookDispatcher
from app.services.webhook_registry import WebhookRegistry

__all__ = [
    "PROVIDER_CHAIN",
    "ConfiguredProviderRegistry",
    "ConsultationOrchestrator",
    "PollHandle",
    "PollOutcome",
    "PollingCoordinator",
    "ProviderRegistry",
    "SearchHistoryLedger",
    "WebhookDispatcher",
    "WebhookRegistry",
]
