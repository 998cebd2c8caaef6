"""Protocolos e contratos do core da aplicação."""

from .consultation_store import ConsultationStoreProtocol
from .history_store import HistoryStoreProtocol
from .provider_adapter import ProviderAdapter, ProviderLookup
from .webhook_store import WebhookStoreProtocol

__all__ = [
    "ConsultationStoreProtocol",
    "HistoryStoreProtocol",
    "ProviderAdapter",
    "ProviderLookup",
    "WebhookStoreProtocol",
]
