"""Agregador de settings do Consulta Multas.

Re-exporta todas as settings e funções de cada módulo.
Organização por domínio para isolamento de mudanças.
"""

from __future__ import annotations

# Base settings
from config.settings.base import (
    BaseSettings,
    Environment,
    StoreBackend,
    StoreSettings,
    get_base_settings,
    get_store_settings,
)

# Provider-specific settings
from config.settings.helena import (
    HELENA_API_BASE_URL,
    HelenaSettings,
    get_helena_settings,
)
from config.settings.infosimples import (
    INFOSIMPLES_API_BASE_URL,
    SUPPORTED_UFS,
    InfosimplesSettings,
    get_infosimples_settings,
)

# Infrastructure settings
from config.settings.infra import (
    FirestoreSettings,
    get_firestore_settings,
)
from config.settings.polling import (
    PollingSettings,
    get_polling_settings,
)
from config.settings.webhooks import (
    WebhookSettings,
    get_webhook_settings,
)

__all__ = [
    # Constants
    "HELENA_API_BASE_URL",
    "INFOSIMPLES_API_BASE_URL",
    "SUPPORTED_UFS",
    # Base
    "BaseSettings",
    "Environment",
    # Infrastructure
    "FirestoreSettings",
    # Providers
    "HelenaSettings",
    "InfosimplesSettings",
    "PollingSettings",
    "StoreBackend",
    "StoreSettings",
    "WebhookSettings",
    "get_base_settings",
    "get_firestore_settings",
    "get_helena_settings",
    "get_infosimples_settings",
    "get_polling_settings",
    "get_store_settings",
    "get_webhook_settings",
]
