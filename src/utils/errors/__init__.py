"""Exceções utilitárias compartilhadas."""

from .exceptions import (
    ConsultaError,
    ConsultationNotFoundError,
    ConsultationNotReadyError,
    DeliveryFailureError,
    FirestoreUnavailableError,
    HistoryEntryNotFoundError,
    InfrastructureError,
    InvalidInputError,
    InvalidTransitionError,
    LookupTimeoutError,
    ProviderError,
    ProviderTerminalError,
    ProviderTransientError,
    ResultAlreadyExistsError,
    UnauthorizedError,
    WebhookNotFoundError,
)

__all__ = [
    "ConsultaError",
    "ConsultationNotFoundError",
    "ConsultationNotReadyError",
    "DeliveryFailureError",
    "FirestoreUnavailableError",
    "HistoryEntryNotFoundError",
    "InfrastructureError",
    "InvalidInputError",
    "InvalidTransitionError",
    "LookupTimeoutError",
    "ProviderError",
    "ProviderTerminalError",
    "ProviderTransientError",
    "ResultAlreadyExistsError",
    "UnauthorizedError",
    "WebhookNotFoundError",
]
