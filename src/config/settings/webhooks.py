"""Settings de entrega de webhooks de saída."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class WebhookSettings:
    """Configurações do WebhookDispatcher.

    Attributes:
        timeout_seconds: Timeout por tentativa de entrega
        max_retries: Tentativas extras por entrega (transitórios apenas)
        fail_warning_threshold: fail_count a partir do qual o webhook é sinalizado
    """

    timeout_seconds: float = 10.0
    max_retries: int = 1
    fail_warning_threshold: int = 5

    def validate(self) -> list[str]:
        errors: list[str] = []

        if self.timeout_seconds <= 0:
            errors.append("WEBHOOK_TIMEOUT_SECONDS deve ser > 0")

        if self.max_retries < 0:
            errors.append("WEBHOOK_MAX_RETRIES deve ser >= 0")

        if self.fail_warning_threshold < 1:
            errors.append("WEBHOOK_FAIL_WARNING_THRESHOLD deve ser >= 1")

        return errors


def _load_webhook_from_env() -> WebhookSettings:
    """Carrega WebhookSettings de variáveis de ambiente."""
    return WebhookSettings(
        timeout_seconds=float(os.getenv("WEBHOOK_TIMEOUT_SECONDS", "10")),
        max_retries=int(os.getenv("WEBHOOK_MAX_RETRIES", "1")),
        fail_warning_threshold=int(os.getenv("WEBHOOK_FAIL_WARNING_THRESHOLD", "5")),
    )


@lru_cache(maxsize=1)
def get_webhook_settings() -> WebhookSettings:
    """Retorna instância cacheada de WebhookSettings."""
    return _load_webhook_from_env()
