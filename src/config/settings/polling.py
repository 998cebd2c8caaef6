"""Settings do polling de consultas assíncronas."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class PollingSettings:
    """Configurações do PollingCoordinator.

    Attributes:
        interval_seconds: Intervalo entre ticks de get_status
        max_duration_seconds: Prazo máximo antes de desistir (timed_out local)
        drain_timeout_seconds: Espera máxima por tasks pendentes no shutdown
    """

    interval_seconds: float = 5.0
    max_duration_seconds: float = 600.0
    drain_timeout_seconds: float = 5.0

    def validate(self) -> list[str]:
        errors: list[str] = []

        if self.interval_seconds <= 0:
            errors.append("POLL_INTERVAL_SECONDS deve ser > 0")

        if self.max_duration_seconds < self.interval_seconds:
            errors.append(
                "POLL_MAX_DURATION_SECONDS deve ser >= POLL_INTERVAL_SECONDS"
            )

        if self.drain_timeout_seconds < 0:
            errors.append("POLL_DRAIN_TIMEOUT_SECONDS deve ser >= 0")

        return errors


def _load_polling_from_env() -> PollingSettings:
    """Carrega PollingSettings de variáveis de ambiente."""
    return PollingSettings(
        interval_seconds=float(os.getenv("POLL_INTERVAL_SECONDS", "5")),
        max_duration_seconds=float(os.getenv("POLL_MAX_DURATION_SECONDS", "600")),
        drain_timeout_seconds=float(os.getenv("POLL_DRAIN_TIMEOUT_SECONDS", "5")),
    )


@lru_cache(maxsize=1)
def get_polling_settings() -> PollingSettings:
    """Retorna instância cacheada de PollingSettings."""
    return _load_polling_from_env()
