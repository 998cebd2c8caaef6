"""Settings do provedor Helena.

Consultas de CPF de condutor e débitos veiculares via API Helena v1.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

HELENA_API_BASE_URL: str = "https://api.helena.app/v1"


@dataclass(frozen=True)
class HelenaSettings:
    """Configurações do provedor Helena.

    Attributes:
        api_key: Chave enviada no header X-Api-Key
        api_base_url: URL base da API
        timeout_seconds: Timeout por requisição
        max_retries: Tentativas extras em erros transitórios
    """

    api_key: str = ""
    api_base_url: str = HELENA_API_BASE_URL
    timeout_seconds: float = 60.0
    max_retries: int = 3

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def validate(self) -> list[str]:
        errors: list[str] = []

        if not self.api_key:
            errors.append("HELENA_API_KEY não configurado")

        if self.timeout_seconds <= 0:
            errors.append("HELENA_TIMEOUT_SECONDS deve ser > 0")

        if self.max_retries < 0:
            errors.append("HELENA_MAX_RETRIES deve ser >= 0")

        return errors


def _load_helena_from_env() -> HelenaSettings:
    """Carrega HelenaSettings de variáveis de ambiente."""
    return HelenaSettings(
        api_key=os.getenv("HELENA_API_KEY", ""),
        api_base_url=os.getenv("HELENA_BASE_URL", HELENA_API_BASE_URL),
        timeout_seconds=float(os.getenv("HELENA_TIMEOUT_SECONDS", "60")),
        max_retries=int(os.getenv("HELENA_MAX_RETRIES", "3")),
    )


@lru_cache(maxsize=1)
def get_helena_settings() -> HelenaSettings:
    """Retorna instância cacheada de HelenaSettings."""
    return _load_helena_from_env()
