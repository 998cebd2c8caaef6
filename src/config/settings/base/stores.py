"""Settings de persistência.

Seleciona o backend dos stores de consultas, histórico e webhooks.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from config.settings.base.core import BaseSettings

StoreBackend = Literal["memory", "firestore"]


@dataclass(frozen=True)
class StoreSettings:
    """Configurações de persistência.

    Attributes:
        backend: Backend dos stores (memory|firestore)
    """

    backend: StoreBackend = "memory"

    def validate(self, base: BaseSettings) -> list[str]:
        """Valida configurações de persistência.

        Args:
            base: BaseSettings para verificar ambiente.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []

        if self.backend not in ("memory", "firestore"):
            errors.append(f"STORE_BACKEND inválido: {self.backend}")

        if self.backend == "memory" and not base.is_development:
            errors.append(
                "STORE_BACKEND=memory proibido em staging/production. "
                "Use Firestore."
            )

        if self.backend == "firestore" and not base.gcp_project:
            errors.append("STORE_BACKEND=firestore requer GCP_PROJECT configurado")

        return errors


def _load_store_from_env() -> StoreSettings:
    """Carrega StoreSettings de variáveis de ambiente."""
    backend_str = os.getenv("STORE_BACKEND", "memory").lower()
    backend: StoreBackend = "firestore" if backend_str == "firestore" else "memory"
    return StoreSettings(backend=backend)


@lru_cache(maxsize=1)
def get_store_settings() -> StoreSettings:
    """Retorna instância cacheada de StoreSettings."""
    return _load_store_from_env()
