"""Settings do provedor Infosimples.

Consultas DETRAN (CNH, veículo, débitos veiculares) via API Infosimples v2.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

INFOSIMPLES_API_BASE_URL: str = "https://api.infosimples.com/api/v2"

# UFs com endpoint DETRAN disponível no provedor
SUPPORTED_UFS: frozenset[str] = frozenset({
    "AC", "AL", "AM", "AP", "BA", "CE", "DF", "ES", "GO", "MA", "MG", "MS",
    "MT", "PA", "PB", "PE", "PI", "PR", "RJ", "RN", "RO", "RR", "RS", "SC",
    "SE", "SP", "TO",
})


@dataclass(frozen=True)
class InfosimplesSettings:
    """Configurações do provedor Infosimples.

    Attributes:
        api_token: Token de acesso (parâmetro `token`)
        api_base_url: URL base da API
        timeout_seconds: Orçamento total por chamada, somando retries e backoff
            (o provedor pode levar minutos)
        max_retries: Tentativas extras em erros transitórios
        default_uf: UF usada quando a consulta não informa uma
    """

    api_token: str = ""
    api_base_url: str = INFOSIMPLES_API_BASE_URL
    timeout_seconds: float = 600.0
    max_retries: int = 3
    default_uf: str = "SP"

    @property
    def is_configured(self) -> bool:
        return bool(self.api_token)

    def validate(self) -> list[str]:
        """Valida configurações do Infosimples.

        Returns:
            Lista de erros de validação (vazia = tudo OK).
        """
        errors: list[str] = []

        if not self.api_token:
            errors.append("INFOSIMPLES_API_TOKEN não configurado")

        if self.timeout_seconds <= 0:
            errors.append("INFOSIMPLES_TIMEOUT_SECONDS deve ser > 0")

        if self.max_retries < 0:
            errors.append("INFOSIMPLES_MAX_RETRIES deve ser >= 0")

        if self.default_uf not in SUPPORTED_UFS:
            errors.append(f"INFOSIMPLES_DEFAULT_UF inválida: {self.default_uf}")

        return errors


def _load_infosimples_from_env() -> InfosimplesSettings:
    """Carrega InfosimplesSettings de variáveis de ambiente."""
    return InfosimplesSettings(
        api_token=os.getenv("INFOSIMPLES_API_TOKEN", ""),
        api_base_url=os.getenv("INFOSIMPLES_BASE_URL", INFOSIMPLES_API_BASE_URL),
        timeout_seconds=float(os.getenv("INFOSIMPLES_TIMEOUT_SECONDS", "600")),
        max_retries=int(os.getenv("INFOSIMPLES_MAX_RETRIES", "3")),
        default_uf=os.getenv("INFOSIMPLES_DEFAULT_UF", "SP").upper(),
    )


@lru_cache(maxsize=1)
def get_infosimples_settings() -> InfosimplesSettings:
    """Retorna instância cacheada de InfosimplesSettings."""
    return _load_infosimples_from_env()
