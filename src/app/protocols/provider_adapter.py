"""Contrato dos adaptadores de provedor de consulta."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.domain.canonical import CnhResult, FinesResult, VehicleResult
    from app.domain.consultation import ProviderJobStatus
    from app.domain.lookup import LookupRequest, ProviderName, SearchType


@dataclass(frozen=True, slots=True)
class ProviderLookup:
    """Resposta do provedor à submissão.

    protocol vazio significa resposta síncrona: raw_payload já é o
    resultado final.
    """

    protocol: str = ""
    raw_payload: dict[str, Any] = field(default_factory=dict)

    @property
    def is_sync(self) -> bool:
        return not self.protocol


class ProviderAdapter(ABC):
    """Um adaptador por par (search_type, provedor).

    Todas as chamadas externas passam pelo BackoffExecutor; falhas saem
    como ProviderTransientError/ProviderTerminalError.
    """

    search_type: SearchType
    provider: ProviderName

    def validate(self, request: LookupRequest) -> None:
        """Validação específica do provedor, antes de qualquer chamada.

        Raises:
            InvalidInputError: Parâmetros insuficientes para o provedor
        """
        return

    @abstractmethod
    async def lookup(self, request: LookupRequest) -> ProviderLookup:
        """Submete a consulta (exatamente uma chamada externa)."""

    @abstractmethod
    async def check_status(self, protocol: str) -> ProviderJobStatus:
        """Consulta o estado do job no provedor."""

    @abstractmethod
    async def fetch_result(self, protocol: str) -> dict[str, Any]:
        """Busca o payload final de um job concluído.

        Raises:
            ConsultationNotReadyError: Job ainda em processamento
            ProviderError: Job falhou no provedor
        """

    @abstractmethod
    def normalize(
        self,
        raw_payload: dict[str, Any],
    ) -> CnhResult | VehicleResult | FinesResult:
        """Converte o payload bruto no resultado canônico (total, nunca falha)."""
