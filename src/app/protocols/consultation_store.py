"""Protocolo de persistência de consultas e resultados."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.domain.consultation import ConsultationRequest, ConsultationResult


class ConsultationStoreProtocol(ABC):
    """Contrato para ConsultationRequest/ConsultationResult.

    Invariantes:
        - Consultas nunca são removidas em operação normal
        - No máximo um ConsultationResult por request_id
    """

    @abstractmethod
    async def create(self, request: ConsultationRequest) -> None:
        """Persiste uma nova consulta."""

    @abstractmethod
    async def get(self, request_id: str) -> ConsultationRequest | None:
        """Retorna a consulta ou None se não existir."""

    @abstractmethod
    async def update(self, request: ConsultationRequest) -> None:
        """Sobrescreve o registro (last-write-wins).

        Raises:
            ConsultationNotFoundError: Consulta inexistente
        """

    @abstractmethod
    async def save_result(self, result: ConsultationResult) -> None:
        """Grava o resultado final.

        Raises:
            ResultAlreadyExistsError: Já existe resultado para a consulta
        """

    @abstractmethod
    async def get_result(self, request_id: str) -> ConsultationResult | None:
        """Retorna o resultado gravado ou None."""
