"""Protocolo do ledger de histórico de consultas."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.domain.history import HistoryFilters, SearchHistoryEntry


class HistoryStoreProtocol(ABC):
    """Contrato append-only para SearchHistoryEntry.

    Invariantes:
        - result_snapshot nunca muda após a escrita
        - Listagens vêm da mais recente para a mais antiga
    """

    @abstractmethod
    async def append(self, entry: SearchHistoryEntry) -> None:
        """Insere uma entrada nova."""

    @abstractmethod
    async def get(self, entry_id: str) -> SearchHistoryEntry | None:
        """Retorna a entrada ou None."""

    @abstractmethod
    async def set_links(
        self,
        entry_id: str,
        *,
        related_client_id: str | None = None,
        related_vehicle_id: str | None = None,
    ) -> SearchHistoryEntry:
        """Atualiza apenas os back-links informados (None = mantém).

        Raises:
            HistoryEntryNotFoundError: Entrada inexistente
        """

    @abstractmethod
    async def query(
        self,
        user_id: str,
        filters: HistoryFilters,
        *,
        offset: int = 0,
        limit: int | None = None,
    ) -> tuple[list[SearchHistoryEntry], int]:
        """Lista entradas do usuário (mais recentes primeiro).

        Returns:
            (página de entradas, total que satisfaz os filtros)
        """
