"""Registro de adaptadores por tipo de consulta.

Mantém a cadeia ordenada de provedores de cada search_type. O primeiro
adaptador é o primário; os seguintes só são tentados quando o anterior
falha com erro transitório ou credencial inválida.

Credenciais entram por objetos de settings na construção e só mudam via
reconfigure(), nunca por estado global de módulo.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from api.connectors.helena import HelenaAdapter, HelenaClient
from api.connectors.infosimples import InfosimplesAdapter, InfosimplesClient
from app.domain.lookup import ProviderName, SearchType

if TYPE_CHECKING:
    from collections.abc import Iterable

    from app.protocols.provider_adapter import ProviderAdapter
    from config.settings import HelenaSettings, InfosimplesSettings

logger = logging.getLogger(__name__)

PROVIDER_CHAIN: dict[SearchType, tuple[ProviderName, ...]] = {
    SearchType.CNH: (ProviderName.INFOSIMPLES,),
    SearchType.PLATE: (ProviderName.INFOSIMPLES,),
    SearchType.RENAVAM: (ProviderName.INFOSIMPLES,),
    SearchType.DRIVER_CPF: (ProviderName.HELENA,),
    SearchType.VEHICLE_FINES: (ProviderName.INFOSIMPLES, ProviderName.HELENA),
}


class ProviderRegistry:
    """Cadeias de adaptadores por search_type."""

    def __init__(self, adapters: Iterable[ProviderAdapter] = ()) -> None:
        self._chains: dict[SearchType, list[ProviderAdapter]] = {}
        for adapter in adapters:
            self.register(adapter)

    def register(self, adapter: ProviderAdapter) -> None:
        """Acrescenta o adaptador ao fim da cadeia do seu search_type."""
        self._chains.setdefault(adapter.search_type, []).append(adapter)

    def chain(self, search_type: SearchType) -> list[ProviderAdapter]:
        return list(self._chains.get(search_type, []))

    def get(self, search_type: SearchType, provider: ProviderName) -> ProviderAdapter | None:
        for adapter in self._chains.get(search_type, []):
            if adapter.provider == provider:
                return adapter
        return None

    def replace_all(self, adapters: Iterable[ProviderAdapter]) -> None:
        chains: dict[SearchType, list[ProviderAdapter]] = {}
        for adapter in adapters:
            chains.setdefault(adapter.search_type, []).append(adapter)
        self._chains = chains

    def summary(self) -> dict[str, list[str]]:
        return {
            search_type.value: [adapter.provider.value for adapter in adapters]
            for search_type, adapters in self._chains.items()
        }


class ConfiguredProviderRegistry(ProviderRegistry):
    """Registro montado a partir das settings dos provedores."""

    def __init__(
        self,
        infosimples: InfosimplesSettings,
        helena: HelenaSettings,
    ) -> None:
        super().__init__()
        self._infosimples = infosimples
        self._helena = helena
        self.replace_all(build_adapters(infosimples, helena))

    def reconfigure(
        self,
        *,
        infosimples: InfosimplesSettings | None = None,
        helena: HelenaSettings | None = None,
    ) -> None:
        """Troca credenciais em runtime reconstruindo todos os adaptadores."""
        if infosimples is not None:
            self._infosimples = infosimples
        if helena is not None:
            self._helena = helena
        self.replace_all(build_adapters(self._infosimples, self._helena))
        logger.info(
            "provider_registry_reconfigured",
            extra={"component": "provider_registry", "chains": self.summary()},
        )


def build_adapters(
    infosimples: InfosimplesSettings,
    helena: HelenaSettings,
) -> list[ProviderAdapter]:
    """Cria os adaptadores na ordem de PROVIDER_CHAIN.

    Provedores sem credencial ficam de fora (com log); o search_type
    correspondente fica sem cadeia e só é atendido em modo demo.
    """
    infosimples_client = InfosimplesClient(infosimples) if infosimples.is_configured else None
    helena_client = HelenaClient(helena) if helena.is_configured else None
    if infosimples_client is None:
        logger.warning("provider_not_configured", extra={"provider": "infosimples"})
    if helena_client is None:
        logger.warning("provider_not_configured", extra={"provider": "helena"})

    adapters: list[ProviderAdapter] = []
    for search_type, providers in PROVIDER_CHAIN.items():
        for provider in providers:
            if provider is ProviderName.INFOSIMPLES and infosimples_client is not None:
                adapters.append(InfosimplesAdapter(search_type, infosimples_client))
            elif provider is ProviderName.HELENA and helena_client is not None:
                adapters.append(HelenaAdapter(search_type, helena_client))
    return adapters
