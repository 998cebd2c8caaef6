"""Adaptador Helena: CPF de condutor e débitos veiculares."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from api.connectors.helena.client import SUPPORTED_SEARCH_TYPES, HelenaClient
from api.normalizers.helena import normalize_helena
from app.domain.lookup import ProviderName
from app.protocols.provider_adapter import ProviderAdapter, ProviderLookup

if TYPE_CHECKING:
    from app.domain.canonical import CnhResult, FinesResult, VehicleResult
    from app.domain.consultation import ProviderJobStatus
    from app.domain.lookup import LookupRequest, SearchType

_COMPLETED = frozenset({"completed", "done", "finished"})
_FAILED = frozenset({"failed", "error", "canceled", "cancelled"})


class HelenaAdapter(ProviderAdapter):
    """Helena sempre responde de forma assíncrona (id do job = protocolo)."""

    provider = ProviderName.HELENA

    def __init__(self, search_type: SearchType, client: HelenaClient) -> None:
        if search_type not in SUPPORTED_SEARCH_TYPES:
            raise ValueError(f"Helena não atende {search_type.value}")
        self.search_type = search_type
        self._client = client

    async def lookup(self, request: LookupRequest) -> ProviderLookup:
        consult_id = await self._client.create_consult(request)
        return ProviderLookup(protocol=consult_id, raw_payload={"id": consult_id})

    async def check_status(self, protocol: str) -> ProviderJobStatus:
        body = await self._client.get_consult(protocol)
        status = str(body.get("status", "")).strip().lower()
        if status in _COMPLETED:
            return "completed"
        if status in _FAILED:
            return "failed"
        return "running"

    async def fetch_result(self, protocol: str) -> dict[str, Any]:
        return await self._client.get_results(protocol)

    def normalize(self, raw_payload: dict[str, Any]) -> CnhResult | VehicleResult | FinesResult:
        return normalize_helena(self.search_type, raw_payload)
