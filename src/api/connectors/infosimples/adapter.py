"""Adaptador Infosimples: um por tipo de consulta atendido."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from api.connectors.infosimples.client import InfosimplesClient, require_protocol
from api.connectors.infosimples.errors import CODE_QUEUED, body_code
from api.connectors.infosimples.params import ENDPOINTS, check_required_params
from api.normalizers.infosimples import normalize_infosimples, unwrap_data
from api.normalizers.shared import as_mapping
from app.domain.lookup import ProviderName, SearchType
from app.protocols.provider_adapter import ProviderAdapter, ProviderLookup
from utils.errors import ConsultationNotReadyError

if TYPE_CHECKING:
    from app.domain.canonical import CnhResult, FinesResult, VehicleResult
    from app.domain.consultation import ProviderJobStatus
    from app.domain.lookup import LookupRequest

SUPPORTED_SEARCH_TYPES: frozenset[SearchType] = frozenset(ENDPOINTS)

_COMPLETED = frozenset({"concluido", "concluído", "finalizado", "completed", "done"})
_FAILED = frozenset({"erro", "falha", "failed", "error"})


class InfosimplesAdapter(ProviderAdapter):
    """Consultas DETRAN via Infosimples para um search_type."""

    provider = ProviderName.INFOSIMPLES

    def __init__(self, search_type: SearchType, client: InfosimplesClient) -> None:
        if search_type not in SUPPORTED_SEARCH_TYPES:
            raise ValueError(f"Infosimples não atende {search_type.value}")
        self.search_type = search_type
        self._client = client

    def validate(self, request: LookupRequest) -> None:
        check_required_params(request)

    async def lookup(self, request: LookupRequest) -> ProviderLookup:
        body = await self._client.submit(request)
        # 201 (ou protocolo sem dados) = fila; 200 com dados = resposta síncrona
        has_data = bool(as_mapping(body.get("data")))
        if body_code(body) == CODE_QUEUED or (body.get("protocolo") and not has_data):
            return ProviderLookup(protocol=require_protocol(body), raw_payload=body)
        return ProviderLookup(protocol="", raw_payload=body)

    async def check_status(self, protocol: str) -> ProviderJobStatus:
        body = await self._client.status(protocol)
        data = unwrap_data(body)
        situation = str(
            data.get("situacao") or data.get("status") or body.get("situacao") or ""
        ).strip().lower()
        if situation in _COMPLETED:
            return "completed"
        if situation in _FAILED:
            return "failed"
        return "running"

    async def fetch_result(self, protocol: str) -> dict[str, Any]:
        body = await self._client.result(protocol)
        if body_code(body) == CODE_QUEUED:
            raise ConsultationNotReadyError(protocol)
        return body

    def normalize(self, raw_payload: dict[str, Any]) -> CnhResult | VehicleResult | FinesResult:
        return normalize_infosimples(self.search_type, raw_payload)
