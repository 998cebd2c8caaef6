"""Cliente HTTP da API Helena v1 (POST /consults + polling por id)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from api.connectors.provider_http import (
    parse_body,
    terminal_from_status,
    transient_from_http_error,
)
from app.domain.lookup import SearchType
from app.infra.http import BackoffExecutor, HttpClientConfig, HttpError
from utils.errors import (
    ConsultationNotReadyError,
    InvalidInputError,
    ProviderTerminalError,
)

if TYPE_CHECKING:
    import httpx

    from app.domain.lookup import LookupRequest
    from config.settings import HelenaSettings

logger = logging.getLogger(__name__)

PROVIDER = "helena"

SUPPORTED_SEARCH_TYPES: frozenset[SearchType] = frozenset({
    SearchType.DRIVER_CPF,
    SearchType.VEHICLE_FINES,
})


def build_consult_body(request: LookupRequest) -> dict[str, str]:
    if request.search_type is SearchType.DRIVER_CPF:
        return {"driver_cpf": request.query}
    if request.search_type is SearchType.VEHICLE_FINES:
        body = {"plate": request.query, "state": request.uf}
        if request.params.get("renavam"):
            body["renavam"] = request.params["renavam"]
        return body
    raise InvalidInputError(
        f"Helena não atende consultas do tipo {request.search_type.value}"
    )


class HelenaClient:
    """Cliente das rotas /consults."""

    def __init__(
        self,
        settings: HelenaSettings,
        executor: BackoffExecutor | None = None,
    ) -> None:
        if not settings.api_key:
            raise ValueError("HELENA_API_KEY é obrigatório para consultas Helena.")
        self._settings = settings
        self._executor = executor or BackoffExecutor(
            HttpClientConfig(
                timeout_seconds=settings.timeout_seconds,
                max_retries=settings.max_retries,
            )
        )

    async def create_consult(self, request: LookupRequest) -> str:
        """Cria o job e devolve o id (usado como protocolo)."""
        body = parse_body(
            await self._call("POST", "/consults", json=build_consult_body(request)),
            PROVIDER,
        )
        consult_id = body.get("id")
        if not consult_id:
            raise ProviderTerminalError(
                "invalid_response",
                "Provedor não retornou o identificador da consulta.",
                provider=PROVIDER,
            )
        logger.info(
            "helena_consult_created",
            extra={
                "search_type": request.search_type.value,
                "status": body.get("status"),
            },
        )
        return str(consult_id)

    async def get_consult(self, consult_id: str) -> dict[str, Any]:
        return parse_body(await self._call("GET", f"/consults/{consult_id}"), PROVIDER)

    async def get_results(self, consult_id: str) -> dict[str, Any]:
        response = await self._call("GET", f"/consults/{consult_id}/results")
        if response.status_code == 202:
            raise ConsultationNotReadyError(consult_id)
        body = parse_body(response, PROVIDER)
        if str(body.get("status", "")).lower() in ("pending", "processing", "running"):
            raise ConsultationNotReadyError(consult_id)
        return body

    async def _call(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        url = f"{self._settings.api_base_url.rstrip('/')}{path}"
        headers = {
            "Content-Type": "application/json",
            "X-Api-Key": self._settings.api_key,
        }
        try:
            response = await self._executor.request(method, url, json=json, headers=headers)
        except HttpError as exc:
            raise transient_from_http_error(exc, PROVIDER) from exc
        if response.status_code >= 400:
            raise terminal_from_status(response, PROVIDER)
        return response
