"""Cliente HTTP da API Infosimples v2.

Toda chamada passa pelo BackoffExecutor. O token vai no corpo (POST) ou
na query string (GET), nunca em logs.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from api.connectors.infosimples.errors import PROVIDER, error_for_body
from api.connectors.infosimples.params import (
    RESULT_ENDPOINT,
    STATUS_ENDPOINT,
    build_params,
    endpoint_for,
)
from api.connectors.provider_http import (
    parse_body,
    terminal_from_status,
    transient_from_http_error,
)
from app.infra.http import BackoffExecutor, HttpClientConfig, HttpError
from utils.errors import ProviderTerminalError

if TYPE_CHECKING:
    from app.domain.lookup import LookupRequest
    from config.settings import InfosimplesSettings

logger = logging.getLogger(__name__)


class InfosimplesClient:
    """Cliente das rotas consultas/detran/*, consultas/status e consultas/resultado."""

    def __init__(
        self,
        settings: InfosimplesSettings,
        executor: BackoffExecutor | None = None,
    ) -> None:
        if not settings.api_token:
            raise ValueError(
                "INFOSIMPLES_API_TOKEN é obrigatório para consultas Infosimples."
            )
        self._settings = settings
        self._executor = executor or BackoffExecutor(
            HttpClientConfig(
                timeout_seconds=settings.timeout_seconds,
                max_retries=settings.max_retries,
                total_timeout_seconds=settings.timeout_seconds,
                default_headers={"Content-Type": "application/json"},
            )
        )

    async def submit(self, request: LookupRequest) -> dict[str, Any]:
        """Submete a consulta; devolve o corpo já validado (code 200/201)."""
        body = await self._call(
            "POST",
            endpoint_for(request),
            json={**build_params(request), "token": self._settings.api_token},
        )
        logger.info(
            "infosimples_lookup_submitted",
            extra={
                "search_type": request.search_type.value,
                "uf": request.uf,
                "code": body.get("code"),
                "has_protocol": bool(body.get("protocolo")),
            },
        )
        return body

    async def status(self, protocol: str) -> dict[str, Any]:
        return await self._call(
            "GET",
            STATUS_ENDPOINT,
            params={"protocolo": protocol, "token": self._settings.api_token},
        )

    async def result(self, protocol: str) -> dict[str, Any]:
        return await self._call(
            "GET",
            RESULT_ENDPOINT,
            params={"protocolo": protocol, "token": self._settings.api_token},
        )

    async def _call(
        self,
        method: str,
        endpoint: str,
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        url = f"{self._settings.api_base_url.rstrip('/')}/{endpoint}"
        try:
            response = await self._executor.request(method, url, params=params, json=json)
        except HttpError as exc:
            raise transient_from_http_error(exc, PROVIDER) from exc

        if response.status_code >= 400:
            raise terminal_from_status(response, PROVIDER)

        body = parse_body(response, PROVIDER)
        error = error_for_body(body)
        if error is not None:
            logger.warning(
                "infosimples_error_code",
                extra={
                    "endpoint": endpoint.split("?")[0],
                    "code": body.get("code"),
                    "error_code": error.code,
                    "transient": error.transient,
                },
            )
            raise error
        return body


def require_protocol(body: dict[str, Any]) -> str:
    protocol = body.get("protocolo") or body.get("protocol")
    if not protocol:
        raise ProviderTerminalError(
            "invalid_response",
            "Provedor aceitou a consulta sem informar protocolo.",
            provider=PROVIDER,
        )
    return str(protocol)
