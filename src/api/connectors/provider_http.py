"""Mapeamento HTTP → ProviderError comum aos conectores de consulta.

O BackoffExecutor já re-tentou as classes transitórias; aqui só
classificamos o que sobrou.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from utils.errors import ProviderTerminalError, ProviderTransientError

if TYPE_CHECKING:
    import httpx

    from app.infra.http import HttpError

logger = logging.getLogger(__name__)


def transient_from_http_error(exc: HttpError, provider: str) -> ProviderTransientError:
    """Converte falha transitória esgotada em ProviderTransientError."""
    if exc.status_code == 429:
        code, message = "rate_limited", "Limite de requisições excedido. Tente novamente mais tarde."
    elif exc.kind == "timeout":
        code, message = "timeout", "Tempo limite excedido ao consultar o provedor."
    elif exc.kind == "network":
        code, message = "network_error", "Falha de conexão com o provedor."
    else:
        code, message = "provider_unavailable", "Provedor indisponível no momento."
    logger.warning(
        "provider_transient_error",
        extra={
            "provider": provider,
            "error_code": code,
            "status_code": exc.status_code,
        },
    )
    return ProviderTransientError(code, message, provider=provider)


def terminal_from_status(response: httpx.Response, provider: str) -> ProviderTerminalError:
    """Classifica 4xx (não-429) como erro terminal do provedor."""
    status = response.status_code
    if status in (401, 403):
        code, message = "invalid_credentials", "Autenticação falhou. Verifique a credencial do provedor."
    elif status == 404:
        code, message = "not_found", "Registro não encontrado com os parâmetros fornecidos."
    else:
        body = _safe_json(response)
        detail = body.get("message") or body.get("error") if isinstance(body, dict) else None
        code = "provider_rejected"
        message = str(detail) if detail else f"Provedor rejeitou a consulta (HTTP {status})."
    logger.warning(
        "provider_terminal_error",
        extra={"provider": provider, "error_code": code, "status_code": status},
    )
    return ProviderTerminalError(code, message, provider=provider)


def parse_body(response: httpx.Response, provider: str) -> dict[str, Any]:
    """Decodifica o JSON da resposta; corpo inválido é erro terminal."""
    body = _safe_json(response)
    if not isinstance(body, dict):
        logger.error(
            "provider_invalid_response",
            extra={"provider": provider, "status_code": response.status_code},
        )
        raise ProviderTerminalError(
            "invalid_response",
            "Resposta inválida do provedor.",
            provider=provider,
        )
    return body


def _safe_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except (json.JSONDecodeError, ValueError):
        return None
