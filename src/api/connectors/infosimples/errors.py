"""Códigos de retorno da API Infosimples v2 (campo `code` do corpo)."""

from __future__ import annotations

from typing import Any

from utils.errors import ProviderError, ProviderTerminalError, ProviderTransientError

PROVIDER = "infosimples"

CODE_OK = 200
CODE_QUEUED = 201

# code → (código canônico, mensagem, transitório)
_ERROR_CODES: dict[int, tuple[str, str, bool]] = {
    601: (
        "invalid_credentials",
        "Autenticação falhou. Verifique seu token de API.",
        False,
    ),
    605: (
        "timeout",
        "Tempo limite excedido. A consulta demorou muito para ser processada.",
        True,
    ),
    612: (
        "not_found",
        "Registro não encontrado com os parâmetros fornecidos.",
        False,
    ),
    618: (
        "rate_limited",
        "Limite de requisições excedido. Tente novamente mais tarde.",
        True,
    ),
}


def body_code(body: dict[str, Any]) -> int:
    try:
        return int(body.get("code", CODE_OK))
    except (TypeError, ValueError):
        return 0


def error_for_body(body: dict[str, Any]) -> ProviderError | None:
    """Retorna o ProviderError correspondente ao `code`, ou None se OK."""
    code = body_code(body)
    if code in (CODE_OK, CODE_QUEUED):
        return None

    known = _ERROR_CODES.get(code)
    if known is not None:
        canonical, message, transient = known
        if transient:
            return ProviderTransientError(canonical, message, provider=PROVIDER)
        return ProviderTerminalError(canonical, message, provider=PROVIDER)

    detail = body.get("code_message") or body.get("message") or "erro desconhecido"
    return ProviderTerminalError(
        "provider_error",
        f"Erro {code}: {detail}",
        provider=PROVIDER,
    )
