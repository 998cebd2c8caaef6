"""Middleware de correlation_id (header X-Correlation-Id)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.observability import (
    CORRELATION_ID_HEADER,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from fastapi import Request, Response


async def correlation_id_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Propaga ou gera o correlation_id e o devolve no response."""
    token = set_correlation_id(request.headers.get(CORRELATION_ID_HEADER))
    try:
        response = await call_next(request)
        response.headers[CORRELATION_ID_HEADER] = get_correlation_id()
        return response
    finally:
        reset_correlation_id(token)
