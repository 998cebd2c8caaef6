"""Dependências compartilhadas pelas rotas (FastAPI Depends)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, Request

from app.bootstrap.dependencies import ServiceContainer
from app.domain.auth import AuthContext, require_user

USER_ID_HEADER = "X-User-Id"


def get_services(request: Request) -> ServiceContainer:
    """Container criado no lifespan e guardado em app.state."""
    return request.app.state.container


def get_auth(
    x_user_id: Annotated[str | None, Header(alias=USER_ID_HEADER)] = None,
) -> AuthContext:
    """Usuário autenticado repassado pelo gateway; ausente → 401."""
    context = AuthContext(user_id=x_user_id or "")
    require_user(context)
    return context


Services = Annotated[ServiceContainer, Depends(get_services)]
Auth = Annotated[AuthContext, Depends(get_auth)]
