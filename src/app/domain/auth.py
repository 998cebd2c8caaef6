"""Contexto de autenticação recebido do gateway."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from utils.errors import UnauthorizedError


class AuthContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str


def require_user(auth: AuthContext | None) -> str:
    """Retorna o user_id do contexto ou levanta UnauthorizedError."""
    if auth is None or not auth.user_id.strip():
        raise UnauthorizedError("usuário não autenticado")
    return auth.user_id.strip()
