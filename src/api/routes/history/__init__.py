"""Rotas do histórico de consultas."""

from api.routes.history.router import router

__all__ = ["router"]
