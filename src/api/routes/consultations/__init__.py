"""Rotas de consultas externas."""

from api.routes.consultations.router import router

__all__ = ["router"]
