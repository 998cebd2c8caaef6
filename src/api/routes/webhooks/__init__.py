"""Rotas de webhooks e eventos."""

from api.routes.webhooks.router import events_router, router

__all__ = ["events_router", "router"]
