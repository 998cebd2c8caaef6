"""Endpoints de configuração de webhooks e disparo de eventos.

Endpoints:
- GET/POST /webhooks
- GET /webhooks/events: catálogo de eventos
- PATCH/DELETE /webhooks/{id}
- POST /webhooks/{id}/toggle
- POST /webhooks/{id}/test: entrega única com payload sintético
- POST /events/{event_type}: dispara evento de domínio (events_router)
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Response, status

from api.routes.dependencies import Auth, Services
from app.domain.webhook import Webhook, WebhookCreate, WebhookEvent, WebhookUpdate

router = APIRouter()
events_router = APIRouter()


def _webhook_view(webhook: Webhook, services: Services) -> dict[str, Any]:
    data = webhook.model_dump(mode="json")
    data["unhealthy"] = services.webhooks.is_unhealthy(webhook)
    return data


@router.get("")
async def list_webhooks(auth: Auth, services: Services) -> list[dict[str, Any]]:
    return [_webhook_view(webhook, services) for webhook in await services.webhooks.list_webhooks()]


@router.get("/events")
async def list_event_types(auth: Auth, services: Services) -> list[dict[str, str]]:
    return services.webhooks.events()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_webhook(body: WebhookCreate, auth: Auth, services: Services) -> dict[str, Any]:
    return _webhook_view(await services.webhooks.create(body), services)


@router.get("/{webhook_id}")
async def get_webhook(webhook_id: str, auth: Auth, services: Services) -> dict[str, Any]:
    return _webhook_view(await services.webhooks.get(webhook_id), services)


@router.patch("/{webhook_id}")
async def update_webhook(
    webhook_id: str,
    body: WebhookUpdate,
    auth: Auth,
    services: Services,
) -> dict[str, Any]:
    return _webhook_view(await services.webhooks.update(webhook_id, body), services)


@router.delete("/{webhook_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_webhook(webhook_id: str, auth: Auth, services: Services) -> Response:
    await services.webhooks.delete(webhook_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{webhook_id}/toggle")
async def toggle_webhook(webhook_id: str, auth: Auth, services: Services) -> dict[str, Any]:
    return _webhook_view(await services.webhooks.toggle(webhook_id), services)


@router.post("/{webhook_id}/test")
async def test_webhook(webhook_id: str, auth: Auth, services: Services) -> dict[str, Any]:
    result = await services.webhooks.test(webhook_id)
    return result.model_dump(mode="json")


@events_router.post("/{event_type}", status_code=status.HTTP_202_ACCEPTED)
async def trigger_event(
    event_type: WebhookEvent,
    auth: Auth,
    services: Services,
    payload: dict[str, Any] = Body(default_factory=dict),
) -> dict[str, Any]:
    report = await services.dispatcher.trigger(event_type.value, payload)
    return {
        **report.model_dump(mode="json"),
        "delivered": report.delivered,
        "failed": report.failed,
    }
