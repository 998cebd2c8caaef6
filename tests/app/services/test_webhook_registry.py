"""WebhookRegistry: CRUD administrativo e catálogo de eventos."""

from __future__ import annotations

import httpx
import pytest
from pydantic import ValidationError

from app.domain.webhook import WebhookCreate, WebhookEvent, WebhookUpdate
from app.infra.stores import MemoryWebhookStore
from app.services import WebhookDispatcher, WebhookRegistry
from config.settings import WebhookSettings
from tests.fakes.fake_http import RecordingTransport, make_executor
from utils.errors import WebhookNotFoundError


def _registry(store: MemoryWebhookStore | None = None) -> tuple[WebhookRegistry, RecordingTransport]:
    store = store or MemoryWebhookStore()
    transport = RecordingTransport(lambda request: httpx.Response(200))
    dispatcher = WebhookDispatcher(
        store,
        WebhookSettings(),
        executor=make_executor(transport),
    )
    return WebhookRegistry(store, dispatcher, fail_warning_threshold=3), transport


def _create(**overrides: object) -> WebhookCreate:
    data: dict[str, object] = {
        "name": "CRM",
        "url": "https://crm.test/hook",
        "events": ["fine.created"],
    }
    data.update(overrides)
    return WebhookCreate(**data)


class TestEventsCatalogue:
    def test_lists_every_event_with_description(self) -> None:
        events = WebhookRegistry.events()
        assert [item["event"] for item in events] == [event.value for event in WebhookEvent]
        assert all(item["description"] for item in events)


class TestValidation:
    """Entradas inválidas são rejeitadas antes de chegar ao store."""

    def test_rejects_non_http_url(self) -> None:
        with pytest.raises(ValidationError):
            _create(url="ftp://crm.test/hook")

    def test_rejects_unknown_event(self) -> None:
        with pytest.raises(ValidationError):
            _create(events=["fine.created", "fine.exploded"])

    def test_rejects_empty_events(self) -> None:
        with pytest.raises(ValidationError):
            _create(events=[])

    def test_rejects_counter_fields(self) -> None:
        with pytest.raises(ValidationError):
            _create(fail_count=3)
        with pytest.raises(ValidationError):
            WebhookUpdate(fail_count=0)

    def test_dedupes_events_preserving_order(self) -> None:
        data = _create(events=["fine.updated", "fine.created", "fine.updated"])
        assert data.events == ["fine.updated", "fine.created"]


class TestCrud:
    @pytest.mark.asyncio
    async def test_create_and_list(self) -> None:
        registry, _ = _registry()

        created = await registry.create(_create())

        assert created.fail_count == 0
        assert created.last_triggered_at is None
        assert created.enabled is True
        assert [webhook.id for webhook in await registry.list_webhooks()] == [created.id]

    @pytest.mark.asyncio
    async def test_partial_update_keeps_other_fields(self) -> None:
        registry, _ = _registry()
        created = await registry.create(_create(headers={"X-Token": "t"}))

        updated = await registry.update(created.id, WebhookUpdate(name="ERP"))

        assert updated.name == "ERP"
        assert updated.url == created.url
        assert updated.headers == {"X-Token": "t"}
        assert (await registry.get(created.id)).name == "ERP"

    @pytest.mark.asyncio
    async def test_toggle_flips_enabled(self) -> None:
        registry, _ = _registry()
        created = await registry.create(_create())

        assert (await registry.toggle(created.id)).enabled is False
        assert (await registry.toggle(created.id)).enabled is True

    @pytest.mark.asyncio
    async def test_delete(self) -> None:
        registry, _ = _registry()
        created = await registry.create(_create())

        await registry.delete(created.id)

        assert await registry.list_webhooks() == []
        with pytest.raises(WebhookNotFoundError):
            await registry.delete(created.id)

    @pytest.mark.asyncio
    async def test_unknown_id_raises_not_found(self) -> None:
        registry, _ = _registry()
        with pytest.raises(WebhookNotFoundError):
            await registry.get("missing")
        with pytest.raises(WebhookNotFoundError):
            await registry.update("missing", WebhookUpdate(enabled=False))
        with pytest.raises(WebhookNotFoundError):
            await registry.toggle("missing")

    @pytest.mark.asyncio
    async def test_test_delivery_uses_dispatcher(self) -> None:
        registry, transport = _registry()
        created = await registry.create(_create())

        result = await registry.test(created.id)

        assert result.success is True
        assert len(transport.requests) == 1
        assert str(transport.requests[0].url) == "https://crm.test/hook"

    @pytest.mark.asyncio
    async def test_is_unhealthy_uses_threshold(self) -> None:
        registry, _ = _registry()
        created = await registry.create(_create())

        assert registry.is_unhealthy(created) is False
        assert registry.is_unhealthy(created.model_copy(update={"fail_count": 3})) is True
