"""Fan-out de eventos: isolamento por assinante e contadores de entrega."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

import httpx
import pytest

from app.domain.webhook import Webhook
from app.infra.stores import MemoryWebhookStore
from app.services import WebhookDispatcher
from config.settings import WebhookSettings
from tests.fakes.fake_http import RecordingTransport, make_executor

NOW = datetime(2026, 4, 1, 9, 0, tzinfo=UTC)


def _handler(failing_hosts: set[str]) -> RecordingTransport:
    def respond(request: httpx.Request) -> httpx.Response:
        if request.url.host in failing_hosts:
            return httpx.Response(500)
        return httpx.Response(204)

    return RecordingTransport(respond)


def _dispatcher(
    store: MemoryWebhookStore,
    transport: RecordingTransport,
    *,
    threshold: int = 5,
) -> WebhookDispatcher:
    return WebhookDispatcher(
        store,
        WebhookSettings(max_retries=1, fail_warning_threshold=threshold),
        executor=make_executor(transport, max_retries=1),
        clock=lambda: NOW,
    )


async def _save(store: MemoryWebhookStore, name: str, **kwargs: Any) -> Webhook:
    defaults: dict[str, Any] = {"url": f"https://{name}.test/hook", "events": ["fine.created"]}
    defaults.update(kwargs)
    webhook = Webhook(name=name, **defaults)
    await store.save(webhook)
    return webhook


def _hosts(transport: RecordingTransport) -> list[str]:
    return sorted(request.url.host for request in transport.requests)


class TestTrigger:
    """trigger(event_type, payload)."""

    @pytest.mark.asyncio
    async def test_delivers_only_to_enabled_subscribers(self) -> None:
        store = MemoryWebhookStore()
        await _save(store, "alpha")
        await _save(store, "beta")
        await _save(store, "disabled", enabled=False)
        await _save(store, "other", events=["client.created"])
        transport = _handler(set())

        report = await _dispatcher(store, transport).trigger("fine.created", {"fine_id": "f-1"})

        assert _hosts(transport) == ["alpha.test", "beta.test"]
        assert report.delivered == 2
        assert report.failed == 0

    @pytest.mark.asyncio
    async def test_failure_is_isolated_and_counted(self) -> None:
        store = MemoryWebhookStore()
        good = await _save(store, "good")
        bad = await _save(store, "bad")
        transport = _handler({"bad.test"})

        report = await _dispatcher(store, transport).trigger("fine.created", {"fine_id": "f-1"})

        results = {result.webhook_id: result for result in report.results}
        assert results[good.id].success is True
        assert results[bad.id].success is False
        assert results[bad.id].status_code == 500
        # 1 tentativa + 1 retry para o endpoint com falha
        assert _hosts(transport) == ["bad.test", "bad.test", "good.test"]

        stored_good = await store.get(good.id)
        stored_bad = await store.get(bad.id)
        assert stored_good is not None and stored_bad is not None
        assert stored_good.fail_count == 0
        assert stored_bad.fail_count == 1
        assert stored_bad.last_triggered_at == NOW
        assert stored_good.last_triggered_at == NOW

    @pytest.mark.asyncio
    async def test_success_resets_fail_count(self) -> None:
        store = MemoryWebhookStore()
        webhook = await _save(store, "flaky", fail_count=3)

        await _dispatcher(store, _handler(set())).trigger("fine.created", {})

        stored = await store.get(webhook.id)
        assert stored is not None
        assert stored.fail_count == 0

    @pytest.mark.asyncio
    async def test_envelope_and_headers(self) -> None:
        store = MemoryWebhookStore()
        await _save(store, "crm", headers={"Authorization": "Bearer abc"})
        transport = _handler(set())

        await _dispatcher(store, transport).trigger("fine.created", {"fine_id": "f-1"})

        sent = transport.requests[0]
        assert sent.method == "POST"
        assert sent.headers["Content-Type"] == "application/json"
        assert sent.headers["Authorization"] == "Bearer abc"
        assert json.loads(sent.content) == {
            "event": "fine.created",
            "timestamp": NOW.isoformat(),
            "data": {"fine_id": "f-1"},
        }

    @pytest.mark.asyncio
    async def test_no_subscribers(self) -> None:
        transport = _handler(set())
        report = await _dispatcher(MemoryWebhookStore(), transport).trigger("fine.deleted", {})
        assert report.results == []
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_crash_in_one_delivery_becomes_explicit_result(self) -> None:
        class BrokenStore(MemoryWebhookStore):
            async def record_delivery(self, webhook_id: str, **kwargs: Any) -> Webhook | None:
                if webhook_id == broken.id:
                    raise RuntimeError("store offline")
                return await super().record_delivery(webhook_id, **kwargs)

        store = BrokenStore()
        ok = await _save(store, "ok")
        broken = await _save(store, "broken")

        report = await _dispatcher(store, _handler(set())).trigger("fine.created", {})

        results = {result.webhook_id: result for result in report.results}
        assert results[ok.id].success is True
        assert results[broken.id].success is False
        assert results[broken.id].error == "RuntimeError"

    @pytest.mark.asyncio
    async def test_unhealthy_webhook_is_flagged(self, caplog: pytest.LogCaptureFixture) -> None:
        store = MemoryWebhookStore()
        await _save(store, "down", fail_count=1)

        with caplog.at_level(logging.WARNING, logger="app.services.webhook_dispatcher"):
            await _dispatcher(store, _handler({"down.test"}), threshold=2).trigger("fine.created", {})

        assert any(record.getMessage() == "webhook_unhealthy" for record in caplog.records)


class TestDeliveryTest:
    """test(webhook): uma tentativa, sem contadores."""

    @pytest.mark.asyncio
    async def test_single_attempt_without_counters(self) -> None:
        store = MemoryWebhookStore()
        webhook = await _save(store, "target", fail_count=2)
        transport = _handler({"target.test"})

        result = await _dispatcher(store, transport).test(webhook)

        assert result.success is False
        assert len(transport.requests) == 1
        body = json.loads(transport.requests[0].content)
        assert body["event"] == "test_event"
        assert "message" in body["data"]
        stored = await store.get(webhook.id)
        assert stored is not None
        assert stored.fail_count == 2
        assert stored.last_triggered_at is None

    @pytest.mark.asyncio
    async def test_successful_test_delivery(self) -> None:
        store = MemoryWebhookStore()
        webhook = await _save(store, "target")

        result = await _dispatcher(store, _handler(set())).test(webhook)

        assert result.success is True
        assert result.status_code == 204
        assert result.webhook_id == webhook.id
