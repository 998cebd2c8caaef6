"""Transporte HTTP simulado (httpx.MockTransport) para conectores e webhooks."""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx

from app.infra.http import BackoffExecutor, HttpClientConfig


class RecordingTransport:
    """Responde via handler e guarda as requisições recebidas."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def last_json(self) -> dict:
        return json.loads(self.requests[-1].content)


async def _no_sleep(_: float) -> None:
    return None


def make_executor(transport: RecordingTransport, max_retries: int = 0) -> BackoffExecutor:
    client = httpx.AsyncClient(transport=httpx.MockTransport(transport))
    return BackoffExecutor(
        HttpClientConfig(max_retries=max_retries),
        client=client,
        sleep=_no_sleep,
    )
