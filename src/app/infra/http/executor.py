"""Executor HTTP com timeout, retry e backoff exponencial.

Única porta de saída HTTP do serviço: provedores de consulta e entregas
de webhook passam por aqui.

Classes transitórias (re-tentadas): 429, 5xx, timeout, erro de conexão.
Qualquer outro 4xx volta imediatamente ao chamador como resposta.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import Any, Literal

import httpx

logger = logging.getLogger(__name__)

HttpErrorKind = Literal["status", "timeout", "network"]

Sleep = Callable[[float], Awaitable[None]]


@dataclass
class HttpClientConfig:
    """Configuração do executor HTTP."""

    timeout_seconds: float = 30.0
    max_retries: int = 3
    backoff_base_seconds: float = 1.0
    backoff_max_seconds: float = 30.0
    # Orçamento somado de tentativas e esperas; None = só o timeout por tentativa
    total_timeout_seconds: float | None = None
    default_headers: dict[str, str] = field(default_factory=dict)
    verify_ssl: bool = True


class HttpError(Exception):
    """Erro de requisição HTTP sem dados sensíveis.

    Attributes:
        status_code: Status da resposta (None para timeout/rede)
        is_retryable: Se a falha pertence a uma classe transitória
        kind: status | timeout | network
        retry_after: Atraso sugerido pelo servidor (segundos), quando houver
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        is_retryable: bool = False,
        *,
        kind: HttpErrorKind = "status",
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.is_retryable = is_retryable
        self.kind = kind
        self.retry_after = retry_after


class BackoffExecutor:
    """Executa httpx.Request com timeout por tentativa e retry com backoff.

    Args:
        config: HttpClientConfig (timeout, retries, backoff, headers padrão)
        client: httpx.AsyncClient compartilhado; se None, abre um por tentativa
        sleep: Função de espera (substituível em testes)
        clock: Relógio monotônico usado pelo orçamento total
    """

    def __init__(
        self,
        config: HttpClientConfig | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        sleep: Sleep | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config or HttpClientConfig()
        self._client = client
        self._sleep = sleep or asyncio.sleep
        self._clock = clock

    @property
    def config(self) -> HttpClientConfig:
        return self._config

    def build_request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Request:
        """Monta a requisição aplicando os headers padrão."""
        merged_headers = {**self._config.default_headers, **(headers or {})}
        return httpx.Request(
            method,
            url,
            params=params,
            json=json,
            headers=merged_headers,
        )

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
        max_retries: int | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        request = self.build_request(
            method, url, params=params, json=json, headers=headers
        )
        return await self.execute(request, max_retries=max_retries, timeout=timeout)

    async def execute(
        self,
        request: httpx.Request,
        *,
        max_retries: int | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Executa a requisição com retry nas classes transitórias.

        Args:
            request: Requisição pronta para envio
            max_retries: Tentativas extras (usa config se None)
            timeout: Timeout por tentativa em segundos (usa config se None)

        Com total_timeout_seconds, cada tentativa usa no máximo o que resta do
        orçamento e nenhuma nova tentativa começa depois que ele acaba.

        Returns:
            Resposta 2xx/3xx ou 4xx não-429

        Raises:
            HttpError: Falha transitória após esgotar os retries
        """
        retries = self._config.max_retries if max_retries is None else max_retries
        attempt_timeout = self._config.timeout_seconds if timeout is None else timeout
        total = self._config.total_timeout_seconds
        deadline = None if total is None else self._clock() + total
        last_error: HttpError | None = None
        attempts = 0

        for attempt in range(retries + 1):
            budget = attempt_timeout
            if deadline is not None:
                budget = min(budget, deadline - self._clock())
                if budget <= 0:
                    break
            attempts += 1
            started = time.perf_counter()
            try:
                response = await asyncio.wait_for(
                    self._send(request), timeout=budget
                )
            except (TimeoutError, httpx.TimeoutException) as exc:
                last_error = HttpError(
                    "http_timeout", is_retryable=True, kind="timeout"
                )
                last_error.__cause__ = exc
            except httpx.TransportError as exc:
                last_error = HttpError(
                    "http_connection_error", is_retryable=True, kind="network"
                )
                last_error.__cause__ = exc
            else:
                if not _is_transient_status(response.status_code):
                    logger.debug(
                        "http_request_completed",
                        extra={
                            "method": request.method,
                            "host": request.url.host,
                            "status_code": response.status_code,
                            "attempt": attempt + 1,
                            "elapsed_ms": round(
                                (time.perf_counter() - started) * 1000, 2
                            ),
                        },
                    )
                    return response
                last_error = HttpError(
                    "http_retryable_status",
                    status_code=response.status_code,
                    is_retryable=True,
                    retry_after=(
                        parse_retry_after(response.headers.get("Retry-After"))
                        if response.status_code == 429
                        else None
                    ),
                )

            if attempt >= retries:
                break
            if deadline is not None and self._clock() >= deadline:
                break
            await self._backoff_sleep(attempt, last_error, request, deadline)

        if last_error is None:
            last_error = HttpError("http_retry_exhausted", is_retryable=True)
        logger.warning(
            "http_retry_exhausted",
            extra={
                "method": request.method,
                "host": request.url.host,
                "status_code": last_error.status_code,
                "error_kind": last_error.kind,
                "attempts": attempts,
            },
        )
        raise last_error

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    async def _send(self, request: httpx.Request) -> httpx.Response:
        if self._client is not None:
            return await self._client.send(request)
        async with httpx.AsyncClient(verify=self._config.verify_ssl) as client:
            response = await client.send(request)
            await response.aread()
            return response

    async def _backoff_sleep(
        self,
        attempt: int,
        error: HttpError,
        request: httpx.Request,
        deadline: float | None = None,
    ) -> None:
        backoff = compute_backoff(
            attempt,
            self._config.backoff_base_seconds,
            self._config.backoff_max_seconds,
            retry_after=error.retry_after,
        )
        if deadline is not None:
            backoff = min(backoff, max(deadline - self._clock(), 0.0))
        logger.info(
            "http_backoff",
            extra={
                "backoff_seconds": backoff,
                "attempt": attempt + 1,
                "reason": error.kind if error.status_code is None else error.status_code,
                "host": request.url.host,
            },
        )
        await self._sleep(backoff)


def compute_backoff(
    attempt: int,
    base: float,
    max_seconds: float,
    *,
    retry_after: float | None = None,
) -> float:
    """Atraso antes da próxima tentativa (Retry-After tem precedência)."""
    if retry_after is not None:
        return min(max(retry_after, 0.0), max_seconds)
    return min((2**attempt) * base, max_seconds)


def parse_retry_after(value: str | None) -> float | None:
    """Interpreta Retry-After em segundos ou HTTP-date."""
    if not value:
        return None
    value = value.strip()
    try:
        return max(float(value), 0.0)
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    return max((when - datetime.now(UTC)).total_seconds(), 0.0)


def _is_transient_status(status_code: int) -> bool:
    return status_code == 429 or status_code >= 500
