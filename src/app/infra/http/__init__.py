"""Infra HTTP: executor com retry/backoff compartilhado."""

from app.infra.http.executor import (
    BackoffExecutor,
    HttpClientConfig,
    HttpError,
    compute_backoff,
    parse_retry_after,
)

__all__ = [
    "BackoffExecutor",
    "HttpClientConfig",
    "HttpError",
    "compute_backoff",
    "parse_retry_after",
]
