"""Webhook de saída: configuração, catálogo de eventos e resultados de entrega."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _utcnow() -> datetime:
    return datetime.now(UTC)


class WebhookEvent(StrEnum):
    FINE_CREATED = "fine.created"
    FINE_UPDATED = "fine.updated"
    FINE_DELETED = "fine.deleted"
    PROCESS_CREATED = "process.created"
    PROCESS_UPDATED = "process.updated"
    PROCESS_STATUS_CHANGED = "process.status_changed"
    CLIENT_CREATED = "client.created"
    CLIENT_UPDATED = "client.updated"
    VEHICLE_CREATED = "vehicle.created"
    VEHICLE_UPDATED = "vehicle.updated"
    SEARCH_COMPLETED = "search.completed"


EVENT_DESCRIPTIONS: dict[WebhookEvent, str] = {
    WebhookEvent.FINE_CREATED: "Multa cadastrada",
    WebhookEvent.FINE_UPDATED: "Multa atualizada",
    WebhookEvent.FINE_DELETED: "Multa removida",
    WebhookEvent.PROCESS_CREATED: "Processo criado",
    WebhookEvent.PROCESS_UPDATED: "Processo atualizado",
    WebhookEvent.PROCESS_STATUS_CHANGED: "Status do processo alterado",
    WebhookEvent.CLIENT_CREATED: "Cliente cadastrado",
    WebhookEvent.CLIENT_UPDATED: "Cliente atualizado",
    WebhookEvent.VEHICLE_CREATED: "Veículo cadastrado",
    WebhookEvent.VEHICLE_UPDATED: "Veículo atualizado",
    WebhookEvent.SEARCH_COMPLETED: "Consulta externa concluída",
}

TEST_EVENT = "test_event"


def _validate_url(value: str) -> str:
    value = value.strip()
    if not value.startswith(("http://", "https://")):
        raise ValueError("url deve começar com http:// ou https://")
    return value


def _validate_events(values: list[str]) -> list[str]:
    catalogue = {event.value for event in WebhookEvent}
    unknown = [value for value in values if value not in catalogue]
    if unknown:
        raise ValueError(f"eventos desconhecidos: {', '.join(sorted(unknown))}")
    # Preserva a ordem, sem duplicatas
    return list(dict.fromkeys(values))


class Webhook(BaseModel):
    """Assinante de eventos.

    fail_count volta a 0 em qualquer entrega bem-sucedida e só cresce
    entre sucessos. Os dois campos de entrega são escritos apenas pelo
    WebhookDispatcher.
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    name: str
    url: str
    events: list[str] = Field(default_factory=list)
    headers: dict[str, str] = Field(default_factory=dict)
    enabled: bool = True
    last_triggered_at: datetime | None = None
    fail_count: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=_utcnow)

    def subscribes_to(self, event_type: str) -> bool:
        return self.enabled and event_type in self.events

    def is_unhealthy(self, threshold: int) -> bool:
        return self.fail_count >= threshold


class WebhookCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=120)
    url: str
    events: list[str] = Field(min_length=1)
    headers: dict[str, str] = Field(default_factory=dict)
    enabled: bool = True

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        return _validate_url(value)

    @field_validator("events")
    @classmethod
    def validate_events(cls, value: list[str]) -> list[str]:
        return _validate_events(value)


class WebhookUpdate(BaseModel):
    """Atualização parcial; fail_count/last_triggered_at não são editáveis."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=120)
    url: str | None = None
    events: list[str] | None = Field(default=None, min_length=1)
    headers: dict[str, str] | None = None
    enabled: bool | None = None

    @field_validator("url")
    @classmethod
    def validate_url(cls, value: str | None) -> str | None:
        return None if value is None else _validate_url(value)

    @field_validator("events")
    @classmethod
    def validate_events(cls, value: list[str] | None) -> list[str] | None:
        return None if value is None else _validate_events(value)


class DeliveryResult(BaseModel):
    """Desfecho explícito de uma entrega."""

    model_config = ConfigDict(frozen=True)

    webhook_id: str
    success: bool
    status_code: int | None = None
    error: str | None = None
    latency_ms: float | None = None


class DispatchReport(BaseModel):
    event_type: str
    results: list[DeliveryResult] = Field(default_factory=list)

    @property
    def delivered(self) -> int:
        return sum(1 for result in self.results if result.success)

    @property
    def failed(self) -> int:
        return sum(1 for result in self.results if not result.success)
