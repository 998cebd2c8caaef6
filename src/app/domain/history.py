"""SearchHistoryEntry: trilha de auditoria de consultas."""

from __future__ import annotations

import math
import uuid
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.domain.lookup import SearchType


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ResultSnapshot(BaseModel):
    """Cópia do desfecho no momento da escrita."""

    model_config = ConfigDict(frozen=True)

    success: bool
    data: dict[str, Any] | None = None
    error: dict[str, Any] | None = None
    degraded: bool = False


class SearchHistoryEntry(BaseModel):
    """Registro write-once; só os back-links podem mudar depois."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    user_id: str
    search_type: SearchType
    search_query: str
    uf: str = ""
    provider_source: str
    request_id: str | None = None
    result_snapshot: ResultSnapshot
    related_client_id: str | None = None
    related_vehicle_id: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)


class HistoryFilters(BaseModel):
    model_config = ConfigDict(frozen=True)

    search_type: SearchType | None = None
    uf: str | None = None
    related_client_id: str | None = None
    related_vehicle_id: str | None = None

    def matches(self, entry: SearchHistoryEntry) -> bool:
        if self.search_type is not None and entry.search_type != self.search_type:
            return False
        if self.uf and entry.uf != self.uf.upper():
            return False
        if (
            self.related_client_id is not None
            and entry.related_client_id != self.related_client_id
        ):
            return False
        if (
            self.related_vehicle_id is not None
            and entry.related_vehicle_id != self.related_vehicle_id
        ):
            return False
        return True


class PageRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class HistoryPage(BaseModel):
    items: list[SearchHistoryEntry]
    page: int
    limit: int
    total: int
    total_pages: int

    @classmethod
    def build(
        cls,
        items: list[SearchHistoryEntry],
        page: PageRequest,
        total: int,
    ) -> HistoryPage:
        return cls(
            items=items,
            page=page.page,
            limit=page.limit,
            total=total,
            total_pages=math.ceil(total / page.limit) if total else 0,
        )
