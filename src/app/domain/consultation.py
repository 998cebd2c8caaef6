"""ConsultationRequest, ConsultationResult e snapshots de status."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from app.domain.canonical import CanonicalResult
from app.domain.lookup import ProviderName, SearchType
from fsm.states import ConsultationStatus

ProviderJobStatus = Literal["running", "completed", "failed"]


def _utcnow() -> datetime:
    return datetime.now(UTC)


def new_request_id() -> str:
    return uuid.uuid4().hex


class ProviderErrorInfo(BaseModel):
    """Erro de provedor registrado na consulta (sem PII)."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    transient: bool = False
    provider: str = ""


class ConsultationRequest(BaseModel):
    """Uma tentativa de consulta externa.

    provider_protocol é atribuído no máximo uma vez; status só avança.
    Mutações passam pelo orquestrador via model_copy(update=...).
    """

    id: str = Field(default_factory=new_request_id)
    owner_id: str
    search_type: SearchType
    search_query: str
    uf: str = "SP"
    params: dict[str, str] = Field(default_factory=dict)
    provider: ProviderName | None = None
    provider_protocol: str | None = None
    status: ConsultationStatus = ConsultationStatus.PENDING

    error_code: str | None = None
    error_message: str | None = None
    error_transient: bool = False

    history_entry_id: str | None = None

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def error(self) -> ProviderErrorInfo | None:
        if self.error_code is None:
            return None
        return ProviderErrorInfo(
            code=self.error_code,
            message=self.error_message or "",
            transient=self.error_transient,
            provider=self.provider.value if self.provider else "",
        )


class ConsultationResult(BaseModel):
    """Resultado final de uma consulta (imutável, no máximo um por request)."""

    model_config = ConfigDict(frozen=True)

    request_id: str
    normalized_payload: CanonicalResult
    raw_provider_payload: dict[str, Any] = Field(default_factory=dict)
    provider_source: ProviderName
    degraded: bool = False
    created_at: datetime = Field(default_factory=_utcnow)


class StatusSnapshot(BaseModel):
    """Leitura do status de uma consulta.

    provider_status só é preenchido para consultas em RUNNING com protocolo;
    é o estado do job no provedor, sem efeito colateral na consulta.
    """

    model_config = ConfigDict(frozen=True)

    request_id: str
    status: ConsultationStatus
    protocol: str | None = None
    provider: ProviderName | None = None
    provider_status: ProviderJobStatus | None = None
    error: ProviderErrorInfo | None = None

    @property
    def is_ready_to_finalize(self) -> bool:
        return self.provider_status in ("completed", "failed")

    @classmethod
    def of(
        cls,
        request: ConsultationRequest,
        provider_status: ProviderJobStatus | None = None,
    ) -> StatusSnapshot:
        """Snapshot do registro persistido, sem consultar o provedor."""
        return cls(
            request_id=request.id,
            status=request.status,
            protocol=request.provider_protocol,
            provider=request.provider,
            provider_status=provider_status,
            error=request.error,
        )
