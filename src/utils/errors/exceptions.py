"""Exceções de domínio do núcleo de consultas.

Hierarquia única para que rotas, orquestrador e coordenador de polling
tratem falhas por categoria, nunca por mensagem.
"""

from __future__ import annotations


class ConsultaError(Exception):
    """Base de todas as falhas do núcleo de consultas."""


class InvalidInputError(ConsultaError):
    """Requisição canônica malformada; rejeitada antes de qualquer chamada externa."""


class UnauthorizedError(ConsultaError):
    """Contexto de autenticação ausente ou inválido."""


class ProviderError(ConsultaError):
    """Erro tipado retornado (ou inferido) de um provedor externo.

    Attributes:
        code: Código estável (ex: "not_found", "rate_limited")
        message: Mensagem legível para o usuário final
        transient: True se o erro é transitório (caller pode tentar de novo)
        provider: Provedor que originou o erro
    """

    def __init__(
        self,
        code: str,
        message: str,
        *,
        transient: bool = False,
        provider: str = "",
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.transient = transient
        self.provider = provider

    def to_dict(self) -> dict[str, object]:
        """Representação serializável (sem PII)."""
        return {
            "code": self.code,
            "message": self.message,
            "transient": self.transient,
            "provider": self.provider,
        }


class ProviderTransientError(ProviderError):
    """Falha de rede, timeout, 5xx ou 429 após esgotar retries."""

    def __init__(self, code: str, message: str, *, provider: str = "") -> None:
        super().__init__(code, message, transient=True, provider=provider)


class ProviderTerminalError(ProviderError):
    """Código de erro explícito do provedor; nunca retentado."""

    def __init__(self, code: str, message: str, *, provider: str = "") -> None:
        super().__init__(code, message, transient=False, provider=provider)


class LookupTimeoutError(ConsultaError):
    """Polling excedeu a duração máxima sem estado terminal.

    A consulta ainda pode ser concluída no provedor.
    """

    def __init__(self, request_id: str, message: str = "Consulta ainda em processamento") -> None:
        super().__init__(message)
        self.request_id = request_id


class DeliveryFailureError(ConsultaError):
    """Entrega de webhook falhou após esgotar o orçamento de retries."""

    def __init__(
        self,
        webhook_id: str,
        message: str,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.webhook_id = webhook_id
        self.status_code = status_code


class ConsultationNotFoundError(ConsultaError):
    """ConsultationRequest inexistente."""


class HistoryEntryNotFoundError(ConsultaError):
    """SearchHistoryEntry inexistente."""


class WebhookNotFoundError(ConsultaError):
    """Webhook inexistente."""


class InvalidTransitionError(ConsultaError):
    """Transição de estado rejeitada pela FSM."""


class ConsultationNotReadyError(ConsultaError):
    """Provedor ainda não disponibilizou o resultado final."""


class ResultAlreadyExistsError(ConsultaError):
    """Tentativa de gravar um segundo ConsultationResult."""


class InfrastructureError(RuntimeError):
    """Base para falhas de infraestrutura transitórias."""


class FirestoreUnavailableError(InfrastructureError):
    """Falha de indisponibilidade ao acessar Firestore."""
