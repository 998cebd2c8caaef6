"""Testes do cliente/adaptador Infosimples (códigos de retorno e protocolo)."""

from __future__ import annotations

import httpx
import pytest

from api.connectors.infosimples import InfosimplesAdapter, InfosimplesClient
from api.connectors.infosimples.errors import error_for_body
from api.connectors.infosimples.params import build_params, check_required_params, endpoint_for
from app.domain.canonical import VehicleResult
from app.domain.lookup import LookupRequest, SearchType
from config.settings import InfosimplesSettings
from tests.fakes.fake_http import RecordingTransport, make_executor
from utils.errors import (
    ConsultationNotReadyError,
    InvalidInputError,
    ProviderTerminalError,
    ProviderTransientError,
)

SETTINGS = InfosimplesSettings(api_token="tok-secret", api_base_url="https://infosimples.test/api/v2")


def _plate_request(uf: str = "SP") -> LookupRequest:
    return LookupRequest(search_type=SearchType.PLATE, query="ABC1D23", uf=uf)


def _client(transport: RecordingTransport) -> InfosimplesClient:
    return InfosimplesClient(SETTINGS, executor=make_executor(transport))


class TestInfosimplesCodes:
    """Mapeamento do campo `code` do corpo."""

    @pytest.mark.parametrize(
        ("code", "canonical", "transient"),
        [
            (601, "invalid_credentials", False),
            (605, "timeout", True),
            (612, "not_found", False),
            (618, "rate_limited", True),
        ],
    )
    def test_known_codes(self, code: int, canonical: str, transient: bool) -> None:
        error = error_for_body({"code": code})
        assert error is not None
        assert error.code == canonical
        assert error.transient is transient
        assert error.provider == "infosimples"

    def test_success_codes_have_no_error(self) -> None:
        assert error_for_body({"code": 200}) is None
        assert error_for_body({"code": 201}) is None
        assert error_for_body({}) is None

    def test_unknown_code_is_terminal_with_detail(self) -> None:
        error = error_for_body({"code": 999, "code_message": "Falha no DETRAN"})
        assert isinstance(error, ProviderTerminalError)
        assert error.code == "provider_error"
        assert "Falha no DETRAN" in error.message


class TestInfosimplesParams:
    """Endpoint e parâmetros por UF."""

    def test_endpoint_uses_lowercase_uf(self) -> None:
        assert endpoint_for(_plate_request("RJ")) == "consultas/detran/rj/veiculo"

    def test_driver_cpf_is_not_served(self) -> None:
        request = LookupRequest(search_type=SearchType.DRIVER_CPF, query="12345678909")
        with pytest.raises(InvalidInputError):
            endpoint_for(request)

    def test_sp_cnh_requires_birth_date(self) -> None:
        request = LookupRequest(search_type=SearchType.CNH, query="12345678901", uf="SP")
        with pytest.raises(InvalidInputError, match="data_nascimento"):
            check_required_params(request)

    def test_rj_plate_includes_chassi(self) -> None:
        request = LookupRequest(
            search_type=SearchType.PLATE,
            query="ABC1D23",
            uf="RJ",
            params={"chassi": "9BWZZZ377VT004251"},
        )
        assert build_params(request) == {"placa": "ABC1D23", "chassi": "9BWZZZ377VT004251"}


class TestInfosimplesClient:
    """Chamadas HTTP via BackoffExecutor."""

    @pytest.mark.asyncio
    async def test_submit_sends_token_in_body(self) -> None:
        transport = RecordingTransport(
            lambda request: httpx.Response(200, json={"code": 200, "data": [{"placa": "ABC1D23"}]})
        )
        body = await _client(transport).submit(_plate_request())

        assert body["code"] == 200
        sent = transport.requests[0]
        assert sent.method == "POST"
        assert sent.url.path == "/api/v2/consultas/detran/sp/veiculo"
        assert transport.last_json == {"placa": "ABC1D23", "token": "tok-secret"}

    @pytest.mark.asyncio
    async def test_error_code_raises_provider_error(self) -> None:
        transport = RecordingTransport(lambda request: httpx.Response(200, json={"code": 612}))
        with pytest.raises(ProviderTerminalError) as exc_info:
            await _client(transport).submit(_plate_request())
        assert exc_info.value.code == "not_found"

    @pytest.mark.asyncio
    async def test_exhausted_5xx_is_transient(self) -> None:
        transport = RecordingTransport(lambda request: httpx.Response(503))
        with pytest.raises(ProviderTransientError) as exc_info:
            await _client(transport).status("P-1")
        assert exc_info.value.code == "provider_unavailable"

    @pytest.mark.asyncio
    async def test_http_401_is_invalid_credentials(self) -> None:
        transport = RecordingTransport(lambda request: httpx.Response(401))
        with pytest.raises(ProviderTerminalError) as exc_info:
            await _client(transport).result("P-1")
        assert exc_info.value.code == "invalid_credentials"

    @pytest.mark.asyncio
    async def test_non_json_body_is_invalid_response(self) -> None:
        transport = RecordingTransport(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(ProviderTerminalError) as exc_info:
            await _client(transport).status("P-1")
        assert exc_info.value.code == "invalid_response"

    def test_requires_token(self) -> None:
        with pytest.raises(ValueError):
            InfosimplesClient(InfosimplesSettings(api_token=""))

    def test_timeout_is_total_budget_across_retries(self) -> None:
        client = InfosimplesClient(SETTINGS)
        config = client._executor.config
        assert config.total_timeout_seconds == SETTINGS.timeout_seconds == 600.0
        assert config.max_retries == 3


class TestInfosimplesAdapter:
    """Resposta síncrona vs. fila com protocolo."""

    @pytest.mark.asyncio
    async def test_sync_response_has_no_protocol(self) -> None:
        transport = RecordingTransport(
            lambda request: httpx.Response(
                200, json={"code": 200, "data": [{"placa": "ABC1D23", "modelo": "GOL"}]}
            )
        )
        adapter = InfosimplesAdapter(SearchType.PLATE, _client(transport))

        lookup = await adapter.lookup(_plate_request())

        assert lookup.is_sync
        result = adapter.normalize(lookup.raw_payload)
        assert isinstance(result, VehicleResult)
        assert result.model == "GOL"

    @pytest.mark.asyncio
    async def test_queued_response_returns_protocol(self) -> None:
        transport = RecordingTransport(
            lambda request: httpx.Response(201, json={"code": 201, "protocolo": "INF-42"})
        )
        adapter = InfosimplesAdapter(SearchType.PLATE, _client(transport))

        lookup = await adapter.lookup(_plate_request())

        assert lookup.protocol == "INF-42"

    @pytest.mark.asyncio
    async def test_queued_without_protocol_is_invalid_response(self) -> None:
        transport = RecordingTransport(lambda request: httpx.Response(201, json={"code": 201}))
        adapter = InfosimplesAdapter(SearchType.PLATE, _client(transport))

        with pytest.raises(ProviderTerminalError, match="protocolo"):
            await adapter.lookup(_plate_request())

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("situacao", "expected"),
        [("concluido", "completed"), ("erro", "failed"), ("processando", "running")],
    )
    async def test_check_status(self, situacao: str, expected: str) -> None:
        transport = RecordingTransport(
            lambda request: httpx.Response(200, json={"code": 200, "data": [{"situacao": situacao}]})
        )
        adapter = InfosimplesAdapter(SearchType.PLATE, _client(transport))

        assert await adapter.check_status("INF-42") == expected
        assert transport.requests[0].url.params["protocolo"] == "INF-42"

    @pytest.mark.asyncio
    async def test_fetch_result_still_queued_is_not_ready(self) -> None:
        transport = RecordingTransport(lambda request: httpx.Response(200, json={"code": 201}))
        adapter = InfosimplesAdapter(SearchType.PLATE, _client(transport))

        with pytest.raises(ConsultationNotReadyError):
            await adapter.fetch_result("INF-42")

    def test_rejects_unsupported_search_type(self) -> None:
        with pytest.raises(ValueError):
            InfosimplesAdapter(SearchType.DRIVER_CPF, _client(RecordingTransport(lambda r: httpx.Response(200))))
