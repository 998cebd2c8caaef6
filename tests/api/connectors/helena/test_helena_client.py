"""Testes do cliente/adaptador Helena (/consults)."""

from __future__ import annotations

import httpx
import pytest

from api.connectors.helena import HelenaAdapter, HelenaClient
from api.connectors.helena.client import build_consult_body
from app.domain.canonical import FinesResult
from app.domain.lookup import LookupRequest, SearchType
from config.settings import HelenaSettings
from tests.fakes.fake_http import RecordingTransport, make_executor
from utils.errors import (
    ConsultationNotReadyError,
    InvalidInputError,
    ProviderTerminalError,
    ProviderTransientError,
)

SETTINGS = HelenaSettings(api_key="helena-key", api_base_url="https://helena.test/v1")

FINES_REQUEST = LookupRequest(
    search_type=SearchType.VEHICLE_FINES,
    query="ABC1D23",
    uf="PR",
    params={"renavam": "00123456789"},
)


def _adapter(transport: RecordingTransport, search_type: SearchType = SearchType.VEHICLE_FINES) -> HelenaAdapter:
    return HelenaAdapter(search_type, HelenaClient(SETTINGS, executor=make_executor(transport)))


class TestBuildConsultBody:
    """Corpo de POST /consults por tipo."""

    def test_vehicle_fines_body(self) -> None:
        assert build_consult_body(FINES_REQUEST) == {
            "plate": "ABC1D23",
            "state": "PR",
            "renavam": "00123456789",
        }

    def test_driver_cpf_body(self) -> None:
        request = LookupRequest(search_type=SearchType.DRIVER_CPF, query="12345678909")
        assert build_consult_body(request) == {"driver_cpf": "12345678909"}

    def test_unsupported_type(self) -> None:
        request = LookupRequest(search_type=SearchType.CNH, query="12345678901")
        with pytest.raises(InvalidInputError):
            build_consult_body(request)


class TestHelenaAdapter:
    """Fluxo assíncrono: id do job vira protocolo."""

    @pytest.mark.asyncio
    async def test_lookup_returns_consult_id_as_protocol(self) -> None:
        transport = RecordingTransport(
            lambda request: httpx.Response(201, json={"id": "c-77", "status": "pending"})
        )

        lookup = await _adapter(transport).lookup(FINES_REQUEST)

        assert lookup.protocol == "c-77"
        sent = transport.requests[0]
        assert sent.url.path == "/v1/consults"
        assert sent.headers["X-Api-Key"] == "helena-key"

    @pytest.mark.asyncio
    async def test_lookup_without_id_is_invalid_response(self) -> None:
        transport = RecordingTransport(lambda request: httpx.Response(201, json={"status": "pending"}))
        with pytest.raises(ProviderTerminalError) as exc_info:
            await _adapter(transport).lookup(FINES_REQUEST)
        assert exc_info.value.code == "invalid_response"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "expected"),
        [("done", "completed"), ("canceled", "failed"), ("processing", "running"), ("", "running")],
    )
    async def test_check_status(self, status: str, expected: str) -> None:
        transport = RecordingTransport(lambda request: httpx.Response(200, json={"status": status}))
        assert await _adapter(transport).check_status("c-77") == expected

    @pytest.mark.asyncio
    async def test_results_202_is_not_ready(self) -> None:
        transport = RecordingTransport(lambda request: httpx.Response(202, json={}))
        with pytest.raises(ConsultationNotReadyError):
            await _adapter(transport).fetch_result("c-77")

    @pytest.mark.asyncio
    async def test_results_processing_is_not_ready(self) -> None:
        transport = RecordingTransport(lambda request: httpx.Response(200, json={"status": "processing"}))
        with pytest.raises(ConsultationNotReadyError):
            await _adapter(transport).fetch_result("c-77")

    @pytest.mark.asyncio
    async def test_results_are_normalized(self) -> None:
        payload = {
            "vehicle": {"plate": "ABC1D23"},
            "fines": [{"value": "130,16", "points": 4}, {"valor": 50, "pontos": "3"}],
        }
        transport = RecordingTransport(lambda request: httpx.Response(200, json=payload))
        adapter = _adapter(transport)

        raw = await adapter.fetch_result("c-77")
        result = adapter.normalize(raw)

        assert transport.requests[0].url.path == "/v1/consults/c-77/results"
        assert isinstance(result, FinesResult)
        assert result.total_fines == 2
        assert str(result.total_value) == "180.16"
        assert result.total_points == 7

    @pytest.mark.asyncio
    async def test_http_404_is_not_found(self) -> None:
        transport = RecordingTransport(lambda request: httpx.Response(404))
        with pytest.raises(ProviderTerminalError) as exc_info:
            await _adapter(transport).check_status("c-404")
        assert exc_info.value.code == "not_found"

    @pytest.mark.asyncio
    async def test_http_429_exhausted_is_rate_limited(self) -> None:
        transport = RecordingTransport(lambda request: httpx.Response(429))
        with pytest.raises(ProviderTransientError) as exc_info:
            await _adapter(transport).lookup(FINES_REQUEST)
        assert exc_info.value.code == "rate_limited"

    def test_requires_api_key(self) -> None:
        with pytest.raises(ValueError):
            HelenaClient(HelenaSettings())
