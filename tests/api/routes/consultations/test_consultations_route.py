"""Endpoints /consultations: ciclo de vida e mapeamento de erros HTTP."""

from __future__ import annotations

import pytest

from app.protocols.provider_adapter import ProviderLookup
from fsm import ConsultationStatus
from tests.fakes.fake_api import OTHER_USER_HEADERS, USER_HEADERS, api_client
from tests.fakes.fake_provider_adapter import FakeProviderAdapter
from utils.errors import ConsultationNotReadyError, ProviderTerminalError, ProviderTransientError

PLATE_BODY = {"search_type": "plate", "query": "abc-1234"}
PLATE_PAYLOAD = {
    "code": 200,
    "data": [{"placa": "ABC1234", "modelo": "FIAT/UNO", "multas": []}],
}
_RATE_LIMITED = ProviderTransientError("rate_limited", "limite", provider="infosimples")


def _sync_adapter() -> FakeProviderAdapter:
    return FakeProviderAdapter(lookups=[ProviderLookup(protocol="", raw_payload=PLATE_PAYLOAD)])


class TestSubmitRoute:
    @pytest.mark.asyncio
    async def test_sync_answer_returns_completed(self) -> None:
        async with api_client(_sync_adapter()) as api:
            response = await api.client.post("/consultations", json=PLATE_BODY, headers=USER_HEADERS)

            assert response.status_code == 201
            body = response.json()
            assert body["status"] == "completed"
            assert body["provider"] == "infosimples"
            assert api.container.polling.active_count == 0

    @pytest.mark.asyncio
    async def test_async_answer_starts_polling(self) -> None:
        async with api_client(FakeProviderAdapter()) as api:
            response = await api.client.post("/consultations", json=PLATE_BODY, headers=USER_HEADERS)

            assert response.status_code == 201
            body = response.json()
            assert body["status"] == "running"
            assert body["protocol"] == "P-1"
            assert api.container.polling.active_count == 1

    @pytest.mark.asyncio
    async def test_status_check_outage_still_creates_and_tracks(self) -> None:
        adapter = FakeProviderAdapter(statuses=[_RATE_LIMITED])
        async with api_client(adapter) as api:
            response = await api.client.post("/consultations", json=PLATE_BODY, headers=USER_HEADERS)

            assert response.status_code == 201
            body = response.json()
            assert body["status"] == "running"
            assert body["protocol"] == "P-1"
            assert body["provider_status"] is None
            assert api.container.polling.active_count == 1
            assert adapter.count("lookup") == 1

    @pytest.mark.asyncio
    async def test_missing_user_header_is_401(self) -> None:
        async with api_client(_sync_adapter()) as api:
            response = await api.client.post("/consultations", json=PLATE_BODY)

            assert response.status_code == 401
            assert response.json()["error"]["code"] == "unauthorized"

    @pytest.mark.asyncio
    async def test_malformed_query_is_422(self) -> None:
        adapter = _sync_adapter()
        async with api_client(adapter) as api:
            response = await api.client.post(
                "/consultations",
                json={"search_type": "plate", "query": "12"},
                headers=USER_HEADERS,
            )

            assert response.status_code == 422
            assert response.json()["error"]["code"] == "invalid_input"
            assert adapter.count("lookup") == 0

    @pytest.mark.asyncio
    async def test_unknown_search_type_is_422(self) -> None:
        async with api_client(_sync_adapter()) as api:
            response = await api.client.post(
                "/consultations",
                json={"search_type": "boat", "query": "ABC1234"},
                headers=USER_HEADERS,
            )

            assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_terminal_failure_is_reported_in_snapshot(self) -> None:
        adapter = FakeProviderAdapter(
            lookups=[ProviderTerminalError("not_found", "Registro não encontrado", provider="infosimples")]
        )
        async with api_client(adapter) as api:
            response = await api.client.post("/consultations", json=PLATE_BODY, headers=USER_HEADERS)

            assert response.status_code == 201
            body = response.json()
            assert body["status"] == "failed"
            assert body["error"]["code"] == "not_found"

    @pytest.mark.asyncio
    async def test_demo_mode_answers_when_provider_is_down(self) -> None:
        adapter = FakeProviderAdapter(
            lookups=[ProviderTransientError("provider_unavailable", "fora do ar", provider="infosimples")]
        )
        async with api_client(adapter, demo_mode=True) as api:
            response = await api.client.post("/consultations", json=PLATE_BODY, headers=USER_HEADERS)

            assert response.json()["status"] == "completed"
            assert response.json()["provider"] == "demo"


class TestStatusRoute:
    @pytest.mark.asyncio
    async def test_other_user_gets_404(self) -> None:
        async with api_client(_sync_adapter()) as api:
            created = await api.client.post("/consultations", json=PLATE_BODY, headers=USER_HEADERS)
            request_id = created.json()["request_id"]

            own = await api.client.get(f"/consultations/{request_id}", headers=USER_HEADERS)
            other = await api.client.get(f"/consultations/{request_id}", headers=OTHER_USER_HEADERS)

            assert own.status_code == 200
            assert own.json()["status"] == "completed"
            assert other.status_code == 404
            assert other.json()["error"]["code"] == "consultation_not_found"

    @pytest.mark.asyncio
    async def test_unknown_id_is_404(self) -> None:
        async with api_client(_sync_adapter()) as api:
            response = await api.client.get("/consultations/missing", headers=USER_HEADERS)
            assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_transient_status_check_is_503(self) -> None:
        adapter = FakeProviderAdapter(statuses=[_RATE_LIMITED])
        async with api_client(adapter) as api:
            created = await api.client.post("/consultations", json=PLATE_BODY, headers=USER_HEADERS)

            response = await api.client.get(
                f"/consultations/{created.json()['request_id']}", headers=USER_HEADERS
            )

            assert response.status_code == 503
            assert response.json()["error"]["transient"] is True


class TestFinalizeRoute:
    @pytest.mark.asyncio
    async def test_finalize_returns_canonical_result(self) -> None:
        adapter = FakeProviderAdapter(statuses=["completed"], results=[PLATE_PAYLOAD])
        async with api_client(adapter) as api:
            created = await api.client.post("/consultations", json=PLATE_BODY, headers=USER_HEADERS)
            request_id = created.json()["request_id"]

            response = await api.client.post(
                f"/consultations/{request_id}/finalize", headers=USER_HEADERS
            )

            assert response.status_code == 200
            body = response.json()
            assert body["status"] == "completed"
            assert body["result"]["kind"] == "vehicle"
            request = await api.core.store.get(request_id)
            assert request is not None
            assert request.status is ConsultationStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_not_ready_is_409(self) -> None:
        adapter = FakeProviderAdapter(results=[ConsultationNotReadyError("ainda processando")])
        async with api_client(adapter) as api:
            created = await api.client.post("/consultations", json=PLATE_BODY, headers=USER_HEADERS)

            response = await api.client.post(
                f"/consultations/{created.json()['request_id']}/finalize", headers=USER_HEADERS
            )

            assert response.status_code == 409
            assert response.json()["error"]["code"] == "not_ready"

    @pytest.mark.asyncio
    async def test_failed_consultation_is_502(self) -> None:
        adapter = FakeProviderAdapter(
            lookups=[ProviderTerminalError("not_found", "Registro não encontrado", provider="infosimples")]
        )
        async with api_client(adapter) as api:
            created = await api.client.post("/consultations", json=PLATE_BODY, headers=USER_HEADERS)

            response = await api.client.post(
                f"/consultations/{created.json()['request_id']}/finalize", headers=USER_HEADERS
            )

            assert response.status_code == 502
            assert response.json()["error"]["code"] == "not_found"


class TestExpireRoute:
    @pytest.mark.asyncio
    async def test_expire_then_finalize_is_202(self) -> None:
        async with api_client(FakeProviderAdapter()) as api:
            created = await api.client.post("/consultations", json=PLATE_BODY, headers=USER_HEADERS)
            request_id = created.json()["request_id"]

            expired = await api.client.post(
                f"/consultations/{request_id}/expire", headers=USER_HEADERS
            )
            finalized = await api.client.post(
                f"/consultations/{request_id}/finalize", headers=USER_HEADERS
            )

            assert expired.status_code == 200
            assert expired.json()["status"] == "timed_out"
            assert expired.json()["error"]["code"] == "timeout"
            assert finalized.status_code == 202
            assert finalized.json() == {
                "request_id": request_id,
                "status": "timed_out",
                "message": "Consulta ainda em processamento. Verifique novamente mais tarde.",
            }

    @pytest.mark.asyncio
    async def test_expire_completed_is_409(self) -> None:
        async with api_client(_sync_adapter()) as api:
            created = await api.client.post("/consultations", json=PLATE_BODY, headers=USER_HEADERS)

            response = await api.client.post(
                f"/consultations/{created.json()['request_id']}/expire", headers=USER_HEADERS
            )

            assert response.status_code == 409
            assert response.json()["error"]["code"] == "invalid_transition"
