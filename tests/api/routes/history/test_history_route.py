"""Endpoints /history: listagem paginada, vínculos e exportação CSV."""

from __future__ import annotations

import pytest

from app.protocols.provider_adapter import ProviderLookup
from tests.fakes.fake_api import OTHER_USER_HEADERS, USER_HEADERS, ApiHarness, api_client
from tests.fakes.fake_provider_adapter import FakeProviderAdapter

PLATE_PAYLOAD = {
    "code": 200,
    "data": [{"placa": "ABC1234", "modelo": "FIAT/UNO", "multas": []}],
}


def _sync_adapter() -> FakeProviderAdapter:
    return FakeProviderAdapter(lookups=[ProviderLookup(protocol="", raw_payload=PLATE_PAYLOAD)])


async def _seed(api: ApiHarness, count: int) -> None:
    for _ in range(count):
        response = await api.client.post(
            "/consultations",
            json={"search_type": "plate", "query": "ABC1234"},
            headers=USER_HEADERS,
        )
        assert response.status_code == 201


class TestListHistory:
    @pytest.mark.asyncio
    async def test_paginates_own_entries(self) -> None:
        async with api_client(_sync_adapter()) as api:
            await _seed(api, 3)

            response = await api.client.get("/history?page=2&limit=2", headers=USER_HEADERS)

            assert response.status_code == 200
            body = response.json()
            assert body["total"] == 3
            assert body["total_pages"] == 2
            assert len(body["items"]) == 1
            assert body["items"][0]["search_query"] == "ABC1234"

    @pytest.mark.asyncio
    async def test_other_user_sees_nothing(self) -> None:
        async with api_client(_sync_adapter()) as api:
            await _seed(api, 2)

            response = await api.client.get("/history", headers=OTHER_USER_HEADERS)

            assert response.json()["total"] == 0

    @pytest.mark.asyncio
    async def test_invalid_limit_is_422(self) -> None:
        async with api_client(_sync_adapter()) as api:
            response = await api.client.get("/history?limit=500", headers=USER_HEADERS)
            assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_requires_user(self) -> None:
        async with api_client(_sync_adapter()) as api:
            response = await api.client.get("/history")
            assert response.status_code == 401


class TestEntryRoutes:
    @pytest.mark.asyncio
    async def test_attach_links(self) -> None:
        async with api_client(_sync_adapter()) as api:
            await _seed(api, 1)
            entry_id = (await api.client.get("/history", headers=USER_HEADERS)).json()["items"][0]["id"]

            response = await api.client.patch(
                f"/history/{entry_id}",
                json={"related_client_id": "client-9"},
                headers=USER_HEADERS,
            )

            assert response.status_code == 200
            assert response.json()["related_client_id"] == "client-9"
            fetched = await api.client.get(f"/history/{entry_id}", headers=USER_HEADERS)
            assert fetched.json()["related_client_id"] == "client-9"

    @pytest.mark.asyncio
    async def test_attach_without_links_is_422(self) -> None:
        async with api_client(_sync_adapter()) as api:
            await _seed(api, 1)
            entry_id = (await api.client.get("/history", headers=USER_HEADERS)).json()["items"][0]["id"]

            response = await api.client.patch(f"/history/{entry_id}", json={}, headers=USER_HEADERS)

            assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_other_users_entry_is_404(self) -> None:
        async with api_client(_sync_adapter()) as api:
            await _seed(api, 1)
            entry_id = (await api.client.get("/history", headers=USER_HEADERS)).json()["items"][0]["id"]

            response = await api.client.get(f"/history/{entry_id}", headers=OTHER_USER_HEADERS)

            assert response.status_code == 404
            assert response.json()["error"]["code"] == "history_entry_not_found"


class TestExport:
    @pytest.mark.asyncio
    async def test_export_csv(self) -> None:
        async with api_client(_sync_adapter()) as api:
            await _seed(api, 2)

            response = await api.client.get("/history/export", headers=USER_HEADERS)

            assert response.status_code == 200
            assert response.headers["content-type"].startswith("text/csv")
            assert "attachment" in response.headers["content-disposition"]
            lines = response.text.strip().split("\n")
            assert lines[0] == "ID,Tipo,Consulta,UF,Data,Cliente,Veículo"
            assert len(lines) == 3
            assert ",Placa,ABC1234," in lines[1]

    @pytest.mark.asyncio
    async def test_export_empty_is_422(self) -> None:
        async with api_client(_sync_adapter()) as api:
            response = await api.client.get("/history/export", headers=USER_HEADERS)
            assert response.status_code == 422
