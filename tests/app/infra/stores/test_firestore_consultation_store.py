"""Testes do FirestoreConsultationStore com Firestore simulado."""

from __future__ import annotations

from decimal import Decimal

import pytest

from app.domain.canonical import FinesResult
from app.domain.consultation import ConsultationRequest, ConsultationResult
from app.domain.lookup import ProviderName, SearchType
from app.infra.stores import FirestoreConsultationStore
from fsm import ConsultationStatus
from tests.fakes.fake_firestore import FakeFirestoreClient
from utils.errors import (
    ConsultationNotFoundError,
    FirestoreUnavailableError,
    ResultAlreadyExistsError,
)


def _request() -> ConsultationRequest:
    return ConsultationRequest(
        owner_id="u-1",
        search_type=SearchType.VEHICLE_FINES,
        search_query="ABC1D23",
        provider=ProviderName.HELENA,
    )


class TestFirestoreConsultationStore:
    """Round-trip de documentos e mapeamento de erros."""

    @pytest.mark.asyncio
    async def test_request_round_trip(self) -> None:
        client = FakeFirestoreClient()
        store = FirestoreConsultationStore(client)
        request = _request()

        await store.create(request)
        await store.update(
            request.model_copy(update={"status": ConsultationStatus.RUNNING, "provider_protocol": "c-1"})
        )
        loaded = await store.get(request.id)

        assert loaded is not None
        assert loaded.status is ConsultationStatus.RUNNING
        assert loaded.provider is ProviderName.HELENA
        assert loaded.created_at == request.created_at
        assert await store.get("missing") is None

    @pytest.mark.asyncio
    async def test_update_missing_document(self) -> None:
        store = FirestoreConsultationStore(FakeFirestoreClient())
        with pytest.raises(ConsultationNotFoundError):
            await store.update(_request())

    @pytest.mark.asyncio
    async def test_result_money_survives_and_is_write_once(self) -> None:
        client = FakeFirestoreClient()
        store = FirestoreConsultationStore(client, results_collection="results")
        result = ConsultationResult(
            request_id="r-1",
            normalized_payload=FinesResult(total_value=Decimal("130.16"), total_fines=1),
            provider_source=ProviderName.HELENA,
        )

        await store.save_result(result)
        with pytest.raises(ResultAlreadyExistsError):
            await store.save_result(result)

        assert client.collections["results"]["r-1"]["normalized_payload"]["total_value"] == "130.16"
        loaded = await store.get_result("r-1")
        assert loaded is not None
        assert isinstance(loaded.normalized_payload, FinesResult)
        assert loaded.normalized_payload.total_value == Decimal("130.16")

    @pytest.mark.asyncio
    async def test_unavailable_firestore_is_infrastructure_error(self) -> None:
        store = FirestoreConsultationStore(FakeFirestoreClient(fail=True))
        with pytest.raises(FirestoreUnavailableError):
            await store.create(_request())
        with pytest.raises(FirestoreUnavailableError):
            await store.get("r-1")
