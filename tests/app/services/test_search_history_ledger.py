"""Testes do SearchHistoryLedger."""

from __future__ import annotations

import csv
import io
from datetime import UTC, datetime, timedelta

import pytest

from app.domain.history import HistoryFilters, PageRequest, ResultSnapshot, SearchHistoryEntry
from app.domain.lookup import SearchType
from app.infra.stores import MemoryHistoryStore
from app.services import SearchHistoryLedger
from tests.fakes.fake_services import OTHER_USER, USER, FailingHistoryStore
from utils.errors import HistoryEntryNotFoundError, InvalidInputError, UnauthorizedError

BASE_TIME = datetime(2026, 3, 5, 14, 30, 15, tzinfo=UTC)


def _entry(minutes: int = 0, user_id: str = "user-1", **kwargs: object) -> SearchHistoryEntry:
    defaults: dict[str, object] = {
        "user_id": user_id,
        "search_type": SearchType.VEHICLE_FINES,
        "search_query": "ABC1D23",
        "uf": "SP",
        "provider_source": "infosimples",
        "result_snapshot": ResultSnapshot(success=True, data={"kind": "vehicle_fines"}),
        "created_at": BASE_TIME + timedelta(minutes=minutes),
    }
    defaults.update(kwargs)
    return SearchHistoryEntry(**defaults)


async def _ledger_with(*entries: SearchHistoryEntry) -> SearchHistoryLedger:
    ledger = SearchHistoryLedger(MemoryHistoryStore())
    for entry in entries:
        await ledger.record(entry)
    return ledger


class TestRecordAndQuery:
    """Gravação append-only e paginação."""

    @pytest.mark.asyncio
    async def test_record_failure_is_swallowed(self) -> None:
        ledger = SearchHistoryLedger(FailingHistoryStore())
        assert await ledger.record(_entry()) is None

    @pytest.mark.asyncio
    async def test_query_paginates_newest_first(self) -> None:
        entries = [_entry(minutes=i) for i in range(5)]
        ledger = await _ledger_with(*entries)

        page = await ledger.query(USER, page=PageRequest(page=2, limit=2))

        assert page.total == 5
        assert page.total_pages == 3
        assert page.page == 2
        assert [item.id for item in page.items] == [entries[2].id, entries[1].id]

    @pytest.mark.asyncio
    async def test_query_is_scoped_and_filtered(self) -> None:
        ledger = await _ledger_with(
            _entry(),
            _entry(user_id="user-2"),
            _entry(search_type=SearchType.CNH, search_query="12345678901"),
        )

        page = await ledger.query(USER, HistoryFilters(search_type=SearchType.CNH))

        assert page.total == 1
        assert page.items[0].search_type is SearchType.CNH

    @pytest.mark.asyncio
    async def test_empty_history_page(self) -> None:
        page = await (await _ledger_with()).query(USER)
        assert page.items == []
        assert page.total_pages == 0

    @pytest.mark.asyncio
    async def test_query_requires_auth(self) -> None:
        with pytest.raises(UnauthorizedError):
            await (await _ledger_with()).query(None)


class TestAttach:
    """Somente back-links mudam depois da escrita."""

    @pytest.mark.asyncio
    async def test_attach_client_and_vehicle(self) -> None:
        entry = _entry()
        ledger = await _ledger_with(entry)

        updated = await ledger.attach(USER, entry.id, client_id="cli-1", vehicle_id="veh-1")

        assert updated.related_client_id == "cli-1"
        assert updated.related_vehicle_id == "veh-1"
        assert updated.result_snapshot == entry.result_snapshot
        assert updated.search_query == entry.search_query

    @pytest.mark.asyncio
    async def test_attach_nothing_is_invalid(self) -> None:
        entry = _entry()
        ledger = await _ledger_with(entry)
        with pytest.raises(InvalidInputError):
            await ledger.attach(USER, entry.id)

    @pytest.mark.asyncio
    async def test_attach_other_users_entry_is_not_found(self) -> None:
        entry = _entry()
        ledger = await _ledger_with(entry)
        with pytest.raises(HistoryEntryNotFoundError):
            await ledger.attach(OTHER_USER, entry.id, client_id="cli-1")


class TestExportCsv:
    """Exportação CSV do histórico filtrado."""

    @pytest.mark.asyncio
    async def test_export_rows(self) -> None:
        entry = _entry(related_client_id="cli-9")
        ledger = await _ledger_with(entry, _entry(minutes=1, uf=""))

        content = await ledger.export_csv(USER)

        rows = list(csv.reader(io.StringIO(content)))
        assert rows[0] == ["ID", "Tipo", "Consulta", "UF", "Data", "Cliente", "Veículo"]
        assert len(rows) == 3
        # Mais recente primeiro; UF vazia sai como SP
        assert rows[1][3] == "SP"
        assert rows[2] == [
            entry.id,
            "Débitos veiculares",
            "ABC1D23",
            "SP",
            "05/03/2026 14:30:15",
            "cli-9",
            "",
        ]

    @pytest.mark.asyncio
    async def test_export_empty_history(self) -> None:
        with pytest.raises(InvalidInputError, match="Nenhum registro"):
            await (await _ledger_with()).export_csv(USER)
