"""Normalização de respostas Infosimples para o resultado canônico.

O corpo da API v2 tem o formato {code, code_message, data: [...]}; cada
DETRAN devolve nomes de campo próprios, daí as listas de variantes.
"""

from __future__ import annotations

from typing import Any

from api.normalizers.shared import (
    as_int,
    as_iso_date,
    as_mapping,
    as_money,
    as_text,
    first_present,
    normalize_fines,
    summarize_fines,
)
from app.domain.canonical import CnhResult, FinesResult, VehicleResult
from app.domain.lookup import SearchType

_FINES_KEYS = ("multas", "fines", "infracoes", "infractions", "debitos")


def unwrap_data(raw_payload: Any) -> dict[str, Any]:
    """Extrai o registro principal de `data` (lista ou objeto)."""
    body = as_mapping(raw_payload)
    data = body.get("data")
    record = as_mapping(data)
    return record or body


def normalize_infosimples(
    search_type: SearchType,
    raw_payload: Any,
) -> CnhResult | VehicleResult | FinesResult:
    """Converte o payload bruto; nunca levanta exceção."""
    record = unwrap_data(raw_payload)

    if search_type in (SearchType.CNH, SearchType.DRIVER_CPF):
        return _normalize_cnh(record)
    if search_type is SearchType.VEHICLE_FINES:
        return _normalize_debitos(record)
    return _normalize_vehicle(record)


def _normalize_cnh(record: dict[str, Any]) -> CnhResult:
    return CnhResult(
        holder_name=as_text(first_present(record, "nome", "name", "nome_condutor")),
        license_number=as_text(
            first_present(record, "numero_registro", "registro", "cnh", "license_number")
        ),
        category=as_text(first_present(record, "categoria", "category")),
        status=as_text(first_present(record, "situacao", "status")),
        expiration_date=as_iso_date(
            first_present(record, "validade", "data_validade", "expiration_date")
        ),
        points=as_int(first_present(record, "pontuacao", "pontos", "points")),
        infractions=normalize_fines(first_present(record, *_FINES_KEYS)),
    )


def _normalize_vehicle(record: dict[str, Any]) -> VehicleResult:
    return VehicleResult(
        plate=as_text(first_present(record, "placa", "plate")),
        renavam=as_text(first_present(record, "renavam")),
        model=as_text(first_present(record, "modelo", "marca_modelo", "model")),
        year=as_text(first_present(record, "ano", "ano_modelo", "year")),
        owner=as_text(
            first_present(record, "proprietario", "nome_proprietario", "owner")
        ),
        fines=normalize_fines(first_present(record, *_FINES_KEYS)),
    )


def _normalize_debitos(record: dict[str, Any]) -> FinesResult:
    fines = normalize_fines(first_present(record, *_FINES_KEYS))
    count, total_value, total_points = summarize_fines(fines)

    provider_total = first_present(record, "valor_total", "total_value")
    return FinesResult(
        plate=as_text(first_present(record, "placa", "plate")),
        renavam=as_text(first_present(record, "renavam")),
        fines=fines,
        total_fines=count,
        total_value=as_money(provider_total) if provider_total is not None else total_value,
        total_points=total_points,
    )
