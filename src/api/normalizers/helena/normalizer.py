"""Normalização de resultados Helena (GET /consults/{id}/results).

Formato esperado: {fines: [...], driver: {...}, vehicle: {...}},
opcionalmente embrulhado em {data: ...}. Dados de CNH podem vir no
próprio driver ou aninhados em driver.cnh.
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


def _unwrap(raw_payload: Any) -> dict[str, Any]:
    body = as_mapping(raw_payload)
    inner = body.get("data")
    return inner if isinstance(inner, dict) else body


def normalize_helena(
    search_type: SearchType,
    raw_payload: Any,
) -> CnhResult | VehicleResult | FinesResult:
    """Converte o payload bruto; nunca levanta exceção."""
    body = _unwrap(raw_payload)

    if search_type in (SearchType.CNH, SearchType.DRIVER_CPF):
        return _normalize_driver(body)
    if search_type is SearchType.VEHICLE_FINES:
        return _normalize_fines(body)
    return _normalize_vehicle(body)


def _normalize_driver(body: dict[str, Any]) -> CnhResult:
    driver = as_mapping(body.get("driver"))
    cnh = as_mapping(first_present(driver, "cnh", "license")) or as_mapping(
        body.get("cnh")
    )
    source = {**driver, **cnh}

    infractions = first_present(source, "infractions", "fines", "multas")
    if infractions is None:
        infractions = body.get("fines")

    return CnhResult(
        holder_name=as_text(first_present(source, "name", "nome")),
        license_number=as_text(
            first_present(source, "number", "license_number", "driver_license", "cnh")
        ),
        category=as_text(first_present(source, "category", "categoria")),
        status=as_text(first_present(source, "status", "situacao")),
        expiration_date=as_iso_date(
            first_present(source, "expiration_date", "validade")
        ),
        points=as_int(first_present(source, "points", "pontuacao")),
        infractions=normalize_fines(infractions),
    )


def _normalize_vehicle(body: dict[str, Any]) -> VehicleResult:
    vehicle = as_mapping(body.get("vehicle"))
    return VehicleResult(
        plate=as_text(first_present(vehicle, "plate", "placa")),
        renavam=as_text(first_present(vehicle, "renavam")),
        model=as_text(first_present(vehicle, "model", "modelo")),
        year=as_text(first_present(vehicle, "year", "ano")),
        owner=as_text(first_present(vehicle, "owner", "proprietario")),
        fines=normalize_fines(body.get("fines")),
    )


def _normalize_fines(body: dict[str, Any]) -> FinesResult:
    vehicle = as_mapping(body.get("vehicle"))
    fines = normalize_fines(first_present(body, "fines", "multas"))
    count, total_value, total_points = summarize_fines(fines)

    provider_total = body.get("total_value")
    return FinesResult(
        plate=as_text(first_present(vehicle, "plate", "placa") or body.get("plate")),
        renavam=as_text(first_present(vehicle, "renavam") or body.get("renavam")),
        fines=fines,
        total_fines=count,
        total_value=as_money(provider_total) if provider_total is not None else total_value,
        total_points=total_points,
    )
