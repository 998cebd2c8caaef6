"""Resultados sintéticos do modo demo/degradado.

Só são usados com DEMO_MODE=true quando toda a cadeia de provedores
falhou. O orquestrador marca o resultado com degraded=True e
provider_source="demo"; nada aqui faz IO.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING

from api.normalizers.shared import summarize_fines
from app.domain.canonical import UNKNOWN, CanonicalFine, CnhResult, FinesResult, VehicleResult
from app.domain.lookup import SearchType

if TYPE_CHECKING:
    from app.domain.lookup import LookupRequest


def _days_ago(days: int) -> str:
    return (datetime.now(UTC) - timedelta(days=days)).date().isoformat()


def _demo_fines(seed: str) -> list[CanonicalFine]:
    return [
        CanonicalFine(
            auto_number=f"AIT-{seed[-4:]}-001",
            date=_days_ago(30),
            description="Estacionar em local proibido",
            value=Decimal("195.23"),
            points=4,
            status="pending",
            location="Av. Paulista, 1000 - São Paulo/SP",
        ),
        CanonicalFine(
            auto_number=f"AIT-{seed[-4:]}-002",
            date=_days_ago(60),
            description="Velocidade acima da permitida",
            value=Decimal("293.47"),
            points=5,
            status="pending",
            location="Rod. dos Bandeirantes, km 25",
        ),
    ]


def build_demo_result(lookup: LookupRequest) -> CnhResult | VehicleResult | FinesResult:
    """Resultado de demonstração coerente com o search_type."""
    if lookup.search_type in (SearchType.CNH, SearchType.DRIVER_CPF):
        return CnhResult(
            holder_name="CONDUTOR DEMONSTRAÇÃO",
            license_number=lookup.query if lookup.search_type is SearchType.CNH else "00000000000",
            category="AB",
            status="valid",
            expiration_date=(datetime.now(UTC) + timedelta(days=365)).date().isoformat(),
            points=12,
            infractions=[
                CanonicalFine(
                    auto_number="AIT-DEMO-CNH",
                    date=_days_ago(45),
                    description="Dirigir veículo utilizando telefone celular",
                    value=Decimal("293.47"),
                    points=4,
                    status="pending",
                ),
            ],
        )

    if lookup.search_type is SearchType.VEHICLE_FINES:
        fines = _demo_fines(lookup.query)
        total_fines, total_value, total_points = summarize_fines(fines)
        return FinesResult(
            plate=lookup.query,
            renavam=lookup.params.get("renavam", UNKNOWN),
            fines=fines,
            total_fines=total_fines,
            total_value=total_value,
            total_points=total_points,
        )

    plate = lookup.query if lookup.search_type is SearchType.PLATE else lookup.params.get("placa", UNKNOWN)
    renavam = lookup.query if lookup.search_type is SearchType.RENAVAM else lookup.params.get("renavam", UNKNOWN)
    return VehicleResult(
        plate=plate,
        renavam=renavam,
        model="HONDA/CIVIC EXL CVT",
        year="2019/2020",
        owner="PROPRIETÁRIO DEMONSTRAÇÃO",
        fines=_demo_fines(lookup.query),
    )
