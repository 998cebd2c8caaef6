"""Resultado canônico de consulta, independente de provedor.

Uma variante por família de search_type, discriminada por `kind`:
- CnhResult: cnh, driver_cpf
- VehicleResult: plate, renavam
- FinesResult: vehicle_fines

Regras de wire: valores monetários são Decimal com duas casas e serializam
como string; datas em ISO-8601; strings ausentes viram UNKNOWN, números
ausentes viram 0 e listas ausentes viram [].
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Annotated, Any, Literal

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    TypeAdapter,
)

UNKNOWN = "unknown"

_CENTS = Decimal("0.01")
_ZERO_MONEY = Decimal("0.00")


def quantize_money(value: Decimal) -> Decimal:
    """Arredonda para duas casas (meio para cima).

    Valores não finitos ou acima da precisão do contexto decimal viram 0.00.
    """
    if not value.is_finite():
        return _ZERO_MONEY
    try:
        return value.quantize(_CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return _ZERO_MONEY


Money = Annotated[
    Decimal,
    AfterValidator(quantize_money),
    PlainSerializer(lambda v: f"{v:.2f}", return_type=str, when_used="json"),
]


class _Canonical(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class CanonicalFine(_Canonical):
    """Multa/infração normalizada."""

    auto_number: str = UNKNOWN
    date: str = UNKNOWN
    description: str = UNKNOWN
    value: Money = Decimal("0.00")
    points: int = 0
    status: str = UNKNOWN
    location: str = UNKNOWN


class CnhResult(_Canonical):
    kind: Literal["cnh"] = "cnh"
    holder_name: str = UNKNOWN
    license_number: str = UNKNOWN
    category: str = UNKNOWN
    status: str = UNKNOWN
    expiration_date: str = UNKNOWN
    points: int = 0
    infractions: list[CanonicalFine] = Field(default_factory=list)


class VehicleResult(_Canonical):
    kind: Literal["vehicle"] = "vehicle"
    plate: str = UNKNOWN
    renavam: str = UNKNOWN
    model: str = UNKNOWN
    year: str = UNKNOWN
    owner: str = UNKNOWN
    fines: list[CanonicalFine] = Field(default_factory=list)


class FinesResult(_Canonical):
    """Débitos veiculares com totais consolidados."""

    kind: Literal["vehicle_fines"] = "vehicle_fines"
    plate: str = UNKNOWN
    renavam: str = UNKNOWN
    fines: list[CanonicalFine] = Field(default_factory=list)
    total_fines: int = 0
    total_value: Money = Decimal("0.00")
    total_points: int = 0


CanonicalResult = Annotated[
    CnhResult | VehicleResult | FinesResult,
    Field(discriminator="kind"),
]

_canonical_adapter: TypeAdapter[CnhResult | VehicleResult | FinesResult] = TypeAdapter(
    CanonicalResult
)


def parse_canonical_result(data: dict[str, Any]) -> CnhResult | VehicleResult | FinesResult:
    """Reconstrói o resultado canônico a partir do dict persistido."""
    return _canonical_adapter.validate_python(data)
