"""Coerções de campo usadas por todos os normalizers.

Todas as funções são totais: qualquer entrada (None, tipo errado, string
mal formada) produz o sentinel correspondente em vez de levantar exceção.
"""

from __future__ import annotations

import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from app.domain.canonical import UNKNOWN, CanonicalFine, quantize_money

_ZERO = Decimal("0.00")
_CURRENCY_NOISE = re.compile(r"[R$\s]")

_DATE_FORMATS = (
    ("%Y-%m-%d", False),
    ("%d/%m/%Y", False),
    ("%Y-%m-%dT%H:%M:%S", True),
    ("%Y-%m-%d %H:%M:%S", True),
    ("%Y-%m-%dT%H:%M", True),
    ("%d/%m/%Y %H:%M:%S", True),
    ("%d/%m/%Y %H:%M", True),
)

# Variantes de nome de campo emitidas pelos provedores (pt/en, camelCase)
FINE_AUTO_KEYS = ("auto_number", "autoNumber", "numero_auto", "auto", "ait")
FINE_DATE_KEYS = ("date", "data", "data_infracao", "data_hora")
FINE_DESCRIPTION_KEYS = (
    "description",
    "infraction",
    "descricao",
    "infracao",
    "infraction_description",
)
FINE_VALUE_KEYS = ("value", "valor", "valor_multa", "amount")
FINE_POINTS_KEYS = ("points", "pontos", "pontuacao")
FINE_STATUS_KEYS = ("status", "situation", "situacao")
FINE_LOCATION_KEYS = ("location", "local", "local_infracao")


def first_present(data: dict[str, Any], *keys: str) -> Any:
    """Primeiro valor não vazio entre as chaves informadas."""
    for key in keys:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def as_text(value: Any) -> str:
    if value is None or isinstance(value, (dict, list, tuple, set)):
        return UNKNOWN
    if isinstance(value, bool):
        return UNKNOWN
    text = str(value).strip()
    return text or UNKNOWN


def as_int(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value == value and abs(value) != float("inf") else 0
    if isinstance(value, str):
        match = re.search(r"-?\d+", value)
        return int(match.group()) if match else 0
    return 0


def as_money(value: Any) -> Decimal:
    """Converte 130.16, "130,16" ou "R$ 1.234,56" em Decimal de duas casas."""
    if value is None or isinstance(value, bool):
        return _ZERO
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, (int, float)):
        amount = Decimal(str(value))
    elif isinstance(value, str):
        cleaned = _CURRENCY_NOISE.sub("", value)
        if "," in cleaned:
            cleaned = cleaned.replace(".", "").replace(",", ".")
        try:
            amount = Decimal(cleaned)
        except InvalidOperation:
            return _ZERO
    else:
        return _ZERO
    if not amount.is_finite():
        return _ZERO
    return quantize_money(amount)


def as_iso_date(value: Any) -> str:
    """Converte datas dos provedores para ISO-8601 (ou UNKNOWN)."""
    if not isinstance(value, str):
        return UNKNOWN
    text = value.strip()
    if not text:
        return UNKNOWN
    # Timezone e frações não interessam ao formato canônico
    candidate = re.sub(r"(\.\d+)?(Z|[+-]\d{2}:?\d{2})$", "", text)
    for fmt, has_time in _DATE_FORMATS:
        try:
            parsed = datetime.strptime(candidate, fmt)
        except ValueError:
            continue
        if has_time:
            return parsed.strftime("%Y-%m-%dT%H:%M:%S")
        return parsed.strftime("%Y-%m-%d")
    return UNKNOWN


def as_mapping(value: Any) -> dict[str, Any]:
    """Dict ou o primeiro dict de uma lista; {} caso contrário."""
    if isinstance(value, dict):
        return value
    if isinstance(value, list):
        for item in value:
            if isinstance(item, dict):
                return item
    return {}


def as_list(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def normalize_fine(item: dict[str, Any]) -> CanonicalFine:
    return CanonicalFine(
        auto_number=as_text(first_present(item, *FINE_AUTO_KEYS)),
        date=as_iso_date(first_present(item, *FINE_DATE_KEYS)),
        description=as_text(first_present(item, *FINE_DESCRIPTION_KEYS)),
        value=as_money(first_present(item, *FINE_VALUE_KEYS)),
        points=as_int(first_present(item, *FINE_POINTS_KEYS)),
        status=as_text(first_present(item, *FINE_STATUS_KEYS)),
        location=as_text(first_present(item, *FINE_LOCATION_KEYS)),
    )


def normalize_fines(value: Any) -> list[CanonicalFine]:
    return [normalize_fine(item) for item in as_list(value)]


def summarize_fines(fines: list[CanonicalFine]) -> tuple[int, Decimal, int]:
    """(quantidade, valor total, pontos totais)."""
    total_value = sum((fine.value for fine in fines), _ZERO)
    total_points = sum(fine.points for fine in fines)
    return len(fines), quantize_money(total_value), total_points
