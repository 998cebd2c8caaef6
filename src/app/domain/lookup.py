"""Pedido canônico de consulta e sua validação.

A validação acontece antes de qualquer chamada externa e levanta
InvalidInputError; o pedido devolvido já vem com a query normalizada
(placa em maiúsculas sem hífen, documentos só com dígitos).
"""

from __future__ import annotations

import re
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from config.settings.infosimples import SUPPORTED_UFS
from utils.errors import InvalidInputError

_PLATE_RE = re.compile(r"^[A-Z]{3}\d[A-Z0-9]\d{2}$")
_NON_DIGITS = re.compile(r"\D")
_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_BR_DATE_RE = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")


class SearchType(StrEnum):
    PLATE = "plate"
    RENAVAM = "renavam"
    CNH = "cnh"
    DRIVER_CPF = "driver_cpf"
    VEHICLE_FINES = "vehicle_fines"


class ProviderName(StrEnum):
    INFOSIMPLES = "infosimples"
    HELENA = "helena"
    DEMO = "demo"


# Parâmetros extras aceitos por tipo de consulta
ALLOWED_PARAMS: dict[SearchType, frozenset[str]] = {
    SearchType.PLATE: frozenset({"renavam", "chassi"}),
    SearchType.RENAVAM: frozenset({"placa", "chassi"}),
    SearchType.CNH: frozenset({
        "cpf",
        "data_nascimento",
        "data_primeira_habilitacao",
    }),
    SearchType.DRIVER_CPF: frozenset(),
    SearchType.VEHICLE_FINES: frozenset({"renavam"}),
}

_DATE_PARAMS = frozenset({"data_nascimento", "data_primeira_habilitacao"})
_DIGIT_PARAMS = frozenset({"cpf", "renavam"})


class LookupRequest(BaseModel):
    """Pedido de consulta vindo do chamador (UI/API)."""

    model_config = ConfigDict(frozen=True)

    search_type: SearchType
    query: str
    uf: str = ""
    params: dict[str, str] = Field(default_factory=dict)


def normalize_plate(value: str) -> str:
    return value.strip().upper().replace("-", "").replace(" ", "")


def only_digits(value: str) -> str:
    return _NON_DIGITS.sub("", value)


def normalize_date_param(value: str) -> str | None:
    """Aceita YYYY-MM-DD ou DD/MM/YYYY; devolve ISO ou None.

    Datas fora do calendário (mês 13, 30/02) também devolvem None.
    """
    value = value.strip()
    if _ISO_DATE_RE.match(value):
        layout = "%Y-%m-%d"
    elif _BR_DATE_RE.match(value):
        layout = "%d/%m/%Y"
    else:
        return None
    try:
        return datetime.strptime(value, layout).date().isoformat()
    except ValueError:
        return None


def validate_lookup(lookup: LookupRequest, default_uf: str = "SP") -> LookupRequest:
    """Valida e normaliza o pedido.

    Raises:
        InvalidInputError: query vazia/mal formada, UF desconhecida ou
            parâmetro extra inválido.
    """
    raw_query = (lookup.query or "").strip()
    if not raw_query:
        raise InvalidInputError("query é obrigatória")

    query = _normalize_query(lookup.search_type, raw_query)

    uf = (lookup.uf or default_uf).strip().upper()
    if uf not in SUPPORTED_UFS:
        raise InvalidInputError(f"UF inválida: {uf}")

    params = _normalize_params(lookup.search_type, lookup.params)

    return LookupRequest(
        search_type=lookup.search_type,
        query=query,
        uf=uf,
        params=params,
    )


def _normalize_query(search_type: SearchType, raw_query: str) -> str:
    if search_type in (SearchType.PLATE, SearchType.VEHICLE_FINES):
        plate = normalize_plate(raw_query)
        if not _PLATE_RE.match(plate):
            raise InvalidInputError("placa inválida (formato ABC1234 ou ABC1D23)")
        return plate

    digits = only_digits(raw_query)
    if search_type is SearchType.RENAVAM:
        if not 9 <= len(digits) <= 11:
            raise InvalidInputError("RENAVAM deve ter de 9 a 11 dígitos")
        return digits.zfill(11)

    if search_type is SearchType.CNH:
        if len(digits) != 11:
            raise InvalidInputError("número de registro da CNH deve ter 11 dígitos")
        return digits

    if len(digits) != 11:
        raise InvalidInputError("CPF deve ter 11 dígitos")
    return digits


def _normalize_params(search_type: SearchType, params: dict[str, str]) -> dict[str, str]:
    allowed = ALLOWED_PARAMS[search_type]
    normalized: dict[str, str] = {}
    for key, value in params.items():
        if key not in allowed:
            raise InvalidInputError(
                f"parâmetro '{key}' não é aceito para {search_type.value}"
            )
        value = (value or "").strip()
        if not value:
            continue
        if key in _DATE_PARAMS:
            iso = normalize_date_param(value)
            if iso is None:
                raise InvalidInputError(f"data inválida em '{key}'")
            value = iso
        elif key in _DIGIT_PARAMS:
            value = only_digits(value)
        elif key == "placa":
            value = normalize_plate(value)
        normalized[key] = value
    return normalized
