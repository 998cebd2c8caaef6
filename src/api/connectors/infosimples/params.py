"""Endpoints e parâmetros Infosimples por tipo de consulta e UF.

Cada DETRAN exige um conjunto diferente de campos; UFs sem regra
específica recebem o documento principal mais os extras informados.
"""

from __future__ import annotations

from app.domain.lookup import LookupRequest, SearchType
from utils.errors import InvalidInputError

ENDPOINTS: dict[SearchType, str] = {
    SearchType.CNH: "consultas/detran/{uf}/cnh",
    SearchType.PLATE: "consultas/detran/{uf}/veiculo",
    SearchType.RENAVAM: "consultas/detran/{uf}/veiculo",
    SearchType.VEHICLE_FINES: "consultas/detran/{uf}/debitos_veiculares",
}

STATUS_ENDPOINT = "consultas/status"
RESULT_ENDPOINT = "consultas/resultado"

REQUIRED_CNH_PARAMS: dict[str, tuple[str, ...]] = {
    "SP": ("data_nascimento",),
    "PR": ("cpf",),
    "MG": ("cpf", "data_nascimento", "data_primeira_habilitacao"),
}


def endpoint_for(request: LookupRequest) -> str:
    template = ENDPOINTS.get(request.search_type)
    if template is None:
        raise InvalidInputError(
            f"Infosimples não atende consultas do tipo {request.search_type.value}"
        )
    return template.format(uf=request.uf.lower())


def check_required_params(request: LookupRequest) -> None:
    """Valida os parâmetros obrigatórios da UF (antes de chamar o provedor)."""
    if request.search_type is not SearchType.CNH:
        return
    missing = [
        name
        for name in REQUIRED_CNH_PARAMS.get(request.uf, ())
        if not request.params.get(name)
    ]
    if missing:
        raise InvalidInputError(
            f"Consulta de CNH em {request.uf} exige: {', '.join(missing)}"
        )


def build_params(request: LookupRequest) -> dict[str, str]:
    """Monta o corpo da consulta (sem o token)."""
    extras = request.params
    uf = request.uf

    if request.search_type is SearchType.CNH:
        if uf == "SP":
            params = {
                "numero_registro": request.query,
                "data_nascimento": extras.get("data_nascimento", ""),
            }
        elif uf == "PR":
            params = {"cpf": extras.get("cpf", ""), "numero_registro": request.query}
        elif uf == "MG":
            params = {
                "cpf": extras.get("cpf", ""),
                "data_nascimento": extras.get("data_nascimento", ""),
                "data_primeira_habilitacao": extras.get("data_primeira_habilitacao", ""),
            }
        else:
            params = {"numero_registro": request.query, **extras}

    elif request.search_type is SearchType.PLATE:
        params = {"placa": request.query, "renavam": extras.get("renavam", "")}
        if uf == "RJ":
            params["chassi"] = extras.get("chassi", "")
        elif uf != "SP":
            params.update(extras)

    elif request.search_type is SearchType.RENAVAM:
        params = {"renavam": request.query, "placa": extras.get("placa", "")}
        if uf == "RJ":
            params["chassi"] = extras.get("chassi", "")
        elif uf != "SP":
            params.update(extras)

    else:
        params = {"placa": request.query, "renavam": extras.get("renavam", "")}

    return {key: value for key, value in params.items() if value}
