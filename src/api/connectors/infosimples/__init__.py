"""Conector Infosimples - consultas DETRAN (CNH, veículo, débitos).

Único ponto de IO com api.infosimples.com.
"""

from api.connectors.infosimples.adapter import SUPPORTED_SEARCH_TYPES, InfosimplesAdapter
from api.connectors.infosimples.client import InfosimplesClient

__all__ = [
    "SUPPORTED_SEARCH_TYPES",
    "InfosimplesAdapter",
    "InfosimplesClient",
]
