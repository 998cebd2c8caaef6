"""Conector Helena - consultas de condutor e débitos veiculares.

Único ponto de IO com api.helena.app.
"""

from api.connectors.helena.adapter import HelenaAdapter
from api.connectors.helena.client import SUPPORTED_SEARCH_TYPES, HelenaClient

__all__ = [
    "SUPPORTED_SEARCH_TYPES",
    "HelenaAdapter",
    "HelenaClient",
]
