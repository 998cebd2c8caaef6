"""Normalizers por provedor: payload bruto → resultado canônico.

Estrutura:
- shared/: coerções totais de campo (texto, dinheiro, datas, multas)
- infosimples/: respostas DETRAN por UF (API v2)
- helena/: resultados de /consults/{id}/results

Nenhum normalizer levanta exceção: campos ausentes viram sentinels.
"""

from .helena import normalize_helena
from .infosimples import normalize_infosimples, unwrap_data

__all__ = [
    "normalize_helena",
    "normalize_infosimples",
    "unwrap_data",
]
