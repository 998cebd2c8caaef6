"""Normalizer Infosimples (DETRAN por UF)."""

from .normalizer import normalize_infosimples, unwrap_data

__all__ = [
    "normalize_infosimples",
    "unwrap_data",
]
