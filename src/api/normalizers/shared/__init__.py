"""Coerções totais compartilhadas pelos normalizers de provedores."""

from .fields import (
    as_int,
    as_iso_date,
    as_list,
    as_mapping,
    as_money,
    as_text,
    first_present,
    normalize_fine,
    normalize_fines,
    summarize_fines,
)

__all__ = [
    "as_int",
    "as_iso_date",
    "as_list",
    "as_mapping",
    "as_money",
    "as_text",
    "first_present",
    "normalize_fine",
    "normalize_fines",
    "summarize_fines",
]
