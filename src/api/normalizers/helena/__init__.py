"""Normalizer Helena."""

from .normalizer import normalize_helena

__all__ = ["normalize_helena"]
