"""Utility helpers."""

from .sanitizer import FILTERED, RECURSIVE, sanitize

__all__ = ["sanitize", "FILTERED", "RECURSIVE"]
