"""Redaction of job arguments before they are attached to a transaction.

.. code-block:: text

    Input arguments                       Output params
    ┌──────────────────────────┐          ┌──────────────────────────┐
    │ [{"email": "a@b.c",      │  ────►   │ [{"email": "a@b.c",      │
    │   "password": "hunter2"},│          │   "password": "[FILTERED]"},
    │  42]                     │          │  42]                     │
    └──────────────────────────┘          └──────────────────────────┘

Filter entries are either plain strings, matched exactly against the
stringified key, or compiled regular expressions, matched with
``search``. Nested mappings and sequences are walked; the input is never
modified.

Example:
    >>> sanitize([{"password": "hunter2", "id": 1}], ["password"])
    [{'password': '[FILTERED]', 'id': 1}]
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

FILTERED = "[FILTERED]"
RECURSIVE = "[RECURSIVE VALUE]"

FilterKey = str | re.Pattern[str]


def sanitize(value: Any, filter_keys: Iterable[FilterKey] | None = None) -> Any:
    """Return a redacted deep copy of ``value``."""
    keys = list(filter_keys or [])
    return _sanitize(value, keys, set())


def _sanitize(value: Any, filter_keys: list[FilterKey], seen: set[int]) -> Any:
    if isinstance(value, Mapping):
        return _sanitize_mapping(value, filter_keys, seen)
    if isinstance(value, (list, tuple)):
        return _sanitize_sequence(value, filter_keys, seen)
    return value


def _sanitize_mapping(value: Mapping, filter_keys: list[FilterKey], seen: set[int]) -> dict:
    if id(value) in seen:
        return RECURSIVE
    seen.add(id(value))
    try:
        return {
            key: FILTERED if _is_filtered(key, filter_keys) else _sanitize(item, filter_keys, seen)
            for key, item in value.items()
        }
    finally:
        seen.discard(id(value))


def _sanitize_sequence(value: list | tuple, filter_keys: list[FilterKey], seen: set[int]) -> list:
    if id(value) in seen:
        return RECURSIVE
    seen.add(id(value))
    try:
        return [_sanitize(item, filter_keys, seen) for item in value]
    finally:
        seen.discard(id(value))


def _is_filtered(key: Any, filter_keys: list[FilterKey]) -> bool:
    name = str(key)
    for candidate in filter_keys:
        if isinstance(candidate, re.Pattern):
            if candidate.search(name):
                return True
        elif candidate == name:
            return True
    return False


__all__ = ["sanitize", "FILTERED", "RECURSIVE"]
