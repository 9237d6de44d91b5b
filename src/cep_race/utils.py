"""Utility helpers shared across the package."""

import hashlib
import re
import time
from collections.abc import Sequence
from typing import Any

_NON_DIGITS = re.compile(r"\D+")


def ensure_str_list(value: Any) -> list[str]:
    """Return a list of non-empty strings extracted from ``value``."""

    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    parts: list[str] = []
    if isinstance(value, Sequence):
        for item in value:
            if isinstance(item, str) and item.strip():
                parts.append(item.strip())
    return parts


def digits_only(postal_code: str) -> str:
    """Strip formatting characters such as ``-`` or ``.`` from a CEP."""

    return _NON_DIGITS.sub("", postal_code or "")


def content_hash(postal_code: str, providers: Sequence[str]) -> str:
    """Return a deterministic fingerprint for a race request."""

    h = hashlib.sha256()
    h.update(postal_code.encode())
    for provider in providers:
        h.update(b"\x00")
        h.update(provider.encode())
    return h.hexdigest()[:16]


def elapsed_ms(start_ts: float, *, now: float | None = None) -> int:
    """Return elapsed time in milliseconds since ``start_ts``."""

    current = time.perf_counter() if now is None else now
    return max(0, int((current - start_ts) * 1000))


def clean_text(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        value = str(value)
    return value.strip()


__all__ = [
    "ensure_str_list",
    "digits_only",
    "content_hash",
    "elapsed_ms",
    "clean_text",
]
