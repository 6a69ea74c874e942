"""Small HTTP-related helpers shared across fimbridge.

This module is intentionally tiny to avoid circular imports and drift.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

# Status codes a caller may reasonably retry; classification only.
RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({408, 409, 429, 500, 502, 503, 504})


def combine_headers(*layers: Mapping[str, str | None] | None) -> dict[str, str]:
    """Merge header mappings left to right, dropping ``None`` values.

    Later layers win. Keys are compared case-insensitively so a per-call
    ``authorization`` header replaces a provider-level ``Authorization``.
    """
    merged: dict[str, tuple[str, str]] = {}
    for layer in layers:
        if not layer:
            continue
        for key, value in layer.items():
            if value is None:
                merged.pop(key.lower(), None)
                continue
            merged[key.lower()] = (key, value)
    return dict(merged.values())


def without_trailing_slash(url: str | None) -> str | None:
    """Strip trailing slashes from a base URL."""
    if url is None:
        return None
    return url.rstrip("/")
