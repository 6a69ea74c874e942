"""Identifier helpers."""

from __future__ import annotations

import secrets
import string

_ALPHABET = string.ascii_letters + string.digits


def generate_id(prefix: str | None = None, *, size: int = 16) -> str:
    """Return a random alphanumeric id, optionally as ``{prefix}-{id}``."""
    if size < 1:
        raise ValueError("size must be >= 1")
    token = "".join(secrets.choice(_ALPHABET) for _ in range(size))
    return f"{prefix}-{token}" if prefix else token
