"""Configuration: frozen provider settings and credential loading."""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from fimbridge._http import without_trailing_slash
from fimbridge.errors import ConfigurationError
from fimbridge.ids import generate_id as _default_generate_id

if TYPE_CHECKING:
    from collections.abc import Callable

    import httpx

load_dotenv()

DEFAULT_BASE_URL = "https://api.mistral.ai/v1"
API_KEY_ENV_VAR = "MISTRAL_API_KEY"


def load_api_key(
    api_key: str | None,
    *,
    env_var: str = API_KEY_ENV_VAR,
    description: str = "Mistral",
) -> str:
    """Return *api_key*, falling back to *env_var*.

    Raises:
        ConfigurationError: Neither source holds a non-empty key.
    """
    if api_key is not None:
        if not isinstance(api_key, str):
            raise ConfigurationError(
                f"{description} API key must be a string",
                hint=f"Pass api_key='...' or set {env_var}.",
            )
        return api_key

    resolved = os.environ.get(env_var)
    if not resolved:
        raise ConfigurationError(
            f"{description} API key is missing",
            hint=f"Set the {env_var} environment variable or pass api_key=...",
        )
    return resolved


@dataclass(frozen=True)
class ProviderSettings:
    """Immutable settings shared by every model a provider creates.

    The API key is resolved lazily on each request, so settings (and
    providers) can be built before credentials are available.

    Example:
        settings = ProviderSettings(headers={"X-Team": "search"})
        # Authorization comes from MISTRAL_API_KEY at request time
    """

    base_url: str = DEFAULT_BASE_URL
    #: Auto-resolved from ``MISTRAL_API_KEY`` when *None*.
    api_key: str | None = None
    #: Extra headers sent with every request; ``None`` values are dropped.
    headers: dict[str, str | None] = field(default_factory=dict)
    timeout_s: float = 60.0
    #: Custom httpx transport, e.g. ``httpx.MockTransport`` in tests.
    transport: httpx.AsyncBaseTransport | None = None
    generate_id: Callable[[], str] = _default_generate_id

    def __post_init__(self) -> None:
        """Normalize the base URL and validate numeric fields."""
        base_url = without_trailing_slash(self.base_url)
        if not base_url:
            raise ConfigurationError(
                "base_url must be a non-empty URL",
                hint=f"Omit base_url to use {DEFAULT_BASE_URL}.",
            )
        object.__setattr__(self, "base_url", base_url)

        if isinstance(self.timeout_s, bool) or not isinstance(
            self.timeout_s, (int, float)
        ):
            raise ConfigurationError(
                "timeout_s must be a number",
                hint="Pass timeout_s=60.0 (seconds).",
            )
        if self.timeout_s <= 0:
            raise ConfigurationError(
                f"timeout_s must be > 0, got {self.timeout_s}",
                hint="This bounds each HTTP operation in seconds.",
            )

    def auth_headers(self) -> dict[str, str | None]:
        """Return provider headers with the bearer token applied."""
        key = load_api_key(self.api_key)
        return {"Authorization": f"Bearer {key}", **self.headers}

    def __str__(self) -> str:
        """Return a redacted, developer-friendly representation."""
        return (
            f"ProviderSettings(base_url={self.base_url!r}, "
            f"api_key={'[REDACTED]' if self.api_key else None}, "
            f"timeout_s={self.timeout_s})"
        )

    __repr__ = __str__
