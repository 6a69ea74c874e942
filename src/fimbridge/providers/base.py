"""Language model protocol: minimal interface every model implements."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from fimbridge.options import CallOptions
    from fimbridge.result import GenerateResult, StreamResult


@runtime_checkable
class LanguageModel(Protocol):
    """Minimal language model protocol: generate and stream."""

    specification_version: str
    model_id: str
    supported_urls: dict[str, list[str]]

    @property
    def provider(self) -> str:
        """Provider name, also the key for ``CallOptions.provider_options``."""
        ...

    async def generate(self, options: CallOptions) -> GenerateResult:
        """Run one call and return the normalized result."""
        ...

    async def stream(self, options: CallOptions) -> StreamResult:
        """Start one call and return a stream of normalized parts."""
        ...
