"""Provider-agnostic result shapes returned by language models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable
    from datetime import datetime

    from fimbridge.events import StreamPart

FinishReason = Literal["stop", "length", "error", "unknown"]


@dataclass(frozen=True)
class CallWarning:
    """A requested setting the target wire format could not express."""

    setting: str
    details: str | None = None
    type: Literal["unsupported-setting"] = field(
        default="unsupported-setting", init=False
    )


@dataclass(frozen=True)
class Usage:
    """Token counts; ``None`` means the provider did not report the value."""

    input_tokens: int | None = None
    output_tokens: int | None = None
    total_tokens: int | None = None


@dataclass(frozen=True)
class TextContent:
    """A run of generated text."""

    text: str
    type: Literal["text"] = field(default="text", init=False)


@dataclass(frozen=True)
class ResponseMetadata:
    """Identifying details echoed by the provider."""

    id: str | None = None
    timestamp: datetime | None = None
    model_id: str | None = None


@dataclass(frozen=True)
class RequestInfo:
    """The wire body that was sent."""

    body: dict[str, Any]


@dataclass(frozen=True)
class ResponseInfo:
    """Metadata plus raw HTTP details of a synchronous response."""

    id: str | None = None
    timestamp: datetime | None = None
    model_id: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    #: Decoded JSON body exactly as received.
    body: Any = None


@dataclass(frozen=True)
class GenerateResult:
    """Normalized result of a synchronous generation call."""

    content: list[TextContent]
    finish_reason: FinishReason
    usage: Usage
    request: RequestInfo
    response: ResponseInfo
    warnings: list[CallWarning] = field(default_factory=list)

    @property
    def text(self) -> str:
        """All text content joined in order."""
        return "".join(item.text for item in self.content)


@dataclass
class StreamResult:
    """Handle on a streaming generation call.

    Iterate ``stream`` exactly once. Call ``aclose()`` when abandoning the
    stream early so the HTTP connection is released.
    """

    stream: AsyncIterator[StreamPart]
    request: RequestInfo
    response_headers: dict[str, str] = field(default_factory=dict)
    _closer: Callable[[], Awaitable[None]] | None = field(default=None, repr=False)

    def __aiter__(self) -> AsyncIterator[StreamPart]:
        return self.stream

    async def aclose(self) -> None:
        """Release the underlying connection."""
        if self._closer is not None:
            closer, self._closer = self._closer, None
            await closer()
