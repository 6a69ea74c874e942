"""Stream parts emitted by streaming generation calls.

Every stream opens with ``StreamStart`` and closes with exactly one
``Finish``. Text arrives bracketed as ``TextStart`` / ``TextDelta``... /
``TextEnd`` under a shared span id.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

from fimbridge.result import Usage

if TYPE_CHECKING:
    from datetime import datetime

    from fimbridge.result import CallWarning, FinishReason


@dataclass(frozen=True)
class StreamStart:
    warnings: list[CallWarning]
    type: Literal["stream-start"] = field(default="stream-start", init=False)


@dataclass(frozen=True)
class RawChunk:
    """Untouched transport payload, emitted only when requested."""

    raw_value: Any
    type: Literal["raw"] = field(default="raw", init=False)


@dataclass(frozen=True)
class ResponseMetadataPart:
    id: str | None = None
    timestamp: datetime | None = None
    model_id: str | None = None
    type: Literal["response-metadata"] = field(
        default="response-metadata", init=False
    )


@dataclass(frozen=True)
class TextStart:
    id: str
    type: Literal["text-start"] = field(default="text-start", init=False)


@dataclass(frozen=True)
class TextDelta:
    id: str
    delta: str
    type: Literal["text-delta"] = field(default="text-delta", init=False)


@dataclass(frozen=True)
class TextEnd:
    id: str
    type: Literal["text-end"] = field(default="text-end", init=False)


@dataclass(frozen=True)
class ErrorPart:
    """A non-fatal failure; the stream keeps going."""

    error: BaseException
    type: Literal["error"] = field(default="error", init=False)


@dataclass(frozen=True)
class Finish:
    finish_reason: FinishReason
    usage: Usage = field(default_factory=Usage)
    type: Literal["finish"] = field(default="finish", init=False)


StreamPart = (
    StreamStart
    | RawChunk
    | ResponseMetadataPart
    | TextStart
    | TextDelta
    | TextEnd
    | ErrorPart
    | Finish
)
