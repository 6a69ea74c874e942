"""Pure extraction helpers shared by the synchronous and streaming paths."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from fimbridge.errors import UnsupportedContentError
from fimbridge.providers.mistral_wire import (
    ImageURLChunk,
    ReferenceChunk,
    TextChunk,
    ThinkingChunk,
)
from fimbridge.result import ResponseMetadata

if TYPE_CHECKING:
    from collections.abc import Iterable

    from fimbridge.options import Message
    from fimbridge.providers.mistral_wire import WireContent
    from fimbridge.result import FinishReason

_FINISH_REASONS: dict[str, FinishReason] = {
    "stop": "stop",
    "length": "length",
    "model_length": "length",
    "error": "error",
}


def chunk_text(chunk: Any) -> str | None:
    """Return the completion text one typed content chunk contributes.

    Thinking, image and reference chunks carry no completion text. Any other
    chunk type raises ``UnsupportedContentError``.
    """
    match chunk:
        case TextChunk():
            return chunk.text
        case ThinkingChunk() | ImageURLChunk() | ReferenceChunk():
            return None
        case _:
            raise UnsupportedContentError(
                f"Unsupported content chunk type: {getattr(chunk, 'type', chunk)!r}"
            )


def extract_text_content(content: WireContent) -> str | None:
    """Flatten a content union into its text, or ``None`` when there is none."""
    if isinstance(content, str):
        return content or None
    if content is None:
        return None
    joined = "".join(text for text in map(chunk_text, content) if text)
    return joined or None


def extract_text_items(content: WireContent) -> list[str]:
    """Return each non-empty text run of a synchronous message, in order."""
    if isinstance(content, list):
        return [text for text in map(chunk_text, content) if text]
    text = extract_text_content(content)
    return [text] if text else []


def extract_user_prompt(messages: Iterable[Message]) -> str | None:
    """Return the text of the first text part of the first user message that has one."""
    for message in messages:
        if message.role != "user":
            continue
        for part in message.content:
            if part.type == "text":
                return part.text
    return None


def map_finish_reason(reason: str | None) -> FinishReason:
    """Map a wire finish reason; anything unrecognized becomes ``"unknown"``."""
    if not isinstance(reason, str):
        return "unknown"
    return _FINISH_REASONS.get(reason, "unknown")


def to_timestamp(created: Any) -> datetime | None:
    """Convert epoch seconds to an aware UTC datetime.

    Values the platform cannot represent (e.g. millisecond epochs) give ``None``.
    """
    if created is None:
        return None
    try:
        return datetime.fromtimestamp(created, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def get_response_metadata(
    *, id: str | None, created: float | None, model: str | None
) -> ResponseMetadata:
    return ResponseMetadata(id=id, timestamp=to_timestamp(created), model_id=model)
