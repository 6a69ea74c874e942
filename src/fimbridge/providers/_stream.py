"""Incremental normalization of streamed completion chunks."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING

import httpx

from fimbridge.events import (
    ErrorPart,
    Finish,
    RawChunk,
    ResponseMetadataPart,
    StreamStart,
    TextDelta,
    TextEnd,
    TextStart,
)
from fimbridge.providers._content import (
    extract_text_content,
    get_response_metadata,
    map_finish_reason,
)
from fimbridge.providers._errors import wrap_provider_error
from fimbridge.result import Usage

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fimbridge.events import StreamPart
    from fimbridge.providers.mistral_wire import FimCompletionChunk
    from fimbridge.result import CallWarning, FinishReason
    from fimbridge.transport import ParseResult

logger = logging.getLogger(__name__)

TEXT_SPAN_ID = "0"


@dataclass
class FimStreamState:
    """Per-stream state; one instance per call, never shared."""

    include_raw_chunks: bool = False
    is_first_chunk: bool = True
    active_text: bool = False
    finish_reason: FinishReason = "unknown"
    usage: Usage = field(default_factory=Usage)

    def transform(self, chunk: ParseResult[FimCompletionChunk]) -> list[StreamPart]:
        """Return the parts produced by one transport event.

        Never raises for a bad chunk: the failure becomes an ``ErrorPart`` and
        the parts already derived from that chunk are kept.
        """
        parts: list[StreamPart] = []
        if self.include_raw_chunks:
            parts.append(RawChunk(raw_value=chunk.raw_value))

        if not chunk.success or chunk.value is None:
            logger.debug("Dropping unparseable stream chunk: %s", chunk.error)
            parts.append(ErrorPart(error=chunk.error))
            return parts

        try:
            self._apply(chunk.value, parts)
        except Exception as exc:
            logger.debug("Failed to normalize stream chunk: %s", exc)
            parts.append(ErrorPart(error=exc))
        return parts

    def _apply(self, value: FimCompletionChunk, parts: list[StreamPart]) -> None:
        if self.is_first_chunk:
            self.is_first_chunk = False
            metadata = get_response_metadata(
                id=value.id, created=value.created, model=value.model
            )
            parts.append(
                ResponseMetadataPart(
                    id=metadata.id,
                    timestamp=metadata.timestamp,
                    model_id=metadata.model_id,
                )
            )

        if value.usage is not None:
            self.usage = Usage(
                input_tokens=value.usage.prompt_tokens,
                output_tokens=value.usage.completion_tokens,
                total_tokens=value.usage.total_tokens,
            )

        if not value.choices:
            return
        choice = value.choices[0]

        text = extract_text_content(choice.delta.content)
        if text:
            if not self.active_text:
                parts.append(TextStart(id=TEXT_SPAN_ID))
                self.active_text = True
            parts.append(TextDelta(id=TEXT_SPAN_ID, delta=text))

        if choice.finish_reason is not None:
            self.finish_reason = map_finish_reason(choice.finish_reason)

    def flush(self) -> list[StreamPart]:
        """Close any open text span and emit the terminal ``Finish``."""
        parts: list[StreamPart] = []
        if self.active_text:
            parts.append(TextEnd(id=TEXT_SPAN_ID))
            self.active_text = False
        parts.append(Finish(finish_reason=self.finish_reason, usage=self.usage))
        return parts


async def normalize_stream(
    chunks: AsyncIterator[ParseResult[FimCompletionChunk]],
    *,
    warnings: list[CallWarning],
    include_raw_chunks: bool = False,
    provider: str = "mistral.fim",
) -> AsyncIterator[StreamPart]:
    """Turn parsed transport events into normalized stream parts.

    Always opens with ``StreamStart`` and ends with exactly one ``Finish``,
    whether the transport ends normally, is aborted, or fails mid-stream.
    """
    state = FimStreamState(include_raw_chunks=include_raw_chunks)
    yield StreamStart(warnings=list(warnings))

    try:
        async for chunk in chunks:
            for part in state.transform(chunk):
                yield part
    except httpx.HTTPError as exc:
        logger.warning("%s stream ended on transport failure: %s", provider, exc)
        yield ErrorPart(error=wrap_provider_error(exc, provider=provider, phase="stream"))

    for part in state.flush():
        yield part
