"""Wire schemas for the FIM completions endpoint.

Deliberately partial: only fields the normalizers read are modelled, and
unknown keys are ignored so additive API changes do not break parsing.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class TextChunk(_WireModel):
    type: Literal["text"]
    text: str


class ImageURL(_WireModel):
    url: str
    detail: str | None = None


class ImageURLChunk(_WireModel):
    type: Literal["image_url"]
    image_url: str | ImageURL


class ReferenceChunk(_WireModel):
    type: Literal["reference"]
    reference_ids: list[int]


class ThinkingChunk(_WireModel):
    type: Literal["thinking"]
    thinking: list[TextChunk]


ContentChunk = Annotated[
    Union[TextChunk, ImageURLChunk, ReferenceChunk, ThinkingChunk],
    Field(discriminator="type"),
]

#: ``None``, a plain string, or an ordered list of typed chunks.
WireContent = Union[str, list[ContentChunk], None]


class WireFunction(_WireModel):
    name: str
    arguments: str


class WireToolCall(_WireModel):
    """Transported but never acted on."""

    id: str
    function: WireFunction


class WireUsage(_WireModel):
    prompt_tokens: int = Field(ge=0)
    completion_tokens: int = Field(ge=0)
    total_tokens: int = Field(ge=0)


class WireMessage(_WireModel):
    role: Literal["assistant"] = "assistant"
    content: WireContent = None
    tool_calls: list[WireToolCall] | None = None


class WireChoice(_WireModel):
    index: int
    message: WireMessage
    finish_reason: str | None = None


class FimCompletionResponse(_WireModel):
    """Synchronous response envelope."""

    id: str | None = None
    #: Epoch seconds; fractional values are accepted.
    created: int | float | None = None
    model: str | None = None
    choices: list[WireChoice] = Field(min_length=1)
    usage: WireUsage


class WireDelta(_WireModel):
    role: Literal["assistant"] | None = None
    content: WireContent = None
    tool_calls: list[WireToolCall] | None = None


class WireChunkChoice(_WireModel):
    index: int
    delta: WireDelta
    finish_reason: str | None = None


class FimCompletionChunk(_WireModel):
    """One streamed chunk; ``usage`` arrives on the terminal chunk only."""

    id: str | None = None
    #: Epoch seconds; fractional values are accepted.
    created: int | float | None = None
    model: str | None = None
    #: Usage-only terminal chunks may arrive without choices.
    choices: list[WireChunkChoice] = Field(default_factory=list)
    usage: WireUsage | None = None


class FimCompletionRequest(_WireModel):
    """Outbound request body; unset fields are omitted from the JSON."""

    model: str
    prompt: str = Field(min_length=1)
    suffix: str | None = None
    stop: str | list[str] | None = None
    temperature: float | None = None
    top_p: float | None = None
    max_tokens: int | None = None
    min_tokens: int | None = None
    random_seed: int | None = None
    stream: bool | None = None

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
