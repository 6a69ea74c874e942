"""Generic call description accepted by every language model."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Literal

from fimbridge.errors import ConfigurationError

Role = Literal["system", "user", "assistant", "tool"]


@dataclass(frozen=True)
class TextPart:
    """Plain text content."""

    text: str
    type: Literal["text"] = field(default="text", init=False)


@dataclass(frozen=True)
class FilePart:
    """Binary or URL-referenced file content (ignored by text-only models)."""

    data: bytes | str
    media_type: str
    type: Literal["file"] = field(default="file", init=False)


@dataclass(frozen=True)
class ReasoningPart:
    """Reasoning text from an earlier assistant turn."""

    text: str
    type: Literal["reasoning"] = field(default="reasoning", init=False)


@dataclass(frozen=True)
class ToolCallPart:
    """Tool invocation from an earlier assistant turn."""

    tool_call_id: str
    tool_name: str
    input: Any
    type: Literal["tool-call"] = field(default="tool-call", init=False)


@dataclass(frozen=True)
class ToolResultPart:
    """Result of a tool invocation."""

    tool_call_id: str
    tool_name: str
    output: Any
    type: Literal["tool-result"] = field(default="tool-result", init=False)


ContentPart = TextPart | FilePart | ReasoningPart | ToolCallPart | ToolResultPart


@dataclass(frozen=True)
class Message:
    """One role-tagged turn of the prompt."""

    role: Role
    content: tuple[ContentPart, ...] = ()

    def __post_init__(self) -> None:
        """Accept any sequence of parts but store a tuple."""
        if isinstance(self.content, str):
            raise ConfigurationError(
                "Message content must be a sequence of parts",
                hint="Wrap text as Message('user', (TextPart('...'),)).",
            )
        object.__setattr__(self, "content", tuple(self.content))

    @classmethod
    def user(cls, text: str) -> Message:
        """Build a single-text-part user message."""
        return cls("user", (TextPart(text),))


@dataclass(frozen=True)
class CallOptions:
    """Everything a caller can ask of a single generation call.

    Not every model honors every field. Settings a model cannot express are
    reported back as warnings rather than raised.
    """

    prompt: tuple[Message, ...]
    max_output_tokens: int | None = None
    temperature: float | None = None
    stop_sequences: list[str] | None = None
    top_p: float | None = None
    top_k: int | None = None
    presence_penalty: float | None = None
    frequency_penalty: float | None = None
    #: e.g. ``{"type": "json", "schema": {...}}``.
    response_format: dict[str, Any] | None = None
    seed: int | None = None
    tools: list[dict[str, Any]] | None = None
    tool_choice: Literal["auto", "required", "none"] | dict[str, Any] | None = None
    #: Keyed by provider name, e.g. ``{"mistral.fim": {"suffix": "..."}}``.
    provider_options: dict[str, dict[str, Any]] | None = None
    #: Setting the event aborts the HTTP operation.
    abort_signal: asyncio.Event | None = None
    #: Streaming only: also emit each untouched chunk as a ``raw`` event.
    include_raw_chunks: bool = False
    #: Per-call headers, merged over provider headers.
    headers: dict[str, str | None] | None = None

    def __post_init__(self) -> None:
        """Validate option shapes early for clear errors."""
        if isinstance(self.prompt, (str, bytes)):
            raise ConfigurationError(
                "prompt must be a sequence of Message objects",
                hint="Pass prompt=[Message.user('def fib(n):')].",
            )
        prompt = tuple(self.prompt)
        for message in prompt:
            if not isinstance(message, Message):
                raise ConfigurationError(
                    "prompt items must be Message objects",
                    hint="Pass prompt=[Message.user('def fib(n):')].",
                )
        object.__setattr__(self, "prompt", prompt)

        if self.max_output_tokens is not None and (
            isinstance(self.max_output_tokens, bool)
            or not isinstance(self.max_output_tokens, int)
            or self.max_output_tokens <= 0
        ):
            raise ConfigurationError(
                "max_output_tokens must be a positive integer",
                hint="Pass max_output_tokens=256.",
            )

        if self.provider_options is not None and not isinstance(
            self.provider_options, dict
        ):
            raise ConfigurationError(
                "provider_options must be a dict keyed by provider name",
                hint="Pass provider_options={'mistral.fim': {'suffix': '...'}}.",
            )

        if self.abort_signal is not None and not isinstance(
            self.abort_signal, asyncio.Event
        ):
            raise ConfigurationError(
                "abort_signal must be an asyncio.Event",
                hint="Create one with asyncio.Event() and call .set() to abort.",
            )
