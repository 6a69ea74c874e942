"""fimbridge: fill-in-the-middle completions behind a standard model interface.

Public API:
    - create_mistral_fim() / mistral_fim: provider factory and default instance
    - CallOptions, Message: generic call description
    - GenerateResult, StreamResult and stream parts: normalized outputs
"""

from __future__ import annotations

import logging

from fimbridge.config import ProviderSettings, load_api_key
from fimbridge.errors import (
    APIError,
    ConfigurationError,
    FimError,
    InvalidArgumentError,
    InvalidPromptError,
    NoSuchModelError,
    RateLimitError,
    RequestAbortedError,
    ResponseParseError,
    UnsupportedContentError,
)
from fimbridge.events import (
    ErrorPart,
    Finish,
    RawChunk,
    ResponseMetadataPart,
    StreamPart,
    StreamStart,
    TextDelta,
    TextEnd,
    TextStart,
)
from fimbridge.options import CallOptions, FilePart, Message, TextPart
from fimbridge.provider import MistralFimProvider, create_mistral_fim, mistral_fim
from fimbridge.providers import LanguageModel, MistralFimLanguageModel
from fimbridge.result import (
    CallWarning,
    FinishReason,
    GenerateResult,
    StreamResult,
    TextContent,
    Usage,
)

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("fimbridge")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("fimbridge").addHandler(logging.NullHandler())

__all__ = [
    "APIError",
    "CallOptions",
    "CallWarning",
    "ConfigurationError",
    "ErrorPart",
    "FilePart",
    "FimError",
    "Finish",
    "FinishReason",
    "GenerateResult",
    "InvalidArgumentError",
    "InvalidPromptError",
    "LanguageModel",
    "Message",
    "MistralFimLanguageModel",
    "MistralFimProvider",
    "NoSuchModelError",
    "ProviderSettings",
    "RateLimitError",
    "RawChunk",
    "RequestAbortedError",
    "ResponseMetadataPart",
    "ResponseParseError",
    "StreamPart",
    "StreamResult",
    "StreamStart",
    "TextContent",
    "TextDelta",
    "TextEnd",
    "TextPart",
    "TextStart",
    "UnsupportedContentError",
    "Usage",
    "create_mistral_fim",
    "load_api_key",
    "mistral_fim",
]
