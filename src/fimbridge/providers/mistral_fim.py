"""Mistral FIM (fill-in-the-middle) completions model."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial
import logging
from typing import TYPE_CHECKING, Any

import httpx

from fimbridge._http import combine_headers
from fimbridge.config import ProviderSettings
from fimbridge.errors import InvalidPromptError
from fimbridge.providers._content import (
    extract_text_items,
    extract_user_prompt,
    get_response_metadata,
    map_finish_reason,
)
from fimbridge.providers._errors import failed_response_handler, wrap_provider_error
from fimbridge.providers._stream import normalize_stream
from fimbridge.providers.mistral_options import parse_provider_options
from fimbridge.providers.mistral_wire import (
    FimCompletionChunk,
    FimCompletionRequest,
    FimCompletionResponse,
)
from fimbridge.result import (
    CallWarning,
    GenerateResult,
    RequestInfo,
    ResponseInfo,
    StreamResult,
    TextContent,
    Usage,
)
from fimbridge.transport import (
    event_source_response_handler,
    json_response_handler,
    post_json_to_api,
)

if TYPE_CHECKING:
    from fimbridge.options import CallOptions
    from fimbridge.providers.mistral_options import MistralFimModelId
    from fimbridge.transport import ApiResponse

logger = logging.getLogger(__name__)

FIM_COMPLETIONS_PATH = "/fim/completions"

# Generic settings the FIM wire format has no field for.
_UNSUPPORTED_SETTINGS = (
    "top_k",
    "frequency_penalty",
    "presence_penalty",
    "stop_sequences",
    "response_format",
    "tools",
    "tool_choice",
)


@dataclass(frozen=True)
class BuiltRequest:
    """Wire request plus the warnings collected while building it."""

    request: FimCompletionRequest
    warnings: list[CallWarning] = field(default_factory=list)

    @property
    def body(self) -> dict[str, Any]:
        return self.request.to_body()


class MistralFimLanguageModel:
    """Text-completion model served by the ``/fim/completions`` endpoint.

    Only the first user text part is sent, as ``prompt``. A trailing
    ``suffix`` and extra stop tokens travel through provider options.
    """

    specification_version = "v2"
    supported_urls: dict[str, list[str]] = {}

    def __init__(
        self,
        model_id: MistralFimModelId,
        settings: ProviderSettings | None = None,
        *,
        provider: str = "mistral.fim",
    ) -> None:
        self.model_id = model_id
        self.settings = settings or ProviderSettings()
        self._provider = provider

    @property
    def provider(self) -> str:
        return self._provider

    def build_request(self, options: CallOptions) -> BuiltRequest:
        """Map a generic call description onto the wire request.

        Raises:
            InvalidArgumentError: Provider options failed validation.
            InvalidPromptError: No non-empty user text to send as the prompt.
        """
        provider_options = parse_provider_options(
            self.provider, options.provider_options
        )

        warnings = [
            CallWarning(setting=setting)
            for setting in _UNSUPPORTED_SETTINGS
            if getattr(options, setting) is not None
        ]

        prompt = extract_user_prompt(options.prompt)
        if not prompt:
            raise InvalidPromptError(
                "Empty prompt",
                hint="Include a user message with a non-empty text part.",
            )

        request = FimCompletionRequest(
            model=self.model_id,
            prompt=prompt,
            suffix=provider_options.suffix,
            stop=provider_options.stop,
            temperature=options.temperature,
            top_p=options.top_p,
            max_tokens=options.max_output_tokens,
            min_tokens=provider_options.min_tokens,
            random_seed=options.seed,
        )
        if warnings:
            logger.debug(
                "%s dropped unsupported settings: %s",
                self.provider,
                ", ".join(w.setting for w in warnings),
            )
        return BuiltRequest(request=request, warnings=warnings)

    async def generate(self, options: CallOptions) -> GenerateResult:
        """Run one synchronous completion and normalize the JSON response."""
        built = self.build_request(options)
        body = built.body

        api_response = await self._post(options, body, phase="generate")
        response: FimCompletionResponse = api_response.value

        choice = response.choices[0]
        metadata = get_response_metadata(
            id=response.id, created=response.created, model=response.model
        )
        return GenerateResult(
            content=[
                TextContent(text=text)
                for text in extract_text_items(choice.message.content)
            ],
            finish_reason=map_finish_reason(choice.finish_reason),
            usage=Usage(
                input_tokens=response.usage.prompt_tokens,
                output_tokens=response.usage.completion_tokens,
                total_tokens=response.usage.total_tokens,
            ),
            request=RequestInfo(body=body),
            response=ResponseInfo(
                id=metadata.id,
                timestamp=metadata.timestamp,
                model_id=metadata.model_id,
                headers=api_response.headers,
                body=api_response.raw_value,
            ),
            warnings=built.warnings,
        )

    async def stream(self, options: CallOptions) -> StreamResult:
        """Start a streaming completion.

        HTTP failures raise here; once this returns, problems surface as
        ``error`` parts and the stream still ends with ``finish``.
        """
        built = self.build_request(options)
        body = {**built.body, "stream": True}

        api_response = await self._post(options, body, phase="stream")
        return StreamResult(
            stream=normalize_stream(
                api_response.value,
                warnings=built.warnings,
                include_raw_chunks=options.include_raw_chunks,
                provider=self.provider,
            ),
            request=RequestInfo(body=body),
            response_headers=api_response.headers,
            _closer=api_response.aclose,
        )

    async def _post(
        self, options: CallOptions, body: dict[str, Any], *, phase: str
    ) -> ApiResponse:
        request_id = self.settings.generate_id()
        url = f"{self.settings.base_url}{FIM_COMPLETIONS_PATH}"
        headers = combine_headers(self.settings.auth_headers(), options.headers)
        handler = (
            event_source_response_handler(FimCompletionChunk)
            if phase == "stream"
            else json_response_handler(FimCompletionResponse)
        )
        logger.debug(
            "%s request %s: model=%s stream=%s url=%s",
            self.provider,
            request_id,
            self.model_id,
            phase == "stream",
            url,
        )
        try:
            return await post_json_to_api(
                url=url,
                headers=headers,
                body=body,
                successful_response_handler=handler,
                failed_response_handler=partial(
                    failed_response_handler, provider=self.provider, phase=phase
                ),
                abort_signal=options.abort_signal,
                transport=self.settings.transport,
                timeout_s=self.settings.timeout_s,
            )
        except httpx.HTTPError as e:
            raise wrap_provider_error(
                e,
                provider=self.provider,
                phase=phase,
                message=f"{self.provider} request {request_id} failed",
            ) from e

    def __repr__(self) -> str:
        return f"MistralFimLanguageModel(model_id={self.model_id!r}, provider={self.provider!r})"
