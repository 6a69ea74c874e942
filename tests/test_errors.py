"""Error hierarchy and classification of provider failures."""

from __future__ import annotations

import asyncio

import httpx
import pytest

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
    _walk_exception_chain,
)
from fimbridge.providers._errors import wrap_provider_error

pytestmark = pytest.mark.unit


def test_api_error_carries_request_metadata() -> None:
    err = APIError(
        "boom",
        hint="do this",
        retryable=True,
        status_code=429,
        retry_after_s=2.0,
        url="https://example.test/fim/completions",
        response_headers={"retry-after": "2"},
        response_body='{"message": "slow down"}',
        provider="mistral.fim",
        phase="generate",
    )

    assert str(err) == "boom"
    assert err.hint == "do this"
    assert err.retryable is True
    assert err.status_code == 429
    assert err.retry_after_s == 2.0
    assert err.url == "https://example.test/fim/completions"
    assert err.response_headers == {"retry-after": "2"}
    assert err.response_body == '{"message": "slow down"}'
    assert err.provider == "mistral.fim"
    assert err.phase == "generate"


def test_api_error_metadata_is_optional() -> None:
    err = APIError("fail")
    assert err.hint is None
    assert err.retryable is None
    assert err.status_code is None
    assert err.retry_after_s is None
    assert err.url is None
    assert err.response_headers is None
    assert err.response_body is None
    assert err.provider is None
    assert err.phase is None


def test_every_error_is_a_fim_error() -> None:
    """Every error is catchable as FimError; HTTP errors as APIError."""
    rate_err = RateLimitError("rate limit", status_code=429, retryable=True)
    aborted = RequestAbortedError("aborted")

    assert isinstance(rate_err, APIError)
    assert isinstance(aborted, APIError)
    for err in (
        rate_err,
        aborted,
        ConfigurationError("bad"),
        InvalidPromptError("Empty prompt"),
        InvalidArgumentError("bad option", argument="provider_options"),
        NoSuchModelError(model_id="m", model_type="image_model"),
        ResponseParseError("bad json", raw_value="{"),
    ):
        assert isinstance(err, FimError)


def test_no_such_model_error_names_model_and_type() -> None:
    err = NoSuchModelError(model_id="mistral-embed", model_type="text_embedding_model")

    assert err.model_id == "mistral-embed"
    assert err.model_type == "text_embedding_model"
    assert "mistral-embed" in str(err)
    assert err.hint is not None


def test_response_parse_error_keeps_raw_value() -> None:
    err = ResponseParseError("invalid", raw_value={"choices": "nope"})
    assert err.raw_value == {"choices": "nope"}


def _status_error(status: int, headers: dict[str, str] | None = None) -> httpx.HTTPStatusError:
    request = httpx.Request("POST", "https://example.test/fim/completions")
    response = httpx.Response(status, headers=headers, request=request)
    return httpx.HTTPStatusError("bad status", request=request, response=response)


def test_wrap_reads_status_and_retry_after_from_cause_chain() -> None:
    try:
        try:
            raise _status_error(429, {"Retry-After": "7"})
        except httpx.HTTPStatusError as inner:
            raise RuntimeError("sdk failure") from inner
    except RuntimeError as outer:
        err = wrap_provider_error(outer, provider="mistral.fim", phase="generate")

    assert isinstance(err, RateLimitError)
    assert err.status_code == 429
    assert err.retry_after_s == 7.0
    assert err.retryable is True
    assert "(status=429)" in str(err)


def test_wrap_marks_timeouts_retryable() -> None:
    request = httpx.Request("POST", "https://example.test/fim/completions")
    err = wrap_provider_error(
        httpx.ReadTimeout("timed out", request=request),
        provider="mistral.fim",
        phase="stream",
    )

    assert err.retryable is True
    assert err.status_code is None
    assert err.url == "https://example.test/fim/completions"
    assert err.phase == "stream"


def test_wrap_client_error_is_not_retryable() -> None:
    err = wrap_provider_error(_status_error(422), provider="mistral.fim", phase="generate")
    assert err.retryable is False
    assert err.status_code == 422


def test_wrap_only_fills_missing_context_on_api_error() -> None:
    original = APIError("boom", status_code=500, phase="generate")

    err = wrap_provider_error(original, provider="mistral.fim", phase="stream")

    assert err is original
    assert err.provider == "mistral.fim"
    assert err.phase == "generate"


def test_wrap_reraises_cancellation() -> None:
    with pytest.raises(asyncio.CancelledError):
        wrap_provider_error(asyncio.CancelledError(), provider="p", phase="generate")


def test_exception_chain_walk_survives_cycles() -> None:
    first = ValueError("a")
    second = KeyError("b")
    first.__context__ = second
    second.__context__ = first

    assert list(_walk_exception_chain(first)) == [first, second]
