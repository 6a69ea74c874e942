"""Classification of failed FIM requests into APIError.

Non-2xx responses and httpx transport failures both end up as APIError with
status, retryability and Retry-After filled in where known.
"""

from __future__ import annotations

import asyncio
from contextlib import suppress
import json
from typing import TYPE_CHECKING

import httpx
from pydantic import BaseModel, ValidationError

from fimbridge._http import RETRYABLE_STATUS_CODES
from fimbridge.config import API_KEY_ENV_VAR
from fimbridge.errors import APIError, RateLimitError, _walk_exception_chain

if TYPE_CHECKING:
    from collections.abc import Mapping

    from fimbridge.transport import ResponseContext


class MistralErrorBody(BaseModel):
    """Error envelope returned with non-2xx responses."""

    object: str = "error"
    message: str
    type: str | None = None
    param: str | None = None
    code: str | int | None = None


def retry_after_seconds(headers: Mapping[str, str] | None) -> float | None:
    """Parse a delta-seconds ``Retry-After`` header; HTTP dates are ignored."""
    if not headers:
        return None
    raw = headers.get("Retry-After") or headers.get("retry-after")
    if not raw or not raw.strip():
        return None
    try:
        seconds = float(raw)
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


def _auth_hint(status_code: int | None) -> str | None:
    if status_code in (401, 403):
        return f"Check the API key and its permissions ({API_KEY_ENV_VAR} or api_key=...)."
    return None


def _error_message(body_text: str, reason: str) -> str:
    if body_text:
        try:
            return MistralErrorBody.model_validate(json.loads(body_text)).message
        except (json.JSONDecodeError, ValidationError):
            return body_text
    return reason or "Request failed"


def _is_retryable(status_code: int | None, retry_after_s: float | None) -> bool:
    return status_code in RETRYABLE_STATUS_CODES or retry_after_s is not None


def failed_response_handler(
    ctx: ResponseContext, *, provider: str = "mistral.fim", phase: str = "generate"
) -> APIError:
    """Classify a non-2xx response (body already read) into an APIError."""
    response = ctx.response
    status_code = response.status_code
    body_text = response.text
    retry_after_s = retry_after_seconds(response.headers)

    err_cls = RateLimitError if status_code == 429 else APIError
    return err_cls(
        f"{provider} request failed (status={status_code}): "
        f"{_error_message(body_text, response.reason_phrase)}",
        hint=_auth_hint(status_code),
        retryable=_is_retryable(status_code, retry_after_s),
        status_code=status_code,
        retry_after_s=retry_after_s,
        url=ctx.url,
        response_headers=dict(response.headers),
        response_body=body_text,
        provider=provider,
        phase=phase,
    )


def wrap_provider_error(
    exc: BaseException,
    *,
    provider: str,
    phase: str,
    message: str | None = None,
) -> APIError:
    """Turn an httpx failure into APIError; an APIError only gains context.

    Timeouts and connection-level errors are marked retryable. An
    ``httpx.HTTPStatusError`` anywhere in the cause chain supplies the status.
    """
    if isinstance(exc, asyncio.CancelledError):
        raise exc

    if isinstance(exc, APIError):
        exc.provider = exc.provider or provider
        exc.phase = exc.phase or phase
        return exc

    response: httpx.Response | None = None
    transient = False
    for link in _walk_exception_chain(exc):
        if isinstance(link, httpx.HTTPStatusError) and response is None:
            response = link.response
        if isinstance(link, (httpx.TimeoutException, httpx.TransportError)):
            transient = True

    status_code = response.status_code if response is not None else None
    retry_after_s = retry_after_seconds(None if response is None else response.headers)

    url: str | None = None
    if isinstance(exc, httpx.RequestError):
        # .request raises when httpx never attached one
        with suppress(RuntimeError):
            url = str(exc.request.url)

    summary = message or f"{provider} {phase} failed"
    if status_code is not None:
        summary = f"{summary} (status={status_code})"
    detail = str(exc)

    err_cls = RateLimitError if status_code == 429 else APIError
    return err_cls(
        f"{summary}: {detail}" if detail else summary,
        hint=_auth_hint(status_code),
        retryable=transient or _is_retryable(status_code, retry_after_s),
        status_code=status_code,
        retry_after_s=retry_after_s,
        url=url,
        provider=provider,
        phase=phase,
    )
