"""HTTP transport: JSON POST with JSON or server-sent-event response handling.

Providers call ``post_json_to_api`` with a successful-response handler
(``json_response_handler`` or ``event_source_response_handler``) and a
failed-response handler that turns non-2xx responses into ``APIError``.
httpx network exceptions propagate unchanged; callers decide how to wrap them.
"""

from __future__ import annotations

import asyncio
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
import json
import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from fimbridge.errors import APIError, RequestAbortedError, ResponseParseError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

SSE_DONE = "[DONE]"
_EOF = object()


@dataclass(frozen=True)
class ParseResult(Generic[ModelT]):
    """Outcome of decoding one payload: either ``value`` or ``error`` is set."""

    success: bool
    raw_value: Any
    value: ModelT | None = None
    error: ResponseParseError | None = None


@dataclass(frozen=True)
class ResponseContext:
    """What a response handler needs to know about the exchange."""

    response: httpx.Response
    url: str
    request_body: Any
    abort_signal: asyncio.Event | None = None


@dataclass
class ApiResponse:
    """Handled response: decoded value plus transport details."""

    headers: dict[str, str]
    value: Any
    raw_value: Any = None
    aclose: Callable[[], Awaitable[None]] | None = field(default=None, repr=False)


def parse_json(text: str, model: type[ModelT]) -> ParseResult[ModelT]:
    """Decode *text* as JSON and validate it against *model* without raising."""
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        return ParseResult(
            success=False,
            raw_value=text,
            error=ResponseParseError(f"Invalid JSON: {exc}", raw_value=text),
        )
    try:
        value = model.model_validate(raw)
    except ValidationError as exc:
        return ParseResult(
            success=False,
            raw_value=raw,
            error=ResponseParseError(
                f"Response did not match {model.__name__}: {exc}", raw_value=raw
            ),
        )
    return ParseResult(success=True, raw_value=raw, value=value)


class JsonResponseHandler(Generic[ModelT]):
    """Read the whole body and validate it as one JSON document."""

    streaming = False

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    async def __call__(self, ctx: ResponseContext) -> tuple[ModelT, Any]:
        body = await ctx.response.aread()
        result = parse_json(body.decode("utf-8", errors="replace"), self.model)
        if result.error is not None:
            raise result.error
        return result.value, result.raw_value  # type: ignore[return-value]


class EventSourceResponseHandler(Generic[ModelT]):
    """Yield one ``ParseResult`` per SSE ``data`` event.

    The connection stays open until the returned iterator is exhausted,
    reaches the ``[DONE]`` terminator, or the abort signal fires.
    """

    streaming = True

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    async def __call__(
        self, ctx: ResponseContext
    ) -> tuple[AsyncIterator[ParseResult[ModelT]], None]:
        return self._events(ctx), None

    async def _events(self, ctx: ResponseContext) -> AsyncIterator[ParseResult[ModelT]]:
        lines = _abortable(ctx.response.aiter_lines(), ctx.abort_signal)
        async for data in iter_sse_data(lines):
            if data.strip() == SSE_DONE:
                return
            yield parse_json(data, self.model)


def json_response_handler(model: type[ModelT]) -> JsonResponseHandler[ModelT]:
    return JsonResponseHandler(model)


def event_source_response_handler(
    model: type[ModelT],
) -> EventSourceResponseHandler[ModelT]:
    return EventSourceResponseHandler(model)


async def iter_sse_data(lines: AsyncIterator[str]) -> AsyncIterator[str]:
    """Extract ``data`` payloads from server-sent-event lines.

    Multi-line data fields are joined with newlines. Comments and the
    ``event``/``id``/``retry`` fields are skipped. A trailing event without a
    closing blank line is still delivered.
    """
    data_lines: list[str] = []
    async for line in lines:
        if not line:
            if data_lines:
                yield "\n".join(data_lines)
                data_lines = []
            continue
        if line.startswith(":"):
            continue
        name, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if name == "data":
            data_lines.append(value)
    if data_lines:
        yield "\n".join(data_lines)


async def post_json_to_api(
    *,
    url: str,
    headers: dict[str, str],
    body: Any,
    successful_response_handler: JsonResponseHandler[Any]
    | EventSourceResponseHandler[Any],
    failed_response_handler: Callable[[ResponseContext], APIError],
    abort_signal: asyncio.Event | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    timeout_s: float = 60.0,
) -> ApiResponse:
    """POST *body* as JSON and hand the response to the matching handler.

    Raises:
        APIError: Non-2xx status (built by *failed_response_handler*).
        RequestAbortedError: *abort_signal* fired before the response arrived.
        ResponseParseError: A JSON body failed to decode or validate.
        httpx.HTTPError: Network-level failures, unchanged.
    """
    stack = AsyncExitStack()
    try:
        client = await stack.enter_async_context(
            httpx.AsyncClient(timeout=timeout_s, transport=transport)
        )
        request = client.build_request("POST", url, headers=headers, json=body)
        response = await _await_or_abort(
            client.send(request, stream=True), abort_signal, url=url
        )
        stack.push_async_callback(response.aclose)
        logger.debug("POST %s -> %s", url, response.status_code)

        ctx = ResponseContext(
            response=response,
            url=url,
            request_body=body,
            abort_signal=abort_signal,
        )
        if response.is_error:
            await response.aread()
            raise failed_response_handler(ctx)

        value, raw_value = await successful_response_handler(ctx)
    except BaseException:
        await stack.aclose()
        raise

    response_headers = dict(response.headers)
    if not successful_response_handler.streaming:
        await stack.aclose()
        return ApiResponse(headers=response_headers, value=value, raw_value=raw_value)

    closer = stack.pop_all().aclose
    return ApiResponse(
        headers=response_headers,
        value=_closing(value, closer),
        raw_value=raw_value,
        aclose=closer,
    )


async def _closing(
    source: AsyncIterator[Any], close: Callable[[], Awaitable[None]]
) -> AsyncIterator[Any]:
    try:
        async for item in source:
            yield item
    finally:
        aclose = getattr(source, "aclose", None)
        if aclose is not None:
            await aclose()
        await close()


async def _next_or_eof(iterator: AsyncIterator[Any]) -> Any:
    try:
        return await iterator.__anext__()
    except StopAsyncIteration:
        return _EOF


async def _abortable(
    source: AsyncIterator[Any], abort_signal: asyncio.Event | None
) -> AsyncIterator[Any]:
    """Re-yield *source* until it ends or *abort_signal* fires."""
    iterator = source.__aiter__()
    while True:
        try:
            item = await _await_or_abort(_next_or_eof(iterator), abort_signal)
        except RequestAbortedError:
            logger.debug("Event stream aborted by caller")
            return
        if item is _EOF:
            return
        yield item


async def _await_or_abort(
    coro: Awaitable[Any], abort_signal: asyncio.Event | None, *, url: str | None = None
) -> Any:
    """Await *coro* unless *abort_signal* fires first."""
    if abort_signal is None:
        return await coro
    task = asyncio.ensure_future(coro)
    if abort_signal.is_set():
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        raise RequestAbortedError("Request aborted", url=url, retryable=False)

    waiter = asyncio.ensure_future(abort_signal.wait())
    try:
        done, _ = await asyncio.wait(
            {task, waiter}, return_when=asyncio.FIRST_COMPLETED
        )
    except asyncio.CancelledError:
        task.cancel()
        waiter.cancel()
        raise
    waiter.cancel()
    if task in done:
        return task.result()
    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
    raise RequestAbortedError("Request aborted", url=url, retryable=False)
