"""Exception hierarchy for fimbridge."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping


class FimError(Exception):
    """Base exception for all fimbridge errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(FimError):
    """Provider settings or credentials are missing or invalid."""


class InvalidPromptError(FimError):
    """The call description does not yield a usable prompt."""


class InvalidArgumentError(FimError):
    """A call argument failed validation before the request was sent."""

    def __init__(
        self, message: str, *, argument: str, hint: str | None = None
    ) -> None:
        super().__init__(message, hint=hint)
        self.argument = argument


class NoSuchModelError(FimError):
    """The provider does not offer the requested model type."""

    def __init__(self, *, model_id: str, model_type: str) -> None:
        super().__init__(
            f"No such {model_type}: {model_id}",
            hint="This provider only serves language models.",
        )
        self.model_id = model_id
        self.model_type = model_type


class ResponseParseError(FimError):
    """A response body or stream chunk could not be decoded or validated."""

    def __init__(
        self, message: str, *, raw_value: Any = None, hint: str | None = None
    ) -> None:
        super().__init__(message, hint=hint)
        self.raw_value = raw_value


class UnsupportedContentError(FimError):
    """A content part carried a type tag the flattener does not know."""


class APIError(FimError):
    """HTTP call failed.

    ``retryable`` is informational: fimbridge never retries on its own, but
    callers that do can branch on it without substring matching.
    """

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        retryable: bool | None = None,
        status_code: int | None = None,
        retry_after_s: float | None = None,
        url: str | None = None,
        response_headers: Mapping[str, str] | None = None,
        response_body: str | None = None,
        provider: str | None = None,
        phase: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.retryable = retryable
        self.status_code = status_code
        self.retry_after_s = retry_after_s
        self.url = url
        self.response_headers = dict(response_headers) if response_headers else None
        self.response_body = response_body
        self.provider = provider
        self.phase = phase


class RateLimitError(APIError):
    """Rate limit exceeded (HTTP 429)."""


class RequestAbortedError(APIError):
    """The abort signal fired before the request completed."""


def _walk_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield *exc*, then everything reachable via ``__cause__``/``__context__``.

    Each exception is visited once, so self-referencing chains terminate.
    """
    pending: list[BaseException] = [exc]
    visited: set[int] = set()
    while pending:
        current = pending.pop()
        if id(current) in visited:
            continue
        visited.add(id(current))
        yield current
        pending.extend(
            link
            for link in (current.__context__, current.__cause__)
            if link is not None
        )
