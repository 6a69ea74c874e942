"""Pytest configuration and fixtures.

Provides environment isolation, logging configuration, and shared HTTP test
doubles. Fixtures here are autouse unless noted.
"""

from __future__ import annotations

from contextlib import suppress
import json
import logging
import os
from typing import Any

import httpx
import pytest

from fimbridge.config import ProviderSettings
from fimbridge.options import CallOptions, Message, TextPart

FIM_URL = "https://api.mistral.ai/v1/fim/completions"
TEST_MODEL = "codestral-latest"
TEST_API_KEY = "test-api-key"
TEST_PROMPT = (Message("user", (TextPart("Hello"),)),)


# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_provider_env(request, monkeypatch):
    """Clear MISTRAL_* env vars so tests never pick up real credentials.

    Opt-out: @pytest.mark.allow_env_pollution
    """
    if request.node.get_closest_marker("allow_env_pollution"):
        return
    for key in list(os.environ.keys()):
        if key.startswith("MISTRAL_"):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Suppress noisy third-party loggers."""
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# =============================================================================
# HTTP Test Doubles
# =============================================================================


class RecordingHandler:
    """httpx.MockTransport handler that records requests and replays a response."""

    def __init__(self, response: httpx.Response | None = None) -> None:
        self.response = response or httpx.Response(200, json={})
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.response

    @property
    def last_body(self) -> dict[str, Any]:
        return json.loads(self.requests[-1].content.decode("utf-8"))

    @property
    def last_headers(self) -> dict[str, str]:
        return dict(self.requests[-1].headers)


def completion_body(
    *,
    content: Any = "",
    finish_reason: str | None = "stop",
    usage: dict[str, int] | None = None,
    id: str = "16362f24e60340d0994dd205c267a43a",
    created: int = 1711113008,
    model: str = TEST_MODEL,
) -> dict[str, Any]:
    """Build a synchronous FIM completion response body."""
    return {
        "object": "chat.completion",
        "id": id,
        "created": created,
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content, "tool_calls": None},
                "finish_reason": finish_reason,
                "logprobs": None,
            }
        ],
        "usage": usage
        or {"prompt_tokens": 4, "total_tokens": 34, "completion_tokens": 30},
    }


def chunk_payload(
    content: Any,
    *,
    finish_reason: str | None = None,
    usage: dict[str, int] | None = None,
    id: str = "53ff663126294946a6b7a4747b70597e",
    created: int = 1750537996,
    model: str = "mistral-small-latest",
) -> dict[str, Any]:
    """Build one streamed chunk payload."""
    delta: dict[str, Any] = {} if content is None else {"content": content}
    payload: dict[str, Any] = {
        "id": id,
        "object": "chat.completion.chunk",
        "created": created,
        "model": model,
        "choices": [
            {
                "index": 0,
                "delta": delta,
                "finish_reason": finish_reason,
                "logprobs": None,
            }
        ],
    }
    if usage is not None:
        payload["usage"] = usage
    return payload


def sse_body(*payloads: dict[str, Any] | str, done: bool = True) -> str:
    """Encode payloads as server-sent events; strings are sent verbatim."""
    events = [
        f"data: {p if isinstance(p, str) else json.dumps(p)}\n\n" for p in payloads
    ]
    if done:
        events.append("data: [DONE]\n\n")
    return "".join(events)


def sse_response(body: str, headers: dict[str, str] | None = None) -> httpx.Response:
    return httpx.Response(
        200,
        text=body,
        headers={"content-type": "text/event-stream", **(headers or {})},
    )


@pytest.fixture
def settings_for():
    """Return a factory building ProviderSettings around a mock handler."""

    def _build(handler: Any, **overrides: Any) -> ProviderSettings:
        overrides.setdefault("api_key", TEST_API_KEY)
        return ProviderSettings(transport=httpx.MockTransport(handler), **overrides)

    return _build


@pytest.fixture
def call_options():
    """Return a factory for CallOptions with the standard test prompt."""

    def _build(**overrides: Any) -> CallOptions:
        overrides.setdefault("prompt", TEST_PROMPT)
        return CallOptions(**overrides)

    return _build
