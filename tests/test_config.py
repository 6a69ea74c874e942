"""Configuration boundary tests: credentials, settings validation, headers."""

from __future__ import annotations

import pytest

from fimbridge._http import combine_headers
from fimbridge.config import DEFAULT_BASE_URL, ProviderSettings, load_api_key
from fimbridge.errors import ConfigurationError
from fimbridge.ids import generate_id

pytestmark = pytest.mark.unit


def test_load_api_key_prefers_explicit_value(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MISTRAL_API_KEY", "env-key")
    assert load_api_key("explicit-key") == "explicit-key"


def test_load_api_key_falls_back_to_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MISTRAL_API_KEY", "env-key")
    assert load_api_key(None) == "env-key"


def test_missing_api_key_raises_clear_error() -> None:
    """No key anywhere must fail with a hint naming the variable."""
    with pytest.raises(ConfigurationError, match="API key is missing") as exc:
        load_api_key(None)
    assert exc.value.hint is not None
    assert "MISTRAL_API_KEY" in exc.value.hint


def test_empty_env_key_counts_as_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MISTRAL_API_KEY", "")
    with pytest.raises(ConfigurationError):
        load_api_key(None)


def test_non_string_api_key_is_rejected() -> None:
    with pytest.raises(ConfigurationError, match="must be a string"):
        load_api_key(123)  # type: ignore[arg-type]


def test_settings_defaults() -> None:
    settings = ProviderSettings()
    assert settings.base_url == DEFAULT_BASE_URL
    assert settings.api_key is None
    assert settings.headers == {}
    assert settings.timeout_s == 60.0


def test_settings_construct_without_credentials() -> None:
    """Keys resolve lazily, so building settings never needs one."""
    settings = ProviderSettings()
    with pytest.raises(ConfigurationError):
        settings.auth_headers()


def test_base_url_trailing_slash_is_stripped() -> None:
    settings = ProviderSettings(base_url="http://localhost:8080/v1/")
    assert settings.base_url == "http://localhost:8080/v1"


@pytest.mark.parametrize("base_url", ["", "/", "//"])
def test_empty_base_url_is_rejected(base_url: str) -> None:
    with pytest.raises(ConfigurationError, match="base_url"):
        ProviderSettings(base_url=base_url)


@pytest.mark.parametrize("timeout_s", [0, -1.5])
def test_non_positive_timeout_is_rejected(timeout_s: float) -> None:
    with pytest.raises(ConfigurationError, match="timeout_s must be > 0"):
        ProviderSettings(timeout_s=timeout_s)


@pytest.mark.parametrize("timeout_s", [True, "30", None])
def test_non_numeric_timeout_is_rejected(timeout_s: object) -> None:
    with pytest.raises(ConfigurationError, match="timeout_s must be a number"):
        ProviderSettings(timeout_s=timeout_s)  # type: ignore[arg-type]


def test_auth_headers_use_bearer_token_from_env(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("MISTRAL_API_KEY", "env-key")
    settings = ProviderSettings(headers={"X-Team": "search"})

    assert settings.auth_headers() == {
        "Authorization": "Bearer env-key",
        "X-Team": "search",
    }


def test_str_redacts_api_key() -> None:
    settings = ProviderSettings(api_key="super-secret")
    assert "super-secret" not in str(settings)
    assert "super-secret" not in repr(settings)
    assert "[REDACTED]" in str(settings)


def test_combine_headers_later_layers_win_case_insensitively() -> None:
    merged = combine_headers(
        {"Authorization": "Bearer a", "X-Keep": "1"},
        None,
        {"authorization": "Bearer b"},
    )
    assert merged == {"authorization": "Bearer b", "X-Keep": "1"}


def test_combine_headers_none_value_removes_header() -> None:
    merged = combine_headers({"X-Drop": "1", "X-Keep": "2"}, {"x-drop": None})
    assert merged == {"X-Keep": "2"}


def test_generate_id_shape() -> None:
    plain = generate_id()
    prefixed = generate_id("req", size=8)

    assert len(plain) == 16
    assert plain.isalnum()
    assert prefixed.startswith("req-")
    assert len(prefixed) == len("req-") + 8
    assert generate_id() != generate_id()


def test_generate_id_rejects_non_positive_size() -> None:
    with pytest.raises(ValueError, match="size"):
        generate_id(size=0)
