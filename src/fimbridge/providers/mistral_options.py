"""Provider-specific options for FIM models."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    ValidationError,
)

from fimbridge.errors import InvalidArgumentError

#: Known model ids; any other string is passed through as-is.
MistralFimModelId = Literal["codestral-2405", "codestral-latest"] | str


class MistralFimProviderOptions(BaseModel):
    """Options read from ``provider_options[<provider name>]``.

    Keys other than these three are ignored.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    stop: StrictStr | list[StrictStr] | None = None
    suffix: StrictStr | None = None
    #: Accepted as ``min_tokens`` or ``min_token``.
    min_tokens: StrictInt | None = Field(
        default=None,
        validation_alias=AliasChoices("min_tokens", "min_token"),
    )


def parse_provider_options(
    provider: str, provider_options: dict[str, dict[str, Any]] | None
) -> MistralFimProviderOptions:
    """Validate the option bag stored under *provider*.

    Raises:
        InvalidArgumentError: The bag exists but has malformed values.
    """
    raw = (provider_options or {}).get(provider)
    if raw is None:
        return MistralFimProviderOptions()
    if not isinstance(raw, dict):
        raise InvalidArgumentError(
            f"provider_options[{provider!r}] must be a dict",
            argument="provider_options",
            hint="Pass provider_options={'mistral.fim': {'suffix': '...'}}.",
        )
    try:
        return MistralFimProviderOptions.model_validate(raw)
    except ValidationError as e:
        err = e.errors()[0]
        location = ".".join(str(part) for part in err.get("loc", ()))
        raise InvalidArgumentError(
            f"Invalid provider options for {provider}: {location}: {err.get('msg')}",
            argument="provider_options",
            hint="Supported keys: stop (str | list[str]), suffix (str), min_tokens (int).",
        ) from e
