"""Provider factory: named model instances sharing one set of settings."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Any, NoReturn

from fimbridge.config import ProviderSettings
from fimbridge.errors import NoSuchModelError
from fimbridge.providers.mistral_fim import MistralFimLanguageModel

if TYPE_CHECKING:
    from fimbridge.providers.mistral_options import MistralFimModelId

PROVIDER_NAME = "mistral.fim"


class MistralFimProvider:
    """Creates FIM language models.

    Example:
        fim = create_mistral_fim(api_key="...")
        model = fim("codestral-latest")
    """

    def __init__(self, settings: ProviderSettings) -> None:
        self.settings = settings

    def __call__(self, model_id: MistralFimModelId) -> MistralFimLanguageModel:
        return self.language_model(model_id)

    def language_model(self, model_id: MistralFimModelId) -> MistralFimLanguageModel:
        """Create a model for text completion."""
        return MistralFimLanguageModel(model_id, self.settings, provider=PROVIDER_NAME)

    chat = language_model

    def text_embedding_model(self, model_id: str) -> NoReturn:
        raise NoSuchModelError(model_id=model_id, model_type="text_embedding_model")

    def image_model(self, model_id: str) -> NoReturn:
        raise NoSuchModelError(model_id=model_id, model_type="image_model")

    def __repr__(self) -> str:
        return f"MistralFimProvider({self.settings})"


def create_mistral_fim(
    settings: ProviderSettings | None = None, **overrides: Any
) -> MistralFimProvider:
    """Create a provider from *settings*, with keyword *overrides* applied.

    Accepts any ``ProviderSettings`` field as an override, e.g.
    ``create_mistral_fim(base_url="http://localhost:8080/v1")``.
    """
    base = settings or ProviderSettings()
    return MistralFimProvider(replace(base, **overrides) if overrides else base)


#: Default provider; reads ``MISTRAL_API_KEY`` when a request is made.
mistral_fim = create_mistral_fim()
