"""Provider implementations."""

from .base import LanguageModel
from .mistral_fim import MistralFimLanguageModel
from .mistral_options import MistralFimModelId, MistralFimProviderOptions

__all__ = [
    "LanguageModel",
    "MistralFimLanguageModel",
    "MistralFimModelId",
    "MistralFimProviderOptions",
]
