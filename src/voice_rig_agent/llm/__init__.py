"""LLM abstraction layer."""

from .base import BaseLLMClient
from .credentials import CredentialStore, JsonCredentialStore, ProviderSelector
from .gemini import GeminiClient
from .openai_compat import OpenAICompatibleClient
from .providers import PROVIDER_PROFILES, create_client, get_profile
from .types import GeneratedText, GenerationConfig, Message, ProviderProfile, ResponseShape

__all__ = [
    "BaseLLMClient",
    "OpenAICompatibleClient",
    "GeminiClient",
    "CredentialStore",
    "JsonCredentialStore",
    "ProviderSelector",
    "PROVIDER_PROFILES",
    "create_client",
    "get_profile",
    "GeneratedText",
    "GenerationConfig",
    "Message",
    "ProviderProfile",
    "ResponseShape",
]
